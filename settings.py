# settings.py
"""
Runtime settings for the notebook sync tool.

Values come from the process environment after ``load_dotenv()`` has merged a
local ``.env`` file, all under the ``NOTEBOOK_SYNC_`` prefix. Bad values are
reported and replaced by the default rather than aborting the run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from rows import DEFAULT_HEADER_LABELS

ENV_PREFIX = "NOTEBOOK_SYNC_"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class SyncSettings:
    config_path: Path = Path("config.env")
    profile_dir: Path = Path("playwright-session")
    headless: bool = False
    browser_channel: Optional[str] = "chrome"
    max_rounds: int = 50
    delete_settle_ms: int = 3000
    delete_retry_ms: int = 2000
    per_url_wait_ms: int = 8000
    max_batch_multiplier: int = 5
    title_timeout_ms: int = 30000
    navigation_timeout_ms: int = 60000
    notebook_settle_ms: int = 3000
    close_delay_ms: int = 30000
    header_labels: List[str] = field(default_factory=lambda: list(DEFAULT_HEADER_LABELS))
    skip_login_prompt: bool = False
    capture_dir: Path = Path("sync_failures")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> "SyncSettings":
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ
        defaults = cls()

        channel = environ.get(f"{ENV_PREFIX}BROWSER_CHANNEL")
        if channel is None:
            browser_channel = defaults.browser_channel
        else:
            browser_channel = channel.strip() or None

        return cls(
            config_path=Path(_env_str(environ, "CONFIG", str(defaults.config_path))).expanduser(),
            profile_dir=Path(_env_str(environ, "PROFILE_DIR", str(defaults.profile_dir))).expanduser(),
            headless=_env_bool(environ, "HEADLESS", defaults.headless),
            browser_channel=browser_channel,
            max_rounds=_env_int(environ, "MAX_ROUNDS", defaults.max_rounds, minimum=1),
            delete_settle_ms=_env_int(environ, "DELETE_SETTLE_MS", defaults.delete_settle_ms),
            delete_retry_ms=_env_int(environ, "DELETE_RETRY_MS", defaults.delete_retry_ms),
            per_url_wait_ms=_env_int(environ, "PER_URL_WAIT_MS", defaults.per_url_wait_ms),
            max_batch_multiplier=_env_int(environ, "MAX_BATCH_MULTIPLIER", defaults.max_batch_multiplier, minimum=1),
            title_timeout_ms=_env_int(environ, "TITLE_TIMEOUT_MS", defaults.title_timeout_ms),
            navigation_timeout_ms=_env_int(environ, "NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms),
            notebook_settle_ms=_env_int(environ, "NOTEBOOK_SETTLE_MS", defaults.notebook_settle_ms),
            close_delay_ms=_env_int(environ, "CLOSE_DELAY_MS", defaults.close_delay_ms),
            header_labels=_env_list(environ, "HEADER_LABELS", defaults.header_labels),
            skip_login_prompt=_env_bool(environ, "SKIP_LOGIN_PROMPT", defaults.skip_login_prompt),
            capture_dir=Path(_env_str(environ, "CAPTURE_DIR", str(defaults.capture_dir))).expanduser(),
        )


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    value = (environ.get(ENV_PREFIX + name) or "").strip()
    return value or default


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    print(f"  • Unrecognized {ENV_PREFIX}{name} value '{raw}', using {default}.")
    return default


def _env_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        print(f"  • {ENV_PREFIX}{name}='{raw}' is not an integer, using {default}.")
        return default
    if value < minimum:
        print(f"  • {ENV_PREFIX}{name}={value} is below {minimum}, using {default}.")
        return default
    return value


def _env_list(environ: Mapping[str, str], name: str, default: List[str]) -> List[str]:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None:
        return list(default)
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item] or list(default)
