"""Launch and dispose of the persistent Chromium profile used for notebook sync.

The profile keeps the signed-in Google session between runs, so the manual
login is only needed the first time (or after the session expires).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from playwright.sync_api import BrowserContext, Page, Playwright, sync_playwright

DEFAULT_VIEWPORT = {"width": 1280, "height": 800}
LAUNCH_ARGS = ["--no-first-run", "--disable-search-engine-choice-screen"]


def launch_persistent(
    profile_dir: Path,
    *,
    headless: bool = False,
    channel: Optional[str] = "chrome",
) -> Tuple[Playwright, BrowserContext, Page]:
    """Start Playwright and open a persistent context backed by ``profile_dir``.

    Parameters
    ----------
    profile_dir:
        Directory holding cookies and local storage. Created when missing.
    headless:
        Headless runs only work once the profile already holds a session.
    channel:
        Browser channel such as ``"chrome"``; ``None`` uses bundled Chromium.
    """

    profile_path = Path(profile_dir)
    profile_path.mkdir(parents=True, exist_ok=True)

    launch_kwargs = {
        "headless": headless,
        "viewport": DEFAULT_VIEWPORT,
        "args": LAUNCH_ARGS,
    }
    if channel:
        launch_kwargs["channel"] = channel

    playwright = sync_playwright().start()
    try:
        context = playwright.chromium.launch_persistent_context(str(profile_path), **launch_kwargs)
    except Exception:
        playwright.stop()
        raise

    page = context.pages[0] if context.pages else context.new_page()
    return playwright, context, page


def shutdown(playwright: Optional[Playwright], context: Optional[BrowserContext]) -> None:
    """Close ``context`` and stop ``playwright``, tolerating either being ``None``."""

    try:
        if context:
            context.close()
    finally:
        if playwright:
            playwright.stop()
