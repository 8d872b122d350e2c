# config_loader.py
"""
Parse the notebook list file.

    # comment
    NOTEBOOK_URL=https://notebooklm.google.com/notebook/abc
    SYNC_MODE=true
    https://example.com/article
    https://example.org/guide

Each ``NOTEBOOK_URL`` line opens a section; the following URL lines and the
optional ``SYNC_MODE`` flag belong to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

NOTEBOOK_KEY = "NOTEBOOK_URL="
SYNC_MODE_KEY = "SYNC_MODE="


@dataclass
class NotebookSpec:
    notebook_url: str
    sync_mode: bool = True
    urls: List[str] = field(default_factory=list)


@dataclass
class NotebookConfig:
    notebooks: List[NotebookSpec] = field(default_factory=list)
    all_urls: List[str] = field(default_factory=list)


def parse_notebook_config(text: str) -> NotebookConfig:
    config = NotebookConfig()
    seen_urls = set()
    current = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith(NOTEBOOK_KEY):
            value = stripped[len(NOTEBOOK_KEY):].strip()
            if value.startswith("http"):
                current = NotebookSpec(notebook_url=value)
                config.notebooks.append(current)
            continue

        if stripped.startswith(SYNC_MODE_KEY):
            value = stripped[len(SYNC_MODE_KEY):].strip()
            if current is not None and value:
                current.sync_mode = "true" in value.lower()
            continue

        if stripped.startswith("http"):
            if current is not None and stripped not in current.urls:
                current.urls.append(stripped)
            if stripped not in seen_urls:
                seen_urls.add(stripped)
                config.all_urls.append(stripped)

    return config


def load_notebook_config(path: Union[str, Path]) -> NotebookConfig:
    """Read and parse ``path``; an unreadable file yields an empty config."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"❌ Failed to read config file {path}: {exc}")
        return NotebookConfig()

    config = parse_notebook_config(text)
    print(f"📋 Loaded {len(config.notebooks)} notebook(s) from {path}")
    for idx, notebook in enumerate(config.notebooks, start=1):
        print(
            f"  📓 [{idx}] {notebook.notebook_url} "
            f"({len(notebook.urls)} URL(s), SYNC:{notebook.sync_mode})"
        )
    print(f"📋 Unique URLs overall: {len(config.all_urls)}")
    return config
