# inserter.py
"""Add missing URLs to a notebook through its "Add source" dialog in one batch."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from document import Control, Document
from errors import ActionFailure, WorkflowFailure
from settings import SyncSettings

MEDIUM_WAIT_MS = 1000
OPEN_ATTEMPTS = 3
ADD_BUTTON_TIMEOUT_MS = 10000
MENU_OPEN_TIMEOUT_MS = 1000
FORCED_OPEN_WAIT_MS = 2000
DIALOG_TIMEOUT_MS = 3000
DIALOG_FALLBACK_TIMEOUT_MS = 10000
INSERT_BUTTON_TIMEOUT_MS = 10000


@dataclass
class InsertResult:
    success: bool
    added_count: int = 0
    error: Optional[str] = None
    screenshot: Optional[str] = None


def _activate_sources_view(document: Document) -> None:
    # The sources view may already be active; a missing tab is fine.
    try:
        if document.is_present(Control.SOURCES_TAB):
            document.click(Control.SOURCES_TAB, force=True)
            document.wait(MEDIUM_WAIT_MS)
    except ActionFailure as exc:
        print(f"    • Sources tab not activated: {exc}")


def _open_source_type_menu(document: Document) -> None:
    if not document.wait_visible(Control.ADD_SOURCE_BUTTON, ADD_BUTTON_TIMEOUT_MS):
        raise WorkflowFailure("'Add source' button did not appear")

    for attempt in range(1, OPEN_ATTEMPTS + 1):
        document.click(Control.ADD_SOURCE_BUTTON)
        if document.wait_visible(Control.WEBSITE_OPTION, MENU_OPEN_TIMEOUT_MS):
            return
        print(f"    ...source type menu not open (attempt {attempt}/{OPEN_ATTEMPTS}), clicking again")

    document.click(Control.ADD_SOURCE_BUTTON, force=True)
    document.wait(FORCED_OPEN_WAIT_MS)


def _open_source_dialog(document: Document) -> None:
    for attempt in range(1, OPEN_ATTEMPTS + 1):
        document.click(Control.WEBSITE_OPTION)
        if document.wait_visible(Control.SOURCE_DIALOG, DIALOG_TIMEOUT_MS):
            return
        print(f"    ...dialog not open (attempt {attempt}/{OPEN_ATTEMPTS}), clicking again")
        if document.is_visible(Control.WEBSITE_OPTION):
            document.click(Control.WEBSITE_OPTION, force=True)

    if not document.wait_visible(Control.SOURCE_DIALOG, DIALOG_FALLBACK_TIMEOUT_MS):
        raise WorkflowFailure("website source dialog did not open")


def _submit_urls(document: Document, urls: Sequence[str]) -> None:
    document.fill_text(Control.URL_INPUT, "\n".join(urls))
    print(f"    Entered {len(urls)} URL(s)")
    document.wait(MEDIUM_WAIT_MS)

    if not document.wait_visible(Control.INSERT_BUTTON, INSERT_BUTTON_TIMEOUT_MS):
        raise WorkflowFailure("'Insert' button did not appear")
    # A disabled state here is stale UI after a programmatic fill.
    document.click(Control.INSERT_BUTTON, force=document.is_disabled(Control.INSERT_BUTTON))


def ingestion_wait_ms(url_count: int, settings: SyncSettings) -> int:
    """Settle time after submitting ``url_count`` URLs (heuristic, capped)."""
    return settings.per_url_wait_ms * min(url_count, settings.max_batch_multiplier)


def _wait_for_ingestion(document: Document, url_count: int, settings: SyncSettings) -> None:
    # Ingestion has no completion signal; the dialog closing is the only hint.
    total_ms = ingestion_wait_ms(url_count, settings)
    started = time.monotonic()
    print("    Waiting for ingestion...")
    if not document.wait_hidden(Control.SOURCE_DIALOG, total_ms):
        print("    ⚠️ Source dialog still open after submission")
    elapsed_ms = int((time.monotonic() - started) * 1000)
    document.wait(max(0, total_ms - elapsed_ms))


def add_missing(
    document: Document,
    urls: List[str],
    settings: Optional[SyncSettings] = None,
) -> InsertResult:
    """
    Submit every URL in ``urls`` through a single "Website" source dialog.

    Returns a failed ``InsertResult`` instead of raising; an empty list is a
    successful no-op that never touches the document.
    """
    if not urls:
        return InsertResult(success=True, added_count=0)

    settings = settings or SyncSettings()
    print(f"  📥 Adding {len(urls)} URL(s) in one batch...")
    try:
        _activate_sources_view(document)
        _open_source_type_menu(document)
        _open_source_dialog(document)
        _submit_urls(document, urls)
        _wait_for_ingestion(document, len(urls), settings)
    except Exception as exc:
        print(f"  ❌ Adding sources failed: {exc}")
        screenshot = document.capture("add_sources_failure")
        document.press_escape()
        return InsertResult(success=False, error=str(exc), screenshot=screenshot)

    print(f"  ✅ Batch added ({len(urls)} URL(s))")
    return InsertResult(success=True, added_count=len(urls))
