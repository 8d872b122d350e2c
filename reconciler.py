# reconciler.py
"""
Converge a notebook's source list onto a desired set of URLs.

Each round takes a fresh row snapshot, assigns rows to desired items and, in
sync mode, deletes exactly one unlisted row before scanning again. Deleting
re-renders the list and invalidates every other row handle, so a snapshot is
never used for more than one deletion. After the loop a final snapshot decides
which desired URLs are still missing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from document import Document
from errors import ActionFailure
from rows import ObservedRow, extract_rows
from settings import SyncSettings
from titles import describe_match, is_match, shorten

DELETE_MENU_PATTERN = re.compile(r"ソースを削除|Delete")
DELETE_CONFIRM_PATTERN = re.compile(r"削除|Delete")
ROW_POLL_MS = 250


@dataclass(frozen=True)
class DesiredItem:
    url: str
    title: str = ""


class ReconcileStatus(str, Enum):
    CONVERGED = "converged"
    ROUND_LIMIT_EXCEEDED = "round-limit-exceeded"
    SKIPPED = "skipped"


@dataclass
class ReconciliationRound:
    number: int
    rows: List[ObservedRow]
    matched_by_url: Dict[str, List[int]]
    unlisted_rows: List[ObservedRow]


@dataclass
class ReconcileResult:
    status: ReconcileStatus
    rounds: int = 0
    deletion_attempts: int = 0
    deleted_titles: List[str] = field(default_factory=list)
    missing_urls: List[str] = field(default_factory=list)

    @property
    def deletions(self) -> int:
        return len(self.deleted_titles)


def unique_items(items: Iterable[DesiredItem]) -> List[DesiredItem]:
    """Drop repeated URLs, keeping the first occurrence and its title."""
    seen = set()
    unique: List[DesiredItem] = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


def classify_rows(
    rows: List[ObservedRow],
    items: List[DesiredItem],
    number: int = 1,
) -> ReconciliationRound:
    """
    Assign every row to at most one desired item.

    Items are tried in order and the first match claims the row. Items without
    a title take no part, and rows without a title are always unlisted.
    """
    valid_items = [item for item in items if item.title]
    matched_by_url: Dict[str, List[int]] = {item.url: [] for item in valid_items}
    unlisted: List[ObservedRow] = []

    for row in rows:
        owner: Optional[DesiredItem] = None
        if row.has_title:
            for item in valid_items:
                if is_match(row.title, item.title):
                    owner = item
                    break
        if owner is None:
            unlisted.append(row)
        else:
            matched_by_url[owner.url].append(row.index)

    return ReconciliationRound(
        number=number,
        rows=rows,
        matched_by_url=matched_by_url,
        unlisted_rows=unlisted,
    )


def find_missing(rows: List[ObservedRow], items: List[DesiredItem]) -> List[str]:
    """URLs of items no row matches. Items with an empty title are always missing."""
    missing: List[str] = []
    for item in items:
        present = any(row.has_title and is_match(row.title, item.title) for row in rows)
        if not present:
            missing.append(item.url)
    return missing


def delete_row(document: Document, handle) -> bool:
    """Hover a row, open its menu, choose delete and confirm. Never raises."""
    try:
        document.hover(handle)
        document.wait(300)

        if not document.click_menu(handle):
            print("    ⚠️ Row menu button not found")
            return False
        document.wait(500)

        if not document.click_menu_item(DELETE_MENU_PATTERN):
            raise ActionFailure("delete menu item did not appear")
        document.wait(1000)

        if not document.click_confirm(DELETE_CONFIRM_PATTERN):
            raise ActionFailure("delete confirmation button did not appear")

        print("    ✅ Deleted")
        return True
    except Exception as exc:
        print(f"    ❌ Delete failed: {exc}")
        document.press_escape()
        return False


def _wait_for_row_drop(document, before: int, timeout_ms: int) -> bool:
    waited = 0
    while waited < timeout_ms:
        if len(document.list_rows()) < before:
            return True
        document.wait(ROW_POLL_MS)
        waited += ROW_POLL_MS
    return len(document.list_rows()) < before


def _log_first_round(snapshot: ReconciliationRound, items: List[DesiredItem]) -> None:
    print("📋 Detected sources:")
    for position, row in enumerate(snapshot.rows):
        print(f"   [{position}] {shorten(row.title)}")

    valid_items = [item for item in items if item.title]
    for row in snapshot.unlisted_rows:
        print(f'    ⚠️ Unmatched source [{row.index}]: "{shorten(row.title)}"')
        if not row.has_title:
            continue
        for item in valid_items:
            print(f"      {describe_match(row.title, item.title)}")


def reconcile_notebook(
    document: Document,
    desired_items: Iterable[DesiredItem],
    sync_enabled: bool,
    settings: Optional[SyncSettings] = None,
) -> ReconcileResult:
    """
    Bring the notebook's sources in line with ``desired_items``.

    With ``sync_enabled`` unlisted rows are removed one per round until none
    are left or ``settings.max_rounds`` is reached. The result always carries
    the URLs that are still missing afterwards.
    """
    settings = settings or SyncSettings()
    items = unique_items(desired_items)
    result = ReconcileResult(status=ReconcileStatus.SKIPPED)

    if sync_enabled:
        print("\n" + "=" * 50)
        print("🧹 Source sync (match and clean up)")
        print("=" * 50)

        result.status = ReconcileStatus.ROUND_LIMIT_EXCEEDED
        for number in range(1, settings.max_rounds + 1):
            result.rounds = number
            print(f"\n🔄 Scan round {number}...")

            rows = extract_rows(document, settings.header_labels)
            snapshot = classify_rows(rows, items, number)
            print(f"📋 Sources found: {len(rows)}")
            if number == 1:
                _log_first_round(snapshot, items)

            if not snapshot.unlisted_rows:
                print("  ✨ Nothing left to delete. Sync complete.")
                result.status = ReconcileStatus.CONVERGED
                break

            target = snapshot.unlisted_rows[0]
            print(f'  🗑️ Deleting "{shorten(target.title)}" (not in list)')
            result.deletion_attempts += 1
            before = len(document.list_rows())
            if delete_row(document, target.handle):
                result.deleted_titles.append(target.title)
                print("    ⌛️ Waiting for the list to update...")
                _wait_for_row_drop(document, before, settings.delete_settle_ms)
            else:
                print("    ⚠️ Delete failed, rescanning")
                document.wait(settings.delete_retry_ms)

        if result.status is ReconcileStatus.ROUND_LIMIT_EXCEEDED:
            print(f"  ⚠️ Stopped after {settings.max_rounds} rounds without converging")

    final_rows = extract_rows(document, settings.header_labels)
    result.missing_urls = find_missing(final_rows, items)
    return result
