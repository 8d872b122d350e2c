# rows.py
"""Turn the live source list into deduplicated, titled rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

from titles import normalize

UNKNOWN_TITLE = "(unknown title)"
DEFAULT_HEADER_LABELS = ("All sources", "すべてのソース")


@dataclass
class ObservedRow:
    index: int
    title: str
    raw_text: str
    handle: Any
    has_title: bool = True


def longest_line(text: str) -> str:
    """
    Pick the most content-dense line of a row's rendered text.

    Source rows render the title next to short metadata (type, byline, counts),
    so the longest non-empty line is taken as the title. Ties keep the first.
    """
    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return ""
    return max(lines, key=len)


def extract_rows(document, header_labels: Sequence[str] = DEFAULT_HEADER_LABELS) -> List[ObservedRow]:
    """
    Snapshot the current source rows of ``document``.

    Only rows carrying a per-row menu control count as sources; the
    "All sources" header row is dropped. Nested containers make one visual row
    appear several times, so later rows with an already seen title are skipped.
    Rows without any text keep a placeholder title and never match an item.
    """
    results: List[ObservedRow] = []
    seen_titles = set()

    for index, handle in enumerate(document.list_rows()):
        if not document.has_menu(handle):
            continue

        text = document.row_text(handle) or ""
        if any(label in text for label in header_labels):
            continue

        title = longest_line(text)
        key = normalize(title) or title
        if key in seen_titles:
            continue
        seen_titles.add(key)

        results.append(
            ObservedRow(
                index=index,
                title=title or UNKNOWN_TITLE,
                raw_text=text,
                handle=handle,
                has_title=bool(title),
            )
        )
    return results
