# title_lookup.py
"""Prefetch page titles for desired URLs before any notebook is touched."""

from __future__ import annotations

from typing import Dict, Iterable

from playwright.sync_api import Error as PlaywrightError

from document import Document, PlaywrightNotebookDocument
from errors import ActionFailure, LookupFailure
from titles import shorten


def lookup_title(document: Document, url: str, timeout_ms: int = 30000) -> str:
    """Load ``url`` in ``document`` and return its trimmed ``<title>``."""
    try:
        document.navigate(url, timeout_ms)
        return (document.get_title() or "").strip()
    except ActionFailure as exc:
        raise LookupFailure(str(exc)) from exc


def fetch_page_titles(context, urls: Iterable[str], timeout_ms: int = 30000) -> Dict[str, str]:
    """
    Map every URL to its page title using one scratch page of ``context``.

    A failed lookup maps the URL to ``""``; such items can never be matched
    against a source row and will always be reported missing.
    """
    url_list = list(urls)
    titles: Dict[str, str] = {}
    if not url_list:
        return titles

    print("\n🔍 Fetching page titles...")
    page = context.new_page()
    scratch = PlaywrightNotebookDocument(page)
    try:
        for idx, url in enumerate(url_list, start=1):
            try:
                title = lookup_title(scratch, url, timeout_ms)
            except LookupFailure as exc:
                print(f"  ⚠️ Title lookup failed: {url} ({exc})")
                titles[url] = ""
                continue
            titles[url] = title
            print(f"  📄 [{idx}/{len(url_list)}] {shorten(title)}")
    finally:
        try:
            page.close()
        except PlaywrightError:
            pass
    return titles
