# main.py
"""
Sync NotebookLM sources with a list of URLs.

Usage: python main.py [config.env]

For every notebook in the config file the tool removes sources that are not
in the list (when SYNC_MODE is on) and then adds the listed URLs that are
missing, all in one persistent browser session.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError

from bots._profile_launch import launch_persistent, shutdown
from config_loader import NotebookSpec, load_notebook_config
from document import PlaywrightNotebookDocument
from inserter import InsertResult, add_missing
from reconciler import DesiredItem, ReconcileResult, reconcile_notebook
from settings import SyncSettings
from title_lookup import fetch_page_titles


@dataclass
class NotebookReport:
    notebook_url: str
    reconcile: Optional[ReconcileResult] = None
    insert: Optional[InsertResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        if self.error:
            return False
        return self.insert is None or self.insert.success


def wait_for_manual_login(document) -> None:
    print("\n" + "=" * 60)
    print("🛑 Action required")
    print("1. Close any browser error or restore-session dialogs.")
    print("2. Sign in to your Google account and wait for the notebook to load.")
    print("3. Then press [Enter] in this terminal...")
    print("=" * 60)
    try:
        input()
    except EOFError:
        pass
    print("▶️ Resuming...")
    document.bring_to_front()


def desired_items_for(notebook: NotebookSpec, titles: Dict[str, str]) -> List[DesiredItem]:
    return [DesiredItem(url=url, title=titles.get(url, "")) for url in notebook.urls]


def process_notebook(
    document,
    notebook: NotebookSpec,
    titles: Dict[str, str],
    settings: SyncSettings,
    *,
    first: bool = False,
) -> NotebookReport:
    """Sync one notebook. Failures end up in the report, never raised."""
    report = NotebookReport(notebook_url=notebook.notebook_url)
    try:
        document.navigate(notebook.notebook_url, settings.navigation_timeout_ms)
        if first and not settings.skip_login_prompt:
            wait_for_manual_login(document)
        else:
            document.wait(settings.notebook_settle_ms)

        items = desired_items_for(notebook, titles)
        report.reconcile = reconcile_notebook(document, items, notebook.sync_mode, settings)

        missing = report.reconcile.missing_urls
        if missing:
            print(f"\n➕ Adding missing URLs ({len(missing)})")
            report.insert = add_missing(document, missing, settings)
        else:
            print("\n✨ Every URL is already a source.")
    except Exception as exc:
        print(f"❌ Notebook failed: {notebook.notebook_url} ({exc})")
        report.error = str(exc)
    return report


def _print_summary(reports: List[NotebookReport]) -> None:
    print("\n📊 Summary")
    for idx, report in enumerate(reports, start=1):
        icon = "✅" if report.ok else "⚠️"
        parts = []
        if report.reconcile is not None:
            parts.append(f"sync={report.reconcile.status.value}")
            parts.append(f"deleted={report.reconcile.deletions}")
            parts.append(f"missing={len(report.reconcile.missing_urls)}")
        if report.insert is not None:
            parts.append(f"added={report.insert.added_count}")
            if report.insert.error:
                parts.append(f"add_error={report.insert.error}")
        if report.error:
            parts.append(f"error={report.error}")
        print(f" {icon} [{idx}] {report.notebook_url} {' '.join(parts)}")


def hold_browser_open(document, delay_ms: int) -> None:
    """Leave the browser up for inspection; closing it early is fine."""
    if not delay_ms:
        return
    print(f"Closing the browser in {delay_ms // 1000}s...")
    try:
        document.wait(delay_ms)
    except PlaywrightError as exc:
        print(f"  • Browser closed before the delay ended: {exc}")


def run(settings: SyncSettings) -> List[NotebookReport]:
    config = load_notebook_config(settings.config_path)
    if not config.notebooks:
        print("❌ No notebooks configured")
        return []

    print("\n🌐 Launching browser...")
    playwright = None
    context = None
    reports: List[NotebookReport] = []
    try:
        playwright, context, page = launch_persistent(
            settings.profile_dir,
            headless=settings.headless,
            channel=settings.browser_channel,
        )
        titles = fetch_page_titles(context, config.all_urls, settings.title_timeout_ms)
        document = PlaywrightNotebookDocument(
            page,
            header_labels=settings.header_labels,
            capture_dir=settings.capture_dir,
        )

        for idx, notebook in enumerate(config.notebooks, start=1):
            print(f"\n🔄 [{idx}/{len(config.notebooks)}] Processing: {notebook.notebook_url}")
            print("=" * 64)
            reports.append(process_notebook(document, notebook, titles, settings, first=idx == 1))

        _print_summary(reports)
        print("\n🎉 All notebooks processed.")
        hold_browser_open(document, settings.close_delay_ms)
    finally:
        shutdown(playwright, context)
    return reports


def main() -> None:
    print("🚀 NotebookLM source sync")
    print("=" * 64)
    settings = SyncSettings.from_env()
    if len(sys.argv) > 1:
        settings.config_path = Path(sys.argv[1]).expanduser()
    try:
        reports = run(settings)
    except Exception as exc:
        print(f"\n❌ Run failed: {exc}")
        sys.exit(1)
    if any(not report.ok for report in reports):
        sys.exit(1)


if __name__ == "__main__":
    main()
