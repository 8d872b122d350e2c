# document.py
"""
Document Interface used by the sync core, plus its Playwright implementation.

The core never touches Playwright directly. It talks to a ``Document`` that
lists source rows, reads their text and performs the handful of UI actions the
delete and insert workflows need. Row handles are lazy locators: any deletion
re-renders the list, so a handle must never be reused after a mutation.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PWTimeoutError

from errors import ActionFailure

ROW_SELECTOR = "div:has(mat-checkbox)"
ROW_MENU_SELECTOR = "button mat-icon"
DIALOG_SELECTOR = "mat-dialog-container"
MENU_ITEM_SELECTOR = 'button[role="menuitem"]'

HOVER_TIMEOUT_MS = 1000
MENU_ITEM_TIMEOUT_MS = 3000
ROW_TEXT_TIMEOUT_MS = 5000


class Control(Enum):
    """Named UI targets used by the insertion workflow."""

    SOURCES_TAB = "sources tab"
    ADD_SOURCE_BUTTON = "add source button"
    WEBSITE_OPTION = "website option"
    SOURCE_DIALOG = "source dialog"
    URL_INPUT = "url input"
    INSERT_BUTTON = "insert button"


class Document(Protocol):
    def list_rows(self) -> List[Any]: ...

    def has_menu(self, handle: Any) -> bool: ...

    def row_text(self, handle: Any) -> str: ...

    def hover(self, handle: Any) -> bool: ...

    def click_menu(self, handle: Any) -> bool: ...

    def click_menu_item(self, pattern: re.Pattern[str]) -> bool: ...

    def click_confirm(self, pattern: re.Pattern[str]) -> bool: ...

    def is_present(self, target: Control) -> bool: ...

    def is_visible(self, target: Control) -> bool: ...

    def wait_visible(self, target: Control, timeout_ms: int) -> bool: ...

    def wait_hidden(self, target: Control, timeout_ms: int) -> bool: ...

    def is_disabled(self, target: Control) -> bool: ...

    def click(self, target: Control, *, force: bool = False) -> None: ...

    def fill_text(self, target: Control, value: str) -> None: ...

    def press_escape(self) -> None: ...

    def wait(self, ms: int) -> None: ...

    def navigate(self, url: str, timeout_ms: int) -> None: ...

    def get_title(self) -> str: ...

    def bring_to_front(self) -> None: ...

    def capture(self, label: str) -> Optional[str]: ...


def _dialog(page: Page) -> Locator:
    return page.locator(DIALOG_SELECTOR).first


CONTROL_LOCATORS: Dict[Control, Callable[[Page], Locator]] = {
    Control.SOURCES_TAB: lambda page: page.locator('div[role="tab"], button[role="tab"]')
    .filter(has_text=re.compile(r"^(ソース|Sources)$"))
    .first,
    Control.ADD_SOURCE_BUTTON: lambda page: page.locator("button")
    .filter(has_text=re.compile(r"ソースを追加|Add source"))
    .first,
    Control.WEBSITE_OPTION: lambda page: page.locator('mat-chip, .mat-mdc-chip, [role="button"]')
    .filter(has_text=re.compile(r"ウェブサイト|Website"))
    .first,
    Control.SOURCE_DIALOG: _dialog,
    Control.URL_INPUT: lambda page: _dialog(page).locator('textarea, input[type="text"]').first,
    Control.INSERT_BUTTON: lambda page: _dialog(page)
    .locator("button")
    .filter(has_text=re.compile(r"挿入|Insert"))
    .first,
}


def _slugify_label(label: str, max_tokens: int = 5) -> str:
    tokens = re.findall(r"[a-z0-9]+", label.lower())
    return "_".join(tokens[:max_tokens]) or "capture"


class PlaywrightNotebookDocument:
    """Document implementation backed by a live notebook page."""

    def __init__(
        self,
        page: Page,
        *,
        header_labels: Sequence[str] = (),
        capture_dir: Optional[Path] = None,
    ) -> None:
        self.page = page
        self.header_labels = list(header_labels)
        self.capture_dir = capture_dir
        self._capture_counter = 0

    def _locate(self, target: Control) -> Locator:
        return CONTROL_LOCATORS[target](self.page)

    # -- rows -------------------------------------------------------------

    def list_rows(self) -> List[Locator]:
        rows = self.page.locator(ROW_SELECTOR)
        for label in self.header_labels:
            rows = rows.filter(has_not_text=label)
        try:
            count = rows.count()
        except PlaywrightError as exc:
            print(f"  • Row listing failed: {exc}")
            return []
        return [rows.nth(i) for i in range(count)]

    def has_menu(self, handle: Locator) -> bool:
        try:
            return handle.locator(ROW_MENU_SELECTOR).count() > 0
        except PlaywrightError:
            return False

    def row_text(self, handle: Locator) -> str:
        try:
            return handle.inner_text(timeout=ROW_TEXT_TIMEOUT_MS)
        except PlaywrightError:
            return ""

    def hover(self, handle: Locator) -> bool:
        try:
            handle.hover(force=True, timeout=HOVER_TIMEOUT_MS)
            return True
        except PlaywrightError:
            return False

    def click_menu(self, handle: Locator) -> bool:
        menu_button = handle.locator("button").filter(has=self.page.locator("mat-icon")).first
        try:
            if menu_button.count() == 0:
                return False
            menu_button.click(force=True)
            return True
        except PlaywrightError as exc:
            raise ActionFailure(f"row menu click failed: {exc}") from exc

    def click_menu_item(self, pattern: re.Pattern[str]) -> bool:
        item = self.page.locator(MENU_ITEM_SELECTOR).filter(has_text=pattern).first
        return self._click_when_visible(item, MENU_ITEM_TIMEOUT_MS)

    def click_confirm(self, pattern: re.Pattern[str]) -> bool:
        button = self.page.locator(f"{DIALOG_SELECTOR} button").filter(has_text=pattern).last
        return self._click_when_visible(button, MENU_ITEM_TIMEOUT_MS)

    def _click_when_visible(self, locator: Locator, timeout_ms: int) -> bool:
        try:
            locator.wait_for(state="visible", timeout=timeout_ms)
        except PWTimeoutError:
            return False
        try:
            locator.click()
        except PlaywrightError as exc:
            raise ActionFailure(str(exc)) from exc
        return True

    # -- named controls ---------------------------------------------------

    def is_present(self, target: Control) -> bool:
        try:
            return self._locate(target).count() > 0
        except PlaywrightError:
            return False

    def is_visible(self, target: Control) -> bool:
        try:
            return self._locate(target).is_visible()
        except PlaywrightError:
            return False

    def wait_visible(self, target: Control, timeout_ms: int) -> bool:
        try:
            self._locate(target).wait_for(state="visible", timeout=timeout_ms)
            return True
        except PWTimeoutError:
            return False

    def wait_hidden(self, target: Control, timeout_ms: int) -> bool:
        try:
            self._locate(target).wait_for(state="hidden", timeout=timeout_ms)
            return True
        except PWTimeoutError:
            return False

    def is_disabled(self, target: Control) -> bool:
        try:
            return self._locate(target).is_disabled()
        except PlaywrightError:
            return False

    def click(self, target: Control, *, force: bool = False) -> None:
        try:
            self._locate(target).click(force=force)
        except PlaywrightError as exc:
            raise ActionFailure(f"click on {target.value} failed: {exc}") from exc

    def fill_text(self, target: Control, value: str) -> None:
        try:
            self._locate(target).fill(value)
        except PlaywrightError as exc:
            raise ActionFailure(f"fill on {target.value} failed: {exc}") from exc

    # -- page -------------------------------------------------------------

    def press_escape(self) -> None:
        try:
            self.page.keyboard.press("Escape")
        except PlaywrightError:
            pass

    def wait(self, ms: int) -> None:
        if ms > 0:
            self.page.wait_for_timeout(ms)

    def navigate(self, url: str, timeout_ms: int) -> None:
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightError as exc:
            raise ActionFailure(f"navigation to {url} failed: {exc}") from exc

    def get_title(self) -> str:
        try:
            return self.page.title()
        except PlaywrightError as exc:
            raise ActionFailure(f"title read failed: {exc}") from exc

    def bring_to_front(self) -> None:
        try:
            self.page.bring_to_front()
        except PlaywrightError:
            pass

    def capture(self, label: str) -> Optional[str]:
        """Save a full-page screenshot for post-mortem inspection."""
        if self.capture_dir is None:
            return None
        try:
            self._capture_counter += 1
            slug = _slugify_label(label)
            timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S-%f")
            self.capture_dir.mkdir(parents=True, exist_ok=True)
            path = self.capture_dir / f"{self._capture_counter:02d}_{slug}_{timestamp}.png"
            self.page.screenshot(path=str(path), full_page=True)
            print(f"    📸 Screenshot saved: {path}")
            return str(path)
        except (PlaywrightError, OSError) as exc:
            print(f"  • Screenshot failed: {exc}")
            return None
