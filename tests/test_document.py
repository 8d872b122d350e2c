import re

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from document import Control, PlaywrightNotebookDocument
from errors import ActionFailure


class FakeLocator:
    """Chainable locator; every refinement returns the same object."""

    def __init__(
        self,
        count=1,
        *,
        count_error=None,
        wait_error=None,
        click_error=None,
        fill_error=None,
        text="",
        visible=True,
    ):
        self._count = count
        self.count_error = count_error
        self.wait_error = wait_error
        self.click_error = click_error
        self.fill_error = fill_error
        self.text = text
        self.visible = visible
        self.selectors = []
        self.filters = []
        self.waits = []
        self.clicks = []
        self.fills = []

    def locator(self, selector):
        self.selectors.append(selector)
        return self

    def filter(self, **kwargs):
        self.filters.append(kwargs)
        return self

    @property
    def first(self):
        return self

    @property
    def last(self):
        return self

    def nth(self, index):
        return (self, index)

    def count(self):
        if self.count_error:
            raise self.count_error
        return self._count

    def wait_for(self, state, timeout):
        self.waits.append((state, timeout))
        if self.wait_error:
            raise self.wait_error

    def click(self, force=False):
        if self.click_error:
            raise self.click_error
        self.clicks.append(force)

    def fill(self, value):
        if self.fill_error:
            raise self.fill_error
        self.fills.append(value)

    def is_visible(self):
        return self.visible

    def inner_text(self, timeout=None):
        if self.count_error:
            raise self.count_error
        return self.text


class FakeKeyboard:
    def __init__(self, error=None):
        self.error = error
        self.pressed = []

    def press(self, key):
        if self.error:
            raise self.error
        self.pressed.append(key)


class FakePage:
    def __init__(self, root=None, *, keyboard_error=None, screenshot_error=None, goto_error=None):
        self.root = root or FakeLocator()
        self.keyboard = FakeKeyboard(keyboard_error)
        self.screenshot_error = screenshot_error
        self.goto_error = goto_error
        self.selectors = []
        self.screenshots = []
        self.timeouts = []

    def locator(self, selector):
        self.selectors.append(selector)
        return self.root

    def wait_for_timeout(self, ms):
        self.timeouts.append(ms)

    def goto(self, url, wait_until=None, timeout=None):
        if self.goto_error:
            raise self.goto_error

    def screenshot(self, path, full_page=False):
        if self.screenshot_error:
            raise self.screenshot_error
        self.screenshots.append((path, full_page))


DELETE = re.compile(r"Delete")


def test_rows_exclude_each_header_label():
    root = FakeLocator(count=3)
    document = PlaywrightNotebookDocument(FakePage(root), header_labels=["All sources", "すべてのソース"])

    rows = document.list_rows()

    assert rows == [(root, 0), (root, 1), (root, 2)]
    assert root.filters == [{"has_not_text": "All sources"}, {"has_not_text": "すべてのソース"}]


def test_row_listing_error_gives_no_rows():
    root = FakeLocator(count_error=PlaywrightError("Execution context was destroyed"))
    document = PlaywrightNotebookDocument(FakePage(root))

    assert document.list_rows() == []


def test_row_text_error_gives_empty_string():
    handle = FakeLocator(count_error=PlaywrightError("detached"))
    document = PlaywrightNotebookDocument(FakePage())

    assert document.row_text(handle) == ""
    assert document.has_menu(handle) is False


def test_row_without_menu_button_is_not_clicked():
    handle = FakeLocator(count=0)
    document = PlaywrightNotebookDocument(FakePage())

    assert document.click_menu(handle) is False
    assert handle.clicks == []


def test_row_menu_click_error_raises_action_failure():
    handle = FakeLocator(click_error=PlaywrightError("element is not attached"))
    document = PlaywrightNotebookDocument(FakePage())

    with pytest.raises(ActionFailure, match="row menu click failed"):
        document.click_menu(handle)


def test_menu_item_that_never_shows_returns_false():
    root = FakeLocator(wait_error=PlaywrightTimeoutError("Timeout 3000ms exceeded."))
    document = PlaywrightNotebookDocument(FakePage(root))

    assert document.click_menu_item(DELETE) is False
    assert root.waits == [("visible", 3000)]
    assert root.clicks == []


def test_confirm_click_error_raises_action_failure():
    root = FakeLocator(click_error=PlaywrightError("element is not attached"))
    document = PlaywrightNotebookDocument(FakePage(root))

    with pytest.raises(ActionFailure, match="not attached"):
        document.click_confirm(DELETE)


def test_confirm_clicks_visible_button():
    root = FakeLocator()
    page = FakePage(root)
    document = PlaywrightNotebookDocument(page)

    assert document.click_confirm(DELETE) is True
    assert page.selectors == ["mat-dialog-container button"]
    assert root.filters == [{"has_text": DELETE}]
    assert root.clicks == [False]


def test_waits_report_timeouts_as_false():
    root = FakeLocator(wait_error=PlaywrightTimeoutError("Timeout 500ms exceeded."))
    document = PlaywrightNotebookDocument(FakePage(root))

    assert document.wait_visible(Control.SOURCE_DIALOG, 500) is False
    assert document.wait_hidden(Control.SOURCE_DIALOG, 500) is False
    assert root.waits == [("visible", 500), ("hidden", 500)]


def test_waits_succeed_when_state_is_reached():
    document = PlaywrightNotebookDocument(FakePage())

    assert document.wait_visible(Control.ADD_SOURCE_BUTTON, 100) is True
    assert document.wait_hidden(Control.SOURCE_DIALOG, 100) is True


def test_presence_check_error_is_false():
    root = FakeLocator(count_error=PlaywrightError("Target closed"))
    document = PlaywrightNotebookDocument(FakePage(root))

    assert document.is_present(Control.SOURCES_TAB) is False


def test_click_and_fill_errors_become_action_failures():
    root = FakeLocator(
        click_error=PlaywrightError("intercepted"),
        fill_error=PlaywrightError("not editable"),
    )
    document = PlaywrightNotebookDocument(FakePage(root))

    with pytest.raises(ActionFailure, match="insert button"):
        document.click(Control.INSERT_BUTTON, force=True)
    with pytest.raises(ActionFailure, match="url input"):
        document.fill_text(Control.URL_INPUT, "https://a.example")


def test_navigation_error_becomes_action_failure():
    page = FakePage(goto_error=PlaywrightTimeoutError("Timeout 60000ms exceeded."))
    document = PlaywrightNotebookDocument(page)

    with pytest.raises(ActionFailure, match="https://nb.example"):
        document.navigate("https://nb.example", 60000)


def test_escape_ignores_closed_page():
    document = PlaywrightNotebookDocument(FakePage(keyboard_error=PlaywrightError("Target closed")))

    document.press_escape()


def test_zero_wait_skips_page_timeout():
    page = FakePage()
    document = PlaywrightNotebookDocument(page)

    document.wait(0)
    document.wait(250)

    assert page.timeouts == [250]


def test_capture_without_directory_is_skipped():
    page = FakePage()
    document = PlaywrightNotebookDocument(page)

    assert document.capture("add sources failure") is None
    assert page.screenshots == []


def test_capture_writes_numbered_full_page_screenshot(tmp_path):
    page = FakePage()
    document = PlaywrightNotebookDocument(page, capture_dir=tmp_path / "shots")

    path = document.capture("Add Sources: failure!")

    assert path is not None
    assert path.startswith(str(tmp_path / "shots" / "01_add_sources_failure_"))
    assert page.screenshots == [(path, True)]


def test_capture_screenshot_error_gives_none(tmp_path):
    page = FakePage(screenshot_error=PlaywrightError("Target closed"))
    document = PlaywrightNotebookDocument(page, capture_dir=tmp_path)

    assert document.capture("failure") is None


def test_capture_unwritable_directory_gives_none(tmp_path):
    blocker = tmp_path / "shots"
    blocker.write_text("not a directory", encoding="utf-8")
    page = FakePage()
    document = PlaywrightNotebookDocument(page, capture_dir=blocker)

    assert document.capture("failure") is None
    assert page.screenshots == []
