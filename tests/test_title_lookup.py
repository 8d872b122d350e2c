import pytest
from playwright.sync_api import Error as PlaywrightError

from document import PlaywrightNotebookDocument
from errors import LookupFailure
from title_lookup import fetch_page_titles, lookup_title


class FakePage:
    def __init__(self, titles, failing, unreadable=()):
        self.titles = titles
        self.failing = failing
        self.unreadable = set(unreadable)
        self.current = None
        self.closed = False
        self.visits = []

    def goto(self, url, wait_until=None, timeout=None):
        self.visits.append((url, wait_until, timeout))
        if url in self.failing:
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        self.current = url

    def title(self):
        if self.current in self.unreadable:
            raise PlaywrightError("Target page, context or browser has been closed")
        return self.titles[self.current]

    def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.pages_opened = 0

    def new_page(self):
        self.pages_opened += 1
        return self.page


def test_titles_are_trimmed_and_failures_degrade_to_empty():
    page = FakePage({"https://ok.example": "  Good Title  \n"}, failing={"https://bad.example"})
    context = FakeContext(page)

    titles = fetch_page_titles(context, ["https://ok.example", "https://bad.example"], timeout_ms=1000)

    assert titles == {"https://ok.example": "Good Title", "https://bad.example": ""}
    assert context.pages_opened == 1
    assert page.closed is True
    assert page.visits[0] == ("https://ok.example", "domcontentloaded", 1000)


def test_no_urls_opens_no_page():
    context = FakeContext(FakePage({}, failing=set()))

    assert fetch_page_titles(context, []) == {}
    assert context.pages_opened == 0


def test_unreadable_title_degrades_to_empty():
    page = FakePage(
        {"https://ok.example": "Fine", "https://gone.example": "never read"},
        failing=set(),
        unreadable={"https://gone.example"},
    )

    titles = fetch_page_titles(FakeContext(page), ["https://gone.example", "https://ok.example"])

    assert titles == {"https://gone.example": "", "https://ok.example": "Fine"}


def test_lookup_title_reads_through_the_document():
    page = FakePage({"https://ok.example": "\tDocs Home "}, failing={"https://bad.example"})
    document = PlaywrightNotebookDocument(page)

    assert lookup_title(document, "https://ok.example", timeout_ms=500) == "Docs Home"
    with pytest.raises(LookupFailure, match="ERR_NAME_NOT_RESOLVED"):
        lookup_title(document, "https://bad.example", timeout_ms=500)
