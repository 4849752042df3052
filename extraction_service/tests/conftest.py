"""Shared fixtures: an in-memory stand-in for the browser session and sample pages."""
import re
from contextlib import asynccontextmanager
from typing import Callable, Dict, Optional, Union

import pytest

from app.config import Settings
from app.models import FetchOutcome

_PAGE_NUMBER = re.compile(r"pageNumber=(\d+)")


def review_card(review_id: str, name: str = "Jane Doe", rating: Optional[str] = "5.0 out of 5 stars",
                title: str = "Great value", date: str = "Reviewed in the United States on May 1, 2024",
                body: str = "Does exactly what it says.") -> str:
    rating_html = (
        f'<i data-hook="review-star-rating" class="a-icon"><span class="a-icon-alt">{rating}</span></i>'
        if rating is not None else ""
    )
    return f"""
    <div id="{review_id}" data-hook="review" class="a-section review">
      <div class="a-profile-content"><span class="a-profile-name">{name}</span></div>
      {rating_html}
      <a data-hook="review-title" class="review-title"><span class="a-letter-space"></span><span>{title}</span></a>
      <span data-hook="review-date" class="review-date">{date}</span>
      <span data-hook="review-body" class="review-text"><span>{body}</span></span>
    </div>
    """


def listing_page(cards: list[str], product_title: str = "Acme Kettle") -> str:
    return f"""
    <html><head><title>Amazon.com: Customer reviews: {product_title}</title></head>
    <body>
      <div id="cm_cr-product_info"><a data-hook="product-link">{product_title}</a></div>
      <div id="cm_cr-review_list">{''.join(cards)}</div>
    </body></html>
    """


CAPTCHA_PAGE = """
<html><head><title>Robot Check</title></head>
<body><form method="get" action="/errors/validateCaptcha"><input name="field-keywords"></form></body></html>
"""


class FakeSession:
    """Serves canned FetchOutcomes. Listing pages are keyed by page number, anything else by URL."""

    def __init__(self, pages: Dict[Union[int, str], Union[FetchOutcome, Callable[[], FetchOutcome]]],
                 proxy_used: bool = False):
        self.pages = pages
        self.proxy_used = proxy_used
        self.fetched: list[str] = []
        self.as_text_calls: list[bool] = []

    @property
    def fetch_count(self) -> int:
        return len(self.fetched)

    async def fetch(self, url: str, as_text: bool = False) -> FetchOutcome:
        self.fetched.append(url)
        self.as_text_calls.append(as_text)
        match = _PAGE_NUMBER.search(url)
        key = int(match.group(1)) if match else url
        outcome = self.pages.get(key, FetchOutcome(http_status=200, raw_body="<html></html>"))
        if callable(outcome):
            return outcome()
        return outcome


class SessionFactory:
    """Callable like acquire_session(); remembers whether the session was released."""

    def __init__(self, session: FakeSession):
        self.session = session
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def __call__(self, settings):
        self.acquired += 1
        try:
            yield self.session
        finally:
            self.released += 1


def html_outcome(html: str, status: int = 200, blocked: bool = False) -> FetchOutcome:
    return FetchOutcome(http_status=status, raw_body=html, blocked=blocked)


@pytest.fixture
def settings() -> Settings:
    return Settings(page_delay_min=0, page_delay_max=0)


@pytest.fixture
def skip_settings() -> Settings:
    return Settings(page_delay_min=0, page_delay_max=0, block_policy="skip")
