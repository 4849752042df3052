"""
Payload extraction.

Thread pages are JSON documents rendered as text; they are parsed strictly
and returned untouched. Listing pages are HTML; each review card is read
field by field, and a field that cannot be found is an empty string rather
than a reason to drop the card.
"""
import json
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from .errors import PARSE_PREVIEW_CHARS, EmptyResponse, MalformedPayload, preview
from .models import ReviewRecord

REVIEW_CARD_SELECTOR = "[data-hook='review']"

# Tried in order per field
FIELD_SELECTORS = {
    "reviewer_name": [".a-profile-name"],
    "rating_text": [
        "[data-hook='review-star-rating'] .a-icon-alt",
        "[data-hook='cmps-review-star-rating'] .a-icon-alt",
        "[data-hook='review-star-rating']",
        "[data-hook='cmps-review-star-rating']",
    ],
    "date_text": ["[data-hook='review-date']"],
    "title_text": [
        "[data-hook='review-title'] > span:not(.a-letter-space)",
        "[data-hook='review-title']",
    ],
    "body_text": [
        "[data-hook='review-body'] span",
        "[data-hook='review-body']",
    ],
}

PRODUCT_TITLE_SELECTORS = [
    "[data-hook='product-link']",
    "#cm_cr-product_info .product-title",
]


def parse_thread_payload(raw_text: str, json_url: str) -> Any:
    if not (raw_text or "").strip():
        raise EmptyResponse("Reddit returned an empty body", json_url=json_url)
    try:
        return json.loads(raw_text)
    except ValueError as e:
        raise MalformedPayload(
            "Failed to parse Reddit JSON",
            json_url=json_url,
            parse_error=str(e),
            body_preview=preview(raw_text, PARSE_PREVIEW_CHARS),
        ) from e


def _text_of(node: Tag, selectors: list[str]) -> str:
    """First non-blank text among the selectors, or ""."""
    for selector in selectors:
        found = node.select_one(selector)
        if found is None:
            continue
        text = found.get_text(separator=" ", strip=True)
        if text:
            return text
    return ""


def _record_from_card(card: Tag, page_number: int) -> ReviewRecord:
    fields = {name: _text_of(card, selectors) for name, selectors in FIELD_SELECTORS.items()}
    return ReviewRecord(
        identifier=card.get("id") or "",
        source_page_number=page_number,
        **fields,
    )


def extract_review_records(html: str, page_number: int, max_cards: int = 10) -> list[ReviewRecord]:
    """Review records on one listing page, in page order. Empty list means no more pages."""
    soup = BeautifulSoup(html or "", "html.parser")
    cards = soup.select(REVIEW_CARD_SELECTOR)[:max_cards]
    return [_record_from_card(card, page_number) for card in cards]


def extract_product_title(html: str) -> str:
    soup = BeautifulSoup(html or "", "html.parser")
    return _text_of(soup, PRODUCT_TITLE_SELECTORS)
