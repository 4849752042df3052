import pytest

from app.errors import EmptyResponse, ErrorKind, MalformedPayload
from app.extract import extract_product_title, extract_review_records, parse_thread_payload
from conftest import listing_page, review_card

JSON_URL = "https://old.reddit.com/r/test/comments/abc/title.json"


def test_thread_payload_is_returned_verbatim():
    raw = '[{"kind": "Listing", "data": {"children": []}}, {"kind": "Listing"}]'
    assert parse_thread_payload(raw, JSON_URL) == [
        {"kind": "Listing", "data": {"children": []}},
        {"kind": "Listing"},
    ]


@pytest.mark.parametrize("raw", ["", "   \n\t"])
def test_blank_thread_body_is_empty_response(raw):
    with pytest.raises(EmptyResponse) as exc_info:
        parse_thread_payload(raw, JSON_URL)
    assert exc_info.value.json_url == JSON_URL
    assert exc_info.value.body_preview is None


def test_malformed_json_keeps_preview_and_parse_error():
    with pytest.raises(MalformedPayload) as exc_info:
        parse_thread_payload("{not json", JSON_URL)
    err = exc_info.value
    assert err.kind == ErrorKind.MALFORMED_PAYLOAD
    assert err.body_preview == "{not json"
    assert err.parse_error
    assert err.status_code == 500


def test_malformed_preview_is_bounded_to_1000_chars():
    raw = "<html>" + "x" * 5000
    with pytest.raises(MalformedPayload) as exc_info:
        parse_thread_payload(raw, JSON_URL)
    assert exc_info.value.body_preview == raw[:1000]


def test_review_cards_are_extracted_in_page_order():
    html = listing_page([
        review_card("R1", name="Alice", title="Loud but fast"),
        review_card("R2", name="Bob", rating="2.0 out of 5 stars"),
    ])
    records = extract_review_records(html, page_number=3)

    assert [r.identifier for r in records] == ["R1", "R2"]
    first = records[0]
    assert first.reviewer_name == "Alice"
    assert first.rating_text == "5.0 out of 5 stars"
    assert first.title_text == "Loud but fast"
    assert first.date_text == "Reviewed in the United States on May 1, 2024"
    assert first.body_text == "Does exactly what it says."
    assert first.source_page_number == 3
    assert records[1].rating_text == "2.0 out of 5 stars"


def test_missing_rating_only_blanks_that_field():
    html = listing_page([review_card("R9", rating=None)])
    [record] = extract_review_records(html, page_number=1)

    assert record.rating_text == ""
    assert record.identifier == "R9"
    assert record.reviewer_name == "Jane Doe"
    assert record.title_text == "Great value"
    assert record.date_text.startswith("Reviewed in")
    assert record.body_text == "Does exactly what it says."


def test_card_with_no_subfields_is_kept_with_empty_strings():
    html = listing_page(['<div data-hook="review"><p>unexpected layout</p></div>'])
    [record] = extract_review_records(html, page_number=1)
    assert record.model_dump(exclude={"source_page_number"}) == {
        "identifier": "",
        "reviewer_name": "",
        "rating_text": "",
        "date_text": "",
        "title_text": "",
        "body_text": "",
    }


def test_cards_are_bounded():
    html = listing_page([review_card(f"R{i}") for i in range(15)])
    assert len(extract_review_records(html, page_number=1, max_cards=10)) == 10


def test_page_without_cards_yields_nothing():
    assert extract_review_records(listing_page([]), page_number=4) == []
    assert extract_review_records("", page_number=1) == []


def test_product_title():
    assert extract_product_title(listing_page([], product_title="Acme Kettle 1.7L")) == "Acme Kettle 1.7L"
    assert extract_product_title("<html><body></body></html>") == ""


def test_review_record_serializes_camel_case():
    [record] = extract_review_records(listing_page([review_card("R1")]), page_number=2)
    dumped = record.model_dump(by_alias=True)
    assert dumped["reviewerName"] == "Jane Doe"
    assert dumped["sourcePageNumber"] == 2
