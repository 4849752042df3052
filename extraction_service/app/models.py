from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PAGE_LIMIT = 3
MIN_PAGE_LIMIT = 1
MAX_PAGE_LIMIT = 20


class SourceType(str, Enum):
    THREAD = "thread"     # reddit discussion, fetched as .json
    LISTING = "listing"   # amazon review listing, paginated


class ExtractionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_type: SourceType
    raw_url: str
    page_limit: int = DEFAULT_PAGE_LIMIT

    @field_validator("page_limit", mode="before")
    @classmethod
    def clamp_page_limit(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_PAGE_LIMIT
        try:
            pages = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PAGE_LIMIT
        return max(MIN_PAGE_LIMIT, min(MAX_PAGE_LIMIT, pages))


class CanonicalTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    fetch_url: str
    source_type: SourceType
    identifier: Optional[str] = None   # ASIN, listing only
    page_number: Optional[int] = None


class FetchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_status: Optional[int] = None
    raw_body: str = ""
    html: str = ""      # rendered page; equals raw_body unless fetched as text
    blocked: bool = False
    title: str = ""

    @property
    def http_failed(self) -> bool:
        return self.http_status is not None and self.http_status >= 400


class ThreadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_url: str = Field(alias="jsonUrl")
    data: Any = None


class ReviewRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identifier: str = ""
    reviewer_name: str = Field("", alias="reviewerName")
    rating_text: str = Field("", alias="ratingText")
    date_text: str = Field("", alias="dateText")
    title_text: str = Field("", alias="titleText")
    body_text: str = Field("", alias="bodyText")
    source_page_number: int = Field(1, alias="sourcePageNumber")


class ReviewPage(BaseModel):
    """One fetched listing page; product_title is only read off page 1."""
    page_number: int
    records: list[ReviewRecord] = []
    product_title: str = ""
    blocked: bool = False


class ListingResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identifier: str = Field(alias="asin")
    display_title: str = Field("", alias="productTitle")
    review_count: int = Field(0, alias="reviewsCount")
    records: list[ReviewRecord] = Field(default_factory=list, alias="reviews")
    skipped_pages: list[int] = Field(default_factory=list, alias="skippedPages")
