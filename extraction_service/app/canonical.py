import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit, urlunsplit

from .config import Settings, ThreadUrlMode, get_settings
from .errors import InvalidUrl
from .models import CanonicalTarget, SourceType

JSON_SUFFIX = ".json"

# Zero-width space/joiners, word joiner, BOM, soft hyphen
_INVISIBLE_CHARS = re.compile("[\u200b-\u200d\u2060\ufeff\u00ad]")
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)

# Matched against the path only, first match wins
_ASIN_PATH_PATTERNS = [
    re.compile(r"/dp/([A-Z0-9]{10})(?:/|$)", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})(?:/|$)", re.IGNORECASE),
    re.compile(r"/product-reviews/([A-Z0-9]{10})(?:/|$)", re.IGNORECASE),
]
_ASIN_VALUE = re.compile(r"^[A-Z0-9]{10}$", re.IGNORECASE)

REVIEW_PAGE_TEMPLATE = (
    "https://{host}/product-reviews/{asin}/"
    "?sortBy=recent&reviewerType=all_reviews&pageNumber={page}"
)


def clean_input(raw_url: Optional[str]) -> str:
    """Strip invisible characters and whitespace, and make sure there is a scheme."""
    url = _INVISIBLE_CHARS.sub("", str(raw_url or "")).strip()
    if not url:
        raise InvalidUrl("Missing or empty url")
    if not _SCHEME.match(url):
        url = "https://" + url
    return url


def _naive_json_url(url: str) -> str:
    return url if url.endswith(JSON_SUFFIX) else url + JSON_SUFFIX


def to_thread_json_url(raw_url: str, settings: Optional[Settings] = None) -> str:
    """
    Map a Reddit thread URL to its .json endpoint.

    In strict mode the host is optionally forced (old.reddit.com by default),
    query and fragment are dropped and exactly one .json suffix is kept, so
    feeding the result back in returns it unchanged.
    """
    settings = settings or get_settings()
    url = clean_input(raw_url)

    if settings.thread_url_mode == ThreadUrlMode.NAIVE:
        return _naive_json_url(url)

    try:
        parts = urlsplit(url)
        netloc = parts.netloc
        if settings.reddit_force_host:
            netloc = settings.reddit_force_host
        path = parts.path
        if not path.endswith(JSON_SUFFIX):
            path = path.rstrip("/") + JSON_SUFFIX
        return urlunsplit((parts.scheme.lower(), netloc, path, "", ""))
    except ValueError:
        # urlsplit rejects things like a broken IPv6 host; degrade to plain suffixing
        return _naive_json_url(url)


def extract_asin(raw_url: str) -> str:
    url = clean_input(raw_url)
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidUrl("Could not parse url", target_url=url) from e

    for pattern in _ASIN_PATH_PATTERNS:
        match = pattern.search(parts.path)
        if match:
            return match.group(1).upper()

    for value in parse_qs(parts.query).get("asin", []):
        if _ASIN_VALUE.match(value):
            return value.upper()

    raise InvalidUrl("Could not extract ASIN from url", target_url=url)


def build_review_page_url(asin: str, page_number: int, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return REVIEW_PAGE_TEMPLATE.format(host=settings.amazon_host, asin=asin, page=page_number)


def canonicalize(
    raw_url: str,
    source_type: SourceType,
    page_number: int = 1,
    settings: Optional[Settings] = None,
) -> CanonicalTarget:
    settings = settings or get_settings()
    if source_type == SourceType.THREAD:
        return CanonicalTarget(
            fetch_url=to_thread_json_url(raw_url, settings),
            source_type=source_type,
        )

    asin = extract_asin(raw_url)
    return CanonicalTarget(
        fetch_url=build_review_page_url(asin, page_number, settings),
        source_type=source_type,
        identifier=asin,
        page_number=page_number,
    )
