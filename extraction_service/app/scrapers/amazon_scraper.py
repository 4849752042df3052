import logging
from typing import Any, Optional

from ..browser import acquire_session
from ..canonical import canonicalize
from ..config import Settings, get_settings
from ..errors import ExtractionError, UnknownFailure
from ..models import ExtractionRequest, ListingResult, SourceType
from ..pagination import collect_reviews

logger = logging.getLogger("AmazonScraper")
logger.setLevel(logging.INFO)


async def scrape_amazon_reviews(
    raw_url: str,
    pages: Any = None,
    settings: Optional[Settings] = None,
    session_factory=None,
) -> ListingResult:
    """Most-recent-first reviews for one product, up to `pages` listing pages (clamped 1..20)."""
    settings = settings or get_settings()
    session_factory = session_factory or acquire_session
    request = ExtractionRequest(source_type=SourceType.LISTING, raw_url=raw_url, page_limit=pages)
    # Bad input fails here, before any browser is launched
    asin = canonicalize(request.raw_url, SourceType.LISTING, settings=settings).identifier
    logger.info(f"[Amazon] Scraping reviews for {asin} | pages={request.page_limit}")

    try:
        async with session_factory(settings) as session:
            result = await collect_reviews(session, asin, request.page_limit, settings)
    except ExtractionError as e:
        if e.asin is None:
            e.asin = asin
        logger.warning(f"[Amazon] {e.kind.value}: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"[Amazon] Scrape error for {asin}")
        raise UnknownFailure(str(e) or type(e).__name__, asin=asin) from e

    logger.info(
        f"[Amazon] Done: {asin} -> {result.review_count} reviews"
        + (f", skipped pages {result.skipped_pages}" if result.skipped_pages else "")
    )
    return result
