import asyncio
import logging
import random
from typing import AsyncIterator

from .canonical import build_review_page_url
from .config import BlockPolicy, Settings
from .errors import BLOCK_PREVIEW_CHARS, RemoteBlocked, preview
from .extract import extract_product_title, extract_review_records
from .models import ListingResult, ReviewPage

logger = logging.getLogger("Pagination")
logger.setLevel(logging.INFO)


async def _human_sleep(min_sec: float, max_sec: float):
    """Jittered pause between page loads."""
    if max_sec <= 0:
        return
    await asyncio.sleep(random.uniform(max(min_sec, 0.0), max_sec))


async def iter_review_pages(session, asin: str, page_limit: int, settings: Settings) -> AsyncIterator[ReviewPage]:
    """
    Yield listing pages 1..page_limit in order.

    Stops after the first page with no review cards. A blocked page either
    aborts with RemoteBlocked (abort policy) or is yielded with blocked=True
    and skipped (skip policy). Nothing is retried.
    """
    for page_number in range(1, page_limit + 1):
        if page_number > 1:
            await _human_sleep(settings.page_delay_min, settings.page_delay_max)

        url = build_review_page_url(asin, page_number, settings)
        outcome = await session.fetch(url)

        if outcome.blocked or outcome.http_failed:
            reason = f"HTTP {outcome.http_status}" if outcome.http_failed else "challenge page"
            if settings.block_policy == BlockPolicy.ABORT:
                raise RemoteBlocked(
                    f"Amazon blocked the request on page {page_number} ({reason})",
                    asin=asin,
                    page_number=page_number,
                    http_status=outcome.http_status if outcome.http_failed else None,
                    body_preview=preview(outcome.html or outcome.raw_body, BLOCK_PREVIEW_CHARS),
                )
            logger.warning(f"[Amazon] Page {page_number} blocked ({reason}), skipping")
            yield ReviewPage(page_number=page_number, blocked=True)
            continue

        records = extract_review_records(outcome.raw_body, page_number, settings.max_review_cards)
        title = extract_product_title(outcome.raw_body) if page_number == 1 else ""
        logger.info(f"[Amazon] Page {page_number}: {len(records)} reviews")

        yield ReviewPage(page_number=page_number, records=records, product_title=title)
        if not records:
            break


async def collect_reviews(session, asin: str, page_limit: int, settings: Settings) -> ListingResult:
    records = []
    skipped = []
    title = ""
    async for page in iter_review_pages(session, asin, page_limit, settings):
        if page.blocked:
            skipped.append(page.page_number)
            continue
        title = title or page.product_title
        records.extend(page.records)

    return ListingResult(
        identifier=asin,
        display_title=title,
        review_count=len(records),
        records=records,
        skipped_pages=skipped,
    )
