import logging
from typing import Optional

from ..browser import acquire_session
from ..canonical import canonicalize
from ..config import Settings, get_settings
from ..errors import BLOCK_PREVIEW_CHARS, ExtractionError, RemoteBlocked, UnknownFailure, preview
from ..extract import parse_thread_payload
from ..models import SourceType, ThreadResult

logger = logging.getLogger("RedditScraper")
logger.setLevel(logging.INFO)


async def scrape_reddit_thread(
    raw_url: str,
    settings: Optional[Settings] = None,
    session_factory=None,
) -> ThreadResult:
    """Fetch a Reddit thread through its .json endpoint in a fresh browser session."""
    settings = settings or get_settings()
    session_factory = session_factory or acquire_session
    # Bad input fails here, before any browser is launched
    json_url = canonicalize(raw_url, SourceType.THREAD, settings=settings).fetch_url
    logger.info(f"[Reddit] Scraping: {json_url}")

    try:
        async with session_factory(settings) as session:
            outcome = await session.fetch(json_url, as_text=True)

            if outcome.http_failed or outcome.blocked:
                reason = f"Reddit returned HTTP {outcome.http_status}" if outcome.http_failed \
                    else "Reddit served a challenge page"
                logger.error(f"[Reddit] Blocked or Error {outcome.http_status} on {json_url}")
                raise RemoteBlocked(
                    reason,
                    json_url=json_url,
                    http_status=outcome.http_status,
                    proxy_used=session.proxy_used,
                    body_preview=preview(outcome.html or outcome.raw_body, BLOCK_PREVIEW_CHARS),
                )

            data = parse_thread_payload(outcome.raw_body, json_url)
    except ExtractionError as e:
        if e.json_url is None:
            e.json_url = json_url
        logger.warning(f"[Reddit] {e.kind.value}: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"[Reddit] Scrape error on {json_url}")
        raise UnknownFailure(str(e) or type(e).__name__, json_url=json_url) from e

    logger.info(f"[Reddit] Done: {json_url}")
    return ThreadResult(json_url=json_url, data=data)
