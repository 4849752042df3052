import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .errors import ExtractionError, InvalidUrl
from .models import ListingResult, ThreadResult
from .scrapers.amazon_scraper import scrape_amazon_reviews
from .scrapers.reddit_scraper import scrape_reddit_thread

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("ExtractionService")

app = FastAPI(title="Extraction Service")


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.get("/")
def index():
    return {
        "ok": True,
        "message": "Playwright extraction service running",
        "usage": [
            "/reddit-thread?url=<reddit_thread_url>",
            "/amazon-reviews?url=<amazon_product_url>&pages=<1-20>",
        ],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/reddit-thread", response_model=ThreadResult)
async def reddit_thread(url: Optional[str] = None):
    if not url:
        raise InvalidUrl("Missing query param: ?url=<reddit_thread_url>")
    return await scrape_reddit_thread(url, settings=get_settings())


@app.get("/amazon-reviews", response_model=ListingResult)
async def amazon_reviews(url: Optional[str] = None, pages: Optional[str] = None):
    if not url:
        raise InvalidUrl("Missing query param: ?url=<amazon_product_url>")
    return await scrape_amazon_reviews(url, pages, settings=get_settings())


def run():
    port = get_settings().port
    logger.info(f"Extraction service listening on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
