"""
Failure taxonomy for the extraction pipeline.

Every failure after the request is accepted is raised as an ExtractionError
subclass and turned into a JSON body exactly once, by the exception handler
in main.py. Raw page content only travels as a bounded preview.
"""
from enum import Enum
from typing import Any, Optional

BLOCK_PREVIEW_CHARS = 500
PARSE_PREVIEW_CHARS = 1000


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    REMOTE_BLOCKED = "remote_blocked"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_PAYLOAD = "malformed_payload"
    TIMEOUT = "timeout"
    UNKNOWN_FAILURE = "unknown_failure"


def preview(text: Optional[str], limit: int = PARSE_PREVIEW_CHARS) -> str:
    return (text or "")[:limit]


class ExtractionError(Exception):
    kind = ErrorKind.UNKNOWN_FAILURE
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        json_url: Optional[str] = None,
        asin: Optional[str] = None,
        target_url: Optional[str] = None,
        page_number: Optional[int] = None,
        http_status: Optional[int] = None,
        parse_error: Optional[str] = None,
        body_preview: Optional[str] = None,
        proxy_used: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.json_url = json_url
        self.asin = asin
        self.target_url = target_url
        self.page_number = page_number
        self.http_status = http_status
        self.parse_error = parse_error
        self.body_preview = body_preview
        self.proxy_used = proxy_used

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        fields = (
            ("jsonUrl", self.json_url),
            ("asin", self.asin),
            ("url", self.target_url),
            ("pageNum", self.page_number),
            ("httpStatus", self.http_status),
            ("proxyUsed", self.proxy_used),
            ("parseError", self.parse_error),
            ("bodyPreview", self.body_preview),
        )
        for key, value in fields:
            if value is not None:
                payload[key] = value
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, page={self.page_number})"


class InvalidUrl(ExtractionError):
    kind = ErrorKind.INVALID_URL
    status_code = 400


class RemoteBlocked(ExtractionError):
    kind = ErrorKind.REMOTE_BLOCKED
    status_code = 502


class EmptyResponse(ExtractionError):
    kind = ErrorKind.EMPTY_RESPONSE


class MalformedPayload(ExtractionError):
    kind = ErrorKind.MALFORMED_PAYLOAD


class FetchTimeout(ExtractionError):
    kind = ErrorKind.TIMEOUT


class UnknownFailure(ExtractionError):
    kind = ErrorKind.UNKNOWN_FAILURE
