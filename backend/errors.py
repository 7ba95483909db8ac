"""Comic error taxonomy and centralized FastAPI error handlers."""

import enum
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    INVALID_ID = "invalid_id"
    INVALID_QUERY = "invalid_query"
    INVALID_PAGE = "invalid_page"
    INVALID_LIMIT = "invalid_limit"
    NOT_FOUND = "not_found"
    HTTP = "http"
    FETCH = "fetch"
    PARSE = "parse"
    LATEST_FETCH = "latest_fetch"
    COMIC_FETCH = "comic_fetch"
    RANDOM_FETCH = "random_fetch"
    SEARCH = "search"


VALIDATION_KINDS = {ErrorKind.INVALID_QUERY, ErrorKind.INVALID_PAGE, ErrorKind.INVALID_LIMIT}


class ComicError(Exception):
    """Base exception tagged with an ErrorKind and an HTTP status code."""

    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Caller input defects, raised before any cache or network access
# ---------------------------------------------------------------------------

class InvalidIdError(ComicError):
    kind = ErrorKind.INVALID_ID
    status_code = 400

    def __init__(self, value: object = None):
        super().__init__("Invalid comic ID")
        self.value = value


class ValidationError(ComicError):
    """Search parameter rejected; carries the offending query-string field."""

    status_code = 400
    field: str = ""


class InvalidQueryError(ValidationError):
    kind = ErrorKind.INVALID_QUERY
    field = "q"

    def __init__(self):
        super().__init__("Query must be between 1 and 100 characters")


class InvalidPageError(ValidationError):
    kind = ErrorKind.INVALID_PAGE
    field = "page"

    def __init__(self):
        super().__init__("Page must be a positive integer")


class InvalidLimitError(ValidationError):
    kind = ErrorKind.INVALID_LIMIT
    field = "limit"

    def __init__(self):
        super().__init__("Limit must be between 1 and 50")


# ---------------------------------------------------------------------------
# Upstream failures raised by the fetcher
# ---------------------------------------------------------------------------

class NotFoundError(ComicError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, comic_id: int | None = None):
        super().__init__("Comic not found")
        self.comic_id = comic_id


class HttpError(ComicError):
    kind = ErrorKind.HTTP

    def __init__(self, upstream_status: int, reason: str):
        super().__init__(f"HTTP {upstream_status}: {reason}")
        self.upstream_status = upstream_status
        self.reason = reason


class FetchError(ComicError):
    kind = ErrorKind.FETCH

    def __init__(self, cause: Exception):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause


class ParseError(ComicError):
    kind = ErrorKind.PARSE


# ---------------------------------------------------------------------------
# Per-operation wrappers; the original message is kept
# ---------------------------------------------------------------------------

class LatestFetchError(ComicError):
    kind = ErrorKind.LATEST_FETCH

    def __init__(self, original: str):
        super().__init__(f"Failed to fetch latest comic: {original}")


class ComicFetchError(ComicError):
    kind = ErrorKind.COMIC_FETCH

    def __init__(self, original: str):
        super().__init__(f"Failed to fetch comic: {original}")


class RandomFetchError(ComicError):
    kind = ErrorKind.RANDOM_FETCH

    def __init__(self, original: str):
        super().__init__(f"Failed to fetch random comic: {original}")


class SearchError(ComicError):
    kind = ErrorKind.SEARCH

    def __init__(self, original: str):
        super().__init__(f"Search failed: {original}")


INTERNAL_ERROR_BODY = {
    "error": "Internal Server Error",
    "message": "Something went wrong on our end",
}


def _validation_response(message: str, details: list[dict]) -> JSONResponse:
    return JSONResponse(
        {"error": "Validation Error", "message": message, "details": details},
        status_code=400,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(ComicError)
    async def handle_comic_error(request: Request, exc: ComicError):
        if exc.kind == ErrorKind.NOT_FOUND:
            return JSONResponse(
                {"error": "Comic not found", "message": "The requested comic does not exist"},
                status_code=404,
            )
        if exc.kind == ErrorKind.INVALID_ID:
            return JSONResponse(
                {"error": "Invalid comic ID", "message": "Comic ID must be a positive integer"},
                status_code=400,
            )
        if exc.kind in VALIDATION_KINDS:
            return _validation_response(exc.message, [{"field": exc.field, "message": exc.message}])

        logger.error(
            "Comic request failed (%s) %s %s: %s",
            exc.kind.value, request.method, request.url.path, exc,
        )
        return JSONResponse(INTERNAL_ERROR_BODY, status_code=500)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        details = [
            {"field": str(err["loc"][-1]), "message": err["msg"]}
            for err in exc.errors()
        ]
        message = details[0]["message"] if details else "Invalid request"
        return _validation_response(message, details)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(INTERNAL_ERROR_BODY, status_code=500)
