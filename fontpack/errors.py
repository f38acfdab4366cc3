import logging
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class FontPackError(Exception):
    """A font pack could not be produced; ``message`` is safe to show to the caller."""

    default_message = "Unable to build font pack"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSourceUrlError(FontPackError):
    default_message = "Invalid URL or No Fonts Found"


class UpstreamFetchError(FontPackError):
    default_message = "Could not fetch the stylesheet from the provided URL"


class NoFontsFoundError(FontPackError):
    default_message = "Invalid URL or No Fonts Found"


def error_redirect_url(message: str) -> str:
    return f"/?error={quote(message, safe='')}"


def _error_payload(code: str, message: str, details):
    return {"code": code, "message": message, "details": details}


def register_error_handlers(app) -> None:
    @app.exception_handler(FontPackError)
    async def font_pack_exception_handler(request: Request, exc: FontPackError):
        logger.info("Font pack request failed for %s: %s", request.url.path, exc.message)
        return RedirectResponse(url=error_redirect_url(exc.message), status_code=302)

    # Starlette's HTTPException also covers router 404/405 and fastapi.HTTPException.
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        detail = exc.detail
        code = f"http_{exc.status_code}"
        message = "Request failed"
        details = None
        if isinstance(detail, dict):
            code = detail.get("code", code)
            message = detail.get("message", message)
            details = detail.get("details")
        elif isinstance(detail, str):
            message = detail
        else:
            details = detail
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(code, message, details),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_payload("internal_error", "Internal server error", None),
        )
