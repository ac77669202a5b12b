"""HTTP-Middleware des Gateways: Security-Header, Body-Limit und Access-Log."""
import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import PayloadTooLargeError

access_logger = logging.getLogger("app.access")

# Standard-Header wie bei helmet() in Express.
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
}

CallNext = Callable[[Request], Awaitable[Response]]


async def security_headers(request: Request, call_next: CallNext) -> Response:
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def body_size_limit(request: Request, call_next: CallNext) -> Response:
    """Lehnt Requests ab, deren Content-Length über MAX_BODY_BYTES liegt.
    Chunked-Bodies prüft `read_limited_body` beim Lesen."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.max_body_bytes:
        error = PayloadTooLargeError()
        return JSONResponse(error.to_payload(), status_code=error.status_code)
    return await call_next(request)


async def access_log(request: Request, call_next: CallNext) -> Response:
    """Eine Zeile pro Request im Stil des Combined Log Formats."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    client = request.client.host if request.client else "-"
    access_logger.info(
        f'{client} "{request.method} {request.url.path} HTTP/{request.scope.get("http_version", "1.1")}" '
        f'{response.status_code} "{request.headers.get("referer", "-")}" '
        f'"{request.headers.get("user-agent", "-")}" {duration_ms:.1f}ms'
    )
    return response
