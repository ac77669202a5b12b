"""FastAPI-Einstiegspunkt für das Avatar Relay Gateway (Voiceflow + D-ID)."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.client_key import ClientKeyProvider
from app.core.config import settings
from app.core.errors import RelayError
from app.core.logging_setup import setup_logging
from app.core.middleware import access_log, body_size_limit, security_headers
from app.core.models import HealthResponse
from app.core.upstream import UpstreamClient, build_http_client
from app.core.voiceflow import VoiceflowClient

from app.routers import did as did_router
from app.routers import voiceflow as voiceflow_router

# Setup Logging (File + Console)
setup_logging()
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialisiert alle Services beim Start und schließt den HTTP-Client
    beim Herunterfahren.

    - Ein gemeinsamer httpx.AsyncClient für alle Upstream-Aufrufe.
    - Voiceflow-Client und D-ID Client-Key-Provider (inkl. Key-Cache) im App State.
    """
    upstream = UpstreamClient(build_http_client(settings.upstream_timeout_seconds))
    app.state.upstream = upstream
    app.state.voiceflow = VoiceflowClient(settings, upstream)
    app.state.client_key_provider = ClientKeyProvider(settings, upstream)

    logger.info(f"{settings.service_name} is initialized (allowed origin: {settings.allowed_origin})")
    try:
        yield
    finally:
        await upstream.aclose()
        logger.info(f"{settings.service_name} shut down")


# Initialisierung der App
app = FastAPI(
    title="Avatar Relay Gateway",
    version="1.0.0",
    description="Server-side relay for Voiceflow replies and D-ID client keys.",
    lifespan=lifespan,
)

app.middleware("http")(body_size_limit)
app.middleware("http")(security_headers)
app.middleware("http")(access_log)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.allowed_origin],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.to_payload()}")
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.get("/", include_in_schema=False)
async def root():
    return PlainTextResponse("OK")


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(ok=True, service=settings.service_name)


# Router registrieren
app.include_router(voiceflow_router.router)
app.include_router(did_router.router)


def run() -> None:
    """Startet den Uvicorn-Server auf HOST:PORT."""
    logger.info(f"Server running on :{settings.port}")
    # Zugriffslog schreibt die Middleware (mit Referer und User-Agent)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level="info", access_log=False)


if __name__ == "__main__":
    run()
