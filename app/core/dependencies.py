"""FastAPI-Dependencies: Zugriff auf die im App-State abgelegten Services und
tolerantes Lesen des JSON-Bodys."""
import json
from typing import Any, Dict

from fastapi import Request

from app.core.client_key import ClientKeyProvider
from app.core.config import settings
from app.core.errors import InvalidRequestError, PayloadTooLargeError
from app.core.voiceflow import VoiceflowClient


def get_voiceflow_client(request: Request) -> VoiceflowClient:
    return request.app.state.voiceflow


def get_client_key_provider(request: Request) -> ClientKeyProvider:
    return request.app.state.client_key_provider


async def read_limited_body(request: Request) -> bytes:
    """Liest den Body stückweise und bricht mit 413 ab, sobald MAX_BODY_BYTES
    überschritten ist; greift auch bei Chunked-Requests ohne Content-Length."""
    limit = settings.max_body_bytes
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise PayloadTooLargeError()
        chunks.append(chunk)
    return b"".join(chunks)


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Liest den Body als JSON-Objekt. Leerer Body oder JSON, das kein Objekt
    ist, ergibt {}; kaputtes JSON ergibt 400 `invalid_json`."""
    raw = await read_limited_body(request)
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise InvalidRequestError("invalid_json") from exc
    return payload if isinstance(payload, dict) else {}
