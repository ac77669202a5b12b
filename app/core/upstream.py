"""Ausgehende HTTP-Aufrufe an Voiceflow und D-ID über einen gemeinsamen
httpx.AsyncClient. Antwort-Bodies werden tolerant geparst: kein JSON -> None."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class UpstreamResponse:
    """Status und (falls möglich) geparster JSON-Body eines Upstream-Aufrufs."""

    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def parse_json(response: httpx.Response) -> Any:
    """Liefert den JSON-Body oder None, wenn der Body leer oder kein JSON ist."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(f"Upstream returned non-JSON body (status {response.status_code})")
        return None


def build_http_client(
    timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """Gemeinsamer Client für alle Upstreams; folgt Redirects wie fetch()."""
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)


class UpstreamClient:
    """Dünne Hülle um httpx.AsyncClient. Transportfehler (Timeout,
    Verbindungsabbruch) werden als httpx.HTTPError an den Aufrufer gereicht."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        auth: Optional[httpx.Auth] = None,
    ) -> UpstreamResponse:
        logger.info(f"Upstream request: {method} {url}")
        response = await self.client.request(
            method, url, headers=headers, json=json_body, auth=auth or httpx.USE_CLIENT_DEFAULT
        )
        logger.info(f"Upstream response: {method} {url} -> {response.status_code}")
        return UpstreamResponse(status_code=response.status_code, data=parse_json(response))

    async def get(
        self, url: str, *, headers: Optional[Dict[str, str]] = None, auth: Optional[httpx.Auth] = None
    ) -> UpstreamResponse:
        return await self.request("GET", url, headers=headers, auth=auth)

    async def post(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        auth: Optional[httpx.Auth] = None,
    ) -> UpstreamResponse:
        return await self.request("POST", url, headers=headers, json_body=json_body, auth=auth)

    async def aclose(self) -> None:
        await self.client.aclose()
