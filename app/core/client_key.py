"""Beschafft den D-ID Client-Key serverseitig und hält ihn 10 Minuten im
Speicher, damit die D-ID API nicht bei jedem Seitenaufruf angefragt wird.

Ablauf: Cache -> GET -> POST (create) -> bei "already exists" ein weiteres GET.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from app.core.config import Settings
from app.core.errors import DIDError
from app.core.upstream import UpstreamClient, UpstreamResponse

logger = logging.getLogger(__name__)

# Feldnamen, unter denen D-ID den Key liefert; der erste nicht-leere gewinnt.
KEY_FIELD_CANDIDATES = ("client_key", "clientKey", "key")

CLIENT_KEY_PATH = "/agents/client-key"
JSON_HEADERS = {"Content-Type": "application/json"}
NOTE_FETCHED_AFTER_EXISTS = "fetched_after_exists"


def extract_client_key(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    for field in KEY_FIELD_CANDIDATES:
        value = data.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def description_contains(marker: str) -> Callable[[UpstreamResponse], bool]:
    """Standard-Erkennung für "Key existiert bereits": sucht `marker` im
    Freitextfeld `description` der Fehlerantwort. Abhängig vom Wortlaut der
    D-ID Fehlermeldung, daher per DID_EXISTS_MARKER überschreibbar."""

    def predicate(response: UpstreamResponse) -> bool:
        data = response.data if isinstance(response.data, dict) else {}
        description = data.get("description")
        return isinstance(description, str) and marker in description

    return predicate


@dataclass
class CachedKey:
    value: str
    obtained_at: float


class KeyCache:
    """Ein einziger Slot mit Ablaufzeit; veraltete Werte werden beim Lesen
    ignoriert, nicht aktiv gelöscht."""

    def __init__(self, ttl_seconds: float = 600, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.entry: Optional[CachedKey] = None

    def get(self) -> Optional[str]:
        if self.entry is None:
            return None
        if self.clock() - self.entry.obtained_at >= self.ttl_seconds:
            return None
        return self.entry.value

    def set(self, value: str) -> None:
        self.entry = CachedKey(value=value, obtained_at=self.clock())

    def clear(self) -> None:
        self.entry = None


@dataclass
class ClientKeyResult:
    client_key: str
    cached: bool = False
    note: Optional[str] = None


class ClientKeyProvider:
    """Besitzt den Key-Cache und führt das GET/POST/GET-Protokoll gegen D-ID aus.

    Gleichzeitige Cache-Misses laufen jeweils das volle Protokoll durch
    (kein Single-Flight); das Ergebnis ist für den Aufrufer identisch.
    """

    def __init__(
        self,
        settings: Settings,
        upstream: UpstreamClient,
        cache: Optional[KeyCache] = None,
        exists_predicate: Optional[Callable[[UpstreamResponse], bool]] = None,
    ) -> None:
        self.settings = settings
        self.upstream = upstream
        self.cache = cache or KeyCache(ttl_seconds=settings.did_key_ttl_seconds)
        self.exists_predicate = exists_predicate or description_contains(settings.did_exists_marker)

    @property
    def url(self) -> str:
        return f"{self.settings.did_api_base.rstrip('/')}{CLIENT_KEY_PATH}"

    def _auth(self) -> httpx.BasicAuth:
        user = self.settings.require("DID_BASIC_USER")
        password = self.settings.require("DID_BASIC_PASS")
        return httpx.BasicAuth(user, password)

    def _store(self, client_key: str, note: Optional[str] = None) -> ClientKeyResult:
        self.cache.set(client_key)
        return ClientKeyResult(client_key=client_key, note=note)

    async def get_client_key(self) -> ClientKeyResult:
        cached = self.cache.get()
        if cached:
            logger.info("D-ID client key served from cache")
            return ClientKeyResult(client_key=cached, cached=True)

        auth = self._auth()
        try:
            return await self._acquire(auth)
        except httpx.HTTPError as exc:
            logger.error(f"D-ID request failed: {exc!r}")
            raise DIDError(str(exc) or exc.__class__.__name__) from exc

    async def _acquire(self, auth: httpx.BasicAuth) -> ClientKeyResult:
        # 1) GET
        get_response = await self.upstream.get(self.url, headers=JSON_HEADERS, auth=auth)
        if get_response.ok:
            client_key = extract_client_key(get_response.data)
            if client_key:
                logger.info("D-ID client key fetched via GET")
                return self._store(client_key)
        logger.info(f"D-ID GET yielded no key (status {get_response.status_code}), trying POST")

        # 2) POST (create)
        post_response = await self.upstream.post(
            self.url,
            headers=JSON_HEADERS,
            auth=auth,
            json_body={"allowed_domains": [self.settings.did_allowed_domain]},
        )

        if not post_response.ok and self.exists_predicate(post_response):
            # Key existiert bereits: noch ein GET, danach aufgeben.
            logger.warning("D-ID reports client key already exists, fetching it again")
            retry_response = await self.upstream.get(self.url, headers=JSON_HEADERS, auth=auth)
            client_key = extract_client_key(retry_response.data) if retry_response.ok else None
            if not client_key:
                raise DIDError(
                    "Client key exists but could not be fetched",
                    details=retry_response.data if retry_response.data is not None else {},
                )
            return self._store(client_key, note=NOTE_FETCHED_AFTER_EXISTS)

        if not post_response.ok:
            logger.error(f"D-ID POST failed with status {post_response.status_code}")
            raise DIDError(
                status=post_response.status_code,
                details=post_response.data if post_response.data is not None else {},
            )

        client_key = extract_client_key(post_response.data)
        if not client_key:
            raise DIDError(
                "D-ID did not return a clientKey",
                details=post_response.data if post_response.data is not None else {},
            )
        logger.info("D-ID client key created via POST")
        return self._store(client_key)
