"""API-Modelle des Avatar Relay Gateways. Feldnamen folgen dem camelCase,
den das Browser-Frontend erwartet."""
from typing import Optional

from pydantic import BaseModel


class ReplyResponse(BaseModel):
    """Antwort von POST /vf/reply."""

    replyText: str


class ClientKeyResponse(BaseModel):
    """Antwort von /did/client-key; `cached` und `note` nur wenn gesetzt."""

    clientKey: str
    cached: Optional[bool] = None
    note: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool
    service: str
