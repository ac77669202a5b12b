"""Leitet Nutzertexte an die Voiceflow Runtime weiter und liefert die
normalisierte Antwort zurück."""
import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.core.errors import VoiceflowError, VoiceflowProxyError
from app.core.reply_extractor import extract_reply, unwrap_traces
from app.core.upstream import UpstreamClient

logger = logging.getLogger(__name__)


def _error_details(data: Any) -> Any:
    # Leere Objekte/Listen bleiben erhalten; null, false, 0 und "" nicht.
    if isinstance(data, (dict, list)) or data:
        return data
    return {"message": "Voiceflow returned non-JSON error"}


class VoiceflowClient:
    """Spricht den session-bezogenen Interact-Endpunkt der Voiceflow Runtime an."""

    def __init__(self, settings: Settings, upstream: UpstreamClient) -> None:
        self.settings = settings
        self.upstream = upstream

    def ensure_configured(self) -> None:
        self.settings.require("VF_STATE_ID")
        self.settings.require("VF_API_KEY")

    def interact_url(self, session_id: str) -> str:
        base = self.settings.vf_runtime_base.rstrip("/")
        state_id = quote(self.settings.vf_state_id, safe="")
        return f"{base}/state/{state_id}/user/{quote(session_id, safe='')}/interact"

    async def reply(self, session_id: str, user_text: str) -> str:
        """Sendet `user_text` an Voiceflow und gibt den Antworttext zurück.

        Bei Nicht-2xx wird VoiceflowError mit Upstream-Status und Body geworfen,
        bei Transportfehlern VoiceflowProxyError.
        """
        self.ensure_configured()
        url = self.interact_url(session_id)
        body = {"request": {"type": "text", "payload": user_text.strip()}}
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.vf_api_key}",
        }

        try:
            response = await self.upstream.post(url, headers=headers, json_body=body)
        except httpx.HTTPError as exc:
            logger.error(f"Voiceflow request failed for session {session_id}: {exc!r}")
            raise VoiceflowProxyError(details={"message": str(exc) or exc.__class__.__name__}) from exc

        if not response.ok:
            logger.warning(f"Voiceflow returned {response.status_code} for session {session_id}")
            raise VoiceflowError(
                status_code=response.status_code,
                status=response.status_code,
                details=_error_details(response.data),
            )

        reply_text = extract_reply(unwrap_traces(response.data))
        if not reply_text:
            logger.info(f"Voiceflow returned no text for session {session_id}, using fallback")
            return self.settings.vf_fallback_reply
        return reply_text
