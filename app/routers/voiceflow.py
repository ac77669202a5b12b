"""Voiceflow-Router: POST /vf/reply { sessionId, userText } -> { replyText }."""
import logging

from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_voiceflow_client, read_json_object
from app.core.errors import InvalidRequestError, RelayError
from app.core.models import ReplyResponse
from app.core.voiceflow import VoiceflowClient

router = APIRouter(prefix="/vf", tags=["Voiceflow"])
logger = logging.getLogger(__name__)


def _require_string(payload: dict, field: str) -> str:
    value = payload.get(field)
    if not value or not isinstance(value, str):
        raise InvalidRequestError(f"{field} is required (string)")
    return value


@router.post("/reply", response_model=ReplyResponse)
async def reply(request: Request, voiceflow: VoiceflowClient = Depends(get_voiceflow_client)):
    """Leitet den Nutzertext an Voiceflow weiter.

    Pipeline:
    1) Konfiguration prüfen (VF_STATE_ID, VF_API_KEY).
    2) Body validieren; bei Fehlern 400 ohne Upstream-Aufruf.
    3) Voiceflow aufrufen; Fehlerstatus wird durchgereicht.
    4) Traces zu einem Antworttext zusammenfassen.
    """
    try:
        voiceflow.ensure_configured()
        payload = await read_json_object(request)
        session_id = _require_string(payload, "sessionId")
        user_text = _require_string(payload, "userText")
        reply_text = await voiceflow.reply(session_id, user_text)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception(f"Unexpected error in /vf/reply: {exc}")
        raise RelayError(str(exc) or exc.__class__.__name__) from exc

    return ReplyResponse(replyText=reply_text)
