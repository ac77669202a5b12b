"""D-ID-Router: liefert dem Browser einen Client-Key, ohne die Basic-Auth
Zugangsdaten preiszugeben."""
import logging

from fastapi import APIRouter, Depends

from app.core.client_key import ClientKeyProvider
from app.core.dependencies import get_client_key_provider
from app.core.errors import RelayError
from app.core.models import ClientKeyResponse

router = APIRouter(prefix="/did", tags=["D-ID"])
logger = logging.getLogger(__name__)


@router.api_route(
    "/client-key",
    methods=["GET", "POST"],
    response_model=ClientKeyResponse,
    response_model_exclude_none=True,
)
async def client_key(provider: ClientKeyProvider = Depends(get_client_key_provider)):
    """GET oder POST /did/client-key -> { clientKey, cached?, note? }."""
    try:
        result = await provider.get_client_key()
    except RelayError:
        raise
    except Exception as exc:
        logger.exception(f"Unexpected error in /did/client-key: {exc}")
        raise RelayError(str(exc) or exc.__class__.__name__) from exc

    return ClientKeyResponse(
        clientKey=result.client_key,
        cached=True if result.cached else None,
        note=result.note,
    )
