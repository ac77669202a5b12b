"""Fehlerklassen des Avatar Relay Gateways. Jede Klasse kennt ihren HTTP-Status
und erzeugt den JSON-Body, den der Exception-Handler in `app.main` ausliefert."""
from typing import Any, Dict, Optional


class RelayError(Exception):
    """Basis aller fachlichen Fehler; unbekannte Fehler landen als
    `server_error` mit Status 500 hier."""

    status_code: int = 500
    error: str = "server_error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        status: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message or self.error)
        self.message = message
        self.status = status
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.status is not None:
            body["status"] = self.status
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequestError(RelayError):
    """Pflichtfeld fehlt oder hat den falschen Typ (400, nie wiederholt)."""

    status_code = 400

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(RelayError):
    """Benötigte Umgebungsvariable fehlt; tritt erst bei der ersten Nutzung auf."""


class VoiceflowError(RelayError):
    """Voiceflow hat mit Nicht-2xx geantwortet; Status wird durchgereicht."""

    error = "voiceflow_error"


class VoiceflowProxyError(RelayError):
    """Voiceflow war nicht erreichbar (Transportfehler)."""

    status_code = 502
    error = "vf_proxy_failed"


class DIDError(RelayError):
    """Client-Key konnte bei D-ID nicht beschafft werden."""

    status_code = 502
    error = "did_error"


class PayloadTooLargeError(RelayError):
    """Request-Body überschreitet MAX_BODY_BYTES."""

    status_code = 413
    error = "payload_too_large"
