"""Konfigurationsmodul für das Avatar Relay Gateway: lädt Upstream-Zugangsdaten
(Voiceflow, D-ID), CORS-Origin und Ports via Pydantic-Settings."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Hält alle konfigurierbaren Werte, die das Gateway zur Laufzeit
    benötigt. Pflichtwerte der Upstreams werden erst bei Nutzung geprüft
    (siehe `require`), nicht beim Start."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")
    service_name: str = Field("hade-avatar-server", alias="SERVICE_NAME")
    allowed_origin: str = Field("https://hadeai.agency", alias="ALLOWED_ORIGIN")

    # Voiceflow (State-ID steht in der URL unter /state/<ID>/user/...)
    vf_runtime_base: str = Field("https://general-runtime.voiceflow.com", alias="VF_RUNTIME_BASE")
    vf_state_id: str = Field("", alias="VF_STATE_ID")  # Muss per Env gesetzt werden.
    vf_api_key: str = Field("", alias="VF_API_KEY")  # Muss per Env gesetzt werden.
    vf_fallback_reply: str = Field("Îmi pare rău, nu am un răspuns acum.", alias="VF_FALLBACK_REPLY")

    # D-ID
    did_api_base: str = Field("https://api.d-id.com", alias="DID_API_BASE")
    did_basic_user: str = Field("", alias="DID_BASIC_USER")
    did_basic_pass: str = Field("", alias="DID_BASIC_PASS")
    did_allowed_domain: str = Field("https://hadeai.agency", alias="DID_ALLOWED_DOMAIN")
    did_exists_marker: str = Field("already exists", alias="DID_EXISTS_MARKER")
    did_key_ttl_seconds: float = Field(600, alias="DID_KEY_TTL_SECONDS")

    upstream_timeout_seconds: float = Field(30, alias="UPSTREAM_TIMEOUT_SECONDS")
    max_body_bytes: int = Field(2 * 1024 * 1024, alias="MAX_BODY_BYTES")
    log_file: str = Field("relay_debug.log", alias="LOG_FILE")

    def require(self, env_name: str) -> str:
        """Liefert den Wert zur Env-Variable `env_name` oder wirft
        ConfigurationError, wenn er leer ist."""
        field_name = env_name.lower()
        value = getattr(self, field_name, "")
        if not value:
            raise ConfigurationError(f"Missing env var: {env_name}")
        return value


settings = Settings()
