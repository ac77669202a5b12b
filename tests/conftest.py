from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.core.upstream import UpstreamClient


class FakeClock:
    """Steuerbare Uhr für TTL-Tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        vf_runtime_base="https://vf.test",
        vf_state_id="state_1",
        vf_api_key="vf_secret",
        vf_fallback_reply="Sorry, no answer right now.",
        did_api_base="https://did.test",
        did_basic_user="user",
        did_basic_pass="pass",
        did_allowed_domain="https://example.org",
        did_exists_marker="already exists",
        did_key_ttl_seconds=600,
    )


@pytest.fixture
def upstream():
    return AsyncMock(spec=UpstreamClient)


@pytest.fixture
def clock():
    return FakeClock()
