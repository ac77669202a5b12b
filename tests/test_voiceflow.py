import httpx
import pytest

from app.core.errors import ConfigurationError, VoiceflowError, VoiceflowProxyError
from app.core.upstream import UpstreamClient, UpstreamResponse, build_http_client
from app.core.voiceflow import VoiceflowClient


@pytest.mark.asyncio
async def test_reply_posts_trimmed_text_to_session_endpoint(settings, upstream):
    upstream.post.return_value = UpstreamResponse(200, [{"type": "text", "payload": {"message": "Hi there"}}])
    client = VoiceflowClient(settings, upstream)

    reply = await client.reply("sess/1", "  Hello  ")

    assert reply == "Hi there"
    upstream.post.assert_called_once_with(
        "https://vf.test/state/state_1/user/sess%2F1/interact",
        headers={"Content-Type": "application/json", "Authorization": "Bearer vf_secret"},
        json_body={"request": {"type": "text", "payload": "Hello"}},
    )


@pytest.mark.asyncio
async def test_reply_unwraps_trace_object(settings, upstream):
    upstream.post.return_value = UpstreamResponse(
        200, {"trace": [{"type": "text", "payload": {"message": "wrapped"}}]}
    )
    client = VoiceflowClient(settings, upstream)

    assert await client.reply("s1", "hi") == "wrapped"


@pytest.mark.asyncio
async def test_empty_reply_uses_fallback(settings, upstream):
    upstream.post.return_value = UpstreamResponse(200, [{"type": "end"}])
    client = VoiceflowClient(settings, upstream)

    assert await client.reply("s1", "hi") == "Sorry, no answer right now."


@pytest.mark.asyncio
async def test_upstream_error_keeps_status_and_body(settings, upstream):
    upstream.post.return_value = UpstreamResponse(401, {"message": "bad key"})
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(VoiceflowError) as exc_info:
        await client.reply("s1", "hi")

    assert exc_info.value.status_code == 401
    assert exc_info.value.to_payload() == {
        "error": "voiceflow_error",
        "status": 401,
        "details": {"message": "bad key"},
    }


@pytest.mark.asyncio
async def test_non_json_upstream_error(settings, upstream):
    upstream.post.return_value = UpstreamResponse(503, None)
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(VoiceflowError) as exc_info:
        await client.reply("s1", "hi")

    assert exc_info.value.details == {"message": "Voiceflow returned non-JSON error"}


@pytest.mark.asyncio
async def test_transport_error_is_proxy_failure(settings, upstream):
    upstream.post.side_effect = httpx.ReadTimeout("timed out")
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(VoiceflowProxyError) as exc_info:
        await client.reply("s1", "hi")

    assert exc_info.value.status_code == 502
    assert exc_info.value.to_payload()["error"] == "vf_proxy_failed"


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error(settings, upstream):
    settings.vf_api_key = ""
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(ConfigurationError, match="Missing env var: VF_API_KEY"):
        await client.reply("s1", "hi")
    upstream.post.assert_not_called()


@pytest.mark.parametrize("body", [False, 0, ""])
@pytest.mark.asyncio
async def test_falsy_error_body_uses_non_json_message(settings, upstream, body):
    upstream.post.return_value = UpstreamResponse(500, body)
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(VoiceflowError) as exc_info:
        await client.reply("s1", "hi")

    assert exc_info.value.details == {"message": "Voiceflow returned non-JSON error"}


@pytest.mark.asyncio
async def test_empty_object_error_body_is_kept(settings, upstream):
    upstream.post.return_value = UpstreamResponse(500, {})
    client = VoiceflowClient(settings, upstream)

    with pytest.raises(VoiceflowError) as exc_info:
        await client.reply("s1", "hi")

    assert exc_info.value.details == {}


@pytest.mark.asyncio
async def test_reply_follows_redirect(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "vf.test":
            return httpx.Response(307, headers={"Location": "https://runtime2.vf.test/interact"})
        assert request.method == "POST"
        return httpx.Response(200, json=[{"type": "text", "payload": {"message": "after redirect"}}])

    upstream = UpstreamClient(build_http_client(5, transport=httpx.MockTransport(handler)))
    client = VoiceflowClient(settings, upstream)

    reply = await client.reply("s1", "hi")
    await upstream.aclose()

    assert reply == "after redirect"
