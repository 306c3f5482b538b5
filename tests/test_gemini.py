import httpx
import pytest

from stylist import config
from stylist.core.errors import (
    ConfigurationError,
    ErrorKind,
    MalformedResponseError,
    TransportError,
)
from stylist.core.gemini import (
    build_generation_config,
    generate_content,
    response_text,
)
from tests.conftest import image_response, text_response


def test_build_generation_config_only_sets_given_fields():
    assert build_generation_config(0.8) == {"temperature": 0.8}
    assert build_generation_config(0.5, aspect_ratio="3:4") == {
        "temperature": 0.5,
        "imageConfig": {"aspectRatio": "3:4"},
    }
    schema = {"type": "OBJECT"}
    assert build_generation_config(
        0.8, response_mime_type="application/json", response_schema=schema
    ) == {
        "temperature": 0.8,
        "responseMimeType": "application/json",
        "responseSchema": schema,
    }


@pytest.mark.asyncio
async def test_generate_content_posts_payload(api_key, gemini, http_client):
    gemini.queue_image()

    result = await generate_content(
        config.IMAGE_MODEL,
        [{"text": "hello"}],
        {"temperature": 0.8},
        http_client=http_client,
    )

    assert result == image_response()
    request = gemini.requests[0]
    assert request.headers["x-goog-api-key"] == api_key
    assert str(request.url).endswith(f"/{config.IMAGE_MODEL}:generateContent")
    assert gemini.payload(request) == {
        "contents": [{"parts": [{"text": "hello"}]}],
        "generationConfig": {"temperature": 0.8},
    }


@pytest.mark.asyncio
async def test_missing_api_key_fails_before_network(no_api_key, gemini, http_client):
    with pytest.raises(ConfigurationError) as exc_info:
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert exc_info.value.kind is ErrorKind.CONFIGURATION
    assert gemini.requests == []


@pytest.mark.asyncio
async def test_api_key_fallback_variable(monkeypatch, gemini, http_client):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "legacy-key")
    gemini.queue_image()

    await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert gemini.requests[0].headers["x-goog-api-key"] == "legacy-key"


@pytest.mark.asyncio
async def test_status_429_is_rate_limited(api_key, gemini, http_client):
    gemini.queue_image(httpx.Response(429, json={"error": {"status": "RESOURCE_EXHAUSTED"}}))

    with pytest.raises(TransportError) as exc_info:
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert exc_info.value.rate_limited is True
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_quota_marker_in_body_is_rate_limited(api_key, gemini, http_client):
    gemini.queue_image(
        httpx.Response(400, json={"error": {"message": "You exceeded your current quota"}})
    )

    with pytest.raises(TransportError) as exc_info:
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert exc_info.value.rate_limited is True


@pytest.mark.asyncio
async def test_server_error_is_plain_transport_error(api_key, gemini, http_client):
    gemini.queue_image(httpx.Response(500, text="internal"))

    with pytest.raises(TransportError) as exc_info:
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert exc_info.value.rate_limited is False
    assert "500" in exc_info.value.message


@pytest.mark.asyncio
async def test_network_error_is_transport_error(api_key, gemini, http_client):
    gemini.queue_image(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError, match="Network error"):
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)


@pytest.mark.asyncio
async def test_non_json_body_is_malformed(api_key, gemini, http_client):
    gemini.queue_image(httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedResponseError):
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)


def test_response_text_joins_text_parts():
    response = {
        "candidates": [
            {"content": {"parts": [{"text": "a"}, {"inlineData": {}}, {"text": "b"}]}}
        ]
    }
    assert response_text(response) == "ab"
    assert response_text(text_response("x")) == "x"
    assert response_text({}) == ""


@pytest.mark.parametrize(
    "reply",
    [
        httpx.Response(200, content=b"\x80\x81\x82", headers={"content-type": "application/json"}),
        httpx.Response(200, json=[]),
        httpx.Response(200, json="just a string"),
    ],
)
@pytest.mark.asyncio
async def test_undecodable_or_non_object_body_is_malformed(api_key, gemini, http_client, reply):
    gemini.queue_image(reply)

    with pytest.raises(MalformedResponseError) as exc_info:
        await generate_content(config.IMAGE_MODEL, [], {}, http_client=http_client)

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE
