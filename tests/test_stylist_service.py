import httpx
import pytest

from stylist import config
from stylist.core.errors import ConfigurationError, SafetyBlockError
from stylist.models import WorkflowOptions
from stylist.services.stylist_service import dress_up_person, enhance_image, suggest_clothing
from tests.conftest import RESULT_PAYLOAD


@pytest.mark.asyncio
async def test_dress_up_sends_person_garment_and_prompt(
    api_key, gemini, http_client, person_file, clothing_file
):
    gemini.queue_image()
    options = WorkflowOptions(material="linen", temperature=0.4)

    result = await dress_up_person(
        person_file, clothing_file, options, "3:4", http_client=http_client
    )

    assert result == f"data:image/png;base64,{RESULT_PAYLOAD}"
    (request,) = gemini.image_requests
    payload = gemini.payload(request)
    parts = payload["contents"][0]["parts"]
    assert len(parts) == 3
    assert "inline_data" in parts[0] and "inline_data" in parts[1]
    assert "upper-body shot" in parts[2]["text"]
    assert "young adult woman" in parts[2]["text"]
    assert "'linen'" in parts[2]["text"]
    assert payload["generationConfig"] == {
        "temperature": 0.4,
        "imageConfig": {"aspectRatio": "3:4"},
    }


@pytest.mark.asyncio
async def test_dress_up_proceeds_when_analysis_fails(
    api_key, gemini, http_client, person_file, clothing_file
):
    gemini.analysis_reply = httpx.ConnectError("analysis unreachable")
    gemini.queue_image()

    result = await dress_up_person(
        person_file, clothing_file, WorkflowOptions(), "1:1", http_client=http_client
    )

    assert result.startswith("data:image/png;base64,")
    prompt = gemini.payload(gemini.image_requests[0])["contents"][0]["parts"][2]["text"]
    assert "full-body shot" in prompt
    assert "The person is a adult person." in prompt


@pytest.mark.asyncio
async def test_dress_up_propagates_safety_block(
    api_key, gemini, http_client, person_file, clothing_file
):
    gemini.queue_image(httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))

    with pytest.raises(SafetyBlockError):
        await dress_up_person(
            person_file, clothing_file, WorkflowOptions(), "1:1", http_client=http_client
        )


@pytest.mark.asyncio
async def test_dress_up_without_key_makes_no_calls(
    no_api_key, gemini, http_client, person_file, clothing_file
):
    with pytest.raises(ConfigurationError):
        await dress_up_person(
            person_file, clothing_file, WorkflowOptions(), "1:1", http_client=http_client
        )

    assert gemini.requests == []


@pytest.mark.asyncio
async def test_suggest_clothing_sends_text_only_request(
    api_key, gemini, http_client, person_file
):
    gemini.queue_image()

    result = await suggest_clothing(
        person_file, WorkflowOptions(style="sporty", gender="girl"), http_client=http_client
    )

    assert result.startswith("data:image/png;base64,")
    payload = gemini.payload(gemini.image_requests[0])
    parts = payload["contents"][0]["parts"]
    assert len(parts) == 1
    assert "suitable for a young adult girl" in parts[0]["text"]
    assert "'sporty' style" in parts[0]["text"]
    assert "imageConfig" not in payload["generationConfig"]


@pytest.mark.asyncio
async def test_enhance_skips_analysis(api_key, gemini, http_client, clothing_file):
    gemini.queue_image()

    await enhance_image(clothing_file, "16:9", http_client=http_client)

    assert all(config.ANALYSIS_MODEL not in str(r.url) for r in gemini.requests)
    payload = gemini.payload(gemini.image_requests[0])
    assert payload["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9"}
    assert payload["generationConfig"]["temperature"] == config.DEFAULT_TEMPERATURE
    assert "Enhance the provided image." in payload["contents"][0]["parts"][1]["text"]
