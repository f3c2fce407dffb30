"""Generate 요청 빌더 테스트: 프롬프트 내용 / 이미지 파트 / 실패 처리"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from shopping_ad_agent.agents.copywriter import generate_ad_content
from shopping_ad_agent.errors import (
    CompletionError,
    GenerationFailedError,
    InputValidationError,
)
from shopping_ad_agent.models.ad import AdContent, ComplianceStatus
from shopping_ad_agent.models.product import ImagePayload

AD_JSON = json.dumps(
    {
        "title": "Ultra-light Running Shoe with Breathable Mesh",
        "description": "Run further with a featherweight shoe.",
        "category": "Apparel & Accessories > Shoes",
        "compliance": {"status": "approved", "feedback": "No policy issues found."},
    }
)


def _make_client(*responses):
    client = MagicMock()
    client.model = "test-model"
    client.complete = AsyncMock(side_effect=list(responses))
    return client


@pytest.mark.asyncio
async def test_blank_audience_falls_back_to_general():
    client = _make_client(AD_JSON)

    result = await generate_ad_content(
        client,
        product_name="Ultra-light running shoe",
        product_details="breathable mesh, size 38-44",
        target_audience="",
    )

    assert isinstance(result, AdContent)
    assert result.compliance_status is ComplianceStatus.APPROVED
    request = client.complete.await_args.args[0]
    assert "**Target audience:** general" in request.prompt
    assert request.images == []


@pytest.mark.asyncio
async def test_fields_are_embedded_verbatim():
    client = _make_client(AD_JSON)

    await generate_ad_content(
        client,
        product_name="Mug {large}",
        product_details="Ceramic, 350ml <dishwasher safe>",
        target_audience="Coffee lovers 25-40",
    )

    prompt = client.complete.await_args.args[0].prompt
    assert "**Product name:** Mug {large}" in prompt
    assert "**Product details:** Ceramic, 350ml <dishwasher safe>" in prompt
    assert "**Target audience:** Coffee lovers 25-40" in prompt
    assert "general" not in prompt.split("**Target audience:**")[1].splitlines()[0]


@pytest.mark.asyncio
async def test_prompt_requests_all_four_outputs():
    client = _make_client(AD_JSON)

    await generate_ad_content(client, product_name="Mug", product_details="Ceramic")

    request = client.complete.await_args.args[0]
    assert "150 characters" in request.prompt
    assert "5000 characters" in request.prompt
    assert "Google Product Category" in request.prompt
    assert "'approved' or 'review_needed'" in request.prompt
    assert request.schema_name == "shopping_ad"
    assert set(request.schema["required"]) == {"title", "description", "category", "compliance"}


@pytest.mark.asyncio
async def test_image_is_attached_with_visual_cue_instruction():
    client = _make_client(AD_JSON)
    image = ImagePayload(data="aGVsbG8=", mime_type="image/png")

    await generate_ad_content(client, product_name="Mug", product_details="Ceramic", image=image)

    request = client.complete.await_args.args[0]
    assert len(request.images) == 1
    assert request.images[0].data == "aGVsbG8="
    assert "visual cues" in request.prompt


@pytest.mark.asyncio
async def test_no_image_means_no_visual_cue_instruction():
    client = _make_client(AD_JSON)

    await generate_ad_content(client, product_name="Mug", product_details="Ceramic")

    assert "visual cues" not in client.complete.await_args.args[0].prompt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, details",
    [("", "Ceramic"), ("Mug", ""), ("   ", "Ceramic"), (None, "Ceramic")],
)
async def test_missing_required_fields_make_no_call(name, details):
    client = _make_client(AD_JSON)

    with pytest.raises(InputValidationError):
        await generate_ad_content(client, product_name=name, product_details=details)

    client.complete.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        "{broken",
        json.dumps({"title": "t", "description": "d", "category": "c"}),
        json.dumps(
            {
                "title": "t",
                "description": "d",
                "category": "c",
                "compliance": {"status": "approved"},
            }
        ),
    ],
)
async def test_unparseable_response_fails(response):
    client = _make_client(response)

    with pytest.raises(GenerationFailedError):
        await generate_ad_content(client, product_name="Mug", product_details="Ceramic")


@pytest.mark.asyncio
async def test_transport_error_fails_without_retry():
    client = _make_client(CompletionError("503"), AD_JSON)

    with pytest.raises(GenerationFailedError):
        await generate_ad_content(client, product_name="Mug", product_details="Ceramic")

    assert client.complete.await_count == 1
