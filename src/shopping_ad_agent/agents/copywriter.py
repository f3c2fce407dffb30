import logging
from pathlib import Path

from pydantic import ValidationError

from shopping_ad_agent.agents.completion import (
    CompletionClient,
    CompletionRequest,
    InlineImagePart,
    TextPart,
    output_schema,
)
from shopping_ad_agent.errors import (
    CompletionError,
    GenerationFailedError,
    InputValidationError,
)
from shopping_ad_agent.models.ad import AdContent
from shopping_ad_agent.models.product import ImagePayload

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent.parent / "utils/prompt_templates"
_TEMPLATE_PATH = _TEMPLATE_DIR / "copywriter.txt"
_IMAGE_SECTION_PATH = _TEMPLATE_DIR / "copywriter_image.txt"

SCHEMA_NAME = "shopping_ad"
DEFAULT_AUDIENCE = "general"


def require_product_fields(product_name: str | None, product_details: str | None) -> None:
    if not (product_name or "").strip() or not (product_details or "").strip():
        raise InputValidationError("Please fill in the product name and details.")


def build_ad_request(
    model: str,
    product_name: str,
    product_details: str,
    target_audience: str | None = "",
    image: ImagePayload | None = None,
) -> CompletionRequest:
    require_product_fields(product_name, product_details)

    template = _TEMPLATE_PATH.read_text(encoding="utf-8")
    image_section = (
        _IMAGE_SECTION_PATH.read_text(encoding="utf-8") if image is not None else ""
    )
    # 입력값은 가공 없이 그대로 삽입
    prompt = template.format(
        product_name=product_name,
        product_details=product_details,
        target_audience=target_audience or DEFAULT_AUDIENCE,
        image_section=image_section,
    )

    parts: tuple = (TextPart(prompt),)
    if image is not None:
        parts += (InlineImagePart(data=image.data, mime_type=image.mime_type),)

    return CompletionRequest(
        model=model,
        parts=parts,
        schema_name=SCHEMA_NAME,
        schema=output_schema(AdContent),
    )


async def generate_ad_content(
    client: CompletionClient,
    product_name: str,
    product_details: str,
    target_audience: str | None = "",
    image: ImagePayload | None = None,
) -> AdContent:
    """제품 정보 (+이미지) → 제목 / 설명 / 카테고리 / 컴플라이언스 판정.

    외부 호출은 정확히 한 번. 전송 오류나 스키마 파싱 실패는 모두 GenerationFailedError.
    """
    request = build_ad_request(
        client.model,
        product_name=product_name,
        product_details=product_details,
        target_audience=target_audience,
        image=image,
    )

    raw = ""
    try:
        raw = await client.complete(request)
        return AdContent.model_validate_json(raw)
    except (CompletionError, ValidationError) as exc:
        logger.exception("Ad generation failed. Raw response: %r", raw)
        raise GenerationFailedError("Ad generation failed") from exc
