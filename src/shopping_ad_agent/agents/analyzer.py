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
    AnalysisFailedError,
    CompletionError,
    InputValidationError,
)
from shopping_ad_agent.models.product import AnalysisResult, ImagePayload

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent.parent / "utils/prompt_templates"
_IMAGE_TEMPLATE_PATH = _TEMPLATE_DIR / "analyzer_image.txt"
_URL_TEMPLATE_PATH = _TEMPLATE_DIR / "analyzer_url.txt"

SCHEMA_NAME = "product_analysis"


def require_analysis_input(image: ImagePayload | None, product_url: str | None) -> None:
    if image is None and not (product_url or "").strip():
        raise InputValidationError("Please upload an image or enter a link to analyze.")


def build_analysis_request(
    model: str,
    image: ImagePayload | None = None,
    product_url: str | None = None,
) -> CompletionRequest:
    """이미지가 있으면 이미지 기준, 없으면 링크를 프롬프트에 그대로 넣습니다.

    링크만 있는 경우 모델은 URL에 접속하지 않고 일반 지식으로 답하도록 지시받습니다.
    """
    require_analysis_input(image, product_url)

    if image is not None:
        prompt = _IMAGE_TEMPLATE_PATH.read_text(encoding="utf-8")
        parts = (
            TextPart(prompt),
            InlineImagePart(data=image.data, mime_type=image.mime_type),
        )
    else:
        template = _URL_TEMPLATE_PATH.read_text(encoding="utf-8")
        parts = (TextPart(template.format(product_url=product_url.strip())),)

    return CompletionRequest(
        model=model,
        parts=parts,
        schema_name=SCHEMA_NAME,
        schema=output_schema(AnalysisResult),
    )


async def analyze_product(
    client: CompletionClient,
    image: ImagePayload | None = None,
    product_url: str | None = None,
) -> AnalysisResult:
    """제품 이미지 및/또는 링크 → {productName, productDetails, targetAudience} 추정.

    외부 호출은 정확히 한 번. 전송 오류나 스키마 파싱 실패는 모두 AnalysisFailedError.
    """
    request = build_analysis_request(client.model, image=image, product_url=product_url)

    raw = ""
    try:
        raw = await client.complete(request)
        return AnalysisResult.model_validate_json(raw)
    except (CompletionError, ValidationError) as exc:
        logger.exception("Product analysis failed. Raw response: %r", raw)
        raise AnalysisFailedError("Product analysis failed") from exc
