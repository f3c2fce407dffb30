from __future__ import annotations

import base64
import io
from urllib.parse import quote

from PIL import Image

from shopping_ad_agent.errors import InputValidationError
from shopping_ad_agent.models.product import ImagePayload

# 파일 선택기의 accept 필터와 동일한 허용 포맷 (Pillow format → MIME)
_SUPPORTED_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}
ACCEPTED_MIME_TYPES = tuple(_SUPPORTED_FORMATS.values())

# encodeURIComponent가 그대로 두는 문자 집합 (영숫자와 -_.~ 는 quote 기본값)
_URI_COMPONENT_SAFE = "!*'()"


def load_image_payload(raw: bytes) -> ImagePayload:
    """업로드된 파일 바이트 전체를 base64로 인코딩해 ImagePayload로 변환합니다.

    - MIME 타입은 브라우저가 보낸 Content-Type이 아니라 Pillow가 판별한 실제 포맷 기준
    - PNG / JPEG / WEBP 외 포맷은 InputValidationError
    - 4MB 제한은 안내 문구일 뿐 여기서 검사하지 않음
    """
    try:
        with Image.open(io.BytesIO(raw)) as image:
            image_format = image.format
            image.verify()
    except (OSError, SyntaxError, ValueError) as exc:
        raise InputValidationError("The selected file is not a readable image.") from exc

    mime_type = _SUPPORTED_FORMATS.get(image_format or "")
    if mime_type is None:
        raise InputValidationError("Only PNG, JPEG and WEBP images are supported.")

    return ImagePayload(
        data=base64.b64encode(raw).decode("utf-8"),
        mime_type=mime_type,
    )


def placeholder_image_url(title: str, base_url: str, size: int) -> str:
    """이미지가 없을 때 쓰는 미리보기 URL. 제목만으로 결정되는 순수 함수입니다."""
    seed = quote(title, safe=_URI_COMPONENT_SAFE)
    return f"{base_url.rstrip('/')}/{seed}/{size}/{size}"


def preview_image_url(
    image: ImagePayload | None, title: str, base_url: str, size: int
) -> str:
    """업로드 이미지가 있으면 data URL, 없으면 제목 기반 placeholder."""
    if image is not None:
        return image.data_url
    return placeholder_image_url(title, base_url, size)
