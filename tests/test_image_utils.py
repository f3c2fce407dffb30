"""업로드 이미지 처리 / placeholder URL 테스트"""
import base64
import io

import pytest
from PIL import Image

from shopping_ad_agent.errors import InputValidationError
from shopping_ad_agent.models.product import ImagePayload
from shopping_ad_agent.utils.image_utils import (
    load_image_payload,
    placeholder_image_url,
    preview_image_url,
)


def _image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.mark.parametrize(
    "fmt, mime",
    [("PNG", "image/png"), ("JPEG", "image/jpeg"), ("WEBP", "image/webp")],
)
def test_load_image_payload_detects_format(fmt, mime):
    raw = _image_bytes(fmt)
    payload = load_image_payload(raw)
    assert payload.mime_type == mime
    assert base64.b64decode(payload.data) == raw


def test_load_image_payload_rejects_unsupported_format():
    with pytest.raises(InputValidationError):
        load_image_payload(_image_bytes("GIF"))


def test_load_image_payload_rejects_non_image():
    with pytest.raises(InputValidationError):
        load_image_payload(b"definitely not an image")


def test_placeholder_url_matches_encode_uri_component():
    url = placeholder_image_url("Shoe & Co / 38-44 (blue)", "https://picsum.photos/seed", 600)
    assert url == "https://picsum.photos/seed/Shoe%20%26%20Co%20%2F%2038-44%20(blue)/600/600"


def test_placeholder_url_is_deterministic():
    a = placeholder_image_url("Ultra-light running shoe", "https://picsum.photos/seed/", 600)
    b = placeholder_image_url("Ultra-light running shoe", "https://picsum.photos/seed", 600)
    assert a == b == "https://picsum.photos/seed/Ultra-light%20running%20shoe/600/600"


def test_preview_prefers_uploaded_image():
    image = ImagePayload(data="aGVsbG8=", mime_type="image/png")
    url = preview_image_url(image, "title", "https://picsum.photos/seed", 600)
    assert url == "data:image/png;base64,aGVsbG8="
