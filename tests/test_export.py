"""결과 내보내기 테스트: 텍스트 블록 / 파일명 / 공유 payload"""
import pytest

from shopping_ad_agent.export import download_filename, format_ad_text, share_payload
from shopping_ad_agent.models.ad import GeneratedAd


def _make_ad():
    return GeneratedAd(
        title="Ultra-light Running Shoe",
        description="Breathable mesh upper.\nSizes 38-44.",
        category="Apparel & Accessories > Shoes",
        image_url="https://picsum.photos/seed/x/600/600",
    )


def test_format_ad_text_fixed_order_and_headers():
    assert format_ad_text(_make_ad()) == (
        "Title:\nUltra-light Running Shoe\n\n"
        "Description:\nBreathable mesh upper.\nSizes 38-44.\n\n"
        "Category:\nApparel & Accessories > Shoes"
    )


def test_format_ad_text_is_reproducible():
    assert format_ad_text(_make_ad()) == format_ad_text(_make_ad())


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Ultra-light Running Shoe", "shopping-ad-ultra_light_running_shoe.txt"),
        ("Tênis 42", "shopping-ad-t_nis_42.txt"),
        ("  Mug!  ", "shopping-ad-mug.txt"),
        ("", "shopping-ad-product.txt"),
        ("!!! ???", "shopping-ad-product.txt"),
    ],
)
def test_download_filename(name, expected):
    assert download_filename(name) == expected


def test_share_payload():
    payload = share_payload(_make_ad())
    assert payload["title"] == "Ad for: Ultra-light Running Shoe"
    assert payload["text"].startswith('Check out the ad content generated for "Ultra-light Running Shoe":\n\n')
    assert payload["text"].endswith("Sizes 38-44.")
