"""생성된 광고 카피 내보내기 (복사 / 다운로드 / 공유). 생성 서비스는 호출하지 않습니다."""
import re

from shopping_ad_agent.models.ad import GeneratedAd

DOWNLOAD_PREFIX = "shopping-ad"
DEFAULT_FILENAME_TOKEN = "product"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def format_ad_text(ad: GeneratedAd) -> str:
    return (
        f"Title:\n{ad.title}\n\n"
        f"Description:\n{ad.description}\n\n"
        f"Category:\n{ad.category}"
    )


def download_filename(product_name: str) -> str:
    """제품명 기반 파일명. 영숫자 외 문자는 '_'로 치환, 남는 게 없으면 기본 토큰."""
    slug = _NON_ALNUM.sub("_", product_name.lower()).strip("_")
    return f"{DOWNLOAD_PREFIX}-{slug or DEFAULT_FILENAME_TOKEN}.txt"


def share_payload(ad: GeneratedAd) -> dict[str, str]:
    """navigator.share()에 그대로 넘기는 값."""
    return {
        "title": f"Ad for: {ad.title}",
        "text": f'Check out the ad content generated for "{ad.title}":\n\n{ad.description}',
    }
