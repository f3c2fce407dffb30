"""
생성 서비스 SDK 클라이언트 팩토리

기업 프록시 환경의 SSL 인증서 오류를 처리합니다.
SSL_VERIFY=false 또는 CA_BUNDLE_PATH 설정으로 동작을 제어합니다.
API 키는 전역 환경변수가 아니라 전달받은 Settings에서만 읽습니다.
"""
import logging
import ssl

import certifi
import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from shopping_ad_agent.config import Settings

logger = logging.getLogger(__name__)


def _build_ssl_context(settings: Settings) -> ssl.SSLContext | bool | str:
    """환경설정에 따라 httpx verify 값을 반환합니다.

    Returns:
        - ssl.SSLContext: 커스텀 CA 번들 사용 시
        - str (certifi 경로): 기본 동작
        - False: SSL 검증 비활성화 (프록시 환경 임시 우회용)
    """
    if not settings.ssl_verify:
        logger.warning("SSL verification disabled for generation service calls (SSL_VERIFY=false)")
        return False

    if settings.ca_bundle_path:
        # 기업 CA 인증서를 certifi 기본 번들과 합쳐서 사용
        ctx = ssl.create_default_context(cafile=certifi.where())
        ctx.load_verify_locations(cafile=settings.ca_bundle_path)
        return ctx

    return certifi.where()


def create_openai_client(settings: Settings) -> AsyncOpenAI:
    """SSL 설정이 적용된 AsyncOpenAI 클라이언트를 생성합니다."""
    http_client = httpx.AsyncClient(verify=_build_ssl_context(settings))
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        http_client=http_client,
    )


def create_anthropic_client(settings: Settings) -> AsyncAnthropic:
    """SSL 설정이 적용된 AsyncAnthropic 클라이언트를 생성합니다."""
    http_client = httpx.AsyncClient(verify=_build_ssl_context(settings))
    return AsyncAnthropic(
        api_key=settings.anthropic_api_key,
        http_client=http_client,
    )
