from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from shopping_ad_agent.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Generation service
    provider: Literal["openai", "anthropic"] = "openai"
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # 분석(Analyze)과 생성(Generate)은 같은 모델을 사용
    openai_model: str = "gpt-4.1-mini"
    anthropic_model: str = "claude-sonnet-4-6"
    # 설명문 최대 5000자 + 컴플라이언스 피드백을 담을 수 있는 크기
    max_output_tokens: int = 4096

    # Presentation
    placeholder_image_base_url: str = "https://picsum.photos/seed"
    placeholder_image_size: int = 600
    copy_feedback_seconds: float = 2.0

    # Web server
    host: str = "127.0.0.1"
    port: int = 8000
    # 메모리 세션 상한 (초과 시 가장 오래된 세션부터 제거)
    max_sessions: int = 1000

    # SSL / Proxy Configuration
    # 기업 프록시 환경에서 SSL 검증 오류 발생 시 false로 설정
    ssl_verify: bool = True
    # 커스텀 CA 인증서 경로 (비워두면 certifi 기본값 사용)
    ca_bundle_path: str = ""

    @property
    def model(self) -> str:
        return self.anthropic_model if self.provider == "anthropic" else self.openai_model

    @property
    def api_key(self) -> str:
        return self.anthropic_api_key if self.provider == "anthropic" else self.openai_api_key


def require_api_key(settings: Settings) -> str:
    """선택된 provider의 API 키를 반환합니다. 없으면 기동 자체가 불가능합니다."""
    if not settings.api_key:
        env_name = f"{settings.provider.upper()}_API_KEY"
        raise ConfigurationError(f"{env_name} environment variable not set.")
    return settings.api_key


@lru_cache
def get_settings() -> Settings:
    return Settings()
