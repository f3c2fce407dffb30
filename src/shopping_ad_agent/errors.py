"""에러 계층

- InputValidationError: 호출 전 입력 검증 실패 (외부 호출 없음, 화면에 바로 표시)
- CompletionError: 생성 서비스 전송/SDK 오류 또는 빈 응답
- AnalysisFailedError / GenerationFailedError: 흐름 단위 실패 (사용자에게는 고정 문구만 노출)
- ConfigurationError: 기동 시 치명적 설정 오류
"""


class AdAgentError(Exception):
    """Base class for all shopping_ad_agent errors."""


class InputValidationError(AdAgentError):
    """Required input missing; the generation service was not called."""


class CompletionError(AdAgentError):
    """The generation service call failed or returned nothing usable."""


class AnalysisFailedError(AdAgentError):
    """Analyze flow failed; no partial result."""


class GenerationFailedError(AdAgentError):
    """Generate flow failed; no partial result."""


class ConfigurationError(AdAgentError):
    """Startup configuration is invalid (e.g. missing API key)."""
