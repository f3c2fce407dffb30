"""
화면 상태 머신

두 흐름(Analyze / Generate)은 서로 독립적이며 잠금을 공유하지 않습니다.
  idle → in_progress → succeeded | failed → (다시 호출하면) in_progress ...

- 진행 중 재호출은 무시 (버튼 비활성화와 동일한 효과, 취소 기능 없음)
- 실패 시 사용자에게는 흐름별 고정 문구만 표시하고 상세 원인은 로그로만 남김
- Analyze 성공은 입력 필드를 채울 뿐 Generate를 자동 실행하지 않음
"""
from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum

from shopping_ad_agent.agents.analyzer import analyze_product, require_analysis_input
from shopping_ad_agent.agents.completion import CompletionClient
from shopping_ad_agent.agents.copywriter import (
    generate_ad_content,
    require_product_fields,
)
from shopping_ad_agent.config import Settings
from shopping_ad_agent.errors import (
    AnalysisFailedError,
    GenerationFailedError,
    InputValidationError,
)
from shopping_ad_agent.models.ad import ComplianceResult, GeneratedAd
from shopping_ad_agent.models.product import AnalysisResult, ImagePayload
from shopping_ad_agent.utils.image_utils import preview_image_url

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "An error occurred while analyzing the product. Please try again."
GENERATION_FAILED_MESSAGE = (
    "An error occurred while generating the ad. Check your API key and try again."
)


class FlowStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Flow:
    """하나의 요청/응답 흐름 상태."""

    def __init__(self, failure_message: str):
        self.failure_message = failure_message
        self.status = FlowStatus.IDLE
        self.error: str | None = None

    @property
    def in_progress(self) -> bool:
        return self.status is FlowStatus.IN_PROGRESS

    def start(self) -> None:
        self.status = FlowStatus.IN_PROGRESS
        self.error = None

    def succeed(self) -> None:
        self.status = FlowStatus.SUCCEEDED
        self.error = None

    def fail(self) -> None:
        self.status = FlowStatus.FAILED
        self.error = self.failure_message

    def reject(self, message: str) -> None:
        """입력 검증 실패: 외부 호출 없이 메시지만 표시."""
        self.status = FlowStatus.IDLE
        self.error = message


@dataclass
class StudioSession:
    """브라우저 세션 하나의 폼 상태와 결과."""

    product_name: str = ""
    product_details: str = ""
    target_audience: str = ""
    product_url: str = ""
    image: ImagePayload | None = None
    upload_error: str | None = None

    analysis: Flow = field(default_factory=lambda: Flow(ANALYSIS_FAILED_MESSAGE))
    generation: Flow = field(default_factory=lambda: Flow(GENERATION_FAILED_MESSAGE))

    analysis_result: AnalysisResult | None = None
    generated_ad: GeneratedAd | None = None
    compliance: ComplianceResult | None = None

    @property
    def can_analyze(self) -> bool:
        return not self.analysis.in_progress and (
            self.image is not None or bool(self.product_url.strip())
        )

    def set_image(self, image: ImagePayload | None) -> None:
        self.image = image
        self.upload_error = None


class AdStudio:
    """세션 상태를 두 생성 서비스 호출에 연결합니다.

    호출이 어떻게 끝나든(예외, 취소 포함) 흐름은 in_progress에 남지 않습니다.
    """

    def __init__(self, client: CompletionClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def analyze(self, session: StudioSession) -> None:
        try:
            require_analysis_input(session.image, session.product_url)
        except InputValidationError as exc:
            session.analysis.reject(str(exc))
            return

        if session.analysis.in_progress:
            logger.warning("Analysis already in progress; ignoring duplicate request")
            return

        session.analysis.start()
        session.generation.error = None
        session.analysis_result = None
        logger.info("Analysis started (image=%s, url=%r)", session.image is not None, session.product_url)

        try:
            result = await analyze_product(
                self.client,
                image=session.image,
                product_url=session.product_url.strip(),
            )
        except AnalysisFailedError:
            logger.warning("Analysis flow failed")
            session.analysis.fail()
        except Exception:
            logger.exception("Analysis flow failed with an unexpected error")
            session.analysis.fail()
        else:
            session.analysis_result = result
            session.product_name = result.product_name
            session.product_details = result.product_details
            session.target_audience = result.target_audience
            session.analysis.succeed()
            logger.info("Analysis succeeded: %s", result.product_name)
        finally:
            # 취소(CancelledError)는 Exception이 아님
            if session.analysis.in_progress:
                logger.warning("Analysis interrupted")
                session.analysis.fail()

    async def generate(self, session: StudioSession) -> None:
        try:
            require_product_fields(session.product_name, session.product_details)
        except InputValidationError as exc:
            session.generation.reject(str(exc))
            return

        if session.generation.in_progress:
            logger.warning("Generation already in progress; ignoring duplicate request")
            return

        session.generation.start()
        session.generated_ad = None
        session.compliance = None
        logger.info("Generation started for %r", session.product_name)

        try:
            content = await generate_ad_content(
                self.client,
                product_name=session.product_name,
                product_details=session.product_details,
                target_audience=session.target_audience,
                image=session.image,
            )
            image_url = preview_image_url(
                session.image,
                content.title,
                base_url=self.settings.placeholder_image_base_url,
                size=self.settings.placeholder_image_size,
            )
        except GenerationFailedError:
            logger.warning("Generation flow failed")
            session.generation.fail()
        except Exception:
            logger.exception("Generation flow failed with an unexpected error")
            session.generation.fail()
        else:
            session.generated_ad = GeneratedAd.from_content(content, image_url)
            session.compliance = content.compliance
            session.generation.succeed()
            logger.info(
                "Generation succeeded: compliance=%s", content.compliance_status.value
            )
        finally:
            if session.generation.in_progress:
                logger.warning("Generation interrupted")
                session.generation.fail()


class SessionStore:
    """메모리 전용 세션 저장소 (영속화 없음).

    max_sessions를 넘으면 가장 오래 사용하지 않은 세션부터 버립니다.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, StudioSession] = OrderedDict()

    def get(self, session_id: str | None) -> StudioSession | None:
        """조회 전용. 없는 id면 None이며 새 세션을 만들지 않습니다."""
        if not session_id or session_id not in self._sessions:
            return None
        self._sessions.move_to_end(session_id)
        return self._sessions[session_id]

    def get_or_create(self, session_id: str | None) -> tuple[str, StudioSession]:
        session = self.get(session_id)
        if session is not None:
            return session_id, session

        new_id = uuid.uuid4().hex
        session = StudioSession()
        self._sessions[new_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted idle session %s", evicted_id)
        return new_id, session

    def __len__(self) -> int:
        return len(self._sessions)
