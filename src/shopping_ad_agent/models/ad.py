from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComplianceStatus(str, Enum):
    APPROVED = "approved"
    REVIEW_NEEDED = "review_needed"


class ComplianceResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: ComplianceStatus = Field(
        description="Compliance status: 'approved' or 'review_needed'."
    )
    feedback: str = Field(
        description="Detailed explanation of the compliance analysis."
    )


class AdContent(BaseModel):
    """Generate 결과. 제목 150자 / 설명 5000자 제한은 프롬프트로 요청만 하고 검증하지 않습니다."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(description="The SEO-optimized product title.")
    description: str = Field(description="The optimized product description.")
    category: str = Field(description="The suggested Google product category path.")
    compliance: ComplianceResult

    @property
    def compliance_status(self) -> ComplianceStatus:
        return self.compliance.status

    @property
    def compliance_feedback(self) -> str:
        return self.compliance.feedback


class GeneratedAd(BaseModel):
    """화면 표시용 광고: AdContent의 카피 + 미리보기 이미지 URL."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    category: str
    image_url: str = Field(description="업로드 이미지의 data URL 또는 제목 기반 placeholder URL")

    @classmethod
    def from_content(cls, content: AdContent, image_url: str) -> "GeneratedAd":
        return cls(
            title=content.title,
            description=content.description,
            category=content.category,
            image_url=image_url,
        )
