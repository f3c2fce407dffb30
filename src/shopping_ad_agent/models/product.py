from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    """사용자가 선택한 제품 이미지 한 장. 요청 한 사이클 동안만 유지됩니다."""

    model_config = ConfigDict(frozen=True)

    data: str = Field(description="base64 인코딩된 이미지 바이트")
    mime_type: str = Field(description="image/png | image/jpeg | image/webp")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class AnalysisResult(BaseModel):
    """Analyze 결과. 생성 폼의 입력값을 미리 채우는 데만 사용됩니다."""

    # wire 키(camelCase)로만 채울 수 있음
    model_config = ConfigDict(frozen=True, extra="forbid")

    product_name: str = Field(
        alias="productName", description="The extracted product name."
    )
    product_details: str = Field(
        alias="productDetails", description="The product's details and characteristics."
    )
    target_audience: str = Field(
        alias="targetAudience", description="The suggested target audience."
    )
