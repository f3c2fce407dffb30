from .ad import AdContent, ComplianceResult, ComplianceStatus, GeneratedAd
from .product import AnalysisResult, ImagePayload

__all__ = [
    "ImagePayload",
    "AnalysisResult",
    "ComplianceStatus",
    "ComplianceResult",
    "AdContent",
    "GeneratedAd",
]
