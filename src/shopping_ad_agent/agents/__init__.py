from .analyzer import analyze_product
from .completion import create_completion_client
from .copywriter import generate_ad_content

__all__ = [
    "analyze_product",
    "generate_ad_content",
    "create_completion_client",
]
