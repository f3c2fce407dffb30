"""
사용법:
  uv run python -m shopping_ad_agent

브라우저 폼 서버를 띄우는 진입점.
API 키(OPENAI_API_KEY 또는 PROVIDER=anthropic 시 ANTHROPIC_API_KEY)가 없으면 즉시 종료합니다.
"""
import logging
import sys

import uvicorn

from shopping_ad_agent.config import get_settings
from shopping_ad_agent.errors import ConfigurationError
from shopping_ad_agent.web.app import create_app

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("shopping_ad_agent")


def main() -> None:
    settings = get_settings()
    try:
        app = create_app(settings)
    except ConfigurationError as exc:
        logger.critical("Startup aborted: %s", exc)
        sys.exit(1)

    logger.info("Serving on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
