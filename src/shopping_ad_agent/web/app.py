"""
브라우저 폼 UI + JSON API

  GET  /              폼 + 결과 화면
  POST /analyze       폼 저장 → Analyze → 303 /
  POST /generate      폼 저장 → Generate → 303 /
  POST /image/remove  선택 이미지 해제
  GET  /export.txt    광고 카피 텍스트 다운로드
  POST /api/analyze   세션 없는 JSON API
  POST /api/generate  세션 없는 JSON API
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import Cookie, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from shopping_ad_agent.agents.analyzer import analyze_product
from shopping_ad_agent.agents.completion import CompletionClient, create_completion_client
from shopping_ad_agent.agents.copywriter import generate_ad_content
from shopping_ad_agent.config import Settings, get_settings
from shopping_ad_agent.errors import (
    AnalysisFailedError,
    GenerationFailedError,
    InputValidationError,
)
from shopping_ad_agent.export import download_filename, format_ad_text, share_payload
from shopping_ad_agent.models.ad import ComplianceResult, GeneratedAd
from shopping_ad_agent.models.product import AnalysisResult, ImagePayload
from shopping_ad_agent.studio import (
    ANALYSIS_FAILED_MESSAGE,
    GENERATION_FAILED_MESSAGE,
    AdStudio,
    SessionStore,
    StudioSession,
)
from shopping_ad_agent.utils.image_utils import (
    ACCEPTED_MIME_TYPES,
    load_image_payload,
    preview_image_url,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "ad_studio_session"
_TEMPLATES_DIR = Path(__file__).parent / "templates"


class AnalyzeRequest(BaseModel):
    image: ImagePayload | None = None
    product_url: str | None = None


class GenerateRequest(BaseModel):
    product_name: str = ""
    product_details: str = ""
    target_audience: str = ""
    image: ImagePayload | None = None


class GenerateResponse(BaseModel):
    ad: GeneratedAd
    compliance: ComplianceResult


@dataclass
class ProductForm:
    product_name: str
    product_details: str
    target_audience: str
    product_url: str
    image: UploadFile | None


async def product_form(
    product_name: str = Form(""),
    product_details: str = Form(""),
    target_audience: str = Form(""),
    product_url: str = Form(""),
    image: UploadFile | None = File(default=None),
) -> ProductForm:
    return ProductForm(product_name, product_details, target_audience, product_url, image)


async def _apply_form(session: StudioSession, form: ProductForm) -> None:
    session.product_name = form.product_name
    session.product_details = form.product_details
    session.target_audience = form.target_audience
    session.product_url = form.product_url

    # 파일을 새로 고르지 않은 제출은 기존 이미지를 유지
    if form.image is None or not form.image.filename:
        return
    raw = await form.image.read()
    if not raw:
        return
    try:
        session.set_image(load_image_payload(raw))
    except InputValidationError as exc:
        logger.warning("Rejected upload %r: %s", form.image.filename, exc)
        session.upload_error = str(exc)


def create_app(
    settings: Settings | None = None,
    client: CompletionClient | None = None,
) -> FastAPI:
    """앱 팩토리. client를 넘기지 않으면 설정으로 생성하며, API 키가 없으면 여기서 실패합니다."""
    settings = settings or get_settings()
    client = client or create_completion_client(settings)
    studio = AdStudio(client, settings)
    sessions = SessionStore(max_sessions=settings.max_sessions)
    templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    app = FastAPI(title="Shopping Ad Agent")
    app.state.settings = settings
    app.state.studio = studio
    app.state.sessions = sessions

    def _redirect_home(session_id: str) -> RedirectResponse:
        response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        return response

    @app.get("/", response_class=HTMLResponse)
    async def index(
        request: Request,
        session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ):
        session_id, session = sessions.get_or_create(session_id)
        ad = session.generated_ad
        context = {
            "session": session,
            "accepted_types": ",".join(ACCEPTED_MIME_TYPES),
            "copy_feedback_ms": int(settings.copy_feedback_seconds * 1000),
            "export_text": format_ad_text(ad) if ad else "",
            "share": share_payload(ad) if ad else None,
        }
        response = templates.TemplateResponse(request, "index.html", context)
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        return response

    @app.post("/analyze")
    async def analyze(
        form: ProductForm = Depends(product_form),
        session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ):
        session_id, session = sessions.get_or_create(session_id)
        await _apply_form(session, form)
        await studio.analyze(session)
        return _redirect_home(session_id)

    @app.post("/generate")
    async def generate(
        form: ProductForm = Depends(product_form),
        session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ):
        session_id, session = sessions.get_or_create(session_id)
        await _apply_form(session, form)
        await studio.generate(session)
        return _redirect_home(session_id)

    @app.post("/image/remove")
    async def remove_image(
        form: ProductForm = Depends(product_form),
        session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ):
        session_id, session = sessions.get_or_create(session_id)
        form.image = None
        await _apply_form(session, form)
        session.set_image(None)
        return _redirect_home(session_id)

    @app.get("/export.txt")
    async def export_text(
        session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    ) -> PlainTextResponse:
        session = sessions.get(session_id)
        if session is None or session.generated_ad is None:
            raise HTTPException(status_code=404, detail="No generated ad to export.")
        filename = download_filename(session.product_name)
        return PlainTextResponse(
            format_ad_text(session.generated_ad),
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/api/analyze", response_model=AnalysisResult)
    async def api_analyze(payload: AnalyzeRequest) -> AnalysisResult:
        try:
            return await analyze_product(
                client, image=payload.image, product_url=payload.product_url
            )
        except InputValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except AnalysisFailedError:
            raise HTTPException(status_code=502, detail=ANALYSIS_FAILED_MESSAGE)

    @app.post("/api/generate", response_model=GenerateResponse)
    async def api_generate(payload: GenerateRequest) -> GenerateResponse:
        try:
            content = await generate_ad_content(
                client,
                product_name=payload.product_name,
                product_details=payload.product_details,
                target_audience=payload.target_audience,
                image=payload.image,
            )
        except InputValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except GenerationFailedError:
            raise HTTPException(status_code=502, detail=GENERATION_FAILED_MESSAGE)

        image_url = preview_image_url(
            payload.image,
            content.title,
            base_url=settings.placeholder_image_base_url,
            size=settings.placeholder_image_size,
        )
        return GenerateResponse(
            ad=GeneratedAd.from_content(content, image_url),
            compliance=content.compliance,
        )

    return app
