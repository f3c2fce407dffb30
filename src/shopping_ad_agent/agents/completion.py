"""
생성 서비스 경계

작업(Analyze / Generate)마다 CompletionRequest 하나를 만들어 정확히 한 번 호출합니다.
응답은 선언한 스키마에 맞춘 JSON 텍스트 그대로 돌려주고, 파싱은 호출한 쪽 책임입니다.
재시도 / fallback 모델 없음.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import anthropic
import openai
from pydantic import BaseModel

from shopping_ad_agent.config import Settings, require_api_key
from shopping_ad_agent.errors import CompletionError
from shopping_ad_agent.utils.http_client import (
    create_anthropic_client,
    create_openai_client,
)

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class TextPart:
    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class InlineImagePart:
    data: str
    mime_type: str
    kind: Literal["inline_image"] = "inline_image"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


Part = TextPart | InlineImagePart


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    parts: tuple[Part, ...]
    schema_name: str
    schema: dict[str, Any]
    response_mime_type: str = JSON_MIME_TYPE

    @property
    def prompt(self) -> str:
        """요청에 포함된 텍스트 파트 전체."""
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))

    @property
    def images(self) -> list[InlineImagePart]:
        return [part for part in self.parts if isinstance(part, InlineImagePart)]


class CompletionClient(Protocol):
    model: str

    async def complete(self, request: CompletionRequest) -> str: ...


# ── 출력 스키마 ────────────────────────────────────────────────────────────


def _inline_refs(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    # pydantic 버전에 따라 {"allOf": [{"$ref": ...}], "description": ...} 형태로 감싸기도 함
    if "allOf" in node and len(node["allOf"]) == 1:
        rest = {k: v for k, v in node.items() if k != "allOf"}
        return {**_inline_refs(node["allOf"][0], defs), **rest}

    if "$ref" in node:
        target = defs[node["$ref"].rsplit("/", 1)[-1]]
        rest = {k: v for k, v in node.items() if k != "$ref"}
        return {**_inline_refs(target, defs), **rest}

    return {key: _inline_refs(value, defs) for key, value in node.items()}


def _close_objects(node: Any) -> Any:
    if isinstance(node, list):
        return [_close_objects(item) for item in node]
    if not isinstance(node, dict):
        return node

    closed = {key: _close_objects(value) for key, value in node.items()}
    if closed.get("type") == "object":
        closed["additionalProperties"] = False
        closed["required"] = list(closed.get("properties", {}))
    return closed


def output_schema(model_cls: type[BaseModel]) -> dict[str, Any]:
    """pydantic 모델에서 strict 출력 스키마를 만듭니다.

    - $ref / $defs 인라인 (Anthropic tool input_schema와 OpenAI strict 모드 공통 형태)
    - 모든 object: additionalProperties=false, 모든 필드 required
    - 필드 이름은 alias 기준 (productName 등 wire 키)
    """
    schema = model_cls.model_json_schema(by_alias=True)
    defs = schema.pop("$defs", {})
    return _close_objects(_inline_refs(schema, defs))


# ── Backends ─────────────────────────────────────────────────────────────


def _require_json(request: CompletionRequest) -> None:
    if request.response_mime_type != JSON_MIME_TYPE:
        raise ValueError(f"Unsupported response MIME type: {request.response_mime_type}")


class OpenAICompletionClient:
    """Chat Completions + json_schema(strict) response_format."""

    def __init__(self, client: openai.AsyncOpenAI, model: str, max_tokens: int):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @staticmethod
    def _to_content(parts: tuple[Part, ...]) -> list[dict]:
        content: list[dict] = []
        for part in parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            else:
                content.append(
                    {
                        "type": "image_url",
                        "image_url": {"url": part.data_url, "detail": "high"},
                    }
                )
        return content

    async def complete(self, request: CompletionRequest) -> str:
        _require_json(request)
        try:
            response = await self._client.chat.completions.create(
                model=request.model,
                messages=[{"role": "user", "content": self._to_content(request.parts)}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": request.schema_name,
                        "schema": request.schema,
                        "strict": True,
                    },
                },
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as exc:
            raise CompletionError(f"OpenAI request failed: {exc}") from exc

        message = response.choices[0].message
        if not message.content:
            raise CompletionError(f"OpenAI returned no content (refusal={message.refusal!r})")
        return message.content.strip()


class AnthropicCompletionClient:
    """Messages API. 출력 스키마는 강제 호출되는 tool 하나로 선언합니다."""

    def __init__(self, client: anthropic.AsyncAnthropic, model: str, max_tokens: int):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @staticmethod
    def _to_content(parts: tuple[Part, ...]) -> list[dict]:
        content: list[dict] = []
        for part in parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            else:
                content.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": part.mime_type,
                            "data": part.data,
                        },
                    }
                )
        return content

    async def complete(self, request: CompletionRequest) -> str:
        _require_json(request)
        try:
            response = await self._client.messages.create(
                model=request.model,
                max_tokens=self.max_tokens,
                tools=[
                    {
                        "name": request.schema_name,
                        "description": "Return the result strictly in this JSON format.",
                        "input_schema": request.schema,
                    }
                ],
                tool_choice={"type": "tool", "name": request.schema_name},
                messages=[{"role": "user", "content": self._to_content(request.parts)}],
            )
        except anthropic.AnthropicError as exc:
            raise CompletionError(f"Anthropic request failed: {exc}") from exc

        for block in response.content:
            if block.type == "tool_use":
                return json.dumps(block.input, ensure_ascii=False)
        raise CompletionError(f"Anthropic returned no tool_use block (stop_reason={response.stop_reason})")


def create_completion_client(settings: Settings) -> CompletionClient:
    """설정된 provider의 클라이언트를 만듭니다. API 키가 없으면 ConfigurationError."""
    require_api_key(settings)
    if settings.provider == "anthropic":
        client: CompletionClient = AnthropicCompletionClient(
            create_anthropic_client(settings),
            model=settings.anthropic_model,
            max_tokens=settings.max_output_tokens,
        )
    else:
        client = OpenAICompletionClient(
            create_openai_client(settings),
            model=settings.openai_model,
            max_tokens=settings.max_output_tokens,
        )
    logger.info("Generation service: provider=%s model=%s", settings.provider, client.model)
    return client
