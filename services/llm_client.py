# services/llm_client.py

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

from google import genai
from google.genai import errors, types
from pydantic import BaseModel, Field

from app.exceptions import AuthorizationError, ModelCallError
from models.audit_models import Coordinates, GroundingCitation
from services.credentials import current_api_key

logger = logging.getLogger(__name__)

# キー未登録・無効キー時に Gemini が返すステータス
# （無効キーでは 404 "Requested entity was not found." が返ってくる）
AUTH_ERROR_CODES = (401, 403, 404)


def _is_authorization_error(e: errors.APIError, model: str) -> bool:
    """404 のうち、モデル名を名指しするもの（存在しないモデル）は設定ミスなので認可エラーにしない。"""
    if e.code not in AUTH_ERROR_CODES:
        return False
    # 例: "models/gemini-x is not found for API version v1beta, ..."
    if e.code == 404 and f"models/{model.removeprefix('models/')}" in (e.message or ""):
        return False
    return True


class NarrativeResponse(BaseModel):
    """1 回目（ナラティブ生成）の結果。本文と参照ソース。"""

    text: str = ""
    citations: List[GroundingCitation] = Field(default_factory=list)


class ModelClient(Protocol):
    """analysis_agent から見たモデル呼び出しのインターフェース（テストではフェイクに差し替える）。"""

    def generate_narrative(
        self,
        model: str,
        prompt: str,
        system_instruction: str,
        use_maps: bool = False,
        coordinates: Optional[Coordinates] = None,
    ) -> NarrativeResponse: ...

    def generate_json(self, model: str, prompt: str, schema: Any) -> str: ...


# ============================================================
# レスポンス解析
# ============================================================

def extract_citations(response: Any) -> List[GroundingCitation]:
    """
    grounding_metadata.grounding_chunks から (title, uri) を取り出す。
    web でも maps でもないチャンクは捨てる（None をリストに入れない）。
    重複はそのまま残す。
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    citations: List[GroundingCitation] = []
    for chunk in chunks:
        if chunk is None:
            continue
        source = getattr(chunk, "web", None) or getattr(chunk, "maps", None)
        if source is None:
            continue
        citations.append(
            GroundingCitation(
                title=getattr(source, "title", None) or "",
                uri=getattr(source, "uri", None) or "",
            )
        )
    return citations


def _build_tools(use_maps: bool, coordinates: Optional[Coordinates]):
    search_tool = types.Tool(google_search=types.GoogleSearch())
    if not use_maps:
        return [search_tool], None

    tools = [types.Tool(google_maps=types.GoogleMaps()), search_tool]
    tool_config = None
    if coordinates is not None:
        tool_config = types.ToolConfig(
            retrieval_config=types.RetrievalConfig(
                lat_lng=types.LatLng(
                    latitude=coordinates.latitude,
                    longitude=coordinates.longitude,
                )
            )
        )
    return tools, tool_config


# ============================================================
# Gemini クライアント
# ============================================================

class GeminiClient:
    """google-genai の Client を包み、エラーを AuthorizationError / ModelCallError に揃える。"""

    def __init__(self, api_key: str) -> None:
        self._client = genai.Client(api_key=api_key)

    def generate_narrative(
        self,
        model: str,
        prompt: str,
        system_instruction: str,
        use_maps: bool = False,
        coordinates: Optional[Coordinates] = None,
    ) -> NarrativeResponse:
        tools, tool_config = _build_tools(use_maps, coordinates)
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            tools=tools,
            tool_config=tool_config,
        )
        response = self._generate(model, prompt, config)

        narrative = NarrativeResponse(
            text=response.text or "",
            citations=extract_citations(response),
        )
        logger.info(
            "[llm_client] narrative received model=%s length=%d citations=%d",
            model,
            len(narrative.text),
            len(narrative.citations),
        )
        return narrative

    def generate_json(self, model: str, prompt: str, schema: Any) -> str:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = self._generate(model, prompt, config)
        content = response.text or ""
        logger.info("[llm_client] json received model=%s length=%d", model, len(content))
        return content

    def _generate(self, model: str, prompt: str, config: types.GenerateContentConfig):
        try:
            return self._client.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            if _is_authorization_error(e, model):
                logger.warning("[llm_client] authorization error model=%s code=%s", model, e.code)
                raise AuthorizationError(f"Gemini の認可に失敗しました (code={e.code})") from e
            if e.code == 404:
                logger.error("[llm_client] model not found model=%s message=%s", model, e.message)
                raise ModelCallError(f"Gemini のモデルが見つかりません (model={model})") from e
            logger.error("[llm_client] API error model=%s code=%s message=%s", model, e.code, e.message)
            raise ModelCallError(f"Gemini 呼び出しに失敗しました (code={e.code})") from e
        except Exception as e:  # noqa: BLE001
            logger.error("[llm_client] call failed model=%s error=%s", model, e)
            raise ModelCallError(f"Gemini 呼び出しに失敗しました: {e}") from e


_client: GeminiClient | None = None
_client_key: str | None = None


def get_gemini_client() -> GeminiClient:
    """
    現在のキーで GeminiClient をシングルトン的に返す。
    キーが差し替えられていたら作り直す。キーが無ければ AuthorizationError。
    """
    global _client, _client_key
    api_key = current_api_key()
    if not api_key:
        raise AuthorizationError("GEMINI_API_KEY が設定されていません")
    if _client is None or _client_key != api_key:
        _client = GeminiClient(api_key=api_key)
        _client_key = api_key
    return _client
