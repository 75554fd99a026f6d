# agents/extractor_agent.py

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import ValidationError

from app.config import settings
from models.audit_models import (
    StructuredAudit,
    default_current_scores,
    default_target_scores,
)
from services.llm_client import ModelClient

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "Data extracted with fallback formatting."
FALLBACK_FINDING = "Review the Strategy Plan for full details."

SCORE_FIELDS = ("seo", "performance", "accessibility", "bestPractices", "aeoReadiness")


# ============================================================
# レスポンススキーマ（Gemini の JSON モードに渡す）
# ============================================================

def _scores_schema() -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {
            "seo": {"type": "INTEGER"},
            "performance": {"type": "INTEGER"},
            "accessibility": {"type": "INTEGER"},
            "bestPractices": {"type": "INTEGER"},
            "aeoReadiness": {"type": "INTEGER"},
        },
        "required": list(SCORE_FIELDS),
    }


EXTRACTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "current": _scores_schema(),
        "target": _scores_schema(),
        "theDifference": {"type": "STRING"},
        "findings": {"type": "ARRAY", "items": {"type": "STRING"}},
        "keywords": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "term": {"type": "STRING"},
                    "intent": {"type": "STRING"},
                    "volume": {"type": "STRING"},
                    "difficulty": {"type": "STRING"},
                },
                "required": ["term", "intent"],
            },
        },
        "competitors": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "url": {"type": "STRING"},
                    "advantage": {"type": "STRING"},
                    "gap": {"type": "STRING"},
                },
            },
        },
        "metadata": {
            "type": "OBJECT",
            "properties": {
                "channelExists": {"type": "BOOLEAN"},
                "channelLink": {"type": "STRING"},
                "reviewSources": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "source": {"type": "STRING"},
                            "count": {"type": "INTEGER"},
                            "rating": {"type": "NUMBER"},
                        },
                    },
                },
            },
        },
    },
    "required": ["keywords", "competitors", "findings", "theDifference"],
}


# ============================================================
# プロンプト
# ============================================================

def build_extraction_prompt(domain: str, report_text: str) -> str:
    return f"""
Extract domain-specific analysis data for "{domain}" from the following report.

REPORT: "{report_text}"

JSON FORMAT:
{{
  "current": {{ "seo": int, "performance": int, "accessibility": int, "bestPractices": int, "aeoReadiness": int }},
  "target": {{ "seo": int, "performance": int, "accessibility": int, "bestPractices": int, "aeoReadiness": int }},
  "theDifference": "Analysis summary",
  "findings": ["Discovery 1", "..."],
  "competitors": [
     {{ "name": "string", "url": "string", "advantage": "string", "gap": "string" }}
  ],
  "keywords": [
     {{ "term": "string", "intent": "Transactional|Informational|Navigational", "volume": "string", "difficulty": "string" }}
  ],
  "metadata": {{
     "channelExists": boolean,
     "channelLink": "string",
     "reviewSources": [{{"source": "name", "count": int, "rating": float}}]
  }}
}}
""".strip()


# ============================================================
# フォールバック / パース
# ============================================================

def fallback_payload() -> StructuredAudit:
    """JSON 抽出に失敗したときに丸ごと差し替えるペイロード。"""
    return StructuredAudit(
        current=default_current_scores(),
        target=default_target_scores(),
        the_difference=FALLBACK_SUMMARY,
        findings=[FALLBACK_FINDING],
        competitors=[],
        keywords=[],
    )


def parse_structured(content: str | None) -> StructuredAudit:
    """
    2 回目の応答を StructuredAudit にする。
    JSON として壊れている / オブジェクトでない / 型が合わない場合はフォールバック。
    ここでは例外を外に出さない。
    """
    if not content or not content.strip():
        logger.warning("[extractor] empty JSON content, fallback used")
        return fallback_payload()

    try:
        return StructuredAudit.model_validate_json(content)
    except ValidationError as e:
        logger.warning(
            "[extractor] JSON parse error, fallback used error_count=%d content=%r",
            e.error_count(),
            content[:500],
        )
        return fallback_payload()


def run_extraction(client: ModelClient, domain: str, report_text: str) -> StructuredAudit:
    """
    2 回目の呼び出し：1 回目の本文から構造化データを JSON モードで抜き出す。
    モデル呼び出し自体の例外はそのまま呼び出し元へ（パース失敗だけ吸収する）。
    """
    model = settings.gemini_extraction_model
    logger.info("[extractor] start domain=%s model=%s report_length=%d", domain, model, len(report_text))

    content = client.generate_json(
        model=model,
        prompt=build_extraction_prompt(domain, report_text),
        schema=EXTRACTION_SCHEMA,
    )
    return parse_structured(content)
