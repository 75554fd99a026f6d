# agents/analysis_agent.py

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from agents.extractor_agent import run_extraction
from agents.narrative_agent import run_narrative
from models.audit_models import (
    AuditResult,
    Comparison,
    Coordinates,
    GroundingCitation,
    StructuredAudit,
    default_current_scores,
    default_target_scores,
)
from models.pillar_models import MarketingPillar
from services.llm_client import ModelClient, get_gemini_client
from services.result_store import ResultStore, derive_cache_key, get_result_store

logger = logging.getLogger(__name__)

EMPTY_NARRATIVE_TEXT = "Analysis failed."


# ============================================================
# キャッシュ
# ============================================================

def _load_cached(store: ResultStore, key: str) -> Optional[AuditResult]:
    """キャッシュを読む。壊れていたら警告だけ出して None（再計算させる）。"""
    cached = store.get(key)
    if cached is None:
        return None
    try:
        return AuditResult.model_validate_json(cached)
    except ValidationError as e:
        logger.warning("[analysis] cache parse failed, recomputing key=%s error=%s", key, e.error_count())
        return None


# ============================================================
# マージ
# ============================================================

def merge_results(
    narrative_text: str,
    citations: list[GroundingCitation],
    structured: StructuredAudit,
) -> AuditResult:
    """
    1 回目の本文と 2 回目の構造化データをまとめて AuditResult にする。

    current / target はそれぞれ独立して欠けていればデフォルト（50 / 95）で補う。
    """
    return AuditResult(
        text=narrative_text or EMPTY_NARRATIVE_TEXT,
        comparison=Comparison(
            current=structured.current or default_current_scores(),
            target=structured.target or default_target_scores(),
        ),
        the_difference=structured.the_difference or "",
        findings=structured.findings or [],
        competitors=structured.competitors or [],
        keywords=structured.keywords or [],
        urls=list(citations),
        metadata=structured.metadata,
    )


# ============================================================
# 公開関数
# ============================================================

def analyze_pillar(
    pillar: MarketingPillar,
    domain: str,
    coordinates: Optional[Coordinates] = None,
    *,
    client: Optional[ModelClient] = None,
    store: Optional[ResultStore] = None,
) -> AuditResult:
    """
    1 ピラー分の監査を行うメイン関数。

    1. キャッシュにあればそれを返す（モデルは呼ばない）
    2. ナラティブ生成（Web 検索グラウンディング）
    3. JSON 抽出（失敗時はフォールバック）
    4. マージしてキャッシュに書き込む

    モデル呼び出しの例外（AuthorizationError / ModelCallError）は捕まえない。
    その場合キャッシュには何も書かない。
    """
    pillar = MarketingPillar(pillar)
    store = store if store is not None else get_result_store()
    key = derive_cache_key(pillar, domain, store.schema_version)

    cached = _load_cached(store, key)
    if cached is not None:
        logger.info("[analysis] cache hit pillar=%s key=%s", pillar.value, key)
        return cached

    logger.info("[analysis] cache miss pillar=%s domain=%s", pillar.value, domain)

    # キャッシュヒット時はキーが無くても返せるように、クライアントはここで取る
    client = client if client is not None else get_gemini_client()

    narrative = run_narrative(client, pillar, domain, coordinates)
    structured = run_extraction(client, domain, narrative.text)

    result = merge_results(narrative.text, narrative.citations, structured)

    store.set(key, result.model_dump_json(by_alias=True))
    logger.info(
        "[analysis] done pillar=%s keywords=%d competitors=%d findings=%d urls=%d",
        pillar.value,
        len(result.keywords),
        len(result.competitors),
        len(result.findings),
        len(result.urls),
    )
    return result
