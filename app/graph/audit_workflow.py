# app/graph/audit_workflow.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from agents.analysis_agent import analyze_pillar
from app.exceptions import AuthorizationError, FullAuditAborted
from models.audit_models import Coordinates
from models.pillar_models import PILLARS
from models.report_models import FullAuditReport
from services.llm_client import ModelClient
from services.result_store import ResultStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# results:           MarketingPillar -> AuditResult（カタログ順、完了分のみ）
# progress:          on_progress に渡した値
# progress_messages: 各ステップのログ行（レポートにもそのまま載せる）
AuditState = Dict[str, Any]


def progress_percent(completed: int, total: int) -> int:
    """完了数から 0〜100 の整数の進捗を出す（四捨五入、.5 は切り上げ）。"""
    if total <= 0:
        return 100
    return (200 * completed + total) // (2 * total)


def _report_progress(
    state: AuditState,
    value: int,
    message: str,
    on_progress: Optional[ProgressCallback],
) -> AuditState:
    """進捗値を state に積み、コールバックがあれば同期的に呼ぶ。"""
    line = f"[full_audit] {value}% {message}"

    progress: List[int] = list(state.get("progress", []))
    progress.append(value)
    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress"] = progress
    state["progress_messages"] = messages

    logger.info(line)
    if on_progress is not None:
        on_progress(value)
    return state


def run_full_audit(
    domain: str,
    coordinates: Optional[Coordinates] = None,
    on_progress: Optional[ProgressCallback] = None,
    *,
    client: Optional[ModelClient] = None,
    store: Optional[ResultStore] = None,
) -> FullAuditReport:
    """
    全ピラーをカタログ順に 1 つずつ監査する直列ワークフロー。

    SEO → AEO → YouTube → Local SEO → Social → Reviews

    - 各ピラーの前に進捗（完了数 / 全体）を報告し、最後に 100 を報告する
    - 途中で失敗したらそこで打ち切る
        - AuthorizationError はそのまま（キー登録フローに回すため）
        - それ以外は FullAuditAborted（失敗ピラーと完了済みピラー付き）
    """
    logger.info(
        "[full_audit] run_full_audit start domain=%s coordinates=%s",
        domain,
        "YES" if coordinates else "NO",
    )

    state: AuditState = {"results": {}, "progress": [], "progress_messages": []}
    total = len(PILLARS)

    for index, pillar in enumerate(PILLARS):
        state = _report_progress(
            state,
            progress_percent(index, total),
            f"start: {pillar.title}",
            on_progress,
        )

        try:
            result = analyze_pillar(
                pillar.id,
                domain,
                coordinates,
                client=client,
                store=store,
            )
        except AuthorizationError:
            logger.warning("[full_audit] authorization error at pillar=%s", pillar.id.value)
            raise
        except Exception as e:
            completed = [p.value for p in state["results"]]
            logger.error(
                "[full_audit] aborted pillar=%s completed=%s error=%s",
                pillar.id.value,
                completed,
                e,
            )
            raise FullAuditAborted(pillar.id.value, completed) from e

        state["results"][pillar.id] = result

    state = _report_progress(state, 100, "done: all pillars analyzed", on_progress)

    logger.info("[full_audit] run_full_audit done domain=%s pillars=%d", domain, len(state["results"]))

    return FullAuditReport(
        domain=domain,
        results=state["results"],
        progress=state["progress"],
        progress_messages=state["progress_messages"],
    )
