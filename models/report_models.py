# models/report_models.py

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from models.audit_models import AuditResult
from models.pillar_models import MarketingPillar


class FullAuditReport(BaseModel):
    """
    全ピラー一括監査の結果。
    results はカタログ順に全 6 ピラー分が入る（途中で失敗した場合はこのモデル自体を返さない）。
    """

    domain: str
    results: Dict[MarketingPillar, AuditResult] = Field(default_factory=dict)

    # on_progress に渡した値の履歴（0 → ... → 100）
    progress: List[int] = Field(default_factory=list)

    # 各ステップのログ行（"[full_audit] 17% start: ..."）
    progress_messages: List[str] = Field(default_factory=list)

    def result_for(self, pillar: MarketingPillar) -> AuditResult:
        return self.results[pillar]
