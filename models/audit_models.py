# models/audit_models.py

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# JSON 側は元のフロントエンドと同じ camelCase、Python 側は snake_case。
# どちらの名前でも受け付け、出力は alias（camelCase）で行う。
_WIRE_CONFIG = ConfigDict(populate_by_name=True)


# -----------------------------------------
# スコア（現状 / 目標）
# -----------------------------------------
class AuditScores(BaseModel):
    """5 つのスコア。範囲チェックはしない（意味的には 0〜100）。"""

    model_config = _WIRE_CONFIG

    seo: int
    performance: int
    accessibility: int
    best_practices: int = Field(..., alias="bestPractices")
    aeo_readiness: int = Field(..., alias="aeoReadiness")

    @classmethod
    def uniform(cls, value: int) -> "AuditScores":
        return cls(
            seo=value,
            performance=value,
            accessibility=value,
            best_practices=value,
            aeo_readiness=value,
        )

    def delta(self, other: "AuditScores") -> Dict[str, int]:
        """other - self を指標ごとに返す（ゲージの +N% 表示用）。"""
        return {
            name: getattr(other, name) - getattr(self, name)
            for name in type(self).model_fields
        }


# フォールバック時のデフォルトスコア
DEFAULT_CURRENT_SCORE = 50
DEFAULT_TARGET_SCORE = 95


def default_current_scores() -> AuditScores:
    return AuditScores.uniform(DEFAULT_CURRENT_SCORE)


def default_target_scores() -> AuditScores:
    return AuditScores.uniform(DEFAULT_TARGET_SCORE)


class Comparison(BaseModel):
    current: AuditScores
    target: AuditScores

    def deltas(self) -> Dict[str, int]:
        return self.current.delta(self.target)


# -----------------------------------------
# キーワード
# -----------------------------------------
class KeywordIntent(str, Enum):
    TRANSACTIONAL = "Transactional"
    INFORMATIONAL = "Informational"
    NAVIGATIONAL = "Navigational"


IntentStyle = Literal["transactional", "informational", "navigational", "unknown"]


class Keyword(BaseModel):
    """抽出されたキーワード 1 件。

    intent は LLM が返した文字列をそのまま保持する（想定外の値も捨てない）。
    表示側は intent_style() で 3 分類 + unknown に落とす。
    """

    term: str
    intent: str
    volume: Optional[str] = None
    difficulty: Optional[str] = None

    @property
    def intent_kind(self) -> Optional[KeywordIntent]:
        value = (self.intent or "").strip().lower()
        for kind in KeywordIntent:
            if kind.value.lower() == value:
                return kind
        return None

    def intent_style(self) -> IntentStyle:
        kind = self.intent_kind
        return kind.value.lower() if kind else "unknown"  # type: ignore[return-value]


# -----------------------------------------
# 競合
# -----------------------------------------
class Competitor(BaseModel):
    name: str = ""
    url: Optional[str] = None
    # 競合が上手くやっていること
    advantage: str = ""
    # どう勝つか
    gap: str = ""

    @field_validator("name", "advantage", "gap", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value


# -----------------------------------------
# ピラー依存の補助情報（YouTube / Reviews で出てくる）
# -----------------------------------------
class ReviewSource(BaseModel):
    source: str = ""
    count: int = 0
    rating: Optional[float] = None

    @field_validator("source", "count", mode="before")
    @classmethod
    def _null_as_default(cls, value, info):
        if value is not None:
            return value
        return 0 if info.field_name == "count" else ""


class AuditMetadata(BaseModel):
    model_config = _WIRE_CONFIG

    channel_exists: Optional[bool] = Field(None, alias="channelExists")
    channel_link: Optional[str] = Field(None, alias="channelLink")
    review_sources: List[ReviewSource] = Field(default_factory=list, alias="reviewSources")


class GroundingCitation(BaseModel):
    """ナラティブ生成時にモデルが参照したソース（Web 検索 / マップ）。"""

    title: str = ""
    uri: str = ""


class Coordinates(BaseModel):
    latitude: float
    longitude: float


# -----------------------------------------
# 2 回目（JSON 抽出）のペイロード
# どのフィールドも欠けていてよい（欠けた分は analysis_agent 側で補完する）
# -----------------------------------------
class StructuredAudit(BaseModel):
    model_config = _WIRE_CONFIG

    current: Optional[AuditScores] = None
    target: Optional[AuditScores] = None
    the_difference: Optional[str] = Field(None, alias="theDifference")
    findings: Optional[List[str]] = None
    competitors: Optional[List[Competitor]] = None
    keywords: Optional[List[Keyword]] = None
    metadata: Optional[AuditMetadata] = None

    @field_validator("current", "target", mode="before")
    @classmethod
    def _incomplete_scores_as_missing(cls, value):
        # 指標が欠けた / 型が違うスコアは「無し」と同じ扱い（既定値で補完される）
        if value is None or isinstance(value, AuditScores):
            return value
        try:
            return AuditScores.model_validate(value)
        except ValidationError:
            return None


# -----------------------------------------
# 最終的な監査結果（キャッシュされ、表示される唯一のオブジェクト）
# -----------------------------------------
ERROR_TEXT = "Error encountered."
ERROR_FINDING = "Connection failed."
ERROR_SUMMARY = "Service error."


class AuditResult(BaseModel):
    model_config = _WIRE_CONFIG

    text: str
    comparison: Optional[Comparison] = None
    the_difference: str = Field("", alias="theDifference")
    findings: List[str] = Field(default_factory=list)
    urls: List[GroundingCitation] = Field(default_factory=list)
    competitors: List[Competitor] = Field(default_factory=list)
    keywords: List[Keyword] = Field(default_factory=list)
    metadata: Optional[AuditMetadata] = None

    @classmethod
    def error_result(cls) -> "AuditResult":
        """モデル呼び出し失敗時にユーザーへ返す最小限の結果（キャッシュしない）。"""
        return cls(
            text=ERROR_TEXT,
            findings=[ERROR_FINDING],
            the_difference=ERROR_SUMMARY,
        )

    def top_keywords(self, limit: int = 5) -> List[Keyword]:
        return self.keywords[:limit]
