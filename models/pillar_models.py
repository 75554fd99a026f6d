# models/pillar_models.py

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict


# -----------------------------------------
# マーケティングピラー（分析軸）
# 宣言順 = カタログ順 = 一括監査の実行順
# -----------------------------------------
class MarketingPillar(str, Enum):
    SEO = "SEO"
    AEO = "AEO"
    YOUTUBE = "YouTube"
    LOCAL_SEO = "Local SEO"
    SOCIAL = "Social"
    REVIEWS = "Reviews"


class PillarInfo(BaseModel):
    """ピラーごとの表示用メタ情報。起動時に定義されるだけで実行時には変更しない。

    Attributes:
        id (MarketingPillar): ピラーの識別子。
        title (str): タブに出す名前。
        objective (str): 一行の狙い。
        description (str): 説明文。
        icon (str): アイコンのクラス名。
        color (str): グラデーション指定。
    """

    model_config = ConfigDict(frozen=True)

    id: MarketingPillar
    title: str
    objective: str
    description: str
    icon: str
    color: str


PILLARS: Tuple[PillarInfo, ...] = (
    PillarInfo(
        id=MarketingPillar.SEO,
        title="SEO",
        objective="Brings Search Traffic",
        description="Optimize for organic search rankings to capture high-intent users.",
        icon="fa-solid fa-magnifying-glass-chart",
        color="from-blue-500 to-cyan-400",
    ),
    PillarInfo(
        id=MarketingPillar.AEO,
        title="AEO",
        objective="Brings AI Recommendations",
        description="Optimize content structure for LLMs, answer engines, and voice search.",
        icon="fa-solid fa-microchip",
        color="from-purple-500 to-indigo-400",
    ),
    PillarInfo(
        id=MarketingPillar.YOUTUBE,
        title="YouTube",
        objective="Builds Trust",
        description="Video content creates authority and human connection.",
        icon="fa-brands fa-youtube",
        color="from-red-600 to-rose-400",
    ),
    PillarInfo(
        id=MarketingPillar.LOCAL_SEO,
        title="Local SEO",
        objective="Brings Calls",
        description="Be visible when customers are looking for nearby services.",
        icon="fa-solid fa-location-dot",
        color="from-orange-500 to-amber-400",
    ),
    PillarInfo(
        id=MarketingPillar.SOCIAL,
        title="Social",
        objective="Brand Remembered",
        description="Stay top-of-mind through consistent engagement.",
        icon="fa-solid fa-share-nodes",
        color="from-pink-500 to-rose-400",
    ),
    PillarInfo(
        id=MarketingPillar.REVIEWS,
        title="Reviews",
        objective="Converts Leads",
        description="Social proof is the final nudge for prospects.",
        icon="fa-solid fa-star",
        color="from-emerald-500 to-teal-400",
    ),
)

_PILLARS_BY_ID: Dict[MarketingPillar, PillarInfo] = {p.id: p for p in PILLARS}


def get_pillar(pillar_id: MarketingPillar | str) -> PillarInfo:
    """識別子（Enum でも文字列値でも可）からピラー情報を引く。未知の値は KeyError。"""
    try:
        key = MarketingPillar(pillar_id)
    except ValueError as e:
        raise KeyError(pillar_id) from e
    return _PILLARS_BY_ID[key]
