# agents/pillar_profiles.py

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict

from app.config import Settings
from models.pillar_models import MarketingPillar


class PillarProfile(BaseModel):
    """
    ピラーごとのプロンプト / ツール / モデルの設定。
    ピラーを増やすときはここに 1 行足すだけでよい。

    - instruction: system instruction の末尾に足す指示
    - use_maps: マップ検索ツール（+ 座標）を使うか
    - local_model: True なら Settings.gemini_local_model に切り替える
    """

    model_config = ConfigDict(frozen=True)

    instruction: str
    use_maps: bool = False
    local_model: bool = False


PILLAR_PROFILES: Dict[MarketingPillar, PillarProfile] = {
    MarketingPillar.SEO: PillarProfile(
        instruction=(
            "Identify 10-15 high-value keywords for the entire website. "
            "Classify them by intent. Find keyword gaps where competitors are winning."
        ),
    ),
    MarketingPillar.AEO: PillarProfile(
        instruction=(
            "Focus on long-tail conversational keywords and question-based queries "
            "that trigger AI Overviews."
        ),
    ),
    MarketingPillar.YOUTUBE: PillarProfile(
        instruction=(
            "Find top-performing video keywords and tags used by industry leaders in this niche."
        ),
    ),
    MarketingPillar.LOCAL_SEO: PillarProfile(
        instruction=(
            "Identify 'near me' and geo-modified keywords. "
            "Compare map pack rankings for these specific terms."
        ),
        use_maps=True,
        local_model=True,
    ),
    MarketingPillar.SOCIAL: PillarProfile(
        instruction=(
            "Identify trending hashtags and brand-related keywords driving social conversations."
        ),
    ),
    MarketingPillar.REVIEWS: PillarProfile(
        instruction=(
            "Find keywords commonly used in customer reviews (sentiment-based keywords) "
            "and compare them to rivals."
        ),
    ),
}


def get_profile(pillar: MarketingPillar) -> PillarProfile:
    return PILLAR_PROFILES[MarketingPillar(pillar)]


def resolve_model(profile: PillarProfile, settings: Settings) -> str:
    """1 回目（ナラティブ生成）で使うモデル名を決める。"""
    if profile.local_model:
        return settings.gemini_local_model
    return settings.gemini_model
