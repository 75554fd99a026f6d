# agents/narrative_agent.py

from __future__ import annotations

import logging
from typing import Optional

from agents.pillar_profiles import get_profile, resolve_model
from app.config import settings
from models.audit_models import Coordinates
from models.pillar_models import MarketingPillar
from services.llm_client import ModelClient, NarrativeResponse

logger = logging.getLogger(__name__)

BASE_SYSTEM_INSTRUCTION = (
    "You are a world-class forensic marketing analyst. "
    "You specialize in COMPETITIVE INTELLIGENCE and KEYWORD AUDITING. "
    "For any domain provided, you must identify its top keywords, its competitors, "
    "and perform a comparative audit. Search for ACTUAL keyword data, search volume "
    "estimates, and user intent (Transactional vs Informational)."
)


def build_system_instruction(pillar: MarketingPillar) -> str:
    profile = get_profile(pillar)
    return f"{BASE_SYSTEM_INSTRUCTION} {profile.instruction}"


def build_main_prompt(pillar: MarketingPillar, domain: str) -> str:
    pillar_value = MarketingPillar(pillar).value
    return f"""
Deep-scan domain "{domain}" for the "{pillar_value}" pillar.
REQUIRED ACTIONS:
1. Extract a "Keyword Landscape" for the entire website: 5-10 primary and secondary keywords.
2. Identify 2-3 top competitors.
3. Perform a side-by-side comparison of {pillar_value} metrics.
4. Provide 3-5 forensic discoveries from the search data.
5. Draft a roadmap to dominate these keywords.
""".strip()


def run_narrative(
    client: ModelClient,
    pillar: MarketingPillar,
    domain: str,
    coordinates: Optional[Coordinates] = None,
) -> NarrativeResponse:
    """
    1 回目の呼び出し：Web 検索（Local SEO はマップ検索も）でグラウンディングした
    自由記述のレポートを生成する。例外はそのまま呼び出し元へ。
    """
    profile = get_profile(pillar)
    model = resolve_model(profile, settings)

    logger.info(
        "[narrative] start pillar=%s domain=%s model=%s maps=%s coordinates=%s",
        MarketingPillar(pillar).value,
        domain,
        model,
        profile.use_maps,
        "YES" if coordinates else "NO",
    )

    return client.generate_narrative(
        model=model,
        prompt=build_main_prompt(pillar, domain),
        system_instruction=build_system_instruction(pillar),
        use_maps=profile.use_maps,
        coordinates=coordinates if profile.use_maps else None,
    )
