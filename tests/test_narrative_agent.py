# tests/test_narrative_agent.py
from __future__ import annotations

from agents.narrative_agent import (
    BASE_SYSTEM_INSTRUCTION,
    build_main_prompt,
    build_system_instruction,
    run_narrative,
)
from agents.pillar_profiles import PILLAR_PROFILES, get_profile, resolve_model
from app.config import settings
from models.audit_models import Coordinates
from models.pillar_models import MarketingPillar
from tests.conftest import FakeModelClient

COORDS = Coordinates(latitude=51.5, longitude=-0.12)


def test_every_pillar_has_a_profile():
    assert set(PILLAR_PROFILES) == set(MarketingPillar)


def test_system_instruction_appends_pillar_directive():
    text = build_system_instruction(MarketingPillar.SEO)
    assert text.startswith(BASE_SYSTEM_INSTRUCTION)
    assert "10-15 high-value keywords" in text

    assert "AI Overviews" in build_system_instruction(MarketingPillar.AEO)
    assert "hashtags" in build_system_instruction(MarketingPillar.SOCIAL)


def test_main_prompt_lists_required_actions():
    prompt = build_main_prompt(MarketingPillar.REVIEWS, "example.com")
    assert 'Deep-scan domain "example.com" for the "Reviews" pillar.' in prompt
    assert "2-3 top competitors" in prompt
    assert "3-5 forensic discoveries" in prompt
    assert "comparison of Reviews metrics" in prompt


def test_only_local_seo_switches_model_and_tools():
    for pillar in MarketingPillar:
        profile = get_profile(pillar)
        if pillar is MarketingPillar.LOCAL_SEO:
            assert profile.use_maps
            assert resolve_model(profile, settings) == settings.gemini_local_model
        else:
            assert not profile.use_maps
            assert resolve_model(profile, settings) == settings.gemini_model


def test_local_seo_passes_coordinates():
    client = FakeModelClient()
    run_narrative(client, MarketingPillar.LOCAL_SEO, "example.com", COORDS)

    call = client.narrative_calls[0]
    assert call["use_maps"] is True
    assert call["coordinates"] == COORDS
    assert call["model"] == settings.gemini_local_model


def test_other_pillars_ignore_coordinates():
    client = FakeModelClient()
    run_narrative(client, MarketingPillar.SEO, "example.com", COORDS)

    call = client.narrative_calls[0]
    assert call["use_maps"] is False
    assert call["coordinates"] is None
    assert call["model"] == settings.gemini_model
