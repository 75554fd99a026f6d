# tests/conftest.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from models.audit_models import Coordinates, GroundingCitation
from services import credentials
from services.llm_client import NarrativeResponse
from services.result_store import InMemoryResultStore

NARRATIVE_TEXT = (
    "example.com ranks for 'running shoes' but trails rivalshoes.com on buying guides. "
    "Roadmap: publish comparison pages."
)

FULL_PAYLOAD: Dict[str, Any] = {
    "current": {"seo": 41, "performance": 62, "accessibility": 70, "bestPractices": 55, "aeoReadiness": 20},
    "target": {"seo": 88, "performance": 90, "accessibility": 95, "bestPractices": 92, "aeoReadiness": 80},
    "theDifference": "Rivals own the comparison intent; you own the brand intent.",
    "findings": ["No buying guides indexed.", "Thin category pages."],
    "competitors": [
        {
            "name": "RivalShoes",
            "url": "https://rivalshoes.com",
            "advantage": "Deep buying guides",
            "gap": "Publish fit-finder content",
        }
    ],
    "keywords": [
        {"term": "running shoes", "intent": "Transactional", "volume": "90k", "difficulty": "High"},
        {"term": "how to choose running shoes", "intent": "Informational"},
    ],
    "metadata": {
        "channelExists": True,
        "channelLink": "https://youtube.com/@example",
        "reviewSources": [{"source": "Trustpilot", "count": 120, "rating": 4.3}],
    },
}


class FakeModelClient:
    """ModelClient のフェイク。呼び出し内容を記録し、決めた応答 / 例外を返す。"""

    def __init__(
        self,
        narrative_text: str = NARRATIVE_TEXT,
        citations: Optional[List[GroundingCitation]] = None,
        json_content: Optional[str] = None,
        narrative_error: Optional[Exception] = None,
        json_error: Optional[Exception] = None,
    ) -> None:
        self.narrative_text = narrative_text
        self.citations = citations if citations is not None else [
            GroundingCitation(title="Example", uri="https://example.com"),
        ]
        self.json_content = json_content if json_content is not None else json.dumps(FULL_PAYLOAD)
        self.narrative_error = narrative_error
        self.json_error = json_error
        self.narrative_calls: List[Dict[str, Any]] = []
        self.json_calls: List[Dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.narrative_calls) + len(self.json_calls)

    def generate_narrative(
        self,
        model: str,
        prompt: str,
        system_instruction: str,
        use_maps: bool = False,
        coordinates: Optional[Coordinates] = None,
    ) -> NarrativeResponse:
        self.narrative_calls.append(
            {
                "model": model,
                "prompt": prompt,
                "system_instruction": system_instruction,
                "use_maps": use_maps,
                "coordinates": coordinates,
            }
        )
        if self.narrative_error is not None:
            raise self.narrative_error
        return NarrativeResponse(text=self.narrative_text, citations=list(self.citations))

    def generate_json(self, model: str, prompt: str, schema: Any) -> str:
        self.json_calls.append({"model": model, "prompt": prompt, "schema": schema})
        if self.json_error is not None:
            raise self.json_error
        return self.json_content


@pytest.fixture(autouse=True)
def _reset_credentials():
    credentials.clear_credential()
    yield
    credentials.clear_credential()


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore(schema_version="v5")


@pytest.fixture
def fake_client() -> FakeModelClient:
    return FakeModelClient()
