# tests/test_audit_workflow.py
from __future__ import annotations

import pytest

from app.exceptions import AuthorizationError, FullAuditAborted, ModelCallError
from app.graph.audit_workflow import progress_percent, run_full_audit
from models.audit_models import Coordinates
from models.pillar_models import PILLARS, MarketingPillar
from tests.conftest import FakeModelClient


class FailingAtClient(FakeModelClient):
    """n 回目のナラティブ呼び出しで例外を投げるフェイク。"""

    def __init__(self, fail_at: int, error: Exception) -> None:
        super().__init__()
        self.fail_at = fail_at
        self.error = error

    def generate_narrative(self, *args, **kwargs):
        if len(self.narrative_calls) == self.fail_at:
            self.narrative_calls.append({})
            raise self.error
        return super().generate_narrative(*args, **kwargs)


def test_progress_sequence(store, fake_client):
    seen = []

    report = run_full_audit("example.com", on_progress=seen.append, client=fake_client, store=store)

    assert seen == [0, 17, 33, 50, 67, 83, 100]
    assert report.progress == seen
    assert seen == sorted(seen)


def test_report_carries_progress_messages(store, fake_client):
    report = run_full_audit("example.com", client=fake_client, store=store)

    assert len(report.progress_messages) == len(report.progress)
    assert report.progress_messages[0] == f"[full_audit] 0% start: {PILLARS[0].title}"
    assert report.progress_messages[-1] == "[full_audit] 100% done: all pillars analyzed"



def test_pillars_run_in_catalog_order(store, fake_client):
    report = run_full_audit("example.com", client=fake_client, store=store)

    assert list(report.results) == [p.id for p in PILLARS]
    order = [call["prompt"] for call in fake_client.narrative_calls]
    for prompt, pillar in zip(order, PILLARS):
        assert f'"{pillar.id.value}" pillar' in prompt


def test_coordinates_reach_local_seo_only(store, fake_client):
    coords = Coordinates(latitude=35.68, longitude=139.76)
    run_full_audit("example.com", coords, client=fake_client, store=store)

    with_coords = [c for c in fake_client.narrative_calls if c["coordinates"] is not None]
    assert len(with_coords) == 1
    assert with_coords[0]["use_maps"] is True


def test_batch_reuses_cached_pillars(store, fake_client):
    run_full_audit("example.com", client=fake_client, store=store)
    calls = fake_client.call_count

    run_full_audit("example.com", client=fake_client, store=store)
    assert fake_client.call_count == calls


def test_failure_aborts_batch_with_completed_pillars(store):
    client = FailingAtClient(fail_at=3, error=ModelCallError("quota"))
    seen = []

    with pytest.raises(FullAuditAborted) as excinfo:
        run_full_audit("example.com", on_progress=seen.append, client=client, store=store)

    err = excinfo.value
    assert err.pillar == MarketingPillar.LOCAL_SEO.value
    assert err.completed == ["SEO", "AEO", "YouTube"]
    assert isinstance(err.__cause__, ModelCallError)
    assert seen == [0, 17, 33, 50]
    assert 100 not in seen


def test_authorization_error_is_not_wrapped(store):
    client = FailingAtClient(fail_at=0, error=AuthorizationError("no key"))

    with pytest.raises(AuthorizationError):
        run_full_audit("example.com", client=client, store=store)


@pytest.mark.parametrize(
    "completed,total,expected",
    [(0, 6, 0), (1, 6, 17), (4, 6, 67), (6, 6, 100), (1, 3, 33), (1, 8, 13), (0, 0, 100)],
)
def test_progress_percent(completed, total, expected):
    assert progress_percent(completed, total) == expected
