# tests/test_result_store.py
from __future__ import annotations

import pytest

from models.pillar_models import MarketingPillar
from services.result_store import (
    InMemoryResultStore,
    SqliteResultStore,
    derive_cache_key,
    normalize_domain,
)


@pytest.mark.parametrize(
    "domain,expected",
    [
        ("https://a.com/x?y=1", "httpsacomxy1"),
        ("https   a com x y 1", "httpsacomxy1"),
        ("Example.COM", "ExampleCOM"),
        ("bücher.de", "bcherde"),
        ("", ""),
    ],
)
def test_normalize_domain_keeps_ascii_alphanumerics_only(domain, expected):
    assert normalize_domain(domain) == expected


def test_equivalent_domains_share_a_key():
    for pillar in MarketingPillar:
        assert derive_cache_key(pillar, "https://a.com/x?y=1", "v5") == derive_cache_key(
            pillar, "https   a com x y 1", "v5"
        )


def test_key_layout():
    assert derive_cache_key(MarketingPillar.LOCAL_SEO, "a.com", "v5") == "audit_v5_Local SEO_acom"
    assert derive_cache_key("SEO", "a.com", "v6") == "audit_v6_SEO_acom"


def test_in_memory_store_overwrites():
    store = InMemoryResultStore(schema_version="v5")
    assert store.get("k") is None
    store.set("k", "1")
    store.set("k", "2")
    assert store.get("k") == "2"
    assert len(store) == 1


def test_sqlite_store_persists_across_instances(tmp_path):
    path = tmp_path / "cache" / "audit.db"
    SqliteResultStore(path, schema_version="v5").set("k", '{"text": "x"}')

    reopened = SqliteResultStore(path, schema_version="v5")
    assert reopened.get("k") == '{"text": "x"}'
    assert reopened.get("missing") is None


def test_sqlite_store_last_writer_wins(tmp_path):
    store = SqliteResultStore(tmp_path / "audit.db", schema_version="v5")
    store.set("k", "first")
    store.set("k", "second")
    assert store.get("k") == "second"


def test_version_bump_treats_old_entries_as_absent(tmp_path):
    path = tmp_path / "audit.db"
    SqliteResultStore(path, schema_version="v5").set("k", "old")

    bumped = SqliteResultStore(path, schema_version="v6")
    assert bumped.get("k") is None

    assert bumped.purge_stale() == 1
    assert SqliteResultStore(path, schema_version="v5").get("k") is None
