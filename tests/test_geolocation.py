# tests/test_geolocation.py
from __future__ import annotations

import requests

from app.config import settings
from services import geolocation
from services.geolocation import lookup_coordinates, resolve_startup_coordinates


class _Resp:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def test_lookup_success(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _Resp({"lat": 35.6, "lon": 139.7}))
    coords = lookup_coordinates("http://geo.test", timeout=1)
    assert (coords.latitude, coords.longitude) == (35.6, 139.7)


def test_lookup_accepts_latitude_longitude_keys(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _Resp({"latitude": "1.5", "longitude": "2.5"}))
    coords = lookup_coordinates("http://geo.test", timeout=1)
    assert (coords.latitude, coords.longitude) == (1.5, 2.5)


def test_lookup_network_failure_returns_none(monkeypatch):
    def _boom(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", _boom)
    assert lookup_coordinates("http://geo.test", timeout=1) is None


def test_lookup_bad_responses_return_none(monkeypatch):
    for resp in (_Resp({}, status=503), _Resp(ValueError("no json")), _Resp({"status": "fail"}), _Resp([1, 2])):
        monkeypatch.setattr(requests, "get", lambda url, timeout, r=resp: r)
        assert lookup_coordinates("http://geo.test", timeout=1) is None


def test_startup_prefers_configured_coordinates(monkeypatch):
    monkeypatch.setattr(settings, "default_latitude", 10.0)
    monkeypatch.setattr(settings, "default_longitude", 20.0)

    def _no_lookup():
        raise AssertionError("lookup must not run when coordinates are configured")

    monkeypatch.setattr(geolocation, "lookup_coordinates", _no_lookup)

    coords = resolve_startup_coordinates()
    assert (coords.latitude, coords.longitude) == (10.0, 20.0)


def test_startup_disabled_lookup(monkeypatch):
    monkeypatch.setattr(settings, "default_latitude", None)
    monkeypatch.setattr(settings, "default_longitude", None)
    monkeypatch.setattr(settings, "geolocation_enabled", False)
    assert resolve_startup_coordinates() is None
