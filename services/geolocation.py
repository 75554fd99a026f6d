# services/geolocation.py

from __future__ import annotations

import logging
from typing import Optional

import requests

from app.config import settings
from models.audit_models import Coordinates

logger = logging.getLogger(__name__)


def lookup_coordinates(
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Optional[Coordinates]:
    """
    IP ベースで現在地をざっくり取得する。
    取れなかった場合は None を返すだけで、例外は外に出さない。
    """
    url = url or settings.geolocation_url
    timeout = timeout if timeout is not None else settings.geolocation_timeout

    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.info("[geolocation] lookup failed, continue without coordinates: %s", e)
        return None

    lat = data.get("lat", data.get("latitude")) if isinstance(data, dict) else None
    lng = data.get("lon", data.get("longitude")) if isinstance(data, dict) else None
    if lat is None or lng is None:
        logger.info("[geolocation] no coordinates in response keys=%s", list(data)[:10] if isinstance(data, dict) else None)
        return None

    try:
        coords = Coordinates(latitude=float(lat), longitude=float(lng))
    except (TypeError, ValueError):
        logger.info("[geolocation] invalid coordinates lat=%r lng=%r", lat, lng)
        return None

    logger.info("[geolocation] resolved lat=%.4f lng=%.4f", coords.latitude, coords.longitude)
    return coords


def resolve_startup_coordinates() -> Optional[Coordinates]:
    """
    起動時に 1 回だけ呼ばれる。
    1. DEFAULT_LATITUDE / DEFAULT_LONGITUDE があればそれを使う
    2. GEOLOCATION_ENABLED なら IP から取得を試す
    3. どちらも無理なら None（座標なしで動く）
    """
    if settings.default_latitude is not None and settings.default_longitude is not None:
        return Coordinates(latitude=settings.default_latitude, longitude=settings.default_longitude)

    if not settings.geolocation_enabled:
        logger.info("[geolocation] disabled")
        return None

    return lookup_coordinates()
