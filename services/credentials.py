# services/credentials.py

from __future__ import annotations

import logging
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)

# /api/credentials から登録されたキー（.env の GEMINI_API_KEY より優先）
_runtime_api_key: Optional[str] = None


def current_api_key() -> Optional[str]:
    """今使うべき Gemini の API キーを返す。どこにも無ければ None。"""
    return _runtime_api_key or settings.gemini_api_key or None


def has_credential() -> bool:
    return bool(current_api_key())


def request_credential_selection(api_key: str) -> None:
    """
    ユーザーが選んだ / 入力した API キーを登録する。
    以後の Gemini 呼び出しはこのキーで行われる（llm_client 側がキー変更を検知して作り直す）。
    """
    global _runtime_api_key
    key = (api_key or "").strip()
    if not key:
        raise ValueError("api_key が空です")
    _runtime_api_key = key
    logger.info("[credentials] runtime credential registered")


def clear_credential() -> None:
    global _runtime_api_key
    _runtime_api_key = None
    logger.info("[credentials] runtime credential cleared")
