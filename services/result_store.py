# services/result_store.py

"""
監査結果のキャッシュ（キー: スキーマバージョン + ピラー + 正規化ドメイン）。

Table: audit_cache
- key (text, primary key)
- schema_version (text)
- payload (text)  AuditResult の JSON
- created_at (text)

有効期限もサイズ上限も無い。同じキーへの書き込みは後勝ちで上書きする。
バージョンを上げた場合、古いバージョンの行は get() から見えなくなる
（purge_stale() で物理削除できる）。
"""

from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Protocol

from app.config import settings
from models.pillar_models import MarketingPillar

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def normalize_domain(domain: str) -> str:
    """英数字以外をすべて取り除く。"""
    return _NON_ALNUM.sub("", domain or "")


def derive_cache_key(
    pillar: MarketingPillar | str,
    domain: str,
    version: Optional[str] = None,
) -> str:
    pillar_value = pillar.value if isinstance(pillar, MarketingPillar) else str(pillar)
    version = version or settings.cache_schema_version
    return f"audit_{version}_{pillar_value}_{normalize_domain(domain)}"


class ResultStore(Protocol):
    schema_version: str

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryResultStore:
    """プロセス内だけのストア。テストや一時利用向け。"""

    def __init__(self, schema_version: Optional[str] = None) -> None:
        self.schema_version = schema_version or settings.cache_schema_version
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)


class SqliteResultStore:
    """SQLite に永続化するストア。操作ごとに接続を開いて閉じる。"""

    def __init__(self, path: str | Path, schema_version: Optional[str] = None) -> None:
        self.path = Path(path)
        self.schema_version = schema_version or settings.cache_schema_version
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS audit_cache (
                    key TEXT PRIMARY KEY,
                    schema_version TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT payload FROM audit_cache WHERE key = ? AND schema_version = ?",
                (key, self.schema_version),
            ).fetchone()
        finally:
            conn.close()
        return row["payload"] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO audit_cache (key, schema_version, payload, created_at) "
                "VALUES (?, ?, ?, ?)",
                (key, self.schema_version, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def purge_stale(self) -> int:
        """現在のバージョン以外の行を削除し、削除件数を返す。"""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM audit_cache WHERE schema_version != ?",
                (self.schema_version,),
            )
            conn.commit()
            removed = cursor.rowcount
        finally:
            conn.close()
        logger.info("[result_store] purged stale entries count=%d version=%s", removed, self.schema_version)
        return removed


@lru_cache
def get_result_store() -> SqliteResultStore:
    """設定に従ったストアをシングルトン的に返す。"""
    return SqliteResultStore(settings.cache_db_path, settings.cache_schema_version)
