# app/exceptions.py

from __future__ import annotations

from typing import List, Optional


class GrowthStackError(Exception):
    """アプリ共通の業務例外の基底クラス。API 層でまとめて捕捉する。"""


class AuthorizationError(GrowthStackError):
    """
    有効な Gemini の API キーが無い（未設定 / 無効 / 権限なし）ことを表す。

    リトライはせず、呼び出し側でキー登録フロー（/api/credentials）に誘導する。
    """


class ModelCallError(GrowthStackError):
    """認可以外の理由で生成モデルの呼び出しに失敗したことを表す。"""


class FullAuditAborted(GrowthStackError):
    """
    全ピラー一括監査の途中で失敗したため、バッチを打ち切ったことを表す。

    - pillar: 失敗したピラー
    - completed: 失敗までに完了していたピラー（カタログ順）
    元の例外は __cause__ に入る。
    """

    def __init__(self, pillar: str, completed: Optional[List[str]] = None) -> None:
        self.pillar = pillar
        self.completed = list(completed or [])
        super().__init__(
            f"full audit aborted at pillar={pillar} completed={len(self.completed)}"
        )
