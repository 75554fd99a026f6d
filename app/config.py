# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    """

    # ---------- Gemini ----------
    # GEMINI_API_KEY=... を .env に書く想定
    # （未設定でも起動はでき、/api/credentials から後で登録できる）
    gemini_api_key: str | None = None

    # 1回目（ナラティブ生成）で使うモデル
    gemini_model: str = "gemini-3-flash-preview"

    # Local SEO だけはマップ検索ツールを使うため別モデルに切り替える
    gemini_local_model: str = "gemini-2.5-flash"

    # 2回目（JSON 抽出）で使うモデル
    gemini_extraction_model: str = "gemini-3-flash-preview"

    # ---------- 結果キャッシュ ----------
    # SQLite ファイルのパス
    cache_db_path: str = "growthstack_cache.db"

    # スキーマのバージョン。上げると古いエントリは「存在しない」扱いになる
    cache_schema_version: str = "v5"

    # ---------- 位置情報 ----------
    # 起動時に 1 回だけ IP ベースで現在地を取りに行く（失敗しても無視）
    geolocation_enabled: bool = True
    geolocation_url: str = "http://ip-api.com/json"
    geolocation_timeout: float = 3.0

    # 明示的に座標を固定したい場合はこちらを .env に書く
    default_latitude: float | None = None
    default_longitude: float | None = None

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
