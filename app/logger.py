# app/logger.py

import logging

from app.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# SDK 側の通信ログは INFO だとうるさいので一段上げる
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "google_genai")


def configure_logging(level: str | None = None) -> None:
    """
    ルートロガーにコンソール出力用のハンドラを 1 つだけ付ける。
    app/main.py から起動時に 1 回呼ばれる想定（複数回呼んでも重複しない）。
    """
    log_level = getattr(logging, (level or settings.log_level or "").upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(log_level)

    noisy_level = logging.WARNING if log_level <= logging.INFO else log_level
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
