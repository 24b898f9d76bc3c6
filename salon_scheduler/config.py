from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    # Bearer token the voice agent sends with every webhook call
    webhook_key: str = ""

    # Optional endpoint that receives escalations as they are created
    manager_webhook_url: str | None = None

    seed_demo_data: bool = True
    log_level: str = "INFO"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off"}


def load_settings(dotenv_path: str | None = None) -> Settings:
    # .env in the working directory unless a path is given (tests)
    load_dotenv(dotenv_path=dotenv_path, override=False)

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise RuntimeError(f"Invalid LOG_LEVEL value: {log_level!r}")

    manager_webhook_url = os.getenv("MANAGER_WEBHOOK_URL", "").strip() or None
    if manager_webhook_url and not manager_webhook_url.startswith(("http://", "https://")):
        raise RuntimeError(f"Invalid MANAGER_WEBHOOK_URL value: {manager_webhook_url!r}")

    return Settings(
        webhook_key=os.getenv("SALON_WEBHOOK_KEY", ""),
        manager_webhook_url=manager_webhook_url,
        seed_demo_data=_flag("SEED_DEMO_DATA", "1"),
        log_level=log_level,
    )


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
