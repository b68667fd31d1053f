from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_BASE_URL = "http://localhost:4000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 20.0
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    log_level: str = "INFO"


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        out = float(value)
    except ValueError:
        return default
    return out if out >= 0 else default


def load_settings(environ: Optional[dict] = None) -> Settings:
    env = os.environ if environ is None else environ
    base_url = (env.get("ERP_API_BASE_URL") or DEFAULT_API_BASE_URL).strip().rstrip("/")
    return Settings(
        api_base_url=base_url or DEFAULT_API_BASE_URL,
        timeout=_as_float(env.get("ERP_API_TIMEOUT"), DEFAULT_TIMEOUT) or DEFAULT_TIMEOUT,
        poll_interval=_as_float(env.get("ERP_POLL_INTERVAL"), DEFAULT_POLL_INTERVAL),
        log_level=(env.get("ERP_LOG_LEVEL") or "INFO").strip().upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
