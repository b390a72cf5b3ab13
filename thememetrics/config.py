"""
Environment configuration.
Reads settings from a .env file (if present) and the process environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MONTHLY_REVENUE = 10000
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    default_monthly_revenue: float = DEFAULT_MONTHLY_REVENUE
    log_level: str = DEFAULT_LOG_LEVEL
    rules_path: Optional[str] = None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        default_monthly_revenue=_float_env("THEMEMETRICS_DEFAULT_MONTHLY_REVENUE", DEFAULT_MONTHLY_REVENUE),
        log_level=(os.getenv("THEMEMETRICS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        rules_path=os.getenv("THEMEMETRICS_RULES_PATH") or None,
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
