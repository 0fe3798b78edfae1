"""
Centralised settings loader.

Values come from the environment (or a local `.env`).  Only process entry
points and the report runner read them; `core.*` calculators take every
threshold as an explicit argument.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB ────────────────────────────────────────────────
    env_name: str = "local"
    database_url: str | None = None
    sql_echo: bool = False
    log_level: str = "INFO"

    # ─── report thresholds ──────────────────────────────────────────
    hr_min_span_days: int = Field(30, ge=0)
    hr_min_drop_bpm: float = Field(5, ge=0)
    consistency_min_per_week: int = Field(4, ge=0)
    consistency_min_weeks: int = Field(2, ge=1)
    running_min_span_days: int = Field(90, ge=0)
    running_min_percent: float = 20
    weight_loss_min_percent: float = 80
    top_n: int = Field(3, ge=1)

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()


settings: _Settings = _cached()
