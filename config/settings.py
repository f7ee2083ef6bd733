"""Pydantic BaseSettings — signer credentials and storage-node defaults."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────────
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_NAME: str = "db3-config-sig"
    LOG_LEVEL: str = "INFO"

    # ── Signer (never commit real values) ───────────────────────
    SIGNER_PRIVATE_KEY: str = ""
    SIGNER_MAX_WORKERS: int = Field(default=1, ge=1)

    # ── Storage node ────────────────────────────────────────────
    ADMIN_ADDR: str = ""
    ROLLUP_INTERVAL_MS: int = Field(default=600_000, ge=0)
    MIN_ROLLUP_SIZE: int = Field(default=1024 * 1024, ge=0)
    NETWORK_ID: int = Field(default=0, ge=0)
    EVM_NODE_URL: str = "http://127.0.0.1:8545"
    AR_NODE_URL: str = "http://127.0.0.1:1984"


settings = Settings()
