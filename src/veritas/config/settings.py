from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized config.

    Key idea:
    - read from env first (so tests/CI can override),
    - otherwise default to local dev values.
    """

    model_config = SettingsConfigDict(env_prefix="VERITAS_", extra="ignore")

    # DuckDB file by default (portable, zero-setup)
    db_url: str = "duckdb:///data/veritas.duckdb"

    # Backend the client talks to, and the public site used in QR payloads
    api_base_url: str = "http://localhost:8000"
    public_base_url: str = "https://veritas.example.com"

    # Resilient client defaults
    request_timeout_s: float = 5.0
    health_timeout_s: float = 5.0
    health_check_interval_s: float = 30.0
    max_retries: int = 3
    retry_base_delay_s: float = 1.0

    # Ledger settings (default stub for deterministic tests)
    ledger_provider: str = "stub"
    ledger_timeout_s: float = 5.0
    hedera_network: str = "testnet"
    hedera_account_id: str | None = None
    hedera_private_key: str | None = None
    hedera_topic_id: str = "0.0.6535283"

    # Deployment safety defaults
    rate_limit_per_min: int = 60
    log_level: str = "INFO"


settings = Settings()
