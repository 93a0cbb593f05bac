"""Configuration settings for the Credit Engine service."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./credit_engine.db"

    # Service identification
    service_name: str = "credit-engine"

    # Privileged identity allowed to change governance and force liquidations
    operator_account: str = "operator"

    # Model defaults written to the governance record on first use.
    # Weights are relative and are not required to sum to 100.
    default_weight_collateral: int = 30
    default_weight_history: int = 40
    default_weight_repayment: int = 30
    default_risk_threshold: int = 50
    default_market_risk_factor: int = 10  # 10 = neutral baseline

    # Ledger height source: "clock" derives height from wall time,
    # "http" asks an external height service, "manual" starts at 0 and only
    # moves when advanced in-process.
    height_source: str = "clock"
    height_api_base: str = "http://localhost:8003"
    block_interval_seconds: float = 600.0

    # Settlement service notified of loan lifecycle events
    settlement_webhook_url: str = "http://localhost:8002/mock-ledger"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CREDIT_ENGINE_"


settings = Settings()
