"""Configuration management using Pydantic Settings"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (projection plan store)
    database_url: str = "sqlite:///./cashflow.db"

    # Spreadsheet values API
    sheets_api_base: str = "https://sheets.googleapis.com/v4"
    sheets_api_key: str = ""
    sales_spreadsheet_id: str = ""
    sales_range: str = "Data total"
    purchases_spreadsheet_id: str = ""
    purchases_range: str = "OC_MASTER"

    # Weekly financial model (optional seasonal source)
    weekly_model_url: Optional[str] = None

    # Service
    service_name: str = "cashflow-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # Projections
    historical_days: int = 30
    projection_weeks: int = 4
    plan_ttl_days: int = 28
    scenario_factor_mode: Literal["derived", "fixed"] = "derived"


settings = Settings()
