"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (threshold trigger store)
    database_url: str = "sqlite:///./finance_insights.db"

    # Service
    service_name: str = "finance-insights"
    log_level: str = "INFO"

    # Projections
    default_projection_months: int = 6
    max_projection_months: int = 24
    recurring_max_iterations: int = 500  # Safety bound per recurring entry

    # Budgets
    budget_default_thresholds: str = "0.5,0.75,0.9"  # Comma separated ratios in (0, 1]
    budget_fallback_caution_ratio: float = 0.6
    budget_fallback_warning_ratio: float = 0.85


settings = Settings()
