"""Application configuration management."""
from decimal import Decimal
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Gemini image editing
    api_key: str = Field(default="", validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY"))
    image_model: str = "gemini-2.5-flash-image"

    # Ledger
    starting_balance: Decimal = Decimal("125.50")

    # Watch & earn
    video_duration: int = 15  # seconds the video must play before claiming
    video_reward: Decimal = Decimal("10")
    watch_tick_seconds: float = 1.0
    claim_delay_seconds: float = 1.5  # pretend settlement delay

    # Referral
    referral_link: str = "https://viewinsta.example/ref/user123"
    referral_bonus: int = 50
    copy_reset_seconds: float = 2.0

    # Withdrawal
    withdrawal_fee: Decimal = Decimal("2.50")
    withdrawal_minimum: Decimal = Decimal("100")

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
