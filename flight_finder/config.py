# flight_finder/config.py
from typing import Literal, Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"
    APP_NAME: str = "AI Flight Finder"

    # Gemini
    GEMINI_API_KEY: Optional[str] = Field(
        None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Search contract
    PRICE_CURRENCY: str = "INR"  # prices are requested without a symbol
    MIN_FLIGHT_OPTIONS: int = 5

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
