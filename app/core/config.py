from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import-not-found]


DEFAULT_GEMINI_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash",
    "gemini-2.0-flash-001",
]


class Settings(BaseSettings):
    app_name: str = "weather-stylist"

    cors_origins: list[str] | str = "*"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str] | str:
        if isinstance(v, str):
            if v == "*":
                return "*"
            if "," in v:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
            return [v.strip()] if v.strip() else "*"
        if isinstance(v, list):
            return v
        return "*"

    # Generation provider; candidates are tried in list order
    gemini_api_key: str | None = None
    gemini_models: list[str] | str = Field(default_factory=lambda: list(DEFAULT_GEMINI_MODELS))
    gemini_timeout_sec: float = 30.0

    @field_validator("gemini_models", mode="before")
    @classmethod
    def parse_gemini_models(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [name.strip() for name in v.split(",")]
        names = [str(name).strip() for name in (v or []) if str(name).strip()]
        if not names:
            raise ValueError("gemini_models must list at least one model")
        if len(set(names)) != len(names):
            raise ValueError("gemini_models must not contain duplicates")
        return names

    weather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("openweather_api_key", "weather_api_key"),
    )
    weather_api_base_url: str = "https://api.openweathermap.org/data/2.5"
    weather_units: str = "metric"
    weather_lang: str = "en"
    weather_timeout_sec: float = 5.0

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
