from __future__ import annotations

import logging
from typing import Any, Dict

import requests
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import ConfigurationError, UpstreamWeatherError
from app.schemas.assistant import WeatherSnapshot


logger = logging.getLogger(__name__)


class WeatherClient:
    """Lightweight wrapper around OpenWeather current weather API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.weather_api_key
        self.base_url = (base_url or settings.weather_api_base_url).rstrip("/")
        self.timeout = settings.weather_timeout_sec
        self.session = session or requests.Session()

    def ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("Weather API key not configured")

    def fetch_current(self, location: str) -> WeatherSnapshot:
        """Return a normalized reading for `location`; no retries."""
        self.ensure_configured()
        params = {
            "q": location,
            "appid": self.api_key,
            "units": settings.weather_units,
            "lang": settings.weather_lang,
        }
        try:
            resp = self.session.get(
                f"{self.base_url}/weather",
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Weather request failed for %r: %s", location, exc)
            raise UpstreamWeatherError(f"Weather API error: {exc}") from exc

        if not resp.ok:
            reason = resp.reason or f"HTTP {resp.status_code}"
            logger.warning("Weather API returned %s for %r", resp.status_code, location)
            raise UpstreamWeatherError(f"Weather API error: {reason}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamWeatherError("Weather API error: invalid JSON payload") from exc

        return self._normalize(payload)

    def _normalize(self, payload: Dict[str, Any]) -> WeatherSnapshot:
        weather_entries = payload.get("weather") or []
        weather_entry = weather_entries[0] if weather_entries else {}
        main_block = payload.get("main") or {}
        wind_block = payload.get("wind") or {}

        try:
            return WeatherSnapshot(
                location=payload.get("name") or "",
                description=weather_entry.get("description") or "",
                temperature=main_block.get("temp"),
                feels_like=main_block.get("feels_like"),
                humidity=main_block.get("humidity"),
                wind_speed=wind_block.get("speed", 0.0),
                icon=weather_entry.get("icon") or "",
            )
        except ValidationError as exc:
            logger.warning("Weather payload missing fields: %s", exc)
            raise UpstreamWeatherError(
                "Weather API error: incomplete payload", details=str(exc)
            ) from exc
