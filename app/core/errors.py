"""Errors surfaced to API callers as `{error, details?}` payloads."""

from __future__ import annotations

from typing import Any


class AssistantError(Exception):
    """Base error for failures that end the request with an error payload."""

    code = "assistant_error"

    def __init__(self, message: str, *, status_code: int = 500, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(AssistantError):
    """A provider credential is missing; raised before any network call."""

    code = "configuration_error"


class UpstreamWeatherError(AssistantError):
    """The weather provider did not return a usable reading."""

    code = "upstream_weather_error"


__all__ = ["AssistantError", "ConfigurationError", "UpstreamWeatherError"]
