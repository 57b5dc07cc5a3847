from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: str
    description: str
    temperature: float
    feels_like: float = Field(alias="feelsLike")
    humidity: int | float
    wind_speed: float = Field(alias="windSpeed")
    icon: str


class ClassificationLabel(str, Enum):
    OUTFIT = "outfit"
    CONVERSATION = "conversation"


class OutfitItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    description: str


class Outfit(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    items: tuple[OutfitItem, ...] = Field(min_length=1)
    color_style: str = Field(default="", alias="colorStyle")
    why_suitable: str = Field(default="", alias="whySuitable")


class AssistantRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_query: str = Field(default="", alias="userQuery")
    location: str = ""
    mode: Literal["weather-only", "full"] = "full"

    @field_validator("user_query", "location", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("mode", mode="before")
    @classmethod
    def default_mode(cls, v: Any) -> str:
        # Anything other than an explicit weather-only request runs the full flow
        return "weather-only" if v == "weather-only" else "full"


class AssistantResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    weather: WeatherSnapshot
    suggestions: str = ""
    conversation_response: str = Field(default="", alias="conversationResponse")
    response_type: Literal["weather-only", "outfit", "conversation"] = Field(alias="responseType")
    outfits: list[Outfit] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


__all__ = [
    "AssistantRequest",
    "AssistantResponse",
    "ClassificationLabel",
    "ErrorResponse",
    "Outfit",
    "OutfitItem",
    "WeatherSnapshot",
]
