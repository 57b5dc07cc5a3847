from __future__ import annotations

import re
from dataclasses import dataclass

from app.schemas.assistant import WeatherSnapshot

# Japanese punctuation, hiragana, katakana and common CJK ideographs
_JAPANESE_PATTERN = re.compile(r"[\u3000-\u303F\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")

LANGUAGE_JAPANESE = "Japanese"
LANGUAGE_ENGLISH = "English"

OUTFIT_IDEA_MARKER = "**Outfit Idea"
CLOTHING_ITEMS_MARKER = "**Clothing Items:**"
COLOR_STYLE_MARKER = "**Color/Style:**"
WHY_SUITABLE_MARKER = "**Why it's suitable:**"

_OUTFIT_BLOCK = """**Outfit Idea {n}:** [Creative Name]
**Clothing Items:** [specific items]
**Color/Style:** [colors and style details]
**Why it's suitable:** [weather explanation]"""

ASSISTANT_PROMPT = """You are an intelligent fashion and weather assistant. Based on the user's query and current weather data, provide an appropriate response.

Current Weather in {location}:
- Weather: {description}
- Temperature: {temperature}°C (feels like {feels_like}°C)
- Humidity: {humidity}%
- Wind: {wind_speed} m/s

User Query: "{user_query}"

If the user is asking for outfit suggestions, provide exactly 3 outfit recommendations in this format:

{outfit_blocks}

If the user is asking about weather, activities, or general conversation, provide a natural helpful response.

IMPORTANT: Respond in {language} language.

Do not include any instruction labels or type indicators in your response. Respond directly to the user's question."""


@dataclass(frozen=True, slots=True)
class PromptContext:
    weather: WeatherSnapshot
    user_query: str
    language: str = LANGUAGE_ENGLISH


def detect_language(text: str) -> str:
    """Reply language follows the script of the user's query."""
    return LANGUAGE_JAPANESE if _JAPANESE_PATTERN.search(text or "") else LANGUAGE_ENGLISH


def build_prompt_context(weather: WeatherSnapshot, user_query: str) -> PromptContext:
    return PromptContext(weather=weather, user_query=user_query, language=detect_language(user_query))


def build_assistant_prompt(context: PromptContext) -> str:
    weather = context.weather
    outfit_blocks = "\n\n".join(_OUTFIT_BLOCK.format(n=n) for n in range(1, 4))
    return ASSISTANT_PROMPT.format(
        location=weather.location,
        description=weather.description,
        temperature=weather.temperature,
        feels_like=weather.feels_like,
        humidity=weather.humidity,
        wind_speed=weather.wind_speed,
        user_query=context.user_query,
        outfit_blocks=outfit_blocks,
        language=context.language,
    )


__all__ = [
    "ASSISTANT_PROMPT",
    "CLOTHING_ITEMS_MARKER",
    "COLOR_STYLE_MARKER",
    "LANGUAGE_ENGLISH",
    "LANGUAGE_JAPANESE",
    "OUTFIT_IDEA_MARKER",
    "PromptContext",
    "WHY_SUITABLE_MARKER",
    "build_assistant_prompt",
    "build_prompt_context",
    "detect_language",
]
