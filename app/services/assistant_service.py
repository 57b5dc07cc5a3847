from __future__ import annotations

import logging
import threading
from typing import Callable

from app.core.config import settings
from app.schemas.assistant import AssistantRequest, AssistantResponse, ClassificationLabel
from app.services.gemini_client import get_gemini_provider
from app.services.generation import (
    Exhausted,
    GenerationObserver,
    GenerationOrchestrator,
    LoggingGenerationObserver,
    ModelCandidate,
    Succeeded,
    TextGenerationProvider,
    build_candidates,
)
from app.services.outfit_parser import parse_outfits
from app.services.prompt_templates import build_prompt_context
from app.services.response_classifier import classify
from app.services.weather_client import WeatherClient


logger = logging.getLogger(__name__)


class AssistantService:
    """Composes weather lookup, generation and response interpretation per request."""

    def __init__(
        self,
        weather_client: WeatherClient,
        provider_factory: Callable[[], TextGenerationProvider],
        candidates: list[ModelCandidate] | None = None,
        observer: GenerationObserver | None = None,
    ) -> None:
        self.weather_client = weather_client
        self.provider_factory = provider_factory
        self.candidates = candidates or build_candidates(settings.gemini_models)
        self.observer = observer or LoggingGenerationObserver()

    def handle(
        self,
        request: AssistantRequest,
        cancel_event: threading.Event | None = None,
    ) -> AssistantResponse:
        needs_generation = request.mode != "weather-only" and bool(request.user_query.strip())

        # Both credentials are validated before any network call
        self.weather_client.ensure_configured()
        provider = self.provider_factory() if needs_generation else None

        weather = self.weather_client.fetch_current(request.location)
        if provider is None:
            return AssistantResponse(weather=weather, response_type="weather-only")

        context = build_prompt_context(weather, request.user_query)
        orchestrator = GenerationOrchestrator(
            provider=provider,
            candidates=self.candidates,
            observer=self.observer,
        )
        outcome = orchestrator.generate(context, cancel_event=cancel_event)
        if isinstance(outcome, Succeeded):
            text = outcome.text
            logger.info("Reply generated by %s after %d attempt(s)", outcome.model_used, len(outcome.attempts))
        elif isinstance(outcome, Exhausted):
            text = outcome.fallback_text
        else:  # pragma: no cover - exhaustive over GenerationOutcome
            raise TypeError(f"Unexpected generation outcome: {outcome!r}")

        if classify(text) is ClassificationLabel.OUTFIT:
            return AssistantResponse(
                weather=weather,
                suggestions=text,
                response_type="outfit",
                outfits=parse_outfits(text),
            )
        return AssistantResponse(
            weather=weather,
            conversation_response=text,
            response_type="conversation",
        )


def build_assistant_service() -> AssistantService:
    return AssistantService(
        weather_client=WeatherClient(),
        provider_factory=get_gemini_provider,
    )


__all__ = ["AssistantService", "build_assistant_service"]
