"""Thin wrapper around the Gemini API exposing one call per model candidate."""

from __future__ import annotations

from typing import Any, Callable

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai import types as genai_types

from app.core.config import settings
from app.core.errors import ConfigurationError
from app.services.generation import (
    GenerationEmptyContentError,
    GenerationHTTPError,
    GenerationNoCandidatesError,
    GenerationTransportError,
)


class GeminiTextProvider:
    """Text generation provider backed by `google.generativeai`."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float,
        model_factory: Callable[[str], Any] | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Gemini API key not configured")

        genai.configure(api_key=api_key)
        self._timeout = timeout
        self._model_factory = model_factory or genai.GenerativeModel

    def generate(
        self,
        model_name: str,
        prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        if not prompt:
            raise ValueError("Prompt must not be empty")

        model = self._model_factory(model_name)
        try:
            response = model.generate_content(
                prompt,
                generation_config=genai_types.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
                request_options={"timeout": self._timeout},
            )
        except google_exceptions.GoogleAPICallError as exc:
            status = int(exc.code) if exc.code is not None else None
            raise GenerationHTTPError(status, exc.message or str(exc)) from exc
        except Exception as exc:  # pylint: disable=broad-except
            raise GenerationTransportError(f"Exception: {exc}") from exc

        return _extract_text(response)


def _extract_text(response: Any) -> str:
    candidates = list(getattr(response, "candidates", None) or [])
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        raise GenerationNoCandidatesError(
            f"No candidates in response: {feedback}" if feedback else "No candidates in response"
        )

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = list(getattr(content, "parts", None) or [])
    text = (getattr(parts[0], "text", "") or "") if parts else ""
    if text.strip():
        return text

    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason is not None:
        reason = getattr(finish_reason, "name", finish_reason)
        raise GenerationEmptyContentError(f"Finish reason: {reason}")
    raise GenerationEmptyContentError(
        "Empty response from model" if parts else "No content/parts in candidate"
    )


def get_gemini_provider() -> GeminiTextProvider:
    return GeminiTextProvider(
        api_key=settings.gemini_api_key,
        timeout=settings.gemini_timeout_sec,
    )


__all__ = ["GeminiTextProvider", "get_gemini_provider"]
