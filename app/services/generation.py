"""Ordered-fallback text generation across configured model candidates."""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Protocol, Sequence, TypeVar

from app.services.prompt_templates import PromptContext, build_assistant_prompt


logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.8
GENERATION_MAX_OUTPUT_TOKENS = 1500

_INSTRUCTION_LABEL_PATTERN = re.compile(r"^TYPE [AB] - [A-Z\s]+:?\s*", re.IGNORECASE)


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TRANSPORT_ERROR = "transportError"
    HTTP_ERROR = "httpError"
    EMPTY_CONTENT = "emptyContent"
    NO_CANDIDATES = "noCandidates"


class GenerationAttemptError(RuntimeError):
    """Raised by a provider when a single candidate call fails."""

    outcome = AttemptOutcome.TRANSPORT_ERROR


class GenerationTransportError(GenerationAttemptError):
    outcome = AttemptOutcome.TRANSPORT_ERROR


class GenerationHTTPError(GenerationAttemptError):
    outcome = AttemptOutcome.HTTP_ERROR

    def __init__(self, status_code: int | None, body: str) -> None:
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class GenerationNoCandidatesError(GenerationAttemptError):
    outcome = AttemptOutcome.NO_CANDIDATES


class GenerationEmptyContentError(GenerationAttemptError):
    outcome = AttemptOutcome.EMPTY_CONTENT


class TextGenerationProvider(Protocol):
    def generate(
        self,
        model_name: str,
        prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        ...


@dataclass(frozen=True, slots=True)
class ModelCandidate:
    identifier: str
    rank: int


def build_candidates(model_names: Iterable[str]) -> list[ModelCandidate]:
    names = [name for name in model_names]
    if not names:
        raise ValueError("At least one model candidate is required")
    if len(set(names)) != len(names):
        raise ValueError("Model candidates must be unique")
    return [ModelCandidate(identifier=name, rank=rank) for rank, name in enumerate(names)]


@dataclass(frozen=True, slots=True)
class GenerationAttempt:
    candidate: str
    outcome: AttemptOutcome
    message: str | None = None
    text: str | None = None
    status_code: int | None = None
    latency_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS


@dataclass(frozen=True, slots=True)
class Succeeded:
    text: str
    model_used: str
    attempts: tuple[GenerationAttempt, ...] = ()


@dataclass(frozen=True, slots=True)
class Exhausted:
    fallback_text: str
    attempts: tuple[GenerationAttempt, ...] = ()
    cancelled: bool = False


GenerationOutcome = Succeeded | Exhausted


class GenerationObserver(Protocol):
    def on_attempt(self, attempt: GenerationAttempt) -> None:
        ...

    def on_exhausted(self, attempts: Sequence[GenerationAttempt], *, cancelled: bool) -> None:
        ...


class LoggingGenerationObserver:
    """Default observer: one structured log record per attempt."""

    def on_attempt(self, attempt: GenerationAttempt) -> None:
        level = logging.INFO if attempt.succeeded else logging.WARNING
        logger.log(
            level,
            "Generation attempt model=%s outcome=%s latency_ms=%.1f",
            attempt.candidate,
            attempt.outcome.value,
            attempt.latency_ms,
            extra={
                "model": attempt.candidate,
                "outcome": attempt.outcome.value,
                "latency_ms": attempt.latency_ms,
                "status_code": attempt.status_code,
                "diagnostic": attempt.message,
            },
        )

    def on_exhausted(self, attempts: Sequence[GenerationAttempt], *, cancelled: bool) -> None:
        last = attempts[-1].message if attempts else None
        logger.warning(
            "Generation exhausted after %d attempt(s) cancelled=%s last_error=%s",
            len(attempts),
            cancelled,
            last,
        )


T = TypeVar("T")


def first_success(
    candidates: Iterable[T],
    attempt: Callable[[T], GenerationAttempt],
    *,
    should_stop: Callable[[], bool] | None = None,
) -> tuple[GenerationAttempt | None, list[GenerationAttempt]]:
    """Run `attempt` over candidates in order until one succeeds.

    Returns the successful attempt (or None) and every attempt made. Candidates
    after the first success are never started.
    """
    attempts: list[GenerationAttempt] = []
    for candidate in candidates:
        if should_stop is not None and should_stop():
            break
        result = attempt(candidate)
        attempts.append(result)
        if result.succeeded:
            return result, attempts
    return None, attempts


def strip_instruction_labels(text: str) -> str:
    return _INSTRUCTION_LABEL_PATTERN.sub("", text, count=1).strip()


def build_fallback_text(context: PromptContext) -> str:
    weather = context.weather
    return (
        f"The weather in {weather.location} is currently {weather.description} "
        f"with a temperature of {round(weather.temperature)}°C. "
        "How can I help you with weather information or outfit suggestions?"
    )


@dataclass
class GenerationOrchestrator:
    provider: TextGenerationProvider
    candidates: Sequence[ModelCandidate]
    observer: GenerationObserver = field(default_factory=LoggingGenerationObserver)

    def __post_init__(self) -> None:
        if not self.candidates:
            raise ValueError("At least one model candidate is required")
        self.candidates = sorted(self.candidates, key=lambda candidate: candidate.rank)

    def generate(
        self,
        context: PromptContext,
        cancel_event: threading.Event | None = None,
    ) -> GenerationOutcome:
        prompt = build_assistant_prompt(context)
        logger.info(
            "Generating reply: candidates=%d prompt_len=%d language=%s",
            len(self.candidates),
            len(prompt),
            context.language,
        )

        def run(candidate: ModelCandidate) -> GenerationAttempt:
            attempt = self._attempt(candidate, prompt)
            self.observer.on_attempt(attempt)
            return attempt

        should_stop = cancel_event.is_set if cancel_event is not None else None
        success, attempts = first_success(self.candidates, run, should_stop=should_stop)
        if success is not None:
            return Succeeded(
                text=strip_instruction_labels(success.text or ""),
                model_used=success.candidate,
                attempts=tuple(attempts),
            )

        cancelled = cancel_event is not None and cancel_event.is_set()
        self.observer.on_exhausted(attempts, cancelled=cancelled)
        return Exhausted(
            fallback_text=build_fallback_text(context),
            attempts=tuple(attempts),
            cancelled=cancelled,
        )

    def _attempt(self, candidate: ModelCandidate, prompt: str) -> GenerationAttempt:
        start = time.perf_counter()

        def elapsed() -> float:
            return round((time.perf_counter() - start) * 1000, 2)

        try:
            text = self.provider.generate(
                candidate.identifier,
                prompt,
                temperature=GENERATION_TEMPERATURE,
                max_output_tokens=GENERATION_MAX_OUTPUT_TOKENS,
            )
        except GenerationHTTPError as exc:
            return GenerationAttempt(
                candidate=candidate.identifier,
                outcome=exc.outcome,
                message=str(exc),
                status_code=exc.status_code,
                latency_ms=elapsed(),
            )
        except GenerationAttemptError as exc:
            return GenerationAttempt(
                candidate=candidate.identifier,
                outcome=exc.outcome,
                message=str(exc) or None,
                latency_ms=elapsed(),
            )
        except Exception as exc:  # pylint: disable=broad-except
            return GenerationAttempt(
                candidate=candidate.identifier,
                outcome=AttemptOutcome.TRANSPORT_ERROR,
                message=f"Exception: {exc}",
                latency_ms=elapsed(),
            )

        if not text or not text.strip():
            return GenerationAttempt(
                candidate=candidate.identifier,
                outcome=AttemptOutcome.EMPTY_CONTENT,
                message="Empty response from model",
                latency_ms=elapsed(),
            )
        return GenerationAttempt(
            candidate=candidate.identifier,
            outcome=AttemptOutcome.SUCCESS,
            text=text.strip(),
            latency_ms=elapsed(),
        )


__all__ = [
    "AttemptOutcome",
    "Exhausted",
    "GENERATION_MAX_OUTPUT_TOKENS",
    "GENERATION_TEMPERATURE",
    "GenerationAttempt",
    "GenerationAttemptError",
    "GenerationEmptyContentError",
    "GenerationHTTPError",
    "GenerationNoCandidatesError",
    "GenerationObserver",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "GenerationTransportError",
    "LoggingGenerationObserver",
    "ModelCandidate",
    "Succeeded",
    "TextGenerationProvider",
    "build_candidates",
    "build_fallback_text",
    "first_success",
    "strip_instruction_labels",
]
