from __future__ import annotations

import threading

import pytest

from app.schemas.assistant import WeatherSnapshot
from app.services.generation import (
    AttemptOutcome,
    Exhausted,
    GENERATION_MAX_OUTPUT_TOKENS,
    GENERATION_TEMPERATURE,
    GenerationAttempt,
    GenerationHTTPError,
    GenerationNoCandidatesError,
    GenerationOrchestrator,
    GenerationTransportError,
    ModelCandidate,
    Succeeded,
    build_candidates,
    build_fallback_text,
    first_success,
    strip_instruction_labels,
)
from app.services.prompt_templates import PromptContext


MODELS = ["model-a", "model-b", "model-c", "model-d"]


class ScriptedProvider:
    def __init__(self, script: dict) -> None:
        self.script = script
        self.calls: list[dict] = []

    def generate(self, model_name: str, prompt: str, *, temperature: float, max_output_tokens: int) -> str:
        self.calls.append(
            {
                "model": model_name,
                "prompt": prompt,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        result = self.script[model_name]
        if isinstance(result, Exception):
            raise result
        return result


class RecordingObserver:
    def __init__(self) -> None:
        self.attempts = []
        self.exhausted = None

    def on_attempt(self, attempt) -> None:
        self.attempts.append(attempt)

    def on_exhausted(self, attempts, *, cancelled: bool) -> None:
        self.exhausted = (len(attempts), cancelled)


def _context(query: str = "What should I wear?") -> PromptContext:
    weather = WeatherSnapshot(
        location="Paris",
        description="light rain",
        temperature=12.6,
        feels_like=11.2,
        humidity=81,
        wind_speed=4.1,
        icon="10d",
    )
    return PromptContext(weather=weather, user_query=query)


def _orchestrator(script: dict, observer=None) -> tuple[GenerationOrchestrator, ScriptedProvider]:
    provider = ScriptedProvider(script)
    kwargs = {"observer": observer} if observer else {}
    return GenerationOrchestrator(provider=provider, candidates=build_candidates(MODELS), **kwargs), provider


@pytest.mark.parametrize("winner", [0, 1, 2, 3])
def test_first_successful_candidate_wins_and_later_ones_are_never_called(winner):
    script = {}
    for idx, name in enumerate(MODELS):
        if idx < winner:
            script[name] = GenerationTransportError("connection reset")
        elif idx == winner:
            script[name] = f"reply from {name}"
        else:
            script[name] = "should never be used"
    orchestrator, provider = _orchestrator(script)

    outcome = orchestrator.generate(_context())

    assert isinstance(outcome, Succeeded)
    assert outcome.text == f"reply from {MODELS[winner]}"
    assert outcome.model_used == MODELS[winner]
    assert len(outcome.attempts) == winner + 1
    assert [call["model"] for call in provider.calls] == MODELS[: winner + 1]


def test_every_call_uses_fixed_generation_parameters():
    orchestrator, provider = _orchestrator({name: "" for name in MODELS})

    orchestrator.generate(_context())

    assert len(provider.calls) == len(MODELS)
    for call in provider.calls:
        assert call["temperature"] == GENERATION_TEMPERATURE == 0.8
        assert call["max_output_tokens"] == GENERATION_MAX_OUTPUT_TOKENS == 1500
        assert "What should I wear?" in call["prompt"]


def test_exhausted_candidates_fall_back_to_weather_text():
    script = {
        "model-a": GenerationTransportError("timeout"),
        "model-b": GenerationHTTPError(429, "quota exceeded"),
        "model-c": "   ",
        "model-d": GenerationNoCandidatesError("No candidates in response"),
    }
    observer = RecordingObserver()
    orchestrator, _ = _orchestrator(script, observer=observer)

    outcome = orchestrator.generate(_context())

    assert isinstance(outcome, Exhausted)
    assert "Paris" in outcome.fallback_text
    assert "13°C" in outcome.fallback_text
    assert outcome.cancelled is False
    assert [attempt.outcome for attempt in outcome.attempts] == [
        AttemptOutcome.TRANSPORT_ERROR,
        AttemptOutcome.HTTP_ERROR,
        AttemptOutcome.EMPTY_CONTENT,
        AttemptOutcome.NO_CANDIDATES,
    ]
    assert outcome.attempts[1].status_code == 429
    assert "quota exceeded" in outcome.attempts[1].message
    assert len(observer.attempts) == 4
    assert observer.exhausted == (4, False)


def test_unexpected_provider_exception_is_recorded_as_transport_error():
    orchestrator, _ = _orchestrator(
        {"model-a": ConnectionError("dns failure"), "model-b": "ok", "model-c": "x", "model-d": "x"}
    )

    outcome = orchestrator.generate(_context())

    assert isinstance(outcome, Succeeded)
    assert outcome.attempts[0].outcome is AttemptOutcome.TRANSPORT_ERROR
    assert "dns failure" in outcome.attempts[0].message


def test_success_strips_leaked_instruction_label():
    orchestrator, _ = _orchestrator({name: "TYPE B - CONVERSATION: It will be sunny today." for name in MODELS})

    outcome = orchestrator.generate(_context())

    assert isinstance(outcome, Succeeded)
    assert outcome.text == "It will be sunny today."


def test_candidates_are_tried_in_rank_order_not_list_order():
    candidates = [ModelCandidate("late", 2), ModelCandidate("early", 0), ModelCandidate("middle", 1)]
    provider = ScriptedProvider({"early": "", "middle": "", "late": ""})
    orchestrator = GenerationOrchestrator(provider=provider, candidates=candidates, observer=RecordingObserver())

    orchestrator.generate(_context())

    assert [call["model"] for call in provider.calls] == ["early", "middle", "late"]


def test_cancelled_generation_skips_remaining_candidates():
    cancel = threading.Event()

    class CancellingProvider(ScriptedProvider):
        def generate(self, model_name, prompt, *, temperature, max_output_tokens):
            cancel.set()
            return super().generate(
                model_name, prompt, temperature=temperature, max_output_tokens=max_output_tokens
            )

    provider = CancellingProvider({name: "" for name in MODELS})
    orchestrator = GenerationOrchestrator(
        provider=provider, candidates=build_candidates(MODELS), observer=RecordingObserver()
    )

    outcome = orchestrator.generate(_context(), cancel_event=cancel)

    assert isinstance(outcome, Exhausted)
    assert outcome.cancelled is True
    assert len(outcome.attempts) == 1
    assert len(provider.calls) == 1


def test_build_candidates_rejects_empty_and_duplicate_lists():
    with pytest.raises(ValueError):
        build_candidates([])
    with pytest.raises(ValueError):
        build_candidates(["a", "b", "a"])

    candidates = build_candidates(["a", "b"])
    assert [(c.identifier, c.rank) for c in candidates] == [("a", 0), ("b", 1)]


def test_first_success_returns_none_when_nothing_succeeds():
    seen = []

    def attempt(name: str) -> GenerationAttempt:
        seen.append(name)
        return GenerationAttempt(candidate=name, outcome=AttemptOutcome.EMPTY_CONTENT)

    success, attempts = first_success(["x", "y"], attempt)

    assert success is None
    assert seen == ["x", "y"]
    assert len(attempts) == 2


def test_strip_instruction_labels_leaves_plain_text_alone():
    assert strip_instruction_labels("  Bring an umbrella.  ") == "Bring an umbrella."
    assert strip_instruction_labels("type a - outfit ideas:\n**Outfit Idea 1:** X").startswith("**Outfit Idea 1:**")


def test_fallback_text_mentions_location_description_and_rounded_temperature():
    text = build_fallback_text(_context())

    assert text.startswith("The weather in Paris is currently light rain with a temperature of 13°C.")
