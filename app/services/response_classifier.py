from __future__ import annotations

from app.schemas.assistant import ClassificationLabel
from app.services.prompt_templates import (
    CLOTHING_ITEMS_MARKER,
    COLOR_STYLE_MARKER,
    OUTFIT_IDEA_MARKER,
    WHY_SUITABLE_MARKER,
)

_FIELD_MARKERS: tuple[str, ...] = (CLOTHING_ITEMS_MARKER, COLOR_STYLE_MARKER, WHY_SUITABLE_MARKER)


def is_outfit_suggestion(text: str) -> bool:
    if not text or OUTFIT_IDEA_MARKER not in text:
        return False
    return any(marker in text for marker in _FIELD_MARKERS)


def classify(text: str) -> ClassificationLabel:
    """Outfit only when a section marker and at least one field marker appear."""
    if is_outfit_suggestion(text):
        return ClassificationLabel.OUTFIT
    return ClassificationLabel.CONVERSATION


__all__ = ["classify", "is_outfit_suggestion"]
