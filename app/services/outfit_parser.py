"""Parse "Outfit Idea N" markdown sections into Outfit records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from app.schemas.assistant import Outfit, OutfitItem
from app.services.prompt_templates import (
    CLOTHING_ITEMS_MARKER,
    COLOR_STYLE_MARKER,
    WHY_SUITABLE_MARKER,
)

_SECTION_DELIMITER = re.compile(r"\*\*Outfit Idea \d+:\*\*")
_EMPHASIS_EDGES = re.compile(r"^\*\*|\*\*$")

ITEMS_CATEGORY = "Items"
PLACEHOLDER_ITEM = OutfitItem(category="Complete Outfit", description="See description below for details")


class _Field(Enum):
    NONE = "none"
    ITEMS = "items"
    COLOR = "color"
    WHY = "why"


_LABELS: tuple[tuple[str, _Field], ...] = (
    (CLOTHING_ITEMS_MARKER, _Field.ITEMS),
    (COLOR_STYLE_MARKER, _Field.COLOR),
    (WHY_SUITABLE_MARKER, _Field.WHY),
)


@dataclass(slots=True)
class _SectionDraft:
    title: str = ""
    items: list[str] = field(default_factory=list)
    color_style: str = ""
    why_suitable: str = ""
    active: _Field = _Field.NONE

    def start(self, target: _Field, seed: str) -> None:
        self.active = target
        if target is _Field.ITEMS:
            if seed:
                self.items.append(seed)
        elif target is _Field.COLOR:
            self.color_style = seed
        elif target is _Field.WHY:
            self.why_suitable = seed

    def extend(self, line: str) -> None:
        if self.active is _Field.ITEMS:
            if self.items:
                self.items[0] = f"{self.items[0]} {line}"
            else:
                self.items.append(line)
        elif self.active is _Field.COLOR:
            self.color_style = _join(self.color_style, line)
        elif self.active is _Field.WHY:
            self.why_suitable = _join(self.why_suitable, line)

    def freeze(self) -> Outfit:
        items = tuple(OutfitItem(category=ITEMS_CATEGORY, description=text) for text in self.items)
        return Outfit(
            title=self.title,
            items=items or (PLACEHOLDER_ITEM,),
            color_style=self.color_style,
            why_suitable=self.why_suitable,
        )


def _join(current: str, line: str) -> str:
    return f"{current} {line}" if current else line


def _match_label(line: str) -> tuple[_Field, str] | None:
    for label, target in _LABELS:
        if line.startswith(label):
            return target, line.replace(label, "", 1).strip()
    return None


def _section_title(lines: list[str], index: int) -> str:
    # Only the first section of the text is titled from its own first line;
    # later sections keep the positional default.
    if index == 0 and lines:
        title = _EMPHASIS_EDGES.sub("", lines[0]).strip()
        if title:
            return title
    return f"Style {index + 1}"


def _parse_section(section: str, index: int) -> Outfit:
    lines = [line.strip() for line in section.strip().splitlines() if line.strip()]
    draft = _SectionDraft(title=_section_title(lines, index))
    for line in lines:
        matched = _match_label(line)
        if matched is not None:
            draft.start(*matched)
            continue
        # Unknown bold labels never extend a field
        if line.startswith("**"):
            continue
        draft.extend(line)
    return draft.freeze()


def parse_outfits(text: str) -> list[Outfit]:
    """Return one Outfit per "Outfit Idea N" section, in source order.

    Text before the first delimiter is discarded. An empty list means no
    delimiter was found and the caller should show the raw text instead.
    """
    if not text:
        return []
    sections = _SECTION_DELIMITER.split(text)[1:]
    return [_parse_section(section, index) for index, section in enumerate(sections)]


__all__ = ["PLACEHOLDER_ITEM", "parse_outfits"]
