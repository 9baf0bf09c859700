"""Rich-text rendering of the passage with per-character status."""

from __future__ import annotations

import html
from itertools import groupby
from typing import Iterable

from typeclassic.core.session import CharacterState
from typeclassic.ui.colors import STATUS_STYLES


def render_passage_html(states: Iterable[CharacterState]) -> str:
    """Join runs of equally-styled characters into ``<span>`` elements."""
    parts = []
    for status, run in groupby(states, key=lambda s: s.status):
        text = html.escape("".join(s.char for s in run))
        parts.append(f'<span style="{STATUS_STYLES[status]}">{text}</span>')
    return "".join(parts)
