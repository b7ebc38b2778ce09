from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Style:
    """Icon and color for a state.  Labels come from ``label_for``."""

    icon: str
    color: str


UNKNOWN_STYLE = Style(icon="●", color="grey50")

_OPERATIONAL = Style(icon="✔", color="green")
_DEGRADED = Style(icon="▲", color="dark_orange")
_OUTAGE = Style(icon="✖", color="red")
_MAINTENANCE = Style(icon="⚙", color="blue")

# Keyed by lower-cased wire value; covers the live table vocabulary, the
# polling endpoint vocabulary and incident lifecycle states.
_STYLES: dict[str, Style] = {
    "operational": _OPERATIONAL,
    "partial outage": _DEGRADED,
    "degraded": _DEGRADED,
    "major outage": _OUTAGE,
    "outage": _OUTAGE,
    "maintenance": _MAINTENANCE,
    "investigating": Style(icon="▲", color="yellow"),
    "identified": Style(icon="▲", color="dark_orange"),
    "monitoring": Style(icon="◉", color="blue"),
    "resolved": Style(icon="✔", color="green"),
}


def _key(value: Any) -> str:
    raw = getattr(value, "value", value)
    return str(raw or "").strip().lower()


def style_for(value: Any) -> Style:
    """Visual style for a state; unknown values get the neutral style."""
    return _STYLES.get(_key(value), UNKNOWN_STYLE)


def label_for(value: Any) -> str:
    """Display label: the wire value with its first letter capitalised."""
    raw = str(getattr(value, "value", value) or "").strip()
    if not raw:
        return "Unknown"
    return raw[0].upper() + raw[1:]


def is_known(value: Any) -> bool:
    return _key(value) in _STYLES
