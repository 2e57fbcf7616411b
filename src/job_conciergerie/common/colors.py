from __future__ import annotations

from typing import Optional

DEFAULT_COLOR = "var(--color-default)"

COLOR_OPTIONS = (
    {"name": "Bleu", "value": "#3b82f6"},
    {"name": "Vert", "value": "#22c55e"},
    {"name": "Rouge", "value": "#ef4444"},
    {"name": "Orange", "value": "#f97316"},
    {"name": "Violet", "value": "#8b5cf6"},
    {"name": "Rose", "value": "#ec4899"},
    {"name": "Jaune", "value": "#eab308"},
    {"name": "Turquoise", "value": "#14b8a6"},
    {"name": "Indigo", "value": "#6366f1"},
    {"name": "Gris", "value": "#6b7280"},
)


def color_value_by_name(color_name: Optional[str]) -> str:
    for option in COLOR_OPTIONS:
        if option["name"] == color_name:
            return option["value"]
    return DEFAULT_COLOR
