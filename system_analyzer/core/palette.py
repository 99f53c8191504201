"""Group colors and per-item tints."""

from __future__ import annotations

from typing import Dict, List, NamedTuple


class Color(NamedTuple):
    r: int
    g: int
    b: int

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


THEME_COLORS: Dict[str, Color] = {
    "cpu": Color(220, 30, 30),
    "gpu": Color(30, 160, 220),
    "ram": Color(20, 180, 90),
    "vram": Color(150, 60, 180),
    "ssd": Color(200, 160, 30),
    "wifi": Color(64, 180, 180),
    "eth": Color(200, 110, 0),
    "chipset": Color(150, 60, 180),
}
LIGHT_GRAY = Color(160, 160, 160)

TINT_STEPS = 6


def theme_color(key: str) -> Color:
    return THEME_COLORS.get(key, LIGHT_GRAY)


def tint(base: Color, factor: float) -> Color:
    """Blend ``base`` toward white by ``factor`` (0 = base, 1 = white)."""
    return Color(*(min(255, int(c + (255 - c) * factor)) for c in base))


def group_palette(key: str, n: int) -> List[Color]:
    """``n`` related shades of the group's base color, cycling every six."""
    base = theme_color(key)
    out = [tint(base, 0.15 + 0.12 * (i % TINT_STEPS)) for i in range(n)]
    return out or [base]
