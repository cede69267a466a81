"""WCAG relative luminance and contrast ratio, plus hex/RGB helpers."""
from __future__ import annotations
from typing import Optional, Sequence, Tuple, Union

from domain.dtos import HEX_RE, Color

ColorInput = Union[str, Color, Sequence[int]]

WEIGHTS = (0.2126, 0.7152, 0.0722)

def rgb_to_hex(r: float, g: float, b: float) -> str:
    def channel(n: float) -> int:
        return max(0, min(255, int(round(n))))
    return f"#{channel(r):02X}{channel(g):02X}{channel(b):02X}"

def hex_to_rgb(value: str) -> Optional[Tuple[int, int, int]]:
    try:
        return Color.from_hex(value).as_tuple()
    except ValueError:
        return None

def is_hex(value: str) -> bool:
    return isinstance(value, str) and HEX_RE.fullmatch(value) is not None

def to_color(value: ColorInput) -> Optional[Color]:
    """Hex string, Color or (r, g, b) -> Color; None if it isn't one."""
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        rgb = hex_to_rgb(value)
        return Color(*rgb) if rgb else None
    try:
        r, g, b = (int(v) for v in value)
        return Color(r, g, b)
    except (TypeError, ValueError):
        return None

def _linear(c: float) -> float:
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

def relative_luminance(color: ColorInput) -> Optional[float]:
    c = to_color(color)
    if c is None:
        return None
    lin = [_linear(v / 255.0) for v in c.as_tuple()]
    return sum(w * v for w, v in zip(WEIGHTS, lin))

def contrast_ratio(a: ColorInput, b: ColorInput) -> Optional[float]:
    la = relative_luminance(a)
    lb = relative_luminance(b)
    if la is None or lb is None:
        return None
    lighter, darker = max(la, lb), min(la, lb)
    return round((lighter + 0.05) / (darker + 0.05), 2)

def readable_text_color(background: ColorInput) -> str:
    """Black or white, whichever reads better on the background."""
    on_black = contrast_ratio(background, "#000000")
    on_white = contrast_ratio(background, "#FFFFFF")
    if on_black is None or on_white is None:
        raise ValueError(f"invalid color: {background!r}")
    return "#000000" if on_black >= on_white else "#FFFFFF"
