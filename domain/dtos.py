from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from domain.enums import ExtractionStatus

HEX_RE = re.compile(r"#?(?:[0-9A-F]{3}){1,2}", re.IGNORECASE)

@dataclass(frozen=True)
class Color:
    """8-bit RGB triple. Equality is on the channels, so '#abc' == '#AABBCC'."""
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= 255:
                raise ValueError(f"channel {name}={v!r} is not an integer in [0, 255]")

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        if not isinstance(value, str) or not HEX_RE.fullmatch(value):
            raise ValueError(f"invalid hex color: {value!r}")
        digits = value.lstrip("#")
        if len(digits) == 3:
            digits = "".join(d * 2 for d in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

@dataclass(frozen=True)
class PixelSample:
    pixels: np.ndarray  # (height, width, 4) uint8 RGBA, read-only

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def stride(self) -> int:
        return int(self.pixels.strides[0])  # bytes per row

@dataclass
class Palette:
    name: str
    colors: List[Color]
    created: int  # ms since epoch

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'colors': [c.hex for c in self.colors], 'created': self.created}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Palette":
        return Palette(name=str(data.get('name') or 'Palette'),
                       colors=[Color.from_hex(h) for h in data.get('colors') or []],
                       created=int(data.get('created') or 0))

@dataclass
class ExtractionResult:
    status: ExtractionStatus
    colors: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == ExtractionStatus.ok

    @staticmethod
    def ok(colors: List[str]) -> "ExtractionResult":
        return ExtractionResult(status=ExtractionStatus.ok, colors=list(colors))

    @staticmethod
    def failed(error: str) -> "ExtractionResult":
        return ExtractionResult(status=ExtractionStatus.failed, colors=[], error=error)
