from __future__ import annotations
import json
import time
from typing import List, Optional, Union

from domain.dtos import Color, Palette

ColorLike = Union[str, Color]

class PaletteFullError(Exception):
    pass

class ActivePalette:
    """Palette the user is curating from extracted swatches. Ordered, no duplicates."""

    def __init__(self, limit: int = 8) -> None:
        self.limit = limit
        self._colors: List[Color] = []

    @staticmethod
    def _coerce(color: ColorLike) -> Color:
        return color if isinstance(color, Color) else Color.from_hex(color)

    def add(self, color: ColorLike) -> bool:
        c = self._coerce(color)
        if c in self._colors:
            return False
        if len(self._colors) >= self.limit:
            raise PaletteFullError(f"Max {self.limit} colors in active palette")
        self._colors.append(c)
        return True

    def remove(self, color: ColorLike) -> bool:
        c = self._coerce(color)
        if c not in self._colors:
            return False
        self._colors.remove(c)
        return True

    def clear(self) -> None:
        self._colors.clear()

    @property
    def colors(self) -> List[Color]:
        return list(self._colors)

    @property
    def hexes(self) -> List[str]:
        return [c.hex for c in self._colors]

    def __len__(self) -> int:
        return len(self._colors)

    def to_json(self) -> str:
        return json.dumps(self.hexes, indent=2)

    def to_palette(self, name: str, created: Optional[int] = None) -> Palette:
        if not self._colors:
            raise ValueError("active palette is empty")
        if created is None:
            created = int(time.time() * 1000)
        return Palette(name=(name or '').strip() or 'Untitled', colors=self.colors, created=created)
