from typing import List, Optional

from domain.dtos import Palette
from domain.enums import ImageSource

HELP = (
    "Send a photo (or an image file), /url <link> or /sample to load a picture.\n"
    "/extract [n] - pull n colors out of it (default {count}, at most {max_count}).\n"
    "/add <hex or swatch n>, /remove <hex>, /active - curate a palette of up to {limit} colors.\n"
    "/copy - palette as JSON, /save [name] - keep it, /palettes - saved list,\n"
    "/delete <n>, /clearall, /clearswatches.\n"
    "/contrast <a> <b> - WCAG contrast ratio of two colors."
)

def loaded(source: ImageSource) -> str:
    if source == ImageSource.url:
        return "Image loaded from URL. Now /extract."
    if source == ImageSource.sample:
        return "Sample image loaded. Now /extract."
    return "Image loaded. Now /extract."

def load_failed(source: ImageSource) -> str:
    if source == ImageSource.url:
        return "Failed to load image from URL"
    if source == ImageSource.sample:
        return "Failed to load sample image"
    return "Failed to load image"

def extraction_summary(colors: List[str]) -> str:
    if not colors:
        return "No colors found"
    return f"Found {len(colors)} colors:\n" + "\n".join(f"{i}. {h}" for i, h in enumerate(colors, 1))

def contrast_summary(a: str, b: str, ratio: Optional[float]) -> str:
    if ratio is None:
        return f"Cannot compute contrast for {a} and {b}: not a valid hex color"
    if ratio >= 7:
        grade = "AAA"
    elif ratio >= 4.5:
        grade = "AA"
    elif ratio >= 3:
        grade = "AA large text"
    else:
        grade = "fails WCAG"
    return f"{a} vs {b}: {ratio:.2f}:1 ({grade})"

def saved_list(palettes: List[Palette]) -> str:
    if not palettes:
        return "No saved palettes"
    return "\n".join(f"{i}. {p.name or 'Palette'}: {' '.join(c.hex for c in p.colors)}"
                     for i, p in enumerate(palettes, 1))
