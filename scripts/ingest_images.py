# scripts/ingest_images.py

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Optional

# Project root on sys.path when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings
from domain.dtos import Color, Palette
from services.color_quantizer import ColorQuantizer
from services.image_sampler import ImageSampler
from services.image_utils import AcquisitionError, load_image_from_file
from services.palette_repository import PaletteRepository

SUPPORTED_EXTS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")

log = logging.getLogger("ingest")


def ingest_folder(settings: Settings, base: Path = Path("data/images"),
                  repo: Optional[PaletteRepository] = None) -> int:
    """Extract a palette from every image under base and save it, named after the file."""
    repo = repo or PaletteRepository(settings.db_url, settings.palette_namespace, settings.max_saved)
    quantizer = ColorQuantizer(sampler=ImageSampler(max_dim=settings.max_dim))

    count = 0
    if not base.is_dir():
        return count
    for file in sorted(base.rglob("*")):
        if not file.is_file() or file.suffix.lower() not in SUPPORTED_EXTS:
            continue
        try:
            img = load_image_from_file(file)
        except AcquisitionError:
            log.warning("Skipping %s: cannot decode", file)
            continue
        colors = quantizer.extract_colors(img, settings.default_count, settings.sample_step)
        if not colors:
            log.warning("Skipping %s: no colors extracted", file)
            continue
        palette = Palette(name=file.stem, colors=[Color.from_hex(h) for h in colors],
                          created=int(time.time() * 1000))
        if repo.add(palette):
            count += 1

    return count


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    n = ingest_folder(Settings())
    print(f"Ingested {n} files.")
