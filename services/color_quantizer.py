from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import numpy as np

from domain.dtos import ExtractionResult, PixelSample
from services.contrast import rgb_to_hex
from services.image_sampler import ImageSampler, SamplingError

log = logging.getLogger(__name__)

CHANNEL_MASK = 0xF8  # keep the top 5 bits
MAX_BUCKETS = 32 ** 3
FALLBACK_COLOR = "#EFEFEF"

Triple = Tuple[int, int, int]

def quantize_triple(r: int, g: int, b: int) -> Triple:
    return (r & CHANNEL_MASK, g & CHANNEL_MASK, b & CHANNEL_MASK)

def bucket_key(triple: Triple) -> int:
    r, g, b = quantize_triple(*triple)
    return (r << 16) | (g << 8) | b

def bucket_triple(key: int) -> Triple:
    return ((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)

class ColorQuantizer:
    """Frequency-ranked 5-bit bucketing of a grid of sampled pixels.

    Ties between buckets with equal counts go to the one first met in the
    row-major grid scan.
    """

    def __init__(self, alpha_threshold: int = 125, fallback: str = FALLBACK_COLOR,
                 default_step: int = 4, sampler: Optional[ImageSampler] = None) -> None:
        self.alpha_threshold = alpha_threshold
        self.fallback = fallback
        self.default_step = default_step
        self.sampler = sampler or ImageSampler()

    def _step(self, step: Optional[int]) -> int:
        return max(1, int(self.default_step if step is None else step))

    def bucket_counts(self, sample: PixelSample, step: Optional[int] = None) -> List[Tuple[int, int]]:
        """(bucket key, occurrences), most frequent first."""
        s = self._step(step)
        px = sample.pixels[::s, ::s].reshape(-1, 4)
        px = px[px[:, 3] >= self.alpha_threshold]
        if not len(px):
            return []
        q = (px[:, :3] & CHANNEL_MASK).astype(np.uint32)
        keys = (q[:, 0] << 16) | (q[:, 1] << 8) | q[:, 2]
        uniq, first, counts = np.unique(keys, return_index=True, return_counts=True)
        order = np.lexsort((first, -counts.astype(np.int64)))
        return [(int(uniq[i]), int(counts[i])) for i in order]

    def quantize(self, sample: PixelSample, count: int, step: Optional[int] = None) -> ExtractionResult:
        try:
            count = max(0, int(count))
            s = self._step(step)
        except (TypeError, ValueError):
            return ExtractionResult.failed(f"bad parameters count={count!r} step={step!r}")
        px = getattr(sample, "pixels", None)
        if not isinstance(px, np.ndarray) or px.ndim != 3 or px.shape[2] != 4 or px.dtype != np.uint8:
            return ExtractionResult.failed("pixel buffer is not an RGBA uint8 image")
        if px.shape[0] == 0 or px.shape[1] == 0:
            return ExtractionResult.failed(f"unexpected dimensions {px.shape[1]}x{px.shape[0]}")
        if count == 0:
            return ExtractionResult.ok([])

        top = self.bucket_counts(sample, s)[:count]
        colors = [rgb_to_hex(*bucket_triple(key)) for key, _ in top]
        colors.extend([self.fallback] * (count - len(colors)))
        return ExtractionResult.ok(colors)

    def extract(self, image: np.ndarray, count: int, step: Optional[int] = None) -> ExtractionResult:
        try:
            sample = self.sampler.sample(image)
        except SamplingError as e:
            log.warning("Sampling failed: %s", e)
            return ExtractionResult.failed(str(e))
        result = self.quantize(sample, count, step)
        if not result.is_ok:
            log.warning("Quantization failed: %s", result.error)
        return result

    def extract_colors(self, image: np.ndarray, count: int, step: Optional[int] = None) -> List[str]:
        """Top `count` colors as '#RRGGBB', padded with the fallback; [] if extraction failed."""
        return self.extract(image, count, step).colors
