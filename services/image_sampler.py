from __future__ import annotations
import cv2
import numpy as np

from domain.dtos import PixelSample

_TO_RGBA = {
    1: cv2.COLOR_GRAY2RGBA,
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}

class SamplingError(Exception):
    pass

class ImageSampler:
    """Bounds a decoded (OpenCV, BGR/BGRA/gray) image to max_dim and reads it back as RGBA."""

    def __init__(self, max_dim: int = 800) -> None:
        self.max_dim = max_dim

    def target_size(self, w: int, h: int) -> tuple:
        if max(w, h) <= self.max_dim:
            return w, h
        ratio = self.max_dim / max(w, h)
        # half-up rounding, never collapse a side to zero
        return max(1, int(w * ratio + 0.5)), max(1, int(h * ratio + 0.5))

    def sample(self, image: np.ndarray) -> PixelSample:
        if not isinstance(image, np.ndarray) or image.ndim not in (2, 3):
            raise SamplingError("not a decoded raster image")
        h, w = image.shape[:2]
        if w == 0 or h == 0:
            raise SamplingError(f"empty image {w}x{h}")
        channels = 1 if image.ndim == 2 else image.shape[2]
        code = _TO_RGBA.get(channels)
        if code is None:
            raise SamplingError(f"unsupported channel count: {channels}")
        img = image
        if img.dtype == np.uint16:
            img = (img >> 8).astype(np.uint8)  # 16-bit PNG/TIFF
        elif img.dtype != np.uint8:
            raise SamplingError(f"unsupported pixel type: {img.dtype}")
        try:
            tw, th = self.target_size(w, h)
            if (tw, th) != (w, h):
                img = cv2.resize(img, (tw, th), interpolation=cv2.INTER_AREA)
            rgba = cv2.cvtColor(np.ascontiguousarray(img), code)
        except cv2.error as e:
            raise SamplingError(str(e)) from e
        rgba.setflags(write=False)
        return PixelSample(pixels=rgba)
