from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Union

import cv2
import httpx
import numpy as np

from services.contrast import readable_text_color, to_color

class AcquisitionError(Exception):
    """Image could not be read, fetched or decoded."""

def bytes_to_cv2(b: bytes) -> np.ndarray:
    if not b:
        raise AcquisitionError("No image data")
    arr = np.asarray(bytearray(b), dtype=np.uint8)
    # IMREAD_UNCHANGED keeps the alpha channel for the transparency filter
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise AcquisitionError("Image load error")
    return img

def load_image_from_file(path: Union[str, Path]) -> np.ndarray:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise AcquisitionError(f"Failed to read file {path}") from e
    return bytes_to_cv2(data)

async def load_image_from_url(url: str, client: Optional[httpx.AsyncClient] = None,
                              timeout: float = 20.0) -> np.ndarray:
    url = (url or '').strip()
    if not url:
        raise AcquisitionError("Enter an image URL")
    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
    try:
        resp = await client.get(url)
        resp.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        # InvalidURL is not an HTTPError; a URL without a host surfaces as ValueError
        raise AcquisitionError(f"Image load failed: {e}") from e
    finally:
        if own_client:
            await client.aclose()
    return bytes_to_cv2(resp.content)

def _bgr(hex_color: str):
    c = to_color(hex_color)
    if c is None:
        raise ValueError(f"invalid color: {hex_color!r}")
    return (c.b, c.g, c.r)

def sample_image() -> np.ndarray:
    """Demo picture: light background, violet and green circles, red rounded square."""
    img = np.zeros((400, 800, 3), dtype=np.uint8)
    img[:] = _bgr("#F3F4F6")
    cv2.circle(img, (220, 200), 120, _bgr("#7C3AED"), thickness=-1, lineType=cv2.LINE_AA)
    cv2.circle(img, (460, 200), 120, _bgr("#059669"), thickness=-1, lineType=cv2.LINE_AA)
    # rounded square at (560,110) 160x160, corner radius 24
    red = _bgr("#EF4444")
    x, y, size, r = 560, 110, 160, 24
    cv2.rectangle(img, (x + r, y), (x + size - r, y + size), red, thickness=-1)
    cv2.rectangle(img, (x, y + r), (x + size, y + size - r), red, thickness=-1)
    for cx, cy in ((x + r, y + r), (x + size - r, y + r), (x + r, y + size - r), (x + size - r, y + size - r)):
        cv2.circle(img, (cx, cy), r, red, thickness=-1, lineType=cv2.LINE_AA)
    return img

def render_swatches(colors: List[str], size: int = 120) -> bytes:
    """PNG strip with one labelled square per color."""
    if not colors:
        raise ValueError("no colors to render")
    img = np.zeros((size, size * len(colors), 3), dtype=np.uint8)
    for i, hx in enumerate(colors):
        x0 = i * size
        img[:, x0:x0 + size] = _bgr(hx)
        text = _bgr(readable_text_color(hx))
        cv2.putText(img, f"{i + 1}", (x0 + 8, 24), cv2.FONT_HERSHEY_SIMPLEX, 0.6, text, 1, cv2.LINE_AA)
        cv2.putText(img, hx.upper(), (x0 + 8, size - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.5, text, 1, cv2.LINE_AA)
    ok, buf = cv2.imencode(".png", img)
    if not ok:
        raise ValueError("PNG encoding failed")
    return buf.tobytes()
