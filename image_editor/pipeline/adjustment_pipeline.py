"""
Adjustment pipeline.

Recomputes the display image from the stored image plus the editor's
AdjustmentParameters. Stage order is fixed:

    brightness → saturation → channel offsets → overlay → scale

Every stage works on a wider dtype and clamps to [0, 255] before going
back to uint8, so nothing ever wraps. A stage whose parameter is the
identity value is skipped, which keeps an identity render byte-exact.
"""
from __future__ import annotations
import os
import logging

import cv2
import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..models.adjustments import AdjustmentParameters
from ..models.errors import InvalidParameter

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Upper bound on width * height of a scaled display image
MAX_RENDER_PIXELS = int(os.getenv("MAX_RENDER_PIXELS", "100000000"))


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    return np.clip(arr, 0, 255).astype(np.uint8)


def apply_brightness(pixels: np.ndarray, factor: float) -> np.ndarray:
    if factor == 1.0:
        return pixels
    return _to_uint8(np.rint(pixels.astype(np.float32) * float(factor)))


def apply_saturation(pixels: np.ndarray, factor: float) -> np.ndarray:
    if factor == 1.0:
        return pixels
    hsv = cv2.cvtColor(pixels, cv2.COLOR_RGB2HSV)
    # only S changes; H and V are carried through untouched
    sat = np.rint(hsv[..., 1].astype(np.float32) * float(factor))
    hsv[..., 1] = _to_uint8(sat)
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)


def apply_channel_offsets(pixels: np.ndarray, red: int, green: int, blue: int) -> np.ndarray:
    if red == 0 and green == 0 and blue == 0:
        return pixels
    offsets = np.array([red, green, blue], dtype=np.int32)
    return _to_uint8(pixels.astype(np.int32) + offsets)


def apply_overlay(pixels: np.ndarray, overlay: Image | None, opacity: float) -> np.ndarray:
    """
    Additive weighted blend: base + overlay * opacity.
    The base keeps its full weight.
    """
    if overlay is None or overlay.is_empty or opacity == 0.0:
        return pixels
    h, w = pixels.shape[:2]
    over = overlay.pixels
    if over.shape[:2] != (h, w):
        over = cv2.resize(over, (w, h), interpolation=cv2.INTER_LINEAR)
    blended = pixels.astype(np.float32) + over.astype(np.float32) * float(opacity)
    return _to_uint8(np.rint(blended))


def apply_scale(pixels: np.ndarray, factor: float) -> np.ndarray:
    if factor == 1.0:
        return pixels
    h, w = pixels.shape[:2]
    new_w = max(1, int(round(w * factor)))
    new_h = max(1, int(round(h * factor)))
    if new_w * new_h > MAX_RENDER_PIXELS:
        raise InvalidParameter(
            f"Scale {factor} gives a {new_w}x{new_h} image, over the {MAX_RENDER_PIXELS} pixel limit"
        )
    interpolation = cv2.INTER_AREA if factor < 1.0 else cv2.INTER_LINEAR
    return cv2.resize(pixels, (new_w, new_h), interpolation=interpolation)


def render(image: Image, params: AdjustmentParameters) -> Image:
    """
    Build a fresh display Image; *image* itself is never modified.
    """
    if image.is_empty:
        return image.clone()

    out = image.pixels
    out = apply_brightness(out, params.brightness)
    out = apply_saturation(out, params.saturation)
    out = apply_channel_offsets(out, params.red, params.green, params.blue)
    out = apply_overlay(out, params.overlay, params.opacity)
    out = apply_scale(out, params.scale)

    if out is image.pixels:
        out = out.copy()
    logger.debug(f"Rendered {image.width}x{image.height} → {out.shape[1]}x{out.shape[0]}")
    return Image(pixels=out, path=image.path)
