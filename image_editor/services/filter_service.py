from __future__ import annotations
from typing import Callable, Dict
import os
import logging

import cv2
import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..models.filter_type import FilterType
from ..models.errors import InvalidParameter

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_SHARPEN_KERNEL = np.array(
    [[0, -1, 0],
     [-1, 5, -1],
     [0, -1, 0]],
    dtype=np.float32,
)


class FilterService:
    """
    Destructive filters over RGB uint8 pixels.
    Every filter returns a new array; the input is never written to.
    Checking that an image is loaded is the caller's job.
    """

    def __init__(self, blur_kernel_size: int | None = None):
        if blur_kernel_size is None:
            blur_kernel_size = int(os.getenv("BLUR_KERNEL_SIZE", "15"))
        if blur_kernel_size <= 0 or blur_kernel_size % 2 == 0:
            raise InvalidParameter(f"Blur kernel size must be odd and positive, got {blur_kernel_size}")
        self.blur_kernel_size = blur_kernel_size

        self._dispatch: Dict[FilterType, Callable[[np.ndarray], np.ndarray]] = {
            FilterType.GRAYSCALE: self.grayscale,
            FilterType.BLUR: self.blur,
            FilterType.SHARPEN: self.sharpen,
            FilterType.INVERT: self.invert,
            FilterType.MIRROR: self.mirror,
        }

    # ─── Public API ────────────────────────────────────────────────
    def apply(self, img: Image, filter_type: FilterType | str) -> np.ndarray:
        filter_type = FilterType.from_name(filter_type)
        new_pixels = self._dispatch[filter_type](img.pixels)
        logger.debug(f"Applied {filter_type.value} to {img.width}x{img.height} image")
        return new_pixels

    # ─── Filters ───────────────────────────────────────────────────
    @staticmethod
    def grayscale(pixels: np.ndarray) -> np.ndarray:
        # Luma, then back to 3 equal channels
        gray = cv2.cvtColor(pixels, cv2.COLOR_RGB2GRAY)
        return cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB)

    def blur(self, pixels: np.ndarray) -> np.ndarray:
        k = self.blur_kernel_size
        # sigma 0 → OpenCV derives it from the kernel size
        return cv2.GaussianBlur(pixels, (k, k), 0)

    @staticmethod
    def sharpen(pixels: np.ndarray) -> np.ndarray:
        return cv2.filter2D(pixels, -1, _SHARPEN_KERNEL, borderType=cv2.BORDER_REPLICATE)

    @staticmethod
    def invert(pixels: np.ndarray) -> np.ndarray:
        return 255 - pixels

    @staticmethod
    def mirror(pixels: np.ndarray) -> np.ndarray:
        return np.ascontiguousarray(pixels[:, ::-1])
