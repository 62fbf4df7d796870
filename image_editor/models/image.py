from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass
class Image:
    """
    Simple data object: RGB pixels (+ optional source path for bookkeeping).
    An image with zero width or height is the "nothing loaded" sentinel.
    No OpenCV logic outside the repositories/services.
    """
    pixels: np.ndarray # Shape (H, W, 3), dtype uint8, RGB order.
    path: Path | None = None # Source of the image.

    @classmethod
    def empty(cls) -> "Image":
        return cls(pixels=np.zeros((0, 0, 3), dtype=np.uint8))

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2]) if self.pixels.ndim == 3 else 1

    @property
    def is_empty(self) -> bool:
        return self.pixels.size == 0

    def clone(self) -> "Image":
        """Deep copy; the clone never shares its pixel memory with self."""
        return Image(pixels=self.pixels.copy(), path=self.path)
