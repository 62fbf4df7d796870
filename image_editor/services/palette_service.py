from __future__ import annotations
import os
import logging

import cv2
import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..models.palette import Palette
from ..models.errors import InvalidImage, InvalidParameter

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class PaletteService:
    """
    k-means color quantization of an Image into a fixed number of colors.
    *   Every pixel is a point in RGB space.
    *   k-means++ seeding, several attempts, lowest compactness wins.
    *   Uses environment variables for configuration.
    """

    def __init__(self):
        self.attempts = int(os.getenv("PALETTE_ATTEMPTS", "3"))
        self.max_iter = int(os.getenv("PALETTE_MAX_ITER", "10"))
        self.epsilon = float(os.getenv("PALETTE_EPSILON", "1.0"))
        self.random_seed = int(os.getenv("RANDOM_SEED", "42"))

    # ─── Public API ────────────────────────────────────────────────
    def extract(self, img: Image, color_count: int) -> Palette:
        """
        Args:
            img (Image): Source image, 3-channel uint8.
            color_count (int): Number of colors to return (k).

        Returns:
            Palette: exactly *color_count* colors.
        """
        if color_count < 1:
            raise InvalidParameter(f"Color count must be >= 1, got {color_count}")
        self._validate(img)

        samples = self._to_samples(img.pixels, color_count)
        criteria = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, self.max_iter, self.epsilon)

        cv2.setRNGSeed(self.random_seed)
        compactness, labels, centers = cv2.kmeans(
            samples, color_count, None, criteria, self.attempts, cv2.KMEANS_PP_CENTERS
        )

        colors = [tuple(int(v) for v in c) for c in np.clip(np.rint(centers), 0, 255)]
        counts = np.bincount(labels.ravel(), minlength=color_count)
        shares = (counts / counts.sum()).tolist()

        logger.info(f"Extracted {color_count}-color palette (compactness={compactness:.1f})")
        return Palette(colors=colors, shares=shares, compactness=float(compactness))

    # ─── Internal helpers ──────────────────────────────────────────
    @staticmethod
    def _validate(img: Image) -> None:
        if img.is_empty:
            raise InvalidImage("Cannot extract a palette from an empty image")
        if img.pixels.ndim != 3 or img.channels != 3:
            raise InvalidImage(f"Palette extraction needs a 3-channel image, got shape {img.pixels.shape}")

    @staticmethod
    def _to_samples(pixels: np.ndarray, color_count: int) -> np.ndarray:
        samples = pixels.reshape(-1, 3).astype(np.float32)
        if samples.shape[0] < color_count:
            # k-means needs at least k samples; repeat the ones we have
            reps = -(-color_count // samples.shape[0])
            samples = np.tile(samples, (reps, 1))
        return samples
