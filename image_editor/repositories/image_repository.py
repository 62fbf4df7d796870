from __future__ import annotations
from pathlib import Path
from typing import Union
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv
import os
import signal
import logging
import threading
from ..models.image import Image
from ..models.errors import DecodeError, EncodeError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ImageRepository:
    """
    Handles file I/O and pixel updates for Image entities.
    Pixels are kept in RGB order; OpenCV's BGR stays inside this class.
    """
    def __init__(self):
        self.VALID_EXTS = {
            ext.strip().lower()
            for ext in os.getenv("VALID_IMAGE_EXTENSIONS", ".jpg,.jpeg,.png,.bmp").split(",")
            if ext.strip()
        }
        self.JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "95"))
        self.LOAD_TIMEOUT = int(os.getenv("IMAGE_LOAD_TIMEOUT", "5"))

    @staticmethod
    def create_image(pixels: np.ndarray, path: PathLike = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def _bgr_to_rgb(arr_bgr: np.ndarray) -> np.ndarray:
        return np.ascontiguousarray(arr_bgr[:, :, ::-1])

    def _read(self, path: Path) -> np.ndarray | None:
        # SIGALRM only exists on POSIX and only works from the main thread
        if (self.LOAD_TIMEOUT <= 0 or not hasattr(signal, "SIGALRM")
                or threading.current_thread() is not threading.main_thread()):
            return cv2.imread(str(path), cv2.IMREAD_COLOR)

        # ─── timeout wrapper ──────────────────────────────────────────────
        def _handler(signum, frame):
            raise TimeoutError(f"cv2.imread timed-out after {self.LOAD_TIMEOUT}s: {path}")

        previous = signal.signal(signal.SIGALRM, _handler)
        signal.alarm(self.LOAD_TIMEOUT)
        try:
            return cv2.imread(str(path), cv2.IMREAD_COLOR)
        finally:
            signal.alarm(0)  # always disarm
            signal.signal(signal.SIGALRM, previous)
        # ──────────────────────────────────────────────────────────────────

    def load(self, path: PathLike) -> Image:
        """Decode an image file into a 3-channel uint8 RGB Image."""
        path = Path(path)
        if not path.is_file():
            raise DecodeError(f"Image not found: {path}")
        if path.suffix.lower() not in self.VALID_EXTS:
            raise DecodeError(f"Unsupported image format '{path.suffix}': {path}")

        try:
            arr_bgr = self._read(path)
        except (TimeoutError, cv2.error) as err:
            raise DecodeError(f"Could not decode {path}: {err}") from err

        if arr_bgr is None:
            raise DecodeError(f"Image unreadable or corrupt: {path}")

        logger.debug(f"Decoded {path} → {arr_bgr.shape}")
        return Image(pixels=self._bgr_to_rgb(arr_bgr), path=path)

    def load_bytes(self, data: bytes, path: PathLike = None) -> Image:
        """Decode an in-memory encoded image (PNG/JPEG/BMP bytes)."""
        buf = np.frombuffer(bytes(data or b""), dtype=np.uint8)
        if buf.size == 0:
            raise DecodeError("Empty image byte stream")
        try:
            arr_bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        except cv2.error as err:
            raise DecodeError(f"Could not decode byte stream: {err}") from err
        if arr_bgr is None:
            raise DecodeError("Byte stream is not a supported image")
        return self.create_image(self._bgr_to_rgb(arr_bgr), path)

    def save(self, image: Image, path: PathLike = None) -> Path:
        """Encode to the format implied by the extension of *path* (or image.path)."""
        target = Path(path) if path is not None else image.path
        if target is None:
            raise EncodeError("No output path given")
        suffix = target.suffix.lower()
        if suffix not in self.VALID_EXTS:
            raise EncodeError(f"Unsupported output format '{target.suffix}': {target}")

        pil_image = PILImage.fromarray(np.ascontiguousarray(image.pixels))
        options = {"quality": self.JPEG_QUALITY} if suffix in (".jpg", ".jpeg") else {}
        # encode next to the target, then swap it in; a failed write leaves no partial file
        tmp_path = target.with_name(f".{target.stem}.{os.getpid()}.tmp{target.suffix}")
        try:
            pil_image.save(tmp_path, **options)
            os.replace(tmp_path, target)
        except (OSError, ValueError, KeyError) as err:
            tmp_path.unlink(missing_ok=True)
            raise EncodeError(f"Could not write {target}: {err}") from err
        return target

