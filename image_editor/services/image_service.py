from pathlib import Path
from typing import Union
import numpy as np
from ..models.image import Image
from ..models.errors import NoImageLoaded
from ..repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers and image-level checks.  No filter or adjustment logic."""
    def __init__(self, image_repository: ImageRepository = None):
        self.image_repository = image_repository or ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    def load_bytes(self, data: bytes) -> Image:
        """Load an image from an encoded in-memory byte stream."""
        return self.image_repository.load_bytes(data)

    def save(self, image: Image, path: Union[str, Path] = None) -> Path:
        """
        Business-level method to save the image to a specific path.
        """
        self.require_loaded(image)
        return self.image_repository.save(image, path)

    @staticmethod
    def require_loaded(img: Image) -> None:
        if img is None or img.is_empty:
            raise NoImageLoaded("No image loaded")
