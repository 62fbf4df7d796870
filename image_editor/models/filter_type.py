from __future__ import annotations
from enum import Enum

from .errors import InvalidParameter


class FilterType(Enum):
    """Destructive one-shot filters; absorbed into the stored image."""
    GRAYSCALE = "grayscale"
    BLUR = "blur"
    SHARPEN = "sharpen"
    INVERT = "invert"
    MIRROR = "mirror"

    @classmethod
    def from_name(cls, name: str | FilterType) -> FilterType:
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise InvalidParameter(f"Unknown filter '{name}'. Expected one of: {valid}") from None
