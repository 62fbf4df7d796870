from __future__ import annotations
from dataclasses import dataclass
import math

from .errors import InvalidParameter
from .image import Image


@dataclass
class AdjustmentParameters:
    """
    Value-object holding the non-destructive adjustments of one editor.
    Re-applied to a working copy of the stored image on every redraw.
    """
    brightness: float = 1.0      # [0 , +inf)  multiplier, 1.0 = unchanged
    saturation: float = 1.0      # [0 , +inf)  multiplier, 1.0 = unchanged
    scale:      float = 1.0      # (0 , +inf)  resize factor
    red:        int = 0          # [-255, 255] additive offsets
    green:      int = 0
    blue:       int = 0
    overlay:    Image | None = None
    opacity:    float = 0.0      # [0 , 1]

    # ── Helpers ──────────────────────────────────────────────────────
    @property
    def offsets(self):
        return self.red, self.green, self.blue

    @property
    def is_identity(self) -> bool:
        return (
            self.brightness == 1.0
            and self.saturation == 1.0
            and self.scale == 1.0
            and self.offsets == (0, 0, 0)
            and (self.overlay is None or self.opacity == 0.0)
        )

    def validate(self) -> None:
        """Raise InvalidParameter for values outside their domain."""
        for name in ("brightness", "saturation", "scale", "opacity"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidParameter(f"{name.capitalize()} must be a finite number, got {getattr(self, name)}")
        if self.brightness < 0:
            raise InvalidParameter(f"Brightness must be >= 0, got {self.brightness}")
        if self.saturation < 0:
            raise InvalidParameter(f"Saturation must be >= 0, got {self.saturation}")
        if self.scale <= 0:
            raise InvalidParameter(f"Scale must be > 0, got {self.scale}")
        if not 0.0 <= self.opacity <= 1.0:
            raise InvalidParameter(f"Opacity must be in [0, 1], got {self.opacity}")
