from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

Color = Tuple[int, int, int]


@dataclass
class Palette:
    """
    Data object holding the representative colors of one extraction.
    Order follows the clustering result and carries no meaning.
    """
    colors: List[Color]                                  # (r, g, b), 0-255
    shares: List[float] = field(default_factory=list)    # pixel share per color, sums to 1
    compactness: float = 0.0                             # k-means inertia of the chosen attempt

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def to_hex(self) -> List[str]:
        return ["#{:02x}{:02x}{:02x}".format(*c) for c in self.colors]

    def dominant(self) -> Color:
        if not self.shares:
            return self.colors[0]
        best = max(range(len(self.colors)), key=lambda i: self.shares[i])
        return self.colors[best]
