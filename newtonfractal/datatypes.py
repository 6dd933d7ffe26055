from dataclasses import dataclass, field

import numpy as np
from matplotlib.colors import to_hex

from newtonfractal.complex_math import ComplexNumber, format_complex


@dataclass
class RootEntry:
    root: ComplexNumber  # (nan, nan) for the non-convergent entry
    color: tuple  # (r, g, b), 0..255

    @property
    def hex_color(self):
        return to_hex(np.array(self.color) / 255.0)

    @property
    def label(self):
        return format_complex(self.root)


@dataclass
class FractalResult:
    pixels: np.ndarray  # (size, size, 3) uint8, rows follow y
    color_indices: np.ndarray  # (size, size) index into roots
    roots: list = field(default_factory=list)
    cancelled: bool = False
    elapsed: float = 0.0

    @property
    def size(self):
        return self.pixels.shape[0]
