"""Palette value object and the static catalog of named 8-colour palettes."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np

from lowreslove.color_utils import Color, hex_to_rgb, rgb_to_hex
from lowreslove.errors import InvalidPalette

AUTO_PALETTE_NAME = "Auto (From Image)"
DEFAULT_PALETTE = "CGA"

# Catalog entries: name -> exactly eight '#RRGGBB' strings, in display order.
PALETTE_HEX: dict[str, list[str]] = {
    "CGA": [
        "#000000", "#0000AA", "#00AA00", "#00AAAA",
        "#AA0000", "#AA00AA", "#AA5500", "#AAAAAA",
    ],
    "Commodore 64": [
        "#000000", "#FFFFFF", "#880000", "#AAFFEE",
        "#CC44CC", "#00CC55", "#0000AA", "#EEEE77",
    ],
    "ZX Spectrum": [
        "#000000", "#0000D7", "#D70000", "#D700D7",
        "#00D700", "#00D7D7", "#D7D700", "#D7D7D7",
    ],
    "Apple II": [
        "#000000", "#D03060", "#0080FF", "#FFFFFF",
        "#00C000", "#808080", "#F06000", "#FFC080",
    ],
    "Gameboy": [
        "#0F380F", "#306230", "#8BAC0F", "#9BBC0F",
        "#8BAC0F", "#306230", "#0F380F", "#000000",
    ],
    "Pico-8": [
        "#000000", "#1D2B53", "#7E2553", "#008751",
        "#AB5236", "#5F574F", "#C2C3C7", "#FFF1E8",
    ],
}


@dataclass(frozen=True, eq=False)
class Palette:
    """An ordered, immutable sequence of RGB colours.

    Order is significant: nearest-colour search keeps the first entry on
    exact ties.

    Attributes:
        name:   Display name.
        colors: (k, 3) read-only uint8 array.
    """

    name: str
    colors: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.colors)
        if arr.size == 0:
            msg = f"Palette '{self.name}' has no colours"
            raise InvalidPalette(msg)
        if arr.ndim != 2 or arr.shape[1] != 3:
            msg = f"Palette '{self.name}' must be shaped (k, 3), got {arr.shape}"
            raise InvalidPalette(msg)
        arr = np.clip(arr, 0, 255).astype(np.uint8)  # always a private copy
        arr.setflags(write=False)
        object.__setattr__(self, "colors", arr)

    @classmethod
    def from_hex(cls, name: str, hex_colors: Sequence[str]) -> Palette:
        """Build a palette from ``'#RRGGBB'`` strings."""
        if not hex_colors:
            msg = f"Palette '{name}' has no colours"
            raise InvalidPalette(msg)
        return cls(name, np.array([hex_to_rgb(h) for h in hex_colors], dtype=np.uint8))

    @classmethod
    def from_colors(cls, name: str, colors: Sequence[Color]) -> Palette:
        if len(colors) == 0:
            msg = f"Palette '{name}' has no colours"
            raise InvalidPalette(msg)
        return cls(name, np.array(colors, dtype=np.int64))

    def to_hex(self) -> list[str]:
        return [rgb_to_hex(c) for c in self.colors]

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[Color]:
        for r, g, b in self.colors:
            yield int(r), int(g), int(b)

    def __getitem__(self, index: int) -> Color:
        r, g, b = self.colors[index]
        return int(r), int(g), int(b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Palette):
            return NotImplemented
        return self.name == other.name and np.array_equal(self.colors, other.colors)

    def __hash__(self) -> int:
        return hash((self.name, self.colors.tobytes()))

    def __repr__(self) -> str:
        return f"Palette({self.name!r}, {self.to_hex()})"


PALETTES: MappingProxyType[str, Palette] = MappingProxyType(
    {name: Palette.from_hex(name, hexes) for name, hexes in PALETTE_HEX.items()}
)


def get_palette(name: str) -> Palette:
    """Look up a catalog palette by name (case-insensitive)."""
    wanted = name.strip().lower()
    for key, palette in PALETTES.items():
        if key.lower() == wanted:
            return palette
    available = ", ".join(PALETTES)
    msg = f"Unknown palette '{name}'. Available: {available}"
    raise InvalidPalette(msg)
