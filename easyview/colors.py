"""Colour palette used to tell CPUs apart in the trace viewer."""

from __future__ import annotations

MAX_COLORS = 13

CPU_COLORS: tuple[int, ...] = (
    0xFFFF00FF,  # Yellow
    0xFF0000FF,  # Red
    0x00FF00FF,  # Green
    0xAE4AFFFF,  # Purple
    0x00FFFFFF,  # Cyan
    0xB0B0B0FF,  # Grey
    0x964B00FF,  # Brown
    0x0033EEFF,  # Royal Blue
    0xFFBFF7FF,  # Pale Pink
    0xFFD591FF,  # Cream
    0xCFFFBFFF,  # Pale Green
    0xF08080FF,  # Light Coral
    0x4B9447FF,  # Dark green
    0xFFFFFFFF,  # White
)

WHITE = CPU_COLORS[MAX_COLORS]


def color_components(value: int) -> tuple[int, int, int, int]:
    """Split a 0xRRGGBBAA colour into its (r, g, b, a) components."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"colour value out of range: {value:#x}")
    return (
        (value >> 24) & 0xFF,
        (value >> 16) & 0xFF,
        (value >> 8) & 0xFF,
        value & 0xFF,
    )