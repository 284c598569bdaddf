"""
Numeric and geometric helpers for bar layouts.

Units follow detailing practice:
- bar diameters, widths, spacings in mm
- steel areas in cm²
- weights in kg

Examples:
    >>> round(bar_area(20), 3)
    3.142
    >>> clear_spacing(300, 3, 20)
    120.0
"""

from typing import Iterable, Sequence
import math
import numpy as np

STEEL_DENSITY = 7850.0  # kg/m³


def bar_area(diameter: float) -> float:
    """Cross-sectional area of one bar (cm²) for a diameter in mm."""
    return float(np.pi * diameter * diameter / 400.0)


def total_bar_area(diameters: Iterable[float]) -> float:
    """Sum of bar areas (cm²) for a list of per-bar diameters."""
    return float(sum(bar_area(d) for d in diameters))


def bars_needed(required_area: float, diameter: float) -> int:
    """Minimum number of bars of one diameter covering ``required_area``."""
    if required_area <= 0:
        return 0
    return int(math.ceil(required_area / bar_area(diameter)))


def min_clear_spacing(
    diameter: float,
    aggregate_size: float,
    configured_min: float,
    aggregate_factor: float = 1.33,
    diameter_multiplier: float = 1.0,
    use_bar_diameter: bool = True,
) -> float:
    """
    Minimum clear gap between adjacent bars of one layer.

    s_min = max(d·k or d, 1.33·d_g, s_config)

    Args:
        diameter: Bar diameter (mm)
        aggregate_size: Maximum aggregate size d_g (mm)
        configured_min: Configured minimum clear spacing (mm)
        aggregate_factor: Multiplier on the aggregate size
        diameter_multiplier: Multiplier on the bar diameter (when enabled)
        use_bar_diameter: Apply ``diameter_multiplier`` to the bar diameter

    Returns:
        Minimum clear spacing (mm)
    """
    by_diameter = diameter * diameter_multiplier if use_bar_diameter else diameter
    by_aggregate = aggregate_size * aggregate_factor
    return max(by_diameter, by_aggregate, configured_min)


def clear_spacing(usable_width: float, n_bars: int, diameter: float) -> float:
    """
    Clear spacing between bars of one layer.

    For a single bar the free width beside it is returned.
    """
    if n_bars <= 1:
        return usable_width - diameter
    return (usable_width - n_bars * diameter) / (n_bars - 1)


def mixed_clear_spacing(usable_width: float, diameters: Sequence[float]) -> float:
    """Clear spacing of a single layer holding bars of different diameters."""
    if len(diameters) <= 1:
        return 0.0
    return (usable_width - sum(diameters)) / (len(diameters) - 1)


def max_bars_per_layer(
    usable_width: float,
    diameter: float,
    min_spacing: float,
    min_bars: int,
    cap: int = 10,
) -> int:
    """
    Number of bars that fit side by side.

    n·d + (n-1)·s <= b_usable  =>  n <= (b_usable + s) / (d + s)

    The result is floored at ``min_bars`` and capped at ``cap``.
    """
    n = int(math.floor((usable_width + min_spacing) / (diameter + min_spacing)))
    return max(min_bars, min(n, cap))


def max_layers_for_height(
    usable_height: float,
    diameter: float,
    layer_spacing: float,
    max_layers: int,
) -> int:
    """Number of layers the section height allows, between 1 and ``max_layers``."""
    per_layer = diameter + layer_spacing
    n = int(math.floor((usable_height + layer_spacing) / per_layer))
    return max(1, min(n, max_layers))


def layer_fits(
    usable_width: float,
    n_bars: int,
    diameter: float,
    min_spacing: float,
    max_spacing: float,
    spacing_tolerance: float = 5.0,
    single_bar_margin: float = 20.0,
) -> bool:
    """
    Check one layer against the clear-spacing limits.

    A single bar fits when the width exceeds d + margin. For several bars the
    clear spacing must lie within [s_min, s_max + tolerance].
    """
    if n_bars <= 0:
        return True
    if n_bars == 1:
        return usable_width > diameter + single_bar_margin
    spacing = clear_spacing(usable_width, n_bars, diameter)
    if spacing < min_spacing:
        return False
    return spacing <= max_spacing + spacing_tolerance


def steel_weight(area_cm2: float, length_m: float, density: float = STEEL_DENSITY) -> float:
    """Weight (kg) of a steel bundle of ``area_cm2`` running ``length_m``."""
    volume = area_cm2 * 1e-4 * length_m  # m³
    return density * volume
