"""
Bar arrangement value objects.

A BarArrangement describes one candidate layout for one face (top or
bottom) of one beam cross-section. Arrangements are produced by the
SectionSolver and are not changed after creation; a new score is attached
with ``with_score()`` which returns a copy.

Examples:
    >>> arr = BarArrangement.single_diameter([3, 2], 20, usable_width=250)
    >>> arr.to_display_string()
    '3D20+2D20'
    >>> arr.contains_backbone(2, 20)
    True
"""

from collections import Counter
from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from src.core.geometry import bar_area, bars_needed, clear_spacing, total_bar_area


def _fits_stirrups(layers: Sequence[int]) -> bool:
    """Every layer has a bar at each stirrup leg and no layer outgrows the one below."""
    if not layers:
        return True
    return all(n >= 2 for n in layers) and all(a >= b for a, b in zip(layers, layers[1:]))


@dataclass(frozen=True)
class Addon:
    """Bars left over after removing a backbone from an arrangement."""
    count: int = 0
    diameter: int = 0
    area: float = 0.0  # cm²
    layer_breakdown: Tuple[int, ...] = ()


@dataclass(frozen=True, eq=False)
class BarArrangement:
    """
    One candidate bar layout for one face of a section.

    Attributes:
        total_count: Total number of bars
        total_area: Provided steel area (cm²)
        layer_count: Number of layers used
        bars_per_layer: Bar count per layer, outer (layer 0) to inner
        diameters_per_layer: Diameter per layer (mm)
        primary_diameter: Shared / largest diameter (mm)
        bar_diameters: Per-bar diameters for mixed layouts, empty otherwise
        clear_spacing: Clear gap between bars of the first layer (mm)
        vertical_spacing: Clear gap between layers (mm)
        is_symmetric: Even bar count (symmetric about the web)
        fits_stirrup_layout: Each layer reaches both stirrup legs (>= 2 bars)
            and no inner layer holds more bars than the one outside it
        score: Ranking score in [0, 100]
        efficiency: Provided / required area
        waste_count: Bars beyond the minimum needed for strength
        is_fallback: Produced by the degraded fallback path
    """
    total_count: int = 0
    total_area: float = 0.0
    layer_count: int = 0
    bars_per_layer: Tuple[int, ...] = ()
    diameters_per_layer: Tuple[int, ...] = ()
    primary_diameter: int = 0
    bar_diameters: Tuple[int, ...] = ()
    clear_spacing: float = 0.0
    vertical_spacing: float = 25.0
    is_symmetric: bool = True
    fits_stirrup_layout: bool = True
    score: float = 0.0
    efficiency: float = 0.0
    waste_count: int = 0
    is_fallback: bool = False

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "BarArrangement":
        """Canonical "no reinforcement needed" arrangement."""
        return cls(total_count=0, total_area=0.0, layer_count=0, score=100.0, efficiency=1.0)

    @classmethod
    def single_diameter(
        cls,
        layers: Sequence[int],
        diameter: int,
        usable_width: float,
        required_area: float = 0.0,
        vertical_spacing: float = 25.0,
    ) -> "BarArrangement":
        """
        Build a single-diameter arrangement from a layer partition.

        Efficiency and waste count are derived from ``required_area``;
        the score is left at 0 for the caller to assign.
        """
        total = int(sum(layers))
        area = total * bar_area(diameter)
        min_bars = bars_needed(required_area, diameter)
        return cls(
            total_count=total,
            total_area=area,
            layer_count=len(layers),
            bars_per_layer=tuple(layers),
            diameters_per_layer=tuple(diameter for _ in layers),
            primary_diameter=diameter,
            bar_diameters=(),
            clear_spacing=clear_spacing(usable_width, layers[0], diameter) if layers else 0.0,
            vertical_spacing=vertical_spacing,
            is_symmetric=total % 2 == 0,
            fits_stirrup_layout=_fits_stirrups(layers),
            efficiency=area / required_area if required_area > 0.01 else 1.0,
            waste_count=max(0, total - min_bars),
        )

    @classmethod
    def mixed_diameter(
        cls,
        diameters: Sequence[int],
        spacing: float,
        required_area: float,
        waste_count: int = 0,
        vertical_spacing: float = 25.0,
    ) -> "BarArrangement":
        """Build a one-layer arrangement holding bars of several diameters."""
        bars = tuple(sorted(diameters, reverse=True))
        area = total_bar_area(bars)
        primary = bars[0] if bars else 0
        return cls(
            total_count=len(bars),
            total_area=area,
            layer_count=1,
            bars_per_layer=(len(bars),),
            diameters_per_layer=(primary,),
            primary_diameter=primary,
            bar_diameters=bars,
            clear_spacing=spacing,
            vertical_spacing=vertical_spacing,
            is_symmetric=len(bars) % 2 == 0,
            fits_stirrup_layout=len(bars) >= 2,
            efficiency=area / required_area if required_area > 0.01 else 1.0,
            waste_count=max(0, waste_count),
        )

    def with_score(self, score: float) -> "BarArrangement":
        """Copy of this arrangement carrying ``score``."""
        return replace(self, score=score)

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    @property
    def is_single_diameter(self) -> bool:
        """All bars share one diameter."""
        return len(set(self.bar_diameters)) <= 1

    @property
    def is_even_count(self) -> bool:
        return self.total_count % 2 == 0

    # ------------------------------------------------------------------
    # Backbone decomposition
    # ------------------------------------------------------------------

    def contains_backbone(self, backbone_count: int, backbone_diameter: int) -> bool:
        """
        True if this arrangement can host a continuous backbone.

        "3D20" contains backbone "2D20"; a mixed layout needs enough bars of
        the backbone diameter.
        """
        if self.is_single_diameter:
            return self.primary_diameter == backbone_diameter and self.total_count >= backbone_count
        matching = sum(1 for d in self.bar_diameters if d == backbone_diameter)
        return matching >= backbone_count

    def get_addon(self, backbone_count: int, backbone_diameter: int) -> Addon:
        """
        Bars remaining after removing the backbone.

        The addon area is the sum of the remaining bars' own areas.
        """
        if not self.contains_backbone(backbone_count, backbone_diameter):
            return Addon()

        if self.is_single_diameter and self.primary_diameter == backbone_diameter:
            count = self.total_count - backbone_count
            if count <= 0:
                return Addon()
            return Addon(
                count=count,
                diameter=backbone_diameter,
                area=count * bar_area(backbone_diameter),
                layer_breakdown=self._addon_layers(backbone_count, count),
            )

        remaining = list(self.bar_diameters)
        for _ in range(backbone_count):
            remaining.remove(backbone_diameter)
        if not remaining:
            return Addon()

        # Most frequent diameter, larger one on a tie
        counts = Counter(remaining)
        addon_dia = max(counts, key=lambda d: (counts[d], d))
        return Addon(
            count=len(remaining),
            diameter=addon_dia,
            area=total_bar_area(remaining),
            layer_breakdown=(len(remaining),),
        )

    def _addon_layers(self, backbone_count: int, addon_count: int) -> Tuple[int, ...]:
        """Split addon bars over the layers not occupied by the backbone."""
        if not self.bars_per_layer:
            return (addon_count,)

        result: List[int] = []
        remaining = addon_count
        backbone_left = backbone_count
        for layer_bars in self.bars_per_layer:
            if remaining <= 0:
                break
            in_layer = min(backbone_left, layer_bars)
            backbone_left -= in_layer
            extra = layer_bars - in_layer
            if extra > 0:
                result.append(extra)
                remaining -= extra
        if remaining > 0:
            result.append(remaining)
        return tuple(result)

    def layer_details(self) -> List[Tuple[int, int]]:
        """(count, diameter) for each layer."""
        if not self.bars_per_layer:
            return [(self.total_count, self.primary_diameter)]
        details = []
        for i in range(self.layer_count):
            count = self.bars_per_layer[i] if i < len(self.bars_per_layer) else 0
            dia = self.diameters_per_layer[i] if i < len(self.diameters_per_layer) else self.primary_diameter
            details.append((count, dia))
        return details

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def to_display_string(self) -> str:
        """
        Short label, e.g. "3D20", "3D20+2D20" (two layers) or "2D22+2D20" (mixed).
        """
        if self.total_count == 0:
            return "-"

        if self.bar_diameters and not self.is_single_diameter:
            counts = Counter(self.bar_diameters)
            return "+".join(f"{counts[d]}D{d}" for d in sorted(counts, reverse=True))

        if self.layer_count <= 1:
            return f"{self.total_count}D{self.primary_diameter}"

        if len(self.diameters_per_layer) == len(self.bars_per_layer):
            return "+".join(
                f"{n}D{d}" for n, d in zip(self.bars_per_layer, self.diameters_per_layer)
            )
        return "+".join(f"{n}D{self.primary_diameter}" for n in self.bars_per_layer)

    # ------------------------------------------------------------------
    # Equality: count, primary diameter, layers and the multiset of bars
    # ------------------------------------------------------------------

    def _identity(self) -> Tuple[int, int, int, Tuple[int, ...]]:
        return (
            self.total_count,
            self.primary_diameter,
            self.layer_count,
            tuple(sorted(self.bar_diameters)),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BarArrangement):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        return f"{self.to_display_string()} (L{self.layer_count}, Score={self.score:.1f})"
