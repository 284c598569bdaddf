"""
Section Solver
==============

Finds valid bar arrangements for one face of one beam cross-section.

The solver:
1. Enumerates single-diameter layouts (largest diameter first) over bar
   counts and pyramidal layer partitions
2. Optionally enumerates one-layer layouts mixing two adjacent diameters
3. Filters by provided area, ranks by score and keeps the top K
4. Falls back to a packed layout of the largest diameter when nothing
   survives, and reports a failure when even that does not fit

All combinatorial caps come from SearchLimits, so results are reproducible
for a given configuration.

Example:
    >>> solver = SectionSolver(SolverSettings())
    >>> section = DesignSection(section_id="S1_Mid", width=300, height=500, req_bot=8.0)
    >>> best = solver.solve(section, RebarFace.BOTTOM)[0]
    >>> best.to_display_string()
    '2D25'
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple, Union
import logging
import math

from src.core.arrangement import BarArrangement
from src.core.diagnostics import DiagnosticSink, LoggingDiagnostics
from src.core.geometry import (
    bar_area,
    bars_needed,
    layer_fits,
    max_bars_per_layer,
    max_layers_for_height,
    mixed_clear_spacing,
)
from src.core.sections import DesignSection, RebarFace
from src.design.settings import SolverSettings
from src.optimization.scoring import ArrangementScorer

logger = logging.getLogger(__name__)


@dataclass
class SectionFailure:
    """A section face the solver could not arrange."""
    section_id: str
    face: RebarFace
    reason: str


@dataclass
class SolveReport:
    """Outcome of solving every face of a list of sections."""
    solved: int = 0
    failures: List[SectionFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    def failed_sections(self) -> List[str]:
        """Distinct ids of failed sections, in failure order."""
        seen: List[str] = []
        for failure in self.failures:
            if failure.section_id not in seen:
                seen.append(failure.section_id)
        return seen


class SectionSolver:
    """
    Combinatorial arrangement search for one section face.

    The settings are copied on construction; later changes to the caller's
    object do not affect a running solver.

    Attributes:
        settings: Private copy of the solver settings
        diameters: Resolved allowed diameters, ascending
        scorer: Arrangement scoring function
        diagnostics: Receiver of progress and failure messages
    """

    def __init__(
        self,
        settings: Optional[SolverSettings] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ):
        if settings is None:
            raise ValueError("SectionSolver requires a SolverSettings instance")
        self.settings = settings.model_copy(deep=True)
        self.diameters = self.settings.resolved_diameters()
        self.scorer = ArrangementScorer(self.settings)
        self.diagnostics = diagnostics or LoggingDiagnostics(logger)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def solve(self, section: DesignSection, face: Union[RebarFace, str]) -> List[BarArrangement]:
        """
        Ranked valid arrangements for one face of ``section``.

        Args:
            section: Cross-section requirement
            face: RebarFace.TOP / RebarFace.BOTTOM (or "top" / "bot")

        Returns:
            Arrangements, best score first. ``[BarArrangement.empty()]`` when
            no steel is required, an empty list when the geometry is invalid
            or the fallback does not fit.

        Raises:
            ValueError: If ``section`` is None or ``face`` is unknown
        """
        arrangements, _ = self._solve(section, face)
        return arrangements

    def solve_all(self, sections: Iterable[DesignSection]) -> SolveReport:
        """
        Solve both faces of every section and store the results on them.

        A failing section face is recorded in the report; the others are
        still solved.
        """
        report = SolveReport()
        for section in sections:
            for face in (RebarFace.TOP, RebarFace.BOTTOM):
                arrangements, reason = self._solve(section, face)
                section.set_arrangements(face, arrangements)
                if reason is not None:
                    report.failures.append(SectionFailure(section.section_id, face, reason))
                else:
                    report.solved += 1

        logger.debug("Solved %d section faces, %d failures", report.solved, len(report.failures))
        return report

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _solve(
        self,
        section: DesignSection,
        face: Union[RebarFace, str],
    ) -> Tuple[List[BarArrangement], Optional[str]]:
        if section is None:
            raise ValueError("section is required")
        face = RebarFace.parse(face)
        s = self.settings
        label = f"{section.section_id} ({face.value})"

        required = section.required_area(face) * s.safety_factor
        if required <= s.limits.empty_requirement:
            return [BarArrangement.empty()], None

        width = section.usable_width
        height = section.usable_height
        if width <= 0 or height <= 0:
            reason = (
                f"Invalid usable geometry: width = {width:.1f} mm, height = {height:.1f} mm"
            )
            self.diagnostics.error(f"{label}: {reason}")
            return [], reason

        candidates = self._enumerate_single(required, width, height)
        if s.allow_mixed_diameters and len(self.diameters) >= 2:
            candidates.extend(self._enumerate_mixed(required, width))

        threshold = required * (1.0 - s.area_tolerance)
        valid = [arr for arr in candidates if arr.total_area >= threshold]
        # sorted() is stable: equal scores keep enumeration order (larger diameters first)
        valid = sorted(valid, key=lambda arr: -arr.score)[: s.max_arrangements]

        if valid:
            logger.debug("%s: %d candidates, %d kept", label, len(candidates), len(valid))
            return valid, None

        fallback = self._fallback(required, width)
        if fallback is None:
            reason = (
                f"No arrangement fits As = {required:.2f} cm² within {s.max_layers} layers "
                f"(usable width {width:.0f} mm); widen the section or relax the constraints"
            )
            self.diagnostics.error(f"{label}: {reason}")
            return [], reason

        self.diagnostics.info(
            f"{label}: no arrangement within tolerance, using fallback {fallback.to_display_string()}"
        )
        return [fallback], None

    def _enumerate_single(self, required: float, width: float, height: float) -> List[BarArrangement]:
        """Single-diameter layouts over counts and layer partitions."""
        s = self.settings
        limits = s.limits
        ceiling = s.area_ceiling(required)
        results: List[BarArrangement] = []

        for diameter in sorted(self.diameters, reverse=True):
            if len(results) >= limits.enumeration_result_cap:
                break

            unit_area = bar_area(diameter)
            min_count = max(s.min_bars_per_layer, bars_needed(required, diameter))
            min_spacing = s.min_spacing_for(diameter)

            per_layer = max_bars_per_layer(
                width, diameter, min_spacing, s.min_bars_per_layer, limits.max_bars_per_layer_cap
            )
            n_layers = max_layers_for_height(height, diameter, s.min_layer_spacing, s.max_layers)

            geometry_max = per_layer * n_layers
            area_max = max(min_count, int(math.floor(ceiling / unit_area)))
            max_count = min(geometry_max, area_max, min_count + limits.max_extra_counts)

            for count in range(min_count, max_count + 1):
                # The minimum count is kept above the ceiling: it may be the only option
                if count != min_count and count * unit_area > ceiling:
                    continue
                for layers in self._partitions(count, n_layers, per_layer):
                    if not all(
                        layer_fits(
                            width, n, diameter, min_spacing, s.max_clear_spacing,
                            limits.spacing_tolerance, limits.single_bar_margin,
                        )
                        for n in layers
                    ):
                        continue
                    arrangement = BarArrangement.single_diameter(
                        layers, diameter, width,
                        required_area=required,
                        vertical_spacing=s.min_layer_spacing,
                    )
                    results.append(arrangement.with_score(self.scorer.score(arrangement)))

        return results

    def _partitions(self, total: int, max_layers: int, max_per_layer: int) -> List[Tuple[int, ...]]:
        """
        Non-increasing splits of ``total`` bars into at most ``max_layers`` layers.

        The first layer holds at least ``min_bars_per_layer`` bars, the
        following layers at least 2. Stops after ``max_layer_partitions``.
        """
        cap = self.settings.limits.max_layer_partitions
        first_min = self.settings.min_bars_per_layer
        results: List[Tuple[int, ...]] = []

        def build(remaining: int, previous: int, current: List[int]) -> None:
            if len(results) >= cap:
                return
            if remaining == 0:
                results.append(tuple(current))
                return
            if len(current) >= max_layers:
                return
            lowest = first_min if not current else 2
            for n in range(min(remaining, previous, max_per_layer), lowest - 1, -1):
                current.append(n)
                build(remaining - n, n, current)
                current.pop()

        build(total, max_per_layer, [])
        return results

    def _enumerate_mixed(self, required: float, width: float) -> List[BarArrangement]:
        """One-layer layouts of two adjacent diameters."""
        s = self.settings
        limits = s.limits
        ceiling = s.mixed_area_ceiling(required)
        ordered = sorted(self.diameters, reverse=True)
        pairs = list(zip(ordered, ordered[1:]))[: limits.mixed_pair_count]
        results: List[BarArrangement] = []

        for large, small in pairs:
            # Clearance governed by the larger bar
            min_spacing = s.min_spacing_for(large)
            for n_large in range(limits.mixed_min_primary, limits.mixed_max_primary + 1):
                remaining = required - n_large * bar_area(large)
                if remaining <= 0:
                    break
                exact = bars_needed(remaining, small)
                n_small = max(limits.mixed_min_secondary, exact)
                total = n_large + n_small

                occupied = n_large * large + n_small * small + (total - 1) * min_spacing
                if occupied > width:
                    continue

                bars = [large] * n_large + [small] * n_small
                spacing = mixed_clear_spacing(width, bars)
                if spacing > s.max_clear_spacing + limits.spacing_tolerance:
                    continue

                arrangement = BarArrangement.mixed_diameter(
                    bars,
                    spacing=spacing,
                    required_area=required,
                    waste_count=n_small - exact,
                    vertical_spacing=s.min_layer_spacing,
                )
                if arrangement.total_area < required or arrangement.total_area > ceiling:
                    continue

                score = self.scorer.score(arrangement) - s.weights.mixed_diameter_penalty
                results.append(arrangement.with_score(max(0.0, score)))

        return results

    def _fallback(self, required: float, width: float) -> Optional[BarArrangement]:
        """Largest diameter, minimum count, packed layer by layer; None if it overflows."""
        s = self.settings
        diameter = max(self.diameters)
        count = max(s.min_bars_per_layer, bars_needed(required, diameter))
        per_layer = max_bars_per_layer(
            width, diameter, s.min_spacing_for(diameter),
            s.min_bars_per_layer, s.limits.max_bars_per_layer_cap,
        )

        layers: List[int] = []
        remaining = count
        while remaining > 0 and len(layers) < s.max_layers:
            n = min(per_layer, remaining)
            layers.append(n)
            remaining -= n
        if remaining > 0:
            return None

        arrangement = BarArrangement.single_diameter(
            layers, diameter, width,
            required_area=required,
            vertical_spacing=s.min_layer_spacing,
        )
        return replace(arrangement, score=s.weights.fallback_score, is_fallback=True)
