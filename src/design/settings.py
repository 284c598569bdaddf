"""
Solver, scoring and rule configuration.

All settings are pydantic models with documented defaults. A missing or
non-positive numeric value falls back to its default instead of failing, so
the solver always runs with partial configuration:

    >>> settings = SolverSettings.model_validate({"max_layers": None, "min_clear_spacing": 0})
    >>> settings.max_layers, settings.min_clear_spacing
    (2, 30.0)

Presets are served from a registry (factory pattern):

    >>> settings = get_settings_preset("economical")
"""

from typing import Any, Dict, List, Optional
import re

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.geometry import min_clear_spacing


DEFAULT_INVENTORY = [6, 8, 10, 12, 14, 16, 18, 20, 22, 25, 28, 32]
DEFAULT_MAIN_DIAMETERS = [16, 18, 20, 22, 25]


def _drop_missing(data: Any, allow_zero: bool) -> Any:
    """Remove None, negative (and optionally zero) numbers so defaults apply."""
    if not isinstance(data, dict):
        return data
    cleaned = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value < 0 or (value == 0 and not allow_zero):
                continue
        cleaned[key] = value
    return cleaned


def parse_diameter_range(text: str, inventory: Optional[List[int]] = None) -> List[int]:
    """
    Parse a diameter range string against the bar inventory.

    Accepted forms: "16-25", "16,20,25", "16-20, 25".

    Args:
        text: Range string
        inventory: Available diameters (mm); defaults to DEFAULT_INVENTORY

    Returns:
        Sorted list of inventory diameters selected by ``text``

    Example:
        >>> parse_diameter_range("16-22")
        [16, 18, 20, 22]
    """
    inventory = sorted(set(inventory or DEFAULT_INVENTORY))
    selected = set()
    for token in re.split(r"[,;\s]+", (text or "").strip()):
        if not token:
            continue
        match = re.fullmatch(r"[dDøØ]?(\d+)\s*-\s*[dDøØ]?(\d+)", token)
        if match:
            low, high = sorted((int(match.group(1)), int(match.group(2))))
            selected.update(d for d in inventory if low <= d <= high)
            continue
        match = re.fullmatch(r"[dDøØ]?(\d+)", token)
        if match and int(match.group(1)) in inventory:
            selected.add(int(match.group(1)))
    return sorted(selected)


class ScoringWeights(BaseModel):
    """
    Weights of the arrangement scoring function (score 0-100).

    Attributes:
        waste_ratio_weight: Points per unit of over-provision (efficiency - 1)
        extra_layer_penalty: Points per layer beyond the first
        preferred_bars_per_layer: Bars per layer above which a penalty applies
        excess_bar_penalty: Points per bar above ``preferred_bars_per_layer``
        many_bars_threshold / many_bars_penalty: Flat penalty at >= 6 bars
        too_many_bars_threshold / too_many_bars_penalty: Flat penalty at >= 8 bars
        density_bonus: Maximum bonus for spacing in the denser half of the range
        sparse_spacing_penalty: Penalty when spacing exceeds the maximum
        single_diameter_bonus: Bonus for single-diameter layouts
        symmetric_bonus: Bonus for even bar counts
        fewer_bars_reference: Bonus = max(0, reference - total bars)
        preferred_diameter_bonus: Bonus when the primary diameter is preferred
        waste_bar_score: Points per waste bar
        mixed_diameter_penalty: Penalty for mixed-diameter layouts
        fallback_score: Fixed score of the fallback arrangement
    """
    waste_ratio_weight: float = Field(default=30.0, ge=0)
    extra_layer_penalty: float = Field(default=10.0, ge=0)
    preferred_bars_per_layer: int = Field(default=5, ge=1)
    excess_bar_penalty: float = Field(default=3.0, ge=0)
    many_bars_threshold: int = Field(default=6, ge=1)
    many_bars_penalty: float = Field(default=3.0, ge=0)
    too_many_bars_threshold: int = Field(default=8, ge=1)
    too_many_bars_penalty: float = Field(default=5.0, ge=0)
    density_bonus: float = Field(default=10.0, ge=0)
    sparse_spacing_penalty: float = Field(default=15.0, ge=0)
    single_diameter_bonus: float = Field(default=3.0, ge=0)
    symmetric_bonus: float = Field(default=3.0, ge=0)
    fewer_bars_reference: int = Field(default=6, ge=0)
    preferred_diameter_bonus: float = Field(default=5.0, ge=0)
    waste_bar_score: float = Field(default=2.0, ge=0)
    mixed_diameter_penalty: float = Field(default=5.0, ge=0)
    fallback_score: float = Field(default=50.0, ge=0, le=100)

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        return _drop_missing(data, allow_zero=True)


class SearchLimits(BaseModel):
    """
    Combinatorial caps and ratios of the section search.

    The caps bound enumeration and take part in determinism: changing them
    changes which arrangements are produced.
    """
    max_extra_counts: int = Field(default=4, ge=1, description="Counts searched beyond the minimum")
    max_layer_partitions: int = Field(default=100, ge=1, description="Partition results per count")
    enumeration_result_cap: int = Field(default=50, ge=1, description="Results before diameters stop")
    max_bars_per_layer_cap: int = Field(default=10, ge=1, description="Hard cap of bars in one layer")
    area_ceiling_ratio: float = Field(default=1.65, gt=1.0, description="Economical area ceiling ratio")
    mixed_area_ceiling_ratio: float = Field(default=1.5, gt=1.0, description="Mixed layout area ceiling")
    small_area_margin: float = Field(default=4.0, gt=0, description="Absolute area margin (cm²)")
    max_tolerance: float = Field(default=0.05, gt=0, le=0.05, description="Largest area relaxation")
    empty_requirement: float = Field(default=0.01, gt=0, description="Area treated as zero (cm²)")
    spacing_tolerance: float = Field(default=5.0, gt=0, description="Allowance above max spacing (mm)")
    single_bar_margin: float = Field(default=20.0, gt=0, description="Side margin for one bar (mm)")
    aggregate_spacing_factor: float = Field(default=1.33, gt=0, description="Multiplier on aggregate size")
    mixed_min_primary: int = Field(default=2, ge=1)
    mixed_max_primary: int = Field(default=6, ge=1)
    mixed_min_secondary: int = Field(default=2, ge=1)
    mixed_pair_count: int = Field(default=2, ge=1, description="Adjacent diameter pairs tried")

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        return _drop_missing(data, allow_zero=False)


class RuleSettings(BaseModel):
    """
    Penalty weights of the constructability rules.

    Attributes:
        waste_penalty_score: Points per waste bar
        alignment_penalty_score: Points for top/bottom odd-even mismatch
        alignment_count_diff_limit: Allowed top/bottom count difference
        alignment_extra_penalty: Points per bar beyond the allowed difference
        symmetry_penalty_score: Points per odd bar count
        preferred_diameter: Preferred backbone diameter (mm), None = any
        preferred_diameter_penalty: Points per backbone face off the preference
    """
    waste_penalty_score: float = Field(default=20.0, ge=0)
    alignment_penalty_score: float = Field(default=25.0, ge=0)
    alignment_count_diff_limit: int = Field(default=2, ge=0)
    alignment_extra_penalty: float = Field(default=5.0, ge=0)
    symmetry_penalty_score: float = Field(default=5.0, ge=0)
    preferred_diameter: Optional[int] = Field(default=None, gt=0)
    preferred_diameter_penalty: float = Field(default=5.0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        cleaned = _drop_missing(data, allow_zero=True)
        # 0 means "no preference"
        if isinstance(cleaned, dict) and cleaned.get("preferred_diameter") == 0:
            cleaned.pop("preferred_diameter")
        return cleaned


class SolverSettings(BaseModel):
    """
    Configuration of the section solver.

    Resolved once when a SectionSolver is built; the solver works on its own
    copy.

    Attributes:
        available_diameters: Bar inventory (mm)
        main_bar_range: Range of main bar diameters, e.g. "16-25"
        allowed_diameters: Explicit diameter list, overrides ``main_bar_range``
        prefer_even_diameter: Drop odd diameters when even ones remain
        max_layers: Maximum number of layers per face
        min_clear_spacing: Configured minimum clear spacing (mm)
        max_clear_spacing: Maximum clear spacing (mm)
        min_layer_spacing: Clear spacing between layers (mm)
        aggregate_size: Maximum aggregate size (mm)
        min_bars_per_layer: Minimum bars in the first layer
        max_arrangements: Arrangements kept per section face (top K)
        allow_mixed_diameters: Enumerate two-diameter layouts
        safety_factor: Multiplier on the required area
        use_bar_diameter_for_spacing: Apply the multiplier on d in s_min
        bar_diameter_spacing_multiplier: Multiplier k in s_min = k·d
        prefer_single_diameter / prefer_symmetric / prefer_fewer_bars: Score bonuses
        preferred_diameter: Preferred diameter (mm), None = any
    """
    available_diameters: List[int] = Field(default_factory=lambda: list(DEFAULT_INVENTORY))
    main_bar_range: str = Field(default="16-25")
    allowed_diameters: Optional[List[int]] = Field(default=None)
    prefer_even_diameter: bool = False

    max_layers: int = Field(default=2, ge=1)
    min_clear_spacing: float = Field(default=30.0, gt=0)
    max_clear_spacing: float = Field(default=200.0, gt=0)
    min_layer_spacing: float = Field(default=25.0, gt=0)
    aggregate_size: float = Field(default=20.0, gt=0)
    min_bars_per_layer: int = Field(default=2, ge=1)
    max_arrangements: int = Field(default=20, ge=1)
    allow_mixed_diameters: bool = False
    safety_factor: float = Field(default=1.0, gt=0)

    use_bar_diameter_for_spacing: bool = True
    bar_diameter_spacing_multiplier: float = Field(default=1.0, gt=0)
    prefer_single_diameter: bool = True
    prefer_symmetric: bool = True
    prefer_fewer_bars: bool = True
    preferred_diameter: Optional[int] = Field(default=None, gt=0)

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    limits: SearchLimits = Field(default_factory=SearchLimits)
    rules: RuleSettings = Field(default_factory=RuleSettings)

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        return _drop_missing(data, allow_zero=False)

    @field_validator("allowed_diameters")
    @classmethod
    def validate_allowed(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        """Reject non-positive diameters; an empty list means "not given"."""
        if v is None or len(v) == 0:
            return None
        if any(d <= 0 for d in v):
            raise ValueError(f"Bar diameters must be positive, got {v}")
        return sorted(set(v))

    @model_validator(mode="after")
    def validate_spacing_range(self) -> "SolverSettings":
        if self.max_clear_spacing < self.min_clear_spacing:
            raise ValueError(
                f"max_clear_spacing = {self.max_clear_spacing} mm is below "
                f"min_clear_spacing = {self.min_clear_spacing} mm"
            )
        return self

    def resolved_diameters(self) -> List[int]:
        """
        Diameters the solver may use, ascending.

        Explicit list first, then the range string against the inventory,
        then inventory diameters within 16-25 mm, then the default list.
        """
        if self.allowed_diameters:
            diameters = list(self.allowed_diameters)
        else:
            diameters = parse_diameter_range(self.main_bar_range, self.available_diameters)
            if not diameters:
                diameters = [d for d in self.available_diameters if 16 <= d <= 25]
            if not diameters:
                diameters = list(DEFAULT_MAIN_DIAMETERS)

        if self.prefer_even_diameter and any(d % 2 == 0 for d in diameters):
            diameters = [d for d in diameters if d % 2 == 0]
        return sorted(set(diameters))

    def min_spacing_for(self, diameter: float) -> float:
        """Minimum clear spacing (mm) for bars of ``diameter``."""
        return min_clear_spacing(
            diameter,
            aggregate_size=self.aggregate_size,
            configured_min=self.min_clear_spacing,
            aggregate_factor=self.limits.aggregate_spacing_factor,
            diameter_multiplier=self.bar_diameter_spacing_multiplier,
            use_bar_diameter=self.use_bar_diameter_for_spacing,
        )

    @property
    def area_tolerance(self) -> float:
        """Relaxation window max(0, min(0.05, 1 - safety_factor))."""
        return max(0.0, min(self.limits.max_tolerance, 1.0 - self.safety_factor))

    def area_ceiling(self, required_area: float) -> float:
        """Economical area ceiling max(A·1.65, A + 4 cm²)."""
        return max(
            required_area * self.limits.area_ceiling_ratio,
            required_area + self.limits.small_area_margin,
        )

    def mixed_area_ceiling(self, required_area: float) -> float:
        """Area ceiling of mixed layouts max(A·1.5, A + 4 cm²)."""
        return max(
            required_area * self.limits.mixed_area_ceiling_ratio,
            required_area + self.limits.small_area_margin,
        )


# ============================================================================
# PRESET REGISTRY (Factory Pattern)
# ============================================================================

SETTINGS_PRESETS: Dict[str, Dict[str, Any]] = {
    "default": {},
    "economical": {
        "prefer_fewer_bars": False,
        "weights": {"waste_ratio_weight": 50.0, "waste_bar_score": 4.0},
        "rules": {"waste_penalty_score": 30.0},
    },
    "constructability": {
        "max_layers": 2,
        "prefer_even_diameter": True,
        "weights": {"extra_layer_penalty": 20.0, "symmetric_bonus": 5.0},
        "rules": {"alignment_penalty_score": 35.0, "symmetry_penalty_score": 10.0},
    },
}


def get_settings_preset(name: str) -> SolverSettings:
    """
    Factory method returning a fresh SolverSettings for a named preset.

    Raises:
        ValueError: If ``name`` is not a known preset
    """
    if name not in SETTINGS_PRESETS:
        available = ", ".join(SETTINGS_PRESETS.keys())
        raise ValueError(f"Unknown settings preset: {name}. Available: {available}")
    return SolverSettings.model_validate(SETTINGS_PRESETS[name])
