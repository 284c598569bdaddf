"""
Whole-beam solution shapes.

- BackboneCandidate: continuous bars proposed by the global search
- RebarSpec: localized reinforcement (addon) at one section face
- BeamSolution: one complete proposal for a beam group, scored and
  validated downstream by the rule engine and the proposal selector
"""

from typing import Dict, List, Sequence, Union
from pydantic import BaseModel, Field, model_validator

from src.core.geometry import bar_area, steel_weight
from src.core.sections import DesignSection, RebarFace


def reinforcement_key(section_id: str, face: Union[RebarFace, str]) -> str:
    """Key of a reinforcement entry, e.g. "S1_Support_Left_top"."""
    return f"{section_id}_{RebarFace.parse(face).value}"


class RebarSpec(BaseModel):
    """
    Localized reinforcement specification.

    Attributes:
        diameter: Bar diameter (mm)
        count: Number of bars
        position: Face, "top" or "bot"
        layer: 1 = shares the backbone layer, 2+ = inner layers
    """
    diameter: int = Field(..., gt=0, description="Bar diameter (mm)")
    count: int = Field(..., ge=0, description="Number of bars")
    position: str = Field(default="top", description="'top' or 'bot'")
    layer: int = Field(default=1, ge=1, description="Layer index (1 = outer)")

    @property
    def area(self) -> float:
        """Provided area (cm²)."""
        return self.count * bar_area(self.diameter)

    @property
    def display_string(self) -> str:
        return f"{self.count}D{self.diameter}"


class BackboneCandidate(BaseModel):
    """
    Continuous backbone proposed by the global search.

    The core only reads this shape; the search itself lives outside.
    """
    count_top: int = Field(default=2, ge=0)
    count_bot: int = Field(default=2, ge=0)
    diameter: int = Field(..., gt=0, description="Backbone diameter (mm)")
    is_globally_valid: bool = False
    total_score: float = 0.0
    estimated_weight: float = 0.0
    fit_count: int = 0
    failed_sections: List[str] = Field(default_factory=list)

    @property
    def area_top(self) -> float:
        return self.count_top * bar_area(self.diameter)

    @property
    def area_bottom(self) -> float:
        return self.count_bot * bar_area(self.diameter)

    @property
    def display_label(self) -> str:
        """Label such as "2D20", or "T:3D20/B:2D20" when the faces differ."""
        if self.count_top == self.count_bot:
            return f"{self.count_top}D{self.diameter}"
        return f"T:{self.count_top}D{self.diameter}/B:{self.count_bot}D{self.diameter}"

    def estimate_weight(self, length_m: float) -> float:
        """Weight (kg) of top and bottom backbone running ``length_m``."""
        return steel_weight(self.area_top + self.area_bottom, length_m)

    def __str__(self) -> str:
        return f"{self.display_label} (Score={self.total_score:.1f}, Valid={self.is_globally_valid})"


class BeamSolution(BaseModel):
    """
    One complete reinforcement proposal for a beam group.

    The constructability score starts at a baseline assigned by the caller
    and is only ever decreased by the rule engine.

    Attributes:
        option_name: Identifier of the proposal (stable tie-break key)
        backbone_diameter: Backbone diameter (mm)
        backbone_diameter_top / backbone_diameter_bot: Per-face diameters,
            default to ``backbone_diameter``
        backbone_count_top / backbone_count_bot: Backbone bar counts
        reinforcements: reinforcement_key(section, face) -> RebarSpec
        total_steel_weight: Total steel weight (kg)
        efficiency_score: Steel efficiency score
        constructability_score: Running constructability score
        total_score: Composite score
        waste_percentage: Waste share (%)
        is_valid: Strength re-check outcome
        validation_message: Human-readable validation message
        strategy_label: Label assigned by proposal diversification
    """
    option_name: str = ""
    backbone_diameter: int = Field(default=0, ge=0)
    backbone_diameter_top: int = Field(default=0, ge=0)
    backbone_diameter_bot: int = Field(default=0, ge=0)
    backbone_count_top: int = Field(default=0, ge=0)
    backbone_count_bot: int = Field(default=0, ge=0)
    reinforcements: Dict[str, RebarSpec] = Field(default_factory=dict)

    total_steel_weight: float = 0.0
    efficiency_score: float = 0.0
    constructability_score: float = 100.0
    total_score: float = 0.0
    waste_percentage: float = 0.0
    description: str = ""

    is_valid: bool = True
    validation_message: str = ""
    strategy_label: str = ""

    @model_validator(mode="after")
    def _default_face_diameters(self) -> "BeamSolution":
        if not self.backbone_diameter_top:
            self.backbone_diameter_top = self.backbone_diameter
        if not self.backbone_diameter_bot:
            self.backbone_diameter_bot = self.backbone_diameter
        return self

    @property
    def backbone_area_top(self) -> float:
        return self.backbone_count_top * bar_area(self.backbone_diameter_top)

    @property
    def backbone_area_bot(self) -> float:
        return self.backbone_count_bot * bar_area(self.backbone_diameter_bot)

    def provided_area(self, section_id: str, face: Union[RebarFace, str]) -> float:
        """Backbone plus local reinforcement area (cm²) at one section face."""
        face = RebarFace.parse(face)
        backbone = self.backbone_area_top if face == RebarFace.TOP else self.backbone_area_bot
        spec = self.reinforcements.get(reinforcement_key(section_id, face))
        return backbone + (spec.area if spec is not None else 0.0)

    def recheck_strength(
        self,
        sections: Sequence[DesignSection],
        safety_factor: float = 1.0,
        tolerance: float = 1e-6,
    ) -> bool:
        """
        Compare provided against required steel at every section face.

        Sets ``is_valid`` and ``validation_message`` and returns ``is_valid``.
        """
        shortfalls = []
        for section in sections:
            for face in (RebarFace.TOP, RebarFace.BOTTOM):
                required = section.required_area(face) * safety_factor
                if required <= 0.01:
                    continue
                provided = self.provided_area(section.section_id, face)
                if provided + tolerance < required:
                    label = "Top" if face == RebarFace.TOP else "Bot"
                    shortfalls.append(
                        f"{label} As short by {required - provided:.2f} cm² at {section.section_id}"
                    )

        self.is_valid = not shortfalls
        self.validation_message = "; ".join(shortfalls) if shortfalls else "OK"
        return self.is_valid

    def layer2_positions(self) -> int:
        """Number of reinforcement positions placed in layer 2 or deeper."""
        return sum(1 for spec in self.reinforcements.values() if spec.layer >= 2)

    def __str__(self) -> str:
        label = f" [{self.strategy_label}]" if self.strategy_label else ""
        return (
            f"{self.option_name or 'Solution'}{label}: backbone "
            f"T{self.backbone_count_top}D{self.backbone_diameter_top}/"
            f"B{self.backbone_count_bot}D{self.backbone_diameter_bot}, "
            f"W={self.total_steel_weight:.1f} kg, Eff={self.efficiency_score:.1f}, "
            f"Cons={self.constructability_score:.1f}"
        )
