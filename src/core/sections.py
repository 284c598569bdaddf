"""
Design cross-sections of a continuous beam.

A DesignSection is one discrete design location along the beam (support,
mid-span, quarter point or free end). It carries the section geometry and
the steel areas required by the structural analysis, and receives the valid
arrangements computed by the SectionSolver for each face.

Examples:
    >>> section = DesignSection(section_id="S1_Mid", width=300, height=500, req_bot=8.2)
    >>> section.usable_width
    230.0
    >>> section.required_area(RebarFace.BOTTOM)
    8.2
"""

from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, Field

from src.core.arrangement import BarArrangement


class RebarFace(Enum):
    """Face of the cross-section holding longitudinal bars."""
    TOP = "top"
    BOTTOM = "bot"

    @classmethod
    def parse(cls, value: Union["RebarFace", str]) -> "RebarFace":
        """Accept a RebarFace or one of 'top', 'bot', 'bottom'."""
        if isinstance(value, RebarFace):
            return value
        key = str(value).strip().lower()
        if key == "top":
            return cls.TOP
        if key in ("bot", "bottom"):
            return cls.BOTTOM
        raise ValueError(f"Unknown rebar face: {value!r}. Use 'top' or 'bot'")


class SectionKind(Enum):
    """Type of design location along a span."""
    SUPPORT = "support"
    MID_SPAN = "mid_span"
    FREE_END = "free_end"
    QUARTER = "quarter"


class DesignSection(BaseModel):
    """
    Discrete design section with requirements and solver output.

    Attributes:
        global_index: Index along the whole beam group (0..N-1)
        section_id: Identifier, e.g. "S1_Support_Left"
        span_index: Span holding this section (0-based)
        zone_index: Zone inside the span (0-based)
        span_id: Span identifier, e.g. "S1"
        kind: Section kind
        width: Section width b (mm)
        height: Section height h (mm)
        cover_top / cover_bot / cover_side: Concrete covers (mm)
        stirrup_diameter: Estimated stirrup diameter (mm)
        req_top / req_bot: Required longitudinal steel (cm²)
        req_stirrup: Required stirrup area (cm²/cm)
        req_web: Required web (side) steel (cm²)
        valid_arrangements_top / valid_arrangements_bot: Solver output
    """

    global_index: int = Field(default=0, ge=0, description="Global index")
    section_id: str = Field(default="", description="Section identifier")
    span_index: int = Field(default=0, ge=0, description="Span index")
    zone_index: int = Field(default=0, ge=0, description="Zone index in span")
    span_id: str = Field(default="", description="Span identifier")
    kind: SectionKind = Field(default=SectionKind.MID_SPAN, description="Section kind")
    position: float = Field(default=0.0, description="Distance from beam start (m)")
    relative_position: float = Field(default=0.0, ge=0.0, le=1.0, description="Position in span [0..1]")

    width: float = Field(..., description="Width b (mm)")
    height: float = Field(..., description="Height h (mm)")
    cover_top: float = Field(default=35.0, ge=0, description="Top cover (mm)")
    cover_bot: float = Field(default=35.0, ge=0, description="Bottom cover (mm)")
    cover_side: float = Field(default=25.0, ge=0, description="Side cover (mm)")
    stirrup_diameter: float = Field(default=10.0, ge=0, description="Stirrup diameter (mm)")

    req_top: float = Field(default=0.0, ge=0, description="Required top steel (cm²)")
    req_bot: float = Field(default=0.0, ge=0, description="Required bottom steel (cm²)")
    req_stirrup: float = Field(default=0.0, ge=0, description="Required stirrup steel (cm²/cm)")
    req_web: float = Field(default=0.0, ge=0, description="Required web steel (cm²)")

    is_support_left: bool = False
    is_support_right: bool = False

    valid_arrangements_top: List[BarArrangement] = Field(default_factory=list)
    valid_arrangements_bot: List[BarArrangement] = Field(default_factory=list)
    selected_top: Optional[BarArrangement] = None
    selected_bot: Optional[BarArrangement] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def usable_width(self) -> float:
        """Width available for bars: b - 2·c_side - 2·d_stirrup (mm)."""
        return self.width - 2 * self.cover_side - 2 * self.stirrup_diameter

    @property
    def usable_height(self) -> float:
        """Height available for layers: h - c_top - c_bot - 2·d_stirrup (mm)."""
        return self.height - self.cover_top - self.cover_bot - 2 * self.stirrup_diameter

    @property
    def is_support(self) -> bool:
        return self.kind == SectionKind.SUPPORT

    @property
    def is_free_end(self) -> bool:
        return self.kind == SectionKind.FREE_END

    @property
    def requires_top_rebar(self) -> bool:
        return self.req_top > 0.01

    @property
    def requires_bottom_rebar(self) -> bool:
        return self.req_bot > 0.01

    def required_area(self, face: Union[RebarFace, str]) -> float:
        """Required steel area (cm²) on ``face``."""
        return self.req_top if RebarFace.parse(face) == RebarFace.TOP else self.req_bot

    def arrangements(self, face: Union[RebarFace, str]) -> List[BarArrangement]:
        """Valid arrangements stored for ``face``."""
        if RebarFace.parse(face) == RebarFace.TOP:
            return self.valid_arrangements_top
        return self.valid_arrangements_bot

    def set_arrangements(self, face: Union[RebarFace, str], items: List[BarArrangement]) -> None:
        """Store the solver output for ``face``."""
        if RebarFace.parse(face) == RebarFace.TOP:
            self.valid_arrangements_top = list(items)
        else:
            self.valid_arrangements_bot = list(items)

    def clone(self) -> "DesignSection":
        """Independent copy; arrangement lists are copied, arrangements shared."""
        return self.model_copy(
            update={
                "valid_arrangements_top": list(self.valid_arrangements_top),
                "valid_arrangements_bot": list(self.valid_arrangements_bot),
            }
        )

    def __str__(self) -> str:
        return (
            f"{self.section_id} | Type={self.kind.value} | "
            f"Req: Top={self.req_top:.2f}, Bot={self.req_bot:.2f} | "
            f"Options: T={len(self.valid_arrangements_top)}, B={len(self.valid_arrangements_bot)}"
        )
