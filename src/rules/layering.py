"""Pyramid (layering) rule."""

from typing import Optional

from src.core.sections import RebarFace
from src.rules.base import DesignRule, Severity, SolutionContext, ValidationResult


class PyramidRule(DesignRule):
    """
    Inner layers may not hold more bars than the outer backbone layer.

    A layer-2 position with more bars than the backbone of its face cannot
    be tied to the stirrup legs. This is a critical error: the engine marks
    the solution invalid. No score penalty is applied.
    """

    name = "Pyramid"
    priority = 1

    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        if self.is_inactive(context):
            return ValidationResult.passed(self.name)

        solution = context.solution
        violations = []
        for key in sorted(solution.reinforcements):
            spec = solution.reinforcements[key]
            if spec.layer < 2 or spec.count <= 0:
                continue
            try:
                face = RebarFace.parse(spec.position)
            except ValueError:
                continue
            backbone = (
                solution.backbone_count_top if face == RebarFace.TOP else solution.backbone_count_bot
            )
            if spec.count > backbone:
                violations.append(f"{key}: {spec.display_string} in layer {spec.layer} > {backbone} backbone bars")

        if not violations:
            return ValidationResult.passed(self.name)

        return ValidationResult(
            rule_name=self.name,
            severity=Severity.CRITICAL,
            message="Inner layer wider than outer layer: " + "; ".join(violations),
        )
