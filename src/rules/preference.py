"""Preference rules: symmetry, preferred diameter and top/bottom alignment."""

from typing import Optional

from src.rules.base import DesignRule, Severity, SolutionContext, ValidationResult


class SymmetryRule(DesignRule):
    """Odd bar counts cannot be placed symmetrically about the web."""

    name = "Symmetry"
    priority = 5

    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        if self.is_inactive(context):
            return ValidationResult.passed(self.name)

        solution = context.solution
        counts = [solution.backbone_count_top, solution.backbone_count_bot]
        counts.extend(spec.count for spec in solution.reinforcements.values())
        odd = sum(1 for n in counts if n > 0 and n % 2 == 1)
        if odd == 0:
            return ValidationResult.passed(self.name)

        penalty = context.apply_penalty(odd * context.rules.symmetry_penalty_score)
        return ValidationResult(
            rule_name=self.name,
            severity=Severity.WARNING,
            penalty=penalty,
            message=f"{odd} odd bar count(s), layout not symmetric",
        )


class PreferredDiameterRule(DesignRule):
    """Backbone faces off the preferred diameter lose a few points."""

    name = "PreferredDiameter"
    priority = 10

    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        if self.is_inactive(context):
            return ValidationResult.passed(self.name)

        preferred = context.rules.preferred_diameter
        if not preferred:
            return ValidationResult.passed(self.name)

        solution = context.solution
        faces = [
            d for d in (solution.backbone_diameter_top, solution.backbone_diameter_bot)
            if d and d != preferred
        ]
        if not faces:
            return ValidationResult.passed(self.name)

        penalty = context.apply_penalty(len(faces) * context.rules.preferred_diameter_penalty)
        return ValidationResult(
            rule_name=self.name,
            severity=Severity.WARNING,
            penalty=penalty,
            message=f"Backbone D{'/D'.join(str(d) for d in faces)} differs from preferred D{preferred}",
        )


class VerticalAlignmentRule(DesignRule):
    """
    Top and bottom backbone counts must share parity.

    With 3 bars on top (one centered) and 4 at the bottom the stirrup legs
    cannot run straight from top to bottom bars.
    """

    name = "VerticalAlignment"
    priority = 12

    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        if self.is_inactive(context):
            return ValidationResult.passed(self.name)

        solution = context.solution
        rules = context.rules
        n_top = solution.backbone_count_top
        n_bot = solution.backbone_count_bot

        if n_top % 2 != n_bot % 2:
            penalty = context.apply_penalty(rules.alignment_penalty_score)
            return ValidationResult(
                rule_name=self.name,
                severity=Severity.WARNING,
                penalty=penalty,
                message=f"Odd/even mismatch: Top={n_top}, Bot={n_bot}, stirrup legs not aligned",
            )

        diff = abs(n_top - n_bot)
        if diff > rules.alignment_count_diff_limit:
            extra = (diff - rules.alignment_count_diff_limit) * rules.alignment_extra_penalty
            penalty = context.apply_penalty(extra)
            return ValidationResult(
                rule_name=self.name,
                severity=Severity.WARNING,
                penalty=penalty,
                message=f"Large count difference: Top={n_top}, Bot={n_bot} (diff={diff})",
            )

        return ValidationResult.passed(self.name)
