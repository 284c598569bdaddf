"""Waste penalty rule."""

from typing import Optional

from src.rules.base import DesignRule, Severity, SolutionContext, ValidationResult


class WastePenaltyRule(DesignRule):
    """
    Penalize bars added only for constructability.

    Runs late (priority 15) so that every earlier stage has added its waste
    bars to ``context.waste_count``.

    Penalty = waste bars × ``RuleSettings.waste_penalty_score`` (default 20).
    """

    name = "WastePenalty"
    priority = 15

    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        if self.is_inactive(context):
            return ValidationResult.passed(self.name)

        waste = context.waste_count
        if waste <= 0:
            return ValidationResult.passed(self.name)

        penalty = waste * context.rules.waste_penalty_score
        context.apply_penalty(penalty)

        return ValidationResult(
            rule_name=self.name,
            severity=Severity.WARNING,
            penalty=penalty,
            message=f"Waste steel: {waste} bars added for constructability (-{penalty:.0f} points)",
        )
