"""Rule engine: stores rules and runs them in priority order."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import logging

from src.core.diagnostics import DiagnosticSink, LoggingDiagnostics
from src.rules.base import DesignRule, Severity, SolutionContext, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class RuleRunSummary:
    """Results of one pass of the rule pipeline over a solution."""
    results: List[ValidationResult] = field(default_factory=list)
    score_before: float = 0.0
    score_after: float = 0.0

    @property
    def total_penalty(self) -> float:
        return sum(r.penalty for r in self.results)

    @property
    def has_critical(self) -> bool:
        return any(r.severity == Severity.CRITICAL for r in self.results)

    @property
    def messages(self) -> List[str]:
        return [str(r) for r in self.results if not r.is_pass]


class RuleEngine:
    """
    Ordered collection of design rules.

    Rules are keyed by name; registering a name again replaces the rule.
    Execution order is by ``priority`` (lower first), ties by registration
    order.

    Example:
        >>> engine = RuleEngine([WastePenaltyRule(), PyramidRule()])
        >>> [r.name for r in engine.rules]
        ['Pyramid', 'WastePenalty']
    """

    def __init__(
        self,
        rules: Optional[Iterable[DesignRule]] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ):
        self._rules: Dict[str, DesignRule] = {}
        self.diagnostics = diagnostics or LoggingDiagnostics(logger)
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: DesignRule) -> None:
        """Add a rule (replacing any rule with the same name)."""
        self._rules[rule.name] = rule

    def unregister(self, name: str) -> bool:
        """Remove a rule by name. Returns True if it was registered."""
        return self._rules.pop(name, None) is not None

    def get_rule(self, name: str) -> Optional[DesignRule]:
        return self._rules.get(name)

    @property
    def rules(self) -> List[DesignRule]:
        """Registered rules in execution order."""
        return sorted(self._rules.values(), key=lambda r: r.priority)

    def run(self, context: Optional[SolutionContext]) -> RuleRunSummary:
        """
        Run every rule against ``context`` in priority order.

        The constructability score never rises through the pipeline: a rule
        that raises it is reverted to the previous value. A critical result
        marks the solution invalid.
        """
        if context is None or context.solution is None:
            return RuleRunSummary()

        solution = context.solution
        summary = RuleRunSummary(score_before=solution.constructability_score)

        for rule in self.rules:
            previous = solution.constructability_score
            result = rule.validate(context)
            if solution.constructability_score > previous:
                self.diagnostics.warning(
                    f"{rule.name} raised the constructability score; change reverted"
                )
                solution.constructability_score = previous

            context.results.append(result)
            summary.results.append(result)

            if result.severity == Severity.CRITICAL:
                solution.is_valid = False
                solution.validation_message = result.message
                self.diagnostics.error(f"{solution.option_name}: {result}")
            elif result.severity == Severity.WARNING:
                self.diagnostics.warning(f"{solution.option_name}: {result}")
            elif result.severity == Severity.INFO:
                self.diagnostics.info(f"{solution.option_name}: {result}")

        summary.score_after = solution.constructability_score
        return summary


def create_default_engine(diagnostics: Optional[DiagnosticSink] = None) -> RuleEngine:
    """Create an engine with all built-in rules."""
    from src.rules.layering import PyramidRule
    from src.rules.preference import PreferredDiameterRule, SymmetryRule, VerticalAlignmentRule
    from src.rules.waste import WastePenaltyRule

    return RuleEngine(
        [
            PyramidRule(),
            SymmetryRule(),
            PreferredDiameterRule(),
            VerticalAlignmentRule(),
            WastePenaltyRule(),
        ],
        diagnostics=diagnostics,
    )
