"""
Rule contract for whole-beam solution validation.

Every rule:
- has a unique ``name`` and an integer ``priority`` (lower runs first)
- receives a SolutionContext, which is shared by all rules of one run
- returns a ValidationResult and never raises for a missing or incomplete
  context (it passes instead)

Mutation contract: a rule may lower ``context.solution.constructability_score``
only through ``SolutionContext.apply_penalty`` and may add waste bars
through ``SolutionContext.add_waste`` for later rules to read.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from src.core.solution import BeamSolution
from src.design.settings import RuleSettings, SolverSettings


class Severity(Enum):
    """Outcome level of a rule."""
    PASS = "pass"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class ValidationResult:
    """Outcome of one rule invocation."""
    rule_name: str
    severity: Severity = Severity.PASS
    penalty: float = 0.0
    message: str = ""

    @classmethod
    def passed(cls, rule_name: str, message: str = "") -> "ValidationResult":
        return cls(rule_name=rule_name, severity=Severity.PASS, message=message)

    @property
    def is_pass(self) -> bool:
        return self.severity == Severity.PASS

    def __str__(self) -> str:
        text = f"[{self.severity.value.upper()}] {self.rule_name}"
        if self.penalty:
            text += f" (-{self.penalty:.1f})"
        return f"{text}: {self.message}" if self.message else text


@dataclass
class SolutionContext:
    """
    Whole-beam solution in progress plus state shared between rules.

    Attributes:
        solution: Solution being validated (mutated by rules)
        settings: Rule weights; a SolverSettings contributes its ``rules``
            and, when those name none, its ``preferred_diameter``
        waste_count: Waste bars accumulated by earlier stages and rules
        results: Results of the rules run so far
        total_penalty: Sum of penalties applied through this context
    """
    solution: Optional[BeamSolution] = None
    settings: Union[RuleSettings, SolverSettings, None] = None
    waste_count: int = 0
    results: List[ValidationResult] = field(default_factory=list)
    total_penalty: float = 0.0

    def __post_init__(self):
        if self.settings is None:
            self.settings = RuleSettings()
        elif isinstance(self.settings, SolverSettings):
            rules = self.settings.rules
            # The solver-level preference applies unless the rules set their own
            if rules.preferred_diameter is None and self.settings.preferred_diameter:
                rules = rules.model_copy(update={"preferred_diameter": self.settings.preferred_diameter})
            self.settings = rules

    @property
    def rules(self) -> RuleSettings:
        return self.settings

    @property
    def has_critical_error(self) -> bool:
        return any(r.severity == Severity.CRITICAL for r in self.results)

    def apply_penalty(self, amount: float) -> float:
        """
        Lower the constructability score by ``amount``.

        Negative amounts are ignored so the score never increases.

        Returns:
            The penalty actually applied
        """
        if self.solution is None or amount <= 0:
            return 0.0
        self.solution.constructability_score -= amount
        self.total_penalty += amount
        return amount

    def add_waste(self, count: int) -> None:
        """Accumulate waste bars (negative counts ignored)."""
        if count > 0:
            self.waste_count += count


class DesignRule(ABC):
    """
    Base class for all validation rules.

    Subclasses set ``name`` and ``priority`` and implement ``validate()``.
    """

    name: str = "Rule"

    # Lower priority = runs first
    priority: int = 100

    @abstractmethod
    def validate(self, context: Optional[SolutionContext]) -> ValidationResult:
        """Inspect (and possibly penalize) the solution held by ``context``."""
        ...

    @staticmethod
    def is_inactive(context: Optional[SolutionContext]) -> bool:
        """True when there is nothing to validate."""
        return context is None or context.solution is None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"
