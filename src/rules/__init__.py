"""
Constructability rules for whole-beam reinforcement solutions.
"""

from .base import DesignRule, Severity, SolutionContext, ValidationResult
from .engine import RuleEngine, RuleRunSummary, create_default_engine
from .layering import PyramidRule
from .preference import PreferredDiameterRule, SymmetryRule, VerticalAlignmentRule
from .waste import WastePenaltyRule

__all__ = [
    'DesignRule',
    'Severity',
    'SolutionContext',
    'ValidationResult',
    'RuleEngine',
    'RuleRunSummary',
    'create_default_engine',
    'PyramidRule',
    'SymmetryRule',
    'PreferredDiameterRule',
    'VerticalAlignmentRule',
    'WastePenaltyRule',
]
