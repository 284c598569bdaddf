"""
Arrangement search and proposal selection.

This module provides:
- SectionSolver: ranked bar arrangements per section face
- ArrangementScorer: the 0-100 arrangement scoring function
- select_diverse_solutions: strategy-labeled shortlist of beam solutions
- pandas summaries of arrangements and solutions
"""

from .scoring import ArrangementScorer
from .section_solver import SectionSolver, SectionFailure, SolveReport
from .proposals import StrategyLabel, select_diverse_solutions, uniformity_score
from .summary import arrangements_to_frame, solutions_to_frame

__all__ = [
    # Solver
    'SectionSolver',
    'SectionFailure',
    'SolveReport',
    'ArrangementScorer',
    # Proposals
    'StrategyLabel',
    'select_diverse_solutions',
    'uniformity_score',
    # Summaries
    'arrangements_to_frame',
    'solutions_to_frame',
]
