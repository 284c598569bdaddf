"""
Proposal Diversification
========================

Picks a short list of whole-beam solutions that stand for different
engineering strategies instead of near-duplicates of the best one.

Strategies, in selection order (each skips solutions already taken):
1. Best balanced: highest efficiency, then highest constructability
2. Most economical: lowest steel weight, then highest efficiency
3. Robust: most backbone bars, then largest backbone, then efficiency
4. Construction-friendly: fewest layer-2 positions, then fewest positions,
   then highest constructability
5. Harmonious: highest uniformity score, then highest efficiency
6. Remaining slots: highest efficiency

Every chain ends on ``option_name`` and then input order, so the result
does not depend on how equal solutions happen to be ordered upstream
beyond that.
"""

from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from src.core.solution import BeamSolution


class StrategyLabel(Enum):
    """Human-readable strategy names."""
    BALANCED = "Best balanced"
    ECONOMICAL = "Most economical"
    ROBUST = "Robust (large backbone)"
    CONSTRUCTION = "Construction-friendly"
    HARMONIOUS = "Harmonious diameters"
    ALTERNATIVE = "Alternative"


def uniformity_score(solution: BeamSolution) -> float:
    """
    How well reinforcement diameters match the backbone.

    2 points per position matching a backbone diameter, 1 point within
    ±2 mm, plus 5 points when top and bottom backbones share a diameter.
    """
    top = solution.backbone_diameter_top
    bot = solution.backbone_diameter_bot
    score = 0.0
    for spec in solution.reinforcements.values():
        if spec.diameter in (top, bot):
            score += 2
        elif abs(spec.diameter - top) <= 2 or abs(spec.diameter - bot) <= 2:
            score += 1
    if top == bot:
        score += 5
    return score


def _reinforcement_positions(solution: BeamSolution) -> int:
    return sum(1 for spec in solution.reinforcements.values() if spec.count > 0)


# Sort keys: smaller is better
_STRATEGY_KEYS: List[Tuple[StrategyLabel, Callable[[BeamSolution], tuple]]] = [
    (StrategyLabel.BALANCED, lambda s: (-s.efficiency_score, -s.constructability_score)),
    (StrategyLabel.ECONOMICAL, lambda s: (s.total_steel_weight, -s.efficiency_score)),
    (
        StrategyLabel.ROBUST,
        lambda s: (
            -(s.backbone_count_top + s.backbone_count_bot),
            -s.backbone_diameter,
            -s.efficiency_score,
        ),
    ),
    (
        StrategyLabel.CONSTRUCTION,
        lambda s: (s.layer2_positions(), _reinforcement_positions(s), -s.constructability_score),
    ),
    (StrategyLabel.HARMONIOUS, lambda s: (-uniformity_score(s), -s.efficiency_score)),
]


def _pick(
    pool: List[Tuple[int, BeamSolution]],
    key: Callable[[BeamSolution], tuple],
) -> Optional[Tuple[int, BeamSolution]]:
    if not pool:
        return None
    return min(pool, key=lambda item: key(item[1]) + (item[1].option_name, item[0]))


def select_diverse_solutions(
    solutions: Optional[Sequence[BeamSolution]],
    max_count: int = 5,
    in_place: bool = True,
) -> List[BeamSolution]:
    """
    Select up to ``max_count`` valid solutions with distinct strategies.

    Args:
        solutions: Candidate whole-beam solutions
        max_count: Maximum number of proposals to return
        in_place: Write ``strategy_label`` onto the given objects (default).
            With False, labeled deep copies are returned and the inputs are
            left untouched.

    Returns:
        Labeled solutions in strategy order

    Example:
        >>> picks = select_diverse_solutions(candidates, max_count=3)
        >>> [p.strategy_label for p in picks]
        ['Best balanced', 'Most economical', 'Robust (large backbone)']
    """
    if not solutions or max_count <= 0:
        return []

    pool = [(i, sol) for i, sol in enumerate(solutions) if sol is not None and sol.is_valid]
    selected: List[Tuple[BeamSolution, StrategyLabel]] = []

    for label, key in _STRATEGY_KEYS:
        if len(selected) >= max_count:
            break
        choice = _pick(pool, key)
        if choice is None:
            break
        pool.remove(choice)
        selected.append((choice[1], label))

    while len(selected) < max_count:
        choice = _pick(pool, lambda s: (-s.efficiency_score,))
        if choice is None:
            break
        pool.remove(choice)
        selected.append((choice[1], StrategyLabel.ALTERNATIVE))

    result = []
    for solution, label in selected:
        target = solution if in_place else solution.model_copy(deep=True)
        target.strategy_label = label.value
        result.append(target)
    return result
