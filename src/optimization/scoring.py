"""
Arrangement Scoring
===================

Scores a candidate bar arrangement on a 0-100 scale. Higher is better.

The score trades off:
1. Steel efficiency (over-provision and waste bars)
2. Constructability (layers, bar counts, single diameter, symmetry)
3. Bar spacing (dense but placeable layouts are preferred)

All weights come from ScoringWeights; nothing here reads global state.
"""

from typing import Dict

from src.core.arrangement import BarArrangement
from src.design.settings import SolverSettings


class ArrangementScorer:
    """
    Scoring function for section arrangements.

    Example:
        >>> scorer = ArrangementScorer(SolverSettings())
        >>> arr = BarArrangement.single_diameter([3], 16, usable_width=300, required_area=4.5)
        >>> round(scorer.score(arr), 1)
        95.8
    """

    def __init__(self, settings: SolverSettings):
        self.settings = settings
        self.weights = settings.weights

    def breakdown(self, arrangement: BarArrangement) -> Dict[str, float]:
        """
        Individual score terms (positive = bonus, negative = penalty).

        Returns:
            Dictionary of term name -> points
        """
        w = self.weights
        s = self.settings
        terms: Dict[str, float] = {}

        # 1. Over-provision
        waste_ratio = arrangement.efficiency - 1.0 if arrangement.efficiency > 1.0 else 0.0
        terms['efficiency'] = -waste_ratio * w.waste_ratio_weight

        # 2. Layers
        terms['layers'] = -max(0, arrangement.layer_count - 1) * w.extra_layer_penalty

        # 3. Bar counts
        excess = sum(max(0, n - w.preferred_bars_per_layer) for n in arrangement.bars_per_layer)
        bar_terms = -excess * w.excess_bar_penalty
        if arrangement.total_count >= w.many_bars_threshold:
            bar_terms -= w.many_bars_penalty
        if arrangement.total_count >= w.too_many_bars_threshold:
            bar_terms -= w.too_many_bars_penalty
        terms['bar_count'] = bar_terms

        # 4. Spacing
        terms['spacing'] = self._spacing_term(arrangement)

        # 5. Preferences
        preference = 0.0
        if s.prefer_single_diameter and arrangement.is_single_diameter:
            preference += w.single_diameter_bonus
        if s.prefer_symmetric and arrangement.is_symmetric:
            preference += w.symmetric_bonus
        if s.prefer_fewer_bars:
            preference += max(0, w.fewer_bars_reference - arrangement.total_count)
        if s.preferred_diameter and arrangement.primary_diameter == s.preferred_diameter:
            preference += w.preferred_diameter_bonus
        terms['preference'] = preference

        # 6. Waste bars
        terms['waste'] = -arrangement.waste_count * w.waste_bar_score

        return terms

    def _spacing_term(self, arrangement: BarArrangement) -> float:
        if not arrangement.bars_per_layer or arrangement.primary_diameter <= 0:
            return 0.0

        low = self.settings.min_spacing_for(arrangement.primary_diameter)
        high = self.settings.max_clear_spacing
        spacing = arrangement.clear_spacing

        if spacing > high:
            return -self.weights.sparse_spacing_penalty

        # Denser half of [s_min, s_max]
        middle = (low + high) / 2.0
        if middle <= low or spacing > middle or spacing < low:
            return 0.0
        return self.weights.density_bonus * (middle - spacing) / (middle - low)

    def score(self, arrangement: BarArrangement) -> float:
        """Total score clamped to [0, 100]."""
        if arrangement.is_empty:
            return 100.0
        total = 100.0 + sum(self.breakdown(arrangement).values())
        return max(0.0, min(100.0, total))
