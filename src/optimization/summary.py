"""
Tabular summaries of solver and proposal output as pandas DataFrames.
"""

from typing import Iterable

import pandas as pd

from src.core.arrangement import BarArrangement
from src.core.solution import BeamSolution


def arrangements_to_frame(arrangements: Iterable[BarArrangement]) -> pd.DataFrame:
    """
    One row per arrangement, in the given (ranked) order.

    Example:
        >>> df = arrangements_to_frame(solver.solve(section, "bot"))
        >>> df[["Layout", "Score"]].head(3)
    """
    rows = []
    for rank, arr in enumerate(arrangements, start=1):
        rows.append({
            'Rank': rank,
            'Layout': arr.to_display_string(),
            'Bars': arr.total_count,
            'Diameter (mm)': arr.primary_diameter,
            'Layers': arr.layer_count,
            'Area (cm²)': round(arr.total_area, 3),
            'Efficiency': round(arr.efficiency, 3),
            'Spacing (mm)': round(arr.clear_spacing, 1),
            'Waste': arr.waste_count,
            'Score': round(arr.score, 2),
            'Fallback': arr.is_fallback,
        })
    return pd.DataFrame(rows, columns=[
        'Rank', 'Layout', 'Bars', 'Diameter (mm)', 'Layers', 'Area (cm²)',
        'Efficiency', 'Spacing (mm)', 'Waste', 'Score', 'Fallback',
    ])


def solutions_to_frame(solutions: Iterable[BeamSolution]) -> pd.DataFrame:
    """One row per whole-beam solution."""
    rows = []
    for sol in solutions:
        rows.append({
            'Option': sol.option_name,
            'Strategy': sol.strategy_label,
            'Backbone Top': f"{sol.backbone_count_top}D{sol.backbone_diameter_top}",
            'Backbone Bot': f"{sol.backbone_count_bot}D{sol.backbone_diameter_bot}",
            'Weight (kg)': round(sol.total_steel_weight, 2),
            'Efficiency': round(sol.efficiency_score, 2),
            'Constructability': round(sol.constructability_score, 2),
            'Total Score': round(sol.total_score, 2),
            'Waste (%)': round(sol.waste_percentage, 2),
            'Valid': sol.is_valid,
            'Message': sol.validation_message,
        })
    return pd.DataFrame(rows, columns=[
        'Option', 'Strategy', 'Backbone Top', 'Backbone Bot', 'Weight (kg)',
        'Efficiency', 'Constructability', 'Total Score', 'Waste (%)', 'Valid', 'Message',
    ])
