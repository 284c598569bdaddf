"""
Configuration of the reinforcement layout solver.
"""

from .settings import (
    DEFAULT_INVENTORY,
    DEFAULT_MAIN_DIAMETERS,
    ScoringWeights,
    SearchLimits,
    RuleSettings,
    SolverSettings,
    SETTINGS_PRESETS,
    get_settings_preset,
    parse_diameter_range,
)

__all__ = [
    'DEFAULT_INVENTORY',
    'DEFAULT_MAIN_DIAMETERS',
    'ScoringWeights',
    'SearchLimits',
    'RuleSettings',
    'SolverSettings',
    'SETTINGS_PRESETS',
    'get_settings_preset',
    'parse_diameter_range',
]
