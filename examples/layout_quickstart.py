"""
Quick Start Guide: Reinforcement Layout
=======================================

This guide shows how to solve bar arrangements for beam sections, validate
a whole-beam proposal and pick a diversified shortlist.
"""

import logging

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


# Example 1: Arrangements for one section face
from src.core.sections import DesignSection, RebarFace
from src.design import SolverSettings
from src.optimization import SectionSolver, arrangements_to_frame

settings = SolverSettings(main_bar_range="16-25", max_layers=2)
section = DesignSection(section_id="S1_Mid", width=300, height=500, req_bot=12.5)

solver = SectionSolver(settings)
arrangements = solver.solve(section, RebarFace.BOTTOM)
print(arrangements_to_frame(arrangements).head(5).to_string(index=False))


# Example 2: Mixed diameters and a preset
from src.design import get_settings_preset

economical = get_settings_preset("economical")
economical.allow_mixed_diameters = True
for arr in SectionSolver(economical).solve(section, "bot")[:3]:
    print(arr)


# Example 3: Validate a whole-beam proposal
from src.core.solution import BeamSolution, RebarSpec
from src.rules import SolutionContext, create_default_engine

solution = BeamSolution(
    option_name="Option 2D20",
    backbone_diameter=20,
    backbone_count_top=2,
    backbone_count_bot=3,
    reinforcements={"S1_Mid_bot": RebarSpec(diameter=20, count=2, position="bot")},
    total_steel_weight=86.4,
    efficiency_score=88.0,
)
solution.recheck_strength([section])

summary = create_default_engine().run(SolutionContext(solution=solution, settings=settings, waste_count=1))
print(f"Constructability: {summary.score_before:.0f} -> {summary.score_after:.0f}")
for message in summary.messages:
    print(f"  {message}")


# Example 4: Diversified shortlist
from src.optimization import select_diverse_solutions, solutions_to_frame

alternatives = [
    solution,
    BeamSolution(option_name="Option 2D22", backbone_diameter=22, backbone_count_top=2,
                 backbone_count_bot=2, total_steel_weight=92.0, efficiency_score=84.0),
    BeamSolution(option_name="Option 3D18", backbone_diameter=18, backbone_count_top=3,
                 backbone_count_bot=3, total_steel_weight=81.5, efficiency_score=86.0),
]
print(solutions_to_frame(select_diverse_solutions(alternatives, max_count=3)).to_string(index=False))
