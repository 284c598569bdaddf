"""
Unit Tests for the Rule Engine
==============================
"""

from unittest.mock import Mock

import pytest

from src.core.diagnostics import RecordingDiagnostics
from src.core.solution import BeamSolution, RebarSpec
from src.design.settings import RuleSettings, SolverSettings
from src.rules import (
    DesignRule,
    PreferredDiameterRule,
    PyramidRule,
    RuleEngine,
    Severity,
    SolutionContext,
    SymmetryRule,
    ValidationResult,
    VerticalAlignmentRule,
    WastePenaltyRule,
    create_default_engine,
)


ALL_RULES = [PyramidRule, SymmetryRule, PreferredDiameterRule, VerticalAlignmentRule, WastePenaltyRule]


def make_solution(top=2, bot=2, diameter=20, reinforcements=None):
    return BeamSolution(
        option_name="Opt",
        backbone_diameter=diameter,
        backbone_count_top=top,
        backbone_count_bot=bot,
        reinforcements=reinforcements or {},
        constructability_score=100.0,
    )


class TestWastePenaltyRule:
    """Test cases for WastePenaltyRule."""

    def test_no_waste_passes(self):
        context = SolutionContext(solution=make_solution())
        result = WastePenaltyRule().validate(context)

        assert result.severity == Severity.PASS
        assert result.penalty == 0.0
        assert context.solution.constructability_score == 100.0

    def test_penalty_per_waste_bar(self):
        context = SolutionContext(solution=make_solution(), waste_count=2)
        result = WastePenaltyRule().validate(context)

        assert result.severity == Severity.WARNING
        assert result.penalty == pytest.approx(40.0)
        assert context.solution.constructability_score == pytest.approx(60.0)
        assert "2 bars" in result.message

    def test_configured_weight(self):
        context = SolutionContext(
            solution=make_solution(), settings=RuleSettings(waste_penalty_score=10.0), waste_count=3
        )
        assert WastePenaltyRule().validate(context).penalty == pytest.approx(30.0)

    def test_priority(self):
        assert WastePenaltyRule.priority == 15


class TestNullContext:
    """Every rule passes on a missing or incomplete context."""

    @pytest.mark.parametrize("rule_class", ALL_RULES)
    def test_none_context(self, rule_class):
        assert rule_class().validate(None).severity == Severity.PASS

    @pytest.mark.parametrize("rule_class", ALL_RULES)
    def test_context_without_solution(self, rule_class):
        assert rule_class().validate(SolutionContext()).is_pass


class TestBuiltinRules:
    """Pyramid, symmetry, preferred diameter and alignment rules."""

    def test_pyramid_violation(self):
        solution = make_solution(reinforcements={
            "S1_top": RebarSpec(diameter=20, count=3, position="top", layer=2),
        })
        result = PyramidRule().validate(SolutionContext(solution=solution))

        assert result.severity == Severity.CRITICAL
        assert "S1_top" in result.message

    def test_pyramid_ok(self):
        solution = make_solution(reinforcements={
            "S1_top": RebarSpec(diameter=20, count=2, position="top", layer=2),
            "S2_bot": RebarSpec(diameter=20, count=5, position="bot", layer=1),
        })
        assert PyramidRule().validate(SolutionContext(solution=solution)).is_pass

    def test_symmetry(self):
        context = SolutionContext(solution=make_solution(top=3, bot=2))
        result = SymmetryRule().validate(context)

        assert result.severity == Severity.WARNING
        assert result.penalty == pytest.approx(5.0)
        assert context.solution.constructability_score == pytest.approx(95.0)

    def test_preferred_diameter(self):
        context = SolutionContext(
            solution=make_solution(diameter=22), settings=RuleSettings(preferred_diameter=20)
        )
        result = PreferredDiameterRule().validate(context)

        assert result.severity == Severity.WARNING
        assert result.penalty == pytest.approx(10.0)

    def test_no_preferred_diameter(self):
        context = SolutionContext(solution=make_solution(diameter=22))
        assert PreferredDiameterRule().validate(context).is_pass

    def test_parity_mismatch(self):
        context = SolutionContext(solution=make_solution(top=3, bot=2))
        result = VerticalAlignmentRule().validate(context)
        assert result.penalty == pytest.approx(25.0)
        assert context.solution.constructability_score == pytest.approx(75.0)

    def test_large_count_difference(self):
        context = SolutionContext(solution=make_solution(top=2, bot=6))
        result = VerticalAlignmentRule().validate(context)
        # diff 4, limit 2, 5 points per extra bar
        assert result.penalty == pytest.approx(10.0)

    def test_alignment_ok(self):
        context = SolutionContext(solution=make_solution(top=4, bot=2))
        assert VerticalAlignmentRule().validate(context).is_pass


class TestSolutionContext:
    """Test cases for SolutionContext."""

    def test_negative_penalty_ignored(self):
        context = SolutionContext(solution=make_solution())
        assert context.apply_penalty(-10.0) == 0.0
        assert context.solution.constructability_score == 100.0

    def test_add_waste(self):
        context = SolutionContext()
        context.add_waste(2)
        context.add_waste(-1)
        assert context.waste_count == 2

    def test_solver_settings_accepted(self):
        settings = SolverSettings(rules={"waste_penalty_score": 12.0})
        context = SolutionContext(settings=settings)
        assert context.rules.waste_penalty_score == 12.0

    def test_solver_preferred_diameter_reaches_rules(self):
        context = SolutionContext(
            solution=make_solution(diameter=22), settings=SolverSettings(preferred_diameter=20)
        )
        assert context.rules.preferred_diameter == 20

        result = PreferredDiameterRule().validate(context)
        assert result.severity == Severity.WARNING
        assert result.penalty == pytest.approx(10.0)
        assert context.solution.constructability_score == pytest.approx(90.0)

    def test_rule_preferred_diameter_wins(self):
        settings = SolverSettings(preferred_diameter=20, rules={"preferred_diameter": 22})
        context = SolutionContext(solution=make_solution(diameter=22), settings=settings)

        assert context.rules.preferred_diameter == 22
        assert PreferredDiameterRule().validate(context).is_pass


class TestRuleEngine:
    """Test cases for RuleEngine."""

    def test_priority_order(self):
        engine = RuleEngine([WastePenaltyRule(), VerticalAlignmentRule(), PyramidRule()])
        assert [r.name for r in engine.rules] == ["Pyramid", "VerticalAlignment", "WastePenalty"]

    def test_register_and_unregister(self):
        engine = create_default_engine()
        assert len(engine.rules) == 5
        assert engine.unregister("Symmetry")
        assert not engine.unregister("Symmetry")
        assert engine.get_rule("Symmetry") is None
        assert len(engine.rules) == 4

    def test_rule_receives_context(self):
        spy = Mock()
        spy.name = "Spy"
        spy.priority = 0
        spy.validate.return_value = ValidationResult.passed("Spy")

        engine = RuleEngine([WastePenaltyRule(), spy])
        context = SolutionContext(solution=make_solution())
        engine.run(context)

        spy.validate.assert_called_once_with(context)
        assert engine.rules[0] is spy

    def test_full_pipeline(self):
        sink = RecordingDiagnostics()
        context = SolutionContext(solution=make_solution(top=3, bot=2, diameter=22), waste_count=1)

        summary = create_default_engine(diagnostics=sink).run(context)

        # symmetry 5 + alignment 25 + waste 20
        assert summary.score_before == 100.0
        assert summary.score_after == pytest.approx(50.0)
        assert summary.total_penalty == pytest.approx(50.0)
        assert not summary.has_critical
        assert context.solution.is_valid
        assert len(sink.warnings) == 3

    def test_critical_marks_invalid(self):
        solution = make_solution(reinforcements={
            "S1_bot": RebarSpec(diameter=20, count=4, position="bot", layer=2),
        })
        context = SolutionContext(solution=solution)
        summary = create_default_engine(diagnostics=RecordingDiagnostics()).run(context)

        assert summary.has_critical
        assert context.has_critical_error
        assert not solution.is_valid
        assert "Inner layer" in solution.validation_message

    def test_score_never_increases(self):
        class BonusRule(DesignRule):
            name = "Bonus"
            priority = 1

            def validate(self, context):
                context.solution.constructability_score += 50
                return ValidationResult.passed(self.name)

        sink = RecordingDiagnostics()
        context = SolutionContext(solution=make_solution(top=3, bot=2))
        summary = RuleEngine([BonusRule(), SymmetryRule()], diagnostics=sink).run(context)

        assert summary.score_after <= summary.score_before
        assert context.solution.constructability_score == pytest.approx(95.0)
        assert any("Bonus" in msg for msg in sink.warnings)

    def test_run_without_solution(self):
        summary = create_default_engine().run(None)
        assert summary.results == []
