"""
Unit Tests for the Section Solver
=================================

Covers the enumeration, filtering, fallback and failure paths together with
the arrangement scoring function.
"""

import pytest

from src.core.arrangement import BarArrangement
from src.core.diagnostics import RecordingDiagnostics
from src.core.geometry import bar_area
from src.core.sections import DesignSection, RebarFace
from src.design.settings import SolverSettings
from src.optimization import ArrangementScorer, SectionSolver


def make_section(usable_width=230.0, height=500.0, req_top=0.0, req_bot=0.0, section_id="S1"):
    """Section whose usable width is ``usable_width`` with default covers."""
    return DesignSection(
        section_id=section_id,
        width=usable_width + 70.0,
        height=height,
        req_top=req_top,
        req_bot=req_bot,
    )


def signature(arrangements):
    return [(a.to_display_string(), a.bars_per_layer, a.score) for a in arrangements]


class TestScenarios:
    """Reference scenarios."""

    def test_no_requirement_returns_empty_arrangement(self, settings):
        result = SectionSolver(settings).solve(make_section(req_top=0.0), RebarFace.TOP)

        assert len(result) == 1
        assert result[0].total_count == 0
        assert result[0].score == 100.0

    def test_small_requirement_wide_section(self, settings):
        section = make_section(usable_width=300.0, req_bot=4.5)
        result = SectionSolver(settings).solve(section, RebarFace.BOTTOM)

        best = result[0]
        assert best.primary_diameter == 16
        assert best.total_count == 3
        assert 1.0 <= best.efficiency <= 1.65
        assert best.efficiency == pytest.approx(best.total_area / 4.5)

    @pytest.mark.parametrize("width, height", [(-10.0, 500.0), (230.0, 80.0)])
    def test_invalid_geometry_returns_empty_list(self, settings, width, height):
        sink = RecordingDiagnostics()
        section = make_section(usable_width=width, height=height, req_bot=5.0)

        result = SectionSolver(settings, diagnostics=sink).solve(section, RebarFace.BOTTOM)

        assert result == []
        assert len(sink.errors) == 1
        assert "Invalid usable geometry" in sink.errors[0]

    def test_fallback_when_nothing_fits(self):
        sink = RecordingDiagnostics()
        settings = SolverSettings(allowed_diameters=[25])
        # 2D25 leaves a 20 mm gap in 70 mm, below the 30 mm minimum
        section = make_section(usable_width=70.0, req_bot=8.0)

        result = SectionSolver(settings, diagnostics=sink).solve(section, RebarFace.BOTTOM)

        assert len(result) == 1
        assert result[0].score == 50.0
        assert result[0].is_fallback
        assert result[0].bars_per_layer == (2,)
        assert sink.errors == []
        assert any("fallback" in msg for level, msg in sink.records if level == "info")

    def test_fallback_overflow_fails(self):
        sink = RecordingDiagnostics()
        settings = SolverSettings(allowed_diameters=[25])
        # 9 bars needed, 2 per layer x 2 layers available
        section = make_section(usable_width=70.0, req_bot=40.0)

        result = SectionSolver(settings, diagnostics=sink).solve(section, RebarFace.BOTTOM)

        assert result == []
        assert len(sink.errors) == 1


class TestProperties:
    """Invariants over a range of requirements."""

    REQUIREMENTS = [2.0, 4.5, 8.0, 12.5, 19.0, 25.0]

    def test_idempotent(self, settings):
        solver = SectionSolver(settings)
        for req in self.REQUIREMENTS:
            section = make_section(req_bot=req)
            first = solver.solve(section, RebarFace.BOTTOM)
            second = solver.solve(section, RebarFace.BOTTOM)
            assert signature(first) == signature(second)

    def test_area_sufficiency(self):
        for safety in (1.0, 0.97, 0.9):
            settings = SolverSettings(safety_factor=safety)
            solver = SectionSolver(settings)
            for req in self.REQUIREMENTS:
                required = req * safety
                for arr in solver.solve(make_section(req_bot=req), RebarFace.BOTTOM):
                    if arr.is_fallback or arr.is_empty:
                        continue
                    assert arr.total_area >= required * (1 - settings.area_tolerance)

    def test_scores_and_waste_bounds(self, settings):
        solver = SectionSolver(settings)
        for req in self.REQUIREMENTS:
            for arr in solver.solve(make_section(req_bot=req), RebarFace.BOTTOM):
                assert 0.0 <= arr.score <= 100.0
                assert arr.waste_count >= 0

    def test_sorted_by_score(self, settings):
        result = SectionSolver(settings).solve(make_section(req_bot=12.5), RebarFace.BOTTOM)
        scores = [a.score for a in result]
        assert scores == sorted(scores, reverse=True)

    def test_top_k(self):
        settings = SolverSettings(max_arrangements=3)
        result = SectionSolver(settings).solve(make_section(req_bot=12.5), RebarFace.BOTTOM)
        assert 0 < len(result) <= 3

    def test_pyramidal_layers(self, settings):
        result = SectionSolver(settings).solve(make_section(req_bot=25.0), RebarFace.BOTTOM)

        assert any(a.layer_count == 2 for a in result)
        for arr in result:
            layers = list(arr.bars_per_layer)
            assert layers == sorted(layers, reverse=True)
            assert all(n >= 2 for n in layers[1:])
            assert arr.layer_count <= settings.max_layers


class TestMixedDiameters:
    """Two-diameter layouts."""

    def test_mixed_layouts_generated(self):
        settings = SolverSettings(allowed_diameters=[20, 22], allow_mixed_diameters=True)
        result = SectionSolver(settings).solve(make_section(usable_width=300.0, req_bot=12.0),
                                               RebarFace.BOTTOM)

        mixed = [a for a in result if not a.is_single_diameter]
        assert mixed
        for arr in mixed:
            assert set(arr.bar_diameters) == {20, 22}
            assert arr.primary_diameter == 22
            assert 12.0 <= arr.total_area <= 18.0
            assert arr.layer_count == 1

    def test_spacing_governed_by_larger_diameter(self):
        # s_min is 44 mm for D22 and 40 mm for D20; 2D22+2D20 needs 216 mm
        # with the larger gap but only 210 mm with the averaged one
        settings = SolverSettings(
            allowed_diameters=[20, 22],
            allow_mixed_diameters=True,
            bar_diameter_spacing_multiplier=2.0,
        )
        solver = SectionSolver(settings)

        narrow = solver.solve(make_section(usable_width=212.0, req_bot=12.0), RebarFace.BOTTOM)
        assert narrow
        assert all(a.is_single_diameter for a in narrow)

        exact = solver.solve(make_section(usable_width=216.0, req_bot=12.0), RebarFace.BOTTOM)
        mixed = [a.to_display_string() for a in exact if not a.is_single_diameter]
        assert mixed == ["2D22+2D20"]

    def test_area_window_upper_bound(self):
        # Smallest mixed layout 2D22+2D20 provides 13.9 cm², above 1.5 x 8
        settings = SolverSettings(allowed_diameters=[20, 22], allow_mixed_diameters=True)
        result = SectionSolver(settings).solve(make_section(usable_width=300.0, req_bot=8.0),
                                               RebarFace.BOTTOM)
        assert result
        assert all(a.is_single_diameter for a in result)

    def test_sparse_mixed_layout_rejected(self):
        # In 800 mm, 2D22+2D20 leaves 238.7 mm gaps and 3D22+2D20 leaves 173.5 mm
        settings = SolverSettings(allowed_diameters=[20, 22], allow_mixed_diameters=True)
        result = SectionSolver(settings).solve(make_section(usable_width=800.0, req_bot=12.0),
                                               RebarFace.BOTTOM)

        mixed = [a for a in result if not a.is_single_diameter]
        assert mixed
        for arr in mixed:
            assert arr.clear_spacing <= settings.max_clear_spacing + settings.limits.spacing_tolerance
            assert arr.total_count != 4
        assert [a.to_display_string() for a in mixed] == ["3D22+2D20"]

    def test_mixed_disabled(self):
        settings = SolverSettings(allowed_diameters=[20, 22])
        result = SectionSolver(settings).solve(make_section(usable_width=300.0, req_bot=12.0),
                                               RebarFace.BOTTOM)
        assert all(a.is_single_diameter for a in result)


class TestSearchLimits:
    """Enumeration bounds from SearchLimits and the area ceiling."""

    @staticmethod
    def counts(result):
        return sorted({a.total_count for a in result})

    def test_max_extra_counts(self):
        section = make_section(usable_width=600.0, req_bot=10.0)

        # 5D16 is the minimum; the ceiling 16.5 cm² allows up to 8D16
        default = SectionSolver(SolverSettings(allowed_diameters=[16])).solve(section, RebarFace.BOTTOM)
        assert self.counts(default) == [5, 6, 7, 8]

        limited = SolverSettings(allowed_diameters=[16], limits={"max_extra_counts": 1})
        result = SectionSolver(limited).solve(section, RebarFace.BOTTOM)
        assert self.counts(result) == [5, 6]

    def test_minimum_count_kept_above_ceiling(self):
        settings = SolverSettings(allowed_diameters=[25])
        result = SectionSolver(settings).solve(make_section(usable_width=200.0, req_bot=3.0),
                                               RebarFace.BOTTOM)

        assert len(result) == 1
        assert result[0].to_display_string() == "2D25"
        assert result[0].bars_per_layer == (2,)
        assert not result[0].is_fallback
        assert result[0].total_area > settings.area_ceiling(3.0)

    def test_enumeration_result_cap(self):
        section = make_section(req_bot=8.0)

        default = SectionSolver(SolverSettings()).solve(section, RebarFace.BOTTOM)
        assert len({a.primary_diameter for a in default}) > 1

        capped = SolverSettings(limits={"enumeration_result_cap": 1})
        result = SectionSolver(capped).solve(section, RebarFace.BOTTOM)
        # The largest diameter is enumerated first, then the cap stops the search
        assert result
        assert {a.primary_diameter for a in result} == {25}

    def test_max_layer_partitions(self):
        section = make_section(req_bot=25.0)

        default = SectionSolver(SolverSettings(max_arrangements=100)).solve(section, RebarFace.BOTTOM)
        six_d25 = sorted(a.bars_per_layer for a in default
                         if a.primary_diameter == 25 and a.total_count == 6)
        assert six_d25 == [(3, 3), (4, 2)]

        limited = SolverSettings(max_arrangements=100, limits={"max_layer_partitions": 1})
        result = SectionSolver(limited).solve(section, RebarFace.BOTTOM)
        keys = [(a.primary_diameter, a.total_count) for a in result]
        assert len(keys) == len(set(keys))
        six_d25 = [a.bars_per_layer for a in result
                   if a.primary_diameter == 25 and a.total_count == 6]
        assert six_d25 == [(4, 2)]


class TestSolverInterface:
    """Preconditions, configuration snapshot and batch solving."""

    def test_missing_inputs(self, settings):
        with pytest.raises(ValueError):
            SectionSolver(None)
        with pytest.raises(ValueError):
            SectionSolver(settings).solve(None, RebarFace.TOP)

    def test_face_strings(self, settings):
        solver = SectionSolver(settings)
        section = make_section(req_bot=8.0)
        assert signature(solver.solve(section, "bot")) == signature(solver.solve(section, RebarFace.BOTTOM))
        with pytest.raises(ValueError):
            solver.solve(section, "side")

    def test_settings_snapshot(self):
        settings = SolverSettings()
        solver = SectionSolver(settings)
        settings.max_layers = 5
        settings.weights.waste_ratio_weight = 0.0
        assert solver.settings.max_layers == 2
        assert solver.settings.weights.waste_ratio_weight == 30.0

    def test_solve_all(self, settings):
        good = make_section(req_top=3.0, req_bot=8.0, section_id="S1")
        bad = make_section(usable_width=-20.0, req_top=5.0, req_bot=5.0, section_id="S2")

        report = SectionSolver(settings, diagnostics=RecordingDiagnostics()).solve_all([good, bad])

        assert report.solved == 2
        assert len(report.failures) == 2
        assert not report.success
        assert report.failed_sections() == ["S2"]
        assert good.valid_arrangements_top
        assert good.valid_arrangements_bot
        assert bad.valid_arrangements_bot == []


class TestArrangementScorer:
    """Test cases for ArrangementScorer."""

    def test_reference_score(self, settings):
        arr = BarArrangement.single_diameter([3], 16, usable_width=300, required_area=4.5)
        efficiency = 3 * bar_area(16) / 4.5
        # over-provision, single-diameter bonus, fewer-bars bonus (6 - 3)
        expected = 100 - (efficiency - 1) * 30 + 3 + 3
        assert ArrangementScorer(settings).score(arr) == pytest.approx(expected)

    def test_sparse_spacing_penalty(self, settings):
        arr = BarArrangement.single_diameter([2], 16, usable_width=300, required_area=3.0)
        assert ArrangementScorer(settings).breakdown(arr)['spacing'] == -15.0

    def test_density_bonus(self, settings):
        # 4D16 in 300 mm: 78.7 mm gap, denser half of [30, 200]
        arr = BarArrangement.single_diameter([4], 16, usable_width=300, required_area=7.0)
        bonus = ArrangementScorer(settings).breakdown(arr)['spacing']
        assert bonus == pytest.approx(10 * (115 - (300 - 64) / 3) / 85)

    def test_extra_layer_penalty(self, settings):
        arr = BarArrangement.single_diameter([3, 2], 20, usable_width=230, required_area=15.0)
        assert ArrangementScorer(settings).breakdown(arr)['layers'] == -10.0

    def test_clamped(self, settings):
        scorer = ArrangementScorer(settings)
        oversized = BarArrangement.single_diameter([10], 25, usable_width=1000, required_area=1.0)
        assert scorer.score(oversized) == 0.0
        assert scorer.score(BarArrangement.empty()) == 100.0

    def test_preferred_diameter_bonus(self):
        settings = SolverSettings(preferred_diameter=20)
        arr = BarArrangement.single_diameter([3], 20, usable_width=230, required_area=9.0)
        assert ArrangementScorer(settings).breakdown(arr)['preference'] == pytest.approx(3 + 3 + 5)
