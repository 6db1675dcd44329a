"""Tests for the straight-grid and two-band nesting search.

Tests cover:
- Grid fit counting, labels and efficiency
- Orientation preference between the two straight grids
- Two-band layouts beating both straight grids
- Ranking and sheet-orientation invariance
"""

from __future__ import annotations

import pytest

from sheetnest.domain import NestingPatternSearch, SheetSpec
from sheetnest.domain.services import rank_patterns, round_half_up
from sheetnest.domain.results import NestingPattern


@pytest.fixture
def search(standard_sheet: SheetSpec) -> NestingPatternSearch:
    return NestingPatternSearch(standard_sheet)


# =============================================================================
# Helpers
# =============================================================================


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (99.5, 100), (0.0, 0)],
    )
    def test_halves_round_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestRankPatterns:
    def _pattern(self, total: int, efficiency: int, description: str) -> NestingPattern:
        return NestingPattern(
            orientation="1x1",
            total_pieces=total,
            cost_per_piece=1.0,
            efficiency=efficiency,
            description=description,
        )

    def test_more_pieces_first(self) -> None:
        ranked = rank_patterns([self._pattern(10, 50, "a"), self._pattern(12, 40, "b")])
        assert [p.description for p in ranked] == ["b", "a"]

    def test_efficiency_breaks_ties(self) -> None:
        ranked = rank_patterns([self._pattern(10, 40, "a"), self._pattern(10, 60, "b")])
        assert ranked[0].description == "b"

    def test_exact_tie_keeps_generation_order(self) -> None:
        ranked = rank_patterns([self._pattern(10, 50, "first"), self._pattern(10, 50, "second")])
        assert ranked[0].description == "first"


# =============================================================================
# Grid fit
# =============================================================================


class TestGridFit:
    def test_square_pieces_fill_sheet(self, search: NestingPatternSearch) -> None:
        pattern = search.grid_fit(12.0, 12.0)

        assert pattern is not None
        assert pattern.total_pieces == 32
        assert pattern.pieces_wide == 4
        assert pattern.pieces_high == 8
        assert pattern.orientation == "12x12"
        assert pattern.description == "32 pieces (4 wide x 8 high)"
        assert pattern.efficiency == 100
        assert pattern.cost_per_piece == pytest.approx(50.0 / 32)

    def test_fractional_dimensions_labelled_compactly(
        self, search: NestingPatternSearch
    ) -> None:
        pattern = search.grid_fit(11.5, 8.0)

        assert pattern is not None
        assert pattern.orientation == "11.5x8"
        assert pattern.total_pieces == 4 * 12

    def test_no_fit_returns_none(self, search: NestingPatternSearch) -> None:
        assert search.grid_fit(50.0, 10.0) is None

    def test_explicit_sheet_dimensions(self, search: NestingPatternSearch) -> None:
        pattern = search.grid_fit(50.0, 10.0, sheet_width=96.0, sheet_height=48.0)

        assert pattern is not None
        assert pattern.total_pieces == 1 * 4
        assert pattern.sheet_width == 96.0


class TestFindOptimalOrientation:
    def test_rotated_grid_wins_when_larger(self, search: NestingPatternSearch) -> None:
        # 10x14 as ordered gives 4x6=24, turned gives 3x9=27.
        pattern = search.find_optimal_orientation(10.0, 14.0)

        assert pattern is not None
        assert pattern.total_pieces == 27
        assert pattern.orientation == "14x10"

    def test_normal_wins_tie(self, search: NestingPatternSearch) -> None:
        pattern = search.find_optimal_orientation(12.0, 12.0)

        assert pattern is not None
        assert pattern.orientation == "12x12"

    def test_only_rotated_fits(self, search: NestingPatternSearch) -> None:
        pattern = search.find_optimal_orientation(60.0, 20.0)

        assert pattern is not None
        assert pattern.orientation == "20x60"
        assert pattern.total_pieces == 2

    def test_nothing_fits(self, search: NestingPatternSearch) -> None:
        assert search.find_optimal_orientation(100.0, 100.0) is None


# =============================================================================
# Full search
# =============================================================================


class TestSearch:
    def test_two_band_layout_beats_grids(self, search: NestingPatternSearch) -> None:
        best = search.best_pattern(10.0, 14.0)

        assert best is not None
        assert best.total_pieces == 30
        assert best.is_mixed
        assert best.description == "18 vertical (10x14) + 12 horizontal (14x10)"
        assert best.efficiency == 91

    def test_results_ranked_best_first(self, search: NestingPatternSearch) -> None:
        patterns = search.search(10.0, 14.0)
        totals = [p.total_pieces for p in patterns]

        assert totals == sorted(totals, reverse=True)

    def test_square_piece_prefers_grid(self, search: NestingPatternSearch) -> None:
        best = search.best_pattern(12.0, 12.0)

        assert best is not None
        assert best.description == "32 pieces (4 wide x 8 high)"
        assert not best.is_mixed

    def test_rotated_first_band_description(self, search: NestingPatternSearch) -> None:
        descriptions = [p.description for p in search.search(10.0, 14.0)]

        assert any(d.startswith("12 horizontal (14x10) + ") for d in descriptions)

    def test_two_band_search_stops_when_second_band_cannot_fit(
        self, search: NestingPatternSearch
    ) -> None:
        # Six 14" rows of four leave 12" for one 10" rotated row; a seventh does not.
        patterns = list(search._two_band_patterns(10.0, 14.0, 48.0, 96.0, rotated_first=False))

        assert len(patterns) == 25
        assert patterns[-1].description == "24 vertical (10x14) + 3 horizontal (14x10)"

    def test_piece_too_large_gives_empty(self, search: NestingPatternSearch) -> None:
        assert search.search(100.0, 100.0) == []
        assert search.best_pattern(100.0, 100.0) is None

    @pytest.mark.parametrize(
        ("width", "height"),
        [(10.0, 14.0), (12.0, 12.0), (7.5, 22.0), (30.0, 20.0), (60.0, 20.0)],
    )
    def test_sheet_orientation_invariance(self, width: float, height: float) -> None:
        tall = NestingPatternSearch(SheetSpec(width=48.0, height=96.0, cost=50.0))
        wide = NestingPatternSearch(SheetSpec(width=96.0, height=48.0, cost=50.0))

        tall_best = tall.best_pattern(width, height)
        wide_best = wide.best_pattern(width, height)

        assert tall_best is not None and wide_best is not None
        assert tall_best.total_pieces == wide_best.total_pieces

    @pytest.mark.parametrize(("width", "height"), [(10.0, 14.0), (7.5, 22.0), (30.0, 20.0)])
    def test_piece_orientation_invariance(
        self, search: NestingPatternSearch, width: float, height: float
    ) -> None:
        normal = search.best_pattern(width, height)
        turned = search.best_pattern(height, width)

        assert normal is not None and turned is not None
        assert normal.total_pieces == turned.total_pieces
