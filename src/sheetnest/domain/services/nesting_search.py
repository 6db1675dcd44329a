"""Straight-grid and two-band nesting search.

Pieces are laid out in horizontal bands (shelves) that span the full sheet
width. A sheet holds either a single grid of identically oriented pieces or
two stacked bands, one of normally oriented pieces and one of rotated
pieces. Every layout produced here can be cut with straight edge-to-edge
passes.
"""

from __future__ import annotations

import math
from typing import Iterator

from ..results import NestingPattern
from ..value_objects import SheetSpec

__all__ = [
    "NestingPatternSearch",
    "format_dimension",
    "rank_patterns",
    "round_half_up",
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def format_dimension(value: float) -> str:
    """Format an inch dimension without a trailing '.0'."""
    return f"{value:g}"


def rank_patterns(patterns: list[NestingPattern]) -> list[NestingPattern]:
    """Order patterns by total pieces, then efficiency, best first.

    The sort is stable, so the first generated pattern wins an exact tie.
    """
    return sorted(patterns, key=lambda p: (-p.total_pieces, -p.efficiency))


class NestingPatternSearch:
    """Finds the arrangement that fits the most pieces on a sheet.

    Attributes:
        sheet: Sheet stock being searched.
    """

    def __init__(self, sheet: SheetSpec) -> None:
        self.sheet = sheet

    def grid_fit(
        self,
        piece_width: float,
        piece_height: float,
        sheet_width: float | None = None,
        sheet_height: float | None = None,
    ) -> NestingPattern | None:
        """Count pieces in a straight grid for one orientation pair.

        Args:
            piece_width: Piece width as placed.
            piece_height: Piece height as placed.
            sheet_width: Sheet width to use (defaults to the configured sheet).
            sheet_height: Sheet height to use (defaults to the configured sheet).

        Returns:
            The grid pattern, or None if not a single piece fits.
        """
        sheet_w = self.sheet.width if sheet_width is None else sheet_width
        sheet_h = self.sheet.height if sheet_height is None else sheet_height

        pieces_wide = math.floor(sheet_w / piece_width)
        pieces_high = math.floor(sheet_h / piece_height)
        total = pieces_wide * pieces_high

        if total == 0:
            return None

        return NestingPattern(
            orientation=f"{format_dimension(piece_width)}x{format_dimension(piece_height)}",
            total_pieces=total,
            cost_per_piece=self.sheet.cost / total,
            efficiency=self._efficiency(total, piece_width, piece_height),
            description=f"{total} pieces ({pieces_wide} wide x {pieces_high} high)",
            pieces_wide=pieces_wide,
            pieces_high=pieces_high,
            sheet_width=sheet_w,
            sheet_height=sheet_h,
        )

    def find_optimal_orientation(
        self, piece_width: float, piece_height: float
    ) -> NestingPattern | None:
        """Best straight grid on the sheet as configured.

        The as-ordered orientation wins a tie with the rotated one.
        """
        normal = self.grid_fit(piece_width, piece_height)
        rotated = self.grid_fit(piece_height, piece_width)

        if normal is None:
            return rotated
        if rotated is None:
            return normal
        return normal if normal.total_pieces >= rotated.total_pieces else rotated

    def search(self, piece_width: float, piece_height: float) -> list[NestingPattern]:
        """Evaluate every grid and two-band layout on both sheet orientations.

        Running the search on the sheet as given and with its sides swapped
        makes a 48x96 sheet and a 96x48 sheet produce the same ranking.

        Returns:
            All candidate patterns, best first. Empty if nothing fits.
        """
        patterns: list[NestingPattern] = []

        for sheet_w, sheet_h in (
            (self.sheet.width, self.sheet.height),
            (self.sheet.height, self.sheet.width),
        ):
            normal = self.grid_fit(piece_width, piece_height, sheet_w, sheet_h)
            rotated = self.grid_fit(piece_height, piece_width, sheet_w, sheet_h)

            if normal is not None:
                patterns.append(normal)
            if rotated is not None:
                patterns.append(rotated)

            if normal is not None and rotated is not None:
                patterns.extend(
                    self._two_band_patterns(
                        piece_width, piece_height, sheet_w, sheet_h, rotated_first=False
                    )
                )
                patterns.extend(
                    self._two_band_patterns(
                        piece_width, piece_height, sheet_w, sheet_h, rotated_first=True
                    )
                )

        return rank_patterns(patterns)

    def best_pattern(
        self, piece_width: float, piece_height: float
    ) -> NestingPattern | None:
        """Highest ranked pattern, or None if the piece does not fit."""
        patterns = self.search(piece_width, piece_height)
        return patterns[0] if patterns else None

    def _two_band_patterns(
        self,
        piece_width: float,
        piece_height: float,
        sheet_w: float,
        sheet_h: float,
        rotated_first: bool,
    ) -> Iterator[NestingPattern]:
        """Yield layouts with a first band of one orientation and a second of the other.

        The first band holds every count from zero upward and the second
        band fills whatever height remains. The loop stops at the first
        count that leaves no room for a second-band row.
        """
        if rotated_first:
            first_w, first_h = piece_height, piece_width
            second_w, second_h = piece_width, piece_height
        else:
            first_w, first_h = piece_width, piece_height
            second_w, second_h = piece_height, piece_width

        first_per_row = math.floor(sheet_w / first_w)
        first_max = first_per_row * math.floor(sheet_h / first_h)
        second_per_row = math.floor(sheet_w / second_w)

        for first_count in range(first_max + 1):
            rows = math.ceil(first_count / first_per_row)
            remaining_height = sheet_h - rows * first_h
            # Rows only grow with first_count.
            if remaining_height < second_h:
                break

            second_count = second_per_row * math.floor(remaining_height / second_h)
            if second_count == 0:
                continue

            total = first_count + second_count
            if rotated_first:
                description = (
                    f"{first_count} horizontal ({format_dimension(first_w)}x{format_dimension(first_h)})"
                    f" + {second_count} vertical ({format_dimension(second_w)}x{format_dimension(second_h)})"
                )
            else:
                description = (
                    f"{first_count} vertical ({format_dimension(first_w)}x{format_dimension(first_h)})"
                    f" + {second_count} horizontal ({format_dimension(second_w)}x{format_dimension(second_h)})"
                )

            yield NestingPattern(
                orientation="mixed",
                total_pieces=total,
                cost_per_piece=self.sheet.cost / total,
                efficiency=self._efficiency(total, piece_width, piece_height),
                description=description,
                sheet_width=sheet_w,
                sheet_height=sheet_h,
            )

    def _efficiency(self, total: int, piece_width: float, piece_height: float) -> int:
        return round_half_up(total * piece_width * piece_height / self.sheet.area * 100)
