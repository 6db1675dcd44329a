"""Layout and waste accounting for the last, partially used sheet."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ..results import PartialSheetDetails
from ..value_objects import SheetSpec
from .nesting_search import format_dimension

logger = logging.getLogger(__name__)

__all__ = [
    "LINEAR_FOOT_IN",
    "USABLE_WASTE_MIN_WIDTH_IN",
    "PartialSheetCalculator",
    "PartialSheetSplit",
    "is_usable_waste",
]

# Partial sheets are charged in whole linear feet of sheet height.
LINEAR_FOOT_IN = 12.0

# Leftover strips at least this wide can be resold as stock.
USABLE_WASTE_MIN_WIDTH_IN = 24.0


def is_usable_waste(waste_width: float, waste_height: float) -> bool:
    """Whether a leftover strip is resellable. Reporting only, never priced."""
    return waste_width >= USABLE_WASTE_MIN_WIDTH_IN and waste_height > 0


@dataclass(frozen=True)
class PartialSheetSplit:
    """Normal/rotated split of the remaining pieces and the height it uses.

    Attributes:
        normal_pieces: Pieces in the as-ordered orientation.
        rotated_pieces: Pieces turned 90 degrees.
        height: Combined band height in inches.
        pattern: Human-readable summary.
    """

    normal_pieces: int
    rotated_pieces: int
    height: float
    pattern: str


class PartialSheetCalculator:
    """Finds the shortest two-band layout for pieces left after full sheets.

    Unlike the full-sheet search, which maximizes pieces per sheet, this
    minimizes the height consumed so the billed footprint is as small as
    possible. Callers pass the sheet orientation the full-sheet pattern was
    found on; the configured orientation is the default.

    Attributes:
        sheet: Sheet stock the pieces are cut from.
    """

    def __init__(self, sheet: SheetSpec) -> None:
        self.sheet = sheet

    def find_best_split(
        self,
        piece_width: float,
        piece_height: float,
        remaining: int,
        sheet_width: float | None = None,
        sheet_height: float | None = None,
    ) -> PartialSheetSplit | None:
        """Search every normal/rotated split of the remaining pieces.

        Args:
            piece_width: Piece width as ordered.
            piece_height: Piece height as ordered.
            remaining: Pieces to place (at least one).
            sheet_width: Sheet width to use (defaults to the configured sheet).
            sheet_height: Sheet height to use (defaults to the configured sheet).

        Returns:
            The split with the smallest height that fits on the sheet, or
            None if no split fits.
        """
        sheet_w = self.sheet.width if sheet_width is None else sheet_width
        sheet_h = self.sheet.height if sheet_height is None else sheet_height

        per_row_normal = math.floor(sheet_w / piece_width)
        per_row_rotated = math.floor(sheet_w / piece_height)

        best: PartialSheetSplit | None = None
        min_height = math.inf

        if per_row_normal > 0:
            height = math.ceil(remaining / per_row_normal) * piece_height
            if height <= sheet_h and height < min_height:
                min_height = height
                best = PartialSheetSplit(
                    normal_pieces=remaining,
                    rotated_pieces=0,
                    height=height,
                    pattern=f"{remaining} normal ({self._label(piece_width, piece_height)})",
                )

        if per_row_rotated > 0:
            height = math.ceil(remaining / per_row_rotated) * piece_width
            if height <= sheet_h and height < min_height:
                min_height = height
                best = PartialSheetSplit(
                    normal_pieces=0,
                    rotated_pieces=remaining,
                    height=height,
                    pattern=f"{remaining} rotated ({self._label(piece_height, piece_width)})",
                )

        if per_row_normal > 0 and per_row_rotated > 0 and piece_width != piece_height:
            for normal_count in range(remaining + 1):
                normal_height = math.ceil(normal_count / per_row_normal) * piece_height
                # Band height only grows with normal_count.
                if normal_height >= min_height:
                    break

                rotated_count = remaining - normal_count
                rotated_height = math.ceil(rotated_count / per_row_rotated) * piece_width
                total_height = normal_height + rotated_height

                if total_height <= sheet_h and total_height < min_height:
                    min_height = total_height
                    best = PartialSheetSplit(
                        normal_pieces=normal_count,
                        rotated_pieces=rotated_count,
                        height=total_height,
                        pattern=self._split_label(normal_count, rotated_count),
                    )

        return best

    def calculate(
        self,
        piece_width: float,
        piece_height: float,
        remaining: int,
        price_per_piece: float,
        sheet_width: float | None = None,
        sheet_height: float | None = None,
    ) -> PartialSheetDetails | None:
        """Layout, charged area and waste for the partial sheet.

        Args:
            piece_width: Piece width as ordered.
            piece_height: Piece height as ordered.
            remaining: Pieces left after full sheets (at least one).
            price_per_piece: Final per-piece price used to cost the sheet.
            sheet_width: Sheet width to use (defaults to the configured sheet).
            sheet_height: Sheet height to use (defaults to the configured sheet).

        Returns:
            Partial sheet details, or None if the pieces cannot be nested.
        """
        sheet_w = self.sheet.width if sheet_width is None else sheet_width
        sheet_h = self.sheet.height if sheet_height is None else sheet_height

        split = self.find_best_split(piece_width, piece_height, remaining, sheet_w, sheet_h)
        if split is None:
            return None

        rounded_height = math.ceil(split.height / LINEAR_FOOT_IN) * LINEAR_FOOT_IN
        charge_width = sheet_w
        waste_width = sheet_w
        waste_height = sheet_h - rounded_height

        logger.debug(
            "Partial sheet: %s, %.2f\" high rounded to %.0f\"",
            split.pattern,
            split.height,
            rounded_height,
        )

        return PartialSheetDetails(
            pieces=remaining,
            normal_pieces=split.normal_pieces,
            rotated_pieces=split.rotated_pieces,
            pattern=split.pattern,
            bounding_width=charge_width,
            bounding_height=split.height,
            rounded_height=rounded_height,
            charge_width=charge_width,
            charge_height=rounded_height,
            material_used_sqft=charge_width * rounded_height / 144,
            waste_width=waste_width,
            waste_height=waste_height,
            waste_sqft=waste_width * waste_height / 144,
            usable_waste=is_usable_waste(waste_width, waste_height),
            cost=price_per_piece * remaining,
            cost_per_piece=price_per_piece,
        )

    @staticmethod
    def _label(width: float, height: float) -> str:
        return f"{format_dimension(width)}x{format_dimension(height)}"

    @staticmethod
    def _split_label(normal_count: int, rotated_count: int) -> str:
        if normal_count > 0 and rotated_count > 0:
            return f"{normal_count} normal + {rotated_count} rotated"
        if normal_count > 0:
            return f"{normal_count} normal"
        return f"{rotated_count} rotated"
