"""Result types produced by the nesting and pricing engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .value_objects import OversizeDimensionRule, SheetSpec


class NestingErrorKind(str, Enum):
    """Terminal failure categories for a pricing call.

    - OVERSIZED: the piece exceeds the sheet in both orientations.
    - CANNOT_NEST: the piece fits nominally but the configured policy
      leaves no usable capacity.
    """

    OVERSIZED = "oversized"
    CANNOT_NEST = "cannot_nest"


@dataclass(frozen=True)
class NestingPattern:
    """One candidate arrangement of pieces on a sheet.

    Attributes:
        orientation: "WxH" for a straight grid, or "mixed" for two bands.
        total_pieces: Pieces that fit on one sheet.
        cost_per_piece: Sheet cost divided by total_pieces.
        efficiency: Percentage of sheet area covered, rounded to an integer.
        description: Human-readable summary of the layout.
        pieces_wide: Columns for a straight grid, None for mixed layouts.
        pieces_high: Rows for a straight grid, None for mixed layouts.
        sheet_width: Width of the sheet orientation the pattern was found on.
        sheet_height: Height of the sheet orientation the pattern was found on.
    """

    orientation: str
    total_pieces: int
    cost_per_piece: float
    efficiency: int
    description: str
    pieces_wide: int | None = None
    pieces_high: int | None = None
    sheet_width: float | None = None
    sheet_height: float | None = None

    @property
    def is_mixed(self) -> bool:
        """Whether the pattern combines normal and rotated pieces."""
        return self.orientation == "mixed"


@dataclass(frozen=True)
class PartialSheetDetails:
    """Layout and waste of the last, partially used sheet.

    Width is always charged as the full sheet width; height is rounded up to
    the next linear foot.

    Attributes:
        pieces: Pieces placed on the partial sheet.
        normal_pieces: Pieces in the as-ordered orientation.
        rotated_pieces: Pieces turned 90 degrees.
        pattern: Human-readable summary of the split.
        bounding_width: Width of the charged bounding box in inches.
        bounding_height: Exact height consumed by the pieces in inches.
        rounded_height: bounding_height rounded up to a multiple of 12.
        charge_width: Width charged for in inches.
        charge_height: Height charged for in inches.
        material_used_sqft: Charged area in square feet.
        waste_width: Width of the leftover strip in inches.
        waste_height: Height of the leftover strip in inches.
        waste_sqft: Leftover area in square feet.
        usable_waste: True if the leftover strip is resellable stock.
        cost: Price attributed to the pieces on this sheet.
        cost_per_piece: Price per piece on this sheet.
    """

    pieces: int
    normal_pieces: int
    rotated_pieces: int
    pattern: str
    bounding_width: float
    bounding_height: float
    rounded_height: float
    charge_width: float
    charge_height: float
    material_used_sqft: float
    waste_width: float
    waste_height: float
    waste_sqft: float
    usable_waste: bool
    cost: float
    cost_per_piece: float


@dataclass(frozen=True)
class NestingResult:
    """Successful price breakdown for one request.

    Every intermediate figure is kept because the breakdown is shown to
    customers, not only the final price.
    """

    piece_width: float
    piece_height: float
    sheet_width: float
    sheet_height: float
    quantity: int
    max_pieces_per_sheet: int
    nesting_pattern: str
    orientation: str
    raw_sheets_used: float
    billable_sheets: float
    effective_sheet_cost: float
    sheets_needed: int
    full_sheets: int
    full_sheets_cost: float
    remaining_pieces: int
    partial_sheet_details: PartialSheetDetails | None
    total_price: float
    average_cost_per_piece: float
    min_price_applied: bool = False
    applied_oversize_rules: tuple[OversizeDimensionRule, ...] = field(
        default_factory=tuple
    )

    @property
    def is_error(self) -> bool:
        """Always False; mirrors NestingFailure.is_error."""
        return False


@dataclass(frozen=True)
class NestingFailure:
    """Terminal error result for one request.

    Attributes:
        kind: Machine-readable failure category.
        message: Message suitable for display to the customer or admin.
    """

    kind: NestingErrorKind
    message: str

    @property
    def is_error(self) -> bool:
        """Always True."""
        return True


@dataclass(frozen=True)
class PieceSummary:
    """Piece dimensions and area for an analysis report."""

    width: float
    height: float

    @property
    def sqft(self) -> float:
        """Piece area in square feet."""
        return self.width * self.height / 144


@dataclass(frozen=True)
class NestingAnalysis:
    """Best pattern for a piece together with every ranked alternative.

    Attributes:
        sheet: The sheet analysed.
        piece: The piece analysed.
        best_option: Highest ranked pattern.
        all_options: All candidate patterns, best first.
        waste_cost: Portion of the sheet cost not covered by placed pieces.
    """

    sheet: SheetSpec
    piece: PieceSummary
    best_option: NestingPattern
    all_options: tuple[NestingPattern, ...]
    waste_cost: float


@dataclass(frozen=True)
class TraceEvent:
    """Diagnostic event emitted by the calculator to an optional trace hook.

    Attributes:
        stage: Pipeline stage name (e.g. "pattern", "charging", "pricing").
        data: Stage-specific values.
    """

    stage: str
    data: dict[str, Any] = field(default_factory=dict)
