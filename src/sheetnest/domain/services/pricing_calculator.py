"""Sheet nesting price calculator.

Combines the nesting search, oversize rules, charging policy, volume pricing
and partial-sheet accounting into a single price breakdown.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from ..results import (
    NestingAnalysis,
    NestingErrorKind,
    NestingFailure,
    NestingPattern,
    NestingResult,
    PartialSheetDetails,
    PieceSummary,
    TraceEvent,
)
from ..value_objects import (
    NestingRequest,
    SheetChargingPolicy,
    SheetSpec,
    VolumePricingTable,
)
from .charging_policy import SheetChargingService
from .nesting_search import NestingPatternSearch
from .partial_sheet import PartialSheetCalculator
from .volume_pricing import VolumePricingResolver

logger = logging.getLogger(__name__)

__all__ = [
    "CANNOT_NEST_CAPACITY_MESSAGE",
    "CANNOT_NEST_PARTIAL_MESSAGE",
    "NestingCalculator",
    "OVERSIZED_MESSAGE",
    "TraceHook",
]

OVERSIZED_MESSAGE = (
    "This size exceeds our standard media dimensions. "
    "Please contact us for a custom quote."
)
CANNOT_NEST_CAPACITY_MESSAGE = (
    "Piece dimensions are too large for the sheet size under the configured "
    "oversize rules."
)
CANNOT_NEST_PARTIAL_MESSAGE = "Unable to nest the remaining pieces on a sheet."

TraceHook = Callable[[TraceEvent], None]


class NestingCalculator:
    """Prices flat pieces cut from rectangular sheet stock.

    The calculator holds only immutable configuration, so one instance can
    serve any number of concurrent callers. Each call is a pure function of
    the piece size and quantity.

    Attributes:
        sheet: Sheet dimensions and base cost.
        min_price_per_item: Default per-piece price floor, if any.
        volume_pricing: Tiered per-sheet pricing, if any.
        charging_policy: Rounding, minimum and oversize policy.
        trace: Optional callback receiving a TraceEvent per pricing stage.
    """

    def __init__(
        self,
        sheet_width: float,
        sheet_height: float,
        sheet_cost: float,
        min_price_per_item: float | None = None,
        volume_pricing: VolumePricingTable | None = None,
        charging_policy: SheetChargingPolicy | None = None,
        trace: TraceHook | None = None,
    ) -> None:
        self.sheet = SheetSpec(width=sheet_width, height=sheet_height, cost=sheet_cost)
        self.min_price_per_item = min_price_per_item
        self.volume_pricing = volume_pricing
        self.charging_policy = charging_policy or SheetChargingPolicy()
        self.trace = trace

        self._search = NestingPatternSearch(self.sheet)
        self._charging = SheetChargingService(self.sheet, self.charging_policy)
        self._volume = VolumePricingResolver(self.sheet.cost, volume_pricing)
        self._partial = PartialSheetCalculator(self.sheet)

    @classmethod
    def from_sheet(
        cls,
        sheet: SheetSpec,
        min_price_per_item: float | None = None,
        volume_pricing: VolumePricingTable | None = None,
        charging_policy: SheetChargingPolicy | None = None,
        trace: TraceHook | None = None,
    ) -> NestingCalculator:
        """Create a calculator from an existing SheetSpec."""
        return cls(
            sheet.width,
            sheet.height,
            sheet.cost,
            min_price_per_item=min_price_per_item,
            volume_pricing=volume_pricing,
            charging_policy=charging_policy,
            trace=trace,
        )

    def get_price_per_sheet(self, sheet_count: int) -> float:
        """Per-sheet price after volume tiers for a whole sheet count."""
        return self._volume.price_per_sheet(sheet_count)

    def find_optimal_orientation(
        self, piece_width: float, piece_height: float
    ) -> NestingPattern | None:
        """Better of the two straight grids on the sheet as configured."""
        self._validate_piece(piece_width, piece_height)
        return self._search.find_optimal_orientation(piece_width, piece_height)

    def analyze(self, piece_width: float, piece_height: float) -> NestingAnalysis | None:
        """Rank every candidate layout for a piece.

        Returns:
            The best pattern with all alternatives, or None if the piece
            does not fit on the sheet at all.
        """
        self._validate_piece(piece_width, piece_height)
        patterns = self._search.search(piece_width, piece_height)
        if not patterns:
            return None

        best = patterns[0]
        used_area = best.total_pieces * piece_width * piece_height
        waste_cost = self.sheet.cost * (1 - used_area / self.sheet.area)

        return NestingAnalysis(
            sheet=self.sheet,
            piece=PieceSummary(width=piece_width, height=piece_height),
            best_option=best,
            all_options=tuple(patterns),
            waste_cost=waste_cost,
        )

    def calculate_pricing_with_waste(
        self,
        piece_width: float,
        piece_height: float,
        quantity: int,
    ) -> NestingResult | NestingFailure:
        """Price an order of identical pieces.

        Args:
            piece_width: Piece width in inches.
            piece_height: Piece height in inches.
            quantity: Number of pieces ordered.

        Returns:
            A full NestingResult, or a NestingFailure when the piece is
            oversized or cannot be nested under the configured policy.

        Raises:
            InvalidNestingRequestError: If a dimension or the quantity is
                not positive.
        """
        return self.price(NestingRequest(piece_width, piece_height, quantity))

    def price(self, request: NestingRequest) -> NestingResult | NestingFailure:
        """Price a NestingRequest.

        A min_price_per_item on the request overrides the calculator's
        default floor.
        """
        piece_width = request.piece_width
        piece_height = request.piece_height
        quantity = request.quantity

        if not self.sheet.fits(piece_width, piece_height):
            logger.info(
                "Piece %sx%s exceeds sheet %sx%s in both orientations",
                piece_width,
                piece_height,
                self.sheet.width,
                self.sheet.height,
            )
            return NestingFailure(kind=NestingErrorKind.OVERSIZED, message=OVERSIZED_MESSAGE)

        best_pattern = self._search.best_pattern(piece_width, piece_height)
        if best_pattern is None:
            return self._cannot_nest(CANNOT_NEST_CAPACITY_MESSAGE, piece_width, piece_height)
        self._emit(
            "pattern",
            description=best_pattern.description,
            total_pieces=best_pattern.total_pieces,
            efficiency=best_pattern.efficiency,
        )

        adjustment = self._charging.evaluate_oversize_rules(
            piece_width, piece_height, best_pattern.total_pieces
        )
        max_pieces = adjustment.max_pieces_per_sheet
        self._emit(
            "oversize",
            max_pieces_per_sheet=max_pieces,
            min_sheet_fraction=adjustment.min_sheet_fraction,
            applied_rules=len(adjustment.applied_rules),
        )

        logger.debug(
            "Piece %sx%s on sheet %sx%s: max %d pieces, pattern %s, sheet cost %.2f",
            piece_width,
            piece_height,
            self.sheet.width,
            self.sheet.height,
            max_pieces,
            best_pattern.description,
            self.sheet.cost,
        )

        if max_pieces == 0:
            return self._cannot_nest(CANNOT_NEST_CAPACITY_MESSAGE, piece_width, piece_height)

        raw_sheets_used = quantity / max_pieces
        billable_sheets = self._charging.apply(raw_sheets_used, adjustment.min_sheet_fraction)

        effective_count = VolumePricingResolver.effective_sheet_count(billable_sheets)
        effective_sheet_cost = self._volume.price_per_sheet(effective_count)
        self._emit(
            "charging",
            raw_sheets_used=raw_sheets_used,
            billable_sheets=billable_sheets,
            effective_sheet_count=effective_count,
            effective_sheet_cost=effective_sheet_cost,
        )

        logger.debug(
            "Raw sheets %.4f, billable %.4f, effective count %d, "
            "base cost %.2f, volume-adjusted %.2f",
            raw_sheets_used,
            billable_sheets,
            effective_count,
            self.sheet.cost,
            effective_sheet_cost,
        )

        price_per_piece = effective_sheet_cost * billable_sheets / quantity
        floor = (
            request.min_price_per_item
            if request.min_price_per_item is not None
            else self.min_price_per_item
        )
        min_price_applied = False
        if floor and price_per_piece < floor:
            logger.debug("Applying minimum price: %.2f -> %.2f", price_per_piece, floor)
            price_per_piece = floor
            min_price_applied = True

        total_price = price_per_piece * quantity
        self._emit(
            "pricing",
            price_per_piece=price_per_piece,
            total_price=total_price,
            min_price_applied=min_price_applied,
        )

        full_sheets, remaining = divmod(quantity, max_pieces)
        partial = None
        if remaining > 0:
            partial = self._partial_sheet(
                best_pattern, piece_width, piece_height, remaining, price_per_piece
            )
            if partial is None:
                return self._cannot_nest(CANNOT_NEST_PARTIAL_MESSAGE, piece_width, piece_height)
            self._emit(
                "partial_sheet",
                pattern=partial.pattern,
                rounded_height=partial.rounded_height,
                usable_waste=partial.usable_waste,
            )

        return NestingResult(
            piece_width=piece_width,
            piece_height=piece_height,
            sheet_width=self.sheet.width,
            sheet_height=self.sheet.height,
            quantity=quantity,
            max_pieces_per_sheet=max_pieces,
            nesting_pattern=best_pattern.description,
            orientation=best_pattern.orientation,
            raw_sheets_used=raw_sheets_used,
            billable_sheets=billable_sheets,
            effective_sheet_cost=effective_sheet_cost,
            sheets_needed=math.ceil(quantity / max_pieces),
            full_sheets=full_sheets,
            full_sheets_cost=full_sheets * self.sheet.cost,
            remaining_pieces=remaining,
            partial_sheet_details=partial,
            total_price=total_price,
            average_cost_per_piece=price_per_piece,
            min_price_applied=min_price_applied,
            applied_oversize_rules=adjustment.applied_rules,
        )

    def _partial_sheet(
        self,
        pattern: NestingPattern,
        piece_width: float,
        piece_height: float,
        remaining: int,
        price_per_piece: float,
    ) -> PartialSheetDetails | None:
        """Lay out the remainder on the orientation the best pattern used.

        The other orientation is tried only when the remainder does not fit,
        which can happen when an oversize rule set the sheet capacity.
        """
        sheet_w = pattern.sheet_width if pattern.sheet_width is not None else self.sheet.width
        sheet_h = pattern.sheet_height if pattern.sheet_height is not None else self.sheet.height

        for width, height in ((sheet_w, sheet_h), (sheet_h, sheet_w)):
            partial = self._partial.calculate(
                piece_width, piece_height, remaining, price_per_piece, width, height
            )
            if partial is not None:
                return partial
        return None

    @staticmethod
    def _validate_piece(piece_width: float, piece_height: float) -> None:
        """Raise InvalidNestingRequestError for a non-positive dimension."""
        NestingRequest(piece_width, piece_height, 1)

    def _cannot_nest(
        self, message: str, piece_width: float, piece_height: float
    ) -> NestingFailure:
        logger.warning(
            "Cannot nest %sx%s on sheet %sx%s: %s",
            piece_width,
            piece_height,
            self.sheet.width,
            self.sheet.height,
            message,
        )
        return NestingFailure(kind=NestingErrorKind.CANNOT_NEST, message=message)

    def _emit(self, stage: str, **data: object) -> None:
        if self.trace is not None:
            self.trace(TraceEvent(stage=stage, data=data))
