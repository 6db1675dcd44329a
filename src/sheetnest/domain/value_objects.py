"""Policy model value objects for sheet nesting and pricing.

All dataclasses are frozen (immutable) so a configured calculator can be
shared freely between callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


class InvalidNestingRequestError(ValueError):
    """Raised when a quote request violates its preconditions."""


class RoundingMode(str, Enum):
    """How raw fractional sheet usage is rounded before billing."""

    EXACT = "exact"
    QUARTER = "quarter"
    HALF = "half"
    FULL = "full"


class OversizeAxis(str, Enum):
    """Piece dimension an oversize rule inspects."""

    WIDTH = "width"
    HEIGHT = "height"
    ANY = "any"


class OversizeBehavior(str, Enum):
    """What happens when a piece dimension exceeds a rule threshold.

    - USE_FULL_SHEET_AXIS: the matched axis consumes the whole sheet axis,
      so at most one piece fits along it.
    - BUMP_SHEET_FRACTION: raise the minimum billable sheet fraction.
    """

    USE_FULL_SHEET_AXIS = "use_full_sheet_axis"
    BUMP_SHEET_FRACTION = "bump_sheet_fraction"


@dataclass(frozen=True)
class SheetSpec:
    """Sheet stock dimensions and cost.

    Standard sheet sizes:
    - 4'x8' (48"x96") - most common rigid substrate
    - 2'x4' (24"x48") - half sheet

    Attributes:
        width: Sheet width in inches.
        height: Sheet height in inches.
        cost: Cost per sheet.
    """

    width: float = 48.0
    height: float = 96.0
    cost: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("Sheet width must be positive")
        if self.height <= 0:
            raise ValueError("Sheet height must be positive")
        if self.cost < 0:
            raise ValueError("Sheet cost must be non-negative")

    @property
    def area(self) -> float:
        """Sheet area in square inches."""
        return self.width * self.height

    @property
    def sqft(self) -> float:
        """Sheet area in square feet."""
        return self.area / 144

    @property
    def cost_per_sqft(self) -> float:
        """Sheet cost spread over its area."""
        return self.cost / self.sqft

    def rotated(self) -> SheetSpec:
        """The same sheet turned 90 degrees."""
        return SheetSpec(width=self.height, height=self.width, cost=self.cost)

    def fits(self, piece_width: float, piece_height: float) -> bool:
        """Whether a piece fits on this sheet in either orientation."""
        fits_normal = piece_width <= self.width and piece_height <= self.height
        fits_rotated = piece_height <= self.width and piece_width <= self.height
        return fits_normal or fits_rotated


@dataclass(frozen=True)
class OversizeDimensionRule:
    """Policy applied when a piece dimension exceeds a threshold.

    Attributes:
        threshold_in: Dimension in inches that must be exceeded to trigger.
        axis: Which piece dimension is compared against the threshold.
        behavior: Effect of the rule when triggered.
        target_sheet_fraction: Minimum sheet fraction for BUMP_SHEET_FRACTION.
    """

    threshold_in: float
    axis: OversizeAxis = OversizeAxis.ANY
    behavior: OversizeBehavior = OversizeBehavior.USE_FULL_SHEET_AXIS
    target_sheet_fraction: float | None = None

    def __post_init__(self) -> None:
        if self.threshold_in < 0:
            raise ValueError("Oversize threshold must be non-negative")
        if self.behavior == OversizeBehavior.BUMP_SHEET_FRACTION:
            if self.target_sheet_fraction is None:
                raise ValueError(
                    "target_sheet_fraction is required for bump_sheet_fraction rules"
                )
            if not 0 < self.target_sheet_fraction <= 1:
                raise ValueError("target_sheet_fraction must be in (0, 1]")
        elif self.target_sheet_fraction is not None:
            raise ValueError(
                "target_sheet_fraction only applies to bump_sheet_fraction rules"
            )

    def dimension_for(self, piece_width: float, piece_height: float) -> float:
        """Piece dimension this rule compares against its threshold."""
        if self.axis == OversizeAxis.WIDTH:
            return piece_width
        if self.axis == OversizeAxis.HEIGHT:
            return piece_height
        return max(piece_width, piece_height)

    def triggers(self, piece_width: float, piece_height: float) -> bool:
        """Whether the piece strictly exceeds the threshold."""
        return self.dimension_for(piece_width, piece_height) > self.threshold_in


@dataclass(frozen=True)
class SheetChargingPolicy:
    """Converts raw sheet usage into billable sheets.

    Attributes:
        rounding_mode: Rounding applied to raw fractional usage.
        min_sheet_fraction: Floor on billable sheets for any order.
        oversize_rules: Rules applied in order; effects are cumulative.
    """

    rounding_mode: RoundingMode = RoundingMode.EXACT
    min_sheet_fraction: float = 0.0
    oversize_rules: tuple[OversizeDimensionRule, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not 0 <= self.min_sheet_fraction <= 1:
            raise ValueError("min_sheet_fraction must be between 0 and 1")


@dataclass(frozen=True)
class VolumePricingTier:
    """Per-sheet price for a range of effective sheet counts.

    Attributes:
        min_sheets: Smallest sheet count the tier covers.
        price_per_sheet: Price charged per sheet within the tier.
        max_sheets: Largest sheet count covered, or None for unbounded.
            A max below min_sheets makes the tier unreachable.
    """

    min_sheets: int
    price_per_sheet: float
    max_sheets: int | None = None

    def __post_init__(self) -> None:
        if self.min_sheets < 0:
            raise ValueError("min_sheets must be non-negative")
        if self.price_per_sheet < 0:
            raise ValueError("price_per_sheet must be non-negative")

    def covers(self, sheet_count: int) -> bool:
        """Whether the sheet count falls inside this tier."""
        if sheet_count < self.min_sheets:
            return False
        return self.max_sheets is None or sheet_count <= self.max_sheets


@dataclass(frozen=True)
class VolumePricingTable:
    """Tiered per-sheet pricing.

    Tiers are scanned in the order given and the first covering tier wins,
    so callers must supply them in ascending min_sheets order.
    """

    enabled: bool = True
    tiers: tuple[VolumePricingTier, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NestingRequest:
    """A single quote request.

    Attributes:
        piece_width: Finished piece width in inches.
        piece_height: Finished piece height in inches.
        quantity: Number of pieces ordered.
        min_price_per_item: Optional per-piece price floor for this request.
    """

    piece_width: float
    piece_height: float
    quantity: int
    min_price_per_item: float | None = None

    def __post_init__(self) -> None:
        for name in ("piece_width", "piece_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidNestingRequestError(f"{name} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise InvalidNestingRequestError(f"{name} must be positive")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidNestingRequestError("quantity must be an integer")
        if self.quantity < 1:
            raise InvalidNestingRequestError("quantity must be at least 1")
        if self.min_price_per_item is not None and self.min_price_per_item < 0:
            raise InvalidNestingRequestError("min_price_per_item must be non-negative")

    @property
    def piece_area(self) -> float:
        """Area of a single piece in square inches."""
        return self.piece_width * self.piece_height
