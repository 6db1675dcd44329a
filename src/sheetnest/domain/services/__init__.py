"""Domain services for nesting search and sheet pricing."""

from .charging_policy import OversizeAdjustment, SheetChargingService
from .nesting_search import NestingPatternSearch, rank_patterns, round_half_up
from .partial_sheet import (
    LINEAR_FOOT_IN,
    USABLE_WASTE_MIN_WIDTH_IN,
    PartialSheetCalculator,
    PartialSheetSplit,
    is_usable_waste,
)
from .pricing_calculator import (
    CANNOT_NEST_CAPACITY_MESSAGE,
    CANNOT_NEST_PARTIAL_MESSAGE,
    OVERSIZED_MESSAGE,
    NestingCalculator,
    TraceHook,
)
from .volume_pricing import VolumePricingResolver

__all__ = [
    "CANNOT_NEST_CAPACITY_MESSAGE",
    "CANNOT_NEST_PARTIAL_MESSAGE",
    "LINEAR_FOOT_IN",
    "NestingCalculator",
    "NestingPatternSearch",
    "OVERSIZED_MESSAGE",
    "OversizeAdjustment",
    "PartialSheetCalculator",
    "PartialSheetSplit",
    "SheetChargingService",
    "TraceHook",
    "USABLE_WASTE_MIN_WIDTH_IN",
    "VolumePricingResolver",
    "is_usable_waste",
    "rank_patterns",
    "round_half_up",
]
