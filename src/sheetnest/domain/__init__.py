"""Domain layer - nesting geometry and pricing policy."""

from .results import (
    NestingAnalysis,
    NestingErrorKind,
    NestingFailure,
    NestingPattern,
    NestingResult,
    PartialSheetDetails,
    PieceSummary,
    TraceEvent,
)
from .services import (
    NestingCalculator,
    NestingPatternSearch,
    PartialSheetCalculator,
    SheetChargingService,
    TraceHook,
    VolumePricingResolver,
)
from .value_objects import (
    InvalidNestingRequestError,
    NestingRequest,
    OversizeAxis,
    OversizeBehavior,
    OversizeDimensionRule,
    RoundingMode,
    SheetChargingPolicy,
    SheetSpec,
    VolumePricingTable,
    VolumePricingTier,
)

__all__ = [
    "InvalidNestingRequestError",
    "NestingAnalysis",
    "NestingCalculator",
    "NestingErrorKind",
    "NestingFailure",
    "NestingPattern",
    "NestingPatternSearch",
    "NestingRequest",
    "NestingResult",
    "OversizeAxis",
    "OversizeBehavior",
    "OversizeDimensionRule",
    "PartialSheetCalculator",
    "PartialSheetDetails",
    "PieceSummary",
    "RoundingMode",
    "SheetChargingPolicy",
    "SheetChargingService",
    "SheetSpec",
    "TraceEvent",
    "TraceHook",
    "VolumePricingResolver",
    "VolumePricingTable",
    "VolumePricingTier",
]
