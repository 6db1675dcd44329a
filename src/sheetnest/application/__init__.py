"""Application layer - option pricing and configuration."""

from sheetnest.application.pipeline import (
    AppliedRule,
    ChargingPolicySummary,
    OptionPricingRule,
    PipelineResult,
    PriceBreakdown,
    PricingBasis,
    PricingMode,
    PricingPipeline,
    PricingStage,
    apply_pre_rules,
)

__all__ = [
    "AppliedRule",
    "ChargingPolicySummary",
    "OptionPricingRule",
    "PipelineResult",
    "PriceBreakdown",
    "PricingBasis",
    "PricingMode",
    "PricingPipeline",
    "PricingStage",
    "apply_pre_rules",
]
