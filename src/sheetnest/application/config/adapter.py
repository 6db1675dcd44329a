"""Adapters from PricingConfiguration to domain objects.

This module converts the Pydantic configuration models into the frozen
domain value objects the calculator and pricing pipeline consume.
"""

from sheetnest.application.config.schema import (
    OptionRuleConfig,
    PricingConfiguration,
    SheetChargingConfig,
    VolumePricingConfig,
)
from sheetnest.application.pipeline import OptionPricingRule
from sheetnest.domain import (
    NestingCalculator,
    OversizeDimensionRule,
    SheetChargingPolicy,
    SheetSpec,
    TraceHook,
    VolumePricingTable,
    VolumePricingTier,
)


def config_to_sheet_spec(config: PricingConfiguration) -> SheetSpec:
    """Convert the sheet section to a SheetSpec."""
    return SheetSpec(
        width=config.sheet.width,
        height=config.sheet.height,
        cost=config.sheet.cost,
    )


def config_to_charging_policy(config: SheetChargingConfig) -> SheetChargingPolicy:
    """Convert the sheet charging section to a SheetChargingPolicy.

    Oversize rules keep their configured order since their effects
    accumulate.
    """
    rules = tuple(
        OversizeDimensionRule(
            threshold_in=rule.threshold_in,
            axis=rule.axis,
            behavior=rule.behavior,
            target_sheet_fraction=rule.target_sheet_fraction,
        )
        for rule in config.oversize_rules
    )
    return SheetChargingPolicy(
        rounding_mode=config.rounding_mode,
        min_sheet_fraction=config.min_sheet_fraction,
        oversize_rules=rules,
    )


def config_to_volume_pricing(
    config: VolumePricingConfig | None,
) -> VolumePricingTable | None:
    """Convert the volume pricing section, or None when it is absent.

    Tier order is preserved; first-match lookup depends on it.
    """
    if config is None:
        return None

    return VolumePricingTable(
        enabled=config.enabled,
        tiers=tuple(
            VolumePricingTier(
                min_sheets=tier.min_sheets,
                max_sheets=tier.max_sheets,
                price_per_sheet=tier.price_per_sheet,
            )
            for tier in config.tiers
        ),
    )


def config_to_option_rules(
    rules: list[OptionRuleConfig],
) -> tuple[OptionPricingRule, ...]:
    """Convert option rule configs to pipeline rules, preserving order."""
    return tuple(
        OptionPricingRule(
            stage=rule.stage,
            basis=rule.basis,
            mode=rule.mode,
            value=rule.value,
            label=rule.label,
        )
        for rule in rules
    )


def config_to_calculator(
    config: PricingConfiguration,
    trace: TraceHook | None = None,
) -> NestingCalculator:
    """Build a NestingCalculator from a full configuration.

    Option rules are not part of the calculator; run them through
    PricingPipeline instead.
    """
    return NestingCalculator.from_sheet(
        config_to_sheet_spec(config),
        min_price_per_item=config.min_price_per_item,
        volume_pricing=config_to_volume_pricing(config.volume_pricing),
        charging_policy=config_to_charging_policy(config.sheet_charging),
        trace=trace,
    )
