"""Configuration merging utilities for CLI override support.

Precedence: CLI args > config values > defaults. Only non-None CLI
arguments override configuration values.
"""

from sheetnest.application.config.schema import (
    PricingConfiguration,
    SheetChargingConfig,
    SheetConfig,
)
from sheetnest.domain.value_objects import RoundingMode


def merge_config_with_cli(
    config: PricingConfiguration,
    *,
    sheet_width: float | None = None,
    sheet_height: float | None = None,
    sheet_cost: float | None = None,
    min_price_per_item: float | None = None,
    rounding_mode: RoundingMode | str | None = None,
    min_sheet_fraction: float | None = None,
) -> PricingConfiguration:
    """Merge CLI arguments with configuration values.

    Args:
        config: The base PricingConfiguration to merge with
        sheet_width: Override for sheet.width
        sheet_height: Override for sheet.height
        sheet_cost: Override for sheet.cost
        min_price_per_item: Override for min_price_per_item
        rounding_mode: Override for sheet_charging.rounding_mode
        min_sheet_fraction: Override for sheet_charging.min_sheet_fraction

    Returns:
        A new, re-validated PricingConfiguration with merged values

    Example:
        >>> merged = merge_config_with_cli(config, sheet_cost=60.0)
        >>> merged.sheet.cost
        60.0
    """
    sheet_data = config.sheet.model_dump()
    if sheet_width is not None:
        sheet_data["width"] = sheet_width
    if sheet_height is not None:
        sheet_data["height"] = sheet_height
    if sheet_cost is not None:
        sheet_data["cost"] = sheet_cost

    charging_data = config.sheet_charging.model_dump()
    if rounding_mode is not None:
        charging_data["rounding_mode"] = rounding_mode
    if min_sheet_fraction is not None:
        charging_data["min_sheet_fraction"] = min_sheet_fraction

    # model_copy skips validation, so rebuild the nested models explicitly.
    return config.model_copy(
        update={
            "sheet": SheetConfig.model_validate(sheet_data),
            "sheet_charging": SheetChargingConfig.model_validate(charging_data),
            "min_price_per_item": (
                min_price_per_item
                if min_price_per_item is not None
                else config.min_price_per_item
            ),
        }
    )
