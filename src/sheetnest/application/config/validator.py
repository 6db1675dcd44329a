"""Validation structures and pricing checks.

Schema validation catches malformed configuration. The checks here catch
configuration that is well-formed but cannot be quoted, reported as errors,
and configuration that is probably not what the author meant, such as
volume tiers out of order or oversize rules that can never fire, reported
as warnings.
"""

from dataclasses import dataclass, field
from typing import Any

from sheetnest.application.config.adapter import config_to_option_rules
from sheetnest.application.config.schema import (
    OptionRuleConfig,
    PricingConfiguration,
    SheetChargingConfig,
    SheetConfig,
    VolumePricingConfig,
)
from sheetnest.application.pipeline import PricingStage, apply_pre_rules
from sheetnest.domain.value_objects import OversizeBehavior


@dataclass
class ValidationError:
    """A blocking validation error.

    Attributes:
        path: JSON path to the invalid field (e.g., "volume_pricing.tiers[0]")
        message: Human-readable description of the error
        value: The invalid value that caused the error
    """

    path: str
    message: str
    value: Any = None


@dataclass
class ValidationWarning:
    """A non-blocking validation warning.

    Attributes:
        path: JSON path to the concerning field
        message: Human-readable description of the concern
        suggestion: Optional suggested remediation
    """

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Container for validation errors and warnings."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def exit_code(self) -> int:
        """CLI exit code: 0 clean, 1 errors, 2 warnings only."""
        if self.errors:
            return 1
        if self.warnings:
            return 2
        return 0

    def add_error(
        self, path: str, message: str, value: Any = None
    ) -> "ValidationResult":
        self.errors.append(ValidationError(path=path, message=message, value=value))
        return self

    def add_warning(
        self, path: str, message: str, suggestion: str | None = None
    ) -> "ValidationResult":
        self.warnings.append(
            ValidationWarning(path=path, message=message, suggestion=suggestion)
        )
        return self

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self


def check_volume_pricing(config: VolumePricingConfig | None) -> ValidationResult:
    """Check volume tiers for problems first-match lookup would hide.

    Advisories checked:
    - Enabled table with no tiers (base cost always applies)
    - Tier whose max_sheets is below its min_sheets (never matches)
    - Tiers not in ascending min_sheets order
    - Tiers whose ranges overlap (later tier shadowed)
    """
    result = ValidationResult()
    if config is None:
        return result

    if config.enabled and not config.tiers:
        result.add_warning(
            path="volume_pricing.tiers",
            message="Volume pricing is enabled but no tiers are defined",
            suggestion="Add tiers or set enabled to false",
        )
        return result

    for i, tier in enumerate(config.tiers):
        if tier.max_sheets is not None and tier.max_sheets < tier.min_sheets:
            result.add_warning(
                path=f"volume_pricing.tiers[{i}]",
                message=(
                    f"max_sheets ({tier.max_sheets}) is less than "
                    f"min_sheets ({tier.min_sheets}); this tier never matches"
                ),
            )

    for i in range(1, len(config.tiers)):
        previous = config.tiers[i - 1]
        current = config.tiers[i]
        path = f"volume_pricing.tiers[{i}]"

        if current.min_sheets < previous.min_sheets:
            result.add_warning(
                path=path,
                message=(
                    f"Tier min_sheets {current.min_sheets} follows "
                    f"{previous.min_sheets}; tiers are matched in listed order"
                ),
                suggestion="List tiers in ascending min_sheets order",
            )
        elif previous.max_sheets is None or current.min_sheets <= previous.max_sheets:
            result.add_warning(
                path=path,
                message=(
                    f"Tier starting at {current.min_sheets} sheets overlaps the "
                    f"previous tier; the earlier tier wins"
                ),
                suggestion="Make tier ranges disjoint",
            )

    return result


def check_charging_policy(
    sheet: SheetConfig, charging: SheetChargingConfig
) -> ValidationResult:
    """Check oversize rules against the sheet they apply to.

    Advisories checked:
    - Threshold at or above the largest sheet dimension the axis can see
      (the rule can never trigger on a piece that fits)
    - Bump rule target not above the base minimum sheet fraction
    """
    result = ValidationResult()
    longest = max(sheet.width, sheet.height)

    for i, rule in enumerate(charging.oversize_rules):
        path = f"sheet_charging.oversize_rules[{i}]"

        # A piece that fits may be rotated, so any axis can reach the long side.
        if rule.threshold_in >= longest:
            result.add_warning(
                path=f"{path}.threshold_in",
                message=(
                    f"Threshold {rule.threshold_in:g}\" is not below the sheet's "
                    f"longest side ({longest:g}\"); this rule never triggers"
                ),
            )

        if (
            rule.behavior == OversizeBehavior.BUMP_SHEET_FRACTION
            and rule.target_sheet_fraction is not None
            and rule.target_sheet_fraction <= charging.min_sheet_fraction
        ):
            result.add_warning(
                path=f"{path}.target_sheet_fraction",
                message=(
                    f"Target fraction {rule.target_sheet_fraction:g} does not exceed "
                    f"min_sheet_fraction {charging.min_sheet_fraction:g}; "
                    "this rule has no effect"
                ),
            )

    return result


def check_option_rules(
    sheet: SheetConfig, rules: list[OptionRuleConfig]
) -> ValidationResult:
    """Check that PRE-stage option rules leave a quotable sheet cost.

    Errors checked:
    - Sheet rules that drive the adjusted sheet cost below zero, which makes
      every quote with this configuration fail
    """
    result = ValidationResult()
    cost, _ = apply_pre_rules(sheet.cost, config_to_option_rules(rules))

    if cost < 0:
        index = max(i for i, rule in enumerate(rules) if rule.stage == PricingStage.PRE)
        result.add_error(
            path=f"option_rules[{index}]",
            message=(
                f"Sheet rules reduce the sheet cost from {sheet.cost:.2f} "
                f"to {cost:.2f}; the sheet cost must stay non-negative"
            ),
            value=cost,
        )

    return result


def validate_config(config: PricingConfiguration) -> ValidationResult:
    """Run all checks on a schema-valid configuration."""
    result = ValidationResult()
    result.merge(check_volume_pricing(config.volume_pricing))
    result.merge(check_charging_policy(config.sheet, config.sheet_charging))
    result.merge(check_option_rules(config.sheet, config.option_rules))
    return result
