"""Pydantic configuration schema models for sheet pricing.

This module defines the configuration schema for JSON-based pricing
configuration files. It uses Pydantic v2 for validation and serialization.

The rounding, oversize and option enums are reused from the domain and
application layers so configuration values map one to one onto the engine.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sheetnest.application.pipeline import PricingBasis, PricingMode, PricingStage
from sheetnest.domain.value_objects import OversizeAxis, OversizeBehavior, RoundingMode

# Supported schema versions for configuration files
# Version 1.0: Sheet, minimum price, volume pricing, charging policy, option rules
# Version 1.1: Same sections; newer 1.x minors are accepted as well
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0", "1.1"})


class SheetConfig(BaseModel):
    """Sheet stock dimensions and cost.

    Attributes:
        width: Sheet width in inches.
        height: Sheet height in inches.
        cost: Base cost per sheet.
    """

    model_config = ConfigDict(extra="forbid")

    width: float = Field(default=48.0, gt=0, description="Sheet width in inches")
    height: float = Field(default=96.0, gt=0, description="Sheet height in inches")
    cost: float = Field(..., ge=0, description="Base cost per sheet")


class VolumePricingTierConfig(BaseModel):
    """One tier of the volume pricing table.

    Attributes:
        min_sheets: Smallest effective sheet count the tier covers.
        max_sheets: Largest effective sheet count covered, or None.
        price_per_sheet: Per-sheet price within the tier.
    """

    model_config = ConfigDict(extra="forbid")

    min_sheets: int = Field(..., ge=0, description="Smallest sheet count covered")
    max_sheets: int | None = Field(
        default=None, ge=0, description="Largest sheet count covered (open if omitted)"
    )
    price_per_sheet: float = Field(..., ge=0, description="Price per sheet in this tier")


class VolumePricingConfig(BaseModel):
    """Volume pricing table.

    Tiers are matched in the order listed; the first tier covering the
    effective sheet count wins.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(default=True, description="Apply volume pricing")
    tiers: list[VolumePricingTierConfig] = Field(
        default_factory=list, description="Tiers in ascending min_sheets order"
    )


class OversizeRuleConfig(BaseModel):
    """Oversize dimension rule.

    Attributes:
        threshold_in: Dimension in inches that must be exceeded.
        axis: Piece dimension compared against the threshold.
        behavior: Effect of the rule when triggered.
        target_sheet_fraction: Minimum billable fraction for bump rules.
    """

    model_config = ConfigDict(extra="forbid")

    threshold_in: float = Field(..., ge=0, description="Threshold in inches")
    axis: OversizeAxis = Field(default=OversizeAxis.ANY)
    behavior: OversizeBehavior = Field(default=OversizeBehavior.USE_FULL_SHEET_AXIS)
    target_sheet_fraction: float | None = Field(
        default=None,
        gt=0,
        le=1,
        description="Minimum billable sheet fraction (bump_sheet_fraction only)",
    )

    @model_validator(mode="after")
    def validate_target_fraction(self) -> "OversizeRuleConfig":
        """Require a target fraction exactly when the rule bumps the minimum."""
        bumps = self.behavior == OversizeBehavior.BUMP_SHEET_FRACTION
        if bumps and self.target_sheet_fraction is None:
            raise ValueError(
                "target_sheet_fraction is required for bump_sheet_fraction rules"
            )
        if not bumps and self.target_sheet_fraction is not None:
            raise ValueError(
                "target_sheet_fraction only applies to bump_sheet_fraction rules"
            )
        return self


class SheetChargingConfig(BaseModel):
    """How raw sheet usage becomes billable sheets."""

    model_config = ConfigDict(extra="forbid")

    rounding_mode: RoundingMode = Field(default=RoundingMode.EXACT)
    min_sheet_fraction: float = Field(
        default=0.0, ge=0, le=1, description="Minimum billable sheet fraction"
    )
    oversize_rules: list[OversizeRuleConfig] = Field(
        default_factory=list, description="Oversize rules applied in order"
    )


class OptionRuleConfig(BaseModel):
    """Price adjustment contributed by a product option."""

    model_config = ConfigDict(extra="forbid")

    stage: PricingStage
    basis: PricingBasis
    mode: PricingMode
    value: float
    label: str = Field(default="", description="Option display name")

    @model_validator(mode="after")
    def validate_stage_basis(self) -> "OptionRuleConfig":
        """PRE rules adjust sheet cost; POST rules adjust item or order price."""
        if self.stage == PricingStage.PRE and self.basis != PricingBasis.SHEET:
            raise ValueError("pre-stage rules must use the 'sheet' basis")
        if self.stage == PricingStage.POST and self.basis == PricingBasis.SHEET:
            raise ValueError("post-stage rules must use the 'item' or 'order' basis")
        if self.stage == PricingStage.POST and self.mode == PricingMode.OVERRIDE_BASE:
            raise ValueError("override_base is only valid for pre-stage rules")
        return self


class PricingConfiguration(BaseModel):
    """Root configuration model for sheet pricing.

    Attributes:
        schema_version: Version string in format "major.minor" (e.g., "1.0")
        sheet: Sheet dimensions and base cost
        min_price_per_item: Optional per-piece price floor
        volume_pricing: Optional volume pricing table
        sheet_charging: Rounding, minimum and oversize policy
        option_rules: Option price adjustments (v1.1+)

    Example:
        >>> config = PricingConfiguration(
        ...     schema_version="1.0",
        ...     sheet=SheetConfig(width=48.0, height=96.0, cost=50.0),
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    sheet: SheetConfig
    min_price_per_item: float | None = Field(
        default=None, ge=0, description="Per-piece price floor (optional)"
    )
    volume_pricing: VolumePricingConfig | None = Field(
        default=None, description="Volume pricing (optional)"
    )
    sheet_charging: SheetChargingConfig = Field(default_factory=SheetChargingConfig)
    option_rules: list[OptionRuleConfig] = Field(
        default_factory=list, description="Option pricing rules (optional)"
    )

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        """Validate that schema version is supported.

        Newer minor versions within a supported major version are accepted
        for forward compatibility.
        """
        if v in SUPPORTED_VERSIONS:
            return v

        major_version = int(v.split(".")[0])
        supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
        if major_version in supported_majors:
            return v

        raise ValueError(
            f"Unsupported schema version '{v}'. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}"
        )

    def summary(self) -> dict[str, Any]:
        """Short description of the configuration for display."""
        return {
            "sheet": f"{self.sheet.width:g}x{self.sheet.height:g} @ {self.sheet.cost:.2f}",
            "rounding_mode": self.sheet_charging.rounding_mode.value,
            "min_sheet_fraction": self.sheet_charging.min_sheet_fraction,
            "oversize_rules": len(self.sheet_charging.oversize_rules),
            "volume_tiers": len(self.volume_pricing.tiers) if self.volume_pricing else 0,
            "option_rules": len(self.option_rules),
        }
