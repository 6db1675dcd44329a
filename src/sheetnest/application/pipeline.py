"""Option-based pricing rules wrapped around the nesting calculator.

Product options (lamination, rush handling, setup fees) adjust a quote at
two points: before nesting, by changing the per-sheet cost, and after
nesting, by changing the per-item price or adding an order-level amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from sheetnest.domain import (
    NestingCalculator,
    NestingFailure,
    NestingResult,
    SheetChargingPolicy,
    SheetSpec,
    VolumePricingTable,
)

logger = logging.getLogger(__name__)


class PricingStage(str, Enum):
    """When an option rule is applied relative to nesting."""

    PRE = "pre"
    POST = "post"


class PricingBasis(str, Enum):
    """Quantity an option rule adjusts.

    - SHEET: per-sheet cost (PRE stage)
    - ITEM: per-item price (POST stage)
    - ORDER: order total (POST stage)
    """

    SHEET = "sheet"
    ITEM = "item"
    ORDER = "order"


class PricingMode(str, Enum):
    """How an option rule's value is combined with the current amount."""

    MULTIPLIER = "multiplier"
    FLAT_ADD = "flat_add"
    OVERRIDE_BASE = "override_base"


@dataclass(frozen=True)
class OptionPricingRule:
    """A price adjustment contributed by a product option.

    Attributes:
        stage: PRE adjusts sheet cost, POST adjusts item or order price.
        basis: Amount the rule adjusts.
        mode: How value is applied.
        value: Multiplier, amount to add, or replacement base cost.
        label: Display name of the option.
    """

    stage: PricingStage
    basis: PricingBasis
    mode: PricingMode
    value: float
    label: str = ""


@dataclass(frozen=True)
class AppliedRule:
    """Record of one option rule applied during a pipeline run.

    Attributes:
        label: Option display name.
        basis: Amount the rule adjusted.
        mode: How the value was applied.
        value: Rule value.
        before: Amount before the rule (sheet and item rules).
        after: Amount after the rule (sheet and item rules).
        adjustment: Running order adjustment after the rule (order rules).
    """

    label: str
    basis: PricingBasis
    mode: PricingMode
    value: float
    before: float | None = None
    after: float | None = None
    adjustment: float | None = None


@dataclass(frozen=True)
class ChargingPolicySummary:
    """Charging policy in effect for a quote, for display."""

    rounding_mode: str
    min_sheet_fraction: float
    oversize_rules: int


@dataclass(frozen=True)
class PriceBreakdown:
    """Every stage of an option-priced quote."""

    base_sheet_cost: float
    adjusted_sheet_cost: float
    pre_rules_applied: tuple[AppliedRule, ...]
    nesting_details: NestingResult
    raw_sheets_used: float
    billable_sheets: float
    effective_sheet_cost: float
    charging_policy: ChargingPolicySummary | None
    base_item_price: float
    post_rules_applied: tuple[AppliedRule, ...]
    order_adjustment: float
    final_item_price: float
    final_total: float
    floor_applied: bool = False


@dataclass(frozen=True)
class PipelineResult:
    """Successful result of PricingPipeline.execute."""

    breakdown: PriceBreakdown

    @property
    def is_error(self) -> bool:
        return False

    @property
    def final_total(self) -> float:
        return self.breakdown.final_total

    @property
    def final_item_price(self) -> float:
        return self.breakdown.final_item_price

    @property
    def nesting_details(self) -> NestingResult:
        return self.breakdown.nesting_details


def apply_pre_rules(
    sheet_cost: float,
    rules: Sequence[OptionPricingRule],
) -> tuple[float, tuple[AppliedRule, ...]]:
    """Apply PRE-stage sheet rules in order.

    Returns:
        The adjusted sheet cost and a record of each rule applied. The cost
        is not checked; a negative result is rejected when the sheet is built.
    """
    applied: list[AppliedRule] = []
    cost = sheet_cost

    for rule in rules:
        if rule.stage != PricingStage.PRE or rule.basis != PricingBasis.SHEET:
            continue

        before = cost
        if rule.mode == PricingMode.MULTIPLIER:
            cost *= rule.value
        elif rule.mode == PricingMode.FLAT_ADD:
            cost += rule.value
        elif rule.mode == PricingMode.OVERRIDE_BASE:
            cost = rule.value

        applied.append(
            AppliedRule(
                label=rule.label,
                basis=rule.basis,
                mode=rule.mode,
                value=rule.value,
                before=before,
                after=cost,
            )
        )

    return cost, tuple(applied)


CalculatorFactory = Callable[..., NestingCalculator]


class PricingPipeline:
    """Runs PRE option rules, the nesting calculator, then POST option rules."""

    def __init__(self, calculator_factory: CalculatorFactory | None = None) -> None:
        self.calculator_factory = calculator_factory or NestingCalculator.from_sheet

    def execute(
        self,
        sheet: SheetSpec,
        piece_width: float,
        piece_height: float,
        quantity: int,
        min_price_per_item: float | None = None,
        volume_pricing: VolumePricingTable | None = None,
        charging_policy: SheetChargingPolicy | None = None,
        option_rules: Sequence[OptionPricingRule] = (),
    ) -> PipelineResult | NestingFailure:
        """Price an order with option rules applied.

        Args:
            sheet: Sheet stock with its base cost.
            piece_width: Piece width in inches.
            piece_height: Piece height in inches.
            quantity: Number of pieces ordered.
            min_price_per_item: Per-item floor applied after all rules.
            volume_pricing: Optional volume tiers.
            charging_policy: Optional charging policy.
            option_rules: Option rules in application order.

        Returns:
            PipelineResult with the full breakdown, or the calculator's
            NestingFailure unchanged.

        Raises:
            InvalidNestingRequestError: If the piece or quantity is invalid.
            ValueError: If PRE rules drive the sheet cost negative.
        """
        adjusted_sheet_cost, pre_applied = apply_pre_rules(sheet.cost, option_rules)

        calculator = self.calculator_factory(
            SheetSpec(width=sheet.width, height=sheet.height, cost=adjusted_sheet_cost),
            min_price_per_item=min_price_per_item,
            volume_pricing=volume_pricing,
            charging_policy=charging_policy,
        )
        nesting = calculator.calculate_pricing_with_waste(piece_width, piece_height, quantity)
        if isinstance(nesting, NestingFailure):
            return nesting

        base_item_price = nesting.average_cost_per_piece
        item_price, order_adjustment, post_applied = self._apply_post_rules(
            base_item_price, quantity, option_rules
        )

        floor_applied = False
        if min_price_per_item and item_price < min_price_per_item:
            floor_applied = True
            item_price = min_price_per_item

        final_total = item_price * quantity + order_adjustment

        logger.debug(
            "Pipeline: sheet cost %.2f -> %.2f, item %.4f -> %.4f, total %.2f",
            sheet.cost,
            adjusted_sheet_cost,
            base_item_price,
            item_price,
            final_total,
        )

        summary = None
        if charging_policy is not None:
            summary = ChargingPolicySummary(
                rounding_mode=charging_policy.rounding_mode.value,
                min_sheet_fraction=charging_policy.min_sheet_fraction,
                oversize_rules=len(charging_policy.oversize_rules),
            )

        return PipelineResult(
            breakdown=PriceBreakdown(
                base_sheet_cost=sheet.cost,
                adjusted_sheet_cost=adjusted_sheet_cost,
                pre_rules_applied=pre_applied,
                nesting_details=nesting,
                raw_sheets_used=nesting.raw_sheets_used,
                billable_sheets=nesting.billable_sheets,
                effective_sheet_cost=nesting.effective_sheet_cost,
                charging_policy=summary,
                base_item_price=base_item_price,
                post_rules_applied=post_applied,
                order_adjustment=order_adjustment,
                final_item_price=item_price,
                final_total=final_total,
                floor_applied=floor_applied,
            )
        )

    def _apply_post_rules(
        self,
        item_price: float,
        quantity: int,
        rules: Sequence[OptionPricingRule],
    ) -> tuple[float, float, tuple[AppliedRule, ...]]:
        """Apply POST-stage item and order rules in order.

        Order multipliers are computed against the item price reached so far.
        OVERRIDE_BASE has no meaning after nesting and is skipped.
        """
        applied: list[AppliedRule] = []
        price = item_price
        order_adjustment = 0.0

        for rule in rules:
            if rule.stage != PricingStage.POST:
                continue

            if rule.basis == PricingBasis.ITEM:
                if rule.mode == PricingMode.OVERRIDE_BASE:
                    continue
                before = price
                if rule.mode == PricingMode.MULTIPLIER:
                    price *= rule.value
                else:
                    price += rule.value
                applied.append(
                    AppliedRule(
                        label=rule.label,
                        basis=rule.basis,
                        mode=rule.mode,
                        value=rule.value,
                        before=before,
                        after=price,
                    )
                )
            elif rule.basis == PricingBasis.ORDER:
                if rule.mode == PricingMode.OVERRIDE_BASE:
                    continue
                if rule.mode == PricingMode.MULTIPLIER:
                    order_adjustment += price * quantity * (rule.value - 1)
                else:
                    order_adjustment += rule.value
                applied.append(
                    AppliedRule(
                        label=rule.label,
                        basis=rule.basis,
                        mode=rule.mode,
                        value=rule.value,
                        adjustment=order_adjustment,
                    )
                )

        return price, order_adjustment, tuple(applied)
