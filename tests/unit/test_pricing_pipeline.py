"""Tests for option pricing rules applied around the nesting calculator."""

from __future__ import annotations

import pytest

from sheetnest.application import (
    OptionPricingRule,
    PipelineResult,
    PricingBasis,
    PricingMode,
    PricingPipeline,
    PricingStage,
)
from sheetnest.domain import (
    NestingCalculator,
    NestingErrorKind,
    NestingFailure,
    RoundingMode,
    SheetChargingPolicy,
    SheetSpec,
)


def _rule(
    stage: PricingStage, basis: PricingBasis, mode: PricingMode, value: float, label: str = ""
) -> OptionPricingRule:
    return OptionPricingRule(stage=stage, basis=basis, mode=mode, value=value, label=label)


@pytest.fixture
def pipeline() -> PricingPipeline:
    return PricingPipeline()


def _run(
    pipeline: PricingPipeline,
    sheet: SheetSpec,
    rules: list[OptionPricingRule],
    min_price: float | None = None,
) -> PipelineResult:
    result = pipeline.execute(
        sheet, 12.0, 12.0, 50, min_price_per_item=min_price, option_rules=rules
    )
    assert isinstance(result, PipelineResult), result
    return result


class TestNoRules:
    def test_matches_calculator(self, pipeline: PricingPipeline, standard_sheet: SheetSpec) -> None:
        result = _run(pipeline, standard_sheet, [])

        assert result.is_error is False
        assert result.final_total == pytest.approx(78.125)
        assert result.final_item_price == pytest.approx(1.5625)
        assert result.breakdown.adjusted_sheet_cost == 50.0
        assert result.breakdown.order_adjustment == 0.0
        assert result.breakdown.pre_rules_applied == ()
        assert result.breakdown.post_rules_applied == ()
        assert result.nesting_details.max_pieces_per_sheet == 32


class TestPreRules:
    def test_multiplier(self, pipeline: PricingPipeline, standard_sheet: SheetSpec) -> None:
        rules = [_rule(PricingStage.PRE, PricingBasis.SHEET, PricingMode.MULTIPLIER, 1.2, "Lamination")]
        result = _run(pipeline, standard_sheet, rules)

        breakdown = result.breakdown
        assert breakdown.base_sheet_cost == 50.0
        assert breakdown.adjusted_sheet_cost == pytest.approx(60.0)
        assert breakdown.pre_rules_applied[0].label == "Lamination"
        assert breakdown.pre_rules_applied[0].before == 50.0
        assert breakdown.pre_rules_applied[0].after == pytest.approx(60.0)
        assert result.final_item_price == pytest.approx(1.875)
        assert result.final_total == pytest.approx(93.75)

    def test_override_then_flat_add(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [
            _rule(PricingStage.PRE, PricingBasis.SHEET, PricingMode.OVERRIDE_BASE, 40.0),
            _rule(PricingStage.PRE, PricingBasis.SHEET, PricingMode.FLAT_ADD, 5.0),
        ]
        result = _run(pipeline, standard_sheet, rules)

        assert result.breakdown.adjusted_sheet_cost == pytest.approx(45.0)
        assert [r.after for r in result.breakdown.pre_rules_applied] == [40.0, 45.0]
        assert result.final_total == pytest.approx(45.0 * 1.5625)

    def test_non_sheet_basis_ignored(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [_rule(PricingStage.PRE, PricingBasis.ITEM, PricingMode.MULTIPLIER, 3.0)]
        result = _run(pipeline, standard_sheet, rules)

        assert result.breakdown.pre_rules_applied == ()
        assert result.final_total == pytest.approx(78.125)

    def test_negative_sheet_cost_rejected(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [_rule(PricingStage.PRE, PricingBasis.SHEET, PricingMode.FLAT_ADD, -60.0)]
        with pytest.raises(ValueError, match="non-negative"):
            pipeline.execute(standard_sheet, 12.0, 12.0, 50, option_rules=rules)


class TestPostRules:
    def test_item_flat_add(self, pipeline: PricingPipeline, standard_sheet: SheetSpec) -> None:
        rules = [_rule(PricingStage.POST, PricingBasis.ITEM, PricingMode.FLAT_ADD, 0.5)]
        result = _run(pipeline, standard_sheet, rules)

        applied = result.breakdown.post_rules_applied[0]
        assert applied.before == pytest.approx(1.5625)
        assert applied.after == pytest.approx(2.0625)
        assert result.final_total == pytest.approx(103.125)

    def test_order_flat_add(self, pipeline: PricingPipeline, standard_sheet: SheetSpec) -> None:
        rules = [_rule(PricingStage.POST, PricingBasis.ORDER, PricingMode.FLAT_ADD, 10.0, "Setup")]
        result = _run(pipeline, standard_sheet, rules)

        assert result.breakdown.order_adjustment == pytest.approx(10.0)
        assert result.final_item_price == pytest.approx(1.5625)
        assert result.final_total == pytest.approx(88.125)

    def test_order_multiplier(self, pipeline: PricingPipeline, standard_sheet: SheetSpec) -> None:
        rules = [_rule(PricingStage.POST, PricingBasis.ORDER, PricingMode.MULTIPLIER, 1.1, "Rush")]
        result = _run(pipeline, standard_sheet, rules)

        assert result.breakdown.order_adjustment == pytest.approx(7.8125)
        assert result.breakdown.post_rules_applied[0].adjustment == pytest.approx(7.8125)
        assert result.final_total == pytest.approx(85.9375)

    def test_order_multiplier_uses_adjusted_item_price(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [
            _rule(PricingStage.POST, PricingBasis.ITEM, PricingMode.MULTIPLIER, 2.0),
            _rule(PricingStage.POST, PricingBasis.ORDER, PricingMode.MULTIPLIER, 1.5),
        ]
        result = _run(pipeline, standard_sheet, rules)

        assert result.final_item_price == pytest.approx(3.125)
        assert result.breakdown.order_adjustment == pytest.approx(3.125 * 50 * 0.5)

    def test_override_base_skipped(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [
            _rule(PricingStage.POST, PricingBasis.ITEM, PricingMode.OVERRIDE_BASE, 99.0),
            _rule(PricingStage.POST, PricingBasis.ORDER, PricingMode.OVERRIDE_BASE, 99.0),
        ]
        result = _run(pipeline, standard_sheet, rules)

        assert result.breakdown.post_rules_applied == ()
        assert result.final_total == pytest.approx(78.125)

    def test_floor_applied_after_rules(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        rules = [_rule(PricingStage.POST, PricingBasis.ITEM, PricingMode.MULTIPLIER, 0.5, "Discount")]
        result = _run(pipeline, standard_sheet, rules, min_price=2.0)

        assert result.breakdown.base_item_price == 2.0
        assert result.breakdown.floor_applied is True
        assert result.final_item_price == 2.0
        assert result.final_total == pytest.approx(100.0)


class TestPipelineWiring:
    def test_failure_passed_through(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        result = pipeline.execute(standard_sheet, 100.0, 100.0, 1)

        assert isinstance(result, NestingFailure)
        assert result.kind == NestingErrorKind.OVERSIZED

    def test_charging_policy_summary(
        self, pipeline: PricingPipeline, standard_sheet: SheetSpec
    ) -> None:
        policy = SheetChargingPolicy(rounding_mode=RoundingMode.FULL, min_sheet_fraction=0.5)
        result = pipeline.execute(standard_sheet, 12.0, 12.0, 50, charging_policy=policy)

        assert isinstance(result, PipelineResult)
        assert result.breakdown.billable_sheets == 2.0
        assert result.breakdown.charging_policy is not None
        assert result.breakdown.charging_policy.rounding_mode == "full"
        assert result.breakdown.charging_policy.min_sheet_fraction == 0.5

    def test_custom_calculator_factory(self, standard_sheet: SheetSpec) -> None:
        seen: list[SheetSpec] = []

        def factory(sheet: SheetSpec, **kwargs: object) -> NestingCalculator:
            seen.append(sheet)
            return NestingCalculator.from_sheet(sheet, **kwargs)  # type: ignore[arg-type]

        rules = [_rule(PricingStage.PRE, PricingBasis.SHEET, PricingMode.FLAT_ADD, 10.0)]
        PricingPipeline(calculator_factory=factory).execute(
            standard_sheet, 12.0, 12.0, 50, option_rules=rules
        )

        assert seen == [SheetSpec(width=48.0, height=96.0, cost=60.0)]
