"""Output formatters and exporters for quotes and nesting analyses."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from sheetnest.application.pipeline import AppliedRule, PipelineResult, PricingBasis
from sheetnest.domain import (
    NestingAnalysis,
    NestingFailure,
    NestingResult,
    OversizeDimensionRule,
    PartialSheetDetails,
)

RULE_WIDTH = 60


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _sheets(value: float) -> str:
    return f"{value:.4f}"


def _dim(value: float) -> str:
    return f"{value:g}"


def _row(label: str, value: str) -> str:
    return f"  {label + ':':<22}{value}"


def format_failure(failure: NestingFailure) -> str:
    """Single-line error message for a failed quote."""
    return f"ERROR ({failure.kind.value}): {failure.message}"


class QuoteFormatter:
    """Formats a nesting price breakdown for display.

    Money is shown to two decimals and sheet counts to four, so fractional
    billing stays visible.
    """

    def format(self, result: NestingResult | NestingFailure) -> str:
        if isinstance(result, NestingFailure):
            return format_failure(result)

        lines = [
            "PRICE QUOTE",
            "=" * RULE_WIDTH,
            _row("Piece", f'{_dim(result.piece_width)}" x {_dim(result.piece_height)}"'),
            _row("Quantity", str(result.quantity)),
            _row("Sheet", f'{_dim(result.sheet_width)}" x {_dim(result.sheet_height)}"'),
            _row("Nesting pattern", result.nesting_pattern),
            _row("Pieces per sheet", str(result.max_pieces_per_sheet)),
        ]

        if result.applied_oversize_rules:
            lines.append("")
            lines.append("  Oversize rules applied:")
            lines.extend(
                f"    - {self._describe_rule(rule)}" for rule in result.applied_oversize_rules
            )

        lines.extend(
            [
                "-" * RULE_WIDTH,
                _row("Raw sheets used", _sheets(result.raw_sheets_used)),
                _row("Billable sheets", _sheets(result.billable_sheets)),
                _row("Sheet cost", _money(result.effective_sheet_cost)),
                _row("Sheets needed", str(result.sheets_needed)),
                _row(
                    "Full sheets",
                    f"{result.full_sheets} ({_money(result.full_sheets_cost)})",
                ),
                _row("Remaining pieces", str(result.remaining_pieces)),
            ]
        )

        if result.partial_sheet_details is not None:
            lines.append("")
            lines.extend(self._format_partial(result.partial_sheet_details))

        lines.append("-" * RULE_WIDTH)
        price_note = " (minimum applied)" if result.min_price_applied else ""
        lines.append(
            _row("Price per piece", _money(result.average_cost_per_piece) + price_note)
        )
        lines.append(_row("TOTAL", _money(result.total_price)))

        return "\n".join(lines)

    def _format_partial(self, partial: PartialSheetDetails) -> list[str]:
        waste = "usable" if partial.usable_waste else "scrap"
        return [
            "  PARTIAL SHEET",
            _row("Layout", partial.pattern),
            _row(
                "Charged area",
                f'{_dim(partial.charge_width)}" x {_dim(partial.charge_height)}" '
                f"({partial.material_used_sqft:.2f} sq ft)",
            ),
            _row(
                "Leftover",
                f'{_dim(partial.waste_width)}" x {_dim(partial.waste_height)}" '
                f"({partial.waste_sqft:.2f} sq ft, {waste})",
            ),
            _row("Cost", _money(partial.cost)),
        ]

    @staticmethod
    def _describe_rule(rule: OversizeDimensionRule) -> str:
        text = f'{rule.axis.value} > {_dim(rule.threshold_in)}": {rule.behavior.value}'
        if rule.target_sheet_fraction is not None:
            text += f" ({rule.target_sheet_fraction:g})"
        return text


class AnalysisFormatter:
    """Formats a ranked nesting analysis as a table."""

    def format(self, analysis: NestingAnalysis | None) -> str:
        if analysis is None:
            return "No layout fits this piece on the sheet."

        sheet = analysis.sheet
        piece = analysis.piece
        lines = [
            "NESTING ANALYSIS",
            "=" * 78,
            _row(
                "Sheet",
                f'{_dim(sheet.width)}" x {_dim(sheet.height)}" '
                f"({sheet.sqft:.2f} sq ft, {_money(sheet.cost)}, "
                f"{_money(sheet.cost_per_sqft)}/sq ft)",
            ),
            _row(
                "Piece",
                f'{_dim(piece.width)}" x {_dim(piece.height)}" ({piece.sqft:.2f} sq ft)',
            ),
            _row("Best layout", analysis.best_option.description),
            _row("Waste cost", _money(analysis.waste_cost)),
            "",
            f"{'#':<4} {'Layout':<44} {'Pieces':>7} {'Each':>10} {'Eff':>6}",
            "-" * 78,
        ]

        for rank, pattern in enumerate(analysis.all_options, start=1):
            lines.append(
                f"{rank:<4} {pattern.description:<44} {pattern.total_pieces:>7} "
                f"{_money(pattern.cost_per_piece):>10} {pattern.efficiency:>5}%"
            )

        return "\n".join(lines)


class PipelineFormatter:
    """Formats an option-priced quote, stage by stage."""

    def __init__(self) -> None:
        self._quote = QuoteFormatter()

    def format(self, result: PipelineResult | NestingFailure) -> str:
        if isinstance(result, NestingFailure):
            return format_failure(result)

        breakdown = result.breakdown
        lines = [self._quote.format(breakdown.nesting_details), ""]

        lines.append("OPTIONS")
        lines.append("=" * RULE_WIDTH)
        lines.append(_row("Base sheet cost", _money(breakdown.base_sheet_cost)))
        for rule in breakdown.pre_rules_applied:
            lines.append(self._format_rule(rule))
        lines.append(_row("Adjusted sheet cost", _money(breakdown.adjusted_sheet_cost)))
        lines.append(_row("Base item price", _money(breakdown.base_item_price)))
        for rule in breakdown.post_rules_applied:
            lines.append(self._format_rule(rule))

        lines.append("-" * RULE_WIDTH)
        floor_note = " (minimum applied)" if breakdown.floor_applied else ""
        lines.append(_row("Item price", _money(breakdown.final_item_price) + floor_note))
        if breakdown.order_adjustment:
            lines.append(_row("Order adjustment", _money(breakdown.order_adjustment)))
        lines.append(_row("FINAL TOTAL", _money(breakdown.final_total)))

        return "\n".join(lines)

    @staticmethod
    def _format_rule(rule: AppliedRule) -> str:
        label = rule.label or rule.mode.value
        if rule.basis == PricingBasis.ORDER:
            return (
                f"    + {label} ({rule.mode.value} {rule.value:g}): "
                f"order adjustment {_money(rule.adjustment or 0.0)}"
            )
        return (
            f"    + {label} ({rule.mode.value} {rule.value:g}): "
            f"{_money(rule.before or 0.0)} -> {_money(rule.after or 0.0)}"
        )


def _json_factory(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}


class JsonExporter:
    """Exports quotes and analyses as JSON.

    Enums are written as their string values. Floats are written unrounded.
    """

    def to_dict(
        self,
        result: NestingResult | NestingFailure | NestingAnalysis | PipelineResult,
    ) -> dict[str, Any]:
        data = dataclasses.asdict(result, dict_factory=_json_factory)

        if isinstance(result, NestingFailure):
            return {"error": data}
        if isinstance(result, NestingAnalysis):
            data["sheet"]["sqft"] = result.sheet.sqft
            data["sheet"]["cost_per_sqft"] = result.sheet.cost_per_sqft
            data["piece"]["sqft"] = result.piece.sqft
        return data

    def export(
        self,
        result: NestingResult | NestingFailure | NestingAnalysis | PipelineResult,
    ) -> str:
        return json.dumps(self.to_dict(result), indent=2)
