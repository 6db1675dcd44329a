"""Oversize rules and sheet charging policy."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..value_objects import (
    OversizeAxis,
    OversizeBehavior,
    OversizeDimensionRule,
    RoundingMode,
    SheetChargingPolicy,
    SheetSpec,
)

__all__ = ["OversizeAdjustment", "SheetChargingService"]


@dataclass(frozen=True)
class OversizeAdjustment:
    """Outcome of applying oversize rules to a piece.

    Attributes:
        max_pieces_per_sheet: Capacity after use_full_sheet_axis rules.
        min_sheet_fraction: Billing floor after bump_sheet_fraction rules.
        applied_rules: Rules whose threshold the piece exceeded, in order.
    """

    max_pieces_per_sheet: int
    min_sheet_fraction: float
    applied_rules: tuple[OversizeDimensionRule, ...] = field(default_factory=tuple)


class SheetChargingService:
    """Applies a SheetChargingPolicy to a piece on a given sheet.

    Attributes:
        sheet: Sheet stock the pieces are cut from.
        policy: Rounding, minimum and oversize configuration.
    """

    def __init__(self, sheet: SheetSpec, policy: SheetChargingPolicy) -> None:
        self.sheet = sheet
        self.policy = policy

    def evaluate_oversize_rules(
        self,
        piece_width: float,
        piece_height: float,
        max_pieces_per_sheet: int,
    ) -> OversizeAdjustment:
        """Adjust capacity and billing floor for oversized pieces.

        Rules are applied in order and are cumulative: a later
        use_full_sheet_axis rule replaces the capacity set by an earlier one,
        while bump_sheet_fraction rules only ever raise the floor.

        Args:
            piece_width: Piece width as ordered.
            piece_height: Piece height as ordered.
            max_pieces_per_sheet: Capacity found by the nesting search.

        Returns:
            Adjusted capacity, floor, and the rules that fired.
        """
        max_pieces = max_pieces_per_sheet
        min_fraction = self.policy.min_sheet_fraction
        applied: list[OversizeDimensionRule] = []

        for rule in self.policy.oversize_rules:
            if not rule.triggers(piece_width, piece_height):
                continue
            applied.append(rule)

            if rule.behavior == OversizeBehavior.USE_FULL_SHEET_AXIS:
                max_pieces = self._full_axis_capacity(rule, piece_width, piece_height)
            elif rule.behavior == OversizeBehavior.BUMP_SHEET_FRACTION:
                min_fraction = max(min_fraction, rule.target_sheet_fraction or 0.0)

        return OversizeAdjustment(
            max_pieces_per_sheet=max_pieces,
            min_sheet_fraction=min_fraction,
            applied_rules=tuple(applied),
        )

    def apply(self, raw_sheets_used: float, min_sheet_fraction: float) -> float:
        """Convert raw sheet usage into billable sheets.

        Args:
            raw_sheets_used: quantity / max pieces per sheet.
            min_sheet_fraction: Floor from the policy or oversize rules.

        Returns:
            Rounded usage, never below min_sheet_fraction.
        """
        mode = self.policy.rounding_mode
        if mode == RoundingMode.QUARTER:
            billable = math.ceil(raw_sheets_used * 4) / 4
        elif mode == RoundingMode.HALF:
            billable = math.ceil(raw_sheets_used * 2) / 2
        elif mode == RoundingMode.FULL:
            billable = float(math.ceil(raw_sheets_used))
        else:
            billable = raw_sheets_used

        return max(billable, min_sheet_fraction)

    def _full_axis_capacity(
        self,
        rule: OversizeDimensionRule,
        piece_width: float,
        piece_height: float,
    ) -> int:
        # The matched axis takes the whole sheet dimension, leaving at most one
        # piece along it. With axis=any the longer side is the matched one.
        effective_width = piece_width
        effective_height = piece_height

        if rule.axis == OversizeAxis.WIDTH or (
            rule.axis == OversizeAxis.ANY and piece_width >= piece_height
        ):
            effective_width = self.sheet.width
        if rule.axis == OversizeAxis.HEIGHT or (
            rule.axis == OversizeAxis.ANY and piece_height > piece_width
        ):
            effective_height = self.sheet.height

        pieces_wide = math.floor(self.sheet.width / effective_width)
        pieces_high = math.floor(self.sheet.height / effective_height)
        return pieces_wide * pieces_high
