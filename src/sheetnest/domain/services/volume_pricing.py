"""Volume-tiered per-sheet pricing."""

from __future__ import annotations

import math

from ..value_objects import VolumePricingTable

__all__ = ["VolumePricingResolver"]


class VolumePricingResolver:
    """Selects the per-sheet price for an order size.

    Tiers are matched first-come in list order rather than by narrowest
    range. Supplying tiers in ascending min_sheets order is the caller's
    responsibility; the resolver does not reorder them.
    """

    def __init__(self, base_sheet_cost: float, table: VolumePricingTable | None = None) -> None:
        self.base_sheet_cost = base_sheet_cost
        self.table = table

    @staticmethod
    def effective_sheet_count(billable_sheets: float) -> int:
        """Whole sheet count used for tier lookup."""
        return math.ceil(billable_sheets)

    def price_per_sheet(self, sheet_count: int) -> float:
        """Per-sheet price for the given effective sheet count.

        Falls back to the base sheet cost when pricing is disabled, the
        table is empty, or no tier covers the count.
        """
        if self.table is None or not self.table.enabled or not self.table.tiers:
            return self.base_sheet_cost

        for tier in self.table.tiers:
            if tier.covers(sheet_count):
                return tier.price_per_sheet

        return self.base_sheet_cost
