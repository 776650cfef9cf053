"""
Derived-Field Calculator Module.

Applies a single cell edit to a line item and recomputes the money
fields that depend on it.

Editable columns form a closed enumeration (LineItemField). Each one is
mapped through a fixed dispatch table to a coercion rule and an
assignment, so the set of triggering fields and what they do can be
enumerated and tested exhaustively.

Derived fields:
    cost_per_unit_after_discount = (case_cost - case_discount) / units
    extended_case_cost           = qty * (case_cost - case_discount)
    extended_unit_retail         = qty * units * unit_retail
    calculated_margin_percent    = (unit_retail - cost_per_unit) / unit_retail * 100

Author: ML Engineering Team
"""

from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

from config import get_config
from invoice_ledger.models.invoice_data import LineItem
from invoice_ledger.utils.helpers import finite_or_none
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class LineItemField(str, Enum):
    """Columns a user can edit in the ledger table."""

    QTY = "qty"
    ITEM_CODE = "item_code"
    SCAN_CODE = "scan_code"
    ITEM_DESCRIPTION = "item_description"
    DEPARTMENT = "department"
    PRICE_GROUP = "price_group"
    PRODUCT_CATEGORY = "product_category"
    UNITS = "units"
    CASE_COST = "case_cost"
    CASE_DISCOUNT = "case_discount"
    UNIT_RETAIL = "unit_retail"
    SIZE = "size"
    DEFAULT_MARGIN_PERCENT = "default_margin_percent"
    NOTES = "notes"


# Editing any of these recomputes the derived fields
PRICING_FIELDS = frozenset({
    LineItemField.QTY,
    LineItemField.CASE_COST,
    LineItemField.CASE_DISCOUNT,
    LineItemField.UNITS,
    LineItemField.UNIT_RETAIL,
})


# =============================================================================
# COERCION RULES
# =============================================================================

def coerce_text(value: Any) -> Optional[str]:
    """Store text as given; None stays None."""
    if value is None:
        return None
    return str(value)


def coerce_amount(value: Any) -> Optional[float]:
    """Finite float or None."""
    return finite_or_none(value)


def coerce_discount(value: Any) -> Optional[float]:
    """Discounts are stored as a non-negative magnitude."""
    amount = finite_or_none(value)
    if amount is None:
        return None
    return abs(amount)


def coerce_units(value: Any) -> Optional[int]:
    """Units per case are whole numbers; fractional input is rounded."""
    amount = finite_or_none(value)
    if amount is None:
        return None
    return int(round(amount))


class FieldRule(NamedTuple):
    """How one editable column is coerced and written to a row."""
    coerce: Callable[[Any], Any]
    assign: Callable[[LineItem, Any], LineItem]


FIELD_RULES: Dict[LineItemField, FieldRule] = {
    LineItemField.QTY: FieldRule(
        coerce_amount, lambda row, v: replace(row, qty=v)),
    LineItemField.ITEM_CODE: FieldRule(
        coerce_text, lambda row, v: replace(row, item_code=v)),
    LineItemField.SCAN_CODE: FieldRule(
        coerce_text, lambda row, v: replace(row, scan_code=v)),
    LineItemField.ITEM_DESCRIPTION: FieldRule(
        coerce_text, lambda row, v: replace(row, item_description=v)),
    LineItemField.DEPARTMENT: FieldRule(
        coerce_text, lambda row, v: replace(row, department=v)),
    LineItemField.PRICE_GROUP: FieldRule(
        coerce_text, lambda row, v: replace(row, price_group=v)),
    LineItemField.PRODUCT_CATEGORY: FieldRule(
        coerce_text, lambda row, v: replace(row, product_category=v)),
    LineItemField.UNITS: FieldRule(
        coerce_units, lambda row, v: replace(row, units=v)),
    LineItemField.CASE_COST: FieldRule(
        coerce_amount, lambda row, v: replace(row, case_cost=v)),
    LineItemField.CASE_DISCOUNT: FieldRule(
        coerce_discount, lambda row, v: replace(row, case_discount=v)),
    LineItemField.UNIT_RETAIL: FieldRule(
        coerce_amount, lambda row, v: replace(row, unit_retail=v)),
    LineItemField.SIZE: FieldRule(
        coerce_text, lambda row, v: replace(row, size=v)),
    LineItemField.DEFAULT_MARGIN_PERCENT: FieldRule(
        coerce_amount, lambda row, v: replace(row, default_margin_percent=v)),
    LineItemField.NOTES: FieldRule(
        coerce_text, lambda row, v: replace(row, notes=v)),
}


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def recalculate_row(row: LineItem, clear_stale_margin: bool = False) -> LineItem:
    """
    Recompute every derived field from the row's current values.

    Nulls are read as 0 and units below 1 as 1. The margin is only
    recomputed when unit retail is positive; otherwise the previous value
    is kept, or cleared to None when clear_stale_margin is set.

    Args:
        row: Row to recompute.
        clear_stale_margin: Clear the margin when retail is zero or unset.

    Returns:
        New LineItem with consistent derived fields.
    """
    units = row.effective_units
    net_case_cost = row.net_case_cost
    qty = row.qty or 0.0
    unit_retail = row.unit_retail or 0.0

    cost_per_unit = net_case_cost / units

    margin = row.calculated_margin_percent
    if unit_retail > 0:
        margin = (unit_retail - cost_per_unit) / unit_retail * 100
    elif clear_stale_margin:
        margin = None

    return replace(
        row,
        cost_per_unit_after_discount=cost_per_unit,
        extended_case_cost=qty * net_case_cost,
        extended_unit_retail=qty * units * unit_retail,
        calculated_margin_percent=margin
    )


def recalculate(
    row: LineItem,
    field: Union[LineItemField, str],
    value: Any,
    clear_stale_margin: bool = False
) -> LineItem:
    """
    Apply one cell edit and recompute dependent fields.

    Args:
        row: Current row.
        field: Edited column (enum member or its string value).
        value: New raw value from the editor.
        clear_stale_margin: See recalculate_row().

    Returns:
        New LineItem. The input row is left untouched.

    Raises:
        ValueError: If field is not an editable column.

    Example:
        >>> row = LineItem(row_index=1, qty=10, case_cost=20.0, units=1,
        ...                unit_retail=2.5)
        >>> recalculate(row, "case_discount", -2).extended_case_cost
        180.0
    """
    field = LineItemField(field)
    rule = FIELD_RULES[field]
    updated = rule.assign(row, rule.coerce(value))

    if field in PRICING_FIELDS:
        updated = recalculate_row(updated, clear_stale_margin=clear_stale_margin)

    return updated


class DerivedFieldCalculator:
    """
    Configured front end for the derived-field functions.

    Reads the stale-margin policy from configuration once and applies it
    to every edit.

    Example:
        >>> calculator = DerivedFieldCalculator()
        >>> new_row = calculator.apply_edit(row, LineItemField.QTY, 4)
    """

    def __init__(self, clear_stale_margin: Optional[bool] = None) -> None:
        """
        Initialize the calculator.

        Args:
            clear_stale_margin: Override for ledger.clear_stale_margin.
        """
        if clear_stale_margin is None:
            clear_stale_margin = get_config("ledger.clear_stale_margin", False)
        self.clear_stale_margin = bool(clear_stale_margin)

        logger.debug(
            f"DerivedFieldCalculator initialized "
            f"(clear_stale_margin={self.clear_stale_margin})"
        )

    def apply_edit(
        self,
        row: LineItem,
        field: Union[LineItemField, str],
        value: Any
    ) -> LineItem:
        """Apply one cell edit; see recalculate()."""
        return recalculate(row, field, value, clear_stale_margin=self.clear_stale_margin)

    def recalculate(self, row: LineItem) -> LineItem:
        """Recompute all derived fields; see recalculate_row()."""
        return recalculate_row(row, clear_stale_margin=self.clear_stale_margin)
