"""
Totals Reconciler Module.

Compares the sum of the rows' extended case costs with the total printed
on the invoice, and computes the footer aggregates.

A mismatch is reported as a value (status plus signed difference). It
is never corrected and never raised.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Dict, Any

from config import get_config
from invoice_ledger.models.invoice_data import InvoiceData, LineItem
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Decimal places kept in a difference before it is compared with the tolerance
DIFFERENCE_PRECISION = 6


class MatchStatus(str, Enum):
    """Outcome of comparing the row sum with the printed total."""

    MATCHED = "matched"
    MISMATCHED = "mismatched"
    NOT_EVALUATED = "not_evaluated"


@dataclass(frozen=True)
class TotalsSummary:
    """
    Footer summary for one invoice.

    Attributes:
        item_count: Number of rows
        total_quantity: Sum of qty
        total_units: Sum of units per case
        total_case_cost: Sum of case cost
        calculated_total: Sum of extended case cost
        invoice_total: Printed total, when one was found
        status: MATCHED, MISMATCHED or NOT_EVALUATED
        difference: calculated_total - invoice_total (signed), when evaluated
    """
    item_count: int
    total_quantity: float
    total_units: float
    total_case_cost: float
    calculated_total: float
    invoice_total: Optional[float]
    status: MatchStatus
    difference: Optional[float] = None

    @property
    def is_evaluated(self) -> bool:
        """A printed total was available to compare against."""
        return self.status is not MatchStatus.NOT_EVALUATED

    @property
    def is_match(self) -> bool:
        """Row sum agrees with the printed total."""
        return self.status is MatchStatus.MATCHED

    @property
    def discrepancy(self) -> Optional[float]:
        """Absolute difference, when evaluated."""
        if self.difference is None:
            return None
        return abs(self.difference)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'item_count': self.item_count,
            'total_quantity': self.total_quantity,
            'total_units': self.total_units,
            'total_case_cost': self.total_case_cost,
            'calculated_total': self.calculated_total,
            'invoice_total': self.invoice_total,
            'status': self.status.value,
            'difference': self.difference
        }


class TotalsReconciler:
    """
    Reconciles line-item totals against the invoice header total.

    The match test is strict: a discrepancy equal to the tolerance is a
    mismatch.

    Example:
        >>> reconciler = TotalsReconciler()
        >>> summary = reconciler.reconcile(data.line_items, 500.00)
        >>> summary.status
        <MatchStatus.MATCHED: 'matched'>
    """

    def __init__(self, tolerance: Optional[float] = None) -> None:
        """
        Initialize the reconciler.

        Args:
            tolerance: Override for ledger.total_tolerance.
        """
        if tolerance is None:
            tolerance = get_config("ledger.total_tolerance", 0.05)
        self.tolerance = float(tolerance)

        logger.debug(f"TotalsReconciler initialized (tolerance: {self.tolerance})")

    def reconcile(
        self,
        line_items: Sequence[LineItem],
        invoice_total: Optional[float]
    ) -> TotalsSummary:
        """
        Compute footer aggregates and the match classification.

        The signed difference is rounded to DIFFERENCE_PRECISION (6)
        decimals before the strict comparison, so amounts are compared
        to the millionth: a true gap of 0.0499999990 reads as 0.05 and
        is a mismatch at the default tolerance.

        Args:
            line_items: Rows in display order.
            invoice_total: Printed total; None or <= 0 skips matching.

        Returns:
            TotalsSummary for the rows.
        """
        calculated_total = sum((item.extended_case_cost or 0.0) for item in line_items)

        status = MatchStatus.NOT_EVALUATED
        difference = None
        if invoice_total is not None and invoice_total > 0:
            difference = round(calculated_total - invoice_total, DIFFERENCE_PRECISION)
            if abs(difference) < self.tolerance:
                status = MatchStatus.MATCHED
            else:
                status = MatchStatus.MISMATCHED

        return TotalsSummary(
            item_count=len(line_items),
            total_quantity=sum((item.qty or 0.0) for item in line_items),
            total_units=sum((item.units or 0) for item in line_items),
            total_case_cost=sum((item.case_cost or 0.0) for item in line_items),
            calculated_total=calculated_total,
            invoice_total=invoice_total,
            status=status,
            difference=difference
        )

    def reconcile_invoice(self, data: InvoiceData) -> TotalsSummary:
        """Reconcile an InvoiceData against its own header total."""
        summary = self.reconcile(data.line_items, data.invoice_header.invoice_total)

        if summary.status is MatchStatus.MISMATCHED:
            logger.info(
                f"Invoice {data.invoice_header.invoice_number or 'N/A'}: "
                f"row sum {summary.calculated_total:.2f} differs from "
                f"printed total {summary.invoice_total:.2f} "
                f"by {summary.difference:.2f}"
            )

        return summary
