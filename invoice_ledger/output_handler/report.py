"""
Ledger Report Module.

Renders the ledger table and its totals footer as plain text for the
command line: one line per row with its confidence and error flags, then
the calculated sum, the printed total and a Match / Diff badge.

Author: ML Engineering Team
"""

from typing import List, Optional, Sequence, Tuple

from colorama import Fore, Style

from invoice_ledger.models.invoice_data import InvoiceData, LineItem
from invoice_ledger.postprocessor.validators import (
    RowValidator,
    RowValidationResult,
    CONFIDENCE_HIGH,
    CONFIDENCE_MEDIUM
)
from invoice_ledger.reconciler.totals import TotalsReconciler, TotalsSummary, MatchStatus
from invoice_ledger.utils.helpers import format_money
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class LedgerReport:
    """
    Text rendering of an invoice ledger.

    Attributes:
        validator: RowValidator for the per-row flags
        reconciler: TotalsReconciler for the footer
        colorize: Whether to emit colorama color codes

    Example:
        >>> report = LedgerReport(colorize=False)
        >>> print(report.render(data))
    """

    # (header, width, right-aligned)
    COLUMNS = [
        ('#', 3, True),
        ('Conf', 4, False),
        ('Qty', 7, True),
        ('Item Code', 12, False),
        ('Scan Code', 14, False),
        ('Description', 28, False),
        ('Dept', 10, False),
        ('Units', 5, True),
        ('Case Cost', 10, True),
        ('Disc', 8, True),
        ('Ext Cost', 11, True),
        ('Retail', 8, True),
        ('Margin %', 9, True),
        ('Flags', 12, False),
    ]

    CONFIDENCE_MARKS = {
        CONFIDENCE_HIGH: 'ok',
        CONFIDENCE_MEDIUM: '~',
    }

    def __init__(
        self,
        validator: Optional[RowValidator] = None,
        reconciler: Optional[TotalsReconciler] = None,
        colorize: bool = True
    ) -> None:
        """Initialize the report renderer."""
        self.validator = validator or RowValidator()
        self.reconciler = reconciler or TotalsReconciler()
        self.colorize = colorize

    def _paint(self, text: str, color: str) -> str:
        if not self.colorize:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    @staticmethod
    def _cell(value: str, width: int, right: bool) -> str:
        value = value if len(value) <= width else value[:width - 1] + '…'
        return value.rjust(width) if right else value.ljust(width)

    def _format_number(self, value: Optional[float]) -> str:
        if value is None:
            return ''
        return f"{value:g}"

    def render_header(self, data: InvoiceData) -> str:
        """Invoice number, date and vendor line."""
        header = data.invoice_header
        return (
            f"Inv #: {header.invoice_number or 'N/A'}   "
            f"Date: {header.invoice_date or 'N/A'}   "
            f"Vendor: {header.vendor_name or 'N/A'}"
        )

    def render_row(self, row: LineItem, check: RowValidationResult) -> str:
        """Render one table line."""
        flags = []
        if check.math_error:
            flags.append('MATH')
        if check.critical_field_missing:
            flags.append('MISSING')

        values = [
            str(row.row_index),
            self.CONFIDENCE_MARKS.get(check.confidence_level, '!!'),
            self._format_number(row.qty),
            row.item_code or '',
            row.scan_code or '',
            row.item_description or '',
            row.department or '',
            self._format_number(row.units),
            format_money(row.case_cost),
            format_money(row.case_discount) or '-',
            format_money(row.extended_case_cost or 0.0),
            format_money(row.unit_retail),
            f"{row.calculated_margin_percent or 0.0:.1f}%",
            ' '.join(flags),
        ]
        line = ' '.join(
            self._cell(value, width, right)
            for value, (_, width, right) in zip(values, self.COLUMNS)
        )

        if check.has_error:
            return self._paint(line, Fore.RED)
        if check.low_margin:
            return self._paint(line, Fore.YELLOW)
        return line

    def render_rows(self, rows: Sequence[Tuple[LineItem, RowValidationResult]]) -> List[str]:
        """Render the column header and every row."""
        header = ' '.join(
            self._cell(name, width, right) for name, width, right in self.COLUMNS
        )
        lines = [header, '-' * len(header)]
        if not rows:
            lines.append('No line items found.')
        lines.extend(self.render_row(row, check) for row, check in rows)
        return lines

    def render_footer(self, summary: TotalsSummary) -> str:
        """Totals footer with the Match / Diff badge."""
        parts = [
            f"Total Items: {summary.item_count}",
            f"Calculated Sum: {format_money(summary.calculated_total)}",
        ]

        if summary.is_evaluated:
            parts.append(f"Invoice Total: {format_money(summary.invoice_total)}")
            if summary.status is MatchStatus.MATCHED:
                parts.append(self._paint('Match', Fore.GREEN))
            else:
                parts.append(self._paint(f"Diff: {format_money(summary.difference)}", Fore.RED))

        return ' | '.join(parts)

    def render(self, data: InvoiceData) -> str:
        """
        Render header, table and footer.

        Validation and totals are computed here from the snapshot passed
        in; nothing is cached between renders.
        """
        rows = list(zip(data.line_items, self.validator.validate_all(data.line_items)))
        summary = self.reconciler.reconcile_invoice(data)

        lines = [self.render_header(data), '']
        lines.extend(self.render_rows(rows))
        lines.extend(['', self.render_footer(summary)])

        return '\n'.join(lines)
