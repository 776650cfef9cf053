"""Tests for the text ledger report."""

from invoice_ledger.models import InvoiceData, InvoiceHeader
from invoice_ledger.output_handler import LedgerReport
from invoice_ledger.utils.helpers import format_money


def test_format_money():
    assert format_money(None) == ""
    assert format_money(0) == "$0.00"
    assert format_money(1234.5) == "$1234.50"
    assert format_money(-20) == "-$20.00"


def test_matching_invoice(sample_invoice):
    text = LedgerReport(colorize=False).render(sample_invoice)

    assert "Inv #: INV-1001" in text
    assert "Vendor: Frito Lay" in text
    assert "Total Items: 3 | Calculated Sum: $500.00 | Invoice Total: $500.00 | Match" in text
    assert "\x1b[" not in text


def test_mismatch_shows_signed_difference(sample_invoice):
    data = sample_invoice.with_line_items(sample_invoice.line_items[:2])
    text = LedgerReport(colorize=False).render(data)

    assert "Diff: -$150.00" in text


def test_no_invoice_total_has_no_badge(make_row):
    data = InvoiceData.empty().with_line_items([make_row(extended_case_cost=5.0)])
    footer = LedgerReport(colorize=False).render(data).splitlines()[-1]

    assert footer == "Total Items: 1 | Calculated Sum: $5.00"


def test_empty_invoice():
    data = InvoiceData(invoice_header=InvoiceHeader(invoice_total=10.0))
    text = LedgerReport(colorize=False).render(data)

    assert "No line items found." in text
    assert "Inv #: N/A" in text


def test_row_flags(make_row):
    data = InvoiceData.empty().with_line_items([
        make_row(item_code=None, qty=2, case_cost=5.0, extended_case_cost=99.0,
                 confidence=0.2),
    ])
    report = LedgerReport(colorize=False)
    line = report.render(data).splitlines()[4]

    assert "MATH MISSING" in line
    assert "!!" in line


def test_colorized_error_row(make_row):
    data = InvoiceData.empty().with_line_items([make_row(item_description="")])
    text = LedgerReport(colorize=True).render(data)

    assert "\x1b[31m" in text
