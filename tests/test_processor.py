"""Tests for extraction payload post-processing."""

import pytest

from invoice_ledger.postprocessor import AmountNormalizer, DateNormalizer, LedgerPostProcessor
from invoice_ledger.utils.exceptions import MalformedResponseError


@pytest.fixture
def processor():
    return LedgerPostProcessor()


class TestAmountNormalizer:

    @pytest.mark.parametrize("raw,expected", [
        (12, 12.0),
        (4.5, 4.5),
        ("$1,234.56", 1234.56),
        ("1,234", 1234.0),
        ("(5.00)", -5.0),
        ("5.00-", -5.0),
        ("-3.25", -3.25),
        ("1.234,56", 1234.56),
        ("12,5 EUR", 12.5),
    ])
    def test_parses_amounts(self, raw, expected):
        assert AmountNormalizer().normalize(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "N/A", True, float("inf"), float("nan"), [1]])
    def test_rejects_non_amounts(self, raw):
        assert AmountNormalizer().normalize(raw) is None


class TestDateNormalizer:

    @pytest.mark.parametrize("raw", [
        "2026-01-15",
        "01/15/2026",
        "01/15/26",
        "January 15, 2026",
        "Jan 15th, 2026",
        "Invoice Date: 01/15/2026",
    ])
    def test_normalizes_to_iso(self, raw):
        assert DateNormalizer().normalize(raw) == "2026-01-15"

    @pytest.mark.parametrize("raw", [None, "", "xyz", 20260115])
    def test_unparseable_dates(self, raw):
        assert DateNormalizer().normalize(raw) is None


class TestLedgerPostProcessor:

    def test_header(self, processor, raw_payload):
        header = processor.process(raw_payload).invoice_header

        assert header.vendor_name == "Frito Lay"
        assert header.invoice_number == "INV-1001"
        assert header.invoice_date == "2026-01-15"
        assert header.delivery_date is None
        assert header.invoice_total == 500.0
        assert header.page_count == 2

    def test_rows_are_renumbered(self, processor, raw_payload):
        data = processor.process(raw_payload)
        assert [r.row_index for r in data.line_items] == [1, 2]

    def test_row_coercion(self, processor, raw_payload):
        first, second = processor.process(raw_payload).line_items

        assert first.case_discount == 2.0
        assert first.item_code == "00025190"
        assert first.units == 12
        assert second.units == 6
        assert second.case_cost == 15.0
        assert second.case_discount is None
        assert second.confidence == 1.0

    def test_derived_fields_are_kept_as_extracted(self, processor, raw_payload):
        from invoice_ledger.postprocessor import RowValidator

        data = processor.process(raw_payload)
        second = data.line_items[1]

        assert second.extended_case_cost == 25.0
        assert RowValidator().validate(second).math_error

    def test_numeric_codes_keep_their_digits(self, processor):
        data = processor.process({'line_items': [{'item_code': 25190.0, 'scan_code': 7}]})

        assert data.line_items[0].item_code == "25190"
        assert data.line_items[0].scan_code == "7"

    def test_missing_header_uses_blanks(self, processor):
        data = processor.process({'line_items': []})

        assert data.row_count == 0
        assert data.invoice_header.invoice_total is None
        assert data.invoice_header.page_count == 1

    def test_non_object_rows_are_skipped(self, processor):
        data = processor.process({'line_items': ["junk", {'qty': 1}, None]})

        assert data.row_count == 1
        assert data.line_items[0].row_index == 1

    def test_missing_confidence_reads_as_zero(self, processor):
        data = processor.process({'line_items': [{'qty': 1, 'confidence': -0.4}, {'qty': 2}]})
        assert [r.confidence for r in data.line_items] == [0.0, 0.0]

    @pytest.mark.parametrize("payload", [
        [],
        "text",
        {'invoice_header': {}},
        {'line_items': {'qty': 1}},
    ])
    def test_malformed_payloads(self, processor, payload):
        with pytest.raises(MalformedResponseError):
            processor.process(payload)
