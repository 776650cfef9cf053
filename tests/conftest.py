"""Shared fixtures for the invoice ledger tests."""

import pytest

from config import ConfigurationManager
from invoice_ledger.models import InvoiceData, InvoiceHeader, LineItem


@pytest.fixture(autouse=True)
def reset_config():
    """Each test starts from the bundled settings.yaml."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def make_row():
    """Factory for line items with sensible identifiers."""
    def _make_row(**overrides):
        values = {
            'row_index': 1,
            'item_code': 'ITEM-1',
            'item_description': 'Widget',
            'confidence': 0.95,
        }
        values.update(overrides)
        return LineItem(**values)
    return _make_row


@pytest.fixture
def priced_row(make_row):
    """Scenario row: 10 cases at 20.00 less 2.00, retail 2.50."""
    return make_row(
        qty=10,
        units=1,
        case_cost=20.00,
        case_discount=2.00,
        unit_retail=2.50,
    )


@pytest.fixture
def sample_invoice(make_row):
    """Three consistent rows summing to the printed 500.00 total."""
    header = InvoiceHeader(
        vendor_name="Frito Lay",
        invoice_number="INV-1001",
        invoice_date="2026-01-15",
        invoice_total=500.00,
        page_count=1,
    )
    rows = [
        make_row(item_code='A', qty=10, units=12, case_cost=20.00,
                 case_discount=0.0, extended_case_cost=200.00),
        make_row(item_code='B', qty=5, units=6, case_cost=30.00,
                 case_discount=0.0, extended_case_cost=150.00),
        make_row(item_code='C', qty=3, units=24, case_cost=52.00,
                 case_discount=2.00, extended_case_cost=150.00),
    ]
    return InvoiceData(invoice_header=header).with_line_items(rows)


@pytest.fixture
def raw_payload():
    """Extraction service answer, as loosely typed as it arrives."""
    return {
        'invoice_header': {
            'vendor_name': '  Frito   Lay ',
            'invoice_number': 'INV-1001',
            'invoice_date': '01/15/2026',
            'delivery_date': None,
            'invoice_total': '$500.00',
            'page_count': 2,
        },
        'line_items': [
            {
                'row_index': 7,
                'qty': 10,
                'item_code': '00025190',
                'scan_code': '284002686',
                'item_description': 'Doritos Nacho 9.25oz',
                'department': 'Snacks',
                'units': 12,
                'case_cost': 20.0,
                'case_discount': -2.0,
                'cost_per_unit_after_discount': 1.5,
                'extended_case_cost': 180.0,
                'unit_retail': 2.5,
                'extended_unit_retail': 300.0,
                'calculated_margin_percent': 40.0,
                'confidence': 0.92,
                'notes': None,
            },
            {
                'row_index': 8,
                'qty': -1,
                'item_code': 'RET-1',
                'item_description': 'Return - Cheetos',
                'units': '6',
                'case_cost': '15.00',
                'case_discount': None,
                'extended_case_cost': 25.0,
                'confidence': 1.7,
            },
        ],
    }
