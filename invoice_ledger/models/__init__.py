"""
Ledger Data Model.

Immutable dataclasses for the invoice header, editable line items and
the InvoiceData value that carries both through every edit.
"""

from .invoice_data import InvoiceHeader, LineItem, InvoiceData

__all__ = ['InvoiceHeader', 'LineItem', 'InvoiceData']
