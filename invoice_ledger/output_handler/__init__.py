"""
Output Handler Module for the Invoice Ledger.

Text rendering of the ledger table and totals footer.
"""

from .report import LedgerReport

__all__ = ['LedgerReport']
