"""
Post-Processing Module for the Invoice Ledger.

This module provides functionality for:
    - Coercing extraction payloads into typed InvoiceData
    - Date and amount normalization
    - Advisory per-row validation (math errors, missing identifiers)

Author: ML Engineering Team
"""

from .processor import LedgerPostProcessor
from .validators import RowValidator, RowValidationResult, confidence_level, is_low_margin
from .normalizers import DateNormalizer, AmountNormalizer

__all__ = [
    'LedgerPostProcessor',
    'RowValidator',
    'RowValidationResult',
    'confidence_level',
    'is_low_margin',
    'DateNormalizer',
    'AmountNormalizer'
]
