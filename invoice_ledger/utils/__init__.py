"""
Utility Module for the Invoice Ledger.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - Common helpers
"""

from .logger import setup_logger, get_logger
from .helpers import (
    get_file_extension,
    finite_or_none,
    format_money
)

__all__ = [
    'setup_logger',
    'get_logger',
    'get_file_extension',
    'finite_or_none',
    'format_money'
]
