"""
Data Normalizers Module.

This module provides normalization functions for values arriving from
the extraction service:
    - Date formats (to YYYY-MM-DD)
    - Currency/amount values (to float)

The service is asked for typed JSON, but a best-effort guess can still
carry "$1,234.56", "(5.00)" or "01/15/2026".

Author: ML Engineering Team
"""

import re
from datetime import datetime
from typing import Any, Optional
from dateutil import parser as date_parser

from config import get_config
from invoice_ledger.utils.helpers import finite_or_none
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date strings to a standard format.

    Attributes:
        output_format: Target date format string
        input_formats: List of recognized input format strings

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("01/15/2026")
        '2026-01-15'
        >>> normalizer.normalize("January 15, 2026")
        '2026-01-15'
    """

    def __init__(self) -> None:
        """Initialize the date normalizer with configuration."""
        self.output_format = get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        self.input_formats = get_config(
            "postprocessing.date.input_formats",
            [
                "%Y-%m-%d",
                "%m/%d/%Y",
                "%m/%d/%y",
                "%m-%d-%Y",
                "%B %d, %Y",
                "%b %d, %Y"
            ]
        )

        logger.debug(f"DateNormalizer initialized (output: {self.output_format})")

    def normalize(self, date_str: Any) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Args:
            date_str: Input date string in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        if not date_str or not isinstance(date_str, str):
            return None

        date_str = self._clean_date_string(date_str)
        if not date_str:
            return None

        parsed_date = self._try_explicit_formats(date_str)

        if parsed_date is None:
            parsed_date = self._try_dateutil_parser(date_str)

        if parsed_date:
            return parsed_date.strftime(self.output_format)

        logger.debug(f"Could not parse date: {date_str}")
        return None

    def _clean_date_string(self, date_str: str) -> str:
        """
        Clean and prepare date string for parsing.

        Args:
            date_str: Raw date string.

        Returns:
            Cleaned date string.
        """
        date_str = ' '.join(date_str.split())

        prefixes = ['invoice date:', 'delivery date:', 'date:', 'dated:']
        for prefix in prefixes:
            if date_str.lower().startswith(prefix):
                date_str = date_str[len(prefix):].strip()

        # Ordinal suffixes (1st, 2nd, 3rd, 4th)
        date_str = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)

        return date_str.strip()

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        """
        Try to parse date using explicit format strings.
        """
        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        """
        Try to parse date using dateutil (US month-first order).
        """
        try:
            return date_parser.parse(date_str, dayfirst=False)
        except (ValueError, OverflowError):
            return None


class AmountNormalizer:
    """
    Normalizes currency/amount values to floats.

    Handles numbers, currency symbols, thousand separators, European
    decimal commas and the accounting notations for negatives
    ("(5.00)" and "5.00-").

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("$1,234.56")
        1234.56
        >>> normalizer.normalize("(5.00)")
        -5.0
    """

    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹']
    CURRENCY_CODES = ['USD', 'EUR', 'GBP', 'CAD']

    def __init__(self) -> None:
        """Initialize the amount normalizer with configuration."""
        self.decimal_separator = get_config(
            "postprocessing.amount.decimal_separator",
            "."
        )
        self.thousands_separator = get_config(
            "postprocessing.amount.thousands_separator",
            ","
        )

        logger.debug("AmountNormalizer initialized")

    def normalize(self, value: Any) -> Optional[float]:
        """
        Normalize an amount to a finite float.

        Args:
            value: Number or amount string (e.g., "$1,234.56").

        Returns:
            Float value, or None if the value is null, non-finite or
            cannot be parsed.
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            return finite_or_none(value)

        if not isinstance(value, str):
            return None

        amount_str = value.strip()
        if not amount_str:
            return None

        negative = False
        if amount_str.startswith('(') and amount_str.endswith(')'):
            negative = True
            amount_str = amount_str[1:-1]
        elif amount_str.endswith('-'):
            negative = True
            amount_str = amount_str[:-1]

        amount_str = self._clean_amount_string(amount_str)
        if not amount_str:
            return None

        amount_str = self._handle_european_format(amount_str)
        amount_str = amount_str.replace(self.thousands_separator, '')

        number = finite_or_none(amount_str)
        if number is None:
            logger.debug(f"Could not parse amount: {value!r}")
            return None

        return -abs(number) if negative else number

    def _clean_amount_string(self, amount_str: str) -> str:
        """
        Strip currency markers and anything that is not part of a number.
        """
        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES:
            amount_str = re.sub(rf'\b{code}\b', '', amount_str, flags=re.IGNORECASE)

        # Keep only digits, comma, dot, and minus
        amount_str = re.sub(r'[^\d,.\-]', '', amount_str)

        return amount_str.strip()

    def _handle_european_format(self, amount_str: str) -> str:
        """
        Convert European format (comma decimal) to US format (dot decimal).
        """
        if amount_str.count(',') == 1:
            comma_pos = amount_str.rfind(',')
            dot_pos = amount_str.rfind('.')

            if comma_pos > dot_pos:
                after_comma = amount_str[comma_pos + 1:]
                if len(after_comma) <= 2 and after_comma.isdigit():
                    amount_str = amount_str.replace('.', '')
                    amount_str = amount_str.replace(',', '.')

        return amount_str
