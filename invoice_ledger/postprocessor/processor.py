"""
Main Post-Processor Module.

This module provides the LedgerPostProcessor class that turns the raw
JSON payload returned by the extraction service into a typed
InvoiceData.

Operations:
    - Coerce amounts and quantities to floats
    - Normalize header dates to YYYY-MM-DD
    - Store case discounts as non-negative magnitudes
    - Clamp confidence into [0, 1]
    - Renumber rows to their array position
    - Log a summary of what was changed

Derived fields are deliberately left as extracted: a row whose source
math is inconsistent must still show up as a math error.

Author: ML Engineering Team
"""

from typing import Any, Dict, List, Optional

from invoice_ledger.models.invoice_data import InvoiceData, InvoiceHeader, LineItem
from invoice_ledger.calculator.derived_fields import coerce_units
from invoice_ledger.utils.exceptions import MalformedResponseError
from invoice_ledger.utils.logger import get_logger
from .normalizers import DateNormalizer, AmountNormalizer
from .validators import RowValidator

# Initialize module logger
logger = get_logger(__name__)


class LedgerPostProcessor:
    """
    Post-processor for extraction payloads.

    Attributes:
        date_normalizer: DateNormalizer instance
        amount_normalizer: AmountNormalizer instance
        row_validator: RowValidator used for the summary log

    Example:
        >>> processor = LedgerPostProcessor()
        >>> data = processor.process(payload)
        >>> print(data.invoice_header.invoice_total)
    """

    TEXT_FIELDS = (
        'item_code', 'scan_code', 'item_description', 'department',
        'price_group', 'product_category', 'size', 'notes'
    )
    AMOUNT_FIELDS = (
        'qty', 'case_cost', 'cost_per_unit_after_discount',
        'extended_case_cost', 'unit_retail', 'extended_unit_retail',
        'default_margin_percent', 'calculated_margin_percent'
    )

    def __init__(self) -> None:
        """Initialize the post-processor with all sub-components."""
        self.date_normalizer = DateNormalizer()
        self.amount_normalizer = AmountNormalizer()
        self.row_validator = RowValidator()

        logger.debug("LedgerPostProcessor initialized")

    def process(self, payload: Dict[str, Any]) -> InvoiceData:
        """
        Convert an extraction payload into InvoiceData.

        Args:
            payload: Parsed JSON object with invoice_header and line_items.

        Returns:
            Typed InvoiceData with rows numbered 1..N.

        Raises:
            MalformedResponseError: If payload is not an object or
                line_items is not an array.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError("payload is not a JSON object")

        raw_items = payload.get('line_items')
        if not isinstance(raw_items, list):
            raise MalformedResponseError("line_items is missing or not an array")

        raw_header = payload.get('invoice_header')
        if not isinstance(raw_header, dict):
            logger.warning("Extraction payload has no invoice_header; using blanks")
            raw_header = {}

        header = self._process_header(raw_header)

        line_items: List[LineItem] = []
        for position, raw_item in enumerate(raw_items, start=1):
            if not isinstance(raw_item, dict):
                logger.warning(f"Skipping line item {position}: not an object")
                continue
            line_items.append(self._process_line_item(raw_item, len(line_items) + 1))

        data = InvoiceData(invoice_header=header).with_line_items(line_items)

        self._log_processing_summary(data)
        return data

    def _process_header(self, raw: Dict[str, Any]) -> InvoiceHeader:
        """Normalize header fields."""
        page_count = coerce_units(raw.get('page_count'))

        return InvoiceHeader(
            vendor_name=self._clean_text(raw.get('vendor_name')),
            invoice_number=self._clean_text(raw.get('invoice_number')),
            invoice_date=self._normalize_date('invoice_date', raw.get('invoice_date')),
            delivery_date=self._normalize_date('delivery_date', raw.get('delivery_date')),
            invoice_total=self.amount_normalizer.normalize(raw.get('invoice_total')),
            page_count=page_count if page_count and page_count > 0 else 1
        )

    def _process_line_item(self, raw: Dict[str, Any], row_index: int) -> LineItem:
        """Coerce one raw row without recomputing its derived fields."""
        text = {name: self._clean_text(raw.get(name)) for name in self.TEXT_FIELDS}
        amounts = {
            name: self.amount_normalizer.normalize(raw.get(name))
            for name in self.AMOUNT_FIELDS
        }

        case_discount = self.amount_normalizer.normalize(raw.get('case_discount'))
        if case_discount is not None and case_discount < 0:
            logger.debug(f"Row {row_index}: negative case_discount stored as magnitude")
            case_discount = abs(case_discount)

        return LineItem(
            row_index=row_index,
            units=coerce_units(self.amount_normalizer.normalize(raw.get('units'))),
            case_discount=case_discount,
            confidence=self._clamp_confidence(raw.get('confidence')),
            **text,
            **amounts
        )

    def _normalize_date(self, name: str, value: Any) -> Optional[str]:
        """Normalize a header date, logging values that cannot be parsed."""
        if value in (None, ""):
            return None
        normalized = self.date_normalizer.normalize(value)
        if normalized is None:
            logger.warning(f"Could not normalize {name}: {value!r}")
        elif normalized != value:
            logger.debug(f"Normalized {name}: '{value}' -> '{normalized}'")
        return normalized

    def _clamp_confidence(self, value: Any) -> float:
        """Confidence in [0, 1]; missing or unparseable reads as 0."""
        confidence = self.amount_normalizer.normalize(value)
        if confidence is None:
            return 0.0
        return min(max(confidence, 0.0), 1.0)

    @staticmethod
    def _clean_text(value: Any) -> Optional[str]:
        """
        Collapse whitespace in a text field.

        Numbers are kept as their string form so numeric item codes
        survive a service that drops the quotes.
        """
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return ' '.join(str(value).split())

    def _log_processing_summary(self, data: InvoiceData) -> None:
        """Log row count and advisory flags for the processed invoice."""
        results = self.row_validator.validate_all(data.line_items)
        math_errors = sum(1 for r in results if r.math_error)
        missing = sum(1 for r in results if r.critical_field_missing)

        logger.info(
            f"Post-processing complete: "
            f"{data.row_count} rows, "
            f"{math_errors} math errors, "
            f"{missing} rows missing critical fields"
        )
