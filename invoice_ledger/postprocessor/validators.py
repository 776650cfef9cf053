"""
Row Validators Module.

This module provides the advisory checks run on every ledger row:
    - Math error: stored extended cost disagrees with qty * net case cost
    - Critical field missing: no item code or no description
    - Low confidence and low margin warnings for display

Validation never blocks an edit and never raises. Results are values that
are recomputed from the current row on every render.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Sequence

from config import get_config
from invoice_ledger.models.invoice_data import LineItem
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


CONFIDENCE_HIGH = "high"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_LOW = "low"


def confidence_level(
    confidence: Optional[float],
    high: float = 0.8,
    medium: float = 0.5
) -> str:
    """
    Bucket a row confidence for the indicator column.

    Example:
        >>> confidence_level(0.9)
        'high'
        >>> confidence_level(0.5)
        'low'
    """
    value = confidence or 0.0
    if value > high:
        return CONFIDENCE_HIGH
    if value > medium:
        return CONFIDENCE_MEDIUM
    return CONFIDENCE_LOW


def is_low_margin(row: LineItem, threshold: float = 20.0) -> bool:
    """True when the calculated margin (null read as 0) is below threshold."""
    return (row.calculated_margin_percent or 0.0) < threshold


def _is_blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() == ""


@dataclass
class RowValidationResult:
    """
    Contains the result of validating one row.

    Attributes:
        row_index: Display index of the validated row
        math_error: Stored extended cost disagrees with the recomputed one
        missing_fields: Critical identifiers that are empty
        expected_extended_cost: Independently recomputed extended cost
        errors: Error messages (drive the red row flag)
        warnings: Advisory messages (confidence, margin)
        confidence_level: 'high', 'medium' or 'low'
        low_margin: Margin below the configured threshold
    """
    row_index: int
    math_error: bool = False
    missing_fields: List[str] = field(default_factory=list)
    expected_extended_cost: float = 0.0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    confidence_level: str = CONFIDENCE_HIGH
    low_margin: bool = False

    @property
    def critical_field_missing(self) -> bool:
        """Item code or description is empty."""
        return bool(self.missing_fields)

    @property
    def has_error(self) -> bool:
        """Row should be flagged as erroneous."""
        return self.math_error or self.critical_field_missing

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect the error flag)."""
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'row_index': self.row_index,
            'has_error': self.has_error,
            'math_error': self.math_error,
            'critical_field_missing': self.critical_field_missing,
            'missing_fields': list(self.missing_fields),
            'expected_extended_cost': self.expected_extended_cost,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'confidence_level': self.confidence_level,
            'low_margin': self.low_margin
        }


class RowValidator:
    """
    Advisory validation for ledger rows.

    Validates:
        - Row arithmetic against an independent recomputation
        - Presence of item code and description
        - Confidence and margin levels (warnings only)

    Example:
        >>> validator = RowValidator()
        >>> result = validator.validate(row)
        >>> print(result.has_error)
        >>> print(result.errors)
    """

    CRITICAL_FIELDS = ('item_code', 'item_description')

    def __init__(self, tolerance: Optional[float] = None) -> None:
        """
        Initialize the row validator.

        Args:
            tolerance: Override for ledger.row_tolerance.
        """
        if tolerance is None:
            tolerance = get_config("ledger.row_tolerance", 0.05)
        self.tolerance = float(tolerance)
        self.low_margin_percent = float(
            get_config("ledger.low_margin_percent", 20.0)
        )
        self.confidence_high = float(get_config("ledger.confidence.high", 0.8))
        self.confidence_medium = float(get_config("ledger.confidence.medium", 0.5))

        logger.debug(f"RowValidator initialized (tolerance: {self.tolerance})")

    def expected_extended_cost(self, row: LineItem) -> float:
        """Recompute qty * (case_cost - case_discount) with nulls as 0."""
        return (row.qty or 0.0) * row.net_case_cost

    def check_math(self, row: LineItem) -> bool:
        """
        Check the stored extended cost against the recomputed value.

        The gap is rounded to 6 decimals before it is compared, so a
        gap of 0.0500000004 reads as 0.05 and is not an error at the
        default tolerance.

        Returns:
            True if the difference exceeds the tolerance.
        """
        stored = row.extended_case_cost or 0.0
        difference = round(abs(stored - self.expected_extended_cost(row)), 6)
        return difference > self.tolerance

    def check_critical_fields(self, row: LineItem) -> List[str]:
        """
        Check the identifiers every row needs.

        Returns:
            Names of the critical fields that are null or blank.
        """
        values = {
            'item_code': row.item_code,
            'item_description': row.item_description,
        }
        return [name for name in self.CRITICAL_FIELDS if _is_blank(values[name])]

    def validate(self, row: LineItem) -> RowValidationResult:
        """
        Validate a single row.

        Args:
            row: Row to validate.

        Returns:
            RowValidationResult with error flags and messages.
        """
        expected = self.expected_extended_cost(row)
        result = RowValidationResult(
            row_index=row.row_index,
            expected_extended_cost=expected,
            confidence_level=confidence_level(
                row.confidence, self.confidence_high, self.confidence_medium
            ),
            low_margin=is_low_margin(row, self.low_margin_percent)
        )

        if self.check_math(row):
            result.math_error = True
            result.add_error(
                f"Math error: extended cost {row.extended_case_cost or 0.0:.2f} "
                f"!= qty x net case cost {expected:.2f}"
            )

        for name in self.check_critical_fields(row):
            result.missing_fields.append(name)
            result.add_error(f"Critical field missing: {name}")

        if result.confidence_level == CONFIDENCE_LOW:
            result.add_warning(
                f"Low confidence ({row.confidence:.2f}) - check this row"
            )
        if result.low_margin:
            result.add_warning(
                f"Margin {row.calculated_margin_percent or 0.0:.1f}% "
                f"below {self.low_margin_percent:.0f}%"
            )

        return result

    def validate_all(self, line_items: Sequence[LineItem]) -> List[RowValidationResult]:
        """
        Validate every row of a collection.

        Args:
            line_items: Rows in display order.

        Returns:
            One RowValidationResult per row, in the same order.
        """
        results = [self.validate(row) for row in line_items]

        flagged = sum(1 for r in results if r.has_error)
        if flagged:
            logger.debug(f"{flagged}/{len(results)} rows flagged")

        return results
