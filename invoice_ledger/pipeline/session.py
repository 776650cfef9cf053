"""
Invoice Session Module.

Holds the current InvoiceData snapshot for one invoice and walks it
through its lifecycle:

    EMPTY --extract ok--> LOADED --edit/add/delete--> LOADED
      |                     |
      +--extract fails--> FAILED      reset() returns to EMPTY

A failed extraction replaces whatever was shown with an error message; it
never leaves a half-applied payload behind.

Author: ML Engineering Team
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

from invoice_ledger.models.invoice_data import InvoiceData, LineItem
from invoice_ledger.calculator.derived_fields import LineItemField
from invoice_ledger.postprocessor.validators import RowValidator, RowValidationResult
from invoice_ledger.reconciler.totals import TotalsReconciler, TotalsSummary
from invoice_ledger.utils.logger import get_logger
from .mutations import Action, AddRow, DeleteRow, EditRow, MutationPipeline

# Initialize module logger
logger = get_logger(__name__)


class SessionState(str, Enum):
    """Where the session is in the invoice lifecycle."""

    EMPTY = "empty"
    LOADED = "loaded"
    FAILED = "failed"


class InvoiceSession:
    """
    Single-invoice editing session.

    Edits are serialized by the caller: each dispatch() runs against the
    latest snapshot and replaces it.

    Attributes:
        data: Current snapshot
        state: SessionState
        error: Message of the last extraction failure, if any

    Example:
        >>> session = InvoiceSession()
        >>> session.run_extraction(lambda: client.extract(doc, "application/pdf"))
        >>> session.edit(0, "qty", 4)
        >>> for row, check in session.rows():
        ...     print(row.row_index, check.has_error)
    """

    def __init__(
        self,
        pipeline: Optional[MutationPipeline] = None,
        validator: Optional[RowValidator] = None,
        reconciler: Optional[TotalsReconciler] = None
    ) -> None:
        """Initialize an empty session."""
        self.pipeline = pipeline or MutationPipeline()
        self.validator = validator or RowValidator()
        self.reconciler = reconciler or TotalsReconciler()

        self.data: InvoiceData = InvoiceData.empty()
        self.state = SessionState.EMPTY
        self.error: Optional[str] = None

    def load(self, data: InvoiceData) -> InvoiceData:
        """Replace the snapshot wholesale with an extraction result."""
        self.data = data
        self.state = SessionState.LOADED
        self.error = None
        logger.info(f"Loaded {data!r}")
        return self.data

    def run_extraction(self, extract: Callable[[], InvoiceData]) -> InvoiceData:
        """
        Run an extraction call and load its result.

        Args:
            extract: Zero-argument callable performing the request.

        Returns:
            The loaded snapshot.

        Raises:
            Exception: Whatever extract raised (normally an ExtractionError),
                re-raised after the session has moved to FAILED.
        """
        try:
            data = extract()
        except Exception as exc:
            self.fail(str(exc))
            raise
        return self.load(data)

    def fail(self, message: str) -> None:
        """Drop the snapshot and record an extraction failure."""
        self.data = InvoiceData.empty()
        self.state = SessionState.FAILED
        self.error = message
        logger.error(f"Extraction failed: {message}")

    def reset(self) -> None:
        """Discard everything (reset / upload another)."""
        self.data = InvoiceData.empty()
        self.state = SessionState.EMPTY
        self.error = None

    def dispatch(self, action: Action) -> InvoiceData:
        """Apply an action to the current snapshot and keep the result."""
        self.data = self.pipeline.apply(self.data, action)
        return self.data

    def edit(self, position: int, field: Union[LineItemField, str], value: Any) -> InvoiceData:
        """Shortcut for dispatch(EditRow(...))."""
        return self.dispatch(EditRow(position, field, value))

    def delete(self, position: int) -> InvoiceData:
        """Shortcut for dispatch(DeleteRow(...))."""
        return self.dispatch(DeleteRow(position))

    def add(self) -> InvoiceData:
        """Shortcut for dispatch(AddRow())."""
        return self.dispatch(AddRow())

    def recalculate_all(self) -> InvoiceData:
        """Recompute derived fields of every row from their inputs."""
        calculator = self.pipeline.calculator
        self.data = self.data.with_line_items(
            calculator.recalculate(row) for row in self.data.line_items
        )
        return self.data

    def rows(self) -> List[Tuple[LineItem, RowValidationResult]]:
        """Rows paired with validation freshly computed from current state."""
        items = self.data.line_items
        return list(zip(items, self.validator.validate_all(items)))

    def summary(self) -> TotalsSummary:
        """Footer totals for the current snapshot."""
        return self.reconciler.reconcile_invoice(self.data)
