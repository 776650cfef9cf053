"""
Mutation Pipeline Module.

State transitions for the ledger table:

    apply_action(InvoiceData, Action) -> InvoiceData

Action is one of EditRow, DeleteRow or AddRow. Every transition returns a
structurally new InvoiceData; the input value is never modified. Rows
are addressed by their 0-based position in line_items, which is what the
table renders; row_index is renumbered 1..N after each transition.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from config import get_config
from invoice_ledger.models.invoice_data import InvoiceData, LineItem
from invoice_ledger.calculator.derived_fields import DerivedFieldCalculator, LineItemField
from invoice_ledger.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class EditRow:
    """Set one cell of the row at position."""
    position: int
    field: LineItemField
    value: Any

    def __post_init__(self):
        # Accept the column name as a string; unknown names fail here
        object.__setattr__(self, 'field', LineItemField(self.field))


@dataclass(frozen=True)
class DeleteRow:
    """Remove the row at position."""
    position: int


@dataclass(frozen=True)
class AddRow:
    """Append a blank manual-entry row."""
    pass


Action = Union[EditRow, DeleteRow, AddRow]


class MutationPipeline:
    """
    Applies table actions to an InvoiceData snapshot.

    Attributes:
        calculator: DerivedFieldCalculator used by EditRow
        manual_entry_note: Notes text for rows created by AddRow

    Example:
        >>> pipeline = MutationPipeline()
        >>> data = pipeline.apply(InvoiceData.empty(), AddRow())
        >>> data.line_items[0].row_index
        1
    """

    def __init__(
        self,
        calculator: Optional[DerivedFieldCalculator] = None,
        manual_entry_note: Optional[str] = None
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            calculator: Calculator to use; a configured one by default.
            manual_entry_note: Override for ledger.manual_entry_note.
        """
        self.calculator = calculator or DerivedFieldCalculator()
        self.manual_entry_note = manual_entry_note or get_config(
            "ledger.manual_entry_note", "Manual Entry"
        )

        logger.debug("MutationPipeline initialized")

    def apply(self, data: InvoiceData, action: Action) -> InvoiceData:
        """
        Apply one action and return the next state.

        Args:
            data: Current snapshot.
            action: EditRow, DeleteRow or AddRow.

        Returns:
            New InvoiceData.

        Raises:
            TypeError: If action is not one of the known action types.
        """
        if isinstance(action, EditRow):
            return self.edit(data, action.position, action.field, action.value)
        if isinstance(action, DeleteRow):
            return self.delete(data, action.position)
        if isinstance(action, AddRow):
            return self.add(data)
        raise TypeError(f"Unknown ledger action: {action!r}")

    def edit(
        self,
        data: InvoiceData,
        position: int,
        field: Union[LineItemField, str],
        value: Any
    ) -> InvoiceData:
        """
        Replace the row at position with the edited, recomputed row.

        A stale position is a no-op that still returns a new value.
        """
        if not self._in_bounds(data, position):
            logger.debug(f"Ignoring edit of {field} at stale position {position}")
            return data.with_line_items(data.line_items)

        items = list(data.line_items)
        items[position] = self.calculator.apply_edit(items[position], field, value)
        return data.with_line_items(items)

    def delete(self, data: InvoiceData, position: int) -> InvoiceData:
        """
        Remove the row at position; the rest keep their order.

        A stale position is a no-op that still returns a new value.
        """
        if not self._in_bounds(data, position):
            logger.debug(f"Ignoring delete at stale position {position}")
            return data.with_line_items(data.line_items)

        items = data.line_items[:position] + data.line_items[position + 1:]
        return data.with_line_items(items)

    def add(self, data: InvoiceData) -> InvoiceData:
        """Append a manual-entry row numbered after the existing rows."""
        new_row = LineItem.manual_entry(data.row_count + 1, notes=self.manual_entry_note)
        return data.with_line_items(data.line_items + (new_row,))

    @staticmethod
    def _in_bounds(data: InvoiceData, position: int) -> bool:
        return isinstance(position, int) and 0 <= position < data.row_count


def apply_action(data: InvoiceData, action: Action) -> InvoiceData:
    """
    Apply one action with a default-configured pipeline.

    Example:
        >>> data = apply_action(data, EditRow(0, LineItemField.QTY, 3))
    """
    return MutationPipeline().apply(data, action)
