"""
Invoice Data Classes.

This module defines the immutable data structures for one invoice's
ledger: the header printed on the document, the editable line items and
the InvoiceData value that bundles them.

Every edit produces a new InvoiceData; instances are never mutated in
place, so any snapshot handed out stays valid.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field, replace, asdict
from typing import Dict, Any, Optional, Tuple, Iterable
import json


@dataclass(frozen=True)
class InvoiceHeader:
    """
    Header fields printed on the invoice.

    Attributes:
        vendor_name: Name of the supplier
        invoice_number: Vendor's invoice identifier
        invoice_date: Issue date as YYYY-MM-DD
        delivery_date: Delivery date as YYYY-MM-DD
        invoice_total: Printed total ("Pay This Amount"), if found
        page_count: Number of pages in the source document
    """
    vendor_name: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    delivery_date: Optional[str] = None
    invoice_total: Optional[float] = None
    page_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary shape."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InvoiceHeader':
        """
        Create an InvoiceHeader from an already-typed dictionary.

        Use LedgerPostProcessor for raw extraction payloads.
        """
        return cls(
            vendor_name=data.get('vendor_name'),
            invoice_number=data.get('invoice_number'),
            invoice_date=data.get('invoice_date'),
            delivery_date=data.get('delivery_date'),
            invoice_total=data.get('invoice_total'),
            page_count=data.get('page_count') or 1
        )


@dataclass(frozen=True)
class LineItem:
    """
    One row of the cost/margin ledger.

    Pricing inputs are qty, units, case_cost, case_discount and
    unit_retail. The derived fields (cost_per_unit_after_discount,
    extended_case_cost, extended_unit_retail, calculated_margin_percent)
    are maintained by the derived-field calculator.

    Attributes:
        row_index: 1-based display position, reassigned on every mutation
        qty: Cases ordered; negative for returns and credits
        item_code: Vendor's internal item number
        scan_code: Barcode / UPC
        item_description: Product description
        department: Store department
        price_group: Price group
        product_category: Product category
        units: Units per case (treated as 1 when unset or not positive)
        case_cost: Vendor price for one case before discount
        case_discount: Per-case discount, stored as a non-negative amount
        cost_per_unit_after_discount: Derived
        extended_case_cost: Derived; the row's contribution to the total
        unit_retail: Shelf price per unit
        extended_unit_retail: Derived
        size: Pack size text
        default_margin_percent: Target margin from the price book
        calculated_margin_percent: Derived
        confidence: Extraction certainty for the row (0-1)
        notes: Free text

    Example:
        >>> row = LineItem(row_index=1, qty=10, case_cost=20.0)
        >>> row.net_case_cost
        20.0
    """
    row_index: int
    qty: Optional[float] = None
    item_code: Optional[str] = None
    scan_code: Optional[str] = None
    item_description: Optional[str] = None
    department: Optional[str] = None
    price_group: Optional[str] = None
    product_category: Optional[str] = None
    units: Optional[int] = None
    case_cost: Optional[float] = None
    case_discount: Optional[float] = None
    cost_per_unit_after_discount: Optional[float] = None
    extended_case_cost: Optional[float] = None
    unit_retail: Optional[float] = None
    extended_unit_retail: Optional[float] = None
    size: Optional[str] = None
    default_margin_percent: Optional[float] = None
    calculated_margin_percent: Optional[float] = None
    confidence: float = 0.0
    notes: Optional[str] = None

    @property
    def effective_units(self) -> int:
        """Units per case used for arithmetic (at least 1)."""
        if self.units is None or self.units <= 0:
            return 1
        return self.units

    @property
    def net_case_cost(self) -> float:
        """Case cost minus case discount, nulls read as 0."""
        return (self.case_cost or 0.0) - (self.case_discount or 0.0)

    def with_row_index(self, row_index: int) -> 'LineItem':
        """Return a copy renumbered to the given display position."""
        if row_index == self.row_index:
            return self
        return replace(self, row_index=row_index)

    @classmethod
    def manual_entry(cls, row_index: int, notes: str = "Manual Entry") -> 'LineItem':
        """
        Build the blank row appended by the Add operation.

        Args:
            row_index: Display position of the new row.
            notes: Note marking the row as user-entered.

        Returns:
            LineItem with qty 1, zero costs and full confidence.
        """
        return cls(
            row_index=row_index,
            qty=1,
            item_code="",
            scan_code="",
            item_description="",
            department="",
            units=1,
            case_cost=0.0,
            case_discount=0.0,
            cost_per_unit_after_discount=0.0,
            extended_case_cost=0.0,
            unit_retail=0.0,
            extended_unit_retail=0.0,
            confidence=1.0,
            notes=notes
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary shape."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        """
        Create a LineItem from an already-typed dictionary.

        Unknown keys are ignored. Use LedgerPostProcessor for raw
        extraction payloads that still need coercion.
        """
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        known.setdefault('row_index', 1)
        if known.get('confidence') is None:
            known['confidence'] = 0.0
        return cls(**known)


@dataclass(frozen=True)
class InvoiceData:
    """
    Header plus ordered line items; the unit of state for one invoice.

    Row order is significant: row_index always mirrors the position in
    line_items. Build new values with with_line_items() rather than
    constructing by hand so the numbering stays contiguous.

    Example:
        >>> data = InvoiceData.empty()
        >>> data.row_count
        0
    """
    invoice_header: InvoiceHeader = field(default_factory=InvoiceHeader)
    line_items: Tuple[LineItem, ...] = ()

    @classmethod
    def empty(cls) -> 'InvoiceData':
        """Create the initial empty invoice."""
        return cls(invoice_header=InvoiceHeader(), line_items=())

    @property
    def row_count(self) -> int:
        """Number of line items."""
        return len(self.line_items)

    def with_line_items(self, line_items: Iterable[LineItem]) -> 'InvoiceData':
        """
        Return a new InvoiceData holding the given rows, renumbered 1..N.

        Args:
            line_items: Rows in display order.

        Returns:
            New InvoiceData sharing this header.
        """
        renumbered = tuple(
            item.with_row_index(position)
            for position, item in enumerate(line_items, start=1)
        )
        return replace(self, line_items=renumbered)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the wire dictionary shape.

        Returns:
            {"invoice_header": {...}, "line_items": [{...}, ...]}
        """
        return {
            'invoice_header': self.invoice_header.to_dict(),
            'line_items': [item.to_dict() for item in self.line_items]
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InvoiceData':
        """Create InvoiceData from an already-typed dictionary."""
        header = InvoiceHeader.from_dict(data.get('invoice_header') or {})
        items = [LineItem.from_dict(item) for item in data.get('line_items') or []]
        return cls(invoice_header=header).with_line_items(items)

    def __repr__(self) -> str:
        return (
            f"InvoiceData("
            f"invoice={self.invoice_header.invoice_number}, "
            f"vendor={self.invoice_header.vendor_name}, "
            f"rows={self.row_count})"
        )
