"""
Invoice Ledger - Source Package.

Turns an extracted purchase invoice into an editable cost/margin ledger
and keeps it consistent while a user corrects it. Each module has a
single responsibility.

Modules:
    - models: InvoiceHeader, LineItem and InvoiceData value types
    - calculator: Derived-field recomputation after a cell edit
    - postprocessor: Extraction payload coercion and row validation
    - reconciler: Row-sum vs. printed-total reconciliation
    - pipeline: Add/edit/delete transitions and the editing session
    - extraction: Client for the external extraction service
    - input_handler: Invoice document and price book loading
    - output_handler: Text rendering of the ledger

Architecture:
    Input → Extraction → Post-Processing → InvoiceData
                                               ↓
                     Edit / Add / Delete → Calculator → InvoiceData'
                                               ↓
                                 Row Validator + Totals Reconciler
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'models',
    'calculator',
    'postprocessor',
    'reconciler',
    'pipeline',
    'extraction',
    'input_handler',
    'output_handler',
    'utils'
]
