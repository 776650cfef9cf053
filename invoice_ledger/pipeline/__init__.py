"""
Mutation Pipeline.

Add, edit and delete transitions over immutable InvoiceData snapshots,
plus the session object that holds the current snapshot.
"""

from .mutations import (
    Action,
    AddRow,
    DeleteRow,
    EditRow,
    MutationPipeline,
    apply_action
)
from .session import InvoiceSession, SessionState

__all__ = [
    'Action',
    'AddRow',
    'DeleteRow',
    'EditRow',
    'MutationPipeline',
    'apply_action',
    'InvoiceSession',
    'SessionState'
]
