"""
Extraction Service Boundary.

Sends an invoice document to the external extraction service and returns
its best-effort guess as InvoiceData. The calculation core never calls
this module; it only consumes the InvoiceData it produces.

Author: ML Engineering Team
"""

from .client import InvoiceExtractionClient, strip_code_fence
from .prompts import SYSTEM_INSTRUCTION, PRICE_BOOK_UNREADABLE_NOTE, build_user_prompt

__all__ = [
    'InvoiceExtractionClient',
    'strip_code_fence',
    'SYSTEM_INSTRUCTION',
    'PRICE_BOOK_UNREADABLE_NOTE',
    'build_user_prompt'
]
