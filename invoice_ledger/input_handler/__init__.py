"""
Input Handler Module for the Invoice Ledger.

Reads invoice documents (PDF and image bytes with their MIME type) and
the optional price book text.
"""

from .handler import DocumentInput, LoadedDocument, PriceBookText

__all__ = ['DocumentInput', 'LoadedDocument', 'PriceBookText']
