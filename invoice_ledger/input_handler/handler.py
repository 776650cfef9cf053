"""
Main Input Handler Module.

This module provides the DocumentInput class that reads the files handed
to the ledger: the invoice document itself (sent to the extraction
service as bytes with its MIME type) and the optional price book.

Usage:
    from invoice_ledger.input_handler import DocumentInput

    handler = DocumentInput()
    document = handler.load("invoice.pdf")
    price_book = handler.load_price_book("pricebook.csv")

Classes:
    DocumentInput: Loads invoice documents and price books
    LoadedDocument: Invoice bytes plus metadata
    PriceBookText: Price book contents, or the note explaining their absence
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union, Optional, Dict

from config import get_config
from invoice_ledger.extraction.prompts import PRICE_BOOK_UNREADABLE_NOTE
from invoice_ledger.utils.logger import get_logger
from invoice_ledger.utils.helpers import (
    get_file_extension,
    validate_file_exists,
    format_file_size
)
from invoice_ledger.utils.exceptions import (
    UnsupportedFileTypeError,
    InputFileNotFoundError,
    PriceBookReadError
)


# Initialize module logger
logger = get_logger(__name__)


DEFAULT_SUPPORTED_TYPES = {
    '.pdf': 'application/pdf',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.webp': 'image/webp',
    '.tif': 'image/tiff',
    '.tiff': 'image/tiff',
    '.bmp': 'image/bmp',
}


@dataclass(frozen=True)
class LoadedDocument:
    """
    An invoice document ready to send to the extraction service.

    Attributes:
        filepath: Original file path
        filename: Original filename
        mime_type: Detected MIME type
        content: Raw file bytes
    """
    filepath: str
    filename: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        """Size of the document in bytes."""
        return len(self.content)

    def __repr__(self) -> str:
        return (
            f"LoadedDocument(filename='{self.filename}', "
            f"mime_type='{self.mime_type}', "
            f"size={format_file_size(self.size)})"
        )


@dataclass(frozen=True)
class PriceBookText:
    """
    Result of loading the optional price book.

    Attributes:
        text: Price book contents, or None when absent or unreadable
        note: Note to append to the extraction prompt, if any
    """
    text: Optional[str] = None
    note: Optional[str] = None

    @property
    def available(self) -> bool:
        """Price book text was loaded."""
        return bool(self.text)


class DocumentInput:
    """
    Loader for invoice documents and price books.

    Attributes:
        supported_types: Mapping of file extension to MIME type
        price_book_encoding: Text encoding of price book files

    Example:
        >>> handler = DocumentInput()
        >>> document = handler.load("invoice.jpg")
        >>> document.mime_type
        'image/jpeg'
    """

    def __init__(self) -> None:
        """Initialize the input handler with configuration."""
        self.supported_types: Dict[str, str] = get_config(
            "input.supported_types",
            DEFAULT_SUPPORTED_TYPES
        )
        self.price_book_encoding = get_config("input.price_book_encoding", "utf-8")

        logger.debug(
            f"DocumentInput initialized "
            f"(types: {', '.join(sorted(self.supported_types))})"
        )

    def detect_mime_type(self, filepath: Union[str, Path]) -> str:
        """
        Map a file extension to the MIME type sent to the service.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
        """
        extension = get_file_extension(filepath)
        mime_type = self.supported_types.get(extension)
        if mime_type is None:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_types))
        return mime_type

    def load(self, filepath: Union[str, Path]) -> LoadedDocument:
        """
        Load an invoice document.

        Args:
            filepath: Path to a PDF or image.

        Returns:
            LoadedDocument with bytes and MIME type.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            UnsupportedFileTypeError: If the file type is not supported.
        """
        path = Path(filepath)

        if not validate_file_exists(path):
            raise InputFileNotFoundError(str(path))

        mime_type = self.detect_mime_type(path)
        document = LoadedDocument(
            filepath=str(path),
            filename=path.name,
            mime_type=mime_type,
            content=path.read_bytes()
        )

        logger.info(f"Loaded {document!r}")
        return document

    def read_price_book(self, filepath: Union[str, Path]) -> str:
        """
        Read price book text.

        Raises:
            PriceBookReadError: If the file is missing or cannot be decoded.
        """
        path = Path(filepath)

        if not validate_file_exists(path):
            raise PriceBookReadError(str(path), "file not found")

        try:
            return path.read_text(encoding=self.price_book_encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise PriceBookReadError(str(path), str(e)) from e

    def load_price_book(self, filepath: Optional[Union[str, Path]]) -> PriceBookText:
        """
        Load the optional price book, degrading to a note on failure.

        Args:
            filepath: Price book path, or None when none was supplied.

        Returns:
            PriceBookText with either the text or the unreadable note.
        """
        if filepath is None:
            return PriceBookText()

        try:
            text = self.read_price_book(filepath)
        except PriceBookReadError as e:
            logger.warning(f"Continuing without price book: {e}")
            return PriceBookText(note=PRICE_BOOK_UNREADABLE_NOTE)

        logger.info(f"Loaded price book: {Path(filepath).name} ({len(text)} chars)")
        return PriceBookText(text=text)
