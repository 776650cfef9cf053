"""
Helper Utilities Module.

This module provides small utility functions used throughout the
invoice ledger. Functions here should be generic and reusable across
different modules.

Functions:
    - get_file_extension: Extract file extension safely
    - validate_file_exists: Check a path points to a regular file
    - format_file_size: Human-readable byte counts
    - finite_or_none: Drop NaN/inf before they reach the ledger
    - format_money: Two-decimal currency rendering
"""

import math
from pathlib import Path
from typing import Any, Optional, Union


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Args:
        filepath: Path to the file.

    Returns:
        Lowercase file extension including dot (e.g., ".pdf").

    Example:
        >>> get_file_extension("invoice.PDF")
        '.pdf'
        >>> get_file_extension("noextension")
        ''
    """
    return Path(filepath).suffix.lower()


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """
    Check if a file exists and is a regular file.

    Args:
        filepath: Path to check.

    Returns:
        True if file exists and is a regular file.
    """
    path = Path(filepath)
    return path.exists() and path.is_file()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


def finite_or_none(value: Any) -> Optional[float]:
    """
    Convert a value to float, returning None for null or non-finite input.

    Booleans are rejected so a stray ``True`` never becomes ``1.0``.

    Example:
        >>> finite_or_none("12.5")
        12.5
        >>> finite_or_none(float("nan")) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def format_money(value: Optional[float], symbol: str = "$") -> str:
    """
    Render an amount with two decimals, or an empty string for null.

    Example:
        >>> format_money(-20)
        '-$20.00'
    """
    if value is None:
        return ""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):.2f}"
