#!/usr/bin/env python3
"""
Invoice Ledger - Main Entry Point.

Extracts a purchase invoice through the extraction service (or loads a
previously saved extraction payload), then prints the cost/margin ledger
with per-row flags and the totals reconciliation.

Usage:
    Command Line:
        python main.py --input invoice.pdf --price-book pricebook.csv
        python main.py --from-json extraction.json --recalculate --json

    Python:
        from main import run_ledger
        data, summary = run_ledger(input_path="invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from config import ConfigurationManager
from invoice_ledger.utils.logger import setup_logger_from_config, get_logger, ROOT_LOGGER_NAME
from invoice_ledger.utils.exceptions import InvoiceLedgerError
from invoice_ledger.models import InvoiceData
from invoice_ledger.reconciler import TotalsSummary


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice cost/margin ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract an invoice:
        python main.py --input invoice.pdf

    With a price book:
        python main.py --input invoice.jpg --price-book pricebook.csv

    Re-check a saved extraction:
        python main.py --from-json extraction.json --recalculate
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        type=str,
        help="Invoice document (PDF or image) to extract"
    )
    source.add_argument(
        "--from-json",
        type=str,
        help="Previously saved extraction payload (JSON)"
    )

    parser.add_argument(
        "--price-book", "-p",
        type=str,
        default=None,
        help="Optional price book (CSV or text) sent with the invoice"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--recalculate",
        action="store_true",
        help="Recompute derived fields of every row before reporting"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the resulting InvoiceData as JSON instead of the table"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored table output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    level = None
    if args.debug:
        level = "DEBUG"
    elif args.quiet or args.json:
        level = "WARNING"

    # stdout carries the JSON document with --json
    stream = sys.stderr if args.json else None
    logger = setup_logger_from_config(level, stream=stream)

    logger.info("=" * 60)
    logger.info("INVOICE LEDGER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Source: {args.input or args.from_json}")

    return config


def run_ledger(
    input_path: Optional[str] = None,
    json_path: Optional[str] = None,
    price_book_path: Optional[str] = None,
    recalculate: bool = False
) -> Tuple[InvoiceData, TotalsSummary]:
    """
    Load an invoice into a session and reconcile it.

    Exactly one of input_path and json_path must be given.

    Args:
        input_path: Invoice document to extract.
        json_path: Saved extraction payload to load instead.
        price_book_path: Optional price book for extraction.
        recalculate: Recompute derived fields of every row.

    Returns:
        Tuple of (InvoiceData, TotalsSummary).

    Raises:
        InvoiceLedgerError: On input or extraction failures.
    """
    from invoice_ledger.input_handler import DocumentInput
    from invoice_ledger.extraction import InvoiceExtractionClient
    from invoice_ledger.postprocessor import LedgerPostProcessor
    from invoice_ledger.pipeline import InvoiceSession
    from invoice_ledger.utils.exceptions import InputFileNotFoundError

    if (input_path is None) == (json_path is None):
        raise ValueError("Provide exactly one of input_path or json_path")

    logger = get_logger(__name__)
    session = InvoiceSession()

    if json_path is not None:
        path = Path(json_path)
        if not path.is_file():
            raise InputFileNotFoundError(str(path))
        payload = json.loads(path.read_text(encoding="utf-8"))
        session.load(LedgerPostProcessor().process(payload))
    else:
        input_handler = DocumentInput()
        document = input_handler.load(input_path)
        price_book = input_handler.load_price_book(price_book_path)
        client = InvoiceExtractionClient()

        session.run_extraction(
            lambda: client.extract(
                document.content,
                document.mime_type,
                price_book_text=price_book.text,
                price_book_note=price_book.note
            )
        )

    if recalculate:
        logger.info("Recalculating derived fields for all rows")
        session.recalculate_all()

    return session.data, session.summary()


def main(argv: Optional[list] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        data, summary = run_ledger(
            input_path=args.input,
            json_path=args.from_json,
            price_book_path=args.price_book,
            recalculate=args.recalculate
        )

        if args.json:
            print(data.to_json())
        else:
            from invoice_ledger.output_handler import LedgerReport
            print(LedgerReport(colorize=not args.no_color).render(data))

        logger.info("=" * 60)
        logger.info(f"Ledger complete: {data.row_count} rows, status: {summary.status.value}")
        logger.info("=" * 60)

        return 0

    except InvoiceLedgerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if logging.getLogger(ROOT_LOGGER_NAME).isEnabledFor(logging.DEBUG):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
