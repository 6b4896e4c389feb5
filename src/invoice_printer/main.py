"""
Main entry point for invoice-printer.

    invoice-printer serve              run the HTTP print service
    invoice-printer preview FILE.json  show both copies as text
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from invoice_printer.errors import InvoicePrintError
from invoice_printer.hardware.printer import create_printer
from invoice_printer.models import parse_invoice
from invoice_printer.printing.formatter import ReceiptFormatter
from invoice_printer.printing.manager import PrintManager
from invoice_printer.printing.receipt import ReceiptGenerator
from invoice_printer.printing.renderer import EscPosRenderer
from invoice_printer.settings import get_settings
from invoice_printer.web.server import InvoiceServer

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_server() -> None:
    """Run the HTTP print service until cancelled."""
    settings = get_settings()
    printer = create_printer(settings)
    if not await printer.connect():
        logger.warning(f"Printer '{settings.printer_name}' is not available yet")

    manager = PrintManager.from_settings(settings, printer)
    server = InvoiceServer(settings, manager)
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()
        await printer.disconnect()


def run_preview(path: Path, width: int, logo: Optional[Path]) -> str:
    """Return the text preview of both copies of an invoice file."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    invoice = parse_invoice(payload)
    generator = ReceiptGenerator(
        formatter=ReceiptFormatter(logo=logo),
        renderer=EscPosRenderer(),
        line_width=width,
    )
    return generator.generate_receipt(invoice).preview


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoice-printer",
        description="Print LBP invoices on an ESC/POS receipt printer",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the HTTP print service")

    preview = commands.add_parser("preview", help="Print a text preview of an invoice")
    preview.add_argument("invoice", type=Path, help="Invoice JSON file")
    preview.add_argument("--width", type=int, default=48, help="Receipt width in characters")
    preview.add_argument("--logo", type=Path, default=None, help="Logo image for the customer copy")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()

    args = build_parser().parse_args(argv)
    debug = args.debug or os.getenv("DEBUG", "false").lower() == "true"
    setup_logging(debug)

    try:
        if args.command == "serve":
            logger.info("invoice-printer starting...")
            asyncio.run(run_server())
        elif args.command == "preview":
            print(run_preview(args.invoice, args.width, args.logo))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except (InvoicePrintError, OSError, json.JSONDecodeError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
