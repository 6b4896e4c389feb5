"""Print manager for invoice receipts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from invoice_printer.errors import PrinterError, PrinterNotFoundError
from invoice_printer.hardware.base import Printer
from invoice_printer.models import InvoiceData
from invoice_printer.printing.formatter import ReceiptFormatter
from invoice_printer.printing.receipt import Receipt, ReceiptGenerator
from invoice_printer.printing.renderer import EscPosRenderer
from invoice_printer.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class PrintResult:
    """Outcome of one printed invoice."""

    receipt: Receipt
    job_id: Optional[int]


class PrintManager:
    """Sends invoice receipts to a printer, one job at a time.

    Both copies of an invoice go out as a single job, so copies of
    concurrent requests never interleave on the paper.
    """

    def __init__(
        self,
        printer: Printer,
        generator: ReceiptGenerator,
        timeout: float = 30.0,
    ) -> None:
        self._printer = printer
        self._generator = generator
        self._timeout = timeout
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, printer: Printer) -> "PrintManager":
        """Build a manager wired with the configured layout."""
        generator = ReceiptGenerator(
            formatter=ReceiptFormatter(logo=settings.logo_path),
            renderer=EscPosRenderer(paper_dots=settings.printer_dots),
            line_width=settings.receipt_width,
        )
        return cls(printer, generator, timeout=settings.print_timeout)

    @property
    def printer(self) -> Printer:
        return self._printer

    async def print_invoice(self, invoice: InvoiceData) -> PrintResult:
        """Print the merchant and customer copies of an invoice.

        Raises:
            FormatError: If the invoice cannot be laid out
            PrinterNotFoundError: If the printer is not available
            PrinterError: If the job fails or times out
        """
        receipt = await asyncio.to_thread(self._generator.generate_receipt, invoice)

        async with self._lock:
            if not await self._printer.is_available():
                raise PrinterNotFoundError(self._printer.name)

            try:
                job_id = await asyncio.wait_for(
                    self._printer.print_receipt(receipt),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError:
                raise PrinterError(
                    f"Printing timed out after {self._timeout:g}s"
                ) from None

        logger.info(f"Printed invoice {invoice.invoice_number} (job {job_id})")
        return PrintResult(receipt=receipt, job_id=job_id)
