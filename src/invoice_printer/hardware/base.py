"""
Abstract base class for printer transports.

The transport only moves rendered ESC/POS bytes to a device; all layout
decisions happen before a receipt reaches it.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from invoice_printer.printing.receipt import Receipt


class Printer(ABC):
    """Abstract base class for receipt printers."""

    name: str = "printer"

    async def connect(self) -> bool:
        """Prepare the transport for jobs.

        Returns:
            True if the printer can accept jobs
        """
        return await self.is_available()

    async def disconnect(self) -> None:
        """Release the transport."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the printer is known and can accept jobs."""
        ...

    @abstractmethod
    async def print_raw(self, data: bytes) -> Optional[int]:
        """
        Send raw ESC/POS bytes as one job.

        Returns the spooler job id when there is one.
        """
        ...

    async def print_receipt(self, receipt: "Receipt") -> Optional[int]:
        """Print every copy of a receipt in a single job."""
        return await self.print_raw(receipt.raw_commands)
