"""CUPS transport for ESC/POS receipt printers.

Shells out to the system `lpstat` and `lp` commands rather than
requiring pycups. Rendered receipts are submitted with `-o raw` so the
spooler passes the ESC/POS bytes through untouched.
"""

import asyncio
import logging
import os
import re
import tempfile
from typing import List, Optional, Tuple

from invoice_printer.errors import PrinterError
from invoice_printer.hardware.base import Printer
from invoice_printer.printing.receipt import Receipt
from invoice_printer.settings import Settings

logger = logging.getLogger(__name__)


async def _run(cmd: List[str]) -> Tuple[int, str, str]:
    """Run a command and return (exit code, stdout, stderr)."""
    logger.debug("Running: %s", " ".join(cmd))
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            logger.warning("Killing %s (pid %d) after cancellation", cmd[0], process.pid)
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
        raise
    return (
        process.returncode,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace"),
    )


class CupsPrinter(Printer):
    """Receipt printer reached through a CUPS queue.

    Args:
        name: CUPS queue name of the printer
    """

    _REQUEST_ID_PATTERN = re.compile(r"request id is .*?-(\d+)")

    def __init__(self, name: str):
        self.name = name

    async def is_available(self) -> bool:
        """Look for the queue in `lpstat -p` output (case-insensitive)."""
        try:
            code, stdout, stderr = await _run(["lpstat", "-p"])
        except FileNotFoundError:
            logger.error("lpstat not found; is CUPS installed?")
            return False

        if code != 0:
            logger.warning(f"lpstat failed (exit {code}): {stderr.strip()}")
        return self.name.lower() in stdout.lower()

    async def print_raw(self, data: bytes) -> int:
        """
        Submit raw bytes to the queue and return the CUPS job id.

        Raises:
            PrinterError: If `lp` fails or the job id cannot be parsed.
        """
        tmp_path: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile("wb", suffix=".bin", delete=False) as tmp:
                tmp.write(data)
                tmp_path = tmp.name

            try:
                code, stdout, stderr = await _run(
                    ["lp", "-d", self.name, "-o", "raw", tmp_path]
                )
            except FileNotFoundError as e:
                raise PrinterError("lp not found; is CUPS installed?") from e

            if code != 0:
                raise PrinterError(f"lp failed (exit {code}): {stderr.strip()}")

            job_id = self._parse_lp_request_id(stdout)
            if job_id is None:
                raise PrinterError(
                    f"Could not parse job id from lp output: {stdout.strip()}"
                )
            logger.info("Submitted print job %d to queue %s", job_id, self.name)
            return job_id
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as e:
                    logger.warning(f"Could not remove {tmp_path}: {e}")

    @classmethod
    def _parse_lp_request_id(cls, output: str) -> Optional[int]:
        """Extract the numeric job id from `lp` output."""
        match = cls._REQUEST_ID_PATTERN.search(output or "")
        if not match:
            return None
        return int(match.group(1))


class MockPrinter(Printer):
    """Mock printer for development and tests.

    Keeps every submitted job and logs the receipt preview.
    """

    name = "mock"

    def __init__(self, available: bool = True):
        self.available = available
        self.connected = False
        self.jobs: List[bytes] = []

    async def connect(self) -> bool:
        self.connected = True
        logger.info("Mock printer connected")
        return self.available

    async def disconnect(self) -> None:
        self.connected = False
        logger.info("Mock printer disconnected")

    async def is_available(self) -> bool:
        return self.available

    async def print_raw(self, data: bytes) -> int:
        self.jobs.append(data)
        logger.debug(f"Mock job {len(self.jobs)}: {len(data)} bytes")
        return len(self.jobs)

    async def print_receipt(self, receipt: Receipt) -> int:
        logger.info("=== MOCK PRINT ===\n%s", receipt.preview)
        return await self.print_raw(receipt.raw_commands)


def create_printer(settings: Settings) -> Printer:
    """Factory function to create the configured printer backend."""
    if settings.printer_backend == "mock":
        logger.info("Using mock printer")
        return MockPrinter()
    return CupsPrinter(settings.printer_name)
