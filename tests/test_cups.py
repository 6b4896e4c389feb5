from __future__ import annotations

import asyncio
import os
import sys
import tempfile
from typing import List

import pytest

from invoice_printer.errors import PrinterError
from invoice_printer.hardware.printer import CupsPrinter, MockPrinter, create_printer
from invoice_printer.hardware.printer import cups

LPSTAT_OUTPUT = (
    "printer pos-80 is idle.  enabled since Mon 01 Jan 2024 09:00:00\n"
    "printer Office_Laser is idle.  enabled since Mon 01 Jan 2024 09:00:00\n"
)


def fake_run(monkeypatch, code: int, stdout: str, stderr: str = "") -> List[List[str]]:
    calls: List[List[str]] = []

    async def _run(cmd):
        calls.append(cmd)
        if cmd[0] == "lp":
            assert os.path.exists(cmd[-1])
        return code, stdout, stderr

    monkeypatch.setattr(cups, "_run", _run)
    return calls


def test_parse_lp_request_id() -> None:
    assert CupsPrinter._parse_lp_request_id("request id is POS-80-123 (1 file(s))") == 123
    assert CupsPrinter._parse_lp_request_id("lp: error - no default destination") is None
    assert CupsPrinter._parse_lp_request_id("") is None


def test_availability_is_case_insensitive(monkeypatch) -> None:
    calls = fake_run(monkeypatch, 0, LPSTAT_OUTPUT)

    assert asyncio.run(CupsPrinter("POS-80").is_available()) is True
    assert asyncio.run(CupsPrinter("Kitchen").is_available()) is False
    assert calls[0] == ["lpstat", "-p"]


def test_missing_lpstat_means_unavailable(monkeypatch) -> None:
    async def _run(cmd):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(cups, "_run", _run)

    assert asyncio.run(CupsPrinter("POS-80").is_available()) is False


def test_print_raw_submits_raw_job(monkeypatch) -> None:
    calls = fake_run(monkeypatch, 0, "request id is POS-80-7 (1 file(s))\n")

    job_id = asyncio.run(CupsPrinter("POS-80").print_raw(b"\x1b@hello"))

    assert job_id == 7
    cmd = calls[0]
    assert cmd[:5] == ["lp", "-d", "POS-80", "-o", "raw"]
    assert not os.path.exists(cmd[5])


def test_print_raw_failure(monkeypatch) -> None:
    calls = fake_run(monkeypatch, 1, "", "lp: The printer or class does not exist.")

    with pytest.raises(PrinterError, match="exit 1"):
        asyncio.run(CupsPrinter("POS-80").print_raw(b"data"))

    assert not os.path.exists(calls[0][5])


def test_print_raw_without_job_id(monkeypatch) -> None:
    fake_run(monkeypatch, 0, "something unexpected")

    with pytest.raises(PrinterError, match="job id"):
        asyncio.run(CupsPrinter("POS-80").print_raw(b"data"))


def test_create_printer(settings) -> None:
    assert isinstance(create_printer(settings), MockPrinter)

    cups_printer = create_printer(settings.model_copy(update={"printer_backend": "cups"}))
    assert isinstance(cups_printer, CupsPrinter)
    assert cups_printer.name == "POS-80"


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_cancelled_lp_is_killed_before_it_submits(monkeypatch, tmp_path) -> None:
    bin_dir = tmp_path / "bin"
    spool_dir = tmp_path / "spool"
    bin_dir.mkdir()
    spool_dir.mkdir()
    submitted = tmp_path / "submitted.bin"

    lp = bin_dir / "lp"
    lp.write_text(
        "#!/bin/sh\n"
        "sleep 1\n"
        f'cp "$5" "{submitted}"\n'
        'echo "request id is POS-80-1 (1 file(s))"\n'
    )
    lp.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setattr(tempfile, "tempdir", str(spool_dir))

    async def go() -> None:
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(CupsPrinter("POS-80").print_raw(b"receipt"), 0.2)
        await asyncio.sleep(1.5)

    asyncio.run(go())

    assert not submitted.exists()
    assert list(spool_dir.iterdir()) == []


def test_mock_printer_lifecycle() -> None:
    printer = MockPrinter(available=False)

    assert asyncio.run(printer.connect()) is False
    assert printer.connected is True

    asyncio.run(printer.disconnect())
    assert printer.connected is False


def test_cups_connect_checks_the_queue(monkeypatch) -> None:
    calls = fake_run(monkeypatch, 0, LPSTAT_OUTPUT)
    printer = CupsPrinter("POS-80")

    assert asyncio.run(printer.connect()) is True
    asyncio.run(printer.disconnect())
    assert calls == [["lpstat", "-p"]]
