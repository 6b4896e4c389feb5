from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Dict

import pytest
from PIL import Image

from invoice_printer.hardware.printer import MockPrinter
from invoice_printer.models import InvoiceData, parse_invoice
from invoice_printer.printing.manager import PrintManager
from invoice_printer.settings import Settings


def png_bytes(width: int = 16, height: int = 4, color: str = "black") -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def payload() -> Dict[str, Any]:
    return {
        "company_name": "Acme",
        "branch_name": "Main",
        "phone": "+961-1-000000",
        "invoice_number": "INV-1",
        "date": "2024-01-01",
        "customer_name": "Jane",
        "items": [{"name": "Widget", "quantity": 2, "price": 5000, "total": 10000}],
        "subtotal": 10000,
        "discount": 0,
        "grand_total": 10000,
    }


@pytest.fixture()
def invoice(payload: Dict[str, Any]) -> InvoiceData:
    return parse_invoice(payload)


@pytest.fixture()
def logo_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes())
    return path


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        api_key="secret",
        printer_name="POS-80",
        printer_backend="mock",
        receipt_width=32,
        logo_path=tmp_path / "missing-logo.png",
    )


@pytest.fixture()
def printer() -> MockPrinter:
    return MockPrinter()


@pytest.fixture()
def manager(settings: Settings, printer: MockPrinter) -> PrintManager:
    return PrintManager.from_settings(settings, printer)
