"""HTTP endpoint for printing invoices.

Accepts a JSON invoice on POST, checks the X-API-Key header and prints
the merchant and customer copies. All responses are JSON and carry
permissive CORS headers so a browser-based POS can call the service.
"""

import hmac
import json
import logging
from typing import Awaitable, Callable, Optional

from aiohttp import web

from invoice_printer.errors import (
    FormatError,
    InvoiceValidationError,
    MissingFieldError,
    PrinterError,
    PrinterNotFoundError,
)
from invoice_printer.models import parse_invoice
from invoice_printer.printing.manager import PrintManager
from invoice_printer.settings import Settings

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-API-Key",
}

SETTINGS_KEY = web.AppKey("settings", Settings)
MANAGER_KEY = web.AppKey("print_manager", PrintManager)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Attach CORS headers and turn every error into a JSON response."""
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        response = _error(exc.reason, exc.status)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        response = _error("Internal server error", 500)
    response.headers.update(CORS_HEADERS)
    return response


async def handle_print(request: web.Request) -> web.Response:
    """Print an invoice posted as JSON."""
    if request.method == "OPTIONS":
        return web.json_response({})
    if request.method != "POST":
        return _error("Method not allowed", 405)

    settings = request.app[SETTINGS_KEY]
    manager = request.app[MANAGER_KEY]

    api_key = request.headers.get("X-API-Key", "")
    if not hmac.compare_digest(api_key.encode(), settings.api_key.encode()):
        logger.warning(f"Rejected request from {request.remote}: invalid API key")
        return _error("Invalid API key", 401)

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("Invalid JSON body", 400)

    try:
        invoice = parse_invoice(payload, settings.header_defaults)
        await manager.print_invoice(invoice)
    except (MissingFieldError, InvoiceValidationError, FormatError) as e:
        logger.warning(f"Rejected invoice: {e}")
        return _error(str(e), 400)
    except PrinterNotFoundError as e:
        logger.error(f"Printer '{e.name}' not found")
        return _error(str(e), 503)
    except PrinterError as e:
        logger.error(f"Print failed: {e}")
        return _error(str(e), 500)

    return web.json_response({"success": True, "message": "Invoice printed successfully"})


async def handle_health(request: web.Request) -> web.Response:
    """Report whether the printer is reachable."""
    manager = request.app[MANAGER_KEY]
    available = await manager.printer.is_available()
    return web.json_response(
        {"status": "ok" if available else "printer unavailable", "printer_available": available},
        status=200 if available else 503,
    )


def create_app(settings: Settings, manager: PrintManager) -> web.Application:
    """Build the aiohttp application."""
    app = web.Application(middlewares=[cors_middleware])
    app[SETTINGS_KEY] = settings
    app[MANAGER_KEY] = manager

    for path in ("/", "/print"):
        app.router.add_route("*", path, handle_print)
    app.router.add_get("/health", handle_health)
    return app


class InvoiceServer:
    """HTTP server wrapper with explicit start/stop."""

    def __init__(self, settings: Settings, manager: PrintManager):
        self.settings = settings
        self.app = create_app(settings, manager)
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.settings.host, self.settings.port)
        await site.start()
        logger.info(f"Invoice print server started on {self.settings.host}:{self.settings.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Invoice print server stopped")
