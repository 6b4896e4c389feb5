"""invoice-printer: prints LBP invoices on ESC/POS thermal receipt printers."""

__version__ = "1.0.0"
