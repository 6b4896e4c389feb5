"""Hardware interfaces for invoice-printer."""
