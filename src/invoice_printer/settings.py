"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
`API_KEY`, `PRINTER_NAME` and `RECEIPT_WIDTH` are required.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Request authentication
    api_key: str = Field(min_length=1)

    # Printer
    printer_name: str = Field(min_length=1)
    printer_backend: Literal["cups", "mock"] = "cups"
    printer_dots: int = Field(default=576, ge=8)  # 80mm paper
    print_timeout: float = Field(default=30.0, gt=0)

    # Layout
    receipt_width: int = Field(ge=1)
    logo_path: Path = Path("images/logo.png")

    # Header defaults for requests that omit them
    company_name: str = ""
    branch_name: str = ""
    phone: str = ""

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def header_defaults(self) -> Dict[str, str]:
        """Fallback values for the invoice header fields."""
        return {
            "company_name": self.company_name,
            "branch_name": self.branch_name,
            "phone": self.phone,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
