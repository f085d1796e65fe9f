"""Exception hierarchy for the palette engine.

Only configuration and credential errors ever reach a caller. Gateway
failures are caught by the query controller and turned into ``error``
state for display.
"""

from __future__ import annotations


class PaletteError(Exception):
    """Base class for all tunepalette errors."""


class GatewayError(PaletteError):
    """The remote catalog search failed (network, HTTP or payload error)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ConfigError(PaletteError):
    """A configuration value is missing or out of range."""


class CredentialsError(PaletteError):
    """Catalog API credentials are not configured."""
