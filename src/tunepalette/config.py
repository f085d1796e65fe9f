"""Configuration loading and validation for the palette."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path

import keyring

from tunepalette import constants
from tunepalette.exceptions import ConfigError, CredentialsError


SERVICE_NAME = "tunepalette-catalog"
CLIENT_ID_KEY = "client_id"
CLIENT_SECRET_KEY = "client_secret"
CLIENT_ID_ENV = "TUNEPALETTE_CLIENT_ID"
CLIENT_SECRET_ENV = "TUNEPALETTE_CLIENT_SECRET"

DEFAULT_CONFIG_PATH = Path("config/palette.json")


@dataclass
class PaletteConfig:
    """Palette tuning knobs with defaults from ``tunepalette.constants``."""

    debounce_seconds: float = constants.DEBOUNCE_SECONDS
    recent_capacity: int = constants.RECENT_CAPACITY
    recent_display_limit: int = constants.RECENT_DISPLAY_LIMIT
    max_exact: int = constants.MAX_EXACT
    max_recommendations: int = constants.MAX_RECOMMENDATIONS
    max_results: int = constants.MAX_RESULTS
    search_limit: int = constants.SEARCH_LIMIT
    search_retries: int = constants.SEARCH_RETRIES
    search_timeout_seconds: float = constants.SEARCH_TIMEOUT_SECONDS
    market: str | None = None
    db_path: str = constants.DEFAULT_DB_PATH
    log_dir: str = constants.DEFAULT_LOG_DIR
    api_base_url: str = constants.DEFAULT_API_BASE_URL
    auth_url: str = constants.DEFAULT_AUTH_URL

    def __post_init__(self) -> None:
        """Reject values the engine cannot honour."""
        if self.debounce_seconds < 0:
            raise ConfigError("debounce_seconds must be >= 0")
        for name in (
            "recent_capacity",
            "recent_display_limit",
            "max_exact",
            "max_recommendations",
            "max_results",
            "search_limit",
        ):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1")
        if self.search_retries < 0:
            raise ConfigError("search_retries must be >= 0")
        if self.recent_display_limit > self.recent_capacity:
            raise ConfigError(
                "recent_display_limit cannot exceed recent_capacity "
                f"({self.recent_display_limit} > {self.recent_capacity})"
            )


def load_palette_config(config_path: Path | None = None) -> PaletteConfig:
    """Load palette configuration from JSON, falling back to defaults.

    Reads ``config/palette.json`` when *config_path* is ``None``. A missing
    file yields the defaults. Unrecognised keys are ignored.

    Args:
        config_path: Optional explicit path to a palette config file.

    Returns:
        PaletteConfig with values from file merged over defaults.

    Raises:
        ConfigError: If the file is not valid JSON or a value is out of range.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")

    field_names = {f.name for f in fields(PaletteConfig)}
    kwargs = {k: v for k, v in data.items() if k in field_names}
    return PaletteConfig(**kwargs)


def get_catalog_credentials() -> tuple[str, str]:
    """Get catalog API credentials: system keyring first, then env vars.

    Returns:
        ``(client_id, client_secret)``.

    Raises:
        CredentialsError: If either value is missing, with setup instructions.
    """
    client_id = keyring.get_password(SERVICE_NAME, CLIENT_ID_KEY) or os.environ.get(
        CLIENT_ID_ENV
    )
    client_secret = keyring.get_password(
        SERVICE_NAME, CLIENT_SECRET_KEY
    ) or os.environ.get(CLIENT_SECRET_ENV)

    if client_id and client_secret:
        return client_id, client_secret

    raise CredentialsError(
        "Catalog API credentials not found.\n"
        "Set them with: tunepalette config set-credentials CLIENT_ID CLIENT_SECRET\n"
        f"Or: export {CLIENT_ID_ENV}=... {CLIENT_SECRET_ENV}=..."
    )


def set_catalog_credentials(client_id: str, client_secret: str) -> None:
    """Store catalog API credentials in the system keyring."""
    keyring.set_password(SERVICE_NAME, CLIENT_ID_KEY, client_id)
    keyring.set_password(SERVICE_NAME, CLIENT_SECRET_KEY, client_secret)


def remove_catalog_credentials() -> bool:
    """Delete stored credentials. Returns False if none were stored."""
    removed = False
    for key in (CLIENT_ID_KEY, CLIENT_SECRET_KEY):
        if keyring.get_password(SERVICE_NAME, key) is None:
            continue
        keyring.delete_password(SERVICE_NAME, key)
        removed = True
    return removed
