"""tunepalette interactive TUI.

A Textual host app with a keyboard-driven command palette over the
remote music catalog, built-in commands and recent items.
"""

from __future__ import annotations

from pathlib import Path


def run_tui(config_path: Path | None = None) -> None:
    """Initialize services and launch the TUI application.

    Loads the palette config, looks up catalog credentials (running in
    commands-only mode when none are configured), and runs the Textual
    app. Imports are deferred for fast module loading.

    Args:
        config_path: Optional explicit palette config file.
    """
    from tunepalette.config import get_catalog_credentials, load_palette_config
    from tunepalette.exceptions import CredentialsError
    from tunepalette.recency import SqliteRecentsBackend
    from tunepalette.telemetry import configure_file_logging
    from tunepalette.tui.app import PaletteApp

    config = load_palette_config(config_path)
    configure_file_logging(config.log_dir)

    gateway = None
    try:
        client_id, client_secret = get_catalog_credentials()
    except CredentialsError as exc:
        print(f"Note: {exc}\nThe palette will search built-in commands only.")
    else:
        from tunepalette.services import SearchService

        gateway = SearchService(client_id, client_secret, config=config)

    app = PaletteApp(
        gateway=gateway,
        recents_backend=SqliteRecentsBackend(config.db_path),
        config=config,
    )
    app.run()
