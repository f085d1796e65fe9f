"""Tests for the typer CLI (cli.py) via typer's CliRunner."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from tunepalette import cli
from tunepalette.database import Database
from tunepalette.exceptions import CredentialsError
from tunepalette.models import RecencyEntry, ResultType

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "palette.json"
    path.write_text(json.dumps({"db_path": str(tmp_path / "palette.db")}))
    return path


def test_commands_lists_catalog():
    result = runner.invoke(cli.app, ["commands"])
    assert result.exit_code == 0
    assert "Toggle Dark Mode" in result.output
    assert "nav.home" in result.output


def test_search_commands_only():
    result = runner.invoke(cli.app, ["search", "toggle", "--commands-only"])
    assert result.exit_code == 0
    assert "Top Results" in result.output
    assert "Toggle Repeat" in result.output


def test_search_no_results():
    result = runner.invoke(cli.app, ["search", "zzz", "--commands-only"])
    assert result.exit_code == 0
    assert 'No results found for "zzz"' in result.output


def test_search_without_credentials_fails(monkeypatch):
    def _missing():
        raise CredentialsError("Catalog API credentials not found.")

    monkeypatch.setattr(cli, "get_catalog_credentials", _missing)
    result = runner.invoke(cli.app, ["search", "arc"])
    assert result.exit_code == 1
    assert "credentials not found" in result.output


def test_recents_empty(config_file):
    result = runner.invoke(cli.app, ["recents", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "No recent items yet" in result.output


def test_recents_lists_entries(config_file, tmp_path):
    with Database(tmp_path / "palette.db") as db:
        db.replace_recents(
            [RecencyEntry(id="t1", type=ResultType.TRACK, title="Arctic Waves", last_used_at=1.7e9)]
        )

    result = runner.invoke(cli.app, ["recents", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "Arctic Waves" in result.output


def test_invalid_config_exits(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{nope")
    result = runner.invoke(cli.app, ["recents", "--config", str(bad)])
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_show_credentials_masks_secret(monkeypatch):
    monkeypatch.setattr(cli, "get_catalog_credentials", lambda: ("client-1", "supersecret"))
    result = runner.invoke(cli.app, ["config", "show-credentials"])
    assert result.exit_code == 0
    assert "client-1" in result.output
    assert "supersecret" not in result.output
    assert "supe*******" in result.output


def test_set_credentials_rejects_blank():
    result = runner.invoke(cli.app, ["config", "set-credentials", " ", "secret"])
    assert result.exit_code == 1


def test_remove_credentials_when_none(monkeypatch):
    monkeypatch.setattr(cli, "remove_catalog_credentials", lambda: False)
    result = runner.invoke(cli.app, ["config", "remove-credentials"])
    assert result.exit_code == 0
    assert "No credentials found" in result.output
