"""Tests for the top-level command line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from src.forcelogout import __version__
from src.forcelogout.cli import app

runner = CliRunner()


def test_version(tmp_path, monkeypatch):
    monkeypatch.setenv("FORCELOGOUT_CONFIG", str(tmp_path / "missing.yaml"))
    with patch("src.forcelogout.cli.setup_logging"):
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"forcelogout version: {__version__}" in result.output


def test_verbose_enables_debug_logging(tmp_path, monkeypatch):
    monkeypatch.setenv("FORCELOGOUT_CONFIG", str(tmp_path / "missing.yaml"))
    with patch("src.forcelogout.cli.setup_logging") as setup_logging:
        result = runner.invoke(app, ["--verbose", "version"])

    assert result.exit_code == 0
    assert setup_logging.call_args.args[0].level.value == "DEBUG"


def test_invalid_config_file_exits_one(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("logging: [broken\n")
    monkeypatch.setenv("FORCELOGOUT_CONFIG", str(config_file))
    monkeypatch.setenv("COLUMNS", "200")

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 1
    assert "not valid YAML" in result.output
