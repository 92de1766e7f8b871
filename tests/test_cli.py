"""
Tests for the Typer command-line interface
"""
import socket
import zipfile

import pytest
from typer.testing import CliRunner

from jardownloader import __version__
from jardownloader.cli import app as cli_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Points the CLI at a throwaway config directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(cli_app, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(cli_app, "CONFIG_FILE", config_dir / "config.ini")
    return config_dir


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_fetch_without_manifest():
    result = runner.invoke(cli_app.app, ["fetch"])

    assert result.exit_code == 1
    assert "No manifest provided" in result.output


def test_fetch_missing_manifest(tmp_path):
    result = runner.invoke(cli_app.app, ["fetch", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "JAR-DOWNLOADER" in result.output
    assert "Dependency file not found" in result.output


def test_fetch_dry_run_with_input_option(tmp_path):
    manifest = tmp_path / "dependencies.txt"
    manifest.write_text(
        "https://example.org/file1.jar\nhttps://example.org/file2.jar\n",
        encoding="utf-8",
    )

    result = runner.invoke(
        cli_app.app,
        ["fetch", "-i", str(manifest), "-d", str(tmp_path / "out"), "--dry-run"],
    )

    assert result.exit_code == 0
    assert "Would download" in result.output
    assert "https://example.org/file1.jar" in result.output
    assert "https://example.org/file2.jar" in result.output
    assert "Dry Run Summary" in result.output
    assert not (tmp_path / "out").exists()


def test_fetch_rejects_argument_and_option(tmp_path):
    manifest = tmp_path / "dependencies.txt"
    manifest.write_text("https://example.org/a.jar\n")

    result = runner.invoke(cli_app.app, ["fetch", str(manifest), "-i", str(manifest)])

    assert result.exit_code == 1


def test_fetch_rejects_invalid_workers(tmp_path):
    manifest = tmp_path / "dependencies.txt"
    manifest.write_text("https://example.org/a.jar\n")

    result = runner.invoke(cli_app.app, ["fetch", str(manifest), "-w", "0", "--dry-run"])

    assert result.exit_code == 1
    assert "Max workers" in result.output


def test_scan_empty_directory(tmp_path):
    search = tmp_path / "plugins"
    search.mkdir()

    result = runner.invoke(
        cli_app.app, ["scan", str(search), str(tmp_path / "libs"), "--dry-run"]
    )

    assert result.exit_code == 0


def test_scan_missing_directory(tmp_path):
    result = runner.invoke(cli_app.app, ["scan", str(tmp_path / "nowhere")])

    assert result.exit_code == 1
    assert "Search path not found" in result.output


def test_init_then_validate(isolated_config):
    result = runner.invoke(cli_app.app, ["init"])

    assert result.exit_code == 0
    assert (isolated_config / "config.ini").is_file()

    result = runner.invoke(cli_app.app, ["validate"])

    assert result.exit_code == 0
    assert "Validated Settings" in result.output


def test_init_refuses_overwrite_without_confirmation(isolated_config):
    runner.invoke(cli_app.app, ["init"])

    result = runner.invoke(cli_app.app, ["init"], input="n\n")

    assert result.exit_code != 0


def test_validate_reports_bad_config(isolated_config):
    isolated_config.mkdir()
    (isolated_config / "config.ini").write_text("[DEFAULT]\nmax_attempts = 99\n")

    result = runner.invoke(cli_app.app, ["validate"])

    assert result.exit_code == 1
    assert "Configuration is invalid" in result.output


def test_stats_on_empty_archive():
    result = runner.invoke(cli_app.app, ["stats"])

    assert result.exit_code == 0
    assert "No downloads recorded yet" in result.output


def test_clear_archive_forced():
    result = runner.invoke(cli_app.app, ["clear-archive", "--force"])

    assert result.exit_code == 0
    assert "Download archive cleared" in result.output


def _unreachable_manifest(tmp_path):
    """A manifest whose only URL points at a closed local port."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    manifest = tmp_path / "dependencies.txt"
    manifest.write_text(f"http://127.0.0.1:{port}/missing.jar\n", encoding="utf-8")
    return manifest


def test_failed_download_still_exits_zero(tmp_path):
    manifest = _unreachable_manifest(tmp_path)

    result = runner.invoke(
        cli_app.app,
        ["fetch", str(manifest), "-d", str(tmp_path / "libs"), "--attempts", "1"],
    )

    assert result.exit_code == 0
    assert not (tmp_path / "libs" / "missing.jar").exists()


def test_strict_exits_one_on_failed_download(tmp_path):
    manifest = _unreachable_manifest(tmp_path)

    result = runner.invoke(
        cli_app.app,
        [
            "fetch",
            str(manifest),
            "-d",
            str(tmp_path / "libs"),
            "--attempts",
            "1",
            "--strict",
        ],
    )

    assert result.exit_code == 1


def test_scan_uses_custom_manifest_name(tmp_path):
    plugins = tmp_path / "plugins"
    plugins.mkdir()
    with zipfile.ZipFile(plugins / "plugin.jar", "w") as zf:
        zf.writestr("libs.txt", "https://example.org/custom.jar\n")
        zf.writestr("dependencies.txt", "https://example.org/default.jar\n")

    result = runner.invoke(
        cli_app.app,
        [
            "scan",
            str(plugins),
            str(tmp_path / "libs"),
            "--manifest-name",
            "libs.txt",
            "--dry-run",
        ],
    )

    assert result.exit_code == 0
    assert "https://example.org/custom.jar" in result.output
    assert "https://example.org/default.jar" not in result.output
