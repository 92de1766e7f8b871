"""
Tests for configuration loading and validation
"""
import configparser

import pytest

from jardownloader.exceptions import ConfigurationError
from jardownloader.models.config import DEFAULT_MANIFEST_NAME
from jardownloader.storage.config_manager import ConfigManager


def test_missing_file_uses_defaults(tmp_path):
    manager = ConfigManager(tmp_path / "config.ini")

    config = manager.load_config()

    assert config.max_workers == 4
    assert config.max_attempts == 3
    assert config.manifest_name == DEFAULT_MANIFEST_NAME
    assert config.verify_archives is True
    assert config.download_archive is False
    assert config.config_path == str(tmp_path)
    assert not (tmp_path / "config.ini").exists()


def test_cli_options_override_file(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = 2\nverify_archives = false\n")

    config = ConfigManager(config_file).load_config(
        {"max_workers": 8, "download_dir": "out", "dry_run": True}
    )

    assert config.max_workers == 8
    assert config.verify_archives is False
    assert config.download_dir == "out"
    assert config.dry_run is True


def test_save_and_reload(tmp_path):
    config_file = tmp_path / "nested" / "config.ini"
    manager = ConfigManager(config_file)

    manager.save_new_config({"max_workers": 6, "manifest_name": "libs.txt"})
    config = ConfigManager(config_file).load_config()

    assert config.max_workers == 6
    assert config.manifest_name == "libs.txt"
    assert config.max_attempts == 3


def test_migration_adds_missing_keys(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = 3\n")

    ConfigManager(config_file).load_config()

    parser = configparser.ConfigParser()
    parser.read(config_file)
    section = parser["DEFAULT"]
    assert section["max_workers"] == "3"
    assert section["manifest_name"] == DEFAULT_MANIFEST_NAME
    assert section["download_archive"] == "false"
    assert "dry_run" not in section


@pytest.mark.parametrize(
    "options",
    [
        {"max_workers": 0},
        {"max_workers": 33},
        {"max_attempts": 0},
        {"retry_delay": -1},
        {"manifest_name": "META-INF/dependencies.txt"},
        {"manifest_name": ""},
    ],
)
def test_invalid_values_rejected(tmp_path, options):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "config.ini").load_config(options)


def test_unparsable_value_in_file(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_workers = many\n")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()
