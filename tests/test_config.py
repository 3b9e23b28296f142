"""Tests for configuration validation and persistence."""

import json

import pytest
from pydantic import ValidationError

from log_manager import config as config_module
from log_manager.config import Settings, StorageType


@pytest.fixture
def settings_file(monkeypatch, tmp_path):
    """Redirect persisted settings to a temporary file."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr(config_module, "SETTINGS_FILE", path)
    monkeypatch.setattr(config_module.settings, "storage_type", config_module.settings.storage_type)
    monkeypatch.setattr(config_module.settings, "file_path", config_module.settings.file_path)
    monkeypatch.setattr(
        config_module.settings, "message_preview_length", config_module.settings.message_preview_length
    )
    return path


class TestConfigValidation:
    """Tests for Settings validation."""

    def test_defaults(self):
        s = Settings()
        assert s.storage_type == StorageType.DATABASE
        assert s.timezone == "Asia/Kolkata"
        assert s.settings_post_types["acf-field"] == "ACF Field"

    def test_textfile_alias(self):
        """Test the legacy 'textfile' value selects the file backend."""
        assert Settings(storage_type="textfile").storage_type == StorageType.FILE
        assert Settings(storage_type=" FILE ").storage_type == StorageType.FILE

    def test_unknown_storage_type_rejected(self):
        with pytest.raises(ValidationError):
            Settings(storage_type="carrier-pigeon")

    def test_file_path_trailing_separator_removed(self):
        assert Settings(file_path="/var/log/cms/").file_path == "/var/log/cms"
        assert Settings(file_path="/").file_path == "/"
        assert Settings(file_path="  ").file_path == ""

    def test_timezone_validation(self):
        assert Settings(timezone="UTC").tzinfo.key == "UTC"
        with pytest.raises(ValidationError) as exc_info:
            Settings(timezone="Mars/Olympus_Mons")
        assert "timezone" in str(exc_info.value).lower()

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("LOG_MANAGER_STORAGE_TYPE", "file")
        monkeypatch.setenv("LOG_MANAGER_FILE_PATH", "/srv/logs")

        s = Settings()

        assert s.storage_type == StorageType.FILE
        assert s.file_path == "/srv/logs"


class TestConfigHelpers:
    """Tests for config helper functions."""

    def test_get_config_dict_keys(self):
        config = config_module.get_config_dict()
        for key in ("app_name", "debug", "storage_type", "file_path", "timezone", "message_preview_length"):
            assert key in config

    def test_update_config_applies_and_persists(self, settings_file):
        config_module.update_config({"storage_type": "textfile", "file_path": "/tmp/audit/"})

        assert config_module.settings.storage_type == StorageType.FILE
        assert config_module.settings.file_path == "/tmp/audit"

        saved = json.loads(settings_file.read_text())
        assert saved["storage_type"] == "file"
        assert saved["file_path"] == "/tmp/audit"

    def test_update_config_rejects_invalid_without_side_effects(self, settings_file):
        before = config_module.settings.storage_type

        with pytest.raises(ValidationError):
            config_module.update_config({"storage_type": "carrier-pigeon"})

        assert config_module.settings.storage_type == before
        assert not settings_file.exists()

    def test_load_settings_applies_file(self, settings_file):
        settings_file.write_text(json.dumps({"storage_type": "file", "message_preview_length": 40}))

        config_module.load_settings()

        assert config_module.settings.storage_type == StorageType.FILE
        assert config_module.settings.message_preview_length == 40

    def test_load_settings_ignores_invalid_file(self, settings_file):
        before = config_module.settings.storage_type
        settings_file.write_text(json.dumps({"storage_type": "carrier-pigeon"}))

        config_module.load_settings()

        assert config_module.settings.storage_type == before

    def test_validate_critical_settings_warns_without_path(self, settings_file, caplog):
        config_module.settings.storage_type = StorageType.FILE
        config_module.settings.file_path = ""

        with caplog.at_level("WARNING", logger="log_manager.config"):
            config_module.validate_critical_settings()

        assert "FILE_PATH is empty" in caplog.text
