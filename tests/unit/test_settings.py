"""
Tests for shadowgit_mcp.config.settings - storage location and layering.
"""

from pathlib import Path

import pytest

from shadowgit_mcp.config.settings import (
    DEFAULT_MAX_COMMAND_LENGTH,
    DEFAULT_TIMEOUT_MS,
    ServerSettings,
    get_storage_location,
    load_settings,
    normalize_log_level,
)


class TestStorageLocation:
    def test_macos(self, tmp_path):
        assert get_storage_location("darwin", {}, tmp_path) == tmp_path / ".shadowgit"

    def test_windows_localappdata(self, tmp_path):
        location = get_storage_location("win32", {"LOCALAPPDATA": "/appdata"}, tmp_path)
        assert location == Path("/appdata") / "shadowgit"

    def test_windows_fallback(self, tmp_path):
        location = get_storage_location("win32", {}, tmp_path)
        assert location == tmp_path / "AppData" / "Local" / "shadowgit"

    def test_linux_xdg(self, tmp_path):
        location = get_storage_location("linux", {"XDG_DATA_HOME": "/xdg"}, tmp_path)
        assert location == Path("/xdg") / "shadowgit"

    def test_linux_default(self, tmp_path):
        location = get_storage_location("linux", {}, tmp_path)
        assert location == tmp_path / ".local" / "share" / "shadowgit"

    def test_override(self, tmp_path):
        location = get_storage_location("darwin", {"SHADOWGIT_HOME": "/custom"}, tmp_path)
        assert location == Path("/custom")


class TestLoadSettings:
    def test_defaults(self, tmp_path):
        settings = load_settings(environ={}, storage_dir=tmp_path)
        assert settings == ServerSettings(storage_dir=tmp_path)
        assert settings.timeout_ms == DEFAULT_TIMEOUT_MS
        assert settings.max_command_length == DEFAULT_MAX_COMMAND_LENGTH
        assert settings.registry_path == tmp_path / "repos.json"

    def test_storage_from_environment(self, tmp_path):
        settings = load_settings(environ={"SHADOWGIT_HOME": str(tmp_path)})
        assert settings.storage_dir == tmp_path

    def test_settings_file(self, tmp_path):
        (tmp_path / "mcp-settings.yaml").write_text(
            "timeout_ms: 30000\n"
            "max_output_bytes: 2048\n"
            "log_level: debug\n"
            "git_executable: /opt/git/bin/git\n",
            encoding="utf-8",
        )
        settings = load_settings(environ={}, storage_dir=tmp_path)
        assert settings.timeout_ms == 30000
        assert settings.max_output_bytes == 2048
        assert settings.log_level == "DEBUG"
        assert settings.git_executable == "/opt/git/bin/git"

    def test_environment_beats_file(self, tmp_path):
        (tmp_path / "mcp-settings.yaml").write_text("timeout_ms: 30000\n", encoding="utf-8")
        environ = {
            "SHADOWGIT_TIMEOUT": "5000",
            "SHADOWGIT_LOG_LEVEL": "warn",
            "SHADOWGIT_GIT": "/usr/local/bin/git",
        }
        settings = load_settings(environ=environ, storage_dir=tmp_path)
        assert settings.timeout_ms == 5000
        assert settings.log_level == "WARNING"
        assert settings.git_executable == "/usr/local/bin/git"

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_invalid_timeout_ignored(self, tmp_path, value):
        settings = load_settings(environ={"SHADOWGIT_TIMEOUT": value}, storage_dir=tmp_path)
        assert settings.timeout_ms == DEFAULT_TIMEOUT_MS

    @pytest.mark.parametrize("content", ["timeout_ms: [oops\n", "- just\n- a list\n"])
    def test_unusable_file_ignored(self, tmp_path, content):
        (tmp_path / "mcp-settings.yaml").write_text(content, encoding="utf-8")
        assert load_settings(environ={}, storage_dir=tmp_path) == ServerSettings(tmp_path)


class TestLogLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("debug", "DEBUG"),
            ("INFO", "INFO"),
            ("warn", "WARNING"),
            ("Warning", "WARNING"),
            (" error ", "ERROR"),
            (None, "INFO"),
            ("", "INFO"),
            ("verbose", "INFO"),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_log_level(value) == expected

    def test_custom_default(self):
        assert normalize_log_level("loud", default="ERROR") == "ERROR"
