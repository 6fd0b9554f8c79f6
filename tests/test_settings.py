"""Tests for SettingsManager scope handling."""

import pytest
import yaml
from bundle_downloader.settings import DEFAULT_SOURCES
from bundle_downloader.settings import SettingsManager


@pytest.fixture
def manager(tmp_path):
    return SettingsManager(settings_dir=tmp_path / "project", user_dir=tmp_path / "user")


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data))


class TestLoadSettings:
    def test_defaults_without_files(self, manager):
        settings = manager.load_settings()

        assert settings.sources == DEFAULT_SOURCES
        assert settings.unload_on_enable is True
        assert settings.bundle_base_url is None
        assert settings.platform is None

    def test_local_overrides_project_overrides_user(self, manager):
        _write(manager.user_settings_file, {"platform": "Linux", "timeout": 5, "sources": ["https://user"]})
        _write(manager.project_settings_file, {"platform": "OSX", "sources": ["https://project"]})
        _write(manager.local_settings_file, {"platform": "Windows"})

        settings = manager.load_settings()

        assert settings.platform == "Windows"
        assert settings.timeout == 5
        assert settings.sources == ["https://project"]

    def test_empty_file_is_ignored(self, manager):
        manager.project_settings_file.parent.mkdir(parents=True)
        manager.project_settings_file.write_text("")

        assert manager.get_merged_settings() == {}

    def test_corrupt_file_is_skipped(self, manager, caplog):
        manager.project_settings_file.parent.mkdir(parents=True)
        manager.project_settings_file.write_text("sources: [unterminated")

        assert manager.get_merged_settings() == {}
        assert "Failed to read settings" in caplog.text


class TestSources:
    def test_add_source_appends_once(self, manager):
        assert manager.add_source("https://a/list.json") is True
        assert manager.add_source("https://a/list.json") is False
        assert manager.add_source("https://b/list.json") is True

        assert manager.get_sources("project") == ["https://a/list.json", "https://b/list.json"]
        assert manager.get_sources() == ["https://a/list.json", "https://b/list.json"]

    def test_add_source_to_user_scope(self, manager):
        manager.add_source("https://a/list.json", scope="user")

        assert yaml.safe_load(manager.user_settings_file.read_text()) == {"sources": ["https://a/list.json"]}
        assert manager.get_sources("project") == []

    def test_remove_source(self, manager):
        manager.add_source("https://a/list.json", scope="local")
        manager.add_source("https://b/list.json", scope="local")

        assert manager.remove_source("https://a/list.json", scope="local") is True
        assert manager.get_sources("local") == ["https://b/list.json"]

    def test_remove_last_source_drops_section(self, manager):
        _write(manager.project_settings_file, {"platform": "Linux", "sources": ["https://a"]})

        manager.remove_source("https://a")

        assert yaml.safe_load(manager.project_settings_file.read_text()) == {"platform": "Linux"}
        assert manager.load_settings().sources == DEFAULT_SOURCES

    def test_remove_unknown_source(self, manager):
        assert manager.remove_source("https://nowhere") is False
