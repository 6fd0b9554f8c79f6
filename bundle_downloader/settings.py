"""Settings manager for bundle-downloader settings.yaml files.

Manages three-scope settings system:
- User global (~/.bundle-downloader/settings.yaml)
- Project (.bundle-downloader/settings.yaml)
- Local (.bundle-downloader/settings.local.yaml)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from typing import Literal

import yaml
from pydantic import BaseModel
from pydantic import Field

from .transport import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = ".bundle-downloader"

DEFAULT_SOURCES = ["https://unity-assetloader-test.s3.us-east-2.amazonaws.com/bundles_info.json"]

ScopeType = Literal["user", "project", "local"]


class DownloaderSettings(BaseModel):
    """Effective downloader configuration."""

    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES), description="Metadata listing URLs")
    unload_on_enable: bool = Field(True, description="Unload cached bundles when the downloader is enabled")
    bundle_base_url: str | None = Field(None, description="Base URL bundle filenames are resolved against")
    platform: str | None = Field(None, description="Platform identifier override")
    timeout: float = Field(DEFAULT_TIMEOUT, description="HTTP timeout in seconds")


class SettingsManager:
    """Manages settings across user/project/local scopes."""

    def __init__(self, settings_dir: Path | None = None, user_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            settings_dir: Base directory for project/local settings (for testing).
                          If None, uses .bundle-downloader in current directory.
            user_dir: Base directory for user settings (for testing).
                      If None, uses ~/.bundle-downloader.
        """
        if settings_dir is None:
            settings_dir = Path(SETTINGS_DIR_NAME)
        if user_dir is None:
            user_dir = Path.home() / SETTINGS_DIR_NAME

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = settings_dir / "settings.yaml"
        self.local_settings_file = settings_dir / "settings.local.yaml"

    def load_settings(self) -> DownloaderSettings:
        """Validate merged settings into a DownloaderSettings."""
        return DownloaderSettings.model_validate(self.get_merged_settings())

    def get_sources(self, scope: ScopeType | None = None) -> list[str]:
        """Get metadata sources.

        Args:
            scope: Read a single scope. If None, the effective (merged) list.

        Returns:
            Source URLs in configured order
        """
        if scope is None:
            return self.load_settings().sources
        settings = self._read_settings(self._scope_file(scope)) or {}
        return list(settings.get("sources") or [])

    def add_source(self, url: str, scope: ScopeType = "project") -> bool:
        """Append a metadata source to a scope.

        Returns:
            True if added, False if already present in that scope
        """
        target_file = self._scope_file(scope)
        settings = self._read_settings(target_file) or {}
        sources = list(settings.get("sources") or [])
        if url in sources:
            return False

        sources.append(url)
        settings["sources"] = sources
        self._write_settings(target_file, settings)
        logger.info(f"Added {scope} metadata source: {url}")
        return True

    def remove_source(self, url: str, scope: ScopeType = "project") -> bool:
        """Remove a metadata source from a scope.

        Returns:
            True if removed, False if not found
        """
        target_file = self._scope_file(scope)
        settings = self._read_settings(target_file)

        if not settings or url not in (settings.get("sources") or []):
            return False

        settings["sources"] = [source for source in settings["sources"] if source != url]

        # Clean up empty sources section
        if not settings["sources"]:
            del settings["sources"]

        self._write_settings(target_file, settings)
        logger.info(f"Removed {scope} metadata source: {url}")
        return True

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings

        Returns:
            Merged settings dictionary
        """
        merged: dict[str, Any] = {}

        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)

        return merged

    def _scope_file(self, scope: ScopeType) -> Path:
        file_map = {
            "user": self.user_settings_file,
            "project": self.project_settings_file,
            "local": self.local_settings_file,
        }
        return file_map.get(scope, self.project_settings_file)

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Args:
            path: Path to settings file

        Returns:
            Settings dict or None if file doesn't exist or can't be parsed
        """
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if data else {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

    def _write_settings(self, path: Path, settings: dict[str, Any]) -> None:
        """Write settings to YAML file.

        Args:
            path: Path to settings file
            settings: Settings dictionary
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, "w") as f:
                yaml.dump(settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error(f"Failed to write settings to {path}: {e}")
            raise

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            overlay: Overlay dictionary (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
