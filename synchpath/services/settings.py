"""
Application settings management.

Settings live in a JSON file and provide the defaults that
command-line flags override.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from synchpath.core.errors import ConfigurationError
from synchpath.core.models import SyncOptions


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class SyncSettings:
    """Default synchronization behaviour."""
    allow_delete: bool = False
    verbose: bool = False
    skip_symlinks: bool = False
    time_window: int = 0


@dataclass
class LoggingSettings:
    """Console and log file output."""
    level: str = "INFO"
    use_colors: bool = True


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    sync: SyncSettings = field(default_factory=SyncSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def to_sync_options(self) -> SyncOptions:
        """Build the immutable options for one run."""
        return SyncOptions(
            allow_delete=self.sync.allow_delete,
            verbose=self.sync.verbose,
            time_window=self.sync.time_window,
            skip_symlinks=self.sync.skip_symlinks,
        )


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.explicit = settings_path is not None
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'synchpath' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'synchpath' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """
        Load settings from disk.

        A missing default file yields the defaults. A settings file given
        explicitly must exist, and any file that exists must be valid.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid.
        """
        if not self.settings_path.exists():
            if self.explicit:
                raise ConfigurationError(f"Settings file not found: {self.settings_path}")
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read settings file {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {self.settings_path} must contain a JSON object")

        return self._from_dict(data)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        sync_data = data.get('sync', {})
        logging_data = data.get('logging', {})
        if not isinstance(sync_data, dict) or not isinstance(logging_data, dict):
            raise ConfigurationError("The 'sync' and 'logging' settings must be JSON objects")

        sync = SyncSettings(
            allow_delete=_get_bool(sync_data, 'allow_delete', False),
            verbose=_get_bool(sync_data, 'verbose', False),
            skip_symlinks=_get_bool(sync_data, 'skip_symlinks', False),
            time_window=sync_data.get('time_window', 0),
        )
        if isinstance(sync.time_window, bool) or not isinstance(sync.time_window, int) or sync.time_window < 0:
            raise ConfigurationError(
                f"sync.time_window must be a non-negative integer, got {sync.time_window!r}"
            )

        level = str(logging_data.get('level', 'INFO')).upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

        return ApplicationSettings(
            sync=sync,
            logging=LoggingSettings(
                level=level,
                use_colors=_get_bool(logging_data, 'use_colors', True),
            ),
        )


def _get_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"Setting {key!r} must be true or false, got {value!r}")
    return value
