# cardreader/settings_manager.py
# Description: Loads, merges and saves reader settings (logging, upload limits, avatar output).
import json
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cardreader.utils.constants import DEFAULT_SETTINGS_FILENAME, SETTINGS_ENV_VAR

VERSION = "1.0.0"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "logs_directory": "logs",
    "log_to_console": True,
    "keep_log_files": 1,
    "max_upload_bytes": 20 * 1024 * 1024,
    "include_fallback_avatar": True,
    "version": VERSION,
}


class SettingsManager:
    def __init__(self, logger=None, settings_file: Optional[Union[str, Path]] = None):
        self.logger = logger
        self.settings_file = Path(settings_file) if settings_file else self._get_settings_path()
        self.settings = self._load_settings()

    def _get_settings_path(self) -> Path:
        """Get the path where settings.json should be stored."""
        env_path = os.environ.get(SETTINGS_ENV_VAR)
        if env_path:
            return Path(env_path)
        if getattr(sys, 'frozen', False):
            # If running as PyInstaller bundle
            return Path(sys.executable).parent / DEFAULT_SETTINGS_FILENAME
        else:
            return Path(__file__).parent.parent / DEFAULT_SETTINGS_FILENAME

    def _log_step(self, message: str):
        if self.logger:
            self.logger.log_step(message)

    def _log_error(self, message: str):
        if self.logger:
            self.logger.log_error(message)
        else:
            print(f"Settings error: {message}")

    def _load_settings(self) -> Dict[str, Any]:
        """Load settings from file, creating default if doesn't exist."""
        default_settings = dict(DEFAULT_SETTINGS)

        if not self.settings_file.exists():
            self._save_settings(default_settings)
            return default_settings

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                stored_settings = json.load(f)
        except json.JSONDecodeError as json_err:
            self._log_error(f"Invalid JSON in settings file: {str(json_err)}")

            backup_file = self.settings_file.parent / f"{self.settings_file.name}.bak"
            try:
                shutil.copy2(self.settings_file, backup_file)
                self._log_step(f"Created backup of settings file at {backup_file}")
            except OSError as backup_err:
                self._log_error(f"Failed to create backup of settings file: {str(backup_err)}")

            self._save_settings(default_settings)
            return default_settings
        except OSError as io_err:
            self._log_error(f"IO error reading settings file: {str(io_err)}")
            return default_settings

        if not isinstance(stored_settings, dict):
            self._log_error("Settings file does not contain a JSON object, using defaults")
            return default_settings

        # Merge with defaults in case new settings were added
        return {**default_settings, **stored_settings}

    def _save_settings(self, settings: Dict[str, Any]) -> bool:
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            return True
        except OSError as e:
            self._log_error(f"Error saving settings: {str(e)}")
            return False

    def get_setting(self, key: str, default: Any = None) -> Any:
        if default is None:
            default = DEFAULT_SETTINGS.get(key)
        return self.settings.get(key, default)

    def update_settings(self, new_settings: Dict[str, Any]) -> bool:
        """Merge new values into the current settings and persist them."""
        unknown = [key for key in new_settings if key not in DEFAULT_SETTINGS]
        if unknown:
            self._log_step(f"Storing unrecognized settings keys: {unknown}")
        self.settings.update(new_settings)
        saved = self._save_settings(self.settings)
        if saved:
            self._log_step(f"Settings updated: {list(new_settings.keys())}")
        return saved
