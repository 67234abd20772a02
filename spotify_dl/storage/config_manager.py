"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from spotify_dl.exceptions import ConfigurationError
from spotify_dl.models.config import DownloadConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> DownloadConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing file is not an error on its own: the CLI options may carry
        everything that is required, the access token in particular.

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(f"No configuration file at '{self.config_file_path}'")

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return DownloadConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file, filling unspecified keys
        with the model defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = DownloadConfig.model_construct()
        for key in sorted(DownloadConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            config["DEFAULT"][key] = self._to_ini(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if hasattr(value, "value"):
            return str(value.value)
        return "" if value is None else str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        return {
            "access_token": section.get("access_token", ""),
            "destination": section.get("destination", "."),
            "parallel": section.getint("parallel", 5),
            "on_error": section.get("on_error", "abort"),
            "embed_cover": section.getboolean("embed_cover", True),
            "rename": section.getboolean("rename", True),
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = DownloadConfig.model_construct()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(DownloadConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
