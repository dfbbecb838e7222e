"""maintain settings module.

Useful items:
    settings: The settings object.
    MAINTAIN_DIRECTORY: The directory where maintain looks for its files.
    settings_path: The path to the settings file.
"""

import os
from pathlib import Path

from dynaconf import Dynaconf, Validator
from dynaconf.validator import ValidationError

from maintain.exceptions import ConfigurationError
from maintain.helpers.dict_utils import merge_dicts

MAINTAIN_DIRECTORY = Path.home().joinpath(".maintain")

if "MAINTAIN_DIRECTORY" in os.environ:
    envar_location = Path(os.environ["MAINTAIN_DIRECTORY"])
    if envar_location.is_dir():
        MAINTAIN_DIRECTORY = envar_location

# ensure the maintain directory exists
MAINTAIN_DIRECTORY.mkdir(parents=True, exist_ok=True)

settings_path = MAINTAIN_DIRECTORY.joinpath("maintain_settings.yaml")

LOG_LEVELS = ["error", "warning", "info", "debug", "trace", "silent"]

BASE_VALIDATORS = [
    Validator("LOGGING", is_type_of=dict, default={}),
    Validator("LOGGING.CONSOLE_LEVEL", is_in=LOG_LEVELS, default="info"),
    Validator("LOGGING.FILE_LEVEL", is_in=LOG_LEVELS, default="debug"),
    Validator("LOGGING.LOG_PATH", default="logs/maintain.log"),
    Validator("LOGGING.STRUCTURED", default=False),
    # database_name: {local: bool}
    Validator("DATABASES", is_type_of=dict, default={}),
    # logical_id: [procedure kinds]
    Validator("PROCEDURES", is_type_of=dict, default={}),
    Validator("PROCEDURE_MODULES", is_type_of=list, default=[]),
    Validator("LESS_COLORS", default=False),
]


def _create_and_configure_settings(file_path, file_exists, config_dict):
    """Create settings object and apply configuration."""
    new_settings = Dynaconf(
        settings_file=str(file_path) if file_exists else None,
        ENVVAR_PREFIX_FOR_DYNACONF="MAINTAIN",
    )

    # Add any configuration values passed in, merging nested dicts
    if config_dict:
        for key, value in config_dict.items():
            existing = new_settings.get(key)
            if existing is not None and isinstance(existing, dict) and isinstance(value, dict):
                new_settings[key] = merge_dicts(existing, value)
            else:
                new_settings[key] = value

    return new_settings


def create_settings(config_dict=None, config_file=None):
    """Create a new settings object with custom configuration.

    Args:
        config_dict: Dictionary containing configuration values to overlay onto settings
        config_file: Path to a settings file to use instead of the default

    Returns:
        A dynaconf settings object
    """
    file_path = config_file or settings_path
    file_exists = Path(file_path).exists() if file_path else False

    new_settings = _create_and_configure_settings(file_path, file_exists, config_dict)
    # validators go on after the overlay so their defaults only fill what is still missing
    new_settings.validators.register(*BASE_VALIDATORS)

    try:
        new_settings.validators.validate()
    except ValidationError as err:
        raise ConfigurationError(f"Configuration error in {file_path}: {err.args[0]}") from err

    return new_settings


class _SettingsProxy:
    """Proxy object that creates settings on first access."""

    def __init__(self):
        self._settings = None

    def _ensure_settings(self):
        if self._settings is None:
            self._settings = create_settings()
        return self._settings

    def __getattr__(self, name):
        return getattr(self._ensure_settings(), name)

    def __getitem__(self, key):
        return self._ensure_settings()[key]

    def __setitem__(self, key, value):
        self._ensure_settings()[key] = value

    def __contains__(self, key):
        return key in self._ensure_settings()


# Create the global settings object (deferred)
settings = _SettingsProxy()
