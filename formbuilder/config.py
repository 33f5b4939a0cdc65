"""Form builder settings loaded from the environment and an optional YAML file."""

import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE_NAME = "formbuilder.yaml"

ENV_REFERENCE = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def _env_value(match: re.Match) -> str:
    name = match.group(1)
    if name not in os.environ:
        raise ValueError(f"${name} is referenced in {CONFIG_FILE_NAME} but not set")
    return os.environ[name]


def expand_env_references(section: dict) -> dict:
    """Expand $VAR_NAME references in the string values of the formbuilder section."""
    return {
        key: ENV_REFERENCE.sub(_env_value, value) if isinstance(value, str) else value
        for key, value in section.items()
    }


class FormBuilderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FORMBUILDER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    charset: str = "UTF-8"

    # Textarea size used when neither "size" nor cols/rows are given
    textarea_cols: int = 50
    textarea_rows: int = 10

    # strftime pattern for select_month option labels
    month_format: str = "%B"

    # Session keys shared with the host application
    csrf_session_key: str = "_csrf_token"
    old_input_session_key: str = "_old_input"

    # Rendered in the _token field when no CSRF token is configured
    unsupported_token: str = "UNSUPPORTED"


def load_yaml_config(config_path: Path) -> dict:
    """Read the ``formbuilder`` section of a YAML file with env var interpolation."""
    if not config_path.exists():
        raise FileNotFoundError(f"{config_path.name} not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return expand_env_references(config.get("formbuilder") or {})


def load_settings(config_path: Path | str | None = None) -> FormBuilderSettings:
    """Build settings from the environment, overridden by the YAML file if one is given."""
    if config_path is None:
        return FormBuilderSettings()
    return FormBuilderSettings(**load_yaml_config(Path(config_path)))


@lru_cache
def get_settings() -> FormBuilderSettings:
    """Load settings from .env and ./formbuilder.yaml when present."""
    config_path = Path.cwd() / CONFIG_FILE_NAME
    if not config_path.exists():
        return FormBuilderSettings()
    return load_settings(config_path)
