import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_FILE_ENV = "PROVINFER_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "provinfer.yaml"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings from a YAML file.

    The file is named by PROVINFER_CONFIG_FILE, falling back to
    ``provinfer.yaml`` in the working directory. A missing file contributes
    nothing.
    """

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self._data = self._read()

    @staticmethod
    def _read() -> dict[str, Any]:
        path = Path(os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE)
        if not path.is_file():
            return {}
        data = yaml.safe_load(path.read_text())
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        return data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class LoggingConfig(BaseModel):
    """Logging settings, overridable as PROVINFER_LOGGING__<FIELD>."""

    level: str = "WARNING"
    format: str = "%(levelname)-8s [%(name)s] %(message)s"
    file: Path | None = None  # stderr when unset


class Config(BaseSettings):
    package: str | None = None  # Publish under this name instead of the provider's
    allow_missing_external_types: bool = False  # Untagged foreign resources become Any
    schema_indent: int = Field(default=2, ge=0)  # JSON indentation of the written schema
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="PROVINFER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Explicit values, then the environment and .env, then the YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def _handler(config: LoggingConfig) -> logging.Handler:
    if config.file is None:
        # stdout carries the schema document
        return logging.StreamHandler(sys.stderr)
    path = config.file.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path)


def configure_logging(config: LoggingConfig) -> None:
    """Route log records to a single handler at the configured level.

    Called by the CLI before any schema is built. Replaces whatever
    handlers the root logger had.
    """
    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)

    handler = _handler(config)
    handler.setFormatter(logging.Formatter(config.format))
    root.addHandler(handler)
    root.setLevel(config.level.upper())

    logging.getLogger(__name__).debug("Logging to %s at %s", config.file or "stderr", config.level)
