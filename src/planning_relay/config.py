"""Configuration management for the planning relay."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class _EnvFirstSettings(BaseSettings):
    """Settings where process environment wins over explicit values.

    Explicit values come from the optional configuration file, so the
    environment (including variables loaded from ``.env``) overrides it.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class SMTPConfig(_EnvFirstSettings):
    """Outbound SMTP configuration."""

    model_config = SettingsConfigDict(env_prefix="SMTP_")

    host: str = Field("localhost", description="SMTP server host")
    port: int = Field(587, description="SMTP server port")
    secure: bool = Field(False, description="Use implicit TLS (usually port 465)")
    user: Optional[str] = Field(None, description="SMTP login")
    password: Optional[str] = Field(
        None, validation_alias="SMTP_PASS", description="SMTP password"
    )
    from_address: Optional[str] = Field(
        None, validation_alias="SMTP_FROM", description="Sender address (defaults to SMTP_USER)"
    )
    timeout: float = Field(30.0, description="Connection and command timeout in seconds")

    @property
    def sender(self) -> str:
        """Address used in the From header."""
        if self.from_address:
            return self.from_address
        if self.user:
            return self.user
        return f"noreply@{self.host}"

    def public_dict(self) -> Dict[str, Any]:
        """Configuration safe to log or return to clients."""
        return {
            "host": self.host,
            "port": self.port,
            "secure": self.secure,
            "user": self.user,
        }


class ServerConfig(_EnvFirstSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(3000, description="Listen port")
    max_content_length: int = Field(
        50 * 1024 * 1024, description="Maximum request body size in bytes"
    )
    cors_origin: str = Field("*", description="Value of Access-Control-Allow-Origin")


class LoggingConfig(_EnvFirstSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field("INFO", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    file_path: Optional[str] = Field(None, validation_alias="LOG_FILE", description="Path to log file")
    max_file_size: int = Field(10 * 1024 * 1024, description="Maximum log file size in bytes")
    backup_count: int = Field(5, description="Number of backup log files to keep")
    console_output: bool = Field(True, description="Enable console logging")


class Settings(_EnvFirstSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="")

    environment: str = Field(
        "development",
        validation_alias=AliasChoices("NODE_ENV", "APP_ENV"),
        description="Deployment environment; 'production' enforces TLS certificate checks",
    )

    smtp: SMTPConfig = Field(default_factory=SMTPConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def validate_certs(self) -> bool:
        """Certificate validation is relaxed outside production."""
        return self.is_production


def _load_config_file(config_file: Path) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file."""
    with open(config_file, "r") as f:
        if config_file.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f) or {}
        elif config_file.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported config file format: {config_file.suffix}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_file}")
    return data


def load_settings(
    env_file: Optional[str] = None,
    config_file: Optional[str] = None,
) -> Settings:
    """
    Load application settings from multiple sources.

    Sources are loaded in order of precedence (later sources override earlier):
    1. Default values
    2. Configuration file (YAML/JSON), with ``smtp``, ``server`` and
       ``logging`` sections
    3. Environment file (.env)
    4. Environment variables

    Args:
        env_file: Path to environment file (default: .env in the working directory)
        config_file: Optional path to a configuration file

    Returns:
        Loaded settings instance

    Raises:
        ConfigurationError: If a source cannot be read or a value is invalid
    """
    if env_file is not None:
        if not Path(env_file).exists():
            raise ConfigurationError(f"Environment file not found: {env_file}")
        load_dotenv(env_file)
    else:
        load_dotenv()

    file_config: Dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        try:
            file_config = _load_config_file(path)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error parsing {config_file}: {e}", cause=e) from e

    sections = {
        "smtp": SMTPConfig,
        "server": ServerConfig,
        "logging": LoggingConfig,
    }

    try:
        values = dict(file_config)
        for key, section_cls in sections.items():
            values[key] = section_cls(**(file_config.get(key) or {}))
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}", cause=e) from e
