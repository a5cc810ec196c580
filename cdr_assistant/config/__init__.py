"""
Configuration system for the VoIPmonitor support assistant.

Settings come from an optional YAML file plus environment variables and are
validated with Pydantic v2. Upstream credentials are environment-only.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field
import structlog

from cdr_assistant.config.loaders import resolve_config_path, load_yaml_with_env_expansion
from cdr_assistant.config.security import inject_voipmonitor_credentials
from cdr_assistant.config.defaults import apply_voipmonitor_defaults, apply_tool_defaults

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/assistant.yaml"


class VoipMonitorConfig(BaseModel):
    url: str
    username: str
    password: str
    request_timeout_sec: float = Field(default=30.0, gt=0)
    verify_ssl: bool = Field(default=True)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(default="json")  # json | console


class ServerConfig(BaseModel):
    name: str = Field(default="VoIPmonitor Support Assistant")
    version: str = Field(default="1.0.0")
    timezone: str = Field(default="UTC")  # used for "today" and "now" in time ranges


class AppConfig(BaseModel):
    voipmonitor: VoipMonitorConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: Dict[str, Any] = Field(default_factory=dict)


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Load and validate configuration.

    Args:
        path: Path to YAML configuration file (absolute or relative to project root).
            A missing file is treated as empty.

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If VoIPmonitor URL or credentials are missing
        yaml.YAMLError: If YAML parsing fails
    """
    path = resolve_config_path(path)
    config_data = load_yaml_with_env_expansion(path)

    inject_voipmonitor_credentials(config_data)

    apply_voipmonitor_defaults(config_data)
    apply_tool_defaults(config_data)

    config = AppConfig(**config_data)
    logger.debug("Configuration loaded", path=path, base_url=config.voipmonitor.url)
    return config


__all__ = [
    'VoipMonitorConfig',
    'LoggingConfig',
    'ServerConfig',
    'AppConfig',
    'load_config',
    'DEFAULT_CONFIG_PATH',
]
