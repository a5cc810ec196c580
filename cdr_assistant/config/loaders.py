"""
Configuration file loaders and path resolution.

This module handles:
- Path resolution (relative to absolute)
- YAML file loading
- Environment variable expansion in YAML
"""

import os
import yaml
from pathlib import Path


# Project root directory (parent of cdr_assistant/)
_PROJ_DIR = Path(__file__).parent.parent.parent.resolve()


def resolve_config_path(path: str) -> str:
    """
    Resolve configuration file path to absolute path.

    If the provided path is not absolute, it is resolved relative to the project root.
    """
    if not os.path.isabs(path):
        return os.path.join(_PROJ_DIR, path)
    return path


def load_yaml_with_env_expansion(path: str, required: bool = False) -> dict:
    """
    Load YAML file with environment variable expansion.

    Reads the YAML file, expands ${VAR} and $VAR environment variable references,
    then parses the YAML content.

    Args:
        path: Absolute path to YAML configuration file
        required: Raise when the file is missing instead of returning {}

    Returns:
        Parsed configuration dictionary

    Raises:
        FileNotFoundError: If a required configuration file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    try:
        with open(path, 'r') as f:
            config_str = f.read()
    except FileNotFoundError:
        if required:
            raise FileNotFoundError(f"Configuration file not found at: {path}")
        return {}

    config_str_expanded = os.path.expandvars(config_str)

    try:
        config_data = yaml.safe_load(config_str_expanded)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing YAML configuration: {e}")

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise yaml.YAMLError(f"Top level of {path} must be a mapping, got {type(config_data).__name__}")
    return config_data
