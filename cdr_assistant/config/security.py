"""
Security-critical configuration injection.

SECURITY POLICY:
- The VoIPmonitor service account password MUST NEVER be in YAML files
- Base URL, user and password come from environment variables only
- YAML values for these keys are overwritten
"""

import os
from typing import Any, Dict

from cdr_assistant.errors import ConfigurationError

CREDENTIAL_ENV_VARS = {
    "url": "VOIPMONITOR_URL",
    "username": "VOIPMONITOR_USER",
    "password": "VOIPMONITOR_PASSWORD",
}


def _is_nonempty_string(val: Any) -> bool:
    return isinstance(val, str) and val.strip() != ""


def inject_voipmonitor_credentials(config_data: Dict[str, Any]) -> None:
    """
    Inject VoIPmonitor URL and credentials from environment variables ONLY.

    Environment variables:
    - VOIPMONITOR_URL (required)
    - VOIPMONITOR_USER (required)
    - VOIPMONITOR_PASSWORD (required)

    Args:
        config_data: Configuration dictionary to modify in-place

    Raises:
        ConfigurationError: If any of the variables is unset or blank
    """
    section = config_data.get('voipmonitor')
    section = dict(section) if isinstance(section, dict) else {}

    missing = []
    for key, env_name in CREDENTIAL_ENV_VARS.items():
        value = os.getenv(env_name)
        if not _is_nonempty_string(value):
            missing.append(env_name)
            continue
        section[key] = value.strip() if key == "url" else value

    if missing:
        raise ConfigurationError(
            f"Missing VoIPmonitor credentials in environment variables: {', '.join(missing)}",
            details={"missing": missing},
        )

    config_data['voipmonitor'] = section
