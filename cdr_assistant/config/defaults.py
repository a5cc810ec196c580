"""
Default value application for configuration.

This module handles:
- VoIPmonitor connection defaults (timeout, TLS verification, URL normalization)
- Per-tool defaults (result limits, SIP history size)
"""

import os
from typing import Any, Dict

DEFAULT_TOOL_SETTINGS: Dict[str, Dict[str, Any]] = {
    "search_calls": {"default_limit": 50},
    "get_call_details": {"max_history_entries": 10},
    "get_pcap_info": {},
    "search_problem_calls": {"default_limit": 20},
}


def apply_voipmonitor_defaults(config_data: Dict[str, Any]) -> None:
    """
    Apply VoIPmonitor connection defaults with environment variable overrides.

    Sets:
    - request_timeout_sec: total timeout per HTTP request (default: 30)
    - verify_ssl: verify the upstream TLS certificate (default: true)

    Environment variables:
    - VOIPMONITOR_TIMEOUT: Override request timeout in seconds
    - VOIPMONITOR_VERIFY_SSL: 0|1

    The base URL loses any trailing slash so endpoint paths can be appended.
    """
    section = config_data.get('voipmonitor', {}) or {}

    timeout_env = os.getenv('VOIPMONITOR_TIMEOUT', '').strip()
    if timeout_env:
        try:
            section['request_timeout_sec'] = float(timeout_env)
        except ValueError:
            pass
    section.setdefault('request_timeout_sec', 30.0)

    verify_env = os.getenv('VOIPMONITOR_VERIFY_SSL', '').strip()
    if verify_env:
        section['verify_ssl'] = verify_env.lower() not in ('0', 'false', 'no')
    section.setdefault('verify_ssl', True)

    url = section.get('url')
    if isinstance(url, str):
        section['url'] = url.rstrip('/')

    config_data['voipmonitor'] = section


def apply_tool_defaults(config_data: Dict[str, Any]) -> None:
    """Fill in per-tool settings that the YAML file leaves out."""
    tools_cfg = config_data.get('tools', {}) or {}
    for tool_name, defaults in DEFAULT_TOOL_SETTINGS.items():
        tool_cfg = tools_cfg.get(tool_name) or {}
        for key, value in defaults.items():
            tool_cfg.setdefault(key, value)
        tools_cfg[tool_name] = tool_cfg
    config_data['tools'] = tools_cfg
