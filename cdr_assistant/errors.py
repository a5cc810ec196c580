"""Application exceptions."""

from typing import Any, Dict, Optional


class CdrAssistantError(Exception):
    """Base application exception."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(CdrAssistantError):
    """Required configuration (upstream URL or credentials) is missing."""

    pass


class AuthenticationError(CdrAssistantError):
    """VoIPmonitor login was rejected or could not be completed."""

    pass


class UpstreamCallError(CdrAssistantError):
    """VoIPmonitor API returned a non-success status or a malformed body."""

    pass


class SessionExpiredError(UpstreamCallError):
    """VoIPmonitor refused a cached session (HTTP 401/403)."""

    pass
