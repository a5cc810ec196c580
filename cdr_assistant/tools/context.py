"""
Tool execution context - provides access to system resources during tool execution.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ToolExecutionContext:
    """
    Context provided to tools during execution.

    Carries the request identity, the shared VoIPmonitor client and the
    configuration dict (AppConfig dumped to plain data).
    """

    request_id: str
    client: Any = None  # VoipMonitorClient instance
    config: Dict[str, Any] = field(default_factory=dict)

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Config key (supports dot notation, e.g., "tools.search_calls.default_limit")
            default: Default value if key not found
        """
        if not self.config:
            return default

        value = self.config
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_client(self):
        """
        Get the VoIPmonitor client.

        Raises:
            RuntimeError: If no client was injected
        """
        if self.client is None:
            raise RuntimeError("VoIPmonitor client not available in context")
        return self.client
