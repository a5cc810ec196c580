"""
CdrGateway - the VoIPmonitor tool surface.

Wires configuration, the shared VoIPmonitor client and the tool registry,
and dispatches tool calls. Every call returns a result dict; nothing raised
inside a tool crosses this boundary.
"""

import time
from typing import Any, Dict, List, Optional

from cdr_assistant.config import AppConfig, DEFAULT_CONFIG_PATH, load_config
from cdr_assistant.logging_config import get_logger, set_correlation_id
from cdr_assistant.models import UpstreamSession
from cdr_assistant.tools.context import ToolExecutionContext
from cdr_assistant.tools.registry import ToolRegistry, tool_registry
from cdr_assistant.voipmonitor_client import VoipMonitorClient

logger = get_logger(__name__)


def _drop_unset(**kwargs: Any) -> Dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


class CdrGateway:
    """Front door for the four VoIPmonitor support tools."""

    def __init__(
        self,
        config: AppConfig,
        client: Optional[VoipMonitorClient] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        self.config = config
        self.client = client or VoipMonitorClient.from_config(config.voipmonitor)
        self.registry = registry or tool_registry
        self.registry.initialize_default_tools()
        # Tools see everything except the upstream credentials
        self._tool_config = config.model_dump(exclude={"voipmonitor"})

    @classmethod
    def from_env(cls, config_path: str = DEFAULT_CONFIG_PATH) -> "CdrGateway":
        """
        Build a gateway from the YAML file and environment.

        Raises:
            ConfigurationError: VoIPmonitor URL or credentials are missing
        """
        return cls(load_config(config_path))

    async def __aenter__(self) -> "CdrGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def ensure_session(self) -> UpstreamSession:
        """Log in to VoIPmonitor unless a session is already cached."""
        return await self.client.ensure_session()

    def list_tools(self) -> List[Dict[str, Any]]:
        """Tool schemas in MCP tools/list format."""
        return self.registry.to_mcp_schema()

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Validate and run one tool.

        Args:
            name: Tool name (e.g., "search_calls")
            arguments: Tool arguments
            request_id: Correlation id for logs (generated when omitted)

        Returns:
            Tool result dict with at least "status" and "message"
        """
        request_id = set_correlation_id(request_id)
        tool = self.registry.get(name)
        if tool is None:
            logger.warning("Unknown tool requested", tool=name)
            return {"status": "error", "message": f"Unknown tool: {name}"}

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return {"status": "error", "message": f"Invalid arguments for {name}: expected an object"}

        try:
            tool.validate_parameters(arguments)
        except ValueError as e:
            logger.info("Tool arguments rejected", tool=name, error=str(e))
            return {"status": "error", "message": f"Invalid arguments for {name}: {e}"}

        context = ToolExecutionContext(
            request_id=request_id,
            client=self.client,
            config=self._tool_config,
        )
        started = time.monotonic()
        logger.info("Executing tool", tool=name, arguments=arguments)
        result = await tool.execute(arguments, context)
        logger.info(
            "Tool finished",
            tool=name,
            status=result.get("status"),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return result

    async def search_calls(
        self,
        startTime: str,
        endTime: Optional[str] = None,
        caller: Optional[str] = None,
        called: Optional[str] = None,
        callId: Optional[str] = None,
        onlyConnected: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.call_tool("search_calls", _drop_unset(
            startTime=startTime,
            endTime=endTime,
            caller=caller,
            called=called,
            callId=callId,
            onlyConnected=onlyConnected,
            limit=limit,
        ))

    async def get_call_details(self, cdrId: str) -> Dict[str, Any]:
        return await self.call_tool("get_call_details", {"cdrId": cdrId})

    async def get_pcap_info(self, cdrId: str, includeRtp: Optional[bool] = None) -> Dict[str, Any]:
        return await self.call_tool("get_pcap_info", _drop_unset(cdrId=cdrId, includeRtp=includeRtp))

    async def search_problem_calls(
        self,
        issueType: str,
        timeRange: str,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.call_tool("search_problem_calls", _drop_unset(
            issueType=issueType,
            timeRange=timeRange,
            limit=limit,
        ))
