"""
Search Calls Tool

Lists CDRs matching time window and party/Call-ID filters.
"""

from typing import Dict, Any
import structlog

from cdr_assistant.formatting import call_summary, render_call_list
from cdr_assistant.models import CallRecord
from cdr_assistant.tools.base import Tool, ToolDefinition, ToolCategory, ToolParameter
from cdr_assistant.tools.cdr.common import error_text, resolve_limit
from cdr_assistant.tools.context import ToolExecutionContext

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 50

_OPTIONAL_TEXT_FILTERS = ("endTime", "caller", "called", "callId")


class SearchCallsTool(Tool):
    """Search VoIPmonitor CDRs and summarize them for a support agent."""

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="search_calls",
            description="Search VoIPmonitor call records by time window, phone numbers or SIP Call-ID.",
            category=ToolCategory.SEARCH,
            parameters=[
                ToolParameter(
                    name="startTime",
                    type="string",
                    description="Start time in YYYY-MM-DD or YYYY-MM-DD HH:MM:SS format",
                    required=True,
                ),
                ToolParameter(
                    name="endTime",
                    type="string",
                    description="End time in YYYY-MM-DD or YYYY-MM-DD HH:MM:SS format",
                ),
                ToolParameter(name="caller", type="string", description="Caller phone number"),
                ToolParameter(name="called", type="string", description="Called phone number"),
                ToolParameter(name="callId", type="string", description="SIP Call-ID header value"),
                ToolParameter(
                    name="onlyConnected",
                    type="boolean",
                    description="Return only connected calls (default: false)",
                ),
                ToolParameter(
                    name="limit",
                    type="integer",
                    description="Maximum number of results (default: 50)",
                ),
            ],
        )

    @staticmethod
    def build_api_params(parameters: Dict[str, Any]) -> Dict[str, Any]:
        """getVoipCalls params holding only the filters that were supplied."""
        api_params: Dict[str, Any] = {"startTime": parameters["startTime"]}
        for key in _OPTIONAL_TEXT_FILTERS:
            if parameters.get(key):
                api_params[key] = parameters[key]
        if parameters.get("onlyConnected") is not None:
            api_params["onlyConnected"] = 1 if parameters["onlyConnected"] else 0
        return api_params

    async def execute(
        self,
        parameters: Dict[str, Any],
        context: ToolExecutionContext
    ) -> Dict[str, Any]:
        try:
            client = context.get_client()
            limit = resolve_limit(
                parameters.get("limit"),
                context.get_config_value("tools.search_calls.default_limit", DEFAULT_LIMIT),
            )
            rows = await client.get_voip_calls(self.build_api_params(parameters))
            records = [CallRecord.from_api(row) for row in rows[:limit]]

            logger.info(
                "Call search completed",
                request_id=context.request_id,
                returned=len(records),
                upstream_total=len(rows),
            )
            return {
                "status": "success",
                "message": render_call_list(records),
                "calls": [call_summary(record) for record in records],
            }
        except Exception as e:
            logger.error("Call search failed", request_id=context.request_id, error=str(e))
            return {
                "status": "error",
                "message": f"Error searching calls: {error_text(e)}",
            }
