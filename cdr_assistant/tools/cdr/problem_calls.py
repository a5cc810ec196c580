"""
Search Problem Calls Tool

Finds calls with a given kind of issue (unexpected disconnections, poor
quality, failed setup) in a relative or absolute time range.
"""

from typing import Dict, Any, Callable, Optional
from datetime import datetime, tzinfo
import structlog

from cdr_assistant.formatting import ISSUE_TYPES, call_summary, issue_description, render_problem_calls
from cdr_assistant.models import CallRecord
from cdr_assistant.time_range import get_timezone, resolve_time_range
from cdr_assistant.tools.base import Tool, ToolDefinition, ToolCategory, ToolParameter
from cdr_assistant.tools.cdr.common import error_text, resolve_limit
from cdr_assistant.tools.context import ToolExecutionContext

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 20

# getVoipCalls filters per issue type; values are wire strings, keep them as-is
ISSUE_FILTERS: Dict[str, Dict[str, Any]] = {
    "disconnections": {"fbye": False},          # no BYE seen
    "quality": {"fmosf1": "0", "floss1": "5"},  # MOS below threshold, loss above 5%
    "failed_calls": {"fsipresponse": "4"},      # 4xx/5xx final responses
}


class SearchProblemCallsTool(Tool):
    """Problem-call triage for support agents."""

    # Clock override for deterministic time ranges; called with the timezone
    clock: Optional[Callable[[tzinfo], datetime]] = None

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="search_problem_calls",
            description="Find calls with disconnections, poor quality or failed setup in a time range.",
            category=ToolCategory.SEARCH,
            parameters=[
                ToolParameter(
                    name="issueType",
                    type="string",
                    description="Type of issue to search for",
                    required=True,
                    enum=list(ISSUE_TYPES),
                ),
                ToolParameter(
                    name="timeRange",
                    type="string",
                    description="Time range like '1h', '2h', 'today', or specific date",
                    required=True,
                ),
                ToolParameter(
                    name="limit",
                    type="integer",
                    description="Maximum number of results (default: 20)",
                ),
            ],
        )

    def build_api_params(self, issue_type: str, time_range: str, tz: tzinfo) -> Dict[str, Any]:
        start_time, end_time = resolve_time_range(time_range, tz=tz, now=self.clock)
        api_params: Dict[str, Any] = {"startTime": start_time, "endTime": end_time}
        api_params.update(ISSUE_FILTERS.get(issue_type, {}))
        return api_params

    async def execute(
        self,
        parameters: Dict[str, Any],
        context: ToolExecutionContext
    ) -> Dict[str, Any]:
        issue_type = parameters.get("issueType")
        time_range = parameters.get("timeRange", "")
        try:
            client = context.get_client()
            tz = get_timezone(context.get_config_value("server.timezone", "UTC"))
            limit = resolve_limit(
                parameters.get("limit"),
                context.get_config_value("tools.search_problem_calls.default_limit", DEFAULT_LIMIT),
            )
            api_params = self.build_api_params(issue_type, time_range, tz)
            rows = await client.get_voip_calls(api_params)
            records = [CallRecord.from_api(row) for row in rows[:limit]]

            logger.info(
                "Problem call search completed",
                request_id=context.request_id,
                issue_type=issue_type,
                start_time=api_params["startTime"],
                end_time=api_params["endTime"],
                returned=len(records),
            )
            return {
                "status": "success",
                "message": render_problem_calls(issue_type, time_range, records),
                "calls": [
                    dict(call_summary(record), issue=issue_description(record, issue_type))
                    for record in records
                ],
            }
        except Exception as e:
            logger.error("Problem call search failed", request_id=context.request_id, issue_type=issue_type, error=str(e))
            return {
                "status": "error",
                "message": f"Error searching problem calls: {error_text(e)}",
            }
