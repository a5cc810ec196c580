"""
Call Details Tool

Looks up one CDR by id and adds its SIP message ladder when available.
"""

from typing import Dict, Any, List, Optional
import structlog

from cdr_assistant.errors import CdrAssistantError
from cdr_assistant.formatting import call_summary, render_call_details
from cdr_assistant.models import CallRecord, SipHistoryEntry
from cdr_assistant.tools.base import Tool, ToolDefinition, ToolCategory, ToolParameter
from cdr_assistant.tools.cdr.common import error_text
from cdr_assistant.tools.context import ToolExecutionContext

logger = structlog.get_logger(__name__)

DEFAULT_MAX_HISTORY = 10


class GetCallDetailsTool(Tool):
    """Detailed report of a single call."""

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="get_call_details",
            description="Get details of one call by CDR ID, including its SIP message history when available.",
            category=ToolCategory.LOOKUP,
            parameters=[
                ToolParameter(
                    name="cdrId",
                    type="string",
                    description="CDR ID of the call",
                    required=True,
                ),
            ],
        )

    async def _fetch_history(self, client, cdr_id: str, request_id: str) -> Optional[List[SipHistoryEntry]]:
        try:
            return await client.get_sip_history(cdr_id)
        except CdrAssistantError as e:
            logger.warning("Could not fetch SIP history", request_id=request_id, cdr_id=cdr_id, error=str(e))
            return None

    async def execute(
        self,
        parameters: Dict[str, Any],
        context: ToolExecutionContext
    ) -> Dict[str, Any]:
        cdr_id = str(parameters.get("cdrId", "")).strip()
        try:
            client = context.get_client()
            rows = await client.get_voip_calls({"cdrId": cdr_id})
            if not rows:
                logger.info("Call not found", request_id=context.request_id, cdr_id=cdr_id)
                return {
                    "status": "not_found",
                    "message": f"Call with CDR ID {cdr_id} not found.",
                }

            record = CallRecord.from_api(rows[0])
            history = await self._fetch_history(client, cdr_id, context.request_id)
            max_history = context.get_config_value("tools.get_call_details.max_history_entries", DEFAULT_MAX_HISTORY)
            shown = (history or [])[:max_history]

            return {
                "status": "success",
                "message": render_call_details(cdr_id, record, shown, max_history),
                "call": call_summary(record),
                "sip_history": [vars(entry) for entry in shown],
            }
        except Exception as e:
            logger.error("Call details lookup failed", request_id=context.request_id, cdr_id=cdr_id, error=str(e))
            return {
                "status": "error",
                "message": f"Error getting call details: {error_text(e)}",
            }
