"""
PCAP Info Tool

Hands out the PCAP download link of a call. The id is not checked upstream.
"""

from typing import Dict, Any
import structlog

from cdr_assistant.formatting import render_pcap_info
from cdr_assistant.tools.base import Tool, ToolDefinition, ToolCategory, ToolParameter
from cdr_assistant.tools.cdr.common import error_text
from cdr_assistant.tools.context import ToolExecutionContext

logger = structlog.get_logger(__name__)


class GetPcapInfoTool(Tool):

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="get_pcap_info",
            description="Get the PCAP download URL for a call, with or without RTP media.",
            category=ToolCategory.LOOKUP,
            parameters=[
                ToolParameter(
                    name="cdrId",
                    type="string",
                    description="CDR ID of the call",
                    required=True,
                ),
                ToolParameter(
                    name="includeRtp",
                    type="boolean",
                    description="Include RTP data in PCAP (default: true)",
                    default=True,
                ),
            ],
        )

    async def execute(
        self,
        parameters: Dict[str, Any],
        context: ToolExecutionContext
    ) -> Dict[str, Any]:
        cdr_id = str(parameters.get("cdrId", "")).strip()
        include_rtp = parameters.get("includeRtp") is not False
        try:
            client = context.get_client()
            await client.ensure_session()
            pcap_url = client.pcap_url(cdr_id, include_rtp=include_rtp)
            logger.info("PCAP link built", request_id=context.request_id, cdr_id=cdr_id, include_rtp=include_rtp)
            return {
                "status": "success",
                "message": render_pcap_info(cdr_id, pcap_url, include_rtp),
                "pcap_url": pcap_url,
                "include_rtp": include_rtp,
            }
        except Exception as e:
            logger.error("PCAP info failed", request_id=context.request_id, cdr_id=cdr_id, error=str(e))
            return {
                "status": "error",
                "message": f"Error getting PCAP info: {error_text(e)}",
            }
