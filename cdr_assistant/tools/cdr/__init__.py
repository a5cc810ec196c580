"""
VoIPmonitor CDR tools package.

Contains the support-agent tools backed by the VoIPmonitor GUI API.
"""

from cdr_assistant.tools.cdr.search_calls import SearchCallsTool
from cdr_assistant.tools.cdr.call_details import GetCallDetailsTool
from cdr_assistant.tools.cdr.pcap_info import GetPcapInfoTool
from cdr_assistant.tools.cdr.problem_calls import SearchProblemCallsTool

__all__ = [
    "SearchCallsTool",
    "GetCallDetailsTool",
    "GetPcapInfoTool",
    "SearchProblemCallsTool",
]
