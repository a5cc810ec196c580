"""Text rendering of VoIPmonitor records for the assistant."""

from typing import Any, Dict, List, Optional, Sequence

from cdr_assistant.models import CallRecord, SipHistoryEntry

ISSUE_TYPES = ("disconnections", "quality", "failed_calls")


def format_duration(seconds: int) -> str:
    """Render seconds as M:SS (125 -> "2:05")."""
    seconds = max(int(seconds or 0), 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def _or(value: Any, fallback: Any) -> Any:
    # Upstream sends 0 or "" for unmeasured quality metrics
    return value if value else fallback


def call_summary(record: CallRecord) -> Dict[str, Any]:
    """Normalized summary used in structured tool results."""
    return {
        "cdrId": record.cdr_id,
        "callId": record.call_id,
        "caller": record.caller,
        "called": record.called,
        "callDate": record.call_date,
        "duration": format_duration(record.duration),
        "sipResponse": record.sip_response,
        "quality": {
            "mos": record.mos,
            "loss": record.loss,
            "jitter": record.jitter,
        },
    }


def render_call_list(records: Sequence[CallRecord]) -> str:
    blocks = []
    for record in records:
        blocks.append(
            f"📞 Call {record.cdr_id}\n"
            f"  From: {record.caller} → To: {record.called}\n"
            f"  Date: {record.call_date}\n"
            f"  Duration: {format_duration(record.duration)}\n"
            f"  Status: {record.sip_response}\n"
            f"  Quality: MOS {_or(record.mos, 'N/A')}, Loss {_or(record.loss, 0)}%\n"
        )
    return f"Found {len(records)} calls:\n\n" + "\n".join(blocks)


def render_call_details(
    cdr_id: str,
    record: CallRecord,
    history: Optional[List[SipHistoryEntry]] = None,
    max_history: int = 10,
) -> str:
    lines = [
        f"📋 **Call Details for CDR {cdr_id}**",
        "",
        f"Call ID: {record.call_id}",
        f"From: {record.caller} → To: {record.called}",
        f"Date: {record.call_date}",
        f"Duration: {format_duration(record.duration)}",
        f"SIP Response: {record.sip_response}",
        f"Quality: MOS {_or(record.mos, 'N/A')}, Loss {_or(record.loss, 0)}%, Jitter {_or(record.jitter, 0)}ms",
    ]
    if history:
        lines.append("")
        lines.append("**SIP Message History:**")
        for entry in history[:max_history]:
            lines.append(f"{entry.time}s: {entry.src} → {entry.dst} | {entry.msg}")
    return "\n".join(lines) + "\n"


def render_pcap_info(cdr_id: str, pcap_url: str, include_rtp: bool) -> str:
    return (
        f"🔍 **PCAP Information for Call {cdr_id}**\n\n"
        f"PCAP Download URL: {pcap_url}\n"
        f"Includes RTP: {'Yes' if include_rtp else 'No'}\n\n"
        "You can download this PCAP file for detailed network analysis using tools like Wireshark."
    )


def issue_description(record: CallRecord, issue_type: str) -> str:
    if issue_type == "disconnections":
        return f"Call disconnected unexpectedly (Duration: {record.duration}s)"
    if issue_type == "quality":
        return f"Poor quality - MOS: {_or(record.mos, 'N/A')}, Loss: {_or(record.loss, 0)}%"
    if issue_type == "failed_calls":
        return f"Call failed with SIP {record.sip_response}"
    return "Unknown issue"


def render_problem_calls(issue_type: str, time_range: str, records: Sequence[CallRecord]) -> str:
    heading = issue_type.replace("_", " ").upper()
    parts = [
        f"🚨 **{heading} in {time_range}**\n\n",
        f"Found {len(records)} problem calls:\n\n",
    ]
    for record in records:
        parts.append(
            f"📞 Call {record.cdr_id}\n"
            f"  From: {record.caller} → To: {record.called}\n"
            f"  Date: {record.call_date}\n"
            f"  Issue: {issue_description(record, issue_type)}\n\n"
        )
    return "".join(parts)
