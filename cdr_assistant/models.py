"""
Data models for VoIPmonitor records.

Upstream returns loosely typed JSON (numbers sometimes arrive as strings,
the id key is either ``ID`` or ``id``). These dataclasses are the single
place where that JSON is read.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cdr_assistant.errors import UpstreamCallError


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class UpstreamSession:
    """Session issued by the VoIPmonitor login endpoint."""
    sid: str
    cookie_name: str

    @property
    def cookie_header(self) -> str:
        return f"{self.cookie_name}={self.sid}"


@dataclass
class CallRecord:
    """One CDR as returned by the getVoipCalls task."""
    cdr_id: str
    call_id: Optional[str] = None
    caller: Optional[str] = None
    called: Optional[str] = None
    call_date: Optional[str] = None
    duration: int = 0
    sip_response: Optional[str] = None
    mos: Any = None
    loss: Any = None
    jitter: Any = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CallRecord":
        return cls(
            cdr_id=str(data.get("ID") or data.get("id") or "unknown"),
            call_id=data.get("callid"),
            caller=data.get("caller"),
            called=data.get("called"),
            call_date=data.get("calldate"),
            duration=_to_int(data.get("duration")),
            sip_response=data.get("lastSIPresponseNum"),
            mos=data.get("a_mos"),
            loss=data.get("a_loss"),
            jitter=data.get("a_maxjitter"),
        )


@dataclass
class SipHistoryEntry:
    """One SIP message from the pcap2text brief_data view."""
    time: Any
    src: Optional[str]
    dst: Optional[str]
    msg: Optional[str]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "SipHistoryEntry":
        return cls(
            time=data.get("time"),
            src=data.get("src"),
            dst=data.get("dst"),
            msg=data.get("msg"),
        )


def normalize_records(payload: Any) -> List[Dict[str, Any]]:
    """
    Decode the getVoipCalls envelope into a list of record dicts.

    Upstream answers with a JSON array, a single object, or null.
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        return [payload]
    raise UpstreamCallError(
        f"Unexpected API response type: {type(payload).__name__}",
        details={"payload_type": type(payload).__name__},
    )
