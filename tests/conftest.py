"""
Shared fixtures.

- ``upstream``: an in-process aiohttp stub of the VoIPmonitor GUI endpoints
- ``fake_client``: an in-memory stand-in for VoipMonitorClient used by tool tests
- ``tool_context``: ToolExecutionContext wired to ``fake_client``
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from cdr_assistant.config import AppConfig
from cdr_assistant.config.defaults import DEFAULT_TOOL_SETTINGS
from cdr_assistant.models import SipHistoryEntry, UpstreamSession
from cdr_assistant.tools.context import ToolExecutionContext
from cdr_assistant.voipmonitor_client import VoipMonitorClient

USERNAME = "support-ro"
PASSWORD = "s3cret-pass"


def make_call(cdr_id, duration=125, **overrides) -> Dict[str, Any]:
    record = {
        "ID": str(cdr_id),
        "callid": f"call-{cdr_id}@pbx.example.com",
        "caller": "+15550001",
        "called": "+15550002",
        "calldate": "2024-01-01 10:00:00",
        "duration": duration,
        "lastSIPresponseNum": "200",
        "a_mos": 4.2,
        "a_loss": 0.5,
        "a_maxjitter": 12,
    }
    record.update(overrides)
    return record


class StubVoipMonitor:
    """Programmable VoIPmonitor GUI stub recording every request it sees."""

    def __init__(self):
        self.base_url = ""
        self.login_status = 200
        self.login_response: Any = {"success": True, "SID": "sid-1", "cookie_name": "PHPSESSID"}
        self.login_delay = 0.0
        self.calls: List[Dict[str, Any]] = []
        self.raw_api_payload: Optional[Any] = None
        self.api_statuses: List[int] = []
        self.history_status = 200
        self.history_body: Any = {"results": []}
        self.login_requests: List[Dict[str, str]] = []
        self.api_requests: List[Dict[str, Any]] = []
        self.history_requests: List[Dict[str, Any]] = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/php/model/sql.php", self._login)
        app.router.add_post("/php/api.php", self._api)
        app.router.add_get("/php/pcap2text.php", self._history)
        return app

    async def _login(self, request: web.Request) -> web.Response:
        self.login_requests.append(dict(request.query))
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        if self.login_status != 200:
            return web.Response(status=self.login_status, text="login failed")
        if isinstance(self.login_response, str):
            return web.Response(text=self.login_response, content_type="text/html")
        return web.json_response(self.login_response)

    async def _api(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.api_requests.append({"cookie": request.headers.get("Cookie"), "body": body})
        status = self.api_statuses.pop(0) if self.api_statuses else 200
        if status != 200:
            return web.Response(status=status, text="api error")
        if self.raw_api_payload is not None:
            return web.json_response(self.raw_api_payload)
        cdr_id = body.get("params", {}).get("cdrId")
        if cdr_id is not None:
            return web.json_response([c for c in self.calls if c.get("ID") == cdr_id])
        return web.json_response(self.calls)

    async def _history(self, request: web.Request) -> web.Response:
        self.history_requests.append({"query": dict(request.query), "cookie": request.headers.get("Cookie")})
        if self.history_status != 200:
            return web.Response(status=self.history_status, text="no pcap")
        if isinstance(self.history_body, str):
            return web.Response(text=self.history_body, content_type="text/html")
        return web.json_response(self.history_body)


@pytest_asyncio.fixture
async def upstream():
    stub = StubVoipMonitor()
    server = TestServer(stub.app())
    await server.start_server()
    stub.base_url = str(server.make_url("")).rstrip("/")
    yield stub
    await server.close()


@pytest_asyncio.fixture
async def client(upstream):
    voip_client = VoipMonitorClient(upstream.base_url, USERNAME, PASSWORD, timeout_sec=5)
    yield voip_client
    await voip_client.close()


def build_app_config(base_url: str, **overrides) -> AppConfig:
    data = {
        "voipmonitor": {"url": base_url, "username": USERNAME, "password": PASSWORD, "request_timeout_sec": 5},
        "tools": {name: dict(settings) for name, settings in DEFAULT_TOOL_SETTINGS.items()},
    }
    data.update(overrides)
    return AppConfig(**data)


@pytest.fixture
def voipmonitor_env(monkeypatch):
    """Environment with all VoIPmonitor credentials set."""
    monkeypatch.setenv("VOIPMONITOR_URL", "https://voip.example.com/")
    monkeypatch.setenv("VOIPMONITOR_USER", USERNAME)
    monkeypatch.setenv("VOIPMONITOR_PASSWORD", PASSWORD)
    monkeypatch.delenv("VOIPMONITOR_TIMEOUT", raising=False)
    monkeypatch.delenv("VOIPMONITOR_VERIFY_SSL", raising=False)


class FakeVoipMonitorClient:
    """In-memory VoipMonitorClient stand-in."""

    base_url = "https://voip.example.com"

    def __init__(
        self,
        calls: Optional[List[Dict[str, Any]]] = None,
        history: Optional[List[Dict[str, Any]]] = None,
        calls_error: Optional[Exception] = None,
        history_error: Optional[Exception] = None,
        auth_error: Optional[Exception] = None,
    ):
        self.calls = calls or []
        self.history = history or []
        self.calls_error = calls_error
        self.history_error = history_error
        self.auth_error = auth_error
        self.requests: List[Dict[str, Any]] = []
        self.history_requests: List[str] = []
        self.session_checks = 0

    async def ensure_session(self) -> UpstreamSession:
        self.session_checks += 1
        if self.auth_error:
            raise self.auth_error
        return UpstreamSession(sid="fake-sid", cookie_name="PHPSESSID")

    async def get_voip_calls(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        await self.ensure_session()
        self.requests.append(params)
        if self.calls_error:
            raise self.calls_error
        if "cdrId" in params:
            return [c for c in self.calls if c.get("ID") == params["cdrId"]]
        return list(self.calls)

    async def get_sip_history(self, cdr_id: str) -> List[SipHistoryEntry]:
        self.history_requests.append(cdr_id)
        if self.history_error:
            raise self.history_error
        return [SipHistoryEntry.from_api(item) for item in self.history]

    def pcap_url(self, cdr_id: str, include_rtp: bool = True) -> str:
        params = {"id": cdr_id}
        if not include_rtp:
            params["disable_rtp"] = "1"
        return f"{self.base_url}/php/pcap.php?{urlencode(params)}"


@pytest.fixture
def fake_client():
    return FakeVoipMonitorClient()


@pytest.fixture
def tool_config() -> Dict[str, Any]:
    return {
        "server": {"name": "VoIPmonitor Support Assistant", "version": "1.0.0", "timezone": "UTC"},
        "tools": {name: dict(settings) for name, settings in DEFAULT_TOOL_SETTINGS.items()},
    }


@pytest.fixture
def tool_context(fake_client, tool_config):
    return ToolExecutionContext(request_id="req-1", client=fake_client, config=tool_config)
