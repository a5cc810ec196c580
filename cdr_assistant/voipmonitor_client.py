"""
Async client for the VoIPmonitor GUI HTTP API.

Holds the upstream session (SID + cookie name) for the life of the client
and acquires it lazily, single-flight, on the first query.
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from cdr_assistant.config import VoipMonitorConfig
from cdr_assistant.errors import AuthenticationError, SessionExpiredError, UpstreamCallError
from cdr_assistant.logging_config import get_logger
from cdr_assistant.models import SipHistoryEntry, UpstreamSession, normalize_records

logger = get_logger(__name__)

LOGIN_PATH = "/php/model/sql.php"
API_PATH = "/php/api.php"
SIP_HISTORY_PATH = "/php/pcap2text.php"
PCAP_PATH = "/php/pcap.php"

SESSION_REJECTED_STATUSES = (401, 403)


class VoipMonitorClient:
    """A client for the VoIPmonitor GUI API (login, getVoipCalls, SIP history, PCAP links)."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout_sec: float = 30.0,
        verify_ssl: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self.verify_ssl = verify_ssl
        self.http_session: Optional[aiohttp.ClientSession] = None
        self._session: Optional[UpstreamSession] = None
        self._session_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: VoipMonitorConfig) -> "VoipMonitorClient":
        return cls(
            base_url=config.url,
            username=config.username,
            password=config.password,
            timeout_sec=config.request_timeout_sec,
            verify_ssl=config.verify_ssl,
        )

    @property
    def session(self) -> Optional[UpstreamSession]:
        """Current upstream session, or None before the first successful login."""
        return self._session

    def _http(self) -> aiohttp.ClientSession:
        if self.http_session is None or self.http_session.closed:
            # The session cookie is sent explicitly; keep the jar from adding its own.
            self.http_session = aiohttp.ClientSession(
                timeout=self.timeout,
                cookie_jar=aiohttp.DummyCookieJar(),
                connector=aiohttp.TCPConnector(ssl=self.verify_ssl),
            )
        return self.http_session

    async def close(self) -> None:
        """Close the HTTP session. The upstream session is kept."""
        if self.http_session and not self.http_session.closed:
            await self.http_session.close()
        self.http_session = None

    async def ensure_session(self) -> UpstreamSession:
        """
        Return the cached session, logging in first if there is none.

        Concurrent callers share a single login request.

        Raises:
            AuthenticationError: Login failed; no session is cached
        """
        if self._session is not None:
            return self._session
        async with self._session_lock:
            if self._session is None:
                self._session = await self._login()
        return self._session

    def invalidate_session(self, expected: Optional[UpstreamSession] = None) -> None:
        """Drop the cached session (only if it is still ``expected`` when given)."""
        if expected is not None and self._session is not expected:
            return
        if self._session is not None:
            logger.info("Dropping VoIPmonitor session", cookie_name=self._session.cookie_name)
        self._session = None

    async def _login(self) -> UpstreamSession:
        url = f"{self.base_url}{LOGIN_PATH}"
        params = {"module": "bypass_login", "user": self.username, "pass": self.password}
        logger.info("Authenticating with VoIPmonitor", url=url, user=self.username)
        try:
            async with self._http().post(url, params=params) as response:
                if response.status >= 400:
                    logger.error("VoIPmonitor login rejected", status=response.status)
                    raise AuthenticationError(
                        f"Authentication failed: {response.status}",
                        details={"status": response.status},
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("VoIPmonitor login request failed", error=str(e))
            raise AuthenticationError(f"Authentication failed: {str(e) or type(e).__name__}") from e
        except ValueError as e:
            raise AuthenticationError("Authentication failed: invalid response body") from e

        if not isinstance(data, dict) or not data.get("success"):
            raise AuthenticationError("Authentication failed: Invalid credentials")
        sid = data.get("SID")
        cookie_name = data.get("cookie_name")
        if not sid or not cookie_name:
            raise AuthenticationError("Authentication failed: response is missing SID or cookie_name")

        logger.info("Authenticated with VoIPmonitor", cookie_name=cookie_name)
        return UpstreamSession(sid=str(sid), cookie_name=str(cookie_name))

    async def _api_call(self, task: str, params: Dict[str, Any], session: UpstreamSession) -> Any:
        url = f"{self.base_url}{API_PATH}"
        body = {
            "task": task,
            "user": self.username,
            "password": self.password,
            "params": params,
        }
        logger.debug("Calling VoIPmonitor API", task=task, params=params)
        try:
            async with self._http().post(url, json=body, headers={"Cookie": session.cookie_header}) as response:
                if response.status in SESSION_REJECTED_STATUSES:
                    self.invalidate_session(session)
                    raise SessionExpiredError(
                        f"API call failed: session rejected ({response.status})",
                        details={"status": response.status, "task": task},
                    )
                if response.status >= 400:
                    reason = await response.text()
                    logger.error("VoIPmonitor API call failed", task=task, status=response.status, reason=reason[:200])
                    raise UpstreamCallError(
                        f"API call failed: {response.status}",
                        details={"status": response.status, "task": task},
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("VoIPmonitor API request failed", task=task, error=str(e))
            raise UpstreamCallError(f"API call failed: {str(e) or type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamCallError("API call failed: invalid JSON response", details={"task": task}) from e

        if isinstance(payload, dict) and payload.get("success") is False:
            reason = payload.get("error") or payload.get("message") or "request rejected"
            raise UpstreamCallError(f"API call failed: {reason}", details={"task": task})
        return payload

    @retry(
        retry=retry_if_exception_type(SessionExpiredError),
        stop=stop_after_attempt(2),
        reraise=True,
    )
    async def get_voip_calls(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Run the getVoipCalls task.

        A rejected session is dropped and the call is retried once after a
        fresh login.

        Args:
            params: Filter parameters forwarded verbatim

        Returns:
            Call record dicts in upstream order

        Raises:
            AuthenticationError: Login failed
            UpstreamCallError: Non-success status or malformed body
        """
        session = await self.ensure_session()
        payload = await self._api_call("getVoipCalls", params, session)
        records = normalize_records(payload)
        logger.debug("Fetched VoIP calls", count=len(records))
        return records

    async def get_sip_history(self, cdr_id: str) -> List[SipHistoryEntry]:
        """
        Fetch the SIP message ladder of one call.

        Raises:
            UpstreamCallError: Any failure (transport, status, body shape)
        """
        session = await self.ensure_session()
        url = f"{self.base_url}{SIP_HISTORY_PATH}"
        params = {"action": "brief_data", "id": cdr_id}
        try:
            async with self._http().get(url, params=params, headers={"Cookie": session.cookie_header}) as response:
                if response.status in SESSION_REJECTED_STATUSES:
                    self.invalidate_session(session)
                    raise SessionExpiredError(f"SIP history request rejected ({response.status})")
                if response.status >= 400:
                    raise UpstreamCallError(f"SIP history request failed: {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamCallError(f"SIP history request failed: {str(e) or type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamCallError("SIP history request failed: invalid JSON response") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return []
        if not isinstance(results, list):
            raise UpstreamCallError("SIP history request failed: unexpected results shape")
        return [SipHistoryEntry.from_api(item) for item in results if isinstance(item, dict)]

    def pcap_url(self, cdr_id: str, include_rtp: bool = True) -> str:
        """Download URL of the call's PCAP. Nothing is fetched."""
        params = {"id": cdr_id}
        if not include_rtp:
            params["disable_rtp"] = "1"
        return f"{self.base_url}{PCAP_PATH}?{urlencode(params)}"
