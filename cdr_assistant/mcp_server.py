"""
MCP server over stdio for the VoIPmonitor support tools.

Messages are JSON-RPC 2.0, one per line. stdout carries only protocol
messages; logs go to stderr.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, Optional, Set

from cdr_assistant.config import DEFAULT_CONFIG_PATH, load_config
from cdr_assistant.errors import ConfigurationError
from cdr_assistant.gateway import CdrGateway
from cdr_assistant.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def _response(req_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def _error(req_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


class McpStdioServer:
    """Serves a CdrGateway to an MCP client over stdin/stdout."""

    def __init__(self, gateway: CdrGateway):
        self.gateway = gateway
        self._write_lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()

    async def handle_message(self, msg: Any) -> Optional[Dict[str, Any]]:
        """
        Handle one decoded JSON-RPC message.

        Returns:
            The response to send, or None for notifications
        """
        if not isinstance(msg, dict) or not isinstance(msg.get("method"), str):
            req_id = msg.get("id") if isinstance(msg, dict) else None
            return _error(req_id, INVALID_REQUEST, "Invalid request")

        method = msg["method"]
        req_id = msg.get("id")
        params = msg.get("params") or {}
        is_notification = "id" not in msg

        if method == "initialize":
            server_cfg = self.gateway.config.server
            return _response(req_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": server_cfg.name, "version": server_cfg.version},
            })
        if method.startswith("notifications/"):
            return None
        if method == "ping":
            return _response(req_id, {})
        if method == "tools/list":
            return _response(req_id, {"tools": self.gateway.list_tools()})
        if method == "tools/call":
            if not isinstance(params, dict) or not isinstance(params.get("name"), str):
                return _error(req_id, INVALID_PARAMS, "tools/call requires a tool name")
            result = await self.gateway.call_tool(
                params["name"],
                params.get("arguments") or {},
                request_id=None if req_id is None else str(req_id),
            )
            return _response(req_id, {"content": [{"type": "text", "text": result.get("message", "")}]})

        if is_notification:
            return None
        return _error(req_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    async def _write(self, stdout, payload: Dict[str, Any]) -> None:
        async with self._write_lock:
            stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
            stdout.flush()

    async def _process_line(self, line: str, stdout) -> None:
        try:
            msg = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Discarding malformed message", error=str(e))
            await self._write(stdout, _error(None, PARSE_ERROR, "Parse error"))
            return
        response = await self.handle_message(msg)
        if response is not None:
            await self._write(stdout, response)

    async def serve(self, stdin=None, stdout=None) -> None:
        """Read requests until EOF; tool calls run concurrently."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        loop = asyncio.get_running_loop()
        logger.info("MCP stdio server started", tools=self.gateway.registry.list_tools())

        while True:
            line = await loop.run_in_executor(None, stdin.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            task = asyncio.create_task(self._process_line(line, stdout))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if self._pending:
            await asyncio.gather(*self._pending)
        logger.info("MCP stdio server stopped")


async def run(config_path: str) -> None:
    config = load_config(config_path)
    configure_logging(config.logging.level, config.logging.format)
    async with CdrGateway(config) as gateway:
        await McpStdioServer(gateway).serve()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="VoIPmonitor support assistant (MCP over stdio)")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML configuration file")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        asyncio.run(run(args.config))
    except ConfigurationError as e:
        logger.error("Startup aborted", error=e.message)
        return 2
    except KeyboardInterrupt:
        pass
    return 0
