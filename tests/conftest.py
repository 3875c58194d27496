import json
from typing import Any, Dict, List, Optional

import pytest

from skald.core.config import ServerConfig
from skald.mcp import App, Argument, ClientConnection, McpServer

PROTOCOL_VERSION = "2024-11-05"


class ScriptedConnection(ClientConnection):
    """In-memory connection that replays a fixed list of inbound messages."""

    def __init__(self, inbound: List[Any]):
        self._inbound = [m if isinstance(m, str) else json.dumps(m) for m in inbound]
        self.sent: List[str] = []

    def read_next_message(self) -> Optional[str]:
        if not self._inbound:
            return None
        return self._inbound.pop(0)

    def send_message(self, message: str) -> None:
        self.sent.append(message)

    @property
    def sent_json(self) -> List[Dict[str, Any]]:
        return [json.loads(m) for m in self.sent]


def rpc(msg_id: Any, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def notify(method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return message


def initialize_params(version: str = PROTOCOL_VERSION, capabilities: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "protocolVersion": version,
        "capabilities": capabilities or {},
        "clientInfo": {"name": "pytest", "version": "1.0"},
    }


def send(server: McpServer, message: Any) -> Optional[Dict[str, Any]]:
    line = message if isinstance(message, str) else json.dumps(message)
    reply = server.process_line(line)
    return json.loads(reply) if reply is not None else None


def handshake(server: McpServer, capabilities: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    reply = send(server, rpc(0, "initialize", initialize_params(capabilities=capabilities)))
    assert "result" in reply
    assert send(server, notify("notifications/initialized")) is None
    return reply


@pytest.fixture
def app():
    app = App("skald-test", version="9.9.9")

    @app.tool(
        "add",
        description="Add two numbers",
        arguments=[Argument("a", int, required=True), Argument("b", int, required=True)],
    )
    def add(args):
        return args["a"] + args["b"]

    @app.tool("fail", description="Always raises")
    def fail(args):
        raise RuntimeError("boom")

    @app.resource("/test", name="Test resource")
    def test_resource():
        return "direct"

    @app.resource_template("/test/{a}/{b}", name="Pair")
    def pair(variables):
        return f"{variables['a']}+{variables['b']}"

    return app


@pytest.fixture
def server(app):
    return McpServer(app, ServerConfig())


@pytest.fixture
def ready_server(server):
    handshake(server)
    return server
