"""
Skald Message Codec
-------------------
Turns one line of text into a typed JSON-RPC message and renders replies.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from . import protocol
from .errors import McpError, ParseError


@dataclass
class Request:
    id: Union[str, int]
    method: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Notification:
    method: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Response:
    """A client's reply to a request the server originated."""

    id: Union[str, int, None]
    result: Any = None
    error: Optional[Dict[str, Any]] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


Message = Union[Request, Notification, Response]


def parse_line(line: str) -> Any:
    try:
        return json.loads(line)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("Invalid JSON: nesting too deep") from exc


def is_response(payload: Any) -> bool:
    return (
        isinstance(payload, dict)
        and "id" in payload
        and "method" not in payload
        and ("result" in payload or "error" in payload)
    )


def to_message(payload: Dict[str, Any]) -> Message:
    """Wrap an already validated payload (or a response) in its message type."""
    if is_response(payload):
        error = payload.get("error")
        return Response(
            id=payload.get("id"),
            result=payload.get("result"),
            error=error if isinstance(error, dict) else None,
        )
    params = payload.get("params") or {}
    if "id" in payload:
        return Request(id=payload["id"], method=payload["method"], params=params)
    return Notification(method=payload["method"], params=params)


def success_response(msg_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": protocol.JSON_RPC_VERSION, "id": msg_id, "result": result}


def error_response(msg_id: Any, error: McpError) -> Dict[str, Any]:
    return {"jsonrpc": protocol.JSON_RPC_VERSION, "id": msg_id, "error": error.to_dict()}


def request_message(msg_id: Any, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": protocol.JSON_RPC_VERSION, "id": msg_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def encode_message(message: Dict[str, Any]) -> str:
    """
    Serialize a message to a single ASCII line (no trailing newline).

    Raises TypeError or ValueError when the message is not JSON-serialisable.
    """
    return json.dumps(message)
