"""
Declarative JSON Schema for inbound client messages.

Each request and notification method gets its own sub-schema with a ``const``
method, so a message that matches none of them can be told apart as either an
unknown method or a known method with bad params.
"""

from typing import Any, Dict, List

from . import protocol

_REQUEST_ID = {"type": ["string", "integer"]}

_CURSOR_PARAMS = {
    "type": "object",
    "properties": {"cursor": {"type": "string"}},
}

_IMPLEMENTATION = {
    "type": "object",
    "required": ["name", "version"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
    },
}

JSONRPC_NOTIFICATION: Dict[str, Any] = {
    "type": "object",
    "required": ["jsonrpc", "method"],
    "properties": {
        "jsonrpc": {"const": protocol.JSON_RPC_VERSION},
        "method": {"type": "string"},
        "params": {"type": "object"},
    },
}


def _request(method: str, params: Dict[str, Any] | None = None, params_required: bool = False) -> Dict[str, Any]:
    required = ["jsonrpc", "id", "method"]
    if params_required:
        required.append("params")
    return {
        "type": "object",
        "required": required,
        "properties": {
            "jsonrpc": {"const": protocol.JSON_RPC_VERSION},
            "id": _REQUEST_ID,
            "method": {"const": method},
            "params": params or {"type": "object"},
        },
    }


def _notification(method: str, params: Dict[str, Any] | None = None, params_required: bool = False) -> Dict[str, Any]:
    required = ["jsonrpc", "method"]
    if params_required:
        required.append("params")
    return {
        "type": "object",
        "required": required,
        "properties": {
            "jsonrpc": {"const": protocol.JSON_RPC_VERSION},
            "method": {"const": method},
            "params": params or {"type": "object"},
        },
    }


CLIENT_REQUESTS: Dict[str, Dict[str, Any]] = {
    "InitializeRequest": _request(
        protocol.INITIALIZE,
        {
            "type": "object",
            "required": ["protocolVersion", "capabilities", "clientInfo"],
            "properties": {
                "protocolVersion": {"type": "string"},
                "capabilities": {"type": "object"},
                "clientInfo": _IMPLEMENTATION,
            },
        },
        params_required=True,
    ),
    "PingRequest": _request(protocol.PING),
    "ListToolsRequest": _request(protocol.TOOLS_LIST, _CURSOR_PARAMS),
    "CallToolRequest": _request(
        protocol.TOOLS_CALL,
        {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string"},
                "arguments": {"type": "object"},
            },
        },
        params_required=True,
    ),
    "ListResourcesRequest": _request(protocol.RESOURCES_LIST, _CURSOR_PARAMS),
    "ListResourceTemplatesRequest": _request(protocol.RESOURCES_TEMPLATES_LIST, _CURSOR_PARAMS),
    "ReadResourceRequest": _request(
        protocol.RESOURCES_READ,
        {
            "type": "object",
            "required": ["uri"],
            "properties": {"uri": {"type": "string"}},
        },
        params_required=True,
    ),
}

CLIENT_NOTIFICATIONS: Dict[str, Dict[str, Any]] = {
    "InitializedNotification": _notification(protocol.NOTIFICATIONS_INITIALIZED),
    "LegacyInitializedNotification": _notification(protocol.INITIALIZED),
    "CancelledNotification": _notification(
        protocol.NOTIFICATIONS_CANCELLED,
        {
            "type": "object",
            "required": ["requestId"],
            "properties": {
                "requestId": _REQUEST_ID,
                "reason": {"type": "string"},
            },
        },
        params_required=True,
    ),
    "RootsListChangedNotification": _notification(protocol.ROOTS_LIST_CHANGED),
}


def request_methods() -> List[str]:
    return [schema["properties"]["method"]["const"] for schema in CLIENT_REQUESTS.values()]


def notification_methods() -> List[str]:
    return [schema["properties"]["method"]["const"] for schema in CLIENT_NOTIFICATIONS.values()]
