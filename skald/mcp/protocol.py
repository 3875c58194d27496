"""
Skald MCP Protocol Constants
"""

JSON_RPC_VERSION = "2.0"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05",)

# Request methods
INITIALIZE = "initialize"
PING = "ping"
TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"
RESOURCES_LIST = "resources/list"
RESOURCES_READ = "resources/read"
RESOURCES_TEMPLATES_LIST = "resources/templates/list"

# Notification methods
INITIALIZED = "initialized"
NOTIFICATIONS_INITIALIZED = "notifications/initialized"
NOTIFICATIONS_CANCELLED = "notifications/cancelled"
ROOTS_LIST_CHANGED = "notifications/roots/list_changed"

# Server-initiated request methods
ROOTS_LIST = "roots/list"

# Methods served before the initialized notification arrives
PRE_INITIALIZE_METHODS = frozenset({INITIALIZE, PING, INITIALIZED, NOTIFICATIONS_INITIALIZED})

# Standard JSON-RPC Error Codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# MCP Specific Error Codes
NOT_INITIALIZED = -32002
ALREADY_INITIALIZED = -32003
TOOL_NOT_FOUND = -32010
TOOL_CALL_ERROR = -32011
RESOURCE_NOT_FOUND = -32020
RESOURCE_READ_ERROR = -32021


def negotiate_protocol_version(version, supported=SUPPORTED_PROTOCOL_VERSIONS) -> str | None:
    """Return the requested version when it is one we speak, else None."""
    if isinstance(version, str) and version in supported:
        return version
    return None
