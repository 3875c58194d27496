"""
Skald MCP exceptions.

Every protocol-level failure is an ``McpError`` carrying the JSON-RPC error
code it is reported with, so the dispatcher can render any of them the same way.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from . import protocol


class McpError(RuntimeError):
    """Base class for errors that become a JSON-RPC ``error`` object."""

    code: int = protocol.INTERNAL_ERROR

    def __init__(self, message: str, *, data: Optional[Any] = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(McpError):
    code = protocol.PARSE_ERROR


class InvalidRequestError(McpError):
    code = protocol.INVALID_REQUEST


class MethodNotFoundError(McpError):
    code = protocol.METHOD_NOT_FOUND


class InvalidParamsError(McpError):
    code = protocol.INVALID_PARAMS


class InternalError(McpError):
    code = protocol.INTERNAL_ERROR


class NotInitializedError(McpError):
    """Raised for any method other than initialize/ping before the handshake completes."""

    code = protocol.NOT_INITIALIZED


class AlreadyInitializedError(McpError):
    code = protocol.ALREADY_INITIALIZED


class ToolNotFoundError(McpError):
    code = protocol.TOOL_NOT_FOUND


class ToolCallError(McpError):
    code = protocol.TOOL_CALL_ERROR


class ResourceNotFoundError(McpError):
    code = protocol.RESOURCE_NOT_FOUND


class ResourceReadError(McpError):
    """Raised when a resource (or template) handler fails while reading."""

    code = protocol.RESOURCE_READ_ERROR
