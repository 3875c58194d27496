from .app import App
from .errors import (
    AlreadyInitializedError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    McpError,
    MethodNotFoundError,
    NotInitializedError,
    ParseError,
    ResourceNotFoundError,
    ResourceReadError,
    ToolCallError,
    ToolNotFoundError,
)
from .registry import Resource, ResourceTemplate, Tool
from .schema import Argument
from .server import McpServer, serve_stdio
from .transport import ClientConnection, StdioClientConnection

__all__ = [
    "App",
    "Argument",
    "ClientConnection",
    "McpServer",
    "Resource",
    "ResourceTemplate",
    "StdioClientConnection",
    "Tool",
    "serve_stdio",
    "McpError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "ToolNotFoundError",
    "ToolCallError",
    "ResourceNotFoundError",
    "ResourceReadError",
]
