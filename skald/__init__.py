"""
Skald: a Model Context Protocol server engine
"""

from skald.core.config import ServerConfig
from skald.mcp import (
    App,
    Argument,
    ClientConnection,
    McpError,
    McpServer,
    StdioClientConnection,
    serve_stdio,
)
from skald.version import __version__

__all__ = [
    "__version__",
    "App",
    "Argument",
    "ClientConnection",
    "McpError",
    "McpServer",
    "ServerConfig",
    "StdioClientConnection",
    "serve_stdio",
]
