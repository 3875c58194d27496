"""
Client connections.

The engine reads and writes whole messages through a ``ClientConnection``; it
never touches sockets or files itself. Connection setup and teardown belong to
whoever constructs the connection.
"""

import abc
import logging
import sys
from typing import Optional, TextIO

logger = logging.getLogger("Skald.mcp.transport")


class ClientConnection(abc.ABC):
    @abc.abstractmethod
    def read_next_message(self) -> Optional[str]:
        """Block until the next message arrives; None once the client has gone away."""

    @abc.abstractmethod
    def send_message(self, message: str) -> None:
        """Send one message, without a trailing newline."""


class StdioClientConnection(ClientConnection):
    """Newline-delimited messages over a pair of text streams (stdin/stdout by default)."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.closed = False

    def read_next_message(self) -> Optional[str]:
        while not self.closed:
            line = self.stdin.readline()
            if not line:
                return None
            line = line.rstrip("\r\n")
            if line.strip():
                return line
        return None

    def send_message(self, message: str) -> None:
        if self.closed:
            return
        try:
            self.stdout.write(message + "\n")
            self.stdout.flush()
        except (BrokenPipeError, OSError) as exc:
            self.closed = True
            logger.warning("MCP stdio transport closed while sending: %s", exc)
