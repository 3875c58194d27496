"""
Per-connection session state and the lifecycle gate.

Uninitialized -> Initialized is the only transition, and it is one-way for the
life of the connection.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from . import protocol
from .errors import AlreadyInitializedError, InvalidParamsError, NotInitializedError

logger = logging.getLogger("Skald.mcp.state")


class SessionStatus(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


@dataclass
class SessionState:
    status: SessionStatus = SessionStatus.UNINITIALIZED
    negotiated: bool = False
    protocol_version: Optional[str] = None
    client_capabilities: Dict[str, Any] = field(default_factory=dict)
    client_info: Dict[str, Any] = field(default_factory=dict)
    roots: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def initialized(self) -> bool:
        return self.status is SessionStatus.INITIALIZED

    def check_method_allowed(self, method: str) -> None:
        if not self.initialized and method not in protocol.PRE_INITIALIZE_METHODS:
            raise NotInitializedError("Server not initialized")

    def negotiate(self, params: Dict[str, Any], supported: Sequence[str]) -> str:
        """
        Record the client's protocol version and capabilities.

        Does not transition; the client's ``initialized`` notification does.
        May be repeated until then, the latest call wins.
        """
        if self.initialized:
            raise AlreadyInitializedError("Server already initialized")

        requested = params.get("protocolVersion")
        version = protocol.negotiate_protocol_version(requested, tuple(supported))
        if version is None:
            raise InvalidParamsError(
                "Unsupported protocol version",
                data={"supported": list(supported), "requested": requested},
            )

        self.negotiated = True
        self.protocol_version = version
        capabilities = params.get("capabilities")
        self.client_capabilities = capabilities if isinstance(capabilities, dict) else {}
        client_info = params.get("clientInfo")
        self.client_info = client_info if isinstance(client_info, dict) else {}
        logger.info(
            "Negotiated protocol %s with client %s",
            version,
            self.client_info.get("name", "<unknown>"),
        )
        return version

    def mark_initialized(self) -> None:
        if self.initialized:
            raise AlreadyInitializedError("Server already initialized")
        if not self.negotiated:
            logger.warning("Received initialized notification before initialize; accepting it")
        self.status = SessionStatus.INITIALIZED

    def client_supports(self, capability: str) -> bool:
        return isinstance(self.client_capabilities.get(capability), dict)
