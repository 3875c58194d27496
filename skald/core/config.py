"""
Skald Configuration
-------------------
Server settings loaded from environment variables.
"""

import os
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger("Skald.Config")

DEFAULT_PROTOCOL_VERSIONS = ["2024-11-05"]
DEFAULT_PENDING_CAPACITY = 100


def _parse_int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
        if value < minimum:
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s value '%s'; expected integer >= %d. Using %d.",
            name,
            raw,
            minimum,
            default,
        )
        return default


def _parse_page_size_env(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s'; expected integer. Listing unpaged.", name, raw)
        return None
    return value if value > 0 else None


def _parse_list_env(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    values = [part.strip() for part in raw.split(",") if part.strip()]
    if not values:
        logger.warning("Empty %s; falling back to %s", name, default)
        return list(default)
    return values


class ServerConfig(BaseModel):
    """Protocol engine configuration."""
    supported_protocol_versions: List[str] = Field(default_factory=lambda: list(DEFAULT_PROTOCOL_VERSIONS))
    page_size: Optional[int] = Field(default=None, gt=0)
    pending_request_capacity: int = DEFAULT_PENDING_CAPACITY
    server_request_id_prefix: str = "s"
    tool_response_max_chars: int = 0
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Load configuration from environment variables.

        Environment variables override defaults:
        - SKALD_MCP_PROTOCOL_VERSIONS: Comma-separated supported protocol versions
        - SKALD_MCP_PAGE_SIZE: Page size for list methods (blank or <= 0 = unpaged)
        - SKALD_MCP_PENDING_CAPACITY: Max outstanding server-initiated requests
        - SKALD_MCP_REQUEST_ID_PREFIX: Prefix for server-initiated request ids
        - SKALD_MCP_TOOL_RESPONSE_MAX_CHARS: Tool text limit (0 = unlimited)
        - SKALD_LOG_LEVEL / SKALD_LOG_FILE: Logging level and optional file
        """
        prefix = os.environ.get("SKALD_MCP_REQUEST_ID_PREFIX", "s")
        if not prefix:
            logger.warning("Empty SKALD_MCP_REQUEST_ID_PREFIX; using 's'")
            prefix = "s"

        return cls(
            supported_protocol_versions=_parse_list_env(
                "SKALD_MCP_PROTOCOL_VERSIONS", DEFAULT_PROTOCOL_VERSIONS
            ),
            page_size=_parse_page_size_env("SKALD_MCP_PAGE_SIZE"),
            pending_request_capacity=_parse_int_env(
                "SKALD_MCP_PENDING_CAPACITY", DEFAULT_PENDING_CAPACITY, minimum=1
            ),
            server_request_id_prefix=prefix,
            tool_response_max_chars=_parse_int_env("SKALD_MCP_TOOL_RESPONSE_MAX_CHARS", 0),
            log_level=os.environ.get("SKALD_LOG_LEVEL", "INFO"),
            log_file=os.environ.get("SKALD_LOG_FILE") or None,
        )
