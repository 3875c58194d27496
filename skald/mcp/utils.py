import sys
import json
import logging
from typing import Any, Optional

logger = logging.getLogger("Skald.mcp.utils")

ROOT_LOGGER_NAME = "Skald"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a handler to the ``Skald`` logger.

    stdout carries the protocol on stdio transports, so records go to
    ``log_file`` when given and to stderr otherwise.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_skald_handler", False):
            root.removeHandler(handler)
            handler.close()

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._skald_handler = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return root


def safe_json_dumps(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps(str(payload), ensure_ascii=False)


def truncate_tool_text(text: str, name: str, max_chars: int = 0) -> str:
    """Apply the configured length limit to tool output (0 means unlimited)."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    omitted = len(text) - max_chars
    trailer = f"\n... [truncated {omitted} chars]"
    keep_chars = max(0, max_chars - len(trailer))
    logger.warning(
        "Truncating tool response for '%s' from %d to %d chars.",
        name,
        len(text),
        max_chars,
    )
    return text[:keep_chars] + trailer


def format_tool_result_text(result: Any, name: str, max_chars: int = 0) -> str:
    """Convert a tool handler's return value to the text content block."""
    if result is None:
        text = ""
    elif isinstance(result, str):
        text = result
    elif isinstance(result, (dict, list, bool, int, float)):
        text = safe_json_dumps(result)
    else:
        text = str(result)
    return truncate_tool_text(text, name, max_chars)
