import logging
from typing import Any, Dict, Optional, Sequence

from .app import App
from .errors import InvalidParamsError
from .state import SessionState

logger = logging.getLogger("Skald.mcp.handlers")

SERVER_CAPABILITIES = {
    "tools": {"listChanged": False},
    "resources": {"subscribe": False, "listChanged": False},
}


def handle_initialize(
    session: SessionState,
    app: App,
    params: Dict[str, Any],
    supported_versions: Sequence[str],
) -> Dict[str, Any]:
    """Handle protocol negotiation and return server info and capabilities."""
    version = session.negotiate(params, supported_versions)
    app.initialize_client(params)

    result: Dict[str, Any] = {
        "protocolVersion": version,
        "capabilities": {key: dict(value) for key, value in SERVER_CAPABILITIES.items()},
        "serverInfo": {"name": app.name, "version": app.version},
    }
    if app.instructions:
        result["instructions"] = app.instructions
    return result


def handle_ping(params: Dict[str, Any]) -> Dict[str, Any]:
    return {}


def _cursor(params: Dict[str, Any]) -> Optional[str]:
    cursor = params.get("cursor")
    if cursor is not None and not isinstance(cursor, str):
        raise InvalidParamsError("Invalid params: cursor must be a string")
    return cursor


def handle_list_tools(app: App, params: Dict[str, Any], page_size: Optional[int] = None) -> Dict[str, Any]:
    return app.tools.list(cursor=_cursor(params), page_size=page_size)


def handle_call_tool(app: App, params: Dict[str, Any], max_chars: int = 0) -> Dict[str, Any]:
    name = params.get("name")
    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}
    result = app.tools.call(name, arguments, max_chars=max_chars)
    if result.get("isError"):
        logger.info("Tool '%s' returned an error result", name)
    return result


def handle_list_resources(app: App, params: Dict[str, Any], page_size: Optional[int] = None) -> Dict[str, Any]:
    return app.resources.list(cursor=_cursor(params), page_size=page_size)


def handle_list_resource_templates(
    app: App, params: Dict[str, Any], page_size: Optional[int] = None
) -> Dict[str, Any]:
    return app.resource_templates.list(cursor=_cursor(params), page_size=page_size)


def handle_read_resource(app: App, params: Dict[str, Any]) -> Dict[str, Any]:
    uri = params.get("uri")
    if not isinstance(uri, str) or not uri:
        raise InvalidParamsError("Missing required parameter: uri")
    return app.resources.read(uri, app.resource_templates)
