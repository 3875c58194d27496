"""
Skald MCP Server
----------------
One ``McpServer`` per client connection. It owns the session state and the
pending-request table, reads the connection one message at a time and answers
each request before reading the next.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from . import handlers, protocol
from .app import App
from .codec import (
    Notification,
    Request,
    Response,
    encode_message,
    error_response,
    is_response,
    parse_line,
    request_message,
    success_response,
    to_message,
)
from .errors import (
    InternalError,
    InvalidRequestError,
    McpError,
    MethodNotFoundError,
    ParseError,
    ToolCallError,
)
from .pending import PendingRequestTracker
from .state import SessionState
from .transport import ClientConnection, StdioClientConnection
from .utils import configure_logging
from .validator import MessageValidator
from ..core.config import ServerConfig

logger = logging.getLogger("Skald.mcp.server")


class McpServer:
    """
    Serves a single MCP session for ``app``.

    Everything except the app is per-connection; to serve several clients,
    build one server per connection around the same app.
    """

    def __init__(self, app: App, config: Optional[ServerConfig] = None):
        self.app = app
        self.config = config or ServerConfig()
        self.session = SessionState()
        self.pending = PendingRequestTracker(
            capacity=self.config.pending_request_capacity,
            id_prefix=self.config.server_request_id_prefix,
        )
        self.validator = MessageValidator()
        self._connection: Optional[ClientConnection] = None
        self._request_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            protocol.INITIALIZE: self._handle_initialize,
            protocol.PING: handlers.handle_ping,
            protocol.TOOLS_LIST: self._handle_list_tools,
            protocol.TOOLS_CALL: self._handle_call_tool,
            protocol.RESOURCES_LIST: self._handle_list_resources,
            protocol.RESOURCES_TEMPLATES_LIST: self._handle_list_resource_templates,
            protocol.RESOURCES_READ: self._handle_read_resource,
        }
        self._notification_handlers: Dict[str, Callable[[Dict[str, Any]], None]] = {
            protocol.INITIALIZED: self._handle_initialized,
            protocol.NOTIFICATIONS_INITIALIZED: self._handle_initialized,
            protocol.ROOTS_LIST_CHANGED: self._handle_roots_list_changed,
            protocol.NOTIFICATIONS_CANCELLED: self._handle_cancelled,
        }
        app.boot()

    @property
    def name(self) -> str:
        return self.app.name

    @property
    def version(self) -> str:
        return self.app.version

    @property
    def initialized(self) -> bool:
        return self.session.initialized

    # Transport loop

    def attach(self, connection: Optional[ClientConnection]) -> None:
        """Set the connection used for server-initiated requests."""
        self._connection = connection

    def serve(self, connection: ClientConnection) -> None:
        """Serve ``connection`` until the client closes it."""
        self.attach(connection)
        logger.info("Serving MCP session for '%s' %s", self.name, self.version)
        try:
            while True:
                line = connection.read_next_message()
                if line is None:
                    break
                if not line.strip():
                    continue
                reply = self.process_line(line)
                if reply is None:
                    continue
                try:
                    connection.send_message(reply)
                except Exception:
                    logger.exception("Failed to send reply; continuing with the next message")
        finally:
            self.attach(None)
            logger.info("MCP session closed")

    def process_line(self, line: str) -> Optional[str]:
        """Handle one inbound line; return the encoded reply, if any."""
        try:
            reply = self.handle_line(line)
        except Exception as exc:
            logger.exception("Unexpected error handling inbound message")
            reply = error_response(None, InternalError(str(exc)))
        if reply is None:
            return None
        try:
            return encode_message(reply)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.exception("Could not encode reply")
            return encode_message(
                error_response(reply.get("id"), InternalError(f"Could not encode reply: {exc}"))
            )

    # Dispatch

    def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        try:
            payload = parse_line(line)
        except ParseError as exc:
            logger.warning("Rejected unparseable message: %s", exc.message)
            return error_response(None, exc)

        if is_response(payload):
            self._handle_response(to_message(payload))
            return None

        try:
            self.validator.validate(payload)
        except InvalidRequestError as exc:
            logger.warning("Rejected invalid request: %s", exc.data)
            return error_response(None, exc)
        except McpError as exc:
            if "id" not in payload:
                logger.warning("Dropping notification '%s': %s", payload.get("method"), exc.message)
                return None
            logger.info("Rejected '%s' request: %s", payload.get("method"), exc.message)
            return error_response(payload["id"], exc)

        message = to_message(payload)
        if isinstance(message, Notification):
            self._dispatch_notification_guarded(message)
            return None
        return self._dispatch_request_guarded(message)

    def _dispatch_request_guarded(self, request: Request) -> Dict[str, Any]:
        try:
            result = self.dispatch_request(request)
        except McpError as exc:
            return error_response(request.id, exc)
        except Exception as exc:
            logger.exception("Unexpected error during RPC dispatch of '%s'", request.method)
            return error_response(request.id, InternalError(str(exc)))
        return success_response(request.id, result)

    def dispatch_request(self, request: Request) -> Any:
        self.session.check_method_allowed(request.method)
        handler = self._request_handlers.get(request.method)
        if handler is None:
            raise MethodNotFoundError(f"Unknown method: {request.method}")
        return handler(request.params)

    def _dispatch_notification_guarded(self, notification: Notification) -> None:
        handler = self._notification_handlers.get(notification.method)
        if handler is None:
            logger.debug("Ignoring notification '%s'", notification.method)
            return
        try:
            handler(notification.params)
        except McpError as exc:
            logger.warning("Notification '%s' rejected: %s", notification.method, exc.message)
        except Exception:
            logger.exception("Unexpected error handling notification '%s'", notification.method)

    # Request handlers

    def _handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_initialize(
            self.session, self.app, params, self.config.supported_protocol_versions
        )

    def _handle_list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_list_tools(self.app, params, self.config.page_size)

    def _handle_call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_call_tool(self.app, params, self.config.tool_response_max_chars)

    def _handle_list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_list_resources(self.app, params, self.config.page_size)

    def _handle_list_resource_templates(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_list_resource_templates(self.app, params, self.config.page_size)

    def _handle_read_resource(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return handlers.handle_read_resource(self.app, params)

    # Notification handlers

    def _handle_initialized(self, params: Dict[str, Any]) -> None:
        self.session.mark_initialized()
        logger.info("Client initialized")
        self.app.client_initialized(params)
        self._request_roots()

    def _handle_roots_list_changed(self, params: Dict[str, Any]) -> None:
        if not self.session.initialized:
            logger.warning("Ignoring roots list change before initialization")
            return
        self._request_roots()

    def _handle_cancelled(self, params: Dict[str, Any]) -> None:
        # requests run to completion before the next message is read
        logger.info(
            "Client cancelled request %r (%s); nothing in flight to cancel",
            params.get("requestId"),
            params.get("reason", "no reason given"),
        )

    # Server-initiated requests

    def send_request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Send a request to the client; its reply is correlated by id later."""
        if self._connection is None:
            logger.warning("No client connection attached; cannot send '%s'", method)
            return None
        request_id = self.pending.send(method)
        self._connection.send_message(encode_message(request_message(request_id, method, params)))
        logger.debug("Sent server request %s (%s)", request_id, method)
        return request_id

    def _request_roots(self) -> None:
        if not self.app.wants_roots:
            return
        if not self.session.client_supports("roots"):
            logger.debug("Client did not declare the roots capability; not requesting roots")
            return
        self.send_request(protocol.ROOTS_LIST)

    def _handle_response(self, response: Response) -> None:
        purpose = self.pending.resolve(response.id)
        if purpose is None:
            return
        if response.is_error:
            logger.warning("Client returned an error for %s (%s): %s", response.id, purpose, response.error)
            return
        if purpose == protocol.ROOTS_LIST:
            self._apply_roots(response.result)
        else:
            logger.debug("No follow-up for response %s (%s)", response.id, purpose)

    def _apply_roots(self, result: Any) -> None:
        roots = result.get("roots") if isinstance(result, dict) else None
        if not isinstance(roots, list):
            logger.warning("Malformed roots/list result: %r", result)
            return
        self.session.roots = roots
        logger.info("Client roots updated (%d)", len(roots))
        try:
            self.app.roots_changed(roots)
        except Exception:
            logger.exception("Roots handler failed")

    # Convenience accessors

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.app.tools.list()["tools"]

    def call_tool(self, name: str, **arguments: Any) -> str:
        """Call a tool directly and return its text, raising ToolCallError on an error result."""
        result = self.app.tools.call(name, arguments, max_chars=self.config.tool_response_max_chars)
        text = result["content"][0]["text"]
        if result.get("isError"):
            raise ToolCallError(text, data={"name": name})
        return text

    def list_resources(self) -> List[Dict[str, Any]]:
        return self.app.resources.list()["resources"]

    def list_resource_templates(self) -> List[Dict[str, Any]]:
        return self.app.resource_templates.list()["resourceTemplates"]

    def read_resource(self, uri: str) -> str:
        return self.app.resources.read(uri, self.app.resource_templates)["contents"][0]["text"]


def serve_stdio(app: App, config: Optional[ServerConfig] = None) -> McpServer:
    """Serve ``app`` over this process's stdin/stdout until stdin closes."""
    config = config or ServerConfig.from_env()
    configure_logging(config.log_level, config.log_file)
    server = McpServer(app, config)
    server.serve(StdioClientConnection())
    return server
