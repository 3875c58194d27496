"""
Skald Capability Registries
---------------------------
Insertion-ordered registries for tools, resources and resource templates,
with offset-based cursor pagination shared by all three listings.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from . import schema as argument_schema
from .errors import (
    InvalidParamsError,
    ResourceNotFoundError,
    ResourceReadError,
    ToolNotFoundError,
)
from .uri_template import UriTemplate, match_template
from .utils import format_tool_result_text

logger = logging.getLogger("Skald.mcp.registry")

CURSOR_PREFIX = "cursor:v1:"
DEFAULT_MIME_TYPE = "text/plain"

T = TypeVar("T")


def encode_cursor(offset: int) -> str:
    payload = f"{CURSOR_PREFIX}{offset}".encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> int:
    """Decode an opaque cursor to a list offset. Bare integers are accepted too."""
    if cursor is None or cursor == "":
        return 0
    if not isinstance(cursor, str):
        raise InvalidParamsError("Invalid params: cursor must be a string")
    if cursor.isascii() and cursor.isdigit():
        return int(cursor)
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidParamsError("Invalid params: cursor is not a valid pagination token") from exc
    raw_offset = decoded[len(CURSOR_PREFIX):] if decoded.startswith(CURSOR_PREFIX) else ""
    if not (raw_offset.isascii() and raw_offset.isdigit()):
        raise InvalidParamsError("Invalid params: cursor is not a valid pagination token")
    return int(raw_offset)


def paginate(values: List[T], cursor: Optional[str] = None, page_size: Optional[int] = None) -> Tuple[List[T], Optional[str]]:
    """
    Slice ``values`` starting at the cursor's offset.

    Without a page size every remaining entry is returned and there is no next
    cursor. With one, a next cursor is produced only while entries remain.
    """
    start = decode_cursor(cursor)
    if page_size is None:
        return values[start:], None
    if page_size <= 0:
        raise InvalidParamsError("Invalid params: page size must be positive")
    end = start + page_size
    next_cursor = encode_cursor(end) if end < len(values) else None
    return values[start:end], next_cursor


@dataclass
class Tool:
    name: str
    handler: Optional[Callable[[Dict[str, Any]], Any]] = None
    description: str = ""
    input_schema: argument_schema.ObjectSchema = field(default_factory=argument_schema.ObjectSchema)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": argument_schema.to_json_schema(self.input_schema),
        }


@dataclass
class Resource:
    uri: str
    name: str = ""
    handler: Optional[Callable[[], Any]] = None
    description: str = ""
    mime_type: str = DEFAULT_MIME_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass
class ResourceTemplate:
    uri_template: str
    name: str = ""
    handler: Optional[Callable[[Dict[str, str]], Any]] = None
    description: str = ""
    mime_type: str = DEFAULT_MIME_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


class _Registry(Generic[T]):
    """Key → descriptor mapping that preserves registration order."""

    kind = "entry"
    key_label = "key"

    def __init__(self) -> None:
        self._entries: Dict[str, T] = {}

    def _key(self, entry: T) -> str:
        raise NotImplementedError

    def _check(self, entry: T) -> None:
        key = self._key(entry)
        if key is None or key == "":
            raise ValueError(f"{self.kind.capitalize()} {self.key_label} cannot be None or empty")
        if getattr(entry, "handler", None) is None:
            raise ValueError("Handler must be provided")

    def register(self, entry: T) -> T:
        self._check(entry)
        key = self._key(entry)
        if key in self._entries:
            logger.info("Replacing %s '%s'", self.kind, key)
        self._entries[key] = entry
        return entry

    def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    def values(self) -> List[T]:
        return list(self._entries.values())

    def reset(self) -> None:
        self._entries.clear()

    def page(self, cursor: Optional[str] = None, page_size: Optional[int] = None) -> Tuple[List[T], Optional[str]]:
        return paginate(self.values(), cursor, page_size)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ToolRegistry(_Registry[Tool]):
    kind = "tool"
    key_label = "name"

    def _key(self, entry: Tool) -> str:
        return entry.name

    def list(self, cursor: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
        tools, next_cursor = self.page(cursor, page_size)
        result: Dict[str, Any] = {"tools": [tool.to_dict() for tool in tools]}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    def call(
        self, name: str, arguments: Optional[Dict[str, Any]] = None, max_chars: int = 0
    ) -> Dict[str, Any]:
        """
        Validate arguments and run the tool.

        Validation failures and handler exceptions come back as a normal
        result flagged ``isError``; only an unknown name is a protocol error.
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {name}", data={"name": name})

        if arguments is None:
            arguments = {}
        errors = argument_schema.validate(tool.input_schema, arguments)
        if errors:
            logger.info("Rejected arguments for tool '%s': %s", name, "; ".join(errors))
            return _tool_error_result("\n".join(errors))

        try:
            value = tool.handler(arguments)
        except Exception as exc:
            logger.warning("Tool '%s' raised %s: %s", name, type(exc).__name__, exc)
            return _tool_error_result(str(exc))

        text = format_tool_result_text(value, name, max_chars)
        return {"content": [{"type": "text", "text": text}], "isError": False}


def _tool_error_result(message: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": f"Error: {message}"}], "isError": True}


def _read_result(uri: str, mime_type: str, content: Any) -> Dict[str, Any]:
    text = content if isinstance(content, str) else str(content)
    return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}


class ResourceTemplateRegistry(_Registry[ResourceTemplate]):
    kind = "resource template"
    key_label = "URI template"

    def __init__(self) -> None:
        super().__init__()
        self._compiled: Dict[str, UriTemplate] = {}

    def _key(self, entry: ResourceTemplate) -> str:
        return entry.uri_template

    def _check(self, entry: ResourceTemplate) -> None:
        super()._check(entry)
        if not entry.name:
            raise ValueError("Name must be provided")

    def register(self, entry: ResourceTemplate) -> ResourceTemplate:
        self._check(entry)
        compiled = UriTemplate(entry.uri_template)
        super().register(entry)
        self._compiled[entry.uri_template] = compiled
        return entry

    def reset(self) -> None:
        super().reset()
        self._compiled.clear()

    def list(self, cursor: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
        templates, next_cursor = self.page(cursor, page_size)
        result: Dict[str, Any] = {"resourceTemplates": [t.to_dict() for t in templates]}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    def match(self, uri: str) -> Optional[Tuple[ResourceTemplate, Dict[str, str]]]:
        candidates = ((self._compiled[key], entry) for key, entry in self._entries.items())
        return match_template(uri, candidates)


class ResourceRegistry(_Registry[Resource]):
    kind = "resource"
    key_label = "URI"

    def _key(self, entry: Resource) -> str:
        return entry.uri

    def _check(self, entry: Resource) -> None:
        super()._check(entry)
        if not entry.name:
            raise ValueError("Name must be provided")

    def list(self, cursor: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
        resources, next_cursor = self.page(cursor, page_size)
        result: Dict[str, Any] = {"resources": [r.to_dict() for r in resources]}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    def read(self, uri: str, templates: Optional[ResourceTemplateRegistry] = None) -> Dict[str, Any]:
        """Read a concrete resource, falling back to the first matching template."""
        resource = self.get(uri)
        if resource is not None:
            try:
                content = resource.handler()
            except Exception as exc:
                logger.warning("Resource '%s' raised %s: %s", uri, type(exc).__name__, exc)
                raise ResourceReadError(f"Error reading resource: {exc}", data={"uri": uri}) from exc
            return _read_result(resource.uri, resource.mime_type, content)

        matched = templates.match(uri) if templates is not None else None
        if matched is None:
            raise ResourceNotFoundError(f"Resource not found: {uri}", data={"uri": uri})

        template, variables = matched
        try:
            content = template.handler(variables)
        except Exception as exc:
            logger.warning(
                "Resource template '%s' raised %s for '%s': %s",
                template.uri_template,
                type(exc).__name__,
                uri,
                exc,
            )
            raise ResourceReadError(
                f"Error reading resource from template: {exc}", data={"uri": uri}
            ) from exc
        return _read_result(uri, template.mime_type, content)
