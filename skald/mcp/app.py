"""
Skald App
---------
An ``App`` owns the tool, resource and resource-template registries plus the
lifecycle hooks and roots handler. One app may back many sessions; it is
treated as read-only once the first server boots it.

Example::

    app = App("demo", version="1.0.0")

    @app.tool("greet", description="Say hello", arguments=[Argument("name", str, required=True)])
    def greet(args):
        return f"Hello {args['name']}"
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .registry import (
    DEFAULT_MIME_TYPE,
    Resource,
    ResourceRegistry,
    ResourceTemplate,
    ResourceTemplateRegistry,
    Tool,
    ToolRegistry,
)
from .schema import Argument, build_schema

logger = logging.getLogger("Skald.mcp.app")

Hook = Callable[..., Any]


class App:
    def __init__(self, name: str, version: str = "0.1.0", instructions: Optional[str] = None):
        self.name = name
        self.version = version
        self.instructions = instructions
        self.tools = ToolRegistry()
        self.resources = ResourceRegistry()
        self.resource_templates = ResourceTemplateRegistry()
        self.roots_handler: Optional[Callable[[List[Dict[str, Any]]], Any]] = None
        self.boot_hooks: List[Hook] = []
        self.initialize_client_hooks: List[Hook] = []
        self.client_initialized_hooks: List[Hook] = []
        self._booted = False

    # Registration

    def add_tool(
        self,
        name: str,
        handler: Callable[[Dict[str, Any]], Any],
        description: str = "",
        arguments: Sequence[Argument] = (),
    ) -> Tool:
        tool = Tool(
            name=name,
            handler=handler,
            description=description,
            input_schema=build_schema(arguments),
        )
        return self.tools.register(tool)

    def add_resource(
        self,
        uri: str,
        handler: Callable[[], Any],
        name: str,
        description: str = "",
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> Resource:
        resource = Resource(
            uri=uri,
            name=name,
            handler=handler,
            description=description,
            mime_type=mime_type,
        )
        return self.resources.register(resource)

    def add_resource_template(
        self,
        uri_template: str,
        handler: Callable[[Dict[str, str]], Any],
        name: str,
        description: str = "",
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> ResourceTemplate:
        template = ResourceTemplate(
            uri_template=uri_template,
            name=name,
            handler=handler,
            description=description,
            mime_type=mime_type,
        )
        return self.resource_templates.register(template)

    # Decorator forms of the above

    def tool(self, name: str, description: str = "", arguments: Sequence[Argument] = ()):
        def decorator(fn):
            self.add_tool(name, fn, description=description, arguments=arguments)
            return fn
        return decorator

    def resource(self, uri: str, name: str, description: str = "", mime_type: str = DEFAULT_MIME_TYPE):
        def decorator(fn):
            self.add_resource(uri, fn, name=name, description=description, mime_type=mime_type)
            return fn
        return decorator

    def resource_template(
        self, uri_template: str, name: str, description: str = "", mime_type: str = DEFAULT_MIME_TYPE
    ):
        def decorator(fn):
            self.add_resource_template(
                uri_template, fn, name=name, description=description, mime_type=mime_type
            )
            return fn
        return decorator

    def roots(self, fn):
        """Register the handler called with the client's roots whenever they change."""
        self.roots_handler = fn
        return fn

    def on_boot(self, fn):
        self.boot_hooks.append(fn)
        return fn

    def on_initialize_client(self, fn):
        self.initialize_client_hooks.append(fn)
        return fn

    def on_client_initialized(self, fn):
        self.client_initialized_hooks.append(fn)
        return fn

    # Lifecycle

    @property
    def booted(self) -> bool:
        return self._booted

    def boot(self) -> None:
        if self._booted:
            return
        self._booted = True
        for hook in self.boot_hooks:
            hook()
        logger.info(
            "Booted app '%s' %s: %d tools, %d resources, %d resource templates",
            self.name,
            self.version,
            len(self.tools),
            len(self.resources),
            len(self.resource_templates),
        )

    def initialize_client(self, params: Dict[str, Any]) -> None:
        for hook in self.initialize_client_hooks:
            hook(params)

    def client_initialized(self, params: Dict[str, Any]) -> None:
        for hook in self.client_initialized_hooks:
            hook(params)

    @property
    def wants_roots(self) -> bool:
        return self.roots_handler is not None

    def roots_changed(self, roots: List[Dict[str, Any]]) -> None:
        if self.roots_handler is not None:
            self.roots_handler(roots)

    def reset(self) -> None:
        """Drop every registration, hook and the roots handler."""
        self.tools.reset()
        self.resources.reset()
        self.resource_templates.reset()
        self.roots_handler = None
        self.boot_hooks.clear()
        self.initialize_client_hooks.clear()
        self.client_initialized_hooks.clear()
        self._booted = False
