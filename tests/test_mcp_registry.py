"""Tests for skald.mcp.registry — registries, cursors and pagination."""

import pytest

from skald.mcp.errors import (
    InvalidParamsError,
    ResourceNotFoundError,
    ResourceReadError,
    ToolNotFoundError,
)
from skald.mcp.registry import (
    Resource,
    ResourceRegistry,
    ResourceTemplate,
    ResourceTemplateRegistry,
    Tool,
    ToolRegistry,
    decode_cursor,
    encode_cursor,
    paginate,
)
from skald.mcp.schema import Argument, build_schema


class TestCursor:
    def test_encode_is_opaque_and_decodes_back(self):
        cursor = encode_cursor(25)
        assert cursor != "25"
        assert "=" not in cursor
        assert decode_cursor(cursor) == 25

    def test_missing_cursor_means_start(self):
        assert decode_cursor(None) == 0
        assert decode_cursor("") == 0

    def test_bare_integer_is_accepted(self):
        assert decode_cursor("7") == 7

    @pytest.mark.parametrize("cursor", ["not-a-cursor", "bm9wZQ", "-3", "²", "Y3Vyc29yOnYxOsKy"])
    def test_invalid_cursor(self, cursor):
        with pytest.raises(InvalidParamsError):
            decode_cursor(cursor)


class TestPaginate:
    def test_without_page_size_returns_the_rest(self):
        values = list(range(5))
        assert paginate(values) == ([0, 1, 2, 3, 4], None)
        assert paginate(values, cursor="2") == ([2, 3, 4], None)

    def test_with_page_size(self):
        values = list(range(5))
        page, cursor = paginate(values, page_size=2)
        assert page == [0, 1]
        assert decode_cursor(cursor) == 2

        page, cursor = paginate(values, cursor=cursor, page_size=2)
        assert page == [2, 3]
        page, cursor = paginate(values, cursor=cursor, page_size=2)
        assert page == [4]
        assert cursor is None

    def test_exact_fit_has_no_next_cursor(self):
        assert paginate([1, 2], page_size=2) == ([1, 2], None)

    def test_offset_past_the_end_is_empty(self):
        assert paginate([1, 2], cursor="10", page_size=2) == ([], None)

    def test_non_positive_page_size_is_rejected(self):
        with pytest.raises(InvalidParamsError):
            paginate([1], page_size=0)


class TestToolRegistry:
    def test_register_requires_name_and_handler(self):
        registry = ToolRegistry()
        with pytest.raises(ValueError, match="Tool name cannot be None or empty"):
            registry.register(Tool(name="", handler=lambda args: None))
        with pytest.raises(ValueError, match="Handler must be provided"):
            registry.register(Tool(name="x"))

    def test_insertion_order_and_replacement(self):
        registry = ToolRegistry()
        registry.register(Tool(name="b", handler=lambda args: 1))
        registry.register(Tool(name="a", handler=lambda args: 2))
        registry.register(Tool(name="b", handler=lambda args: 3, description="new"))
        tools = registry.list()["tools"]
        assert [t["name"] for t in tools] == ["b", "a"]
        assert tools[0]["description"] == "new"

    def test_list_paginates(self):
        registry = ToolRegistry()
        for i in range(3):
            registry.register(Tool(name=f"t{i}", handler=lambda args: None))
        first = registry.list(page_size=2)
        assert [t["name"] for t in first["tools"]] == ["t0", "t1"]
        second = registry.list(cursor=first["nextCursor"], page_size=2)
        assert [t["name"] for t in second["tools"]] == ["t2"]
        assert "nextCursor" not in second

    def test_call_unknown_tool(self):
        with pytest.raises(ToolNotFoundError):
            ToolRegistry().call("nope", {})

    def test_call_renders_result_text(self):
        registry = ToolRegistry()
        registry.register(Tool(name="text", handler=lambda args: "plain"))
        registry.register(Tool(name="obj", handler=lambda args: {"k": [1, 2]}))
        assert registry.call("text")["content"] == [{"type": "text", "text": "plain"}]
        assert registry.call("obj")["content"][0]["text"] == '{"k": [1, 2]}'

    def test_validation_errors_are_joined(self):
        registry = ToolRegistry()
        registry.register(Tool(
            name="greet",
            handler=lambda args: "hi",
            input_schema=build_schema([Argument("a", str, required=True), Argument("b", str, required=True)]),
        ))
        result = registry.call("greet", {})
        assert result == {
            "content": [{"type": "text", "text": "Error: Missing required param :a\nMissing required param :b"}],
            "isError": True,
        }

    def test_handler_exception_becomes_error_result(self):
        registry = ToolRegistry()

        def explode(args):
            raise ValueError("bad input")

        registry.register(Tool(name="explode", handler=explode))
        assert registry.call("explode", {}) == {
            "content": [{"type": "text", "text": "Error: bad input"}],
            "isError": True,
        }

    def test_reset(self):
        registry = ToolRegistry()
        registry.register(Tool(name="t", handler=lambda args: None))
        registry.reset()
        assert len(registry) == 0
        assert "t" not in registry


class TestResourceRegistries:
    def test_resource_requires_uri_name_and_handler(self):
        registry = ResourceRegistry()
        with pytest.raises(ValueError, match="Resource URI cannot be None or empty"):
            registry.register(Resource(uri="", name="x", handler=lambda: ""))
        with pytest.raises(ValueError, match="Name must be provided"):
            registry.register(Resource(uri="/a", handler=lambda: ""))
        with pytest.raises(ValueError, match="Handler must be provided"):
            registry.register(Resource(uri="/a", name="A"))

    def test_template_requires_name(self):
        with pytest.raises(ValueError, match="Name must be provided"):
            ResourceTemplateRegistry().register(ResourceTemplate(uri_template="/a/{x}", handler=lambda v: ""))

    def test_direct_lookup_wins_over_templates(self):
        template_calls = []
        resources = ResourceRegistry()
        templates = ResourceTemplateRegistry()
        resources.register(Resource(uri="/test/fixed", name="Fixed", handler=lambda: "fixed"))
        templates.register(ResourceTemplate(
            uri_template="/test/{a}",
            name="Any",
            handler=lambda v: template_calls.append(v) or "templated",
        ))

        result = resources.read("/test/fixed", templates)
        assert result["contents"][0]["text"] == "fixed"
        assert template_calls == []

        result = resources.read("/test/other", templates)
        assert result["contents"][0] == {"uri": "/test/other", "mimeType": "text/plain", "text": "templated"}
        assert template_calls == [{"a": "other"}]

    def test_template_mime_type_is_used(self):
        resources = ResourceRegistry()
        templates = ResourceTemplateRegistry()
        templates.register(ResourceTemplate(
            uri_template="data://{id}.json",
            name="Data",
            handler=lambda v: '{"id": "%s"}' % v["id"],
            mime_type="application/json",
        ))
        content = resources.read("data://7.json", templates)["contents"][0]
        assert content["mimeType"] == "application/json"
        assert content["text"] == '{"id": "7"}'

    def test_unknown_uri(self):
        with pytest.raises(ResourceNotFoundError) as excinfo:
            ResourceRegistry().read("/missing", ResourceTemplateRegistry())
        assert excinfo.value.data == {"uri": "/missing"}

    def test_handler_failures_raise_read_errors(self):
        def broken(*args):
            raise OSError("unreadable")

        resources = ResourceRegistry()
        templates = ResourceTemplateRegistry()
        resources.register(Resource(uri="/r", name="R", handler=broken))
        templates.register(ResourceTemplate(uri_template="/t/{x}", name="T", handler=broken))

        with pytest.raises(ResourceReadError, match="unreadable"):
            resources.read("/r", templates)
        with pytest.raises(ResourceReadError, match="unreadable"):
            resources.read("/t/1", templates)

    def test_non_string_content_is_stringified(self):
        resources = ResourceRegistry()
        resources.register(Resource(uri="/n", name="N", handler=lambda: 42))
        assert resources.read("/n")["contents"][0]["text"] == "42"

    def test_lists(self):
        resources = ResourceRegistry()
        templates = ResourceTemplateRegistry()
        resources.register(Resource(uri="/a", name="A", handler=lambda: "", description="first"))
        templates.register(ResourceTemplate(uri_template="/a/{x}", name="AX", handler=lambda v: ""))
        assert resources.list() == {
            "resources": [{"uri": "/a", "name": "A", "description": "first", "mimeType": "text/plain"}]
        }
        assert templates.list()["resourceTemplates"][0]["uriTemplate"] == "/a/{x}"
