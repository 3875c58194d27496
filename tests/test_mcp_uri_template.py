import pytest

from skald.mcp.uri_template import UriTemplate, match_template


def test_extracts_placeholder_values():
    assert UriTemplate("/test/{a}/{b}").extract("/test/x/y") == {"a": "x", "b": "y"}


@pytest.mark.parametrize("uri", ["/test/x", "/test/x/y/z", "/test//y", "/other/x/y", "prefix/test/x/y"])
def test_requires_a_whole_uri_match(uri):
    assert UriTemplate("/test/{a}/{b}").extract(uri) is None


def test_literal_characters_are_escaped():
    template = UriTemplate("file:///{name}.txt")
    assert template.extract("file:///notes.txt") == {"name": "notes"}
    assert template.extract("file:///notesXtxt") is None


def test_placeholder_stops_at_slash():
    assert UriTemplate("repo://{owner}/{repo}").extract("repo://octo/cat/extra") is None


def test_template_without_placeholders_matches_only_itself():
    template = UriTemplate("config://app")
    assert template.variables == ()
    assert template.extract("config://app") == {}
    assert template.extract("config://apps") is None


def test_empty_template_is_rejected():
    with pytest.raises(ValueError):
        UriTemplate("")


def test_first_registered_template_wins():
    candidates = [
        (UriTemplate("/users/{id}"), "generic"),
        (UriTemplate("/users/{name}"), "by-name"),
    ]
    assert match_template("/users/42", candidates) == ("generic", {"id": "42"})


def test_no_match_returns_none():
    assert match_template("/nothing", [(UriTemplate("/users/{id}"), "users")]) is None
