"""Tests for path template parsing and matcher compilation."""

import pytest

from smartnav import ConfigurationError
from smartnav.core.parser import compile_path, extract_parameters, parse


def test_parse_injects_arguments_in_order():
    assert parse("/user/:id/edit", ["42"]) == "/user/42/edit"
    assert parse("team/:team/member/:member", ["red", 7]) == "team/red/member/7"


def test_parse_without_arguments_returns_template():
    assert parse("/home", []) == "/home"
    assert parse("/user/:id", None) == "/user/:id"


def test_parse_wraps_scalar_argument():
    assert parse("user/:id", 5) == "user/5"


def test_parse_ignores_names_and_non_param_segments():
    assert parse("a/:second/b/:first", ["x", "y"]) == "a/x/b/y"
    assert parse("docs/*page", ["ignored"]) == "docs/*page"


def test_parse_missing_arguments_render_empty_segments():
    assert parse("/a/:x/:y", ["1"]) == "/a/1/"


def test_parse_strict_rejects_missing_arguments():
    with pytest.raises(ConfigurationError):
        parse("/a/:x/:y", ["1"], strict=True)
    with pytest.raises(ConfigurationError):
        parse("/user/:id/edit", [], strict=True)
    assert parse("/about", None, strict=True) == "/about"
    assert parse("/user/:id/edit", []) == "/user/:id/edit"


def test_compile_path_named_params():
    matcher = compile_path("user/:id/edit")
    assert matcher.match("user/42/edit")
    assert not matcher.match("user/42")
    assert not matcher.match("user/42/edit/more")
    assert extract_parameters(matcher, "user/42/edit") == ["42"]


def test_compile_path_root_and_query():
    matcher = compile_path("")
    assert matcher.match("")
    assert matcher.match("?page=2")
    assert extract_parameters(matcher, "?page=2") == []


def test_compile_path_splat_and_optional():
    splat = compile_path("docs/*page")
    assert extract_parameters(splat, "docs/guide/intro") == ["guide/intro"]

    optional = compile_path("search(/:term)")
    assert extract_parameters(optional, "search") == [None]
    assert extract_parameters(optional, "search/cats") == ["cats"]


def test_extract_parameters_decodes_and_reports_mismatch():
    matcher = compile_path("tag/:name")
    assert extract_parameters(matcher, "tag/hello%20world") == ["hello world"]
    assert extract_parameters(matcher, "other/x") is None


def test_compile_path_escapes_literal_characters():
    matcher = compile_path("file.json")
    assert matcher.match("file.json")
    assert not matcher.match("fileXjson")
