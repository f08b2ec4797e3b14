"""Tests for the in-memory history facility."""

import re

import pytest

from smartnav import MemoryHistory
from smartnav.core.parser import compile_path


def bound_history(initial="", **kwargs):
    history = MemoryHistory(initial, **kwargs)
    seen = []
    history.route(compile_path("users"), lambda fragment: seen.append(("users", fragment)))
    history.route(compile_path("users/:id"), lambda fragment: seen.append(("user", fragment)))
    return history, seen


def test_start_loads_initial_path():
    history, seen = bound_history("#/users")
    assert history.start() is True
    assert history.current_path() == "users"
    assert seen == [("users", "users")]
    with pytest.raises(RuntimeError):
        history.start()


def test_start_reports_unmatched_initial_path():
    history, seen = bound_history("nowhere")
    assert history.start() is False
    assert seen == []


def test_navigate_requires_started_history():
    history, seen = bound_history()
    assert history.navigate("users") is False
    assert history.entries == ("",)


def test_navigate_pushes_and_truncates_forward_entries():
    history, seen = bound_history()
    history.start()
    history.navigate("users")
    history.navigate("/users/1")
    assert history.entries == ("", "users", "users/1")

    assert history.back() is True
    assert history.current_path() == "users"
    history.navigate("users/2")
    assert history.entries == ("", "users", "users/2")
    assert history.forward() is False
    assert seen[-1] == ("user", "users/2")


def test_navigate_replace_and_silent():
    history, seen = bound_history()
    history.start()
    history.navigate("users")
    assert history.navigate("users/1", replace=True) is True
    assert history.entries == ("", "users/1")
    assert history.navigate("users", trigger=False) is True
    assert seen == [("users", "users"), ("user", "users/1")]


def test_navigate_to_current_fragment_is_noop():
    history, seen = bound_history()
    history.start()
    history.navigate("users")
    assert history.navigate("/users") is False
    assert len(seen) == 1


def test_back_and_forward_at_the_edges():
    history, seen = bound_history("users")
    history.start()
    assert history.back() is False
    history.navigate("users/4")
    assert history.back() is True
    assert history.forward() is True
    assert history.current_path() == "users/4"


def test_root_is_stripped_and_rendered():
    history = MemoryHistory("/app/users", root="/app/")
    history.route(re.compile(r"^users$"), lambda fragment: None)
    assert history.start(push_state=False) is True
    assert history.current_path() == "users"
    assert history.url() == "/app#users"
    history.navigate("/app/users/9")
    assert history.current_path() == "users/9"


def test_root_given_at_start():
    history = MemoryHistory("portal/home")
    history.start(root="portal")
    assert history.root == "portal"
    assert history.current_path() == "home"
    assert history.url() == "/portal/home"
