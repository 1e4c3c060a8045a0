import pytest

from supermac.commands import Command, CommandTable
from supermac.errors import UsageError
from supermac.registry import CATEGORIES, SHORTCUTS, load_module, load_table, search


def make_table(calls=None):
    calls = calls if calls is not None else []
    return CommandTable(
        "sample",
        [
            Command("start", lambda args: calls.append(("start", list(args))), "Start", aliases=("go",)),
            Command("stop", lambda args: 3, "Stop", keywords=("halt", "Kill")),
        ],
    )


def test_dispatch_calls_handler_with_args():
    calls = []
    table = make_table(calls)
    assert table.dispatch("start", ["a", "b"]) == 0
    assert calls == [("start", ["a", "b"])]


def test_dispatch_by_alias_and_handler_exit_code():
    calls = []
    table = make_table(calls)
    assert table.dispatch("go", []) == 0
    assert calls == [("start", [])]
    assert table.dispatch("stop", []) == 3


def test_unknown_action_reports_available_actions():
    with pytest.raises(UsageError) as excinfo:
        make_table().dispatch("jump", [])
    assert excinfo.value.message == "Unknown sample action: jump"
    assert "Available actions: start, stop" in excinfo.value.hints


def test_search_matches_substrings_case_insensitively():
    table = make_table()
    assert [command.name for command in table.search("KILL")] == ["stop"]
    assert [command.name for command in table.search("al")] == ["stop"]
    assert table.search("samp") == []
    assert table.search("zzz") == []


def test_every_category_module_exposes_a_table():
    for name in CATEGORIES:
        module = load_module(name)
        assert module.TABLE.category == name
        assert callable(module.dispatch)
        assert module.TABLE.commands


def test_shortcuts_point_at_real_actions():
    for alias, (category, action) in SHORTCUTS.items():
        assert load_table(category).get(action) is not None, alias


def test_registry_search_follows_registry_order():
    categories = [category for category, _ in search("status")]
    order = list(CATEGORIES)
    assert categories == sorted(categories, key=order.index)
    assert "finder" in categories and "screenshot" in categories


def test_registry_search_returns_only_matching_terms():
    matches = search("fi")
    assert matches
    for category, command in matches:
        assert any("fi" in term.lower() for term in command.terms()), (category, command.name)
    assert ("finder", "show-hidden") not in [(category, command.name) for category, command in matches]
