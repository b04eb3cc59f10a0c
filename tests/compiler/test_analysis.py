"""RenScript Analysis Tests — USE-001, VAL-001 through VAL-003, CAP-001.

Tests for:
  - Usage analysis (called names in first-use order)
  - Edit distance and "did you mean" suggestions
  - Validation of called names against the capability table
  - Loading capability tables from YAML and JSON
"""

import json

import pytest

from renscript.parser import parse
from renscript.usage import analyze_usage, contains_identifier
from renscript.validator import edit_distance, suggest_similar, validate
from renscript.capabilities import (
    CapabilityTable, load_capabilities, list_capabilities, as_capability_table,
    MATH_FUNCTIONS,
)
from renscript.errors import CompileError, ErrorKind


def run_validation(source, pairs):
    ast = parse(source)
    validate(ast, analyze_usage(ast), CapabilityTable(pairs))
    return ast


# ===========================================================================
# USE-001: Usage analysis
# ===========================================================================

class TestUSE001:
    """USE-001: Every name invoked as name(...) is recorded once, in first-use order."""

    def test_first_use_order(self):
        ast = parse("""
            script T {
              start() { b(); a(); b() }
              helper() { c() }
            }
        """)
        assert list(analyze_usage(ast)) == ["b", "a", "c"]

    def test_first_location_kept(self):
        ast = parse("script T {\n start() {\n  jump()\n  jump()\n }\n}")
        loc = analyze_usage(ast)["jump"]
        assert (loc.line, loc.column) == (3, 3)

    def test_variable_initializers(self):
        ast = parse("script T { speed = clamp(1, 0, 2) }")
        assert "clamp" in analyze_usage(ast)

    def test_nested_positions(self):
        ast = parse("""
            script T {
              update(dt) {
                if (ready()) { a(b(1)) } else { c() }
                for (i = d(); i < e(); i = f()) { g() }
                return h() + -k()
              }
            }
        """)
        assert list(analyze_usage(ast)) == ["ready", "a", "b", "c", "d", "e", "f", "g", "h", "k"]

    def test_collections_and_members(self):
        ast = parse("script T { start() { v = [p(), {k: q()}]; w = get_position().x; z = arr[idx()] } }")
        assert list(analyze_usage(ast)) == ["p", "q", "get_position", "idx"]

    def test_method_calls_not_recorded(self):
        ast = parse("script T { start() { target.move(1); x = y } }")
        assert analyze_usage(ast) == {}

    def test_contains_identifier(self):
        ast = parse("script T { start() { angle = PI * 2 } }")
        assert contains_identifier(ast, "PI")
        assert not contains_identifier(ast, "E")


# ===========================================================================
# VAL-001: Edit distance
# ===========================================================================

class TestVAL001:
    """VAL-001: Levenshtein distance with unit costs."""

    @pytest.mark.parametrize("a,b,expected", [
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
        ("same", "same", 0),
        ("mve", "move", 1),
        ("flaw", "lawn", 2),
    ])
    def test_distance(self, a, b, expected):
        assert edit_distance(a, b) == expected

    def test_symmetric(self):
        assert edit_distance("rotate_by", "rotateBy") == edit_distance("rotateBy", "rotate_by")


# ===========================================================================
# VAL-002: Suggestions
# ===========================================================================

class TestVAL002:
    """VAL-002: Suggestions match case-insensitively, by containment or by distance."""

    def test_close_typo(self):
        assert suggest_similar("mve", ["move", "set_background_texture"]) == ["move"]

    def test_case_insensitive(self):
        assert suggest_similar("MOVE", ["move", "set_background_texture"]) == ["move"]

    def test_containment_either_way(self):
        candidates = ["get_position", "set_position", "play_animation_clip"]
        assert suggest_similar("position", candidates) == ["get_position", "set_position"]
        assert suggest_similar("get_position_now", candidates) == ["get_position"]

    def test_sorted_and_capped(self):
        candidates = ["a7", "a3", "a1", "a6", "a2", "a5", "a4"]
        assert suggest_similar("a", candidates) == ["a1", "a2", "a3", "a4", "a5"]

    def test_no_match(self):
        assert suggest_similar("zzzzzzzz", ["move", "jump"]) == []


# ===========================================================================
# VAL-003: Validation
# ===========================================================================

class TestVAL003:
    """VAL-003: Called names must resolve, or compilation fails with suggestions."""

    def test_capability_call_allowed(self):
        run_validation("script T { start() { move(1) } }", [("move", "doMove")])

    def test_math_and_builtins_allowed(self):
        calls = "; ".join(f"v = {name}(1)" for name in MATH_FUNCTIONS)
        run_validation(f"script T {{ start() {{ {calls}; s = String(v); n = Number(s) }} }}", [])

    def test_user_function_allowed(self):
        run_validation("script T { start() { helper() } helper() { } }", [])

    def test_undefined_with_suggestion(self):
        with pytest.raises(CompileError) as exc:
            run_validation("script T {\n start() {\n  mve(1)\n }\n}", [("move", "doMove"), ("jump", "doJump")])
        err = exc.value.error
        assert err.kind == ErrorKind.UNDEFINED_FUNCTION
        assert err.details == {"name": "mve", "suggestions": ["move"]}
        assert "mve" in err.message
        assert "move" in err.message
        assert (err.location.line, err.location.column) == (3, 3)

    def test_undefined_without_suggestion(self):
        with pytest.raises(CompileError) as exc:
            run_validation("script T { start() { qqqqqqqq() } }", [("move", "doMove")])
        assert exc.value.error.details["suggestions"] == []

    def test_first_undefined_in_source_order_wins(self):
        with pytest.raises(CompileError) as exc:
            run_validation("script T { start() { first(); second() } }", [])
        assert exc.value.error.details["name"] == "first"

    def test_member_calls_not_validated(self):
        run_validation("script T { start() { scene.spawn(1) } }", [])


# ===========================================================================
# CAP-001: Capability tables
# ===========================================================================

class TestCAP001:
    """CAP-001: Capability tables keep order and load from YAML or JSON."""

    def test_bundled_table(self):
        pairs = list_capabilities()
        assert pairs[0] == ("log", "log")
        assert ("move_by", "moveBy") in pairs
        assert ("move_to", "setPosition") in pairs

    def test_lookup(self):
        table = CapabilityTable([("jump", "doJump"), ("run", "doRun")])
        assert "jump" in table
        assert "doJump" not in table
        assert table.host_name("run") == "doRun"
        assert table.host_name("fly") is None
        assert table.names() == ["jump", "run"]
        assert len(table) == 2

    def test_yaml_mapping(self, tmp_path):
        path = tmp_path / "caps.yml"
        path.write_text("jump: doJump\nrun: doRun\n")
        assert load_capabilities(str(path)).pairs() == [("jump", "doJump"), ("run", "doRun")]

    def test_json_pairs(self, tmp_path):
        path = tmp_path / "caps.json"
        path.write_text(json.dumps([["jump", "doJump"]]))
        assert load_capabilities(str(path)).pairs() == [("jump", "doJump")]

    def test_malformed_table(self, tmp_path):
        path = tmp_path / "caps.yml"
        path.write_text("- just a string\n")
        with pytest.raises(ValueError):
            load_capabilities(str(path))

    def test_as_capability_table(self):
        assert as_capability_table(None).pairs() == list_capabilities()
        table = CapabilityTable([("a", "b")])
        assert as_capability_table(table) is table
        assert as_capability_table([("x", "y")]).pairs() == [("x", "y")]

    def test_duplicate_script_name_keeps_first(self, caplog):
        table = CapabilityTable([("jump", "doJump"), ("run", "doRun"), ("jump", "leap")])
        assert table.pairs() == [("jump", "doJump"), ("run", "doRun")]
        assert table.host_name("jump") == "doJump"
        assert "duplicate capability 'jump'" in caplog.text
