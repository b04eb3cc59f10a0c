"""RenScript Pipeline Tests — PIPE-001 through PIPE-004.

Tests for:
  - End-to-end compilation through the public API
  - Fail-fast stage ordering
  - Structured error output
  - Compiling scripts from a project directory
"""

import json

import pytest

import renscript
from renscript import CompileError, ErrorKind, check, compile, compile_script


def write_script(root, name, script, overlay=None):
    folder = root / "renscripts" / name
    folder.mkdir(parents=True)
    (folder / f"{name}.ren").write_text(script)
    if overlay is not None:
        (folder / f"{name}.renp").write_text(overlay)
    return folder


# ===========================================================================
# PIPE-001: Public API
# ===========================================================================

class TestPIPE001:
    """PIPE-001: compile() and check() run the full pipeline."""

    def test_compile_with_bundled_table(self):
        code = compile("script Spinner { update(dt) { rotate_by(0, dt, 0) } }")
        assert "const rotate_by = api.rotateBy.bind(api);" in code
        assert "ScriptInstance.prototype.onUpdate = function(dt) {" in code

    def test_check_returns_ast(self):
        ast = check("mesh Crate { start() { log(1) } }")
        assert ast.name == "Crate"
        assert ast.object_type == "mesh"

    def test_explicit_table_replaces_bundled(self):
        with pytest.raises(CompileError) as exc:
            compile("script T { start() { log(1) } }", [("jump", "doJump")])
        assert exc.value.kind == ErrorKind.UNDEFINED_FUNCTION

    def test_repeated_lifecycle_method_compiles(self):
        code = compile("script A { start(){} start(){} }", [])
        assert code.count("ScriptInstance.prototype.onStart = function() {") == 2

    def test_package_exports(self):
        assert renscript.__version__
        assert ("log", "log") in renscript.list_capabilities()


# ===========================================================================
# PIPE-002: Fail-fast ordering
# ===========================================================================

class TestPIPE002:
    """PIPE-002: The earliest stage reports and later stages never run."""

    def test_lexical_before_syntax(self):
        with pytest.raises(CompileError) as exc:
            compile('script T { start() { x = ; y = "abc } }', [])
        assert exc.value.kind == ErrorKind.UNTERMINATED_STRING

    def test_syntax_before_validation(self):
        with pytest.raises(CompileError) as exc:
            compile("script T { start() { nope() ) } }", [])
        assert exc.value.kind == ErrorKind.INVALID_SYNTAX

    def test_empty_source(self):
        with pytest.raises(CompileError) as exc:
            compile("", [])
        assert exc.value.kind == ErrorKind.MISSING_SCRIPT_DECLARATION

    def test_undefined_suggestion(self):
        with pytest.raises(CompileError) as exc:
            compile("script T { start() { mve(1) } }", [("move", "doMove")])
        assert exc.value.error.details["suggestions"] == ["move"]


# ===========================================================================
# PIPE-003: Structured errors
# ===========================================================================

class TestPIPE003:
    """PIPE-003: Errors serialize to a stable dict/JSON shape."""

    def test_to_dict(self):
        with pytest.raises(CompileError) as exc:
            compile("script T {\n  start() { mve() }\n}", [("move", "doMove")], filename="t.ren")
        d = exc.value.to_dict()
        assert d["kind"] == "undefined_function"
        assert d["location"] == {"file": "t.ren", "line": 2, "column": 13}
        assert d["details"]["name"] == "mve"

    def test_to_json(self):
        with pytest.raises(CompileError) as exc:
            compile("script T { start() { @ } }", [])
        data = json.loads(exc.value.to_json())
        assert data["kind"] == "unexpected_character"
        assert data["details"] == {"char": "@"}

    def test_error_without_location(self):
        with pytest.raises(CompileError) as exc:
            compile("", [])
        d = exc.value.to_dict()
        assert "location" not in d
        assert str(exc.value).startswith("[missing_script_declaration]")


# ===========================================================================
# PIPE-004: Project scripts
# ===========================================================================

class TestPIPE004:
    """PIPE-004: compile_script() locates, merges and compiles project files."""

    def test_script_with_overlay(self, tmp_path):
        write_script(
            tmp_path, "player",
            "script Player { start() { log(speed) } }",
            "props movement { speed: number { default: 3 } }",
        )
        code = compile_script("player", root=str(tmp_path))
        assert '        name: "speed",\n' in code
        assert '        section: "movement",\n' in code
        assert "const log = api.log.bind(api);" in code

    def test_overlay_duplicates_script_property(self, tmp_path):
        write_script(
            tmp_path, "player",
            "script Player { props { speed: number { } } }",
            "props { speed: number { } }",
        )
        with pytest.raises(CompileError) as exc:
            compile_script("player", root=str(tmp_path))
        assert exc.value.kind == ErrorKind.DUPLICATE_PROPERTY

    def test_error_location_names_file(self, tmp_path):
        folder = write_script(tmp_path, "bad", "script Bad { start() { nope() } }")
        with pytest.raises(CompileError) as exc:
            compile_script("bad", root=str(tmp_path))
        assert exc.value.error.location.file == str(folder / "bad.ren")

    def test_missing_script(self, tmp_path):
        with pytest.raises(CompileError) as exc:
            compile_script("ghost", root=str(tmp_path))
        assert exc.value.kind == ErrorKind.FILE_NOT_FOUND

    def test_blank_script(self, tmp_path):
        write_script(tmp_path, "blank", "  \n\n")
        with pytest.raises(CompileError) as exc:
            compile_script("blank", root=str(tmp_path))
        assert exc.value.kind == ErrorKind.EMPTY_SCRIPT
