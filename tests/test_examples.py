"""The bundled example project must keep compiling."""

import os

import pytest

from renscript import compile_script

EXAMPLES = os.path.join(os.path.dirname(__file__), "..", "examples")


@pytest.mark.parametrize("name", ["spinner", "patrol"])
def test_example_compiles(name):
    code = compile_script(name, root=EXAMPLES)
    assert code.startswith("// Generated JavaScript from RenScript: ")
    assert code.endswith("return ScriptInstance;\n}\n")


def test_spinner_overlay_metadata():
    code = compile_script("spinner", root=EXAMPLES)
    assert 'name: "tint"' in code
    assert 'name: "speed"' in code
    assert "const sin = Math.sin;" in code
    assert "const PI = Math.PI;" in code
    assert "this.pulse(this.elapsed)" in code


def test_patrol_bindings_follow_table_order():
    code = compile_script("patrol", root=EXAMPLES)
    bound = [line.split("=")[0].split()[-1] for line in code.splitlines() if line.strip().startswith("const ")]
    assert bound == ["log", "get_position", "move_by", "distance", "remove_tag", "has_tag"]
