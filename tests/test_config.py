"""Tests for .renscriptrc configuration loading."""

import json
import os

from renscript.config import RenScriptConfig, find_config, load_config
from renscript.capabilities import list_capabilities


class TestDefaults:
    def test_defaults(self):
        config = RenScriptConfig()
        assert config.scripts_dir == "renscripts"
        assert config.capabilities == ""
        assert config.format == "text"
        assert config.log_level == "WARNING"

    def test_no_config_file(self, tmp_path):
        config = load_config(os.path.join(str(tmp_path), "missing.yml"))
        assert config == RenScriptConfig()


class TestLoad:
    def test_yaml(self, tmp_path):
        path = tmp_path / ".renscriptrc.yml"
        path.write_text(
            "scripts_dir: src/scripts\n"
            "output_dir: build\n"
            "format: json\n"
            "log_level: info\n"
            "unknown_key: 1\n"
        )
        config = load_config(str(path))
        assert config.scripts_dir == "src/scripts"
        assert config.output_dir == "build"
        assert config.format == "json"
        assert config.log_level == "INFO"
        assert config.base_dir == str(tmp_path)

    def test_json(self, tmp_path):
        path = tmp_path / ".renscriptrc.json"
        path.write_text(json.dumps({"scripts_dir": "game"}))
        assert load_config(str(path)).scripts_dir == "game"

    def test_invalid_format_ignored(self, tmp_path):
        path = tmp_path / ".renscriptrc.yml"
        path.write_text("format: xml\n")
        assert load_config(str(path)).format == "text"

    def test_malformed_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / ".renscriptrc.yml"
        path.write_text("scripts_dir: [unclosed\n")
        config = load_config(str(path))
        assert config.scripts_dir == "renscripts"

    def test_non_mapping_gives_defaults(self, tmp_path):
        path = tmp_path / ".renscriptrc.yml"
        path.write_text("- a\n- b\n")
        config = load_config(str(path))
        assert config.scripts_dir == "renscripts"
        assert config.base_dir == str(tmp_path)


class TestFind:
    def test_walks_up(self, tmp_path):
        (tmp_path / "renscript.config.yml").write_text("scripts_dir: x\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(str(nested)) == str(tmp_path / "renscript.config.yml")

    def test_priority(self, tmp_path):
        (tmp_path / ".renscriptrc.json").write_text("{}")
        (tmp_path / ".renscriptrc.yml").write_text("{}")
        assert find_config(str(tmp_path)) == str(tmp_path / ".renscriptrc.yml")

    def test_load_by_search(self, tmp_path):
        (tmp_path / ".renscriptrc.yml").write_text("scripts_dir: found\n")
        assert load_config(start_dir=str(tmp_path)).scripts_dir == "found"


class TestCapabilityTable:
    def test_bundled_when_unset(self):
        assert RenScriptConfig().capability_table().pairs() == list_capabilities()

    def test_relative_to_config(self, tmp_path):
        (tmp_path / "api").mkdir()
        (tmp_path / "api" / "table.yml").write_text("jump: doJump\n")
        path = tmp_path / ".renscriptrc.yml"
        path.write_text("capabilities: api/table.yml\n")
        table = load_config(str(path)).capability_table()
        assert table.pairs() == [("jump", "doJump")]
