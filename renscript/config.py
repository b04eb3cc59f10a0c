"""RenScript Configuration — project-level .renscriptrc.yml support.

Loads configuration from .renscriptrc.yml (or .renscriptrc.yaml,
.renscriptrc.json) found in the project root or any parent directory.

Example .renscriptrc.yml:
    scripts_dir: renscripts        # where <name>/<name>.ren lives
    capabilities: api/table.yml    # custom capability table
    output_dir: build/scripts      # where `renscript compile` writes .js
    format: text                   # error output: text | json
    log_level: INFO
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from renscript.capabilities import CapabilityTable, default_capabilities, load_capabilities

logger = logging.getLogger(__name__)


@dataclass
class RenScriptConfig:
    """Project-level RenScript configuration."""
    scripts_dir: str = "renscripts"
    # Path to a custom capability table; empty = bundled table
    capabilities: str = ""
    output_dir: str = ""
    # Error output: "text" or "json"
    format: str = "text"
    log_level: str = "WARNING"
    # Directory the config file was loaded from; relative paths resolve here
    base_dir: str = "."

    def resolve(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.join(self.base_dir, path)

    def capability_table(self) -> CapabilityTable:
        if not self.capabilities:
            return default_capabilities()
        return load_capabilities(self.resolve(self.capabilities))


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".renscriptrc.yml",
    ".renscriptrc.yaml",
    ".renscriptrc.json",
    "renscript.config.yml",
    "renscript.config.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> RenScriptConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    Missing, unreadable or malformed files yield the defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return RenScriptConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError:
        logger.warning("Could not read config file %s", path)
        return RenScriptConfig()

    try:
        if path.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.warning("Ignoring malformed config file %s: %s", path, e)
        return RenScriptConfig()

    if not isinstance(data, dict):
        return RenScriptConfig(base_dir=os.path.dirname(os.path.abspath(path)))

    config = _dict_to_config(data)
    config.base_dir = os.path.dirname(os.path.abspath(path))
    return config


def _dict_to_config(data: Dict[str, Any]) -> RenScriptConfig:
    """Convert a parsed dict to RenScriptConfig; unknown keys are ignored."""
    config = RenScriptConfig()

    if "scripts_dir" in data:
        config.scripts_dir = str(data["scripts_dir"])
    if "capabilities" in data and data["capabilities"]:
        config.capabilities = str(data["capabilities"])
    if "output_dir" in data and data["output_dir"]:
        config.output_dir = str(data["output_dir"])
    if data.get("format") in ("text", "json"):
        config.format = data["format"]
    if "log_level" in data:
        config.log_level = str(data["log_level"]).upper()

    return config
