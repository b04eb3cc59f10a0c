"""Locating and merging RenScript source files.

A script lives in `<name>.ren`; an optional properties overlay lives beside it
in `<name>.renp`. The overlay, when present and non-blank, is placed before
the script text so its props blocks precede the script block.

Lookup for a bare script name, relative to the project root:
  renscripts/<name>/<name>.ren   (preferred)
  renscripts/<name>.ren          (legacy flat layout)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from renscript.errors import CompileError, file_not_found, empty_script

logger = logging.getLogger(__name__)

SCRIPT_EXT = ".ren"
OVERLAY_EXT = ".renp"


@dataclass(frozen=True)
class ScriptPaths:
    name: str
    script: str
    overlay: str


def resolve_script_paths(
    name_or_path: str, root: str = ".", scripts_dir: str = "renscripts",
) -> ScriptPaths:
    """Work out the .ren and .renp paths for a script name or .ren path."""
    if name_or_path.endswith(SCRIPT_EXT):
        stem = os.path.splitext(name_or_path)[0]
        return ScriptPaths(
            name=os.path.basename(stem),
            script=name_or_path,
            overlay=stem + OVERLAY_EXT,
        )

    name = name_or_path
    base = os.path.join(root, scripts_dir)
    subdir = os.path.join(base, name)
    subdir_script = os.path.join(subdir, name + SCRIPT_EXT)
    if os.path.isfile(subdir_script):
        logger.debug("Found script in subdirectory: %s", subdir_script)
        return ScriptPaths(name, subdir_script, os.path.join(subdir, name + OVERLAY_EXT))

    logger.debug("Looking for script in %s", base)
    return ScriptPaths(
        name,
        os.path.join(base, name + SCRIPT_EXT),
        os.path.join(base, name + OVERLAY_EXT),
    )


def merge_sources(script: str, overlay: Optional[str] = None) -> str:
    """Overlay first, blank line, then the script. Blank overlays are dropped."""
    if overlay is None or not overlay.strip():
        return script
    return f"{overlay}\n\n{script}"


def _read(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return None


def read_script_source(
    name_or_path: str, root: str = ".", scripts_dir: str = "renscripts",
) -> tuple[ScriptPaths, str]:
    """Read a script and its optional overlay, returning the merged source.

    Raises CompileError(file_not_found) when the .ren file is missing and
    CompileError(empty_script) when it holds only whitespace.
    """
    paths = resolve_script_paths(name_or_path, root, scripts_dir)

    script = _read(paths.script)
    if script is None:
        logger.error("Failed to read script file: %s", paths.script)
        raise CompileError(file_not_found(paths.script))
    if not script.strip():
        logger.error("Script file is empty: %s", paths.script)
        raise CompileError(empty_script(paths.script))

    overlay = _read(paths.overlay)
    if overlay is None:
        logger.info("No %s overlay for '%s'", OVERLAY_EXT, paths.name)
    elif overlay.strip():
        logger.info("Merging %s overlay into '%s'", OVERLAY_EXT, paths.name)

    return paths, merge_sources(script, overlay)
