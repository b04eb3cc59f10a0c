"""RenScript CLI — Command-line interface for the RenScript compiler.

Commands:
  renscript compile <name|file.ren>   — Compile a script (plus .renp overlay) to JavaScript
  renscript check <name|file.ren>     — Lex, parse and validate without emitting
  renscript tokens <file>             — Dump the token stream as JSON
  renscript capabilities              — List the effective capability table
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional

import yaml

from renscript import __version__
from renscript.capabilities import CapabilityTable, load_capabilities
from renscript.compiler import check, compile
from renscript.config import RenScriptConfig, load_config
from renscript.errors import CompileError, file_not_found
from renscript.lexer import tokenize
from renscript.sources import read_script_source

logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> RenScriptConfig:
    config = load_config(getattr(args, "config", None), start_dir=getattr(args, "root", "."))
    if getattr(args, "format", None):
        config.format = args.format
    return config


def _capability_table(args: argparse.Namespace, config: RenScriptConfig) -> CapabilityTable:
    if getattr(args, "capabilities", None):
        return load_capabilities(args.capabilities)
    return config.capability_table()


def _report(error: CompileError, config: RenScriptConfig) -> int:
    if config.format == "json":
        print(error.to_json())
    else:
        print(f"error: {error}", file=sys.stderr)
    return 1


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a script and its optional overlay to JavaScript."""
    config = _load_config(args)
    table = _capability_table(args, config)
    try:
        paths, source = read_script_source(args.script, args.root, config.scripts_dir)
        code = compile(source, table, filename=paths.script)
    except CompileError as e:
        return _report(e, config)

    output = args.output
    if not output and config.output_dir:
        output = os.path.join(config.resolve(config.output_dir), paths.name + ".js")

    if not output:
        sys.stdout.write(code)
        return 0

    os.makedirs(os.path.dirname(os.path.abspath(output)), exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(code)
    if config.format == "json":
        print(json.dumps({"status": "compiled", "script": paths.name, "output": output}))
    else:
        print(f"compiled {paths.name} -> {output}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Run every stage but code generation."""
    config = _load_config(args)
    table = _capability_table(args, config)
    try:
        paths, source = read_script_source(args.script, args.root, config.scripts_dir)
        ast = check(source, table, filename=paths.script)
    except CompileError as e:
        return _report(e, config)

    if config.format == "json":
        print(json.dumps({"status": "ok", "script": ast.name, "object_type": ast.object_type}))
    else:
        print(f"ok: {ast.name} ({ast.object_type})")
    return 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Dump the token stream of a source file as JSON."""
    config = _load_config(args)
    try:
        if not os.path.isfile(args.file):
            raise CompileError(file_not_found(args.file))
        with open(args.file, "r", encoding="utf-8") as f:
            source = f.read()
        tokens = tokenize(source, filename=args.file)
    except CompileError as e:
        return _report(e, config)

    print(json.dumps([
        {"type": t.type.name, "value": t.value, "line": t.line, "column": t.column}
        for t in tokens
    ], indent=2))
    return 0


def cmd_capabilities(args: argparse.Namespace) -> int:
    """List the effective capability table."""
    config = _load_config(args)
    table = _capability_table(args, config)
    if config.format == "json":
        print(json.dumps([{"script": s, "host": h} for s, h in table], indent=2))
    else:
        width = max((len(s) for s in table.names()), default=0)
        for script_name, host_name in table:
            print(f"{script_name.ljust(width)}  -> api.{host_name}")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="renscript",
        description="RenScript — scripting language compiler for 3D scene objects",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Config file (default: nearest .renscriptrc.yml)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--root", default=".", help="Project root containing the scripts directory")
        p.add_argument("--capabilities", help="Capability table file (.yml or .json)")
        p.add_argument("--format", choices=["text", "json"], help="Output format for diagnostics")

    # compile
    p_compile = subparsers.add_parser("compile", help="Compile RenScript to JavaScript")
    p_compile.add_argument("script", help="Script name or path to a .ren file")
    p_compile.add_argument("-o", "--output", help="Output .js path (default: stdout)")
    add_common(p_compile)
    p_compile.set_defaults(func=cmd_compile)

    # check
    p_check = subparsers.add_parser("check", help="Validate a script without generating code")
    p_check.add_argument("script", help="Script name or path to a .ren file")
    add_common(p_check)
    p_check.set_defaults(func=cmd_check)

    # tokens
    p_tokens = subparsers.add_parser("tokens", help="Dump tokens as JSON")
    p_tokens.add_argument("file", help="RenScript source file")
    add_common(p_tokens)
    p_tokens.set_defaults(func=cmd_tokens)

    # capabilities
    p_caps = subparsers.add_parser("capabilities", help="List the capability table")
    add_common(p_caps)
    p_caps.set_defaults(func=cmd_capabilities)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config, start_dir=getattr(args, "root", "."))
    level = logging.getLevelName(config.log_level)
    if args.verbose:
        level = logging.DEBUG
    elif not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        status = args.func(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        status = 1
    sys.exit(status)


if __name__ == "__main__":
    main()
