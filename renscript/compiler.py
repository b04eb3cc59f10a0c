"""RenScript compile pipeline.

    source → tokenize → parse → analyze usage → validate → generate

Each stage runs to completion before the next begins. The first error raises
CompileError and nothing is produced.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from renscript.ast_nodes import ScriptAst
from renscript.capabilities import CapabilityTable, as_capability_table
from renscript.codegen import CodeGenerator
from renscript.errors import SourceLocation
from renscript.lexer import Lexer
from renscript.parser import Parser
from renscript.sources import read_script_source
from renscript.usage import analyze_usage
from renscript.validator import validate

logger = logging.getLogger(__name__)

Capabilities = Optional[Iterable[tuple[str, str]]]


def _front_end(
    source_text: str, table: CapabilityTable, filename: str,
) -> tuple[ScriptAst, dict[str, Optional[SourceLocation]]]:
    tokens = Lexer(source_text, filename).tokenize()
    logger.info("Tokenized %d tokens", len(tokens))

    ast = Parser(tokens).parse()
    logger.info("AST generated for script '%s'", ast.name)

    usage = analyze_usage(ast)
    validate(ast, usage, table)
    return ast, usage


def check(source_text: str, capabilities: Capabilities = None, filename: str = "<source>") -> ScriptAst:
    """Run every stage except code generation and return the validated AST."""
    ast, _ = _front_end(source_text, as_capability_table(capabilities), filename)
    return ast


def compile(source_text: str, capabilities: Capabilities = None, filename: str = "<source>") -> str:
    """Compile merged RenScript source text to a JavaScript module.

    `capabilities` is the capability table as (script_name, host_name) pairs;
    the bundled table is used when it is None. Raises CompileError.
    """
    table = as_capability_table(capabilities)
    ast, usage = _front_end(source_text, table, filename)

    code = CodeGenerator(ast, table, usage).generate()
    logger.info("Generated JavaScript for '%s' (%d chars)", ast.name, len(code))
    return code


def compile_script(
    name_or_path: str,
    root: str = ".",
    capabilities: Capabilities = None,
    scripts_dir: str = "renscripts",
) -> str:
    """Locate a script (and its overlay) under `root` and compile it."""
    logger.info("Compiling RenScript: %s", name_or_path)
    paths, source = read_script_source(name_or_path, root, scripts_dir)
    return compile(source, capabilities, filename=paths.script)
