"""RenScript capability validation.

Every name a script calls must resolve to one of: a math function, a builtin
constructor, a function the script declares itself, or a capability table
entry. The first name that resolves to none of these aborts the compile with
an undefined_function error carrying "did you mean" suggestions.
"""

from __future__ import annotations

import logging
from typing import Optional

from renscript.ast_nodes import ScriptAst
from renscript.capabilities import CapabilityTable, MATH_FUNCTIONS, BUILTIN_FUNCTIONS
from renscript.errors import SourceLocation, CompileError, undefined_function

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
MAX_EDIT_DISTANCE = 3


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit-cost insert, delete and substitute."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def suggest_similar(target: str, candidates: list[str]) -> list[str]:
    """Candidates resembling `target`, sorted, at most MAX_SUGGESTIONS.

    A candidate matches on a case-insensitive exact match, on substring
    containment in either direction, or within MAX_EDIT_DISTANCE edits.
    """
    target_lower = target.lower()
    suggestions = []
    for candidate in candidates:
        cand_lower = candidate.lower()
        if (
            cand_lower == target_lower
            or target_lower in cand_lower
            or cand_lower in target_lower
            or edit_distance(target_lower, cand_lower) <= MAX_EDIT_DISTANCE
        ):
            suggestions.append(candidate)
    return sorted(suggestions)[:MAX_SUGGESTIONS]


def validate(
    ast: ScriptAst,
    usage: dict[str, Optional[SourceLocation]],
    capabilities: CapabilityTable,
) -> None:
    """Raise CompileError for the first called name nothing defines."""
    user_functions = set(ast.function_names())
    for name, location in usage.items():
        if name in MATH_FUNCTIONS or name in BUILTIN_FUNCTIONS:
            continue
        if name in user_functions or name in capabilities:
            continue
        suggestions = suggest_similar(name, capabilities.names())
        logger.debug("Undefined function '%s' (suggestions: %s)", name, suggestions)
        raise CompileError(undefined_function(name, suggestions, location))
