"""Structured error objects for the RenScript compiler.

Every stage reports failure by raising a CompileError that wraps exactly one
RenScriptError. Errors are machine-readable (to_dict / to_json) and render as a
single human-readable line.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    # Caller-level I/O conditions
    FILE_NOT_FOUND = "file_not_found"
    EMPTY_SCRIPT = "empty_script"

    # Lexical
    UNEXPECTED_CHARACTER = "unexpected_character"
    UNTERMINATED_STRING = "unterminated_string"
    INVALID_NUMBER = "invalid_number"
    INVALID_ESCAPE = "invalid_escape"

    # Syntactic
    INVALID_SYNTAX = "invalid_syntax"
    DUPLICATE_PROPERTY = "duplicate_property"
    DUPLICATE_FUNCTION = "duplicate_function"
    MISSING_SCRIPT_DECLARATION = "missing_script_declaration"

    # Semantic
    UNDEFINED_FUNCTION = "undefined_function"


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int
    file: str = "<source>"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def describe(self) -> str:
        """`line N, column M`, plus the file name when there is one."""
        text = f"line {self.line}, column {self.column}"
        if self.file != "<source>":
            text += f" in {self.file}"
        return text


@dataclass
class RenScriptError:
    kind: ErrorKind
    message: str
    location: Optional[SourceLocation] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.location is not None:
            out["location"] = asdict(self.location)
        if self.details:
            out["details"] = dict(self.details)
        return out

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        # Script-scoped errors carry no location.
        if self.location is None:
            return f"[{self.kind.value}] {self.message}"
        return f"[{self.kind.value}] {self.message} at {self.location.describe()}"


# ---------------------------------------------------------------------------
# Caller-level
# ---------------------------------------------------------------------------

def file_not_found(path: str) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.FILE_NOT_FOUND,
        message=f"File not found: {path}",
        details={"path": path},
    )


def empty_script(path: str) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.EMPTY_SCRIPT,
        message=f"Empty script file: {path}",
        details={"path": path},
    )


# ---------------------------------------------------------------------------
# Lexical
# ---------------------------------------------------------------------------

def unexpected_character(char: str, location: SourceLocation) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.UNEXPECTED_CHARACTER,
        message=f"Unexpected character '{char}'",
        location=location,
        details={"char": char},
    )


def unterminated_string(location: SourceLocation) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.UNTERMINATED_STRING,
        message="Unterminated string literal",
        location=location,
    )


def invalid_number(text: str, location: SourceLocation) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.INVALID_NUMBER,
        message=f"Invalid number '{text}'",
        location=location,
        details={"text": text},
    )


def invalid_escape(escape: str, location: SourceLocation) -> RenScriptError:
    # A backslash before a line break must not split the rendered message.
    shown = escape if escape.isprintable() else escape.encode("unicode_escape").decode("ascii")
    return RenScriptError(
        kind=ErrorKind.INVALID_ESCAPE,
        message=f"Invalid escape sequence '{shown}'",
        location=location,
        details={"escape": escape},
    )


# ---------------------------------------------------------------------------
# Syntactic
# ---------------------------------------------------------------------------

def invalid_syntax(message: str, location: Optional[SourceLocation] = None) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.INVALID_SYNTAX,
        message=message,
        location=location,
    )


def duplicate_property(name: str, location: Optional[SourceLocation] = None) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.DUPLICATE_PROPERTY,
        message=f"Duplicate property '{name}'",
        location=location,
        details={"name": name},
    )


def duplicate_function(name: str, location: Optional[SourceLocation] = None) -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.DUPLICATE_FUNCTION,
        message=f"Duplicate function '{name}'",
        location=location,
        details={"name": name},
    )


def missing_script_declaration() -> RenScriptError:
    return RenScriptError(
        kind=ErrorKind.MISSING_SCRIPT_DECLARATION,
        message="Missing script declaration. RenScript files must start with 'script ScriptName {'",
    )


# ---------------------------------------------------------------------------
# Semantic
# ---------------------------------------------------------------------------

def undefined_function(
    name: str,
    suggestions: list[str],
    location: Optional[SourceLocation] = None,
) -> RenScriptError:
    message = f"Undefined function '{name}'."
    if suggestions:
        message += f" Did you mean: {', '.join(suggestions)}?"
    return RenScriptError(
        kind=ErrorKind.UNDEFINED_FUNCTION,
        message=message,
        location=location,
        details={"name": name, "suggestions": list(suggestions)},
    )


class CompileError(Exception):
    """Exception wrapping the single RenScriptError that aborted a compile."""

    def __init__(self, error: RenScriptError):
        self.error = error
        super().__init__(str(error))

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    def to_dict(self) -> dict[str, Any]:
        return self.error.to_dict()

    def to_json(self, indent: int = 2) -> str:
        return self.error.to_json(indent=indent)
