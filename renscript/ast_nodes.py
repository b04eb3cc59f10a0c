"""RenScript AST node definitions.

One ScriptAst per compiled source: script-level variables, lifecycle methods,
inspector properties and user functions. Nodes are frozen once the parser
builds them; later passes only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from renscript.errors import SourceLocation


LiteralValue = Union[str, float, bool, None]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Expr:
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class Literal(Expr):
    value: LiteralValue = None


@dataclass(frozen=True)
class Identifier(Expr):
    name: str = ""


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr = field(default_factory=Expr)
    operator: str = ""
    right: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class Unary(Expr):
    operator: str = ""
    operand: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr = field(default_factory=Expr)
    arguments: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class Member(Expr):
    """obj.name (computed=False, property is an Identifier) or obj[expr]."""
    object: Expr = field(default_factory=Expr)
    property: Expr = field(default_factory=Expr)
    computed: bool = False


@dataclass(frozen=True)
class ArrayLiteral(Expr):
    items: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class ObjectLiteral(Expr):
    entries: tuple[tuple[str, Expr], ...] = ()


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Statement:
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class Assignment(Statement):
    name: str = ""
    value: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    value: Expr = field(default_factory=Expr)


@dataclass(frozen=True)
class IfStatement(Statement):
    condition: Expr = field(default_factory=Expr)
    then_statements: tuple[Statement, ...] = ()
    else_statements: Optional[tuple[Statement, ...]] = None


@dataclass(frozen=True)
class ForStatement(Statement):
    init: Statement = field(default_factory=Statement)
    condition: Expr = field(default_factory=Expr)
    update: Statement = field(default_factory=Statement)
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Optional[Expr] = None


@dataclass(frozen=True)
class BreakStatement(Statement):
    pass


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

LIFECYCLE_METHODS = ("start", "update", "destroy", "once")


@dataclass(frozen=True)
class VariableDeclaration:
    name: str
    value: Expr
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class MethodDeclaration:
    """A lifecycle hook: start, update, destroy or once."""
    method_type: str
    parameters: tuple[str, ...] = ()
    statements: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class FunctionDeclaration:
    name: str
    parameters: tuple[str, ...] = ()
    statements: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class PropertyDeclaration:
    """An inspector-tunable field declared inside a props block."""
    name: str
    prop_type: str
    section: str = "default"
    default_value: Optional[Expr] = None
    min: Optional[Expr] = None
    max: Optional[Expr] = None
    options: Optional[tuple[str, ...]] = None
    description: Optional[str] = None
    once: bool = False
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class ScriptAst:
    name: str
    object_type: str = "script"
    variables: tuple[VariableDeclaration, ...] = ()
    methods: tuple[MethodDeclaration, ...] = ()
    properties: tuple[PropertyDeclaration, ...] = ()
    functions: tuple[FunctionDeclaration, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def function_names(self) -> list[str]:
        return [f.name for f in self.functions]
