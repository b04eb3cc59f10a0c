"""RenScript usage analysis.

Read-only walks over a ScriptAst:
  - analyze_usage: every name invoked as `name(...)`, in first-use order
  - contains_identifier: whether a given identifier appears anywhere
"""

from __future__ import annotations

from typing import Iterator, Optional

from renscript.ast_nodes import (
    ScriptAst, Statement, Assignment, ExpressionStatement, IfStatement,
    ForStatement, ReturnStatement,
    Expr, Identifier, Binary, Unary, Call, Member, ArrayLiteral, ObjectLiteral,
)
from renscript.errors import SourceLocation


def _script_roots(ast: ScriptAst) -> Iterator[Expr | Statement]:
    for var in ast.variables:
        yield var.value
    for method in ast.methods:
        yield from method.statements
    for func in ast.functions:
        yield from func.statements


def _statement_children(stmt: Statement) -> Iterator[Expr | Statement]:
    if isinstance(stmt, (Assignment, ExpressionStatement)):
        yield stmt.value
    elif isinstance(stmt, IfStatement):
        yield stmt.condition
        yield from stmt.then_statements
        if stmt.else_statements is not None:
            yield from stmt.else_statements
    elif isinstance(stmt, ForStatement):
        yield stmt.init
        yield stmt.condition
        yield stmt.update
        yield from stmt.statements
    elif isinstance(stmt, ReturnStatement):
        if stmt.value is not None:
            yield stmt.value


class UsageAnalyzer:
    """Collects the names of all call-by-name invocations in a script."""

    def __init__(self) -> None:
        self.used: dict[str, Optional[SourceLocation]] = {}

    def analyze(self, ast: ScriptAst) -> dict[str, Optional[SourceLocation]]:
        for node in _script_roots(ast):
            self._visit(node)
        return self.used

    def _visit(self, node: Expr | Statement) -> None:
        if isinstance(node, Statement):
            for child in _statement_children(node):
                self._visit(child)
        else:
            self._visit_expr(node)

    def _visit_expr(self, expr: Expr) -> None:
        if isinstance(expr, Call):
            if isinstance(expr.callee, Identifier):
                self.used.setdefault(expr.callee.name, expr.callee.location)
            else:
                self._visit_expr(expr.callee)
            for arg in expr.arguments:
                self._visit_expr(arg)
        elif isinstance(expr, Binary):
            self._visit_expr(expr.left)
            self._visit_expr(expr.right)
        elif isinstance(expr, Unary):
            self._visit_expr(expr.operand)
        elif isinstance(expr, Member):
            self._visit_expr(expr.object)
            if expr.computed:
                self._visit_expr(expr.property)
        elif isinstance(expr, ArrayLiteral):
            for item in expr.items:
                self._visit_expr(item)
        elif isinstance(expr, ObjectLiteral):
            for _, value in expr.entries:
                self._visit_expr(value)


def analyze_usage(ast: ScriptAst) -> dict[str, Optional[SourceLocation]]:
    """Map each called name to the location of its first call, in source order."""
    return UsageAnalyzer().analyze(ast)


def _expr_contains(expr: Expr, name: str) -> bool:
    if isinstance(expr, Identifier):
        return expr.name == name
    if isinstance(expr, Call):
        return _expr_contains(expr.callee, name) or any(_expr_contains(a, name) for a in expr.arguments)
    if isinstance(expr, Binary):
        return _expr_contains(expr.left, name) or _expr_contains(expr.right, name)
    if isinstance(expr, Unary):
        return _expr_contains(expr.operand, name)
    if isinstance(expr, Member):
        return _expr_contains(expr.object, name) or _expr_contains(expr.property, name)
    if isinstance(expr, ArrayLiteral):
        return any(_expr_contains(item, name) for item in expr.items)
    if isinstance(expr, ObjectLiteral):
        return any(_expr_contains(value, name) for _, value in expr.entries)
    return False


def _node_contains(node: Expr | Statement, name: str) -> bool:
    if isinstance(node, Statement):
        return any(_node_contains(child, name) for child in _statement_children(node))
    return _expr_contains(node, name)


def contains_identifier(ast: ScriptAst, name: str) -> bool:
    """True if `name` is referenced anywhere in the script, called or not."""
    return any(_node_contains(node, name) for node in _script_roots(ast))
