"""RenScript code generation — ScriptAst to a JavaScript module.

The output is a single factory:

    function createRenScript(scene, api) { ...; return ScriptInstance; }

Only the capability and math bindings the script actually uses are emitted.
Lifecycle methods map to fixed host hook names, user functions keep their
names, and bare identifiers resolve to fields on the instance (`this.x`)
unless they name a parameter or a math constant.
"""

from __future__ import annotations

import json
import math
import re
from typing import Optional

from renscript.ast_nodes import (
    ScriptAst, MethodDeclaration, FunctionDeclaration, PropertyDeclaration,
    Statement, Assignment, ExpressionStatement, IfStatement, ForStatement,
    ReturnStatement, BreakStatement,
    Expr, Literal, Identifier, Binary, Unary, Call, Member, ArrayLiteral,
    ObjectLiteral, LiteralValue,
)
from renscript.capabilities import (
    CapabilityTable, MATH_FUNCTIONS, MATH_CONSTANTS, BUILTIN_FUNCTIONS,
)
from renscript.errors import SourceLocation
from renscript.usage import analyze_usage, contains_identifier


HOOK_NAMES = {
    "start": "onStart",
    "update": "onUpdate",
    "destroy": "onDestroy",
    "once": "onOnce",
}

INDENT = "  "

_JS_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def format_number(value: float) -> str:
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if math.isnan(value):
        return "NaN"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_literal(value: LiteralValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return json.dumps(value)


class CodeGenerator:
    """Emits JavaScript for one ScriptAst against one capability table."""

    def __init__(
        self,
        ast: ScriptAst,
        capabilities: CapabilityTable,
        usage: Optional[dict[str, Optional[SourceLocation]]] = None,
    ):
        self.ast = ast
        self.capabilities = capabilities
        self.usage = usage if usage is not None else analyze_usage(ast)

    # -------------------------------------------------------------------
    # Module layout
    # -------------------------------------------------------------------

    def generate(self) -> str:
        lines = [
            f"// Generated JavaScript from RenScript: {self.ast.name}",
            "function createRenScript(scene, api) {",
        ]
        for section in (self._api_bindings(), self._math_bindings()):
            if section:
                lines.extend(section)
                lines.append("")

        lines.extend(self._constructor())

        methods = [self._method(m) for m in self.ast.methods]
        if methods:
            lines.append("")
            lines.append(f"{INDENT}// Script methods")
            lines.extend(self._join_blocks(methods))

        functions = [self._function(f) for f in self.ast.functions]
        if functions:
            lines.append("")
            lines.append(f"{INDENT}// Custom functions")
            lines.extend(self._join_blocks(functions))

        lines.append("")
        lines.append(f"{INDENT}return ScriptInstance;")
        lines.append("}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _join_blocks(blocks: list[list[str]]) -> list[str]:
        out: list[str] = []
        for i, block in enumerate(blocks):
            if i:
                out.append("")
            out.extend(block)
        return out

    def _api_bindings(self) -> list[str]:
        lines = []
        for script_name, host_name in self.capabilities:
            if script_name not in self.usage:
                continue
            lines.append(
                f"{INDENT}if (!api.{host_name}) throw new Error('RenScript API Error: Method "
                f"\"{host_name}\" not found in API for function \"{script_name}\". "
                f"Available methods: ' + Object.keys(api).join(', '));"
            )
            lines.append(f"{INDENT}const {script_name} = api.{host_name}.bind(api);")
        if lines:
            lines.insert(0, f"{INDENT}// API bindings (only methods this script calls)")
        return lines

    def _math_bindings(self) -> list[str]:
        lines = []
        for name in MATH_FUNCTIONS:
            if name in self.usage and name not in self.capabilities:
                lines.append(f"{INDENT}const {name} = Math.{name};")
        for name in MATH_CONSTANTS:
            if name in self.capabilities:
                continue
            if name in self.usage or contains_identifier(self.ast, name):
                lines.append(f"{INDENT}const {name} = Math.{name};")
        return lines

    def _constructor(self) -> list[str]:
        body = INDENT * 2
        lines = [f"{INDENT}function ScriptInstance() {{", f"{body}// Script variables"]
        for var in self.ast.variables:
            lines.append(f"{body}this.{var.name} = {self._expr(var.value, ())};")

        lines.append("")
        lines.append(f"{body}// Script properties metadata")
        if self.ast.properties:
            lines.append(f"{body}this._scriptProperties = [")
            entries = [self._property_metadata(p) for p in self.ast.properties]
            for i, entry in enumerate(entries):
                if i < len(entries) - 1:
                    entry[-1] += ","
                lines.extend(entry)
            lines.append(f"{body}];")
        else:
            lines.append(f"{body}this._scriptProperties = [];")

        lines.append("")
        lines.append(f"{body}// Script object type metadata")
        lines.append(f"{body}this._scriptObjectType = {json.dumps(self.ast.object_type)};")
        lines.append(f"{INDENT}}}")
        return lines

    def _property_metadata(self, prop: PropertyDeclaration) -> list[str]:
        def optional(expr: Optional[Expr]) -> str:
            return self._expr(expr, ()) if expr is not None else "null"

        options = "null"
        if prop.options is not None:
            options = "[" + ", ".join(json.dumps(o) for o in prop.options) + "]"
        description = json.dumps(prop.description) if prop.description is not None else "null"

        pad = INDENT * 4
        return [
            f"{INDENT * 3}{{",
            f"{pad}name: {json.dumps(prop.name)},",
            f"{pad}type: {json.dumps(prop.prop_type)},",
            f"{pad}section: {json.dumps(prop.section)},",
            f"{pad}defaultValue: {optional(prop.default_value)},",
            f"{pad}min: {optional(prop.min)},",
            f"{pad}max: {optional(prop.max)},",
            f"{pad}options: {options},",
            f"{pad}description: {description},",
            f"{pad}triggerOnce: {'true' if prop.once else 'false'}",
            f"{INDENT * 3}}}",
        ]

    def _method(self, method: MethodDeclaration) -> list[str]:
        name = HOOK_NAMES.get(method.method_type, method.method_type)
        return self._prototype_function(name, method.parameters, method.statements)

    def _function(self, func: FunctionDeclaration) -> list[str]:
        return self._prototype_function(func.name, func.parameters, func.statements)

    def _prototype_function(
        self, name: str, params: tuple[str, ...], statements: tuple[Statement, ...],
    ) -> list[str]:
        lines = [f"{INDENT}ScriptInstance.prototype.{name} = function({', '.join(params)}) {{"]
        lines.extend(self._block(statements, 2, params))
        lines.append(f"{INDENT}}};")
        return lines

    # -------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------

    def _block(self, statements: tuple[Statement, ...], level: int, params: tuple[str, ...]) -> list[str]:
        lines: list[str] = []
        for stmt in statements:
            lines.extend(self._statement(stmt, level, params))
        return lines

    def _statement(self, stmt: Statement, level: int, params: tuple[str, ...]) -> list[str]:
        ind = INDENT * level
        if isinstance(stmt, IfStatement):
            return self._if(stmt, level, params)
        if isinstance(stmt, ForStatement):
            header = (
                f"for ({self._inline(stmt.init, params)}; "
                f"{self._expr(stmt.condition, params)}; "
                f"{self._inline(stmt.update, params)}) {{"
            )
            return [ind + header, *self._block(stmt.statements, level + 1, params), f"{ind}}}"]
        return [f"{ind}{self._inline(stmt, params)};"]

    def _if(self, stmt: IfStatement, level: int, params: tuple[str, ...]) -> list[str]:
        ind = INDENT * level
        lines = [f"{ind}if ({self._expr(stmt.condition, params)}) {{"]
        lines.extend(self._block(stmt.then_statements, level + 1, params))
        else_stmts = stmt.else_statements
        if else_stmts is None:
            lines.append(f"{ind}}}")
        elif len(else_stmts) == 1 and isinstance(else_stmts[0], IfStatement):
            nested = self._if(else_stmts[0], level, params)
            lines.append(f"{ind}}} else {nested[0].lstrip()}")
            lines.extend(nested[1:])
        else:
            lines.append(f"{ind}}} else {{")
            lines.extend(self._block(else_stmts, level + 1, params))
            lines.append(f"{ind}}}")
        return lines

    def _inline(self, stmt: Statement, params: tuple[str, ...]) -> str:
        """Single-line form of a statement, without the trailing ';'."""
        if isinstance(stmt, Assignment):
            target = stmt.name if stmt.name in params else f"this.{stmt.name}"
            return f"{target} = {self._expr(stmt.value, params)}"
        if isinstance(stmt, ExpressionStatement):
            return self._expr(stmt.value, params)
        if isinstance(stmt, ReturnStatement):
            if stmt.value is None:
                return "return"
            return f"return {self._expr(stmt.value, params)}"
        if isinstance(stmt, BreakStatement):
            return "break"
        if isinstance(stmt, (IfStatement, ForStatement)):
            return " ".join(line.strip() for line in self._statement(stmt, 0, params))
        raise TypeError(f"Unknown statement node: {type(stmt).__name__}")

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------

    def _is_direct_callable(self, name: str) -> bool:
        return (
            name in self.capabilities
            or name in MATH_FUNCTIONS
            or name in MATH_CONSTANTS
            or name in BUILTIN_FUNCTIONS
        )

    def _expr(self, expr: Expr, params: tuple[str, ...]) -> str:
        if isinstance(expr, Literal):
            return format_literal(expr.value)
        if isinstance(expr, Identifier):
            if expr.name in MATH_CONSTANTS or expr.name in params:
                return expr.name
            return f"this.{expr.name}"
        if isinstance(expr, Binary):
            return f"({self._expr(expr.left, params)} {expr.operator} {self._expr(expr.right, params)})"
        if isinstance(expr, Unary):
            return f"({expr.operator}{self._expr(expr.operand, params)})"
        if isinstance(expr, Call):
            args = ", ".join(self._expr(a, params) for a in expr.arguments)
            callee = expr.callee
            if isinstance(callee, Identifier) and (
                self._is_direct_callable(callee.name) or callee.name in params
            ):
                return f"{callee.name}({args})"
            return f"{self._expr(callee, params)}({args})"
        if isinstance(expr, Member):
            obj = self._expr(expr.object, params)
            if expr.computed:
                return f"{obj}[{self._expr(expr.property, params)}]"
            prop = expr.property.name if isinstance(expr.property, Identifier) else self._expr(expr.property, params)
            return f"{obj}.{prop}"
        if isinstance(expr, ArrayLiteral):
            return "[" + ", ".join(self._expr(item, params) for item in expr.items) + "]"
        if isinstance(expr, ObjectLiteral):
            entries = ", ".join(
                f"{key if _JS_IDENTIFIER.fullmatch(key) else json.dumps(key)}: {self._expr(value, params)}"
                for key, value in expr.entries
            )
            return "{" + entries + "}"
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def generate(ast: ScriptAst, capabilities: CapabilityTable) -> str:
    """Convenience function: emit JavaScript for `ast`."""
    return CodeGenerator(ast, capabilities).generate()
