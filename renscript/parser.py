"""RenScript Parser — recursive-descent parser with precedence climbing.

Parses a token stream into a single ScriptAst. The first structural mismatch
aborts the parse; there is no error recovery.

File layout:
  props [section] { name: type { key: value ... } ... }   (zero or more)
  script Name { ... }  |  mesh|camera|light|scene|transform Name { ... }

Script body items, in any order:
  props [section] { ... }
  name = expr                       variable
  name(a, b) { ... }                user function
  start|update|destroy|once [(params)] { ... }
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from renscript.lexer import Token, TokenType, KEYWORDS, tokenize
from renscript.ast_nodes import (
    ScriptAst, VariableDeclaration, MethodDeclaration, FunctionDeclaration,
    PropertyDeclaration,
    Statement, Assignment, ExpressionStatement, IfStatement, ForStatement,
    ReturnStatement, BreakStatement,
    Expr, Literal, Identifier, Binary, Unary, Call, Member, ArrayLiteral,
    ObjectLiteral,
)
from renscript.errors import (
    SourceLocation, CompileError,
    invalid_syntax, duplicate_property, duplicate_function,
    missing_script_declaration,
)

logger = logging.getLogger(__name__)

LIFECYCLE_TOKENS = (TokenType.START, TokenType.UPDATE, TokenType.DESTROY, TokenType.ONCE)

# Tokens accepted as a member name after '.', e.g. `obj.update` or `api.scene`.
_MEMBER_NAME_TOKENS = (TokenType.IDENT, TokenType.OBJECT_TYPE, *KEYWORDS.values())


class Parser:
    """Recursive-descent parser for RenScript."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF

    def _peek(self) -> TokenType:
        return self._current().type

    def _peek_next(self) -> Optional[TokenType]:
        if self.pos + 1 < len(self.tokens):
            return self.tokens[self.pos + 1].type
        return None

    def _loc(self) -> SourceLocation:
        return self._current().location

    def _is_at_end(self) -> bool:
        return self._peek() == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _check(self, tt: TokenType) -> bool:
        return self._peek() == tt

    def _match(self, tt: TokenType) -> Optional[Token]:
        if self._peek() == tt:
            return self._advance()
        return None

    def _expect(self, tt: TokenType, message: str) -> Token:
        tok = self._current()
        if tok.type != tt:
            raise CompileError(invalid_syntax(f"{message}, got {tok.describe()}", tok.location))
        return self._advance()

    def _expect_ident(self, message: str) -> str:
        return self._expect(TokenType.IDENT, message).value

    # -------------------------------------------------------------------
    # Top-level
    # -------------------------------------------------------------------

    def parse(self) -> ScriptAst:
        property_names: set[str] = set()
        external: list[PropertyDeclaration] = []

        while self._check(TokenType.PROPS):
            external.extend(self._parse_props_block(property_names))

        script = self._parse_script(property_names)

        if not self._is_at_end():
            tok = self._current()
            raise CompileError(invalid_syntax(
                f"Unexpected {tok.describe()} after script block", tok.location,
            ))

        if external:
            script = replace(script, properties=script.properties + tuple(external))
        logger.debug(
            "Parsed script '%s': %d variables, %d methods, %d properties, %d functions",
            script.name, len(script.variables), len(script.methods),
            len(script.properties), len(script.functions),
        )
        return script

    def _parse_script(self, property_names: set[str]) -> ScriptAst:
        loc = self._loc()
        object_type = "script"
        if self._match(TokenType.SCRIPT):
            name = self._expect_ident("Expected script name")
        elif self._check(TokenType.OBJECT_TYPE):
            object_type = self._advance().value
            name = self._expect_ident("Expected object name")
        else:
            raise CompileError(missing_script_declaration())

        self._expect(TokenType.LBRACE, "Expected '{' after script name")

        variables: list[VariableDeclaration] = []
        methods: list[MethodDeclaration] = []
        properties: list[PropertyDeclaration] = []
        functions: list[FunctionDeclaration] = []
        function_names: set[str] = set()

        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            tt = self._peek()
            if tt == TokenType.PROPS:
                properties.extend(self._parse_props_block(property_names))
            elif tt == TokenType.IDENT:
                next_tt = self._peek_next()
                if next_tt == TokenType.ASSIGN:
                    variables.append(self._parse_variable_declaration())
                    self._match(TokenType.SEMICOLON)
                elif next_tt == TokenType.LPAREN:
                    functions.append(self._parse_function_declaration(function_names))
                else:
                    tok = self._current()
                    raise CompileError(invalid_syntax(
                        f"Unexpected identifier '{tok.value}'", tok.location,
                    ))
            elif tt in LIFECYCLE_TOKENS:
                methods.append(self._parse_method_declaration())
            else:
                tok = self._current()
                raise CompileError(invalid_syntax(f"Unexpected token {tok.describe()}", tok.location))

        self._expect(TokenType.RBRACE, "Expected '}' to close script block")

        return ScriptAst(
            name=name,
            object_type=object_type,
            variables=tuple(variables),
            methods=tuple(methods),
            properties=tuple(properties),
            functions=tuple(functions),
            location=loc,
        )

    def _parse_variable_declaration(self) -> VariableDeclaration:
        loc = self._loc()
        name = self._expect_ident("Expected variable name")
        self._expect(TokenType.ASSIGN, "Expected '='")
        value = self._parse_expression()
        return VariableDeclaration(name=name, value=value, location=loc)

    def _parse_parameters(self) -> tuple[str, ...]:
        """Parameter names up to ')'; the opening '(' is already consumed."""
        params: list[str] = []
        while not self._check(TokenType.RPAREN) and not self._is_at_end():
            params.append(self._expect_ident("Expected parameter name"))
            self._match(TokenType.COMMA)
        self._expect(TokenType.RPAREN, "Expected ')' after parameters")
        return tuple(params)

    def _parse_method_declaration(self) -> MethodDeclaration:
        tok = self._advance()
        params: tuple[str, ...] = ()
        if self._match(TokenType.LPAREN):
            params = self._parse_parameters()
        statements = self._parse_block()
        return MethodDeclaration(
            method_type=tok.value, parameters=params, statements=statements, location=tok.location,
        )

    def _parse_function_declaration(self, function_names: set[str]) -> FunctionDeclaration:
        loc = self._loc()
        name = self._expect_ident("Expected function name")
        if name in function_names:
            raise CompileError(duplicate_function(name, loc))
        function_names.add(name)
        self._expect(TokenType.LPAREN, "Expected '('")
        params = self._parse_parameters()
        statements = self._parse_block()
        return FunctionDeclaration(name=name, parameters=params, statements=statements, location=loc)

    # -------------------------------------------------------------------
    # props
    # -------------------------------------------------------------------

    def _parse_props_block(self, property_names: set[str]) -> list[PropertyDeclaration]:
        self._expect(TokenType.PROPS, "Expected 'props'")
        section = "default"
        if not self._check(TokenType.LBRACE):
            section = self._expect_ident("Expected props section name")
        self._expect(TokenType.LBRACE, "Expected '{' after props")

        properties: list[PropertyDeclaration] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            loc = self._loc()
            name = self._expect_ident("Expected property name")
            if name in property_names:
                raise CompileError(duplicate_property(name, loc))
            property_names.add(name)
            properties.append(self._parse_property_declaration(name, section, loc))

        self._expect(TokenType.RBRACE, "Expected '}' to close props block")
        return properties

    def _parse_property_key(self) -> str:
        if self._check(TokenType.DEFAULT) or self._check(TokenType.ONCE):
            return self._advance().value
        return self._expect_ident("Expected property key")

    def _parse_property_declaration(
        self, name: str, section: str, loc: SourceLocation,
    ) -> PropertyDeclaration:
        self._expect(TokenType.COLON, "Expected ':' after property name")
        prop_type = self._expect_ident("Expected property type")
        self._expect(TokenType.LBRACE, "Expected '{' after property type")

        fields: dict = {}
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            key = self._parse_property_key()
            self._expect(TokenType.COLON, f"Expected ':' after '{key}'")
            value = self._parse_expression()

            if key in ("default", "min", "max"):
                fields["default_value" if key == "default" else key] = value
            elif key == "description":
                if isinstance(value, Literal) and isinstance(value.value, str):
                    fields["description"] = value.value
            elif key == "once":
                if isinstance(value, Literal) and isinstance(value.value, bool):
                    fields["once"] = value.value
            elif key == "options":
                if isinstance(value, ArrayLiteral) and all(
                    isinstance(item, Literal) and isinstance(item.value, str) for item in value.items
                ):
                    fields["options"] = tuple(item.value for item in value.items)
            # Unknown keys: value already consumed, dropped.

            self._match(TokenType.COMMA)

        self._expect(TokenType.RBRACE, "Expected '}' to close property")
        return PropertyDeclaration(name=name, prop_type=prop_type, section=section, location=loc, **fields)

    # -------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------

    def _parse_block(self) -> tuple[Statement, ...]:
        self._expect(TokenType.LBRACE, "Expected '{'")
        statements: list[Statement] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            if self._match(TokenType.SEMICOLON):
                continue
            statements.append(self._parse_statement())
            self._match(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "Expected '}'")
        return tuple(statements)

    def _parse_statement(self) -> Statement:
        tt = self._peek()
        if tt == TokenType.IF:
            return self._parse_if()
        if tt == TokenType.FOR:
            return self._parse_for()
        if tt == TokenType.RETURN:
            return self._parse_return()
        if tt == TokenType.BREAK:
            return BreakStatement(location=self._advance().location)
        if tt == TokenType.IDENT:
            next_tt = self._peek_next()
            if next_tt == TokenType.ASSIGN:
                loc = self._loc()
                name = self._advance().value
                self._advance()  # '='
                return Assignment(name=name, value=self._parse_expression(), location=loc)
            if next_tt == TokenType.PLUS_PLUS:
                return self._parse_increment()
        loc = self._loc()
        return ExpressionStatement(value=self._parse_expression(), location=loc)

    def _parse_increment(self) -> Assignment:
        """`name++` is sugar for `name = name + 1`."""
        tok = self._advance()
        self._expect(TokenType.PLUS_PLUS, "Expected '++'")
        value = Binary(
            left=Identifier(name=tok.value, location=tok.location),
            operator="+",
            right=Literal(value=1.0, location=tok.location),
            location=tok.location,
        )
        return Assignment(name=tok.value, value=value, location=tok.location)

    def _parse_if(self) -> IfStatement:
        loc = self._loc()
        self._expect(TokenType.IF, "Expected 'if'")
        self._expect(TokenType.LPAREN, "Expected '(' after 'if'")
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "Expected ')' after if condition")
        then_statements = self._parse_block()

        else_statements: Optional[tuple[Statement, ...]] = None
        if self._match(TokenType.ELSE):
            if self._check(TokenType.IF):
                else_statements = (self._parse_if(),)
            else:
                else_statements = self._parse_block()
        return IfStatement(
            condition=condition,
            then_statements=then_statements,
            else_statements=else_statements,
            location=loc,
        )

    def _parse_for(self) -> ForStatement:
        loc = self._loc()
        self._expect(TokenType.FOR, "Expected 'for'")
        self._expect(TokenType.LPAREN, "Expected '(' after 'for'")
        init = self._parse_statement()
        self._expect(TokenType.SEMICOLON, "Expected ';' after for initializer")
        condition = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "Expected ';' after for condition")
        update = self._parse_statement()
        self._expect(TokenType.RPAREN, "Expected ')' after for clauses")
        statements = self._parse_block()
        return ForStatement(init=init, condition=condition, update=update, statements=statements, location=loc)

    def _parse_return(self) -> ReturnStatement:
        loc = self._advance().location
        if self._peek() in (TokenType.RBRACE, TokenType.SEMICOLON, TokenType.EOF):
            return ReturnStatement(location=loc)
        return ReturnStatement(value=self._parse_expression(), location=loc)

    # -------------------------------------------------------------------
    # Expressions (precedence climbing, lowest first)
    # -------------------------------------------------------------------

    def _parse_expression(self) -> Expr:
        return self._parse_or()

    def _parse_binary_level(self, operators: tuple[TokenType, ...], operand) -> Expr:
        left = operand()
        while self._peek() in operators:
            tok = self._advance()
            right = operand()
            left = Binary(left=left, operator=tok.value, right=right, location=tok.location)
        return left

    def _parse_or(self) -> Expr:
        return self._parse_binary_level((TokenType.OR,), self._parse_and)

    def _parse_and(self) -> Expr:
        return self._parse_binary_level((TokenType.AND,), self._parse_equality)

    def _parse_equality(self) -> Expr:
        return self._parse_binary_level((TokenType.EQ, TokenType.NEQ), self._parse_comparison)

    def _parse_comparison(self) -> Expr:
        return self._parse_binary_level(
            (TokenType.LT, TokenType.LTE, TokenType.GT, TokenType.GTE), self._parse_additive,
        )

    def _parse_additive(self) -> Expr:
        return self._parse_binary_level((TokenType.PLUS, TokenType.MINUS), self._parse_multiplicative)

    def _parse_multiplicative(self) -> Expr:
        return self._parse_binary_level((TokenType.STAR, TokenType.SLASH), self._parse_unary)

    def _parse_unary(self) -> Expr:
        if self._peek() in (TokenType.NOT, TokenType.MINUS):
            tok = self._advance()
            operand = self._parse_unary()
            return Unary(operator=tok.value, operand=operand, location=tok.location)
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        expr = self._parse_primary()
        while True:
            if self._check(TokenType.LPAREN):
                loc = self._advance().location
                args: list[Expr] = []
                while not self._check(TokenType.RPAREN) and not self._is_at_end():
                    args.append(self._parse_expression())
                    self._match(TokenType.COMMA)
                self._expect(TokenType.RPAREN, "Expected ')' after arguments")
                expr = Call(callee=expr, arguments=tuple(args), location=expr.location or loc)
            elif self._check(TokenType.DOT):
                self._advance()
                tok = self._current()
                if tok.type not in _MEMBER_NAME_TOKENS:
                    raise CompileError(invalid_syntax(
                        f"Expected property name after '.', got {tok.describe()}", tok.location,
                    ))
                self._advance()
                expr = Member(
                    object=expr,
                    property=Identifier(name=tok.value, location=tok.location),
                    computed=False,
                    location=expr.location,
                )
            elif self._check(TokenType.LBRACKET):
                self._advance()
                index = self._parse_expression()
                self._expect(TokenType.RBRACKET, "Expected ']'")
                expr = Member(object=expr, property=index, computed=True, location=expr.location)
            else:
                break
        return expr

    def _parse_primary(self) -> Expr:
        tok = self._current()
        tt = tok.type

        if tt in (TokenType.NUMBER, TokenType.STRING, TokenType.BOOLEAN, TokenType.NULL):
            self._advance()
            return Literal(value=tok.value, location=tok.location)

        if tt == TokenType.IDENT:
            self._advance()
            return Identifier(name=tok.value, location=tok.location)

        if tt == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')'")
            return expr

        if tt == TokenType.LBRACKET:
            self._advance()
            items: list[Expr] = []
            while not self._check(TokenType.RBRACKET) and not self._is_at_end():
                items.append(self._parse_expression())
                self._match(TokenType.COMMA)
            self._expect(TokenType.RBRACKET, "Expected ']' to close array")
            return ArrayLiteral(items=tuple(items), location=tok.location)

        if tt == TokenType.LBRACE:
            return self._parse_object_literal()

        raise CompileError(invalid_syntax(f"Unexpected token {tok.describe()}", tok.location))

    def _parse_object_literal(self) -> ObjectLiteral:
        loc = self._expect(TokenType.LBRACE, "Expected '{'").location
        entries: list[tuple[str, Expr]] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            key_tok = self._current()
            if key_tok.type not in (TokenType.IDENT, TokenType.STRING):
                raise CompileError(invalid_syntax(
                    f"Expected property name in object literal, got {key_tok.describe()}",
                    key_tok.location,
                ))
            self._advance()
            self._expect(TokenType.COLON, "Expected ':' after object property name")
            entries.append((key_tok.value, self._parse_expression()))

            if not self._match(TokenType.COMMA) and not self._check(TokenType.RBRACE):
                tok = self._current()
                raise CompileError(invalid_syntax(
                    f"Expected ',' or '}}' in object literal, got {tok.describe()}", tok.location,
                ))
        self._expect(TokenType.RBRACE, "Expected '}' to close object literal")
        return ObjectLiteral(entries=tuple(entries), location=loc)


def parse(source: str, filename: str = "<source>") -> ScriptAst:
    """Convenience function: tokenize and parse RenScript source."""
    tokens = tokenize(source, filename)
    return Parser(tokens).parse()
