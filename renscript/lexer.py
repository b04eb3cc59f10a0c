"""RenScript Lexer — Tokenizer with line/column tracking.

Produces a flat stream of tokens from RenScript source. Whitespace and
comments (`#` or `//` to end of line) are skipped; every other character
either starts a token or is a lexical error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from renscript.errors import (
    SourceLocation, CompileError,
    unexpected_character, unterminated_string, invalid_number, invalid_escape,
)


class TokenType(Enum):
    # Literals
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()

    # Identifier
    IDENT = auto()

    # Keywords
    SCRIPT = auto()
    PROPS = auto()
    START = auto()
    UPDATE = auto()
    DESTROY = auto()
    ONCE = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    RETURN = auto()
    BREAK = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()
    OBJECT_TYPE = auto()  # mesh, camera, light, scene, transform

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    PLUS_PLUS = auto()

    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    DOT = auto()
    SEMICOLON = auto()
    COLON = auto()
    QUESTION = auto()

    # Special
    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "script": TokenType.SCRIPT,
    "props": TokenType.PROPS,
    "start": TokenType.START,
    "update": TokenType.UPDATE,
    "destroy": TokenType.DESTROY,
    "once": TokenType.ONCE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "return": TokenType.RETURN,
    "break": TokenType.BREAK,
    "switch": TokenType.SWITCH,
    "case": TokenType.CASE,
    "default": TokenType.DEFAULT,
}

OBJECT_TYPES = ("mesh", "camera", "light", "scene", "transform")

# Two-character operators, matched with one character of lookahead.
DOUBLE_OPERATORS: dict[str, TokenType] = {
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "!=": TokenType.NEQ,
    "==": TokenType.EQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "++": TokenType.PLUS_PLUS,
}

SINGLE_OPERATORS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    "?": TokenType.QUESTION,
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "!": TokenType.NOT,
    # A lone '&' or '|' is accepted as its logical operator.
    "&": TokenType.AND,
    "|": TokenType.OR,
}

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


def _is_digit(ch: str) -> bool:
    # ASCII 0-9 only.
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch)


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any
    location: SourceLocation

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def describe(self) -> str:
        """Short human-readable form used in syntax error messages."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.STRING:
            return f"string {self.value!r}"
        if self.type == TokenType.NUMBER:
            return f"number {self.value:g}"
        if self.type in (TokenType.IDENT, TokenType.OBJECT_TYPE):
            return f"'{self.value}'"
        if self.type == TokenType.BOOLEAN:
            return "'true'" if self.value else "'false'"
        if self.type == TokenType.NULL:
            return "'null'"
        return f"'{self.value}'"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.location})"


class Lexer:
    """Tokenizer for RenScript source code."""

    def __init__(self, source: str, filename: str = "<source>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _peek_ahead(self, offset: int = 1) -> Optional[str]:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace_and_comments(self) -> None:
        while not self._at_end():
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == "#" or (ch == "/" and self._peek_ahead() == "/"):
                while not self._at_end() and self.source[self.pos] != "\n":
                    self._advance()
            else:
                break

    def _read_string(self) -> Token:
        loc = self._loc()
        quote = self._advance()
        chars: list[str] = []
        while not self._at_end():
            ch = self._peek()
            if ch == quote:
                self._advance()
                return Token(TokenType.STRING, "".join(chars), loc)
            if ch == "\\":
                self._advance()
                if self._at_end():
                    break
                escape_loc = self._loc()
                esc = self._advance()
                if esc not in ESCAPES:
                    raise CompileError(invalid_escape(f"\\{esc}", escape_loc))
                chars.append(ESCAPES[esc])
            else:
                chars.append(self._advance())
        raise CompileError(unterminated_string(loc))

    def _read_number(self) -> Token:
        loc = self._loc()
        text = ""
        has_dot = False
        while not self._at_end():
            ch = self.source[self.pos]
            if _is_digit(ch):
                text += self._advance()
            elif ch == "." and not has_dot:
                has_dot = True
                text += self._advance()
            else:
                break
        try:
            value = float(text)
        except ValueError:
            raise CompileError(invalid_number(text, loc)) from None
        return Token(TokenType.NUMBER, value, loc)

    def _read_identifier(self) -> Token:
        loc = self._loc()
        start = self.pos
        while not self._at_end() and _is_ident_char(self.source[self.pos]):
            self._advance()
        word = self.source[start:self.pos]

        if word in KEYWORDS:
            return Token(KEYWORDS[word], word, loc)
        if word in ("true", "false"):
            return Token(TokenType.BOOLEAN, word == "true", loc)
        if word == "null":
            return Token(TokenType.NULL, None, loc)
        if word in OBJECT_TYPES:
            return Token(TokenType.OBJECT_TYPE, word, loc)
        return Token(TokenType.IDENT, word, loc)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while not self._at_end():
            self._skip_whitespace_and_comments()
            if self._at_end():
                break

            ch = self.source[self.pos]
            loc = self._loc()

            if ch in ('"', "'"):
                tokens.append(self._read_string())
            elif _is_digit(ch):
                tokens.append(self._read_number())
            elif _is_ident_start(ch):
                tokens.append(self._read_identifier())
            elif (ch + (self._peek_ahead() or "")) in DOUBLE_OPERATORS:
                op = self._advance() + self._advance()
                tokens.append(Token(DOUBLE_OPERATORS[op], op, loc))
            elif ch in SINGLE_OPERATORS:
                self._advance()
                tt = SINGLE_OPERATORS[ch]
                text = {TokenType.AND: "&&", TokenType.OR: "||"}.get(tt, ch)
                tokens.append(Token(tt, text, loc))
            else:
                raise CompileError(unexpected_character(ch, loc))

        tokens.append(Token(TokenType.EOF, "", self._loc()))
        return tokens


def tokenize(source: str, filename: str = "<source>") -> list[Token]:
    """Convenience function to tokenize RenScript source code."""
    return Lexer(source, filename).tokenize()
