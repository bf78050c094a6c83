"""Source spans, token kinds and tokens produced by the lexer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


@dataclass(frozen=True, slots=True)
class Span:
    """A region of source text with the line and column where it starts."""

    start: int
    end: int
    line: int
    column: int


class TokenKind(Enum):
    """Every kind of token; the value is the text the kind displays as."""

    # Keywords
    LET = "let"
    FUNC = "func"
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    FOR = "for"
    MATCH = "match"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"
    IMPORT = "import"
    STRUCT = "struct"
    ENUM = "enum"
    CLASS = "class"
    SELF = "self"
    SUPER = "super"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    AND = "and"
    OR = "or"
    NOT = "not"
    LOOP = "loop"
    IS = "is"
    TRY = "try"
    CATCH = "catch"
    THROW = "throw"
    SWITCH = "switch"

    # Literals and identifiers; the token carries the value
    INT = "int literal"
    FLOAT = "float literal"
    STRING = "string literal"
    CHAR = "char literal"
    IDENT = "identifier"

    # Operators
    PLUS = "+"
    PLUS_PLUS = "++"
    MINUS = "-"
    MINUS_MINUS = "--"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    PLUS_ASSIGN = "+="
    MINUS_ASSIGN = "-="
    STAR_ASSIGN = "*="
    SLASH_ASSIGN = "/="
    PERCENT_ASSIGN = "%="
    ASSIGN = "="
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    AND_AND = "&&"
    OR_OR = "||"
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    BIT_AND_ASSIGN = "&="
    BIT_OR_ASSIGN = "|="
    BIT_XOR_ASSIGN = "^="
    SHL = "<<"
    SHR = ">>"
    SHL_ASSIGN = "<<="
    SHR_ASSIGN = ">>="

    # Delimiters
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    DOT = "."
    ARROW = "->"
    FAT_ARROW = "=>"
    DOT_DOT = ".."
    HASH = "#"
    QUESTION = "?"
    QUESTION_DOT = "?."

    # Special
    EOF = "EOF"
    ERROR = "error"

    @property
    def carries_value(self) -> bool:
        """Whether tokens of this kind hold a literal, a name or a message."""
        return self in _VALUE_KINDS

    def __str__(self) -> str:
        return self.value


_VALUE_KINDS = frozenset(
    {
        TokenKind.INT,
        TokenKind.FLOAT,
        TokenKind.STRING,
        TokenKind.CHAR,
        TokenKind.IDENT,
        TokenKind.ERROR,
    }
)

KEYWORDS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in (
        TokenKind.LET,
        TokenKind.FUNC,
        TokenKind.IF,
        TokenKind.ELSE,
        TokenKind.WHILE,
        TokenKind.FOR,
        TokenKind.MATCH,
        TokenKind.RETURN,
        TokenKind.BREAK,
        TokenKind.CONTINUE,
        TokenKind.IMPORT,
        TokenKind.STRUCT,
        TokenKind.ENUM,
        TokenKind.CLASS,
        TokenKind.SELF,
        TokenKind.SUPER,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NULL,
        TokenKind.AND,
        TokenKind.OR,
        TokenKind.NOT,
        TokenKind.LOOP,
        TokenKind.IS,
        TokenKind.TRY,
        TokenKind.CATCH,
        TokenKind.THROW,
        TokenKind.SWITCH,
    )
}


def _format_float(value: float) -> str:
    """Render a float in plain decimal notation, integral values without a fraction."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return format(Decimal(repr(value)), "f")


@dataclass(frozen=True, slots=True)
class Token:
    """A token: its kind, where it sits, and the value literal kinds carry."""

    kind: TokenKind
    span: Span
    value: int | float | str | None = None

    def __str__(self) -> str:
        match self.kind:
            case TokenKind.INT:
                return str(self.value)
            case TokenKind.FLOAT:
                return _format_float(float(self.value))
            case TokenKind.STRING:
                return f'"{self.value}"'
            case TokenKind.CHAR:
                return f"'{self.value}'"
            case TokenKind.IDENT:
                return str(self.value)
            case TokenKind.ERROR:
                return f"error: {self.value}"
            case _:
                return self.kind.value