"""Turns Azurite source text into a list of tokens."""

from __future__ import annotations

from collections.abc import Iterator

from azurite.tokens import KEYWORDS, Span, Token, TokenKind

_DIGITS = "0123456789"
_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_INT_MAX = 2**63 - 1

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "0": "\0",
}

# Operators whose span ends where the token ends and whose line and column
# report the position just after the token.
_COMPOUND: dict[str, tuple[tuple[str, TokenKind], ...]] = {
    "+": (("+", TokenKind.PLUS_PLUS), ("=", TokenKind.PLUS_ASSIGN)),
    "-": (
        ("-", TokenKind.MINUS_MINUS),
        ("=", TokenKind.MINUS_ASSIGN),
        (">", TokenKind.ARROW),
    ),
    "*": (("=", TokenKind.STAR_ASSIGN),),
    "/": (("=", TokenKind.SLASH_ASSIGN),),
    "%": (("=", TokenKind.PERCENT_ASSIGN),),
    "^": (("=", TokenKind.BIT_XOR_ASSIGN),),
    "=": ((">", TokenKind.FAT_ARROW),),
    "&": (("=", TokenKind.BIT_AND_ASSIGN),),
    "|": (("=", TokenKind.BIT_OR_ASSIGN),),
    "<": (("<=", TokenKind.SHL_ASSIGN), ("<", TokenKind.SHL)),
    ">": ((">=", TokenKind.SHR_ASSIGN), (">", TokenKind.SHR)),
    ".": ((".", TokenKind.DOT_DOT),),
}

# Operators that are one character, or two when the given character follows.
_PAIRED: dict[str, tuple[str, TokenKind, TokenKind]] = {
    "=": ("=", TokenKind.ASSIGN, TokenKind.EQUAL),
    "!": ("=", TokenKind.NOT, TokenKind.NOT_EQUAL),
    "<": ("=", TokenKind.LESS, TokenKind.LESS_EQUAL),
    ">": ("=", TokenKind.GREATER, TokenKind.GREATER_EQUAL),
    "&": ("&", TokenKind.BIT_AND, TokenKind.AND_AND),
    "|": ("|", TokenKind.BIT_OR, TokenKind.OR_OR),
    "?": (".", TokenKind.QUESTION, TokenKind.QUESTION_DOT),
}

_SINGLE: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "^": TokenKind.BIT_XOR,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    ":": TokenKind.COLON,
    "#": TokenKind.HASH,
}


class LexError(ValueError):
    """Raised when the source cannot be split into tokens."""


def preprocess_interpolation(source: str) -> str:
    """Rewrite ``"a \\{x} b"`` as ``"a " + x + " b"``.

    The expressions inside ``\\{...}`` are expected to evaluate to strings.
    """
    out: list[str] = []
    n = len(source)
    i = 0
    while i < n:
        if source[i] != '"':
            out.append(source[i])
            i += 1
            continue
        out.append('"')
        i += 1
        prefix: list[str] = []
        while i < n:
            c = source[i]
            if c == "\\" and source.startswith("{", i + 1):
                out.extend(prefix)
                out.append('" + ')
                i += 2
                depth = 1
                while i < n and depth > 0:
                    if source[i] == "{":
                        depth += 1
                    elif source[i] == "}":
                        depth -= 1
                    if depth > 0:
                        out.append(source[i])
                    i += 1
                out.append(' + "')
                prefix.clear()
            elif c == '"':
                out.extend(prefix)
                out.append('"')
                i += 1
                break
            elif c == "\\":
                prefix.append(c)
                i += 1
                if i < n:
                    prefix.append(source[i])
                    i += 1
            else:
                prefix.append(c)
                i += 1
    return "".join(out)


class Lexer:
    """Scanner over one source text; string interpolation is expanded first."""

    def __init__(self, source: str) -> None:
        self._chars = preprocess_interpolation(source)
        self._pos = 0
        self._line = 1
        self._col = 1

    def tokenize(self) -> list[Token]:
        """Scan the remaining input; the list always ends with an EOF token."""
        return list(self._scan())

    def _scan(self) -> Iterator[Token]:
        while True:
            self._skip_whitespace_and_comments()
            if self._at_end():
                yield Token(TokenKind.EOF, self._current_span())
                return
            yield self._next_token()

    # --- dispatch ---

    def _next_token(self) -> Token:
        c = self._peek()
        if c in _DIGITS:
            return self._read_number()
        if c == '"':
            return self._read_string()
        if c == "'":
            return self._read_char()
        if c in _IDENT_START:
            return self._read_identifier_or_keyword()

        for suffix, kind in _COMPOUND.get(c, ()):
            if self._chars.startswith(c + suffix, self._pos):
                length = 1 + len(suffix)
                for _ in range(length):
                    self._bump()
                return Token(kind, self._prev_span(length))

        if c in _PAIRED:
            expected, single, double = _PAIRED[c]
            return self._two_char(expected, single, double)
        if c in _SINGLE:
            return self._two_char(None, _SINGLE[c], _SINGLE[c])

        span = self._current_span()
        self._bump()
        return Token(TokenKind.ERROR, span, f"unexpected character '{c}'")

    # --- literals ---

    def _read_number(self) -> Token:
        start, line, col = self._pos, self._line, self._col
        is_float = False
        while (c := self._peek()) is not None:
            if c in _DIGITS:
                self._bump()
            elif c == "." and not is_float and (nxt := self._peek_next()) is not None and nxt in _DIGITS:
                is_float = True
                self._bump()
            else:
                break
        text = self._chars[start:self._pos]
        span = Span(start, self._pos, line, col)
        if is_float:
            return Token(TokenKind.FLOAT, span, float(text))
        value = int(text)
        if value > _INT_MAX:
            raise LexError(f"invalid int literal: {text}")
        return Token(TokenKind.INT, span, value)

    def _read_string(self) -> Token:
        start, line, col = self._pos, self._line, self._col
        self._bump()

        if self._peek() == '"' and self._peek_next() == '"':
            self._bump()
            self._bump()
            value: list[str] = []
            while True:
                c = self._peek()
                if c is None:
                    raise LexError(f"unterminated docstring at line {line}, col {col}")
                if c == '"' and self._chars.startswith('"""', self._pos):
                    for _ in range(3):
                        self._bump()
                    return Token(TokenKind.STRING, Span(start, self._pos, line, col), "".join(value))
                value.append(c)
                self._bump()

        value = []
        while True:
            c = self._peek()
            if c is None:
                raise LexError(f"unterminated string literal at line {line}, col {col}")
            if c == '"':
                self._bump()
                return Token(TokenKind.STRING, Span(start, self._pos, line, col), "".join(value))
            self._bump()
            value.append(self._parse_escape() if c == "\\" else c)

    def _read_char(self) -> Token:
        start, line, col = self._pos, self._line, self._col
        self._bump()
        c = self._peek()
        if c is None:
            raise LexError("unterminated char literal")
        self._bump()
        if c == "\\":
            c = self._parse_escape()
        if self._peek() != "'":
            raise LexError(f"unterminated char literal at line {line}, col {col}")
        self._bump()
        return Token(TokenKind.CHAR, Span(start, self._pos, line, col), c)

    def _read_identifier_or_keyword(self) -> Token:
        start, line, col = self._pos, self._line, self._col
        while (c := self._peek()) is not None and (c.isalnum() or c == "_"):
            self._bump()
        word = self._chars[start:self._pos]
        span = Span(start, self._pos, line, col)
        keyword = KEYWORDS.get(word)
        if keyword is not None:
            return Token(keyword, span)
        return Token(TokenKind.IDENT, span, word)

    def _parse_escape(self) -> str:
        c = self._peek()
        if c is None:
            raise LexError("unterminated escape sequence")
        if c not in _ESCAPES:
            raise LexError(f"invalid escape char '\\{c}'")
        self._bump()
        return _ESCAPES[c]

    # --- helpers ---

    def _peek(self) -> str | None:
        return self._chars[self._pos] if self._pos < len(self._chars) else None

    def _peek_next(self) -> str | None:
        nxt = self._pos + 1
        return self._chars[nxt] if nxt < len(self._chars) else None

    def _bump(self) -> None:
        if self._pos >= len(self._chars):
            return
        c = self._chars[self._pos]
        self._pos += 1
        if c == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1

    def _at_end(self) -> bool:
        return self._pos >= len(self._chars)

    def _current_span(self) -> Span:
        return Span(self._pos, self._pos, self._line, self._col)

    def _prev_span(self, length: int) -> Span:
        return Span(self._pos - length, self._pos, self._line, self._col)

    def _two_char(self, expected: str | None, single: TokenKind, double: TokenKind) -> Token:
        start, line, col = self._pos, self._line, self._col
        kind = single
        if expected is not None and self._peek_next() == expected:
            self._bump()
            kind = double
        self._bump()
        return Token(kind, Span(start, self._pos, line, col))

    def _skip_whitespace_and_comments(self) -> None:
        while (c := self._peek()) is not None:
            if c.isspace():
                self._bump()
            elif c == "/" and self._peek_next() == "/":
                while (c := self._peek()) is not None and c != "\n":
                    self._bump()
            elif c == "/" and self._peek_next() == "*":
                self._bump()
                self._bump()
                while True:
                    c = self._peek()
                    if c is None:
                        return
                    if c == "*" and self._peek_next() == "/":
                        self._bump()
                        self._bump()
                        break
                    self._bump()
            else:
                break


def tokenize(source: str) -> list[Token]:
    """Tokenize a whole source text."""
    return Lexer(source).tokenize()