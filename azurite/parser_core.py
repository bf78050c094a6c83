"""Parser state, operator precedence, and expression, type and pattern parsing."""

from __future__ import annotations

from collections.abc import Callable

from azurite.ast import (
    ArrayExpr,
    ArrayType,
    Binary,
    BinOp,
    Block,
    BoolLit,
    BoolPattern,
    Call,
    CharLit,
    EnumVariantPattern,
    Expr,
    ExprStmt,
    FieldAccess,
    FloatLit,
    GenericType,
    Ident,
    IdentExpr,
    IdentPattern,
    IfExpr,
    Index,
    IntLit,
    IntPattern,
    MatchArm,
    MatchExpr,
    MethodCall,
    NameType,
    NullLit,
    Pattern,
    RangeExpr,
    SelfExpr,
    Slice,
    Stmt,
    StringLit,
    StringPattern,
    SuperExpr,
    TupleExpr,
    TupleType,
    Type,
    Unary,
    UnOp,
    WhileExpr,
    WildcardPattern,
)
from azurite.tokens import Span, Token, TokenKind

_NO_SPAN = Span(0, 0, 0, 0)

_PREFIX_BP: dict[UnOp, int] = {
    UnOp.NEG: 9,
    UnOp.NOT: 9,
}

_INFIX_BP: dict[BinOp, tuple[int, int]] = {
    BinOp.ASSIGN: (1, 2),
    BinOp.OR: (3, 4),
    BinOp.AND: (5, 6),
    BinOp.EQ: (7, 8),
    BinOp.NEQ: (7, 8),
    BinOp.IS: (7, 8),
    BinOp.LT: (9, 10),
    BinOp.GT: (9, 10),
    BinOp.LE: (9, 10),
    BinOp.GE: (9, 10),
    BinOp.BIT_OR: (11, 12),
    BinOp.BIT_XOR: (13, 14),
    BinOp.BIT_AND: (15, 16),
    BinOp.SHL: (17, 18),
    BinOp.SHR: (17, 18),
    BinOp.ADD: (19, 20),
    BinOp.SUB: (19, 20),
    BinOp.MUL: (21, 22),
    BinOp.DIV: (21, 22),
    BinOp.MOD: (21, 22),
}

_COMPOUND_OPS: dict[TokenKind, BinOp] = {
    TokenKind.PLUS_ASSIGN: BinOp.ADD,
    TokenKind.MINUS_ASSIGN: BinOp.SUB,
    TokenKind.STAR_ASSIGN: BinOp.MUL,
    TokenKind.SLASH_ASSIGN: BinOp.DIV,
    TokenKind.PERCENT_ASSIGN: BinOp.MOD,
    TokenKind.BIT_AND_ASSIGN: BinOp.BIT_AND,
    TokenKind.BIT_OR_ASSIGN: BinOp.BIT_OR,
    TokenKind.BIT_XOR_ASSIGN: BinOp.BIT_XOR,
    TokenKind.SHL_ASSIGN: BinOp.SHL,
    TokenKind.SHR_ASSIGN: BinOp.SHR,
}

_BINOPS: dict[TokenKind, BinOp] = {
    TokenKind.PLUS: BinOp.ADD,
    TokenKind.MINUS: BinOp.SUB,
    TokenKind.STAR: BinOp.MUL,
    TokenKind.SLASH: BinOp.DIV,
    TokenKind.PERCENT: BinOp.MOD,
    TokenKind.ASSIGN: BinOp.ASSIGN,
    **{kind: BinOp.ASSIGN for kind in _COMPOUND_OPS},
    TokenKind.EQUAL: BinOp.EQ,
    TokenKind.NOT_EQUAL: BinOp.NEQ,
    TokenKind.LESS: BinOp.LT,
    TokenKind.GREATER: BinOp.GT,
    TokenKind.LESS_EQUAL: BinOp.LE,
    TokenKind.GREATER_EQUAL: BinOp.GE,
    TokenKind.AND_AND: BinOp.AND,
    TokenKind.AND: BinOp.AND,
    TokenKind.OR_OR: BinOp.OR,
    TokenKind.OR: BinOp.OR,
    TokenKind.BIT_AND: BinOp.BIT_AND,
    TokenKind.BIT_OR: BinOp.BIT_OR,
    TokenKind.BIT_XOR: BinOp.BIT_XOR,
    TokenKind.SHL: BinOp.SHL,
    TokenKind.SHR: BinOp.SHR,
    TokenKind.IS: BinOp.IS,
}

_COMPARISONS = frozenset({BinOp.EQ, BinOp.NEQ, BinOp.LT, BinOp.GT, BinOp.LE, BinOp.GE})


def prefix_binding_power(op: UnOp) -> int:
    """Right binding power of a prefix operator."""
    return _PREFIX_BP[op]


def infix_binding_power(op: BinOp) -> tuple[int, int]:
    """Left and right binding power of an infix operator."""
    return _INFIX_BP[op]


def is_binop(kind: TokenKind | None) -> bool:
    """Whether a token kind starts an infix operation."""
    return kind in _BINOPS


def is_comparison(op: BinOp) -> bool:
    return op in _COMPARISONS


def token_to_binop(kind: TokenKind | None) -> BinOp | None:
    """The operator a token stands for; compound assignments map to ASSIGN."""
    return _BINOPS.get(kind)


def token_to_compound_binop(kind: TokenKind | None) -> BinOp | None:
    """The arithmetic operator hidden inside a compound assignment token."""
    return _COMPOUND_OPS.get(kind)


class ParseError(ValueError):
    """Raised when the tokens do not form a valid program."""

    def __init__(self, message: str, span: Span) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        return self.message


class ExpressionParser:
    """Cursor over a token list that parses expressions, types and patterns."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = list(tokens)
        self.pos = 0

    # --- cursor ---

    def error(self, message: str) -> ParseError:
        return ParseError(message, self.current_span())

    def peek(self) -> Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def peek_kind(self) -> TokenKind | None:
        token = self.peek()
        return token.kind if token is not None else None

    def current_span(self) -> Span:
        token = self.peek()
        return token.span if token is not None else _NO_SPAN

    def advance(self) -> None:
        self.pos += 1

    def is_eof(self) -> bool:
        return self.peek_kind() in (TokenKind.EOF, None)

    def _found(self) -> str:
        token = self.peek()
        return str(token) if token is not None else "EOF"

    def expect(self, expected: TokenKind, message: str) -> None:
        """Consume a token of the expected kind or raise ParseError."""
        if self.peek_kind() is expected:
            self.advance()
            return
        raise self.error(f"{message}: expected {expected}, found {self._found()}")

    def expect_semicolon(self) -> None:
        """Consume a semicolon if one is next; semicolons are optional."""
        if self.peek_kind() is TokenKind.SEMICOLON:
            self.advance()

    def parse_ident(self) -> Ident:
        token = self.peek()
        if token is not None and token.kind is TokenKind.IDENT:
            self.advance()
            return Ident(str(token.value), token.span)
        raise self.error(f"expected identifier, found {self._found()}")

    def parse_ident_or_self(self) -> Ident:
        token = self.peek()
        if token is not None and token.kind is TokenKind.SELF:
            self.advance()
            return Ident("self", token.span)
        return self.parse_ident()

    # --- statements inside blocks ---

    def parse_stmt(self) -> Stmt:
        """Parse an expression statement; subclasses add the other statements."""
        expr = self.parse_expr(0)
        self.expect_semicolon()
        return ExprStmt(expr)

    # --- expressions ---

    def parse_expr(self, min_bp: int = 0) -> Expr:
        """Parse an expression whose operators bind at least as tightly as min_bp."""
        lhs = self._parse_prefix()
        while True:
            kind = self.peek_kind()
            match kind:
                case TokenKind.LPAREN:
                    self.advance()
                    args = self._parse_items(TokenKind.RPAREN)
                    self.expect(TokenKind.RPAREN, "')'")
                    lhs = Call(lhs, args)
                case TokenKind.LBRACKET:
                    self.advance()
                    lhs = self._parse_index_or_slice(lhs)
                case TokenKind.DOT | TokenKind.QUESTION_DOT:
                    null_safe = kind is TokenKind.QUESTION_DOT
                    self.advance()
                    token = self.peek()
                    if token is None or token.kind is not TokenKind.IDENT:
                        raise self.error("expected field name after '.'")
                    self.advance()
                    name = str(token.value)
                    if self.peek_kind() is TokenKind.LPAREN:
                        self.advance()
                        args = self._parse_items(TokenKind.RPAREN)
                        self.expect(TokenKind.RPAREN, "')'")
                        lhs = MethodCall(lhs, name, args, null_safe)
                    else:
                        lhs = FieldAccess(lhs, name, null_safe)
                case TokenKind.DOT_DOT:
                    self.advance()
                    lhs = RangeExpr(lhs, self.parse_expr(9))
                case TokenKind.QUESTION:
                    if 2 < min_bp:
                        break
                    self.advance()
                    then_branch = self.parse_expr(0)
                    self.expect(TokenKind.COLON, "expected ':' in ternary expression")
                    else_branch = self.parse_expr(2)
                    lhs = IfExpr(lhs, then_branch, else_branch)
                case _ if is_binop(kind):
                    op = _BINOPS[kind]
                    l_bp, r_bp = infix_binding_power(op)
                    if l_bp < min_bp:
                        break
                    self.advance()
                    rhs = self.parse_expr(r_bp)
                    compound = token_to_compound_binop(kind)
                    if compound is not None:
                        lhs = Binary(lhs, BinOp.ASSIGN, Binary(lhs, compound, rhs))
                        continue
                    if is_comparison(op):
                        next_op = token_to_binop(self.peek_kind())
                        if next_op is not None and is_comparison(next_op):
                            self.advance()
                            rhs2 = self.parse_expr(r_bp)
                            lhs = Binary(
                                Binary(lhs, op, rhs),
                                BinOp.AND,
                                Binary(rhs, next_op, rhs2),
                            )
                            continue
                    lhs = Binary(lhs, op, rhs)
                case _:
                    break
        return lhs

    def _parse_prefix(self) -> Expr:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input")
        simple: dict[TokenKind, Callable[[], Expr]] = {
            TokenKind.INT: lambda: IntLit(token.value),
            TokenKind.FLOAT: lambda: FloatLit(token.value),
            TokenKind.STRING: lambda: StringLit(token.value),
            TokenKind.CHAR: lambda: CharLit(token.value),
            TokenKind.TRUE: lambda: BoolLit(True),
            TokenKind.FALSE: lambda: BoolLit(False),
            TokenKind.NULL: NullLit,
            TokenKind.SELF: SelfExpr,
            TokenKind.SUPER: SuperExpr,
            TokenKind.IDENT: lambda: IdentExpr(Ident(str(token.value), token.span)),
        }
        kind = token.kind
        if kind in simple:
            self.advance()
            return simple[kind]()
        match kind:
            case TokenKind.LPAREN:
                self.advance()
                first = self.parse_expr(0)
                if self.peek_kind() is not TokenKind.COMMA:
                    self.expect(TokenKind.RPAREN, "')'")
                    return first
                elements = [first]
                while self.peek_kind() is TokenKind.COMMA:
                    self.advance()
                    if self.peek_kind() is TokenKind.RPAREN:
                        break
                    elements.append(self.parse_expr(0))
                self.expect(TokenKind.RPAREN, "')'")
                return TupleExpr(elements)
            case TokenKind.LBRACE:
                return self.parse_block()
            case TokenKind.LBRACKET:
                self.advance()
                elements = self._parse_items(TokenKind.RBRACKET)
                self.expect(TokenKind.RBRACKET, "']'")
                return ArrayExpr(elements)
            case TokenKind.IF:
                return self.parse_if()
            case TokenKind.WHILE:
                return self.parse_while()
            case TokenKind.MATCH | TokenKind.SWITCH:
                return self._parse_match()
            case TokenKind.MINUS | TokenKind.NOT:
                op = UnOp.NEG if kind is TokenKind.MINUS else UnOp.NOT
                self.advance()
                return Unary(op, self.parse_expr(prefix_binding_power(op)))
            case TokenKind.PLUS_PLUS | TokenKind.MINUS_MINUS:
                self.advance()
                operand = self.parse_expr(9)
                op = BinOp.ADD if kind is TokenKind.PLUS_PLUS else BinOp.SUB
                return Binary(operand, BinOp.ASSIGN, Binary(operand, op, IntLit(1)))
            case _:
                raise self.error(f"unexpected token: {token}")

    def _parse_index_or_slice(self, obj: Expr) -> Expr:
        if self.peek_kind() is TokenKind.COLON:
            self.advance()
            end = self.parse_expr(0)
            self.expect(TokenKind.RBRACKET, "']'")
            return Slice(obj, IntLit(0), end, False)
        inner = self.parse_expr(0)
        if self.peek_kind() is not TokenKind.COLON:
            self.expect(TokenKind.RBRACKET, "']'")
            return Index(obj, inner)
        self.advance()
        if self.peek_kind() is TokenKind.RBRACKET:
            self.advance()
            return Slice(obj, inner, IntLit(0), True)
        end = self.parse_expr(0)
        self.expect(TokenKind.RBRACKET, "']'")
        return Slice(obj, inner, end, False)

    def _parse_items(self, closer: TokenKind) -> list[Expr]:
        """Comma-separated expressions up to (not including) the closer."""
        items: list[Expr] = []
        while (kind := self.peek_kind()) not in (closer, None):
            if kind is TokenKind.COMMA:
                self.advance()
            else:
                items.append(self.parse_expr(0))
        return items

    def parse_block(self) -> Block:
        self.expect(TokenKind.LBRACE, "'{'")
        statements: list[Stmt] = []
        while self.peek_kind() not in (TokenKind.RBRACE, None):
            statements.append(self.parse_stmt())
        self.expect(TokenKind.RBRACE, "'}'")
        return Block(statements)

    def parse_if(self) -> IfExpr:
        self.advance()
        condition = self.parse_expr(0)
        then_branch = self.parse_block()
        else_branch: Expr | None = None
        if self.peek_kind() is TokenKind.ELSE:
            self.advance()
            if self.peek_kind() is TokenKind.IF:
                else_branch = self.parse_if()
            else:
                else_branch = self.parse_block()
        return IfExpr(condition, then_branch, else_branch)

    def parse_while(self) -> WhileExpr:
        self.advance()
        condition = self.parse_expr(0)
        return WhileExpr(condition, self.parse_block())

    def _parse_match(self) -> MatchExpr:
        self.advance()
        value = self.parse_expr(0)
        self.expect(TokenKind.LBRACE, "'{'")
        arms: list[MatchArm] = []
        while self.peek_kind() not in (TokenKind.RBRACE, None):
            pattern = self.parse_pattern()
            self.expect(TokenKind.FAT_ARROW, "'=>'")
            arms.append(MatchArm(pattern, self.parse_expr(0)))
            if self.peek_kind() in (TokenKind.COMMA, TokenKind.SEMICOLON):
                self.advance()
        self.expect(TokenKind.RBRACE, "'}'")
        return MatchExpr(value, arms)

    # --- types ---

    def parse_type(self) -> Type:
        token = self.peek()
        kind = token.kind if token is not None else None
        if kind is TokenKind.IDENT:
            name = str(token.value)
            self.advance()
            if self.peek_kind() is TokenKind.LESS:
                self.advance()
                params: list[Type] = []
                while (k := self.peek_kind()) not in (TokenKind.GREATER, None):
                    if k is TokenKind.COMMA:
                        self.advance()
                    else:
                        params.append(self.parse_type())
                self.expect(TokenKind.GREATER, "'>'")
                return GenericType(name, params)
            if self.peek_kind() is TokenKind.LBRACKET:
                self.advance()
                self.expect(TokenKind.RBRACKET, "']'")
                return ArrayType(NameType(name), None)
            return NameType(name)
        if kind is TokenKind.LPAREN:
            self.advance()
            types: list[Type] = []
            while (k := self.peek_kind()) not in (TokenKind.RPAREN, None):
                if k is TokenKind.COMMA:
                    self.advance()
                else:
                    types.append(self.parse_type())
            self.expect(TokenKind.RPAREN, "')'")
            return TupleType(types)
        raise self.error(f"expected type, found {self._found()}")

    # --- patterns ---

    def _parse_variant_name(self) -> str:
        token = self.peek()
        if token is None or token.kind is not TokenKind.IDENT:
            raise self.error("expected variant name")
        self.advance()
        return str(token.value)

    def parse_pattern(self) -> Pattern:
        token = self.peek()
        kind = token.kind if token is not None else None
        match kind:
            case TokenKind.INT:
                self.advance()
                return IntPattern(token.value)
            case TokenKind.TRUE | TokenKind.FALSE:
                self.advance()
                return BoolPattern(kind is TokenKind.TRUE)
            case TokenKind.STRING:
                self.advance()
                return StringPattern(token.value)
            case TokenKind.IDENT:
                name = str(token.value)
                self.advance()
                if name == "_":
                    return WildcardPattern()
                if self.peek_kind() is not TokenKind.DOT:
                    return IdentPattern(name)
                self.advance()
                variant = self._parse_variant_name()
                bindings: list[str] = []
                if self.peek_kind() is TokenKind.LPAREN:
                    self.advance()
                    while (k := self.peek_kind()) not in (TokenKind.RPAREN, None):
                        binding = self.peek()
                        if k is TokenKind.COMMA:
                            self.advance()
                        elif k is TokenKind.IDENT:
                            self.advance()
                            bindings.append(str(binding.value))
                        elif k is TokenKind.SELF:
                            self.advance()
                            bindings.append("self")
                        else:
                            raise self.error("expected identifier in pattern")
                    self.expect(TokenKind.RPAREN, "')'")
                return EnumVariantPattern(name, variant, bindings)
            case TokenKind.SELF:
                self.advance()
                if self.peek_kind() is not TokenKind.DOT:
                    return IdentPattern("self")
                self.advance()
                return EnumVariantPattern("self", self._parse_variant_name(), [])
            case _:
                raise self.error("expected pattern")