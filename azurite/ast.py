"""Syntax tree of an Azurite program."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from azurite.tokens import Span


@dataclass(frozen=True, slots=True)
class Ident:
    """A name together with where it appears."""

    name: str
    span: Span


class BinOp(Enum):
    """Binary operators; the value is the operator's spelling."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQ = "=="
    NEQ = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    AND = "and"
    OR = "or"
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    SHL = "<<"
    SHR = ">>"
    ASSIGN = "="
    IS = "is"

    def __str__(self) -> str:
        return self.value


class UnOp(Enum):
    """Unary operators."""

    NEG = "-"
    NOT = "not"


# --- Types ---


@dataclass(frozen=True, slots=True)
class NameType:
    name: str


@dataclass(frozen=True, slots=True)
class GenericType:
    name: str
    params: list[Type] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PtrType:
    inner: Type


@dataclass(frozen=True, slots=True)
class ArrayType:
    element: Type
    size: int | None = None


@dataclass(frozen=True, slots=True)
class TupleType:
    types: list[Type] = field(default_factory=list)


Type = NameType | GenericType | PtrType | ArrayType | TupleType


@dataclass(frozen=True, slots=True)
class Param:
    name: Ident
    type_annotation: Type | None = None
    vararg: bool = False
    default_value: Expr | None = None


@dataclass(frozen=True, slots=True)
class ClassField:
    name: Ident
    type_: Type


@dataclass(frozen=True, slots=True)
class EnumVariantDecl:
    name: Ident
    types: list[Type] = field(default_factory=list)


# --- Patterns ---


@dataclass(frozen=True, slots=True)
class WildcardPattern:
    pass


@dataclass(frozen=True, slots=True)
class IntPattern:
    value: int


@dataclass(frozen=True, slots=True)
class BoolPattern:
    value: bool


@dataclass(frozen=True, slots=True)
class StringPattern:
    value: str


@dataclass(frozen=True, slots=True)
class IdentPattern:
    name: str


@dataclass(frozen=True, slots=True)
class EnumVariantPattern:
    enum_name: str | None
    variant: str
    bindings: list[str] = field(default_factory=list)


Pattern = (
    WildcardPattern
    | IntPattern
    | BoolPattern
    | StringPattern
    | IdentPattern
    | EnumVariantPattern
)


@dataclass(frozen=True, slots=True)
class MatchArm:
    pattern: Pattern
    body: Expr


# --- Expressions ---


@dataclass(frozen=True, slots=True)
class IntLit:
    value: int


@dataclass(frozen=True, slots=True)
class FloatLit:
    value: float


@dataclass(frozen=True, slots=True)
class StringLit:
    value: str


@dataclass(frozen=True, slots=True)
class CharLit:
    value: str


@dataclass(frozen=True, slots=True)
class BoolLit:
    value: bool


@dataclass(frozen=True, slots=True)
class NullLit:
    pass


@dataclass(frozen=True, slots=True)
class IdentExpr:
    ident: Ident


@dataclass(frozen=True, slots=True)
class SelfExpr:
    pass


@dataclass(frozen=True, slots=True)
class SuperExpr:
    pass


@dataclass(frozen=True, slots=True)
class Binary:
    left: Expr
    op: BinOp
    right: Expr


@dataclass(frozen=True, slots=True)
class Unary:
    op: UnOp
    operand: Expr


@dataclass(frozen=True, slots=True)
class Call:
    callee: Expr
    args: list[Expr] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class MethodCall:
    obj: Expr
    method: str
    args: list[Expr] = field(default_factory=list)
    null_safe: bool = False


@dataclass(frozen=True, slots=True)
class FieldAccess:
    obj: Expr
    field: str
    null_safe: bool = False


@dataclass(frozen=True, slots=True)
class EnumVariantExpr:
    enum_name: str
    variant: str
    args: list[Expr] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ArrayExpr:
    elements: list[Expr] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Index:
    obj: Expr
    index: Expr


@dataclass(frozen=True, slots=True)
class Slice:
    obj: Expr
    start: Expr
    end: Expr
    end_is_len: bool = False  # the end was omitted: slice runs to the end


@dataclass(frozen=True, slots=True)
class MatchExpr:
    value: Expr
    arms: list[MatchArm] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RangeExpr:
    start: Expr
    end: Expr


@dataclass(frozen=True, slots=True)
class Block:
    statements: list[Stmt] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class IfExpr:
    condition: Expr
    then_branch: Expr
    else_branch: Expr | None = None


@dataclass(frozen=True, slots=True)
class WhileExpr:
    condition: Expr
    body: Expr


@dataclass(frozen=True, slots=True)
class TupleExpr:
    elements: list[Expr] = field(default_factory=list)


Expr = (
    IntLit
    | FloatLit
    | StringLit
    | CharLit
    | BoolLit
    | NullLit
    | IdentExpr
    | SelfExpr
    | SuperExpr
    | Binary
    | Unary
    | Call
    | MethodCall
    | FieldAccess
    | EnumVariantExpr
    | ArrayExpr
    | Index
    | Slice
    | MatchExpr
    | RangeExpr
    | Block
    | IfExpr
    | WhileExpr
    | TupleExpr
)


# --- Statements ---


@dataclass(frozen=True, slots=True)
class LetStmt:
    name: Ident
    type_annotation: Type | None
    value: Expr


@dataclass(frozen=True, slots=True)
class FuncStmt:
    name: Ident
    params: list[Param]
    return_type: Type | None
    body: Expr


@dataclass(frozen=True, slots=True)
class ClassStmt:
    name: Ident
    type_params: list[str] = field(default_factory=list)
    parent: Type | None = None
    fields: list[ClassField] = field(default_factory=list)
    methods: list[Stmt] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class EnumStmt:
    name: Ident
    variants: list[EnumVariantDecl] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class IfStmt:
    condition: Expr
    then_branch: Expr
    else_branch: Expr | None = None


@dataclass(frozen=True, slots=True)
class WhileStmt:
    condition: Expr
    body: Expr


@dataclass(frozen=True, slots=True)
class ForStmt:
    name: Ident
    iterable: Expr
    body: Expr


@dataclass(frozen=True, slots=True)
class ReturnStmt:
    value: Expr | None = None


@dataclass(frozen=True, slots=True)
class BreakStmt:
    pass


@dataclass(frozen=True, slots=True)
class ContinueStmt:
    pass


@dataclass(frozen=True, slots=True)
class ImportStmt:
    path: str
    span: Span


@dataclass(frozen=True, slots=True)
class ExprStmt:
    expr: Expr


@dataclass(frozen=True, slots=True)
class DestructureStmt:
    names: list[Ident]
    value: Expr


@dataclass(frozen=True, slots=True)
class TryStmt:
    try_block: Expr
    catch_var: Ident
    catch_block: Expr


@dataclass(frozen=True, slots=True)
class ThrowStmt:
    value: Expr


Stmt = (
    LetStmt
    | FuncStmt
    | ClassStmt
    | EnumStmt
    | IfStmt
    | WhileStmt
    | ForStmt
    | ReturnStmt
    | BreakStmt
    | ContinueStmt
    | ImportStmt
    | ExprStmt
    | DestructureStmt
    | TryStmt
    | ThrowStmt
)


@dataclass(frozen=True, slots=True)
class Program:
    statements: list[Stmt] = field(default_factory=list)


_NO_SPAN = Span(0, 0, 0, 0)


def _first_span(nodes: list) -> Span:
    return node_span(nodes[0]) if nodes else _NO_SPAN


def node_span(node: Expr | Stmt) -> Span:
    """Best-known source span of an expression or statement; zero when unknown."""
    match node:
        case IdentExpr(ident=ident):
            return ident.span
        case Binary(left=inner) | Unary(operand=inner) | Call(callee=inner):
            return node_span(inner)
        case MethodCall(obj=inner) | FieldAccess(obj=inner) | Index(obj=inner) | Slice(obj=inner):
            return node_span(inner)
        case Block(statements=items):
            return _first_span(items)
        case IfExpr(condition=inner) | WhileExpr(condition=inner):
            return node_span(inner)
        case IfStmt(condition=inner) | WhileStmt(condition=inner):
            return node_span(inner)
        case MatchExpr(value=inner) | RangeExpr(start=inner):
            return node_span(inner)
        case EnumVariantExpr(args=items) | ArrayExpr(elements=items) | TupleExpr(elements=items):
            return _first_span(items)
        case LetStmt(name=name) | FuncStmt(name=name) | ClassStmt(name=name):
            return name.span
        case EnumStmt(name=name) | ForStmt(name=name):
            return name.span
        case ReturnStmt(value=value):
            return node_span(value) if value is not None else _NO_SPAN
        case ImportStmt(span=span):
            return span
        case ExprStmt(expr=inner):
            return node_span(inner)
        case DestructureStmt(value=inner) | ThrowStmt(value=inner):
            return node_span(inner)
        case TryStmt(try_block=inner):
            return node_span(inner)
        case _:
            return _NO_SPAN