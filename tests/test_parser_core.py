import pytest

from azurite.ast import (
    ArrayType,
    Binary,
    BinOp,
    Block,
    BoolLit,
    Call,
    CharLit,
    EnumVariantPattern,
    ExprStmt,
    FieldAccess,
    FloatLit,
    GenericType,
    IdentExpr,
    IfExpr,
    Index,
    IntLit,
    IntPattern,
    MatchExpr,
    MethodCall,
    NameType,
    NullLit,
    RangeExpr,
    Slice,
    StringLit,
    TupleExpr,
    TupleType,
    Unary,
    UnOp,
    WildcardPattern,
)
from azurite.lexer import tokenize
from azurite.parser_core import (
    ExpressionParser,
    ParseError,
    infix_binding_power,
    is_binop,
    is_comparison,
    prefix_binding_power,
    token_to_binop,
    token_to_compound_binop,
)
from azurite.tokens import TokenKind


def expr(src):
    return ExpressionParser(tokenize(src)).parse_expr(0)


def test_identifier():
    e = expr("myVar")
    assert isinstance(e, IdentExpr)
    assert e.ident.name == "myVar"


@pytest.mark.parametrize(
    "src, op",
    [
        ("1 + 2", BinOp.ADD),
        ("10 - 3", BinOp.SUB),
        ("4 * 5", BinOp.MUL),
        ("10 / 2", BinOp.DIV),
        ("10 % 3", BinOp.MOD),
        ("a == b", BinOp.EQ),
        ("a != b", BinOp.NEQ),
        ("a < b", BinOp.LT),
        ("a > b", BinOp.GT),
        ("a <= b", BinOp.LE),
        ("a >= b", BinOp.GE),
        ("a && b", BinOp.AND),
        ("a || b", BinOp.OR),
        ("a and b", BinOp.AND),
        ("x = 42", BinOp.ASSIGN),
    ],
)
def test_binary_ops(src, op):
    e = expr(src)
    assert isinstance(e, Binary)
    assert e.op is op


def test_unary_neg():
    assert expr("-42") == Unary(UnOp.NEG, IntLit(42))


def test_unary_not():
    assert expr("not true") == Unary(UnOp.NOT, BoolLit(True))


def test_decrement_parse():
    e = expr("--x")
    assert e.op is BinOp.ASSIGN
    assert isinstance(e.left, IdentExpr)
    assert isinstance(e.right, Binary)
    assert e.right.op is BinOp.SUB
    assert e.right.right == IntLit(1)


def test_compound_assign_desugar():
    e = expr("x += 2")
    assert e.op is BinOp.ASSIGN
    assert e.right.op is BinOp.ADD
    assert e.right.left == e.left
    assert e.right.right == IntLit(2)


def test_call_no_args():
    e = expr("foo()")
    assert isinstance(e, Call)
    assert e.args == []


def test_call_one_arg():
    e = expr("print(42)")
    assert e.args == [IntLit(42)]


def test_call_multi_args():
    assert len(expr("add(1, 2, 3)").args) == 3


def test_call_in_expr():
    e = expr("1 + foo(2)")
    assert e.op is BinOp.ADD
    assert e.left == IntLit(1)
    assert e.right.callee.ident.name == "foo"
    assert e.right.args == [IntLit(2)]


def test_nested_calls():
    e = expr("foo(bar(baz()))")
    assert e.callee.ident.name == "foo"
    assert isinstance(e.args[0], Call)


def test_nested_binary():
    e = expr("a + b * c - d / e")
    assert e.op is BinOp.SUB
    assert e.right.op is BinOp.DIV


@pytest.mark.parametrize(
    "src, expected",
    [
        ("42", IntLit(42)),
        ("3.14", FloatLit(3.14)),
        ('"hello"', StringLit("hello")),
        ("'x'", CharLit("x")),
        ("true", BoolLit(True)),
        ("false", BoolLit(False)),
        ("null", NullLit()),
    ],
)
def test_literals(src, expected):
    assert expr(src) == expected


def test_complex_condition():
    assert expr("x > 0 and x < 10 or x == 42").op is BinOp.OR


def test_precedence_mul_over_add():
    assert expr("1 + 2 * 3") == Binary(IntLit(1), BinOp.ADD, Binary(IntLit(2), BinOp.MUL, IntLit(3)))


def test_precedence_parens():
    assert expr("(1 + 2) * 3") == Binary(Binary(IntLit(1), BinOp.ADD, IntLit(2)), BinOp.MUL, IntLit(3))


def test_precedence_comparison_over_and():
    e = expr("a < b && c > d")
    assert e.op is BinOp.AND
    assert e.left.op is BinOp.LT
    assert e.right.op is BinOp.GT


def test_precedence_assign():
    e = expr("x = a + b")
    assert e.op is BinOp.ASSIGN
    assert isinstance(e.left, IdentExpr)
    assert e.right.op is BinOp.ADD


def test_precedence_multiple_add():
    assert expr("1 + 2 + 3") == Binary(Binary(IntLit(1), BinOp.ADD, IntLit(2)), BinOp.ADD, IntLit(3))


def test_comparison_chain_desugars_to_and():
    e = expr("a < b < c")
    assert e.op is BinOp.AND
    assert e.left.op is BinOp.LT
    assert e.right.op is BinOp.LT
    assert e.left.right == e.right.left


def test_ternary():
    e = expr("c ? 1 : 2")
    assert isinstance(e, IfExpr)
    assert e.then_branch == IntLit(1)
    assert e.else_branch == IntLit(2)


def test_slices_and_index():
    full = expr("a[1:4]")
    assert isinstance(full, Slice)
    assert (full.start, full.end, full.end_is_len) == (IntLit(1), IntLit(4), False)
    open_end = expr("a[2:]")
    assert (open_end.start, open_end.end, open_end.end_is_len) == (IntLit(2), IntLit(0), True)
    open_start = expr("a[:3]")
    assert (open_start.start, open_start.end) == (IntLit(0), IntLit(3))
    assert isinstance(expr("m[i][j]"), Index)


def test_tuple_and_parens():
    assert expr("(1, 2)") == TupleExpr([IntLit(1), IntLit(2)])
    assert expr("(1)") == IntLit(1)


def test_field_and_method_access():
    field = expr("a?.b")
    assert isinstance(field, FieldAccess)
    assert (field.field, field.null_safe) == ("b", True)
    method = expr("a.b(1)")
    assert isinstance(method, MethodCall)
    assert (method.method, method.args, method.null_safe) == ("b", [IntLit(1)], False)


def test_range():
    assert expr("0..10") == RangeExpr(IntLit(0), IntLit(10))


def test_match_arms():
    e = expr("match x { 1 => 2 _ => 0 }")
    assert isinstance(e, MatchExpr)
    assert [arm.pattern for arm in e.arms] == [IntPattern(1), WildcardPattern()]
    assert [arm.body for arm in e.arms] == [IntLit(2), IntLit(0)]


def test_enum_variant_pattern():
    p = ExpressionParser(tokenize("Option.Some(v)")).parse_pattern()
    assert p == EnumVariantPattern("Option", "Some", ["v"])


def test_block_of_expressions():
    assert expr("{ 1 2 }") == Block([ExprStmt(IntLit(1)), ExprStmt(IntLit(2))])


def test_if_else():
    e = expr("if a { 1 } else { 2 }")
    assert e.then_branch == Block([ExprStmt(IntLit(1))])
    assert e.else_branch == Block([ExprStmt(IntLit(2))])


def test_parse_types():
    assert ExpressionParser(tokenize("int[]")).parse_type() == ArrayType(NameType("int"), None)
    assert ExpressionParser(tokenize("(int, string)")).parse_type() == TupleType(
        [NameType("int"), NameType("string")]
    )
    nested = ExpressionParser(tokenize("Box< Pair<int, string> >")).parse_type()
    assert nested == GenericType("Box", [GenericType("Pair", [NameType("int"), NameType("string")])])


def test_bad_type_message():
    with pytest.raises(ParseError, match="expected type, found ="):
        ExpressionParser(tokenize("= 1")).parse_type()


def test_expect_message():
    with pytest.raises(ParseError) as info:
        ExpressionParser(tokenize("]")).expect(TokenKind.RPAREN, "')'")
    assert str(info.value) == "')': expected ), found ]"


@pytest.mark.parametrize("src", ["let 42 = 1", "foo(", "{ let x = 1 ", "()", "func 123() {}", "1 +"])
def test_parse_errors(src):
    with pytest.raises(ParseError):
        expr(src)


def test_binding_power_helpers():
    assert infix_binding_power(BinOp.MUL) == (21, 22)
    assert infix_binding_power(BinOp.ASSIGN) == (1, 2)
    assert prefix_binding_power(UnOp.NEG) == 9
    assert token_to_compound_binop(TokenKind.SHL_ASSIGN) is BinOp.SHL
    assert token_to_binop(TokenKind.PLUS_ASSIGN) is BinOp.ASSIGN
    assert token_to_binop(TokenKind.DOT) is None
    assert is_binop(TokenKind.IS) is True
    assert is_binop(TokenKind.DOT) is False
    assert is_comparison(BinOp.GE) is True
    assert is_comparison(BinOp.ADD) is False