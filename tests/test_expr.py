import pytest

from n64model.expr import (
    BinExpr,
    BinOp,
    ExprEvalError,
    ExprParseError,
    Literal,
    UnExpr,
    UnOp,
    VarRef,
    parse,
    parse_ident,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1 + 2 * 3", 1 + 2 * 3),
        ("(1 + 2) * 3", (1 + 2) * 3),
        ("10 / 4", 10 / 4),
        ("-3 - -2", -3 - -2),
        ("1.5e2 + .5", 1.5e2 + 0.5),
        ("2E-1*5", 2e-1 * 5),
        ("8 - 3 - 2", 8 - 3 - 2),
        ("64 / 4 / 2", 64 / 4 / 2),
        ("+7", 7),
    ],
)
def test_eval_literals(text, expected):
    assert parse(text).eval({}) == expected


def test_eval_with_variables():
    env = {"meter": 64.0, "x": 0.5}
    assert parse("meter * x - meter / 8").eval(env) == 64.0 * 0.5 - 64.0 / 8


def test_left_associative_structure():
    expected = BinExpr(BinOp.SUB, BinExpr(BinOp.SUB, VarRef("a"), VarRef("b")), VarRef("c"))
    assert parse("a - b - c") == expected


def test_unary_binds_tighter_than_multiply():
    expected = BinExpr(BinOp.MUL, UnExpr(UnOp.NEG, VarRef("a")), VarRef("b"))
    assert parse("-a*b") == expected


def test_unary_plus_is_dropped():
    assert parse("+a") == VarRef("a")


def test_to_string_adds_needed_parentheses():
    assert parse("(a+b)*c").to_string() == "(a + b) * c"


def test_to_string_of_literal_uses_fixed_notation():
    assert Literal(1.0).to_string() == "1.000000"


@pytest.mark.parametrize("text", ["a - (b - c)", "a / (b * c)", "-(a + b)", "a * b + c"])
def test_to_string_preserves_canonical_text(text):
    assert parse(text).to_string() == text


@pytest.mark.parametrize(
    "text", ["1+2*3", "(1+2)*3", "a-(b-c)", "-(x*2)/y", "a/b/c", "a/(b/c)", "--a"]
)
def test_to_string_round_trip(text):
    expr = parse(text)
    assert parse(expr.to_string()) == expr


def test_append_wraps_for_higher_precedence():
    out = []
    parse("a + b").append(out, 1)
    assert "".join(out) == "(a + b)"


def test_str_matches_to_string():
    expr = parse("a*(b+c)")
    assert str(expr) == expr.to_string()


@pytest.mark.parametrize(
    "text,message",
    [
        ("1 +", "unexpected token: end"),
        ("", "unexpected token: end"),
        ("(1", "missing close ')'"),
        ("1 2", "unexpected token: number"),
        ("1 )", "unexpected token: )"),
        ("a $", "unexpected character: '$'"),
        ("\\", "unexpected character: <\\>"),
        ("'", "unexpected character: <'>"),
        ("é", "unexpected character: "),
        ("1.2.3", "invalid number: '1.2.3'"),
        (".", "invalid number: '.'"),
        ("1e+", "invalid number: '1e+'"),
        ("1e400", "number out of range: '1e400'"),
        ("1e-400", "number out of range: '1e-400'"),
        ("1e", "unexpected token: identifier"),
    ],
)
def test_parse_errors(text, message):
    with pytest.raises(ExprParseError) as info:
        parse(text)
    assert str(info.value) == message


def test_division_by_zero():
    with pytest.raises(ExprEvalError, match="division by zero"):
        parse("1 / (a - a)").eval({"a": 3.0})


def test_undefined_identifier():
    with pytest.raises(ExprEvalError) as info:
        parse("x + 1").eval({})
    assert str(info.value) == "undefined identifier 'x'"


def test_overflow():
    with pytest.raises(ExprEvalError, match="expression overflowed"):
        parse("1e300 * 1e300").eval({})


def test_negation_of_variable():
    assert parse("-x").eval({"x": 2.5}) == -2.5


@pytest.mark.parametrize("text", ["foo", "  foo\t", "_x1"])
def test_parse_ident(text):
    assert parse_ident(text) == text.strip()


@pytest.mark.parametrize(
    "text,message",
    [
        ("1", "expected identifier, got number"),
        ("", "expected identifier, got end"),
        ("a b", "unexpected token: identifier"),
        ("a+", "unexpected token: +"),
    ],
)
def test_parse_ident_errors(text, message):
    with pytest.raises(ExprParseError) as info:
        parse_ident(text)
    assert str(info.value) == message