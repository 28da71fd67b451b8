"""Arithmetic expressions over named variables."""

from __future__ import annotations

import enum
import math
import re
import sys
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass


class ExprParseError(ValueError):
    """An expression could not be parsed."""


class ExprEvalError(ValueError):
    """An expression could not be evaluated."""


_PREC_ADD = 0
_PREC_MUL = 1
_PREC_UNARY = 2


class Expr(ABC):
    """An expression node."""

    @abstractmethod
    def eval(self, env: Mapping[str, float]) -> float:
        """Evaluate the expression using the variables in env."""

    @abstractmethod
    def append(self, out: list[str], prec: int) -> None:
        """Append the text of the expression to out, parenthesized for prec."""

    def to_string(self) -> str:
        parts: list[str] = []
        self.append(parts, _PREC_ADD)
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class Literal(Expr):
    """A literal number."""

    value: float

    def eval(self, env: Mapping[str, float]) -> float:
        return self.value

    def append(self, out: list[str], prec: int) -> None:
        out.append(f"{self.value:f}")


@dataclass(frozen=True)
class VarRef(Expr):
    """A reference to a variable."""

    name: str

    def eval(self, env: Mapping[str, float]) -> float:
        try:
            return env[self.name]
        except KeyError:
            raise ExprEvalError(f"undefined identifier '{self.name}'") from None

    def append(self, out: list[str], prec: int) -> None:
        out.append(self.name)


class UnOp(enum.Enum):
    NEG = "-"


@dataclass(frozen=True)
class UnExpr(Expr):
    """A unary operator applied to an expression."""

    op: UnOp
    arg: Expr

    def eval(self, env: Mapping[str, float]) -> float:
        value = self.arg.eval(env)
        if self.op is UnOp.NEG:
            return -value
        raise ExprEvalError("invalid UnExpr")

    def append(self, out: list[str], prec: int) -> None:
        out.append(self.op.value)
        self.arg.append(out, _PREC_UNARY)


class BinOp(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        return _PREC_ADD if self in (BinOp.ADD, BinOp.SUB) else _PREC_MUL


@dataclass(frozen=True)
class BinExpr(Expr):
    """A binary operator applied to two expressions."""

    op: BinOp
    lhs: Expr
    rhs: Expr

    def eval(self, env: Mapping[str, float]) -> float:
        lhs = self.lhs.eval(env)
        rhs = self.rhs.eval(env)
        if self.op is BinOp.ADD:
            result = lhs + rhs
        elif self.op is BinOp.SUB:
            result = lhs - rhs
        elif self.op is BinOp.MUL:
            result = lhs * rhs
        elif self.op is BinOp.DIV:
            if rhs == 0.0:
                raise ExprEvalError("division by zero")
            result = lhs / rhs
        else:
            raise ExprEvalError("invalid BinExpr")
        if not math.isfinite(result):
            raise ExprEvalError("expression overflowed")
        return result

    def append(self, out: list[str], prec: int) -> None:
        op_prec = self.op.precedence
        wrap = prec > op_prec
        if wrap:
            out.append("(")
        self.lhs.append(out, op_prec)
        out.append(f" {self.op.value} ")
        self.rhs.append(out, op_prec + 1)
        if wrap:
            out.append(")")


class _Kind(enum.Enum):
    END = "end"
    NUMBER = "number"
    IDENT = "identifier"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    OPEN = "("
    CLOSE = ")"


_PUNCTUATION = {
    "+": _Kind.ADD,
    "-": _Kind.SUB,
    "*": _Kind.MUL,
    "/": _Kind.DIV,
    "(": _Kind.OPEN,
    ")": _Kind.CLOSE,
}
_SPACE = " \t\n\r"
_NUMBER_PATTERN = re.compile(r"[0-9.]+(?:[eE][-+0-9][0-9]*)?")
_IDENT_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FLOAT = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")


def _describe_char(char: str) -> str:
    if " " <= char <= "~":
        return f"<{char}>" if char in "\\'" else f"'{char}'"
    return ""


class _Lexer:
    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self.kind = _Kind.END
        self.lexeme = str()

    def next(self) -> None:
        source = self._source
        pos = self._pos
        while pos < len(source) and source[pos] in _SPACE:
            pos += 1
        if pos == len(source):
            self._pos = pos
            self.kind = _Kind.END
            self.lexeme = str()
            return
        char = source[pos]
        if char in _PUNCTUATION:
            kind, end = _PUNCTUATION[char], pos + 1
        elif (match := _NUMBER_PATTERN.match(source, pos)) is not None:
            kind, end = _Kind.NUMBER, match.end()
        elif (match := _IDENT_PATTERN.match(source, pos)) is not None:
            kind, end = _Kind.IDENT, match.end()
        else:
            raise ExprParseError(f"unexpected character: {_describe_char(char)}")
        self.kind = kind
        self.lexeme = source[pos:end]
        self._pos = end


def _parse_number(text: str) -> float:
    if _FLOAT.fullmatch(text) is None:
        raise ExprParseError(f"invalid number: '{text}'")
    value = float(text)
    mantissa = re.split("[eE]", text, maxsplit=1)[0]
    underflow = (value == 0.0 and mantissa.strip("0.") != "") or (
        value != 0.0 and abs(value) < sys.float_info.min
    )
    if math.isinf(value) or underflow:
        raise ExprParseError(f"number out of range: '{text}'")
    return value


def _parse_add(lexer: _Lexer) -> Expr:
    expr = _parse_mul(lexer)
    while lexer.kind in (_Kind.ADD, _Kind.SUB):
        op = BinOp.ADD if lexer.kind is _Kind.ADD else BinOp.SUB
        lexer.next()
        expr = BinExpr(op, expr, _parse_mul(lexer))
    return expr


def _parse_mul(lexer: _Lexer) -> Expr:
    expr = _parse_atom(lexer)
    while lexer.kind in (_Kind.MUL, _Kind.DIV):
        op = BinOp.MUL if lexer.kind is _Kind.MUL else BinOp.DIV
        lexer.next()
        expr = BinExpr(op, expr, _parse_atom(lexer))
    return expr


def _parse_atom(lexer: _Lexer) -> Expr:
    kind = lexer.kind
    if kind is _Kind.ADD:
        lexer.next()
        return _parse_atom(lexer)
    if kind is _Kind.SUB:
        lexer.next()
        return UnExpr(UnOp.NEG, _parse_atom(lexer))
    if kind is _Kind.OPEN:
        lexer.next()
        expr = _parse_add(lexer)
        if lexer.kind is not _Kind.CLOSE:
            raise ExprParseError("missing close ')'")
        lexer.next()
        return expr
    if kind is _Kind.NUMBER:
        text = lexer.lexeme
        lexer.next()
        return Literal(_parse_number(text))
    if kind is _Kind.IDENT:
        name = lexer.lexeme
        lexer.next()
        return VarRef(name)
    raise ExprParseError(f"unexpected token: {kind.value}")


def parse(text: str) -> Expr:
    """Parse an arithmetic expression."""
    lexer = _Lexer(text)
    lexer.next()
    expr = _parse_add(lexer)
    if lexer.kind is not _Kind.END:
        raise ExprParseError(f"unexpected token: {lexer.kind.value}")
    return expr


def parse_ident(text: str) -> str:
    """Parse text consisting of a single identifier, with optional spaces."""
    lexer = _Lexer(text)
    lexer.next()
    if lexer.kind is not _Kind.IDENT:
        raise ExprParseError(f"expected identifier, got {lexer.kind.value}")
    ident = lexer.lexeme
    lexer.next()
    if lexer.kind is not _Kind.END:
        raise ExprParseError(f"unexpected token: {lexer.kind.value}")
    return ident