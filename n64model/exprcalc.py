"""Command-line calculator for expressions with assignments."""

from __future__ import annotations

import sys
from collections.abc import MutableMapping, Sequence
from typing import TextIO

from .expr import ExprEvalError, ExprParseError, parse, parse_ident


def _format_number(value: float) -> str:
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def run_expression(env: MutableMapping[str, float], arg: str, out: TextIO, err: TextIO) -> bool:
    """Evaluate "expr" or "name=expr", printing the result.

    Returns True on success; assignments store the value in env.
    """
    ident = ""
    name, eq, rest = arg.partition("=")
    if eq:
        try:
            ident = parse_ident(name)
        except ExprParseError as ex:
            print(f"Error: bad assignment: {ex}", file=err)
            return False
        arg = rest
    try:
        expr = parse(arg)
    except ExprParseError as ex:
        print(f"Error: bad expression: {ex}", file=err)
        return False
    print(f"Expression: {expr.to_string()}", file=out)
    try:
        value = expr.eval(env)
    except ExprEvalError as ex:
        print(f"Error: could not evaluate: {ex}", file=err)
        return False
    print(f"Result: {_format_number(value)}", file=out)
    if ident:
        env[ident] = value
    return True


def main(argv: Sequence[str] | None = None) -> int:
    """Evaluate each argument in turn; return 0 if all succeeded, else 1."""
    if argv is None:
        argv = sys.argv[1:]
    env: dict[str, float] = {}
    ok = True
    for arg in argv:
        if not run_expression(env, arg, sys.stdout, sys.stderr):
            ok = False
    return 0 if ok else 1