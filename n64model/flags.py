"""Command-line flag parsing in the "-name=value" style."""

from __future__ import annotations

import enum
import math
import re
import struct
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .expr import Expr, ExprParseError, parse
from .quote import quote

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_FLT_MIN = 1.17549435082228750797e-38

_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*("
    r"[+-]?(?:"
    r"0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?[0-9]+)?"
    r"|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?"
    r"|inf(?:inity)?"
    r"|nan(?:\([0-9a-z_]*\))?"
    r"))",
    re.IGNORECASE,
)

_BOOL_VALUES = {
    "false": False,
    "true": True,
    "no": False,
    "yes": True,
    "off": False,
    "on": True,
    "0": False,
    "1": True,
}


class UsageError(ValueError):
    """The command line is invalid."""


class FlagArgument(enum.Enum):
    """Whether a flag takes a parameter."""

    NONE = enum.auto()
    OPTIONAL = enum.auto()
    REQUIRED = enum.auto()


class Flag(ABC):
    """A command-line flag holding the value it was given in `value`."""

    value: Any

    @abstractmethod
    def argument(self) -> FlagArgument:
        """Return whether the flag takes a parameter."""

    @abstractmethod
    def parse(self, arg: str | None) -> None:
        """Parse the flag's parameter, or None if it has none."""


def _required(arg: str | None) -> str:
    if arg is None:
        raise UsageError("flag requires a parameter")
    return arg


def _mantissa_nonzero(body: str) -> bool:
    text = body.lstrip("+-").lower()
    if text.startswith("0x"):
        mantissa = text[2:].split("p", 1)[0]
    else:
        mantissa = text.split("e", 1)[0]
    return any(c not in "0." for c in mantissa)


def _parse_float(text: str, single: bool) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise UsageError("expected a floating-point value")
    body = match.group(1)
    lower = body.lower().lstrip("+-")
    negative = body.startswith("-")
    too_large = UsageError("floating-point value too large")
    if lower.startswith("nan"):
        value = math.nan
    elif lower.startswith("inf"):
        value = -math.inf if negative else math.inf
    else:
        try:
            value = float.fromhex(body) if lower.startswith("0x") else float(body)
        except OverflowError:
            raise too_large from None
        if math.isinf(value):
            raise too_large
        if single:
            try:
                (value,) = struct.unpack("<f", struct.pack("<f", value))
            except OverflowError:
                raise too_large from None
        smallest = _FLT_MIN if single else sys.float_info.min
        if (value == 0.0 and _mantissa_nonzero(body)) or (0.0 < abs(value) < smallest):
            raise too_large
    if match.end() != len(text):
        raise UsageError("expected a floating-point value")
    return value


@dataclass
class StringFlag(Flag):
    """A flag holding a string."""

    value: str = ""

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        self.value = _required(arg)


@dataclass
class IntFlag(Flag):
    """A flag holding a 32-bit signed integer."""

    value: int = 0

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        text = _required(arg)
        match = _INT_PREFIX.match(text)
        if match is None:
            raise UsageError("expected an integer")
        value = int(match.group(1))
        if not _INT_MIN <= value <= _INT_MAX:
            raise UsageError("integer too large")
        if match.end() != len(text):
            raise UsageError("expected an integer")
        self.value = value


@dataclass
class Float32Flag(Flag):
    """A flag holding a single-precision floating-point number."""

    value: float = 0.0

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        self.value = _parse_float(_required(arg), single=True)


@dataclass
class Float64Flag(Flag):
    """A flag holding a double-precision floating-point number."""

    value: float = 0.0

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        self.value = _parse_float(_required(arg), single=False)


@dataclass
class BoolFlag(Flag):
    """A boolean flag; a bare flag means true."""

    value: bool = False

    def argument(self) -> FlagArgument:
        return FlagArgument.OPTIONAL

    def parse(self, arg: str | None) -> None:
        if arg is None:
            self.value = True
            return
        try:
            self.value = _BOOL_VALUES[arg]
        except KeyError:
            raise UsageError("invalid value for boolean flag") from None


@dataclass
class SetValue(Flag):
    """A flag without a parameter that stores a fixed value in another flag."""

    target: Flag
    value: Any

    def argument(self) -> FlagArgument:
        return FlagArgument.NONE

    def parse(self, arg: str | None) -> None:
        self.target.value = self.value


@dataclass
class ExprFlag(Flag):
    """A flag holding an arithmetic expression."""

    value: Expr | None = None

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        try:
            self.value = parse(_required(arg))
        except ExprParseError as ex:
            raise UsageError(f"invalid expression: {ex}") from None


@dataclass(frozen=True)
class _Entry:
    flag: Flag
    help: str
    metavar: str


def _usage_error(msg: str, arg: str) -> UsageError:
    return UsageError(f"{msg}: {quote(arg)}")


class Parser:
    """Parser for flags written as -name, --name, -name=value or -name value."""

    def __init__(self) -> None:
        self._flags: dict[str, _Entry] = {}

    def _register(self, name: str, entry: _Entry) -> None:
        if name in self._flags:
            raise ValueError("duplicate flag")
        self._flags[name] = entry

    def add_flag(self, flag: Flag, name: str, help: str | None = None, metavar: str | None = None) -> Flag:
        """Add a flag under the given name and return it."""
        self._register(name, _Entry(flag, help or "", metavar or ""))
        return flag

    def add_bool_flag(self, name: str, help: str | None = None) -> BoolFlag:
        """Add a boolean flag "name" together with its negation "no-name"."""
        flag = BoolFlag()
        self._register(name, _Entry(flag, help or "", ""))
        self._register("no-" + name, _Entry(SetValue(flag, False), "", ""))
        return flag

    def parse_all(self, args: Iterable[str]) -> None:
        """Parse every argument."""
        remaining = iter(args)
        for arg in remaining:
            self._parse_arg(arg, remaining)

    def parse_next(self, args: Iterator[str]) -> None:
        """Parse the next flag from an iterator of arguments."""
        arg = next(args, None)
        if arg is None:
            raise ValueError("no arguments")
        self._parse_arg(arg, args)

    def _parse_arg(self, arg: str, rest: Iterator[str]) -> None:
        if not arg.startswith("-"):
            raise _usage_error("unexpected argument", arg)
        body = arg[1:]
        if body.startswith("-"):
            body = body[1:]
        if not body:
            raise _usage_error("unexpected argument", arg)

        name, eq, raw_value = body.partition("=")
        if eq and not name:
            raise _usage_error("invalid flag", arg)
        value: str | None = raw_value if eq else None

        entry = self._flags.get(name)
        if entry is None:
            raise _usage_error("unknown flag", "-" + name)
        flag = entry.flag

        kind = flag.argument()
        if kind is FlagArgument.REQUIRED and value is None:
            value = next(rest, None)
            if value is None:
                raise _usage_error("flag is missing required parameter", "-" + name)
        elif kind is FlagArgument.NONE and value is not None:
            raise _usage_error("flag has unexpected parameter", "-" + name)

        flag.parse(value)