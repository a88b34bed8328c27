"""Tokenising and parsing of RPN expressions into program items."""

from __future__ import annotations

import re
from typing import Optional

from .inttype import INT64_MAX, INT64_MIN
from .items import (
    CfOp,
    CfOpItem,
    Const,
    LocalRef,
    Op,
    OpItem,
    Vop,
    VopItem,
    make_int_const,
)
from .stack import MAX_VARIABLES, Item

_ULONG_MAX = (1 << 64) - 1
_MAX_VOP_NAME = 64

_WHITESPACE = "[ \t\n\v\f\r]*"
_SIGNED_INT = re.compile(_WHITESPACE + r"([+-]?[0-9]+)")
_UNSIGNED_PREFIX = re.compile(_WHITESPACE + r"([+-]?)([0-9]+)")
_TOKEN_SEPARATORS = re.compile(r"[ \t]+")

_OPERATIONS = {
    "+": Op.ADD,
    "-": Op.SUB,
    "*": Op.MUL,
    "/": Op.DIV,
    "=": Op.ASSIGN,
    "<": Op.LT,
    ">": Op.GT,
    "==": Op.EQ,
    "!=": Op.NE,
    "<=": Op.LE,
    ">=": Op.GE,
}

_VOPS = {"ret": Vop.RET, "call": Vop.CALL}

_CFOPS = {
    "if": CfOp.IF,
    "elif": CfOp.ELIF,
    "else": CfOp.ELSE,
    "loop": CfOp.LOOP,
    "while": CfOp.WHILE,
    "merge": CfOp.MERGE,
    "end": CfOp.END,
    "phi": CfOp.PHI,
}


class ParseError(Exception):
    """Raised when a token cannot be turned into a program item."""


def _parse_signed(token: str) -> Optional[int]:
    """Parse a whole token as a base-10 integer, saturating at 64 bits."""
    match = _SIGNED_INT.fullmatch(token)
    if match is None:
        return None
    value = int(match.group(1))
    return min(max(value, INT64_MIN), INT64_MAX)


def _parse_unsigned_prefix(text: str) -> tuple[int, str]:
    """Parse a leading unsigned integer; return it and the unparsed remainder.

    Without any digits the value is 0 and the whole text remains. A minus
    sign wraps the value modulo 2**64; too large a magnitude saturates.
    """
    match = _UNSIGNED_PREFIX.match(text)
    if match is None:
        return 0, text
    sign, digits = match.groups()
    magnitude = int(digits)
    if magnitude > _ULONG_MAX:
        value = _ULONG_MAX
    elif sign == "-":
        value = (-magnitude) % (_ULONG_MAX + 1)
    else:
        value = magnitude
    return value, text[match.end():]


def is_number(token: str) -> bool:
    """True if the whole token is a base-10 integer."""
    return bool(token) and _parse_signed(token) is not None


def is_operation(token: str) -> bool:
    """True if the token is a binary operator."""
    return token in _OPERATIONS


def is_vop(token: str) -> bool:
    """True if the token names a variable-arity operation."""
    return token in _VOPS


def is_cfop(token: str) -> bool:
    """True if the token is a control-flow keyword."""
    return token in _CFOPS


def is_variable(token: str) -> bool:
    """True if the token is a variable reference such as ``$0``."""
    if len(token) < 2 or not token.startswith("$"):
        return False
    return all(char in "0123456789" for char in token[1:])


def parse_vop_syntax(token: str) -> Optional[tuple[str, int, int]]:
    """Split ``name/argcount[/retcount]`` into its parts.

    Returns None when the token has no slash or the name is too long.
    The return count defaults to 1.
    """
    name, slash, rest = token.partition("/")
    if not slash or len(name) >= _MAX_VOP_NAME:
        return None
    argcount, rest = _parse_unsigned_prefix(rest)
    if rest.startswith("/"):
        retcount, _ = _parse_unsigned_prefix(rest[1:])
    else:
        retcount = 1
    return name, argcount, retcount


def determine_bitwidth(value: int) -> int:
    """Smallest of 8, 16, 32 or 64 signed bits that holds ``value``."""
    for bits in (8, 16, 32):
        limit = 1 << (bits - 1)
        if -limit <= value < limit:
            return bits
    return 64


def parse_token(token: str) -> Item:
    """Turn a single token into a program item."""
    number = _parse_signed(token) if token else None
    if number is not None:
        return make_int_const(number, determine_bitwidth(number))

    if is_variable(token):
        var_id, _ = _parse_unsigned_prefix(token[1:])
        if var_id >= MAX_VARIABLES:
            raise ParseError(
                f"Variable ID {var_id} exceeds maximum {MAX_VARIABLES - 1}"
            )
        return LocalRef(var_id)

    if is_operation(token):
        return OpItem(_OPERATIONS[token])

    vop = parse_vop_syntax(token)
    if vop is not None:
        name, argcount, retcount = vop
        if not is_vop(name):
            raise ParseError(f"Unknown variable operation '{name}'")
        return VopItem(_VOPS[name], argcount, retcount)

    if is_cfop(token):
        return CfOpItem(_CFOPS[token])

    raise ParseError(f"Unknown token '{token}'")


def tokenize(expression: str) -> list[str]:
    """Split an expression on spaces and tabs, dropping empty pieces."""
    return [token for token in _TOKEN_SEPARATORS.split(expression) if token]


def parse_expression(expression: str) -> list[Item]:
    """Parse a whole expression into its list of program items."""
    return [parse_token(token) for token in tokenize(expression)]


__all__ = [
    "Const",
    "ParseError",
    "determine_bitwidth",
    "is_cfop",
    "is_number",
    "is_operation",
    "is_variable",
    "is_vop",
    "parse_expression",
    "parse_token",
    "parse_vop_syntax",
    "tokenize",
]