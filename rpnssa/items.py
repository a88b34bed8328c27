"""Items that make up an RPN program: constants, references and operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar

from .inttype import IntType, TypeKind, int_type, native_size, wrap_signed


class ItemKind(Enum):
    """Category of an item in the program."""

    VOID = auto()
    CONST = auto()
    OP = auto()
    LREF = auto()
    VOP = auto()
    CFOP = auto()


_OP_LABELS = {
    "ADD": "add",
    "SUB": "subtract",
    "MUL": "multiply",
    "DIV": "divide",
    "ASSIGN": "assign",
    "EQ": "equal",
    "NE": "not_equal",
    "LT": "less_than",
    "LE": "less_equal",
    "GT": "greater_than",
    "GE": "greater_equal",
}


class Op(Enum):
    """Fixed-arity binary operations."""

    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    ASSIGN = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()

    def arg_count(self) -> int:
        """Number of operands consumed."""
        return 2

    def return_count(self) -> int:
        """Number of values produced."""
        return 0 if self is Op.ASSIGN else 1

    def label(self) -> str:
        """Descriptive name of the operation."""
        return _OP_LABELS[self.name]


class Vop(Enum):
    """Operations whose arity is given by the program."""

    RET = auto()
    CALL = auto()

    def arg_count(self, argcount: int) -> int:
        """Number of operands consumed, as declared."""
        return argcount

    def return_count(self, retcount: int) -> int:
        """Number of values produced, as declared."""
        return retcount

    def label(self) -> str:
        """Descriptive name of the operation."""
        return "return" if self is Vop.RET else "call"


class CfOp(Enum):
    """Control-flow operations."""

    IF = auto()
    ELIF = auto()
    ELSE = auto()
    LOOP = auto()
    WHILE = auto()
    MERGE = auto()
    END = auto()
    PHI = auto()

    def label(self) -> str:
        """Descriptive name of the operation."""
        return self.name.lower()


@dataclass(frozen=True)
class Const:
    """A typed constant; integer values are stored wrapped to their native width."""

    kind: ClassVar[ItemKind] = ItemKind.CONST
    type: IntType
    value: int = 0

    def __post_init__(self) -> None:
        if self.type.kind is TypeKind.INT:
            object.__setattr__(self, "value", wrap_signed(self.value, self.size() * 8))

    def int_value(self) -> int:
        """The signed integer value, or 0 for a non-integer type."""
        if self.type.kind is not TypeKind.INT:
            return 0
        return self.value

    def size(self) -> int:
        """Storage size in bytes."""
        return native_size(self.type.size)


@dataclass(frozen=True)
class LocalRef:
    """A reference to a local variable ($0, $1, ...)."""

    kind: ClassVar[ItemKind] = ItemKind.LREF
    variable_id: int


@dataclass(frozen=True)
class OpItem:
    """A binary operation in the program."""

    kind: ClassVar[ItemKind] = ItemKind.OP
    operation: Op


@dataclass(frozen=True)
class VopItem:
    """A variable-arity operation such as ``ret/1``."""

    kind: ClassVar[ItemKind] = ItemKind.VOP
    operation: Vop
    argcount: int = 0
    retcount: int = 1


@dataclass(frozen=True)
class CfOpItem:
    """A control-flow operation; phi nodes carry their target and sources."""

    kind: ClassVar[ItemKind] = ItemKind.CFOP
    operation: CfOp
    target_var: int = 0
    source_vars: tuple[int, ...] = field(default_factory=tuple)
    block_id: int = 0


def make_int_const(value: int, bitwidth: int) -> Const:
    """Create an integer constant of ``bitwidth`` bits."""
    return Const(int_type(bitwidth), value)