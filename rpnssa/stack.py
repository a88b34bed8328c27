"""Program stack with SSA variable storage and block bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Sequence, Union

from .items import CfOp, CfOpItem, Const, ItemKind, LocalRef, OpItem, VopItem

MAX_VARIABLES = 256
MAX_BLOCKS = 128
MAX_BLOCK_STACK = 32

Item = Union[Const, LocalRef, OpItem, VopItem, CfOpItem]


class StackError(Exception):
    """Raised when a stack, variable or block operation cannot be carried out."""


@dataclass
class Variable:
    """Storage slot for a variable's current SSA value."""

    value: Optional[Const] = None
    is_assigned: bool = False
    version: int = 0
    block_id: int = 0


@dataclass
class Block:
    """A region of the program; ``end_pos`` is None while the block is open."""

    id: int
    start_pos: int = 0
    end_pos: Optional[int] = None
    parent_block: int = 0
    is_loop: bool = False
    condition_result: Optional[bool] = None


class Stack:
    """Ordered sequence of program items plus variables and blocks."""

    def __init__(self, items: Optional[Iterable[Item]] = None) -> None:
        self._items: list[Item] = list(items) if items is not None else []
        self.variables: list[Variable] = [Variable() for _ in range(MAX_VARIABLES)]
        self.variable_versions: list[int] = [0] * MAX_VARIABLES
        self.blocks: list[Block] = [Block(id=0)]
        self.current_block = 0
        self.block_stack: list[int] = [0]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def is_empty(self) -> bool:
        """True if the stack holds no items."""
        return not self._items

    def push(self, item: Item) -> None:
        """Append an item to the top of the stack."""
        self._items.append(item)

    def extend(self, items: Iterable[Item]) -> None:
        """Append several items in order."""
        self._items.extend(items)

    def peek_kind(self) -> ItemKind:
        """Kind of the topmost item, or VOID for an empty stack."""
        if not self._items:
            return ItemKind.VOID
        return self._items[-1].kind

    def pop_last(self, kind: ItemKind) -> Optional[Item]:
        """Remove and return the topmost item of ``kind``, or None if there is none."""
        for index in range(len(self._items) - 1, -1, -1):
            if self._items[index].kind is kind:
                return self._items.pop(index)
        return None

    def count_constants(self) -> int:
        """Number of constant items on the stack."""
        return sum(1 for item in self._items if item.kind is ItemKind.CONST)

    def assign_variable(self, var_id: int, value: Const) -> None:
        """Assign a new SSA version of variable ``var_id``."""
        if not 0 <= var_id < MAX_VARIABLES:
            raise StackError(
                f"variable ID {var_id} exceeds maximum {MAX_VARIABLES - 1}"
            )
        self.variable_versions[var_id] += 1
        new_version = self.variable_versions[var_id]

        slot = next(
            (i for i, variable in enumerate(self.variables) if not variable.is_assigned),
            var_id,
        )
        stored = Variable(
            value=value,
            is_assigned=True,
            version=new_version,
            block_id=self.current_block,
        )
        self.variables[slot] = stored
        if slot != var_id:
            self.variables[var_id] = replace(stored)

    def get_variable(self, var_id: int) -> Const:
        """Current value of variable ``var_id``."""
        if not 0 <= var_id < MAX_VARIABLES or not self.variables[var_id].is_assigned:
            raise StackError(f"variable ${var_id} not assigned")
        value = self.variables[var_id].value
        assert value is not None
        return value

    def create_block(self, parent_block: int, is_loop: bool) -> int:
        """Create a block starting at the current top of the stack; return its id."""
        if len(self.blocks) >= MAX_BLOCKS:
            raise StackError("maximum number of blocks exceeded")
        block_id = len(self.blocks)
        self.blocks.append(
            Block(
                id=block_id,
                start_pos=len(self._items),
                parent_block=parent_block,
                is_loop=bool(is_loop),
            )
        )
        return block_id

    def enter_block(self, block_id: int) -> None:
        """Make ``block_id`` current, remembering the block it was entered from."""
        if len(self.block_stack) >= MAX_BLOCK_STACK:
            raise StackError("block stack overflow")
        self.block_stack.append(self.current_block)
        self.current_block = block_id

    def exit_block(self) -> None:
        """Close the current block and return to the enclosing one."""
        if len(self.block_stack) <= 1:
            raise StackError("cannot exit root block")
        self.blocks[self.current_block].end_pos = len(self._items)
        self.current_block = self.block_stack.pop()

    def evaluate_condition(self) -> bool:
        """Pop the topmost constant and return whether it is non-zero."""
        condition = self.pop_last(ItemKind.CONST)
        if condition is None:
            raise StackError("no condition value on stack")
        return condition.int_value() != 0

    def create_phi(self, target_var: int, source_vars: Sequence[int]) -> None:
        """Push a phi node merging ``source_vars`` into ``target_var``."""
        self.push(
            CfOpItem(
                CfOp.PHI,
                target_var=target_var,
                source_vars=tuple(source_vars),
            )
        )

    def resolve_phi(self, phi: CfOpItem) -> None:
        """Assign the phi target from its most recently versioned source."""
        highest_version = 0
        chosen: Optional[Const] = None
        for source in phi.source_vars:
            if not 0 <= source < MAX_VARIABLES:
                continue
            variable = self.variables[source]
            if variable.is_assigned and variable.version >= highest_version:
                highest_version = variable.version
                chosen = variable.value
        if chosen is None:
            raise StackError("no valid source for phi node")
        self.assign_variable(phi.target_var, chosen)