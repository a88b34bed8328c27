"""Execution of an RPN program held on a :class:`~rpnssa.stack.Stack`."""

from __future__ import annotations

import logging
from typing import Optional

from .inttype import wrap_signed
from .items import CfOp, CfOpItem, Const, ItemKind, LocalRef, Op, OpItem, Vop, VopItem
from .stack import Item, Stack, StackError

logger = logging.getLogger(__name__)

_OPERATION_KINDS = (ItemKind.OP, ItemKind.VOP, ItemKind.CFOP)
_BOOLEAN_BITWIDTH = 8


class ExecutionError(Exception):
    """Raised when a program cannot be executed to a return."""


def execute(stack: Stack) -> Const:
    """Run the program on ``stack`` and return the value given to ``ret``.

    Execution mutates the stack: conditions are popped, variables assigned
    and blocks recorded.
    """
    position = 0
    while position < len(stack):
        op_index = _next_operation(stack, position)
        if op_index is None:
            raise ExecutionError("no return operation found")
        item = stack[op_index]

        if item.kind is ItemKind.CFOP:
            position = _run_control_flow(stack, item, op_index)
            continue

        arg_count = _arg_count(item)
        # Operands are the first items after the current position.
        operands = stack[position:op_index][:arg_count]
        if len(operands) < arg_count:
            raise ExecutionError(
                f"not enough operands for operation {item.operation.label()} "
                f"(need {arg_count}, have {len(operands)})"
            )

        if item.kind is ItemKind.VOP:
            return _run_vop(stack, item, operands)

        _run_op(stack, item, operands)
        position = op_index + 1

    raise ExecutionError("no return statement found")


def _next_operation(stack: Stack, start: int) -> Optional[int]:
    return next(
        (
            index
            for index, item in enumerate(stack[start:], start)
            if item.kind in _OPERATION_KINDS
        ),
        None,
    )


def _arg_count(item: Item) -> int:
    if isinstance(item, VopItem):
        return item.operation.arg_count(item.argcount)
    return item.operation.arg_count()


def _resolve(stack: Stack, operand: Item) -> Const:
    if isinstance(operand, Const):
        return operand
    if isinstance(operand, LocalRef):
        try:
            return stack.get_variable(operand.variable_id)
        except StackError as exc:
            raise ExecutionError(str(exc)) from exc
    raise ExecutionError(f"invalid operand kind {operand.kind.name}")


def _run_vop(stack: Stack, item: VopItem, operands: list) -> Const:
    if item.operation is not Vop.RET:
        raise ExecutionError(
            f"operation {item.operation.label()} is not supported"
        )
    if not operands:
        raise ExecutionError("invalid return operand")
    return _resolve(stack, operands[-1])


def _run_op(stack: Stack, item: OpItem, operands: list) -> None:
    if item.operation is Op.ASSIGN:
        value = _resolve(stack, operands[0])
        target = operands[1]
        if not isinstance(target, LocalRef):
            raise ExecutionError("assignment target must be a local reference")
        try:
            stack.assign_variable(target.variable_id, value)
        except StackError as exc:
            raise ExecutionError(str(exc)) from exc
        return

    left, right = (_resolve(stack, operand) for operand in operands)
    # The result is not written back onto the stack; only errors such as
    # division by zero are observable.
    _apply(item.operation, left, right)


def _apply(operation: Op, left: Const, right: Const) -> Const:
    a, b = left.int_value(), right.int_value()
    bitwidth = max(left.type.size, right.type.size)
    if operation is Op.ADD:
        value = a + b
    elif operation is Op.SUB:
        value = a - b
    elif operation is Op.MUL:
        value = a * b
    elif operation is Op.DIV:
        if b == 0:
            raise ExecutionError("division by zero")
        quotient = abs(a) // abs(b)
        value = -quotient if (a < 0) != (b < 0) else quotient
    else:
        comparisons = {
            Op.EQ: a == b,
            Op.NE: a != b,
            Op.LT: a < b,
            Op.LE: a <= b,
            Op.GT: a > b,
            Op.GE: a >= b,
        }
        if operation not in comparisons:
            raise ExecutionError(f"unknown operation {operation.label()}")
        value = int(comparisons[operation])
        bitwidth = _BOOLEAN_BITWIDTH
    return Const(left.type.promote(bitwidth) if bitwidth else left.type,
                 wrap_signed(value, 64))


def _pop_condition(stack: Stack, op_index: int) -> tuple[bool, int]:
    """Pop the topmost constant as a condition; return it and the shifted op index."""
    last_const = max(
        (index for index, item in enumerate(stack) if item.kind is ItemKind.CONST),
        default=None,
    )
    try:
        condition = stack.evaluate_condition()
    except StackError as exc:
        raise ExecutionError(str(exc)) from exc
    if last_const is not None and last_const < op_index:
        op_index -= 1
    return condition, op_index


def _create_block(stack: Stack, is_loop: bool) -> int:
    try:
        return stack.create_block(stack.current_block, is_loop)
    except StackError as exc:
        raise ExecutionError(str(exc)) from exc


def _enter_block(stack: Stack, block_id: int) -> None:
    try:
        stack.enter_block(block_id)
    except StackError as exc:
        logger.warning("%s", exc)


def _exit_block(stack: Stack) -> None:
    try:
        stack.exit_block()
    except StackError as exc:
        logger.warning("%s", exc)


def _run_control_flow(stack: Stack, item: CfOpItem, op_index: int) -> int:
    operation = item.operation
    if operation is CfOp.IF:
        condition, op_index = _pop_condition(stack, op_index)
        block_id = _create_block(stack, is_loop=False)
        stack.blocks[block_id].condition_result = condition
        if condition:
            _enter_block(stack, block_id)
    elif operation is CfOp.WHILE:
        condition, op_index = _pop_condition(stack, op_index)
        if condition:
            _enter_block(stack, _create_block(stack, is_loop=True))
    elif operation is CfOp.ELSE:
        if stack.blocks[stack.current_block].condition_result is False:
            _exit_block(stack)
            _enter_block(stack, _create_block(stack, is_loop=False))
    elif operation is CfOp.END:
        _exit_block(stack)
    elif operation is CfOp.PHI:
        try:
            stack.resolve_phi(item)
        except StackError as exc:
            raise ExecutionError(str(exc)) from exc
    else:
        logger.warning(
            "control flow operation %s is not fully supported", operation.label()
        )
    return op_index + 1