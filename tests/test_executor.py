import pytest

from rpnssa.executor import ExecutionError, execute
from rpnssa.items import (
    CfOp,
    CfOpItem,
    LocalRef,
    Op,
    OpItem,
    Vop,
    VopItem,
    make_int_const,
)
from rpnssa.stack import Stack


def c(value, bits=8):
    return make_int_const(value, bits)


def op(operation):
    return OpItem(operation)


def ret(argcount=1):
    return VopItem(Vop.RET, argcount, 1)


def cf(operation):
    return CfOpItem(operation)


def test_return_constant():
    result = execute(Stack([c(42), ret()]))
    assert result.int_value() == 42


def test_return_preserves_type():
    value = c(300, 16)
    result = execute(Stack([value, ret()]))
    assert result == value


def test_return_takes_first_operand_after_position():
    result = execute(Stack([c(1), c(2), ret()]))
    assert result.int_value() == 1


def test_assign_then_return_variable():
    stack = Stack([c(7), LocalRef(0), op(Op.ASSIGN), LocalRef(0), ret()])
    result = execute(stack)
    assert result.int_value() == 7
    assert stack.get_variable(0).int_value() == 7


def test_assign_from_variable():
    stack = Stack(
        [
            c(5), LocalRef(0), op(Op.ASSIGN),
            LocalRef(0), LocalRef(1), op(Op.ASSIGN),
            LocalRef(1), ret(),
        ]
    )
    assert execute(stack).int_value() == 5


def test_assignment_target_must_be_reference():
    with pytest.raises(ExecutionError, match="local reference"):
        execute(Stack([c(1), c(2), op(Op.ASSIGN), c(3), ret()]))


def test_arithmetic_result_is_not_written_back():
    with pytest.raises(ExecutionError, match="not enough operands"):
        execute(Stack([c(10), c(10), op(Op.ADD), ret()]))


def test_operations_continue_after_arithmetic():
    stack = Stack([c(6), c(3), op(Op.DIV), c(5), ret()])
    assert execute(stack).int_value() == 5


def test_division_by_zero():
    with pytest.raises(ExecutionError, match="division by zero"):
        execute(Stack([c(1), c(0), op(Op.DIV), c(5), ret()]))


def test_not_enough_operands_for_binary():
    with pytest.raises(ExecutionError, match="need 2, have 1"):
        execute(Stack([c(1), op(Op.ADD), c(5), ret()]))


def test_unassigned_variable():
    with pytest.raises(ExecutionError, match="not assigned"):
        execute(Stack([LocalRef(3), ret()]))


def test_empty_stack():
    with pytest.raises(ExecutionError, match="no return statement"):
        execute(Stack())


def test_no_operation():
    with pytest.raises(ExecutionError, match="no return operation"):
        execute(Stack([c(1), c(2)]))


def test_call_is_rejected():
    with pytest.raises(ExecutionError, match="call"):
        execute(Stack([c(1), VopItem(Vop.CALL, 1, 1)]))


def test_return_without_operands():
    with pytest.raises(ExecutionError, match="invalid return operand"):
        execute(Stack([ret(0)]))


def _if_else_program(else_value):
    return Stack(
        [
            c(5), c(3), op(Op.GT), cf(CfOp.IF),
            c(100), ret(),
            cf(CfOp.ELSE), c(else_value), ret(),
            cf(CfOp.END),
        ]
    )


def test_if_true_branch_example():
    stack = _if_else_program(200)
    assert execute(stack).int_value() == 100
    assert stack.current_block == 1
    assert stack.blocks[1].condition_result is True


def test_if_false_condition_records_block_without_entering():
    stack = _if_else_program(0)
    before = stack.count_constants()
    execute(stack)
    assert stack.count_constants() == before - 1
    assert stack.current_block == 0
    assert stack.blocks[1].condition_result is False


def test_if_without_condition():
    with pytest.raises(ExecutionError, match="no condition"):
        execute(Stack([cf(CfOp.IF), LocalRef(0), ret()]))


def test_while_true_enters_loop_block():
    stack = Stack(
        [
            c(7), LocalRef(0), op(Op.ASSIGN),
            c(1), cf(CfOp.WHILE),
            LocalRef(0), ret(),
        ]
    )
    assert execute(stack).int_value() == 7
    assert len(stack.blocks) == 2
    assert stack.blocks[1].is_loop is True
    assert stack.current_block == 1


def test_while_false_creates_no_block():
    stack = Stack(
        [
            c(7), LocalRef(0), op(Op.ASSIGN),
            c(0), cf(CfOp.WHILE),
            LocalRef(0), ret(),
        ]
    )
    assert execute(stack).int_value() == 7
    assert len(stack.blocks) == 1


def test_end_at_root_is_tolerated():
    assert execute(Stack([cf(CfOp.END), c(9), ret()])).int_value() == 9


@pytest.mark.parametrize("operation", [CfOp.LOOP, CfOp.MERGE, CfOp.ELIF])
def test_unsupported_control_flow_is_skipped(operation):
    assert execute(Stack([cf(operation), c(9), ret()])).int_value() == 9


def test_phi_resolves_into_target():
    stack = Stack(
        [
            c(4), LocalRef(0), op(Op.ASSIGN),
            CfOpItem(CfOp.PHI, target_var=2, source_vars=(0, 1)),
            LocalRef(2), ret(),
        ]
    )
    assert execute(stack).int_value() == 4
    assert stack.get_variable(2) == stack.get_variable(0)


def test_phi_without_sources_fails():
    stack = Stack(
        [CfOpItem(CfOp.PHI, target_var=2, source_vars=(0, 1)), c(1), ret()]
    )
    with pytest.raises(ExecutionError, match="phi"):
        execute(stack)