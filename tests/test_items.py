import pytest

from rpnssa.inttype import IntType, TypeKind, wrap_signed
from rpnssa.items import (
    CfOp,
    CfOpItem,
    Const,
    ItemKind,
    LocalRef,
    Op,
    OpItem,
    Vop,
    VopItem,
    make_int_const,
)


@pytest.mark.parametrize(
    "op,label",
    [
        (Op.ADD, "add"),
        (Op.SUB, "subtract"),
        (Op.MUL, "multiply"),
        (Op.DIV, "divide"),
        (Op.ASSIGN, "assign"),
        (Op.EQ, "equal"),
        (Op.NE, "not_equal"),
        (Op.LT, "less_than"),
        (Op.LE, "less_equal"),
        (Op.GT, "greater_than"),
        (Op.GE, "greater_equal"),
    ],
)
def test_op_labels(op, label):
    assert op.label() == label


@pytest.mark.parametrize(
    "op,returns",
    [
        (Op.ADD, 1),
        (Op.SUB, 1),
        (Op.MUL, 1),
        (Op.DIV, 1),
        (Op.ASSIGN, 0),
        (Op.EQ, 1),
        (Op.NE, 1),
        (Op.LT, 1),
        (Op.LE, 1),
        (Op.GT, 1),
        (Op.GE, 1),
    ],
)
def test_op_counts(op, returns):
    assert op.arg_count() == 2
    assert op.return_count() == returns


@pytest.mark.parametrize("vop", [Vop.RET, Vop.CALL])
def test_vop_counts_follow_declaration(vop):
    assert vop.arg_count(3) == 3
    assert vop.return_count(2) == 2


def test_vop_labels():
    assert Vop.RET.label() == "return"
    assert Vop.CALL.label() == "call"


@pytest.mark.parametrize(
    "cfop,label",
    [
        (CfOp.IF, "if"),
        (CfOp.ELIF, "elif"),
        (CfOp.ELSE, "else"),
        (CfOp.LOOP, "loop"),
        (CfOp.WHILE, "while"),
        (CfOp.MERGE, "merge"),
        (CfOp.END, "end"),
        (CfOp.PHI, "phi"),
    ],
)
def test_cfop_labels(cfop, label):
    assert cfop.label() == label


def test_make_int_const_round_trip():
    for value, bits in ((20, 8), (-5, 8), (1000, 16), (-70000, 32), (1 << 40, 64)):
        c = make_int_const(value, bits)
        assert c.int_value() == value
        assert c.type.size == bits
        assert c.kind is ItemKind.CONST


@pytest.mark.parametrize("bits,size", [(8, 1), (16, 2), (23, 4), (32, 4), (64, 8)])
def test_const_size_is_native(bits, size):
    assert make_int_const(1, bits).size() == size


def test_const_wraps_to_native_width():
    c = make_int_const(300, 8)
    assert c.int_value() == wrap_signed(300, 8)
    assert -128 <= c.int_value() <= 127


def test_void_const_reads_as_zero():
    c = Const(IntType(TypeKind.VOID, 8), 42)
    assert c.int_value() == 0


def test_const_rejects_wide_type():
    with pytest.raises(ValueError):
        make_int_const(1, 128)


def test_item_kinds():
    assert LocalRef(3).kind is ItemKind.LREF
    assert OpItem(Op.ADD).kind is ItemKind.OP
    assert VopItem(Vop.RET, 1).kind is ItemKind.VOP
    assert CfOpItem(CfOp.IF).kind is ItemKind.CFOP


def test_vop_item_default_retcount():
    assert VopItem(Vop.RET, 1).retcount == 1


def test_phi_item_holds_sources():
    phi = CfOpItem(CfOp.PHI, target_var=2, source_vars=(0, 1))
    assert phi.target_var == 2
    assert phi.source_vars == (0, 1)
    assert CfOpItem(CfOp.END).source_vars == ()