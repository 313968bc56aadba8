"""Type checking of binary operations."""

from __future__ import annotations

from typing import Callable

from mosslang.errors import MossTypeError, TypeErrorKind
from mosslang.syntax import (
    BinaryExpr,
    BinaryOperator,
    Expr,
    TypedBinary,
    TypedExpr,
    TypedLiteral,
)
from mosslang.typesys import Type

_NUMERIC = frozenset({Type.INT, Type.FLOAT})

# Operand types each operator accepts; None accepts any type.
_OPERAND_TYPES: dict[BinaryOperator, frozenset[Type] | None] = {
    BinaryOperator.EQ: None,
    BinaryOperator.GT: _NUMERIC,
    BinaryOperator.LT: _NUMERIC,
    BinaryOperator.GTE: _NUMERIC,
    BinaryOperator.LTE: _NUMERIC,
    BinaryOperator.ADD: _NUMERIC | {Type.STR},
    BinaryOperator.SUB: _NUMERIC,
    BinaryOperator.MULT: _NUMERIC,
    BinaryOperator.DIV: _NUMERIC,
    BinaryOperator.MODULO: _NUMERIC,
}

_COMPARISONS = frozenset(
    {
        BinaryOperator.EQ,
        BinaryOperator.GT,
        BinaryOperator.LT,
        BinaryOperator.GTE,
        BinaryOperator.LTE,
    }
)

_DIVISIONS = frozenset({BinaryOperator.DIV, BinaryOperator.MODULO})


def _is_int_zero_literal(expr: TypedExpr) -> bool:
    return (
        isinstance(expr, TypedLiteral)
        and expr.ty == Type.INT
        and not isinstance(expr.value, bool)
        and expr.value == 0
    )


def analyze_binary_op(
    expr: BinaryExpr, analyze: Callable[[Expr], TypedExpr]
) -> TypedBinary:
    """Type check a binary operation, analyzing its operands left first with ``analyze``."""
    if not isinstance(expr, BinaryExpr):
        raise ValueError(f"not a binary operation: {expr!r}")

    left = analyze(expr.left)
    right = analyze(expr.right)
    op = expr.op

    def wrong_types() -> MossTypeError:
        return MossTypeError(
            TypeErrorKind.BINARY_OP_WRONG_TYPES, op.value, left.ty, right.ty
        )

    if left.ty != right.ty:
        raise wrong_types()

    allowed = _OPERAND_TYPES[op]
    if allowed is not None and left.ty not in allowed:
        raise wrong_types()

    if op in _DIVISIONS and _is_int_zero_literal(right):
        raise MossTypeError(TypeErrorKind.DIVISION_ZERO)

    ty = Type.BOOL if op in _COMPARISONS else left.ty
    return TypedBinary(op, left, right, ty)