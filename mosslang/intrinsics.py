"""Functions and type names that every program starts with."""

from __future__ import annotations

import re
from typing import Any, Callable

from mosslang.errors import MossRuntimeError
from mosslang.state import IoContext
from mosslang.syntax import BuiltinBlock, BuiltinFuncId, TypedFunc, TypedFuncDeclare
from mosslang.typesys import Type, TypeBinding
from mosslang.values import Void, print_string

BuiltinFunc = Callable[[IoContext, list], Any]

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_DECIMAL_INT = re.compile(r"[+-]?[0-9]+")


def _declare(
    builtin_id: BuiltinFuncId, params: list[tuple[str, Type]], return_type: Type
) -> TypedFuncDeclare:
    block = BuiltinBlock(tuple(name for name, _ in params), builtin_id, return_type)
    func = TypedFunc(params=tuple(params), block=block, is_closure=False)
    return TypedFuncDeclare(func, Type.func(*(ty for _, ty in params), return_type))


def _last(args: list) -> Any:
    if not args:
        raise MossRuntimeError("Builtin function called without arguments.")
    return args[-1]


# Casting


def make_int() -> TypedFuncDeclare:
    return _declare(BuiltinFuncId.INT, [("value", Type.ANY)], Type.INT)


def eval_int(io: IoContext, args: list) -> int:
    """Convert a decimal string or a bool to an Int."""
    value = _last(args)
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, str):
        if not _DECIMAL_INT.fullmatch(value):
            raise MossRuntimeError(f'Cannot convert "{value}" to Int.')
        number = int(value, 10)
        if not _I32_MIN <= number <= _I32_MAX:
            raise MossRuntimeError(f'Cannot convert "{value}" to Int: out of range.')
        return number
    raise MossRuntimeError(f"Cannot convert {value!r} to Int.")


def make_str() -> TypedFuncDeclare:
    return _declare(BuiltinFuncId.STR, [("value", Type.ANY)], Type.STR)


def eval_str(io: IoContext, args: list) -> str:
    """Convert an Int or a bool to a String."""
    value = _last(args)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    raise MossRuntimeError(f"Cannot convert {value!r} to String.")


# Collections


def make_push() -> TypedFuncDeclare:
    str_list = Type.list_of(Type.STR)
    return _declare(
        BuiltinFuncId.PUSH, [("list", str_list), ("item", Type.STR)], str_list
    )


def eval_push(io: IoContext, args: list) -> list:
    """Return a new list holding the items of the list followed by the item."""
    if len(args) < 2:
        raise MossRuntimeError("push expects a list and an item.")
    items, item = args[-2], args[-1]
    if not isinstance(items, list):
        raise MossRuntimeError(f"push expects a list, received {items!r}.")
    return [*items, item]


# Input and output


def make_print_line() -> TypedFuncDeclare:
    return _declare(BuiltinFuncId.PRINT_LINE, [("message", Type.ANY)], Type.VOID)


def eval_print_line(io: IoContext, args: list) -> Void:
    io.write_line(print_string(_last(args)))
    return Void()


def make_read_line() -> TypedFuncDeclare:
    return _declare(BuiltinFuncId.READ_LINE, [], Type.STR)


def eval_read_line(io: IoContext, args: list) -> str:
    return io.read_line()


def builtin_func_bindings() -> list[tuple[str, TypedFuncDeclare]]:
    """The names bound to builtin functions, with their declarations."""
    return [
        ("int", make_int()),
        ("print_line", make_print_line()),
        ("push", make_push()),
        ("read_line", make_read_line()),
        ("str", make_str()),
    ]


def builtin_funcs() -> dict[BuiltinFuncId, BuiltinFunc]:
    """The host functions that carry out each builtin body."""
    return {
        BuiltinFuncId.INT: eval_int,
        BuiltinFuncId.PRINT_LINE: eval_print_line,
        BuiltinFuncId.PUSH: eval_push,
        BuiltinFuncId.READ_LINE: eval_read_line,
        BuiltinFuncId.STR: eval_str,
    }


def builtin_type_bindings() -> list[tuple[str, TypeBinding]]:
    """The type names every program can use."""
    return [
        ("Int", TypeBinding.atomic(Type.INT)),
        ("Bool", TypeBinding.atomic(Type.BOOL)),
        ("Float", TypeBinding.atomic(Type.FLOAT)),
        ("Str", TypeBinding.atomic(Type.STR)),
        ("Void", TypeBinding.atomic(Type.VOID)),
        ("Bool", TypeBinding.atomic(Type.BOOL)),
        ("List", TypeBinding.applied(1)),
        ("Func", TypeBinding.applied(2)),
    ]