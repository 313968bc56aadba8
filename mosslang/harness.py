"""Shortcuts that check and run a program with the standard builtins."""

from __future__ import annotations

import sys
from typing import Any, TextIO

from mosslang import analyzer
from mosslang.interpreter import interpret_program
from mosslang.intrinsics import (
    builtin_func_bindings,
    builtin_funcs,
    builtin_type_bindings,
)
from mosslang.state import ExecContext, IoContext
from mosslang.syntax import Expr, TypedBlock, TypedExpr


def analyze_program(program: Expr) -> TypedBlock:
    """Type check a program with the builtin functions and type names in scope."""
    return analyzer.analyze_program(
        program, builtin_func_bindings(), builtin_type_bindings()
    )


def exec_program(
    program: TypedExpr,
    reader: TextIO | None = None,
    writer: TextIO | None = None,
) -> Any:
    """Run a typed program; input and output default to the standard streams."""
    io = IoContext(
        reader=reader if reader is not None else sys.stdin,
        writer=writer if writer is not None else sys.stdout,
    )
    return interpret_program(
        program,
        ExecContext(),
        io,
        builtin_func_bindings(),
        builtin_funcs(),
    )