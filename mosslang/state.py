"""Interpreter state: control operations, the execution context and program I/O."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from mosslang.errors import MossRuntimeError
from mosslang.scopes import ScopeStack


class ControlFlow(enum.Enum):
    """What the interpreter does after carrying out one control operation."""

    CONTINUE = enum.auto()
    BREAK = enum.auto()
    RETURN = enum.auto()


class OpKind(enum.Enum):
    """Kinds of control operation; the payload each one carries is noted beside it."""

    EVAL_BLOCK = enum.auto()  # the block expression
    EVAL_STMT = enum.auto()  # the TypedStmt
    APPLY_STMT = enum.auto()
    EVAL_EXPR = enum.auto()  # the typed expression

    APPLY_ADD = enum.auto()
    APPLY_SUB = enum.auto()
    APPLY_MULT = enum.auto()
    APPLY_DIV = enum.auto()
    APPLY_EQ = enum.auto()
    APPLY_GT = enum.auto()
    APPLY_LT = enum.auto()
    APPLY_GTE = enum.auto()
    APPLY_LTE = enum.auto()
    APPLY_MODULO = enum.auto()

    APPLY_FUNC_CALL = enum.auto()  # tuple of argument expressions

    APPLY_IF = enum.auto()  # the then block
    APPLY_IF_ELSE = enum.auto()  # (then block, else expression)
    PUSH_LOOP = enum.auto()  # the loop body

    APPLY_ASSIGNMENT = enum.auto()  # identifier
    APPLY_NEGATE = enum.auto()
    APPLY_DECLARATION = enum.auto()  # (identifier, is_mutable)

    APPLY_BINDING = enum.auto()  # identifier
    PUSH_SCOPE = enum.auto()  # create_new_stack flag
    POP_SCOPE = enum.auto()  # restore_previous_stack flag

    MARK_LOOP_START = enum.auto()
    MARK_BLOCK_START = enum.auto()

    APPLY_LIST = enum.auto()  # number of items


@dataclass(frozen=True)
class ControlOp:
    """One pending step on the interpreter's control stack."""

    kind: OpKind
    payload: Any = None


@dataclass
class ExecContext:
    """The control stack, the value stack and the runtime scopes of a running program."""

    control_stack: list[ControlOp] = field(default_factory=list)
    value_stack: list[Any] = field(default_factory=list)
    scope_stack: ScopeStack[Any] = field(
        default_factory=lambda: ScopeStack(MossRuntimeError)
    )


def _io_error(operation: str, error: Exception) -> MossRuntimeError:
    return MossRuntimeError(f"Failed to {operation} in IoContext: {error}")


@dataclass
class IoContext:
    """The text streams a program reads lines from and writes lines to."""

    reader: TextIO = field(default_factory=lambda: sys.stdin)
    writer: TextIO = field(default_factory=lambda: sys.stdout)

    def write_line(self, text: str) -> None:
        """Write ``text`` and a newline, then flush."""
        try:
            self.writer.write(text)
            self.writer.write("\n")
        except (OSError, ValueError) as error:
            raise _io_error("write", error) from error
        try:
            self.writer.flush()
        except (OSError, ValueError) as error:
            raise _io_error("flush", error) from error

    def read_line(self) -> str:
        """Read one line without its line ending; at end of input, an empty string."""
        try:
            line = self.reader.readline()
        except (OSError, ValueError) as error:
            raise _io_error("read_line", error) from error
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line