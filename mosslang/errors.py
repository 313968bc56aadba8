"""Errors raised while type checking and while running a program."""

from __future__ import annotations

import enum
from typing import Any


class MossRuntimeError(Exception):
    """An error raised while a program runs."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def scope_binding_not_found(cls, ident: str) -> MossRuntimeError:
        return cls(f'Binding for identifier "{ident}" not found in scope.')

    @classmethod
    def scope_binding_already_exists(cls, ident: str) -> MossRuntimeError:
        return cls(f'Scope binding already exists for identifier "{ident}".')


class TypeErrorKind(enum.Enum):
    """Kinds of type error, with the details each one carries."""

    AMBIGUOUS_LIST_TYPE = enum.auto()  # ()
    ASSIGN_WRONG_TYPE = enum.auto()  # (expected, received)
    ASSIGN_IMMUTABLE = enum.auto()  # (ident,)
    ASSIGN_VOID = enum.auto()  # ()
    BINARY_OP_WRONG_TYPES = enum.auto()  # (op, left, right)
    DIVISION_ZERO = enum.auto()  # ()
    EXPECTED_TYPE_RECEIVED_LIST = enum.auto()  # (expected,)
    FUNC_WRONG_RETURN_TYPE = enum.auto()  # (expected, received, span)
    IF_ELSE_BLOCK_TYPE_MISMATCH = enum.auto()  # (expected, received)
    IF_ELSE_CONDITION_NON_BOOL = enum.auto()  # (ty,)
    INVOKE_NON_FUNC = enum.auto()  # (ty,)
    INVOKE_WRONG_SIGNATURE = enum.auto()  # (param_types, args, span)
    UNARY_OP_WRONG_TYPE = enum.auto()  # (op, ty)
    SCOPE_BINDING_ALREADY_EXISTS = enum.auto()  # (ident,)
    SCOPE_BINDING_NOT_FOUND = enum.auto()  # (ident,)
    APPLIED_TYPE_WRONG_NUMBER_ARGS = enum.auto()  # (ty, expected, received)


_FRAME_WIDTH = 80


class MossTypeError(Exception):
    """An error found while type checking a program."""

    def __init__(self, kind: TypeErrorKind, *details: Any) -> None:
        super().__init__(kind, *details)
        self.kind = kind
        self.details = details

    @classmethod
    def scope_binding_not_found(cls, ident: str) -> MossTypeError:
        return cls(TypeErrorKind.SCOPE_BINDING_NOT_FOUND, ident)

    @classmethod
    def scope_binding_already_exists(cls, ident: str) -> MossTypeError:
        return cls(TypeErrorKind.SCOPE_BINDING_ALREADY_EXISTS, ident)

    def display(self, file_name: str, source: str) -> str:
        """Render the error, with a frame showing the offending source where it has one."""
        return self._render((file_name, source))

    def __str__(self) -> str:
        return self._render(None)

    def _render(self, location: tuple[str, str] | None) -> str:
        d = self.details

        def frame(span: Any) -> str:
            if location is None:
                return ""
            return _location_frame(location[0], location[1], span)

        match self.kind:
            case TypeErrorKind.AMBIGUOUS_LIST_TYPE:
                return "Cannot resolve list element type."
            case TypeErrorKind.APPLIED_TYPE_WRONG_NUMBER_ARGS:
                ty, expected, received = d
                return (
                    f"Received wrong number of type arguments for type {ty}. \n"
                    f"Expected: {expected}\nReceived: {received}\n"
                )
            case TypeErrorKind.ASSIGN_IMMUTABLE:
                return f'Cannot re-assign immutable binding "{d[0]}".'
            case TypeErrorKind.ASSIGN_WRONG_TYPE:
                expected, received = d
                return (
                    f"Cannot assign a value of type {received} "
                    f"where type {expected} is expected"
                )
            case TypeErrorKind.ASSIGN_VOID:
                return "Cannot assign a value of type Void."
            case TypeErrorKind.BINARY_OP_WRONG_TYPES:
                op, left, right = d
                return f"Types {left} and {right} do not support binary operation {op}."
            case TypeErrorKind.DIVISION_ZERO:
                return "Cannot divide by 0."
            case TypeErrorKind.EXPECTED_TYPE_RECEIVED_LIST:
                return (
                    f"Expected a value of type {d[0]}, "
                    "but received a list of unknown type."
                )
            case TypeErrorKind.FUNC_WRONG_RETURN_TYPE:
                expected, received, span = d
                return (
                    "Return type does not match declared return type "
                    "in function signature.\n"
                    + frame(span)
                    + f"Expected: {expected}\nReceived: {received}\n"
                )
            case TypeErrorKind.IF_ELSE_BLOCK_TYPE_MISMATCH:
                expected, received = d
                return (
                    "Type mismatch in if-else chain.\n"
                    f"\tExpected: {expected}\n\tReceived: {received}"
                )
            case TypeErrorKind.IF_ELSE_CONDITION_NON_BOOL:
                return (
                    "Expected conditional statement, "
                    f"but received expression of type {d[0]}"
                )
            case TypeErrorKind.INVOKE_NON_FUNC:
                return f"Cannot invoke non-function of type {d[0]}"
            case TypeErrorKind.INVOKE_WRONG_SIGNATURE:
                param_types, args, span = d
                expected = ", ".join(str(t) for t in param_types)
                received = ", ".join(str(arg.ty) for arg in args)
                return (
                    "Invoked function with the wrong signature.\n"
                    + frame(span)
                    + f"Expected: ({expected})\nReceived: ({received})\n"
                )
            case TypeErrorKind.UNARY_OP_WRONG_TYPE:
                op, ty = d
                return f"Type {ty} does not support unary operation {op}."
            case TypeErrorKind.SCOPE_BINDING_ALREADY_EXISTS:
                return f'Binding "{d[0]}" already exists in local scope.'
            case TypeErrorKind.SCOPE_BINDING_NOT_FOUND:
                return f'Binding "{d[0]}" not found in scope.'
        raise ValueError(f"unknown type error kind {self.kind!r}")


def _line_number(source: str, offset: int) -> int:
    """Count the lines in the text before ``offset``; a trailing newline ends a line."""
    before = source[:offset]
    count = before.count("\n")
    if before and not before.endswith("\n"):
        count += 1
    return count


def _location_frame(file_name: str, source: str, span: Any) -> str:
    label = f"{file_name}:{_line_number(source, span.start)}"
    snippet = source[span.start : span.end]
    return (
        f"{label:-^{_FRAME_WIDTH}}\n"
        f"{snippet}\n"
        f"{'':-<{_FRAME_WIDTH}}\n"
    )