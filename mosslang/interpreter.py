"""Execution of type-checked programs on an explicit control stack."""

from __future__ import annotations

import math
import operator
from typing import Any, Callable, Iterable, Mapping

from mosslang.errors import MossRuntimeError
from mosslang.intrinsics import BuiltinFunc
from mosslang.state import ControlFlow, ControlOp, ExecContext, IoContext, OpKind
from mosslang.syntax import (
    BinaryOperator,
    BuiltinBlock,
    BuiltinFuncId,
    TypedAssignment,
    TypedBinary,
    TypedBlock,
    TypedBreak,
    TypedDeclaration,
    TypedExpr,
    TypedFunc,
    TypedFuncCall,
    TypedFuncDeclare,
    TypedIdentifier,
    TypedIf,
    TypedIfElse,
    TypedList,
    TypedLiteral,
    TypedLoop,
    TypedNegate,
    TypedStmt,
)
from mosslang.values import Void

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


def _checked(value: Any) -> Any:
    """Reject integer results that do not fit in 32 bits."""
    if type(value) is int and not _I32_MIN <= value <= _I32_MAX:
        raise MossRuntimeError("Integer overflow.")
    return value


def _divide(left: Any, right: Any) -> Any:
    if isinstance(left, float):
        if right == 0:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)
        return left / right
    if right == 0:
        raise MossRuntimeError("Cannot divide by 0.")
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return _checked(quotient)


def _remainder(left: Any, right: Any) -> Any:
    if isinstance(left, float):
        try:
            return math.fmod(left, right)
        except ValueError:
            return math.nan
    if right == 0:
        raise MossRuntimeError("Cannot divide by 0.")
    if left == _I32_MIN and right == -1:
        raise MossRuntimeError("Integer overflow.")
    rest = abs(left) % abs(right)
    return -rest if left < 0 else rest


_BINARY_KINDS: dict[BinaryOperator, OpKind] = {
    BinaryOperator.EQ: OpKind.APPLY_EQ,
    BinaryOperator.GT: OpKind.APPLY_GT,
    BinaryOperator.LT: OpKind.APPLY_LT,
    BinaryOperator.GTE: OpKind.APPLY_GTE,
    BinaryOperator.LTE: OpKind.APPLY_LTE,
    BinaryOperator.ADD: OpKind.APPLY_ADD,
    BinaryOperator.SUB: OpKind.APPLY_SUB,
    BinaryOperator.MULT: OpKind.APPLY_MULT,
    BinaryOperator.DIV: OpKind.APPLY_DIV,
    BinaryOperator.MODULO: OpKind.APPLY_MODULO,
}

_BINARY_APPLY: dict[OpKind, Callable[[Any, Any], Any]] = {
    OpKind.APPLY_EQ: operator.eq,
    OpKind.APPLY_GT: operator.gt,
    OpKind.APPLY_LT: operator.lt,
    OpKind.APPLY_GTE: operator.ge,
    OpKind.APPLY_LTE: operator.le,
    OpKind.APPLY_ADD: lambda left, right: _checked(left + right),
    OpKind.APPLY_SUB: lambda left, right: _checked(left - right),
    OpKind.APPLY_MULT: lambda left, right: _checked(left * right),
    OpKind.APPLY_DIV: _divide,
    OpKind.APPLY_MODULO: _remainder,
}


def interpret_program(
    block: TypedExpr,
    exec_context: ExecContext,
    io: IoContext,
    builtin_bindings: Iterable[tuple[str, TypedExpr]],
    builtins: Mapping[BuiltinFuncId, BuiltinFunc],
) -> Any:
    """Run a typed program block and return the value it produces."""
    if not isinstance(block, TypedBlock):
        raise ValueError(f"a program must be a block, received {block!r}")

    machine = _Machine(exec_context, io, builtins)
    machine.push_stmts(block.stmts)

    for ident, expr in builtin_bindings:
        if not isinstance(expr, TypedFuncDeclare):
            raise ValueError(f"builtin {ident!r} is not a function declaration")
        exec_context.scope_stack.insert(ident, False, expr.func)

    machine.run()

    values = exec_context.value_stack
    return values.pop() if values else Void()


class _Machine:
    def __init__(
        self,
        exec_context: ExecContext,
        io: IoContext,
        builtins: Mapping[BuiltinFuncId, BuiltinFunc],
    ) -> None:
        self.exec = exec_context
        self.io = io
        self.builtins = builtins
        self._handlers: dict[OpKind, Callable[[Any], ControlFlow]] = {
            OpKind.EVAL_BLOCK: self._eval_block,
            OpKind.EVAL_STMT: self._eval_stmt,
            OpKind.EVAL_EXPR: self._eval_expr,
            OpKind.APPLY_STMT: self._apply_stmt,
            OpKind.APPLY_NEGATE: self._apply_negate,
            OpKind.APPLY_ASSIGNMENT: self._apply_assignment,
            OpKind.APPLY_DECLARATION: self._apply_declaration,
            OpKind.APPLY_FUNC_CALL: self._apply_func_call,
            OpKind.APPLY_BINDING: self._apply_binding,
            OpKind.PUSH_SCOPE: self._apply_push_scope,
            OpKind.POP_SCOPE: self._apply_pop_scope,
            OpKind.APPLY_IF: self._apply_if,
            OpKind.APPLY_IF_ELSE: self._apply_if_else,
            OpKind.PUSH_LOOP: self._push_loop,
            OpKind.APPLY_LIST: self._apply_list,
            OpKind.MARK_LOOP_START: lambda _: ControlFlow.CONTINUE,
            OpKind.MARK_BLOCK_START: lambda _: ControlFlow.CONTINUE,
        }

    # Stacks

    def push(self, kind: OpKind, payload: Any = None) -> None:
        self.exec.control_stack.append(ControlOp(kind, payload))

    def push_value(self, value: Any) -> None:
        self.exec.value_stack.append(value)

    def pop_value(self) -> Any:
        if not self.exec.value_stack:
            raise MossRuntimeError("Value stack is empty.")
        return self.exec.value_stack.pop()

    def push_stmts(self, stmts: Iterable[TypedStmt]) -> None:
        self.push(OpKind.MARK_BLOCK_START)
        for stmt in reversed(tuple(stmts)):
            self.push(OpKind.EVAL_STMT, stmt)

    # Main loop

    def run(self) -> None:
        control = self.exec.control_stack
        while control:
            op = control.pop()
            binary = _BINARY_APPLY.get(op.kind)
            if binary is not None:
                right = self.pop_value()
                left = self.pop_value()
                self.push_value(binary(left, right))
                continue

            flow = self._handlers[op.kind](op.payload)
            if flow is ControlFlow.BREAK:
                self._unwind_until(OpKind.MARK_LOOP_START)
            elif flow is ControlFlow.RETURN:
                self._unwind_until(OpKind.MARK_BLOCK_START)

    def _unwind_until(self, marker: OpKind) -> None:
        control = self.exec.control_stack
        while control:
            if control.pop().kind is marker:
                break

    # Evaluation

    def _eval_stmt(self, stmt: TypedStmt) -> ControlFlow:
        self.push(OpKind.APPLY_STMT)
        self.push(OpKind.EVAL_EXPR, stmt.expr)
        return ControlFlow.CONTINUE

    def _apply_stmt(self, _: Any) -> ControlFlow:
        values = self.exec.value_stack
        if not values or isinstance(values[-1], Void):
            return ControlFlow.CONTINUE
        return ControlFlow.RETURN

    def _eval_expr(self, expr: TypedExpr) -> ControlFlow:
        match expr:
            case TypedBinary(op=op, left=left, right=right):
                self.push(_BINARY_KINDS[op])
                self.push(OpKind.EVAL_EXPR, right)
                self.push(OpKind.EVAL_EXPR, left)
            case TypedNegate(inner=inner):
                self.push(OpKind.APPLY_NEGATE)
                self.push(OpKind.EVAL_EXPR, inner)
            case TypedAssignment(ident=ident, expr=value):
                self.push(OpKind.APPLY_ASSIGNMENT, ident)
                self.push(OpKind.EVAL_EXPR, value)
            case TypedDeclaration(ident=ident, is_mutable=is_mutable, expr=value):
                self.push(OpKind.APPLY_DECLARATION, (ident, is_mutable))
                self.push(OpKind.EVAL_EXPR, value)
            case TypedFuncCall(func_expr=func_expr, args=args):
                self.push(OpKind.APPLY_FUNC_CALL, args)
                self.push(OpKind.EVAL_EXPR, func_expr)
            case TypedIf(cond=cond, then=then):
                self.push(OpKind.APPLY_IF, then)
                self.push(OpKind.EVAL_EXPR, cond)
            case TypedIfElse(cond=cond, then=then, else_=else_):
                self.push(OpKind.APPLY_IF_ELSE, (then, else_))
                self.push(OpKind.EVAL_EXPR, cond)
            case TypedBlock() | BuiltinBlock():
                return self._eval_block(expr)
            case TypedLoop(block=body):
                self.push(OpKind.MARK_LOOP_START)
                return self._push_loop(body)
            case TypedBreak():
                return ControlFlow.BREAK
            case TypedLiteral(value=value):
                self.push_value(value)
            case TypedIdentifier(name=name):
                self.push_value(self.exec.scope_stack.lookup(name).value)
            case TypedFuncDeclare(func=func):
                self.push_value(func)
            case TypedList(items=items):
                self.push(OpKind.APPLY_LIST, len(items))
                for item in reversed(items):
                    self.push(OpKind.EVAL_EXPR, item)
            case _:
                raise ValueError(f"not a typed expression: {expr!r}")
        return ControlFlow.CONTINUE

    def _eval_block(self, block: Any) -> ControlFlow:
        if isinstance(block, TypedBlock):
            self.push_stmts(block.stmts)
        elif isinstance(block, BuiltinBlock):
            scope = self.exec.scope_stack
            args = [scope.lookup(param).value for param in block.params]
            func = self.builtins.get(block.builtin_id)
            if func is None:
                raise MossRuntimeError(
                    f"No implementation for builtin {block.builtin_id.value}."
                )
            self.push_value(func(self.io, args))
        else:
            raise ValueError(f"expected a block, received {block!r}")
        return ControlFlow.CONTINUE

    # Unary operations

    def _apply_negate(self, _: Any) -> ControlFlow:
        self.push_value(_checked(-self.pop_value()))
        return ControlFlow.CONTINUE

    def _apply_assignment(self, ident: str) -> ControlFlow:
        self.exec.scope_stack.mutate(ident, self.pop_value())
        self.push_value(Void())
        return ControlFlow.CONTINUE

    def _apply_declaration(self, payload: tuple[str, bool]) -> ControlFlow:
        ident, is_mutable = payload
        self.exec.scope_stack.insert(ident, is_mutable, self.pop_value())
        self.push_value(Void())
        return ControlFlow.CONTINUE

    # Function calls and scopes

    def _apply_func_call(self, args: tuple[TypedExpr, ...]) -> ControlFlow:
        func = self.pop_value()
        if not isinstance(func, TypedFunc):
            raise MossRuntimeError(f"Cannot invoke non-function value {func!r}.")

        self.push(OpKind.POP_SCOPE, not func.is_closure)
        self.push(OpKind.EVAL_BLOCK, func.block)
        for name, _ in func.params:
            self.push(OpKind.APPLY_BINDING, name)
        self.push(OpKind.PUSH_SCOPE, not func.is_closure)
        for arg in reversed(args):
            self.push(OpKind.EVAL_EXPR, arg)
        return ControlFlow.CONTINUE

    def _apply_binding(self, ident: str) -> ControlFlow:
        self.exec.scope_stack.insert(ident, False, self.pop_value())
        return ControlFlow.CONTINUE

    def _apply_push_scope(self, create_new_stack: bool) -> ControlFlow:
        if create_new_stack:
            self.exec.scope_stack.create_new_stack()
        else:
            self.exec.scope_stack.push_scope()
        return ControlFlow.CONTINUE

    def _apply_pop_scope(self, restore_previous_stack: bool) -> ControlFlow:
        if restore_previous_stack:
            self.exec.scope_stack.restore_previous_stack()
        else:
            self.exec.scope_stack.pop_scope()
        return ControlFlow.CONTINUE

    # Control flow

    def _apply_if(self, then: TypedExpr) -> ControlFlow:
        if self.pop_value():
            if not isinstance(then, TypedBlock):
                raise ValueError(f"expected a block, received {then!r}")
            self.push_stmts(then.stmts)
        return ControlFlow.CONTINUE

    def _apply_if_else(self, payload: tuple[TypedExpr, TypedExpr]) -> ControlFlow:
        then, else_ = payload
        branch = then if self.pop_value() else else_
        if isinstance(branch, TypedBlock):
            self.push_stmts(branch.stmts)
        elif isinstance(branch, TypedIfElse):
            self.push(OpKind.APPLY_IF_ELSE, (branch.then, branch.else_))
            self.push(OpKind.EVAL_EXPR, branch.cond)
        else:
            raise ValueError(f"unexpected if-else branch: {branch!r}")
        return ControlFlow.CONTINUE

    def _push_loop(self, body: TypedExpr) -> ControlFlow:
        self.push(OpKind.PUSH_LOOP, body)
        self.push(OpKind.POP_SCOPE, False)
        self.push(OpKind.EVAL_BLOCK, body)
        self.push(OpKind.PUSH_SCOPE, False)
        return ControlFlow.CONTINUE

    # Construction

    def _apply_list(self, size: int) -> ControlFlow:
        # Items come off the value stack last first.
        self.push_value([self.pop_value() for _ in range(size)])
        return ControlFlow.CONTINUE