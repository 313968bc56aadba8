"""Type checking: turns an untyped program tree into a typed one."""

from __future__ import annotations

from typing import Iterable

from mosslang.binary_analysis import analyze_binary_op
from mosslang.errors import MossTypeError, TypeErrorKind
from mosslang.scopes import ScopeStack
from mosslang.syntax import (
    Assignment,
    BinaryExpr,
    Block,
    Break,
    Declaration,
    Expr,
    FuncCall,
    FuncDeclare,
    Identifier,
    If,
    IfElse,
    ListExpr,
    Literal,
    Loop,
    Negate,
    Stmt,
    TypedAssignment,
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
from mosslang.typesys import ProtoType, Type, TypeBinding, TypeKind

# During analysis each name in a value scope is bound to its type.
AnalyzerScopeEntry = Type

_NUMERIC = (Type.INT, Type.FLOAT)


def analyze_program(
    program: Expr,
    builtin_funcs: Iterable[tuple[str, TypedExpr]],
    builtin_types: Iterable[tuple[str, TypeBinding]],
) -> TypedBlock:
    """Type check a program block with the given builtin functions and type names in scope."""
    analyzer = _Analyzer()
    for ident, binding in builtin_funcs:
        analyzer.values.insert(ident, False, binding.ty)
    for ident, type_binding in builtin_types:
        analyzer.types[ident] = type_binding
    return analyzer.block(program)


class _Analyzer:
    def __init__(self) -> None:
        self.values: ScopeStack[AnalyzerScopeEntry] = ScopeStack(MossTypeError)
        self.types: dict[str, TypeBinding] = {}

    # Dispatch

    def expr(self, expr: Expr, type_hint: Type | None = None) -> TypedExpr:
        match expr:
            case Block():
                return self.block(expr)
            case Literal():
                return self.literal(expr)
            case Identifier(name=name):
                return TypedIdentifier(name, self.values.lookup(name).value)
            case BinaryExpr():
                return analyze_binary_op(expr, self.expr)
            case Negate(inner=inner):
                return self.negate(inner)
            case Assignment():
                return self.assignment(expr)
            case Declaration():
                if isinstance(expr.expr, FuncDeclare):
                    return self.func_declaration(expr)
                return self.value_declaration(expr)
            case FuncDeclare():
                return self.func_declare(expr)
            case FuncCall():
                return self.func_call(expr)
            case If():
                return self.if_(expr)
            case IfElse():
                return self.if_else(expr)
            case Loop(block=body):
                return TypedLoop(self.block(body))
            case Break():
                return TypedBreak()
            case ListExpr(items=items):
                return self.list_(items, type_hint)
        raise ValueError(f"not an expression: {expr!r}")

    # Unary operations

    def negate(self, inner: Expr) -> TypedNegate:
        typed = self.expr(inner)
        if typed.ty not in _NUMERIC:
            raise MossTypeError(TypeErrorKind.UNARY_OP_WRONG_TYPE, "-", typed.ty)
        return TypedNegate(typed, typed.ty)

    def assignment(self, expr: Assignment) -> TypedAssignment:
        if not self.values.lookup(expr.ident).is_mutable:
            raise MossTypeError(TypeErrorKind.ASSIGN_IMMUTABLE, expr.ident)
        return TypedAssignment(expr.ident, self.expr(expr.expr))

    def value_declaration(self, decl: Declaration) -> TypedDeclaration:
        annotation = (
            None
            if decl.type_annotation is None
            else self.proto_type(decl.type_annotation)
        )
        value = self.expr(decl.expr, annotation)
        if value.ty == Type.VOID:
            raise MossTypeError(TypeErrorKind.ASSIGN_VOID)
        if annotation is not None and value.ty != annotation:
            raise MossTypeError(TypeErrorKind.ASSIGN_WRONG_TYPE, annotation, value.ty)
        self.values.insert(decl.ident, decl.is_mutable, value.ty)
        return TypedDeclaration(decl.ident, decl.is_mutable, value, Type.VOID)

    def func_declaration(self, decl: Declaration) -> TypedDeclaration:
        # The name is bound before the body is checked so that the body may refer to it.
        func = decl.expr
        assert isinstance(func, FuncDeclare)
        return_type = self.proto_type(func.return_type)
        param_types = [self.proto_type(proto) for _, proto in func.params]
        self.values.insert(
            decl.ident, decl.is_mutable, Type.func(*param_types, return_type)
        )
        value = self.expr(func)
        if value.ty == Type.VOID:
            raise MossTypeError(TypeErrorKind.ASSIGN_VOID)
        return TypedDeclaration(decl.ident, decl.is_mutable, value, Type.VOID)

    # Postfix operations

    def func_call(self, call: FuncCall) -> TypedFuncCall:
        callee = self.expr(call.func)
        args = [self.expr(arg) for arg in call.args]

        if callee.ty.kind is not TypeKind.FUNC:
            raise MossTypeError(TypeErrorKind.INVOKE_NON_FUNC, callee.ty)

        param_types = list(callee.ty.param_types)
        return_type = callee.ty.return_type

        if len(param_types) != len(args):
            raise MossTypeError(
                TypeErrorKind.INVOKE_WRONG_SIGNATURE, param_types, args, call.span
            )
        for param_type, arg in zip(param_types, args):
            if arg.ty != param_type and param_type != Type.ANY:
                raise MossTypeError(
                    TypeErrorKind.INVOKE_WRONG_SIGNATURE, param_types, args, call.span
                )

        return TypedFuncCall(callee, tuple(args), return_type)

    # Primaries

    @staticmethod
    def literal(literal: Literal) -> TypedLiteral:
        value = literal.value
        if isinstance(value, bool):
            return TypedLiteral(value, Type.BOOL)
        if isinstance(value, int):
            return TypedLiteral(value, Type.INT)
        if isinstance(value, float):
            return TypedLiteral(value, Type.FLOAT)
        if isinstance(value, str):
            return TypedLiteral(value, Type.STR)
        raise ValueError(f"unsupported literal value: {value!r}")

    def func_declare(self, func: FuncDeclare) -> TypedFuncDeclare:
        if not isinstance(func.block, Block):
            raise ValueError("a function body must be a block")
        span = func.block.span

        if func.is_closure:
            self.values.push_scope()
        else:
            self.values.create_new_stack()
        try:
            for ident, proto in func.params:
                self.values.insert(ident, False, self.proto_type(proto))
            body = self.block(func.block)
        finally:
            if func.is_closure:
                self.values.pop_scope()
            else:
                self.values.restore_previous_stack()

        params = tuple((ident, self.proto_type(proto)) for ident, proto in func.params)
        declared = self.proto_type(func.return_type)
        if declared != body.ty:
            raise MossTypeError(
                TypeErrorKind.FUNC_WRONG_RETURN_TYPE, declared, body.ty, span
            )

        typed = TypedFunc(params=params, block=body, is_closure=func.is_closure)
        return TypedFuncDeclare(typed, Type.func(*(ty for _, ty in params), declared))

    def if_(self, expr: If) -> TypedIf:
        cond = self.condition(expr.cond)
        then = self.block(expr.then)
        return TypedIf(cond, then, then.ty)

    def if_else(self, expr: IfElse) -> TypedIfElse:
        cond = self.condition(expr.cond)
        then = self.block(expr.then)
        else_ = self.expr(expr.else_)
        if then.ty != else_.ty:
            raise MossTypeError(
                TypeErrorKind.IF_ELSE_BLOCK_TYPE_MISMATCH, then.ty, else_.ty
            )
        return TypedIfElse(cond, then, else_, then.ty)

    def condition(self, expr: Expr) -> TypedExpr:
        cond = self.expr(expr)
        if cond.ty != Type.BOOL:
            raise MossTypeError(TypeErrorKind.IF_ELSE_CONDITION_NON_BOOL, cond.ty)
        return cond

    def block(self, block: Expr) -> TypedBlock:
        if not isinstance(block, Block):
            raise ValueError(f"expected a block, received {block!r}")
        self.values.push_scope()
        try:
            stmts = tuple(self.stmt(stmt) for stmt in block.stmts)
        finally:
            self.values.pop_scope()
        ty = next(
            (stmt.expr.ty for stmt in stmts if stmt.expr.ty != Type.VOID), Type.VOID
        )
        return TypedBlock(stmts, ty)

    def stmt(self, stmt: Stmt) -> TypedStmt:
        return TypedStmt(self.expr(stmt.expr))

    def list_(self, items: tuple[Expr, ...], type_hint: Type | None) -> TypedList:
        element_hint: Type | None = None
        if type_hint is not None:
            if type_hint.kind is not TypeKind.LIST:
                raise MossTypeError(TypeErrorKind.EXPECTED_TYPE_RECEIVED_LIST, type_hint)
            element_hint = type_hint.element

        typed_items = tuple(self.expr(item) for item in items)

        if typed_items:
            element = typed_items[0].ty
        elif element_hint is not None:
            element = element_hint
        else:
            raise MossTypeError(TypeErrorKind.AMBIGUOUS_LIST_TYPE)

        return TypedList(typed_items, Type.list_of(element))

    # Type names

    def proto_type(self, proto: ProtoType) -> Type:
        binding = self.types.get(proto.name)
        if binding is None:
            raise MossTypeError(TypeErrorKind.SCOPE_BINDING_NOT_FOUND, proto.name)

        if not proto.is_applied:
            if binding.is_applied:
                raise MossTypeError(
                    TypeErrorKind.APPLIED_TYPE_WRONG_NUMBER_ARGS,
                    proto.name,
                    binding.arity,
                    0,
                )
            assert binding.ty is not None
            return binding.ty

        inners = proto.args or ()
        if not binding.is_applied:
            raise MossTypeError(
                TypeErrorKind.APPLIED_TYPE_WRONG_NUMBER_ARGS, proto.name, 0, len(inners)
            )
        if len(inners) != binding.arity:
            raise MossTypeError(
                TypeErrorKind.APPLIED_TYPE_WRONG_NUMBER_ARGS,
                proto.name,
                binding.arity,
                len(inners),
            )

        resolved = [self.proto_type(inner) for inner in inners]
        if proto.name == "Func":
            return Type.func(*resolved)
        if proto.name == "List":
            return Type.list_of(resolved[0])
        raise ValueError(f"no constructor for applied type {proto.name}")