"""Syntax trees: the untyped tree a parser builds and the typed tree the analyzer produces."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from mosslang.typesys import ProtoType, Type


@dataclass(frozen=True)
class Span:
    """Start and end offsets of a piece of source text."""

    start: int
    end: int


class BinaryOperator(enum.Enum):
    """Binary operators; the value is the operator's symbol."""

    EQ = "=="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    ADD = "+"
    SUB = "-"
    MULT = "*"
    DIV = "/"
    MODULO = "%"


class BuiltinFuncId(enum.Enum):
    """Functions whose bodies are supplied by the host rather than by source code."""

    INT = "int"
    PRINT_LINE = "print_line"
    PUSH = "push"
    READ_LINE = "read_line"
    STR = "str"


# Untyped tree


@dataclass(frozen=True)
class BinaryExpr:
    op: BinaryOperator
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Negate:
    inner: Expr


@dataclass(frozen=True)
class Assignment:
    ident: str
    expr: Expr


@dataclass(frozen=True)
class Declaration:
    ident: str
    type_annotation: ProtoType | None
    expr: Expr
    is_mutable: bool


@dataclass(frozen=True)
class FuncCall:
    func: Expr
    args: tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class If:
    cond: Expr
    then: Expr


@dataclass(frozen=True)
class IfElse:
    cond: Expr
    then: Expr
    else_: Expr


@dataclass(frozen=True)
class Block:
    stmts: tuple[Stmt, ...]
    span: Span


@dataclass(frozen=True)
class Loop:
    block: Expr


@dataclass(frozen=True)
class Break:
    pass


@dataclass(frozen=True)
class Literal:
    """An int, float, string or bool written in source."""

    value: int | float | str | bool


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class FuncDeclare:
    params: tuple[tuple[str, ProtoType], ...]
    return_type: ProtoType
    block: Expr
    is_closure: bool


@dataclass(frozen=True)
class ListExpr:
    items: tuple[Expr, ...]


@dataclass(frozen=True)
class Stmt:
    expr: Expr


Expr = Union[
    BinaryExpr,
    Negate,
    Assignment,
    Declaration,
    FuncCall,
    If,
    IfElse,
    Block,
    Loop,
    Break,
    Literal,
    Identifier,
    FuncDeclare,
    ListExpr,
]


# Typed tree


@dataclass(frozen=True)
class TypedStmt:
    expr: TypedExpr


@dataclass(frozen=True)
class TypedBinary:
    op: BinaryOperator
    left: TypedExpr
    right: TypedExpr
    ty: Type


@dataclass(frozen=True)
class TypedNegate:
    inner: TypedExpr
    ty: Type


@dataclass(frozen=True)
class TypedAssignment:
    ident: str
    expr: TypedExpr

    @property
    def ty(self) -> Type:
        return Type.VOID


@dataclass(frozen=True)
class TypedDeclaration:
    ident: str
    is_mutable: bool
    expr: TypedExpr
    ty: Type = Type.VOID


@dataclass(frozen=True)
class TypedFuncCall:
    func_expr: TypedExpr
    args: tuple[TypedExpr, ...]
    ty: Type


@dataclass(frozen=True)
class TypedIf:
    cond: TypedExpr
    then: TypedExpr
    ty: Type


@dataclass(frozen=True)
class TypedIfElse:
    cond: TypedExpr
    then: TypedExpr
    else_: TypedExpr
    ty: Type


@dataclass(frozen=True)
class TypedBlock:
    """A block of statements to be interpreted."""

    stmts: tuple[TypedStmt, ...]
    ty: Type


@dataclass(frozen=True)
class BuiltinBlock:
    """A function body carried out by a host function, reading the named parameters."""

    params: tuple[str, ...]
    builtin_id: BuiltinFuncId
    ty: Type


@dataclass(frozen=True)
class TypedLoop:
    block: TypedExpr

    @property
    def ty(self) -> Type:
        return self.block.ty


@dataclass(frozen=True)
class TypedBreak:
    @property
    def ty(self) -> Type:
        return Type.VOID


@dataclass(frozen=True)
class TypedLiteral:
    value: int | float | str | bool
    ty: Type


@dataclass(frozen=True)
class TypedIdentifier:
    name: str
    ty: Type


@dataclass(frozen=True)
class TypedFunc:
    """A function value: its parameters, its body and whether it sees the enclosing scope."""

    params: tuple[tuple[str, Type], ...]
    block: TypedBlock | BuiltinBlock
    is_closure: bool

    def __str__(self) -> str:
        types = [str(ty) for _, ty in self.params]
        types.append(str(self.block.ty))
        return f"Func<{', '.join(types)}>"


@dataclass(frozen=True)
class TypedFuncDeclare:
    func: TypedFunc
    ty: Type


@dataclass(frozen=True)
class TypedList:
    items: tuple[TypedExpr, ...]
    ty: Type


TypedExpr = Union[
    TypedBinary,
    TypedNegate,
    TypedAssignment,
    TypedDeclaration,
    TypedFuncCall,
    TypedIf,
    TypedIfElse,
    TypedBlock,
    BuiltinBlock,
    TypedLoop,
    TypedBreak,
    TypedLiteral,
    TypedIdentifier,
    TypedFuncDeclare,
    TypedList,
]