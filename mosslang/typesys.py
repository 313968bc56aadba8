"""Types of the language and the bindings that name them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar


class TypeKind(enum.Enum):
    """The shape of a type; the value is its display name where it has a fixed one."""

    ANY = "Any"
    BOOL = "Bool"
    INT = "Int"
    FLOAT = "Float"
    FUNC = "Func"
    LIST = "List"
    STR = "String"
    UNKNOWN = "Unknown"
    USER_DEFINED = "UserDefined"
    VOID = "Void"
    APPLIED = "Applied"


def _join(types: tuple[Type, ...]) -> str:
    return ", ".join(str(t) for t in types)


@dataclass(frozen=True)
class Type:
    """A resolved type.

    ``args`` holds the element type of a list, the parameter types followed by
    the return type of a function, or the outer type followed by its arguments
    for an applied type.
    """

    kind: TypeKind
    args: tuple[Type, ...] = ()
    name: str = ""

    ANY: ClassVar[Type]
    BOOL: ClassVar[Type]
    INT: ClassVar[Type]
    FLOAT: ClassVar[Type]
    STR: ClassVar[Type]
    UNKNOWN: ClassVar[Type]
    VOID: ClassVar[Type]

    @classmethod
    def func(cls, *types: Type) -> Type:
        """A function type: parameter types followed by the return type."""
        return cls(TypeKind.FUNC, tuple(types))

    @classmethod
    def list_of(cls, element: Type) -> Type:
        return cls(TypeKind.LIST, (element,))

    @classmethod
    def user_defined(cls, name: str) -> Type:
        return cls(TypeKind.USER_DEFINED, name=name)

    @classmethod
    def applied(cls, outer: Type, *inners: Type) -> Type:
        return cls(TypeKind.APPLIED, (outer, *inners))

    @property
    def element(self) -> Type:
        if self.kind is not TypeKind.LIST:
            raise ValueError(f"{self} is not a list type")
        return self.args[0]

    @property
    def param_types(self) -> tuple[Type, ...]:
        if self.kind is not TypeKind.FUNC:
            raise ValueError(f"{self} is not a function type")
        return self.args[:-1]

    @property
    def return_type(self) -> Type:
        if self.kind is not TypeKind.FUNC:
            raise ValueError(f"{self} is not a function type")
        return self.args[-1]

    def __str__(self) -> str:
        kind = self.kind
        if kind is TypeKind.LIST:
            return f"List<{self.args[0]}>"
        if kind is TypeKind.FUNC:
            return f"Func<{_join(self.args)}>"
        if kind is TypeKind.USER_DEFINED:
            return self.name
        if kind is TypeKind.APPLIED:
            return f"{self.args[0]}<{_join(self.args[1:])}>"
        return kind.value


Type.ANY = Type(TypeKind.ANY)
Type.BOOL = Type(TypeKind.BOOL)
Type.INT = Type(TypeKind.INT)
Type.FLOAT = Type(TypeKind.FLOAT)
Type.STR = Type(TypeKind.STR)
Type.UNKNOWN = Type(TypeKind.UNKNOWN)
Type.VOID = Type(TypeKind.VOID)


@dataclass(frozen=True)
class ProtoType:
    """A type as written in source, before its names are resolved.

    ``args`` is ``None`` for a bare name and a tuple for an applied name.
    """

    name: str
    args: tuple[ProtoType, ...] | None = None

    @classmethod
    def atomic(cls, name: str) -> ProtoType:
        return cls(name)

    @classmethod
    def applied(cls, name: str, *args: ProtoType) -> ProtoType:
        return cls(name, tuple(args))

    @property
    def is_applied(self) -> bool:
        return self.args is not None


@dataclass(frozen=True)
class TypeBinding:
    """What a type name stands for: a concrete type, or a constructor of some arity."""

    ty: Type | None = None
    arity: int | None = None

    @classmethod
    def atomic(cls, ty: Type) -> TypeBinding:
        return cls(ty=ty)

    @classmethod
    def applied(cls, arity: int) -> TypeBinding:
        return cls(arity=arity)

    @property
    def is_applied(self) -> bool:
        return self.arity is not None