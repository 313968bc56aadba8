"""Nested scopes of named bindings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class _ScopeErrors(Protocol):
    @classmethod
    def scope_binding_not_found(cls, ident: str) -> Exception: ...

    @classmethod
    def scope_binding_already_exists(cls, ident: str) -> Exception: ...


@dataclass
class ScopeEntry(Generic[T]):
    is_mutable: bool
    value: T


class ScopeStack(Generic[T]):
    """A stack of scopes, searched innermost first.

    A function that is not a closure runs on a fresh stack. Only one earlier
    stack is kept, so a call made from inside such a function replaces it.
    """

    def __init__(self, error_type: type[_ScopeErrors]) -> None:
        self._errors = error_type
        self._current: list[dict[str, ScopeEntry[T]]] = [{}]
        self._previous: list[dict[str, ScopeEntry[T]]] | None = None

    def push_scope(self) -> None:
        self._current.append({})

    def pop_scope(self) -> None:
        if self._current:
            self._current.pop()

    def create_new_stack(self) -> None:
        self._previous = self._current
        self._current = [{}]

    def restore_previous_stack(self) -> None:
        if self._previous is not None:
            self._current = self._previous
            self._previous = None

    def lookup(self, ident: str) -> ScopeEntry[T]:
        for scope in reversed(self._current):
            entry = scope.get(ident)
            if entry is not None:
                return entry
        raise self._errors.scope_binding_not_found(ident)

    def insert(self, ident: str, is_mutable: bool, value: T) -> None:
        scope = self._current[-1]
        if ident in scope:
            raise self._errors.scope_binding_already_exists(ident)
        scope[ident] = ScopeEntry(is_mutable, value)

    def mutate(self, ident: str, value: T) -> None:
        self.lookup(ident).value = value

    def __repr__(self) -> str:
        return f"ScopeStack(current={self._current!r}, previous={self._previous!r})"