#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/scope.py
==================

Scope resolution over an externally built scope graph.

The scope manager (an eslint-scope style analysis of the same tree) is
consumed through the small protocols below; scopewalk never builds scopes
itself.  :class:`ScopeResolver` answers two questions for any node of the
traversed tree:

- which lexical scope encloses it (:meth:`ScopeResolver.get_scope`);
- which declaration a name refers to from there
  (:meth:`ScopeResolver.get_binding`).

Both only read parent links from the traversal's :class:`ParentMap` and the
scope graph; neither mutates anything.
"""

from __future__ import annotations

import enum
from typing import Any, Iterator, Optional, Protocol, Sequence, runtime_checkable

from scopewalk.nodes import ParentMap, node_type

__all__ = [
    "Scope",
    "ScopeManager",
    "ScopeResolver",
    "ScopeType",
    "Variable",
    "iter_scope_chain",
]


class ScopeType(str, enum.Enum):
    """Scope type tags reported by the scope manager.

    Members compare equal to the plain strings, so ``scope.type ==
    ScopeType.FUNCTION`` works whether the manager reports enum members or
    strings.
    """
    GLOBAL = "global"
    MODULE = "module"
    FUNCTION = "function"
    FUNCTION_EXPRESSION_NAME = "function-expression-name"
    BLOCK = "block"
    SWITCH = "switch"
    CATCH = "catch"
    WITH = "with"
    FOR = "for"
    CLASS = "class"
    CLASS_FIELD_INITIALIZER = "class-field-initializer"
    CLASS_STATIC_BLOCK = "class-static-block"
    DECLARE_MODULE = "declare-module"
    TYPE = "type"


@runtime_checkable
class Variable(Protocol):
    """A name in a scope.  Empty ``defs`` means referenced, never declared."""
    name: str
    defs: Sequence[Any]


@runtime_checkable
class Scope(Protocol):
    type: str
    variables: Sequence[Variable]
    upper: Optional["Scope"]
    child_scopes: Sequence["Scope"]


@runtime_checkable
class ScopeManager(Protocol):
    scopes: Sequence[Scope]

    def acquire(self, node: Any, inner: bool = False) -> Optional[Scope]:
        """The scope created by *node*, if any.

        When a node creates several scopes, ``inner=True`` asks for the
        innermost one and ``inner=False`` for the outermost.
        """
        ...

    def get_declared_variables(self, node: Any) -> Sequence[Variable]:
        ...


def iter_scope_chain(scope: Optional[Scope]) -> Iterator[Scope]:
    """Yield *scope* and every enclosing scope up to the outermost."""
    while scope is not None:
        yield scope
        scope = scope.upper


class ScopeResolver:
    """Finds enclosing scopes and bindings for nodes of one traversal.

    Parameters
    ----------
    scope_manager:
        The scope graph of the traversed tree.
    parents:
        Parent links recorded during discovery.
    root:
        The traversal root.  Like any node of ``program_type``, it resolves
        to its *outer* scope: a program can carry both a global scope and a
        module (or CommonJS function) scope, and callers want the global one.
    """

    def __init__(
        self,
        scope_manager: ScopeManager,
        parents: ParentMap,
        root: Any = None,
        program_type: str = "Program",
    ) -> None:
        self.scope_manager = scope_manager
        self.parents = parents
        self.root = root
        self.program_type = program_type

    def _is_program(self, node: Any) -> bool:
        return node is self.root or node_type(node) == self.program_type

    def get_scope(self, node: Any) -> Scope:
        """Return the nearest scope enclosing *node*.

        A synthetic ``function-expression-name`` scope (which only binds a
        named function expression's own name) is never returned; its single
        child, the function's scope, is returned instead.  When no node on
        the path to the root owns a scope, the outermost scope is returned.
        """
        inner = not self._is_program(node)
        current: Optional[Any] = node
        while current is not None:
            scope = self.scope_manager.acquire(current, inner)
            if scope is not None:
                if scope.type == ScopeType.FUNCTION_EXPRESSION_NAME:
                    return scope.child_scopes[0]
                return scope
            current = self.parents.get(current)
        return self.scope_manager.scopes[0]

    def get_binding(self, name: str, node: Any) -> Optional[Variable]:
        """Return the variable that *name* resolves to as seen from *node*.

        Scopes are searched innermost first.  Only variables with at least
        one definition count, so an implicit global reference never shadows
        a real outer declaration.
        """
        for scope in iter_scope_chain(self.get_scope(node)):
            for variable in scope.variables:
                if variable.defs and variable.name == name:
                    return variable
        return None
