#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/errors.py
===================

Exception types raised by the traversal engine.

Hierarchy::

    ScopewalkError (base)
    ├── UnknownNodeTypeError  - node type missing from the visitor-key schema
    └── SelectorSyntaxError   - malformed listener selector

Failures raised by visitor callbacks are never wrapped.  The orchestrator
re-raises the original exception after setting ``exc.current_node`` to the
node whose event was being dispatched; see :func:`annotate_current_node`.

Skipping a subtree or stopping a walk is not an error and never goes through
this module; callbacks return a :class:`scopewalk.walker.VisitResult`.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ScopewalkError",
    "UnknownNodeTypeError",
    "SelectorSyntaxError",
    "annotate_current_node",
    "current_node_of",
]


class ScopewalkError(Exception):
    """Base exception for all scopewalk errors."""
    pass


class UnknownNodeTypeError(ScopewalkError):
    """Raised when a node's type has no entry in the visitor-key schema.

    This always signals a mismatch between the parser and the schema in
    use, so the walk is aborted rather than silently skipping the node.
    """

    def __init__(self, node_type: str, node: Any = None):
        self.node_type = node_type
        self.node = node
        super().__init__(f'No visitor keys found for node type "{node_type}".')


class SelectorSyntaxError(ScopewalkError):
    """Raised when a listener selector string cannot be parsed."""

    def __init__(self, message: str, selector: str = "", position: int = -1):
        self.selector = selector
        self.position = position
        if position >= 0 and selector:
            pointer = " " * position + "^"
            message = f"{message}\n  {selector}\n  {pointer}"
        super().__init__(message)


def annotate_current_node(exc: BaseException, node: Any) -> BaseException:
    """Attach the node being visited to *exc* and return it.

    The exception keeps its type, message and traceback.
    """
    exc.current_node = node  # type: ignore[attr-defined]
    return exc


def current_node_of(exc: BaseException) -> Optional[Any]:
    """Return the node attached by :func:`annotate_current_node`, if any."""
    return getattr(exc, "current_node", None)
