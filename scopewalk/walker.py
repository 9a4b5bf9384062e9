#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/walker.py
===================

Schema-driven depth-first walker over untyped AST nodes.

Provides:
- ``VisitResult``: what an ``enter``/``leave`` callback asks the walker to do
- ``SimpleTraverser``: the walker itself
- ``walk``: one-shot convenience wrapper
- ``iter_child_nodes``: the children of one node, in schema order

Ordering: ``enter(node, parent)`` fires before any descendant is visited,
children follow the visitor-key field order (sequence fields by ascending
index), and ``leave(node, parent)`` fires after every descendant.

Callbacks steer the walk through their return value:

============  ================================================================
``CONTINUE``  (or ``None``) keep going.
``SKIP``      from ``enter``: do not visit the node's children and do not
              fire its ``leave``; carry on with the next sibling.  From
              ``leave`` it has no further effect.
``BREAK``     from ``enter`` or ``leave``: end the walk at once.  No more
              callbacks fire and ``traverse`` returns normally.
============  ================================================================

Exceptions raised by a callback propagate out of ``traverse`` unchanged.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Iterator, List, NamedTuple, Optional, Sequence

from scopewalk.nodes import get_field, is_node, node_type
from scopewalk.visitor_keys import VISITOR_KEYS, VisitorKeys, get_keys

__all__ = [
    "SimpleTraverser",
    "TraverserCallback",
    "VisitResult",
    "iter_child_nodes",
    "walk",
]

logger = logging.getLogger(__name__)


class VisitResult(enum.Enum):
    """Control value returned by walker and listener callbacks."""
    CONTINUE = "continue"
    SKIP = "skip"
    BREAK = "break"

    @classmethod
    def coerce(cls, value: Any) -> "VisitResult":
        """Map a callback's return value onto a ``VisitResult``.

        Anything that is not a ``VisitResult`` (including ``None``) means
        ``CONTINUE``.
        """
        if isinstance(value, cls):
            return value
        return cls.CONTINUE


TraverserCallback = Callable[[Any, Optional[Any]], Optional[VisitResult]]


def _noop(node: Any, parent: Optional[Any]) -> None:
    return None


def iter_child_nodes(node: Any, keys: Sequence[str]) -> Iterator[Any]:
    """Yield the child nodes of *node* named by *keys*.

    Fields are read lazily, one at a time.  ``None`` and other non-node
    values, whether a whole field or an element of a sequence field, are
    skipped.
    """
    for key in keys:
        child = get_field(node, key)
        if isinstance(child, (list, tuple)):
            for item in child:
                if is_node(item):
                    yield item
        elif is_node(child):
            yield child


class _Frame(NamedTuple):
    node: Any
    parent: Optional[Any]
    children: Iterator[Any]


_EXHAUSTED = object()


class SimpleTraverser:
    """A very simple traverser for AST trees.

    The walk uses an explicit stack, so tree depth is not bounded by the
    interpreter's recursion limit.
    """

    def __init__(self, visitor_keys: Optional[VisitorKeys] = None) -> None:
        self.visitor_keys: VisitorKeys = (
            VISITOR_KEYS if visitor_keys is None else visitor_keys
        )

    def traverse(
        self,
        root: Any,
        enter: Optional[TraverserCallback] = None,
        leave: Optional[TraverserCallback] = None,
    ) -> None:
        """Walk the tree rooted at *root*.

        A *root* that is not a node (``None``, a string, a number) is an
        empty tree and produces no callbacks.

        Raises
        ------
        UnknownNodeTypeError
            When a visited node's type has no visitor keys.  The node's
            ``enter`` has already fired at that point.
        """
        if not is_node(root):
            return
        on_enter = enter or _noop
        on_leave = leave or _noop

        stack: List[_Frame] = []
        if self._open(root, None, on_enter, stack) is VisitResult.BREAK:
            logger.debug("walk stopped at root %s", node_type(root))
            return

        while stack:
            frame = stack[-1]
            child = next(frame.children, _EXHAUSTED)
            if child is _EXHAUSTED:
                stack.pop()
                result = VisitResult.coerce(on_leave(frame.node, frame.parent))
                if result is VisitResult.BREAK:
                    logger.debug("walk stopped leaving %s", node_type(frame.node))
                    return
                continue
            if self._open(child, frame.node, on_enter, stack) is VisitResult.BREAK:
                logger.debug("walk stopped entering %s", node_type(child))
                return

    def _open(
        self,
        node: Any,
        parent: Optional[Any],
        enter: TraverserCallback,
        stack: List[_Frame],
    ) -> VisitResult:
        # A skipped node is never pushed, so neither its children nor its
        # leave callback run.
        result = VisitResult.coerce(enter(node, parent))
        if result is VisitResult.CONTINUE:
            keys = get_keys(node, self.visitor_keys)
            stack.append(_Frame(node, parent, iter_child_nodes(node, keys)))
        return result


def walk(
    root: Any,
    enter: Optional[TraverserCallback] = None,
    leave: Optional[TraverserCallback] = None,
    *,
    visitor_keys: Optional[VisitorKeys] = None,
) -> None:
    """Walk *root* once with a fresh :class:`SimpleTraverser`."""
    SimpleTraverser(visitor_keys).traverse(root, enter, leave)
