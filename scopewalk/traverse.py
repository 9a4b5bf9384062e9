#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/traverse.py
=====================

Single-pass, scope-aware traversal of an AST.

Usage::

    from scopewalk import traverse

    def visitor(context):
        def on_return(node):
            scope = context.get_scope()
            if context.get_binding("undefined") is not None:
                report(node, "shadowed undefined in %s scope" % scope.type)

        return {"ReturnStatement": on_return}

    traverse(program, scope_manager, visitor)

How a traversal runs:

1. *Discovery.*  The walker visits the whole tree once, recording every
   node's parent and an ordered queue of enter/leave events.  No visitor
   code has run yet, so every parent link exists before any query is made.
2. *Registration.*  ``visitor(context)`` is called exactly once; it
   returns ``{selector: callback}``.  Each callback is registered with the
   dispatcher.
3. *Replay.*  The event queue is replayed through the dispatcher, which
   fires every callback whose selector matches the event's node.  The
   context's current node follows the replay.

A callback may return :class:`~scopewalk.walker.VisitResult` ``SKIP`` (on
enter) to skip the node's subtree and its leave event, or ``BREAK`` to end
the traversal quietly.  An exception raised by a callback aborts the
traversal; it propagates unchanged apart from a ``current_node``
attribute naming the node being dispatched.
"""

from __future__ import annotations

import enum
import logging
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
)

from scopewalk.config import DEFAULT_CONFIG, TraverseConfig
from scopewalk.errors import annotate_current_node
from scopewalk.nodes import ParentMap
from scopewalk.scope import Scope, ScopeManager, ScopeResolver, Variable
from scopewalk.selectors import Listener, NodeEventDispatcher
from scopewalk.walker import SimpleTraverser, VisitResult

__all__ = [
    "EventDispatcher",
    "Phase",
    "TraversalContext",
    "TraversalEvent",
    "Traverser",
    "Visitor",
    "traverse",
]

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    ENTER = "enter"
    LEAVE = "leave"


class TraversalEvent(NamedTuple):
    phase: Phase
    node: Any


class EventDispatcher(Protocol):
    """What the replay loop needs from a dispatcher."""

    def register(self, selector: str, callback: Listener) -> None: ...

    def enter_node(self, node: Any) -> Optional[VisitResult]: ...

    def leave_node(self, node: Any) -> Optional[VisitResult]: ...


DispatcherFactory = Callable[[Callable[[Any], Optional[Any]]], EventDispatcher]


class TraversalContext:
    """Read-only view of a traversal handed to the visitor factory.

    Queries default to the node currently being dispatched.
    """

    __slots__ = ("_traverser",)

    def __init__(self, traverser: "Traverser") -> None:
        self._traverser = traverser

    @property
    def current_node(self) -> Any:
        return self._traverser.current_node

    def get_declared_variables(self, node: Any) -> Sequence[Variable]:
        """Gets the variables that were declared by the given node."""
        return self._traverser.scope_manager.get_declared_variables(node)

    def get_scope(self, node: Any = None) -> Scope:
        """Gets the scope for the given node, by default the current one."""
        if node is None:
            node = self._traverser.current_node
        return self._traverser.resolver.get_scope(node)

    def get_binding(self, name: str) -> Optional[Variable]:
        """Gets the nearest declared variable called *name*, looking from
        the current node's scope outwards."""
        return self._traverser.resolver.get_binding(
            name, self._traverser.current_node
        )

    def get_parent(self, node: Any = None) -> Optional[Any]:
        if node is None:
            node = self._traverser.current_node
        return self._traverser.parents.get(node)

    def get_ancestors(self, node: Any = None) -> List[Any]:
        """Ancestors of *node* (default: current node), root first."""
        if node is None:
            node = self._traverser.current_node
        ancestors = list(self._traverser.parents.ancestors(node))
        ancestors.reverse()
        return ancestors


Visitor = Callable[[TraversalContext], Mapping[str, Optional[Listener]]]


class Traverser:
    """One traversal of one tree.

    ``run()`` performs discovery, registration and replay; the steps are
    also available individually.  A ``Traverser`` is single-use.
    """

    def __init__(
        self,
        ast: Any,
        scope_manager: ScopeManager,
        visitor: Visitor,
        *,
        config: Optional[TraverseConfig] = None,
        dispatcher_factory: Optional[DispatcherFactory] = None,
    ) -> None:
        self.ast = ast
        self.scope_manager = scope_manager
        self.visitor = visitor
        self.config = config or DEFAULT_CONFIG

        # Validate config
        for w in self.config.validate():
            logger.warning("TraverseConfig: %s", w)
        self._ran = False

        self.parents = ParentMap()
        self.events: List[TraversalEvent] = []
        # enter-event index -> index of the matching leave event
        self._leave_index: Dict[int, int] = {}
        self.current_node: Any = ast

        self.resolver = ScopeResolver(
            scope_manager,
            self.parents,
            root=ast,
            program_type=self.config.program_type,
        )
        factory = dispatcher_factory or NodeEventDispatcher
        self.dispatcher: EventDispatcher = factory(self.parents.get)
        self.context = TraversalContext(self)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def discover(self) -> List[TraversalEvent]:
        """Record parent links and the full enter/leave event order."""
        open_enters: List[int] = []

        def enter(node: Any, parent: Optional[Any]) -> None:
            self.parents.set(node, parent)
            open_enters.append(len(self.events))
            self.events.append(TraversalEvent(Phase.ENTER, node))

        def leave(node: Any, parent: Optional[Any]) -> None:
            self._leave_index[open_enters.pop()] = len(self.events)
            self.events.append(TraversalEvent(Phase.LEAVE, node))

        SimpleTraverser(self.config.visitor_keys).traverse(self.ast, enter, leave)
        logger.debug("discovered %d nodes, %d events", len(self.parents), len(self.events))
        return self.events

    def register(self) -> None:
        """Build the visitor's listeners and hand them to the dispatcher."""
        listeners = self.visitor(self.context)
        registered = 0
        for selector, listener in listeners.items():
            if listener is not None:
                self.dispatcher.register(selector, listener)
                registered += 1
        logger.debug("registered %d listeners", registered)

    def replay(self) -> None:
        """Dispatch the recorded events in order."""
        events = self.events
        index = 0
        while index < len(events):
            phase, node = events[index]
            self.current_node = node
            try:
                if phase is Phase.ENTER:
                    result = self.dispatcher.enter_node(node)
                else:
                    result = self.dispatcher.leave_node(node)
            except BaseException as exc:
                annotate_current_node(exc, node)
                raise

            result = VisitResult.coerce(result)
            if result is VisitResult.BREAK:
                logger.debug("traversal stopped at event %d of %d", index, len(events))
                return
            if result is VisitResult.SKIP and phase is Phase.ENTER:
                index = self._leave_index[index] + 1
                continue
            index += 1

    def run(self) -> None:
        if self._ran:
            raise RuntimeError("Traverser instances are single-use")
        self._ran = True
        self.discover()
        self.register()
        self.replay()


def traverse(
    ast: Any,
    scope_manager: ScopeManager,
    visitor: Visitor,
    *,
    config: Optional[TraverseConfig] = None,
    dispatcher_factory: Optional[DispatcherFactory] = None,
) -> None:
    """Traverse *ast* once, dispatching *visitor*'s listeners.

    Raises
    ------
    UnknownNodeTypeError
        If the tree holds a node type missing from the visitor keys.  This
        is detected during discovery, before the visitor factory runs.
    BaseException
        The first exception raised by a listener, with ``current_node`` set.
        ``KeyboardInterrupt`` and other non-``Exception`` errors are
        annotated too.
    """
    Traverser(
        ast,
        scope_manager,
        visitor,
        config=config,
        dispatcher_factory=dispatcher_factory,
    ).run()
