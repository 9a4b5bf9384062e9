"""scopewalk: scope-aware single-pass AST traversal.

This package walks an ESTree-style syntax tree once, records parent links,
and replays the enter/leave events through selector-keyed listeners that
can ask which scope encloses a node and which declaration a name binds to.

Submodules
----------
walker
    ``SimpleTraverser`` / ``walk``: schema-driven depth-first walker with
    ``VisitResult`` (``CONTINUE`` / ``SKIP`` / ``BREAK``) control values.

traverse
    ``traverse`` / ``Traverser``: discovery pass, visitor registration and
    event replay; ``TraversalContext`` for scope queries.

scope
    ``ScopeResolver`` and the ``Scope`` / ``Variable`` / ``ScopeManager``
    protocols of the external scope analysis.

selectors
    Versioned listener-selector grammar (parsimonious) and the default
    ``NodeEventDispatcher``.

visitor_keys
    ``VISITOR_KEYS`` schema for ESTree, JSX and Flow nodes.

nodes
    Node access helpers, ``ESNode``, ``from_estree`` and ``ParentMap``.

config, errors
    ``TraverseConfig``; ``ScopewalkError`` and subclasses.

Usage
-----
::

    from scopewalk import traverse

    def visitor(context):
        return {
            "ReturnStatement": lambda node: print(context.get_scope().type),
        }

    traverse(program, scope_manager, visitor)
"""

from __future__ import annotations

from scopewalk.config import DEFAULT_CONFIG, TraverseConfig
from scopewalk.errors import (
    ScopewalkError,
    SelectorSyntaxError,
    UnknownNodeTypeError,
    current_node_of,
)
from scopewalk.nodes import ESNode, ParentMap, from_estree, is_node
from scopewalk.scope import ScopeResolver, ScopeType
from scopewalk.selectors import (
    SELECTOR_GRAMMAR_VERSION,
    NodeEventDispatcher,
    parse_selector,
)
from scopewalk.traverse import (
    Phase,
    TraversalContext,
    TraversalEvent,
    Traverser,
    traverse,
)
from scopewalk.visitor_keys import VISITOR_KEYS, union_keys
from scopewalk.walker import SimpleTraverser, VisitResult, walk

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "DEFAULT_CONFIG",
    "ESNode",
    "NodeEventDispatcher",
    "ParentMap",
    "Phase",
    "SELECTOR_GRAMMAR_VERSION",
    "ScopeResolver",
    "ScopeType",
    "ScopewalkError",
    "SelectorSyntaxError",
    "SimpleTraverser",
    "TraversalContext",
    "TraversalEvent",
    "TraverseConfig",
    "Traverser",
    "UnknownNodeTypeError",
    "VISITOR_KEYS",
    "VisitResult",
    "current_node_of",
    "from_estree",
    "is_node",
    "parse_selector",
    "traverse",
    "union_keys",
    "walk",
]
