#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/nodes.py
==================

Node access helpers shared by the walker, the scope resolver and the
selector engine.

A node is anything carrying a string ``type`` tag.  Two shapes are
accepted interchangeably:

- attribute-style objects (``node.type``, ``node.body``), such as
  :class:`ESNode` or the node classes of most Python JS parsers;
- mapping-style ESTree JSON (``node["type"]``, ``node["body"]``), as
  produced by ``json.loads`` on a parser's output.

Parent links are kept in a :class:`ParentMap` side table rather than being
written onto the nodes themselves.
"""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
)

__all__ = [
    "ESNode",
    "ParentMap",
    "from_estree",
    "get_field",
    "is_node",
    "node_type",
    "LOCATION_FIELDS",
]

#: Metadata fields that never hold child nodes.
LOCATION_FIELDS = frozenset({"loc", "range", "start", "end"})


def is_node(value: Any) -> bool:
    """Return ``True`` if *value* looks like an AST node."""
    if value is None or isinstance(value, (str, bytes, int, float, bool)):
        return False
    if isinstance(value, Mapping):
        return isinstance(value.get("type"), str)
    return isinstance(getattr(value, "type", None), str)


def node_type(node: Any) -> str:
    """Return the ``type`` tag of *node* (either node shape)."""
    if isinstance(node, Mapping):
        return node["type"]
    return node.type


def get_field(node: Any, key: str) -> Any:
    """Read the field *key* of *node*; a missing field reads as ``None``."""
    if isinstance(node, Mapping):
        return node.get(key)
    return getattr(node, key, None)


class ESNode:
    """Attribute-style ESTree node.

    >>> ident = ESNode("Identifier", name="f")
    >>> ident.type, ident.name
    ('Identifier', 'f')

    Nodes compare by identity; two structurally equal nodes are still
    distinct tree positions.
    """

    def __init__(self, type: str, **fields: Any) -> None:
        self.type = type
        for key, value in fields.items():
            setattr(self, key, value)

    def fields(self) -> Dict[str, Any]:
        """All fields except ``type``, in assignment order."""
        return {k: v for k, v in vars(self).items() if k != "type"}

    def __repr__(self) -> str:
        name = getattr(self, "name", None)
        if isinstance(name, str):
            return f"ESNode({self.type} name={name!r})"
        return f"ESNode({self.type})"


def from_estree(data: Any) -> Any:
    """Convert ESTree JSON (nested dicts and lists) into :class:`ESNode` trees.

    Dicts without a string ``type`` (``regex`` payloads, location records)
    are copied unchanged; location metadata is never descended into.
    """
    if isinstance(data, list):
        return [from_estree(item) for item in data]
    if not isinstance(data, Mapping):
        return data
    if not isinstance(data.get("type"), str):
        return dict(data)

    fields: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "type":
            continue
        if key in LOCATION_FIELDS:
            fields[key] = value
        else:
            fields[key] = from_estree(value)
    return ESNode(data["type"], **fields)


class ParentMap:
    """Identity-keyed side table from node to its structural parent.

    Dict nodes are unhashable and attribute nodes may define their own
    equality, so entries are keyed by ``id()``.  Each entry also holds the
    node itself, which keeps the id stable for the lifetime of the map.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, Tuple[Any, Optional[Any]]] = {}

    def set(self, node: Any, parent: Optional[Any]) -> None:
        self._entries[id(node)] = (node, parent)

    def get(self, node: Any) -> Optional[Any]:
        """Return the parent of *node*, or ``None`` for the root or unknown nodes."""
        entry = self._entries.get(id(node))
        if entry is None:
            return None
        return entry[1]

    def ancestors(self, node: Any) -> Iterator[Any]:
        """Yield the ancestors of *node*, nearest parent first."""
        current = self.get(node)
        while current is not None:
            yield current
            current = self.get(current)

    def path_to_root(self, node: Any) -> List[Any]:
        """*node* followed by its ancestors, nearest first."""
        return [node, *self.ancestors(node)]

    def __contains__(self, node: Any) -> bool:
        return id(node) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
