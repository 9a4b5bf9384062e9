#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/selectors.py
======================

Listener selectors and node-event dispatch.

Visitors map *selectors* to callbacks::

    {
        "ReturnStatement": on_return,
        "FunctionDeclaration:exit": on_function_done,
        "CallExpression[callee.name='require']": on_require,
        "FunctionExpression > BlockStatement": on_body,
        "IfStatement, ConditionalExpression": on_branch,
    }

:class:`NodeEventDispatcher` registers those callbacks and, for each
replayed enter/leave event, fires every callback whose selector matches the
node, in registration order.

Selector grammar, version 1
---------------------------

==========================  =============================================
``Identifier``              node of that type
``*``                       any node
``[attr]``                  attribute present and not null
``[attr=value]``            attribute equals value (string, number,
                            ``true``/``false``, ``null`` or bare name)
``[attr!=value]``           attribute differs from value
``[attr=/regex/flags]``     string attribute matches regex (``i m s``)
``a.b.c``                   dotted attribute path
``T[...][...]``             compound: all parts must match
``:not(s, ...)``            none of the selectors match
``:matches(s, ...)``        any of the selectors match (alias ``:is``)
``A > B``                   B whose parent matches A
``A B``                     B with some ancestor matching A
``A, B``                    A or B
``...:exit``                (suffix) fire on leave instead of enter
==========================  =============================================

Values compare by their JavaScript string form, so ``[value=1]`` matches
both ``1`` and ``1.0`` and ``[computed=false]`` matches ``False``.

Plain type-name selectors are looked up by node type; every other selector
is tested against each node.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import functools
import heapq
import logging
import re
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
)

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from scopewalk.errors import SelectorSyntaxError
from scopewalk.nodes import is_node, node_type
from scopewalk.walker import VisitResult

__all__ = [
    "SELECTOR_GRAMMAR",
    "SELECTOR_GRAMMAR_VERSION",
    "AttributeSelector",
    "ChildSelector",
    "CompoundSelector",
    "DescendantSelector",
    "ListenerSelector",
    "MatchesSelector",
    "NodeEventDispatcher",
    "NotSelector",
    "Selector",
    "TypeSelector",
    "WildcardSelector",
    "parse_selector",
]

logger = logging.getLogger(__name__)

ParentOf = Callable[[Any], Optional[Any]]
Listener = Callable[[Any], Optional[VisitResult]]

SELECTOR_GRAMMAR_VERSION = 1

_EXIT_SUFFIX = ":exit"


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

SELECTOR_GRAMMAR = Grammar(r'''
    selectors       = _ selector (_ "," _ selector)* _
    selector        = compound (combinator compound)*
    combinator      = child / descendant
    child           = _ ">" _
    descendant      = ~r"\s+"

    compound        = typed_compound / bare_compound
    typed_compound  = base modifier*
    bare_compound   = modifier+
    base            = wildcard / identifier
    wildcard        = "*"
    modifier        = attribute / not_pseudo / matches_pseudo

    attribute       = "[" _ attr_path _ attr_test? "]"
    attr_path       = identifier ("." identifier)*
    attr_test       = attr_op _ attr_value _
    attr_op         = "!=" / "="
    attr_value      = string / regex / number / bool_lit / null_lit / name

    not_pseudo      = ":not(" selectors ")"
    matches_pseudo  = (":matches(" / ":is(") selectors ")"

    string          = ~r'"(?:[^"\\]|\\.)*"' / ~r"'(?:[^'\\]|\\.)*'"
    regex           = ~r"/(?:[^/\\]|\\.)+/[ims]*"
    number          = ~r"-?[0-9]+(?:\.[0-9]+)?"
    bool_lit        = ("true" / "false") !~r"[A-Za-z0-9_$]"
    null_lit        = "null" !~r"[A-Za-z0-9_$]"
    name            = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    identifier      = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    _               = ~r"\s*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — SELECTOR MODEL
# ═══════════════════════════════════════════════════════════════════

def _js_str(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _read_path(node: Any, path: Tuple[str, ...]) -> Any:
    value = node
    for part in path:
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


class Selector:
    """Base class of the selector tree."""

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class WildcardSelector(Selector):
    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        return True


@dataclass(frozen=True)
class TypeSelector(Selector):
    name: str

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        return node_type(node) == self.name


@dataclass(frozen=True)
class AttributeSelector(Selector):
    """``[path]``, ``[path=value]`` or ``[path!=value]``.

    ``op`` is ``None`` for a presence test.  ``value`` is a compiled
    pattern for regex tests.
    """
    path: Tuple[str, ...]
    op: Optional[str] = None
    value: Any = None

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        actual = _read_path(node, self.path)
        if self.op is None:
            return actual is not None
        if isinstance(self.value, re.Pattern):
            equal = isinstance(actual, str) and self.value.search(actual) is not None
        else:
            equal = _js_str(actual) == _js_str(self.value)
        return equal if self.op == "=" else not equal


@dataclass(frozen=True)
class CompoundSelector(Selector):
    parts: Tuple[Selector, ...]

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        return all(part.matches(node, parent_of) for part in self.parts)


@dataclass(frozen=True)
class NotSelector(Selector):
    selectors: Tuple[Selector, ...]

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        return not any(s.matches(node, parent_of) for s in self.selectors)


@dataclass(frozen=True)
class MatchesSelector(Selector):
    selectors: Tuple[Selector, ...]

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        return any(s.matches(node, parent_of) for s in self.selectors)


@dataclass(frozen=True)
class ChildSelector(Selector):
    left: Selector
    right: Selector

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        if not self.right.matches(node, parent_of):
            return False
        parent = parent_of(node)
        return parent is not None and self.left.matches(parent, parent_of)


@dataclass(frozen=True)
class DescendantSelector(Selector):
    left: Selector
    right: Selector

    def matches(self, node: Any, parent_of: ParentOf) -> bool:
        if not self.right.matches(node, parent_of):
            return False
        ancestor = parent_of(node)
        while ancestor is not None:
            if self.left.matches(ancestor, parent_of):
                return True
            ancestor = parent_of(ancestor)
        return False


@dataclass(frozen=True)
class ListenerSelector:
    """A parsed listener key.

    ``node_type`` is set only for plain type-name selectors, which the
    dispatcher indexes by type.
    """
    raw: str
    selector: Selector
    is_exit: bool
    node_type: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PARSE TREE → SELECTOR MODEL
# ═══════════════════════════════════════════════════════════════════

def _repeated(value: Any) -> List[Any]:
    """Visited result of a ``*``/``?`` term; a zero-length match is a bare Node."""
    return value if isinstance(value, list) else []


_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


class _SelectorBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into :class:`Selector` objects."""

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_selectors(self, node, visited_children):
        _, first, rest, _ = visited_children
        return [first] + [rep[3] for rep in _repeated(rest)]

    def visit_selector(self, node, visited_children):
        result, rest = visited_children
        for combinator, compound in _repeated(rest):
            result = combinator(result, compound)
        return result

    def visit_combinator(self, node, visited_children):
        return visited_children[0]

    def visit_child(self, node, visited_children):
        return ChildSelector

    def visit_descendant(self, node, visited_children):
        return DescendantSelector

    def visit_compound(self, node, visited_children):
        return visited_children[0]

    def visit_typed_compound(self, node, visited_children):
        base, modifiers = visited_children
        parts = [base] + _repeated(modifiers)
        return parts[0] if len(parts) == 1 else CompoundSelector(tuple(parts))

    def visit_bare_compound(self, node, visited_children):
        if len(visited_children) == 1:
            return visited_children[0]
        return CompoundSelector(tuple(visited_children))

    def visit_base(self, node, visited_children):
        base = visited_children[0]
        return TypeSelector(base) if isinstance(base, str) else base

    def visit_wildcard(self, node, visited_children):
        return WildcardSelector()

    def visit_modifier(self, node, visited_children):
        return visited_children[0]

    def visit_attribute(self, node, visited_children):
        _, _, path, _, test, _ = visited_children
        tests = _repeated(test)
        if not tests:
            return AttributeSelector(path)
        op, value = tests[0]
        return AttributeSelector(path, op, value)

    def visit_attr_path(self, node, visited_children):
        first, rest = visited_children
        return (first, *(rep[1] for rep in _repeated(rest)))

    def visit_attr_test(self, node, visited_children):
        op, _, value, _ = visited_children
        return (op, value)

    def visit_attr_op(self, node, visited_children):
        return node.text

    def visit_attr_value(self, node, visited_children):
        return visited_children[0]

    def visit_not_pseudo(self, node, visited_children):
        _, selectors, _ = visited_children
        return NotSelector(tuple(selectors))

    def visit_matches_pseudo(self, node, visited_children):
        _, selectors, _ = visited_children
        return MatchesSelector(tuple(selectors))

    def visit_string(self, node, visited_children):
        return re.sub(r"\\(.)", r"\1", node.text[1:-1])

    def visit_regex(self, node, visited_children):
        end = node.text.rindex("/")
        flags = 0
        for flag in node.text[end + 1:]:
            flags |= _REGEX_FLAGS[flag]
        return re.compile(node.text[1:end], flags)

    def visit_number(self, node, visited_children):
        text = node.text
        return float(text) if "." in text else int(text)

    def visit_bool_lit(self, node, visited_children):
        return node.text == "true"

    def visit_null_lit(self, node, visited_children):
        return None

    def visit_name(self, node, visited_children):
        return node.text

    def visit_identifier(self, node, visited_children):
        return node.text


@functools.lru_cache(maxsize=1024)
def parse_selector(raw: str) -> ListenerSelector:
    """Parse one listener key.

    Raises
    ------
    SelectorSyntaxError
        If *raw* is not a valid version-1 selector.
    """
    text = raw.strip()
    is_exit = text.endswith(_EXIT_SUFFIX)
    if is_exit:
        text = text[: -len(_EXIT_SUFFIX)]
    if not text:
        raise SelectorSyntaxError("Empty selector", raw, 0)

    try:
        tree = SELECTOR_GRAMMAR.parse(text)
    except ParseError as exc:
        raise SelectorSyntaxError(
            f"Invalid selector {raw!r}", text, exc.pos
        ) from exc

    try:
        alternatives = _SelectorBuilder().visit(tree)
    except VisitationError as exc:
        # e.g. an attribute regex that re.compile rejects
        raise SelectorSyntaxError(f"Invalid selector {raw!r}", text) from exc
    if len(alternatives) == 1:
        selector = alternatives[0]
    else:
        selector = MatchesSelector(tuple(alternatives))

    plain_type = selector.name if isinstance(selector, TypeSelector) else None
    return ListenerSelector(raw, selector, is_exit, plain_type)


# ═══════════════════════════════════════════════════════════════════
#  PART 4 — DISPATCH
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class _Registration:
    order: int
    selector: ListenerSelector
    callback: Listener


class NodeEventDispatcher:
    """Fires registered listeners for enter/leave events.

    Parameters
    ----------
    parent_of:
        Returns the parent of a node; used by the ``>`` and descendant
        combinators.
    """

    def __init__(self, parent_of: ParentOf) -> None:
        self._parent_of = parent_of
        self._count = 0
        self._by_type: Dict[Tuple[bool, str], List[_Registration]] = {}
        self._generic: Dict[bool, List[_Registration]] = {False: [], True: []}

    def register(self, selector: str, callback: Listener) -> None:
        parsed = parse_selector(selector)
        registration = _Registration(self._count, parsed, callback)
        self._count += 1
        if parsed.node_type is not None:
            key = (parsed.is_exit, parsed.node_type)
            self._by_type.setdefault(key, []).append(registration)
        else:
            self._generic[parsed.is_exit].append(registration)

    def __len__(self) -> int:
        return self._count

    def enter_node(self, node: Any) -> VisitResult:
        return self._fire(node, is_exit=False)

    def leave_node(self, node: Any) -> VisitResult:
        return self._fire(node, is_exit=True)

    def _fire(self, node: Any, is_exit: bool) -> VisitResult:
        if not is_node(node):
            return VisitResult.CONTINUE
        typed = tuple(self._by_type.get((is_exit, node_type(node)), ()))
        generic = tuple(self._generic[is_exit])

        outcome = VisitResult.CONTINUE
        for registration in heapq.merge(typed, generic, key=lambda r: r.order):
            parsed = registration.selector
            if parsed.node_type is None and not parsed.selector.matches(
                node, self._parent_of
            ):
                continue
            result = VisitResult.coerce(registration.callback(node))
            if result is VisitResult.BREAK:
                logger.debug("listener %r requested stop", parsed.raw)
                return VisitResult.BREAK
            if result is VisitResult.SKIP:
                outcome = VisitResult.SKIP
        return outcome
