# tests/conftest.py
"""
Shared fixtures: a minimal in-memory scope manager and tree builders.

The mock scope manager mirrors the eslint-scope query surface that
scopewalk consumes; nothing here performs real scope analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from scopewalk.nodes import ESNode


@dataclass(eq=False)
class MockVariable:
    name: str
    defs: List[Any] = field(default_factory=list)


@dataclass(eq=False)
class MockScope:
    type: str
    variables: List[MockVariable] = field(default_factory=list)
    upper: Optional["MockScope"] = None
    child_scopes: List["MockScope"] = field(default_factory=list)

    def __post_init__(self):
        if self.upper is not None:
            self.upper.child_scopes.append(self)

    def declare(self, name: str, defined: bool = True) -> MockVariable:
        variable = MockVariable(name, ["def"] if defined else [])
        self.variables.append(variable)
        return variable


class MockScopeManager:
    """Scopes are attached to nodes outermost first."""

    def __init__(self) -> None:
        self.scopes: List[MockScope] = []
        self._by_node: Dict[int, List[MockScope]] = {}
        self._declared: Dict[int, List[MockVariable]] = {}
        self.acquire_calls: List[tuple] = []

    def add_scope(self, node: Any, scope: MockScope) -> MockScope:
        self.scopes.append(scope)
        self._by_node.setdefault(id(node), []).append(scope)
        return scope

    def declare(self, node: Any, *variables: MockVariable) -> None:
        self._declared.setdefault(id(node), []).extend(variables)

    def acquire(self, node: Any, inner: bool = False) -> Optional[MockScope]:
        self.acquire_calls.append((node, inner))
        scopes = self._by_node.get(id(node))
        if not scopes:
            return None
        return scopes[-1] if inner else scopes[0]

    def get_declared_variables(self, node: Any) -> List[MockVariable]:
        return list(self._declared.get(id(node), []))


@dataclass
class FunctionTree:
    """``function f() { return; }`` with its scope graph."""
    program: ESNode
    function: ESNode
    block: ESNode
    ret: ESNode
    manager: MockScopeManager
    global_scope: MockScope
    function_scope: MockScope
    f_variable: MockVariable


def build_function_tree() -> FunctionTree:
    ret = ESNode("ReturnStatement", argument=None)
    block = ESNode("BlockStatement", body=[ret])
    fn_id = ESNode("Identifier", name="f")
    function = ESNode("FunctionDeclaration", id=fn_id, params=[], body=block)
    program = ESNode("Program", body=[function], sourceType="script")

    manager = MockScopeManager()
    global_scope = manager.add_scope(program, MockScope("global"))
    f_variable = global_scope.declare("f")
    function_scope = manager.add_scope(
        function, MockScope("function", upper=global_scope)
    )
    function_scope.declare("arguments", defined=False)
    manager.declare(function, f_variable)

    return FunctionTree(
        program=program,
        function=function,
        block=block,
        ret=ret,
        manager=manager,
        global_scope=global_scope,
        function_scope=function_scope,
        f_variable=f_variable,
    )


@pytest.fixture
def function_tree() -> FunctionTree:
    return build_function_tree()


@pytest.fixture
def expression_tree() -> ESNode:
    """``a + b * c;`` followed by ``if (x) { y; }``."""
    return ESNode(
        "Program",
        body=[
            ESNode(
                "ExpressionStatement",
                expression=ESNode(
                    "BinaryExpression",
                    operator="+",
                    left=ESNode("Identifier", name="a"),
                    right=ESNode(
                        "BinaryExpression",
                        operator="*",
                        left=ESNode("Identifier", name="b"),
                        right=ESNode("Identifier", name="c"),
                    ),
                ),
            ),
            ESNode(
                "IfStatement",
                test=ESNode("Identifier", name="x"),
                consequent=ESNode(
                    "BlockStatement",
                    body=[
                        ESNode(
                            "ExpressionStatement",
                            expression=ESNode("Identifier", name="y"),
                        )
                    ],
                ),
                alternate=None,
            ),
        ],
    )


def label(node: Any) -> str:
    """Short readable name for event logs: type, plus identifier name."""
    name = getattr(node, "name", None)
    if name is None and isinstance(node, dict):
        name = node.get("name")
    return f"{node_type_of(node)}:{name}" if isinstance(name, str) else node_type_of(node)


def node_type_of(node: Any) -> str:
    return node["type"] if isinstance(node, dict) else node.type
