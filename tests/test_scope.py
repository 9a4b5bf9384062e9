# tests/test_scope.py
"""
Tests for ScopeResolver: enclosing-scope lookup and binding resolution.
"""

import pytest

from scopewalk.nodes import ESNode, ParentMap
from scopewalk.scope import ScopeResolver, ScopeType, iter_scope_chain
from scopewalk.walker import walk
from tests.conftest import MockScope, MockScopeManager, build_function_tree


def parents_of(root):
    parents = ParentMap()
    walk(root, lambda node, parent: parents.set(node, parent))
    return parents


def resolver_for(tree):
    return ScopeResolver(tree.manager, parents_of(tree.program), root=tree.program)


class TestGetScope:

    def test_node_inside_function(self, function_tree):
        resolver = resolver_for(function_tree)
        assert resolver.get_scope(function_tree.ret) is function_tree.function_scope
        assert resolver.get_scope(function_tree.block) is function_tree.function_scope

    def test_scope_owner_itself(self, function_tree):
        resolver = resolver_for(function_tree)
        assert resolver.get_scope(function_tree.function) is function_tree.function_scope

    def test_function_name_identifier(self, function_tree):
        # The id node is a child of the function, so it resolves to the
        # function scope like any other descendant.
        resolver = resolver_for(function_tree)
        assert resolver.get_scope(function_tree.function.id) is function_tree.function_scope

    def test_program_prefers_outer_scope(self):
        program = ESNode("Program", body=[])
        manager = MockScopeManager()
        global_scope = manager.add_scope(program, MockScope("global"))
        manager.add_scope(program, MockScope("module", upper=global_scope))
        resolver = ScopeResolver(manager, parents_of(program), root=program)

        assert resolver.get_scope(program) is global_scope
        assert manager.acquire_calls == [(program, False)]

    def test_other_nodes_ask_for_inner_scope(self, function_tree):
        resolver = resolver_for(function_tree)
        resolver.get_scope(function_tree.ret)
        assert (function_tree.ret, True) in function_tree.manager.acquire_calls

    def test_root_of_other_type_prefers_outer(self):
        # A traversal rooted at a function still treats the root as the
        # outermost node.
        fn = ESNode("FunctionExpression", id=None, params=[], body=ESNode("BlockStatement", body=[]))
        manager = MockScopeManager()
        outer = manager.add_scope(fn, MockScope("function"))
        manager.add_scope(fn, MockScope("block", upper=outer))
        resolver = ScopeResolver(manager, parents_of(fn), root=fn)
        assert resolver.get_scope(fn) is outer
        assert resolver.get_scope(fn.body).type == "block"

    def test_function_expression_name_scope_is_replaced(self):
        body = ESNode("BlockStatement", body=[])
        fn = ESNode(
            "FunctionExpression",
            id=ESNode("Identifier", name="g"),
            params=[],
            body=body,
        )
        program = ESNode(
            "Program",
            body=[ESNode("ExpressionStatement", expression=fn)],
        )
        manager = MockScopeManager()
        global_scope = manager.add_scope(program, MockScope("global"))
        name_scope = manager.add_scope(
            fn, MockScope("function-expression-name", upper=global_scope)
        )
        function_scope = MockScope("function", upper=name_scope)
        manager.scopes.append(function_scope)
        resolver = ScopeResolver(manager, parents_of(program), root=program)

        assert resolver.get_scope(body) is function_scope
        assert resolver.get_scope(fn) is function_scope

    def test_falls_back_to_first_scope(self):
        program = ESNode("Program", body=[ESNode("EmptyStatement")])
        manager = MockScopeManager()
        only = MockScope("global")
        manager.scopes.append(only)  # attached to no node
        resolver = ScopeResolver(manager, parents_of(program), root=program)
        assert resolver.get_scope(program.body[0]) is only

    def test_repeatable(self, function_tree):
        resolver = resolver_for(function_tree)
        first = resolver.get_scope(function_tree.ret)
        assert resolver.get_scope(function_tree.ret) is first


class TestGetBinding:

    def test_outer_declaration(self, function_tree):
        resolver = resolver_for(function_tree)
        assert resolver.get_binding("f", function_tree.ret) is function_tree.f_variable

    def test_missing_name(self, function_tree):
        resolver = resolver_for(function_tree)
        assert resolver.get_binding("nope", function_tree.ret) is None

    def test_zero_def_variable_is_not_a_binding(self, function_tree):
        resolver = resolver_for(function_tree)
        # "arguments" exists in the function scope but has no definitions
        assert resolver.get_binding("arguments", function_tree.ret) is None

    def test_zero_def_does_not_shadow_outer(self, function_tree):
        function_tree.function_scope.declare("f", defined=False)
        resolver = resolver_for(function_tree)
        assert resolver.get_binding("f", function_tree.ret) is function_tree.f_variable

    def test_inner_declaration_shadows(self, function_tree):
        inner_f = function_tree.function_scope.declare("f")
        resolver = resolver_for(function_tree)
        assert resolver.get_binding("f", function_tree.ret) is inner_f
        # from the program itself only the outer one is visible
        assert resolver.get_binding("f", function_tree.program) is function_tree.f_variable

    def test_first_matching_variable_in_scope_wins(self):
        tree = build_function_tree()
        second = tree.global_scope.declare("f")
        resolver = resolver_for(tree)
        found = resolver.get_binding("f", tree.ret)
        assert found is tree.f_variable
        assert found is not second


class TestScopeType:

    def test_compares_with_strings(self):
        assert ScopeType.FUNCTION_EXPRESSION_NAME == "function-expression-name"
        assert "global" == ScopeType.GLOBAL

    @pytest.mark.parametrize("tag", ["class-static-block", "declare-module", "type"])
    def test_lookup_by_value(self, tag):
        assert ScopeType(tag).value == tag

    def test_iter_scope_chain(self, function_tree):
        chain = list(iter_scope_chain(function_tree.function_scope))
        assert chain == [function_tree.function_scope, function_tree.global_scope]
        assert list(iter_scope_chain(None)) == []
