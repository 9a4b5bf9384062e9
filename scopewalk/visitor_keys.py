#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/visitor_keys.py
=========================

Visitor-key schema: for each node type, the ordered names of the fields
that hold child nodes.

The walker follows these lists exactly.  A node type without an entry is an
error (:class:`~scopewalk.errors.UnknownNodeTypeError`), never a leaf.

``VISITOR_KEYS`` covers ESTree (ES2022), JSX and the Flow annotation nodes
emitted by Hermes-style parsers.  Callers with parser-specific node types
extend it with :func:`union_keys` or ``TraverseConfig.with_keys``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from scopewalk.errors import UnknownNodeTypeError
from scopewalk.nodes import node_type

__all__ = [
    "ESTREE_KEYS",
    "FLOW_KEYS",
    "VISITOR_KEYS",
    "VisitorKeys",
    "get_keys",
    "union_keys",
]

VisitorKeys = Mapping[str, Sequence[str]]

ESTREE_KEYS: Dict[str, Tuple[str, ...]] = {
    "ArrayExpression": ("elements",),
    "ArrayPattern": ("elements",),
    "ArrowFunctionExpression": ("params", "body"),
    "AssignmentExpression": ("left", "right"),
    "AssignmentPattern": ("left", "right"),
    "AwaitExpression": ("argument",),
    "BinaryExpression": ("left", "right"),
    "BlockStatement": ("body",),
    "BreakStatement": ("label",),
    "CallExpression": ("callee", "arguments"),
    "CatchClause": ("param", "body"),
    "ChainExpression": ("expression",),
    "ClassBody": ("body",),
    "ClassDeclaration": ("id", "superClass", "body"),
    "ClassExpression": ("id", "superClass", "body"),
    "ConditionalExpression": ("test", "consequent", "alternate"),
    "ContinueStatement": ("label",),
    "DebuggerStatement": (),
    "DoWhileStatement": ("body", "test"),
    "EmptyStatement": (),
    "ExportAllDeclaration": ("exported", "source"),
    "ExportDefaultDeclaration": ("declaration",),
    "ExportNamedDeclaration": ("declaration", "specifiers", "source"),
    "ExportSpecifier": ("exported", "local"),
    "ExpressionStatement": ("expression",),
    "ForInStatement": ("left", "right", "body"),
    "ForOfStatement": ("left", "right", "body"),
    "ForStatement": ("init", "test", "update", "body"),
    "FunctionDeclaration": ("id", "params", "body"),
    "FunctionExpression": ("id", "params", "body"),
    "Identifier": (),
    "IfStatement": ("test", "consequent", "alternate"),
    "ImportDeclaration": ("specifiers", "source"),
    "ImportDefaultSpecifier": ("local",),
    "ImportExpression": ("source",),
    "ImportNamespaceSpecifier": ("local",),
    "ImportSpecifier": ("imported", "local"),
    "JSXAttribute": ("name", "value"),
    "JSXClosingElement": ("name",),
    "JSXClosingFragment": (),
    "JSXElement": ("openingElement", "children", "closingElement"),
    "JSXEmptyExpression": (),
    "JSXExpressionContainer": ("expression",),
    "JSXFragment": ("openingFragment", "children", "closingFragment"),
    "JSXIdentifier": (),
    "JSXMemberExpression": ("object", "property"),
    "JSXNamespacedName": ("namespace", "name"),
    "JSXOpeningElement": ("name", "attributes"),
    "JSXOpeningFragment": (),
    "JSXSpreadAttribute": ("argument",),
    "JSXSpreadChild": ("expression",),
    "JSXText": (),
    "LabeledStatement": ("label", "body"),
    "Literal": (),
    "LogicalExpression": ("left", "right"),
    "MemberExpression": ("object", "property"),
    "MetaProperty": ("meta", "property"),
    "MethodDefinition": ("key", "value"),
    "NewExpression": ("callee", "arguments"),
    "ObjectExpression": ("properties",),
    "ObjectPattern": ("properties",),
    "PrivateIdentifier": (),
    "Program": ("body",),
    "Property": ("key", "value"),
    "PropertyDefinition": ("key", "value"),
    "RestElement": ("argument",),
    "ReturnStatement": ("argument",),
    "SequenceExpression": ("expressions",),
    "SpreadElement": ("argument",),
    "StaticBlock": ("body",),
    "Super": (),
    "SwitchCase": ("test", "consequent"),
    "SwitchStatement": ("discriminant", "cases"),
    "TaggedTemplateExpression": ("tag", "quasi"),
    "TemplateElement": (),
    "TemplateLiteral": ("quasis", "expressions"),
    "ThisExpression": (),
    "ThrowStatement": ("argument",),
    "TryStatement": ("block", "handler", "finalizer"),
    "UnaryExpression": ("argument",),
    "UpdateExpression": ("argument",),
    "VariableDeclaration": ("declarations",),
    "VariableDeclarator": ("id", "init"),
    "WhileStatement": ("test", "body"),
    "WithStatement": ("object", "body"),
    "YieldExpression": ("argument",),
}

# Flow additions: new annotation node types, plus the annotation fields Flow
# hangs off existing ESTree nodes (appended after the ESTree fields).
FLOW_KEYS: Dict[str, Tuple[str, ...]] = {
    # annotation fields on ESTree nodes
    "ArrowFunctionExpression": ("typeParameters", "returnType", "predicate"),
    "ArrayPattern": ("typeAnnotation",),
    "CallExpression": ("typeArguments",),
    "ClassDeclaration": ("typeParameters", "superTypeParameters", "implements"),
    "ClassExpression": ("typeParameters", "superTypeParameters", "implements"),
    "FunctionDeclaration": ("typeParameters", "returnType", "predicate"),
    "FunctionExpression": ("typeParameters", "returnType", "predicate"),
    "Identifier": ("typeAnnotation",),
    "NewExpression": ("typeArguments",),
    "ObjectPattern": ("typeAnnotation",),
    "PropertyDefinition": ("variance", "typeAnnotation"),
    "RestElement": ("typeAnnotation",),
    # declarations
    "DeclareClass": ("id", "typeParameters", "extends", "mixins", "implements", "body"),
    "DeclareExportAllDeclaration": ("source",),
    "DeclareExportDeclaration": ("declaration", "specifiers", "source"),
    "DeclareFunction": ("id", "predicate"),
    "DeclareInterface": ("id", "typeParameters", "extends", "body"),
    "DeclareModule": ("id", "body"),
    "DeclareModuleExports": ("typeAnnotation",),
    "DeclareOpaqueType": ("id", "typeParameters", "supertype"),
    "DeclareTypeAlias": ("id", "typeParameters", "right"),
    "DeclareVariable": ("id",),
    "DeclaredPredicate": ("value",),
    "InferredPredicate": (),
    "InterfaceDeclaration": ("id", "typeParameters", "extends", "body"),
    "OpaqueType": ("id", "typeParameters", "impltype", "supertype"),
    "TypeAlias": ("id", "typeParameters", "right"),
    "TypeCastExpression": ("expression", "typeAnnotation"),
    # enums
    "EnumDeclaration": ("id", "body"),
    "EnumBooleanBody": ("members",),
    "EnumBooleanMember": ("id", "init"),
    "EnumDefaultedMember": ("id",),
    "EnumNumberBody": ("members",),
    "EnumNumberMember": ("id", "init"),
    "EnumStringBody": ("members",),
    "EnumStringMember": ("id", "init"),
    "EnumSymbolBody": ("members",),
    # annotations
    "AnyTypeAnnotation": (),
    "ArrayTypeAnnotation": ("elementType",),
    "BigIntLiteralTypeAnnotation": (),
    "BigIntTypeAnnotation": (),
    "BooleanLiteralTypeAnnotation": (),
    "BooleanTypeAnnotation": (),
    "ClassImplements": ("id", "typeParameters"),
    "EmptyTypeAnnotation": (),
    "ExistsTypeAnnotation": (),
    "FunctionTypeAnnotation": ("typeParameters", "this", "params", "rest", "returnType"),
    "FunctionTypeParam": ("name", "typeAnnotation"),
    "GenericTypeAnnotation": ("id", "typeParameters"),
    "IndexedAccessType": ("objectType", "indexType"),
    "InterfaceExtends": ("id", "typeParameters"),
    "InterfaceTypeAnnotation": ("extends", "body"),
    "IntersectionTypeAnnotation": ("types",),
    "MixedTypeAnnotation": (),
    "NullLiteralTypeAnnotation": (),
    "NullableTypeAnnotation": ("typeAnnotation",),
    "NumberLiteralTypeAnnotation": (),
    "NumberTypeAnnotation": (),
    "ObjectTypeAnnotation": ("properties", "indexers", "callProperties", "internalSlots"),
    "ObjectTypeCallProperty": ("value",),
    "ObjectTypeIndexer": ("id", "key", "value", "variance"),
    "ObjectTypeInternalSlot": ("id", "value"),
    "ObjectTypeProperty": ("key", "value", "variance"),
    "ObjectTypeSpreadProperty": ("argument",),
    "OptionalIndexedAccessType": ("objectType", "indexType"),
    "QualifiedTypeIdentifier": ("qualification", "id"),
    "StringLiteralTypeAnnotation": (),
    "StringTypeAnnotation": (),
    "SymbolTypeAnnotation": (),
    "ThisTypeAnnotation": (),
    "TupleTypeAnnotation": ("types",),
    "TypeAnnotation": ("typeAnnotation",),
    "TypeParameter": ("bound", "variance", "default"),
    "TypeParameterDeclaration": ("params",),
    "TypeParameterInstantiation": ("params",),
    "TypeofTypeAnnotation": ("argument",),
    "UnionTypeAnnotation": ("types",),
    "Variance": (),
    "VoidTypeAnnotation": (),
}


def union_keys(base: VisitorKeys, extra: VisitorKeys) -> Dict[str, Tuple[str, ...]]:
    """Merge two schemas.

    Types present in both keep *base*'s field order, followed by the fields
    of *extra* not already listed.
    """
    merged: Dict[str, Tuple[str, ...]] = {k: tuple(v) for k, v in base.items()}
    for type_name, fields in extra.items():
        existing: List[str] = list(merged.get(type_name, ()))
        for field_name in fields:
            if field_name not in existing:
                existing.append(field_name)
        merged[type_name] = tuple(existing)
    return merged


VISITOR_KEYS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    union_keys(ESTREE_KEYS, FLOW_KEYS)
)


def get_keys(node: Any, visitor_keys: VisitorKeys = VISITOR_KEYS) -> Sequence[str]:
    """Return the child-field names for *node*.

    Raises
    ------
    UnknownNodeTypeError
        If the node's type has no entry in *visitor_keys*.
    """
    type_name = node_type(node)
    keys = visitor_keys.get(type_name)
    if keys is None:
        raise UnknownNodeTypeError(type_name, node)
    return keys
