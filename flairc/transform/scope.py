# flairc/transform/scope.py
"""
Scope-aware reference collection over Tree-sitter expressions.

`references(node)` yields every free identifier an expression reads, together
with the non-computed member chain hanging off it (`theme.colors.brand` →
``Ref("theme", ("colors", "brand"))``).  Identifiers bound *inside* the
expression (arrow parameters, block declarations, catch parameters…) are not
free and never reported.
"""

from __future__ import annotations

from typing import FrozenSet, Iterator, List, NamedTuple, Tuple

from tree_sitter import Node

from flairc.syntax import named, text
from flairc.syntax.grammars import DECLARATION_NODES, EFFECT_NODES, FUNCTION_NODES

EFFECT = "<effect>"

_TS_PARAMETERS = {"required_parameter", "optional_parameter"}
_NOT_REFERENCES = {
    "property_identifier",
    "private_property_identifier",
    "statement_identifier",
    "shorthand_property_identifier_pattern",
    "comment",
    "type_annotation",
    "type_arguments",
    "type_parameters",
}


class Ref(NamedTuple):
    name: str
    chain: Tuple[str, ...]
    node: Node


def pattern_names(node: Node | None) -> List[str]:
    """Every identifier bound by a (possibly nested) destructuring pattern."""
    if node is None:
        return []
    if node.type in {"identifier", "shorthand_property_identifier_pattern"}:
        return [text(node)]
    if node.type in _TS_PARAMETERS:
        return pattern_names(node.child_by_field_name("pattern"))
    if node.type in {"assignment_pattern", "object_assignment_pattern"}:
        return pattern_names(node.child_by_field_name("left"))
    if node.type == "pair_pattern":
        return pattern_names(node.child_by_field_name("value"))
    names: List[str] = []
    if node.type in {"object_pattern", "array_pattern", "rest_pattern", "formal_parameters"}:
        for child in named(node):
            names.extend(pattern_names(child))
    return names


def declared_names(node: Node) -> List[str]:
    """Names bound by one declaration statement (const/let/var/function/class)."""
    if node.type in DECLARATION_NODES:
        names: List[str] = []
        for declarator in named(node):
            if declarator.type == "variable_declarator":
                names.extend(pattern_names(declarator.child_by_field_name("name")))
        return names
    if node.type in {"function_declaration", "generator_function_declaration", "class_declaration"}:
        name = node.child_by_field_name("name")
        return [text(name)] if name is not None else []
    return []


def _hoisted(body: Node) -> List[str]:
    """`var` names anywhere in a function body, nested functions excluded."""
    names: List[str] = []
    stack = list(body.children)
    while stack:
        node = stack.pop()
        if node.type in FUNCTION_NODES:
            continue
        if node.type == "variable_declaration":
            names.extend(declared_names(node))
        stack.extend(node.children)
    return names


def member_chain(node: Node) -> Tuple[Node, Tuple[str, ...]]:
    """Split `a.b.c` into (`a`, ("b", "c")). Stops at the first non-member step."""
    chain: List[str] = []
    while node.type == "member_expression":
        prop = node.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            break
        chain.append(text(prop))
        node = node.child_by_field_name("object")
    if node.type != "member_expression":
        return node, tuple(reversed(chain))
    # a private `#field` access: everything below it is opaque
    return node, ()


def references(node: Node, bound: FrozenSet[str] = frozenset()) -> Iterator[Ref]:
    t = node.type

    if t in _NOT_REFERENCES:
        return
    if t in EFFECT_NODES:
        yield Ref(EFFECT, (), node)
    if t in {"identifier", "shorthand_property_identifier"}:
        name = text(node)
        if name not in bound:
            yield Ref(name, (), node)
        return

    if t == "member_expression":
        base, chain = member_chain(node)
        if base.type == "identifier":
            name = text(base)
            if name not in bound:
                yield Ref(name, chain, base)
            return
        if base.type == "member_expression":  # private field access
            yield from references(base.child_by_field_name("object"), bound)
            return
        yield from references(base, bound)
        return

    if t in FUNCTION_NODES:
        inner = set(bound)
        name = node.child_by_field_name("name")
        if name is not None and name.type == "identifier" and t != "function_declaration":
            inner.add(text(name))  # named function expressions see themselves
        params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
        if params is not None:
            inner.update(pattern_names(params))
        body = node.child_by_field_name("body")
        if body is not None and body.type == "statement_block":
            inner.update(_hoisted(body))
        scope = frozenset(inner)
        if params is not None:
            yield from _pattern_defaults(params, scope)
        if body is not None:
            yield from references(body, scope)
        return

    if t in {"statement_block", "class_body", "program", "switch_body"}:
        inner = set(bound)
        for stmt in named(node):
            if stmt.type in DECLARATION_NODES and stmt.type != "variable_declaration":
                inner.update(declared_names(stmt))
            elif stmt.type in {"function_declaration", "generator_function_declaration", "class_declaration"}:
                inner.update(declared_names(stmt))
        scope = frozenset(inner)
        for stmt in named(node):
            yield from references(stmt, scope)
        return

    if t in {"for_statement", "for_in_statement"}:
        inner = set(bound)
        for child in named(node):
            if child.type in DECLARATION_NODES:
                inner.update(declared_names(child))
        left = node.child_by_field_name("left")
        if left is not None and node.child_by_field_name("kind") is not None:
            inner.update(pattern_names(left))
        scope = frozenset(inner)
        for child in named(node):
            yield from references(child, scope)
        return

    if t == "catch_clause":
        param = node.child_by_field_name("parameter")
        scope = frozenset(set(bound) | set(pattern_names(param)))
        body = node.child_by_field_name("body")
        if body is not None:
            yield from references(body, scope)
        return

    if t == "variable_declarator":
        value = node.child_by_field_name("value")
        yield from _pattern_defaults(node.child_by_field_name("name"), bound)
        if value is not None:
            yield from references(value, bound)
        return

    if t in {"pair", "pair_pattern"}:
        key = node.child_by_field_name("key")
        if key is not None and key.type == "computed_property_name":
            yield from references(key, bound)
        value = node.child_by_field_name("value")
        if value is not None:
            yield from references(value, bound)
        return

    if t in {"class_declaration", "class"}:
        for child in named(node):
            if child.type != "identifier":
                yield from references(child, bound)
        return

    for child in named(node):
        yield from references(child, bound)


def _pattern_defaults(pattern: Node | None, bound: FrozenSet[str]) -> Iterator[Ref]:
    """References made by default values inside a binding pattern."""
    if pattern is None:
        return
    for child in named(pattern):
        if child.type in {"assignment_pattern", "object_assignment_pattern"}:
            right = child.child_by_field_name("right")
            if right is not None:
                yield from references(right, bound)
            yield from _pattern_defaults(child.child_by_field_name("left"), bound)
        elif child.type in {"pair_pattern", "object_pattern", "array_pattern", "rest_pattern"} | _TS_PARAMETERS:
            yield from _pattern_defaults(child, bound)
