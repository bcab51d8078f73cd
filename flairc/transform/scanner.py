# flairc/transform/scanner.py
"""
Template Scanner.

Finds `createStyles(({ css, theme }) => ({ root: css`...` }))` call sites and
turns each supported one into a `StyleCall` with its ordered `StyleBlock`s.
Unsupported shapes raise UnsupportedStyleDefinition, which `scan()` turns into
one Diagnostic per call site.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from flairc.errors import UnsupportedStyleDefinition
from flairc.logger import get_logger
from flairc.syntax import has_token, named, string_value, text, unwrap
from flairc.transform.models import (
    SHIM_NAME,
    Diagnostic,
    Interpolation,
    StyleBlock,
    StyleCall,
    TransformSettings,
)
from flairc.transform.scope import pattern_names

logger = get_logger(__name__)

PLACEHOLDER_RE = re.compile(r"^var\((--[^()\s]+)\)$")

_STYLE_FUNCTIONS = {"arrow_function", "function_expression", "function"}
_TS_PARAMETERS = {"required_parameter", "optional_parameter"}
_TRANSPARENT_PARENTS = {"parenthesized_expression", "as_expression", "satisfies_expression"}


def _unsupported(node: Node, message: str) -> UnsupportedStyleDefinition:
    row, col = node.start_point
    return UnsupportedStyleDefinition(message, line=row + 1, column=col + 1)


class Scanner:
    def __init__(self, settings: TransformSettings):
        self.settings = settings
        self.factories = {settings.factory, SHIM_NAME}

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def scan(
        self, root: Node, source: bytes, filename: str
    ) -> Tuple[List[StyleCall], List[Diagnostic]]:
        self.source = source
        self.exported_names = self._exported_names(root)

        calls: List[StyleCall] = []
        diagnostics: List[Diagnostic] = []
        call_site_index = 0

        for node in self._candidates(root):
            try:
                call = self._analyse(node, call_site_index, len(calls))
            except UnsupportedStyleDefinition as e:
                diag = Diagnostic(
                    code=e.code,
                    message=e.message,
                    file=filename,
                    line=e.line,
                    column=e.column,
                )
                logger.warning(str(diag))
                diagnostics.append(diag)
            else:
                calls.append(call)
            call_site_index += 1

        return calls, diagnostics

    # ------------------------------------------------------------------
    # discovery
    # ------------------------------------------------------------------
    def _candidates(self, root: Node) -> List[Node]:
        """Matching calls in document order; nested matches are not revisited."""
        found: List[Node] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "call_expression":
                callee = node.child_by_field_name("function")
                if callee is not None and callee.type == "identifier" and text(callee) in self.factories:
                    found.append(node)
                    continue
            stack.extend(reversed(node.children))
        return found

    @staticmethod
    def _exported_names(root: Node) -> Set[str]:
        names: Set[str] = set()
        for stmt in named(root):
            if stmt.type != "export_statement" or stmt.child_by_field_name("source") is not None:
                continue
            value = stmt.child_by_field_name("value")
            if value is not None and value.type == "identifier":  # export default useStyles
                names.add(text(value))
            for child in named(stmt):
                if child.type == "export_clause":
                    for spec in named(child):
                        name = spec.child_by_field_name("name")
                        if name is not None:
                            names.add(text(name))
        return names

    # ------------------------------------------------------------------
    # shape analysis
    # ------------------------------------------------------------------
    def _analyse(self, call: Node, call_site_index: int, sequence_id: int) -> StyleCall:
        if call.has_error:
            raise _unsupported(call, "style definition contains syntax errors")

        args = call.child_by_field_name("arguments")
        if args is None or args.type != "arguments" or not named(args):
            raise _unsupported(call, "style definition call has no arguments")

        fn = unwrap(named(args)[0])
        if fn.type not in _STYLE_FUNCTIONS:
            raise _unsupported(fn, "first argument of a style definition must be a function")

        theme_bindings, tag, dynamic = self._parameters(fn)
        obj = self._returned_object(fn)

        blocks: List[StyleBlock] = []
        seen: Set[str] = set()
        for prop in named(obj):
            if prop.type != "pair":
                raise _unsupported(prop, f"unsupported style property {text(prop)!r}")
            name = self._block_name(prop.child_by_field_name("key"))
            if name in seen:
                raise _unsupported(prop, f"duplicate style block {name!r}")
            seen.add(name)
            blocks.append(self._block(name, prop.child_by_field_name("value"), tag))

        hook_name, exported = self._hook_binding(call)
        callee = call.child_by_field_name("function")
        return StyleCall(
            call_site_index=call_site_index,
            sequence_id=sequence_id,
            hook_name=hook_name,
            exported=exported,
            callee_start=callee.start_byte,
            callee_end=callee.end_byte,
            start=call.start_byte,
            end=call.end_byte,
            theme_bindings=theme_bindings,
            tag_binding=tag,
            dynamic_params=dynamic,
            blocks=blocks,
            function=fn,
        )

    def _parameters(self, fn: Node) -> Tuple[Dict[str, Tuple[str, ...]], str, List[str]]:
        single = fn.child_by_field_name("parameter")
        if single is not None:
            params = [single]
        else:
            formal = fn.child_by_field_name("parameters")
            params = named(formal) if formal is not None else []

        theme: Dict[str, Tuple[str, ...]] = {}
        tag = self.settings.tag
        dynamic: List[str] = []

        for position, param in enumerate(params):
            if param.type in _TS_PARAMETERS:
                param = param.child_by_field_name("pattern") or param
            if position > 0 or param.type != "object_pattern":
                dynamic.extend(pattern_names(param))
                continue

            for entry in named(param):
                if entry.type == "shorthand_property_identifier_pattern":
                    key, value = text(entry), entry
                elif entry.type == "pair_pattern":
                    key_node = entry.child_by_field_name("key")
                    key = string_value(key_node) if key_node.type == "string" else text(key_node)
                    value = entry.child_by_field_name("value")
                else:  # defaults and rest elements are never trusted
                    dynamic.extend(pattern_names(entry))
                    continue

                if key == "theme":
                    self._bind_theme(value, (), theme, dynamic)
                elif key == "css" and value.type in {"identifier", "shorthand_property_identifier_pattern"}:
                    tag = text(value)
                else:
                    dynamic.extend(pattern_names(value))

        return theme, tag, dynamic

    def _bind_theme(
        self,
        node: Node,
        prefix: Tuple[str, ...],
        theme: Dict[str, Tuple[str, ...]],
        dynamic: List[str],
    ) -> None:
        if node.type in {"identifier", "shorthand_property_identifier_pattern"}:
            theme[text(node)] = prefix
        elif node.type == "object_pattern":
            for entry in named(node):
                if entry.type == "shorthand_property_identifier_pattern":
                    theme[text(entry)] = prefix + (text(entry),)
                elif entry.type == "pair_pattern":
                    key_node = entry.child_by_field_name("key")
                    if key_node.type in {"property_identifier", "string"}:
                        key = string_value(key_node) if key_node.type == "string" else text(key_node)
                        self._bind_theme(entry.child_by_field_name("value"), prefix + (key,), theme, dynamic)
                    else:
                        dynamic.extend(pattern_names(entry))
                else:
                    dynamic.extend(pattern_names(entry))
        else:
            dynamic.extend(pattern_names(node))

    def _returned_object(self, fn: Node) -> Node:
        body = fn.child_by_field_name("body")
        result: Optional[Node] = None
        if body is not None and body.type == "statement_block":
            statements = named(body)
            if statements and statements[-1].type == "return_statement":
                values = named(statements[-1])
                result = unwrap(values[0]) if values else None
        else:
            result = unwrap(body)

        if result is None or result.type != "object":
            raise _unsupported(body or fn, "style function must return an object literal")
        return result

    @staticmethod
    def _block_name(key: Optional[Node]) -> str:
        if key is not None:
            if key.type in {"property_identifier", "number"}:
                return text(key)
            if key.type == "string":
                return string_value(key)
        raise _unsupported(key, "style block keys must be plain identifiers or strings")

    def _block(self, name: str, value: Optional[Node], tag: str) -> StyleBlock:
        value = unwrap(value)
        callee = value.child_by_field_name("function") if value is not None and value.type == "call_expression" else None
        template = value.child_by_field_name("arguments") if callee is not None else None
        if (
            callee is None
            or callee.type != "identifier"
            or text(callee) != tag
            or template is None
            or template.type != "template_string"
        ):
            raise _unsupported(value, f"style block {name!r} is not a `{tag}` tagged template")

        chunks: List[str] = []
        interpolations: List[Interpolation] = []
        cursor = template.start_byte + 1  # past the opening backtick
        for sub in template.children:
            if sub.type != "template_substitution":
                continue
            chunks.append(self.source[cursor : sub.start_byte].decode("utf-8"))
            cursor = sub.end_byte
            exprs = named(sub)
            if len(exprs) != 1:
                raise _unsupported(sub, f"empty interpolation in style block {name!r}")
            interpolations.append(self._interpolation(len(interpolations), sub, exprs[0]))
        chunks.append(self.source[cursor : template.end_byte - 1].decode("utf-8"))

        return StyleBlock(
            name=name,
            chunks=chunks,
            interpolations=interpolations,
            template_start=template.start_byte,
            template_end=template.end_byte,
        )

    def _interpolation(self, index: int, sub: Node, expr: Node) -> Interpolation:
        wrapped = False
        placeholder = None
        if expr.type == "call_expression":
            callee = expr.child_by_field_name("function")
            args = expr.child_by_field_name("arguments")
            wrapped = (
                callee is not None
                and callee.type == "identifier"
                and text(callee) == self.settings.marker
                and args is not None
                and args.type == "arguments"
                and len(named(args)) == 1
            )
        elif expr.type == "string":
            match = PLACEHOLDER_RE.match(string_value(expr))
            placeholder = match.group(1) if match else None

        return Interpolation(
            index=index,
            source=text(expr),
            start=sub.start_byte,
            end=sub.end_byte,
            expr_start=expr.start_byte,
            expr_end=expr.end_byte,
            wrapped=wrapped,
            placeholder=placeholder,
            node=expr,
        )

    def _hook_binding(self, call: Node) -> Tuple[str, bool]:
        node = call
        parent = node.parent
        while parent is not None and parent.type in _TRANSPARENT_PARENTS:
            node, parent = parent, parent.parent

        if parent is not None and parent.type == "variable_declarator":
            name_node = parent.child_by_field_name("name")
            name = text(name_node) if name_node.type == "identifier" else "anonymous"
            declaration = parent.parent
            exported = (
                declaration is not None
                and declaration.parent is not None
                and declaration.parent.type == "export_statement"
            )
            return name, exported or name in self.exported_names
        if parent is not None and parent.type == "export_statement" and has_token(parent, "default"):
            return "default", True
        return "anonymous", False
