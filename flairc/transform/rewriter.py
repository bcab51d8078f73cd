# flairc/transform/rewriter.py
"""
Code Rewriter / Emitter.

Applies byte-range edits to the original source:

• Static interpolation  `${expr}`  → `${staticVar(expr)}`
• Dynamic interpolation `${expr}`  → `var(--File--00000-0-block-0)` (literal text)
• `createStyles(` → `__flairCreateStyles(`, with the shim injected once

Everything outside matched call sites is copied through untouched.
"""

from __future__ import annotations

import json
from typing import List, Tuple

from tree_sitter import Node

from flairc.logger import get_logger
from flairc.syntax import named, text
from flairc.syntax.grammars import DECLARATION_NODES
from flairc.transform.models import (
    SHIM_NAME,
    Classification,
    CompiledModule,
    ExtractionMetadata,
    HookDefinition,
    StyleCall,
    TransformSettings,
)
from flairc.transform.scope import declared_names

logger = get_logger(__name__)

Edit = Tuple[int, int, bytes]

# Stand-ins for the readable palette / surface the rendering runtime
# normally provides through its color context.
_SHIM = """\
const {factory} = styleFn => {{
  function {tag}(strings, ...values) {{
    let combined = '';

    for (let i = 0; i < strings.length; i += 1) {{
      const currentValue = i < values.length ? values[i] : '';
      combined += strings[i] + currentValue;
    }}

    return combined;
  }}

  const themePath = {theme_path};
  const theme = require(themePath).default || require(themePath);
  const color = {{
    original: '#000',
    decorative: '#000',
    readable: '#000',
    aa: '#000',
    aaa: '#000',
  }};
  const surface = '#fff';

  const useStyles = (props = {{}}) => styleFn({{
    color,
    surface,
    ...props,
    css: {tag},
    theme,
    {marker},
  }});
  useStyles.__cssExtractable = true;
  return useStyles;
}};"""

_MARKER = "const {marker} = t => t;"


def escape_template(value: str) -> str:
    """Make *value* safe to splice into a template literal as plain text."""
    return value.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class Rewriter:
    def __init__(self, settings: TransformSettings):
        self.settings = settings

    def rewrite(
        self, source: bytes, root: Node, calls: List[StyleCall], filename: str
    ) -> CompiledModule:
        module = CompiledModule(filename=filename, code=source.decode("utf-8"))
        if not calls:
            return module

        edits: List[Edit] = []
        for call in calls:
            edits.extend(self._rewrite_call(call, module))

        top_level = self._top_level_names(root)
        shim = []
        if self.settings.marker not in top_level:
            shim.append(_MARKER.format(marker=self.settings.marker))
        if SHIM_NAME not in top_level:
            shim.append(
                _SHIM.format(
                    factory=SHIM_NAME,
                    tag=self.settings.tag,
                    marker=self.settings.marker,
                    theme_path=json.dumps(
                        self.settings.runtime_theme or str(self.settings.theme_path)
                    ),
                )
            )
        if shim:
            first_call = min(call.start for call in calls)
            edits.append(self._injection(root, "\n\n".join(shim), first_call))

        module.code = self._apply(source, edits).decode("utf-8")
        return module

    # ------------------------------------------------------------------
    # per call site
    # ------------------------------------------------------------------
    def _rewrite_call(self, call: StyleCall, module: CompiledModule) -> List[Edit]:
        edits: List[Edit] = [(call.callee_start, call.callee_end, SHIM_NAME.encode())]
        marker = self.settings.marker
        tokens: List[str] = []
        skeleton = {}

        for block in call.blocks:
            pieces: List[str] = [block.chunks[0]]
            for interp, chunk in zip(block.interpolations, block.chunks[1:]):
                if interp.classification is Classification.DYNAMIC:
                    token = interp.placeholder or interp.token.render()
                    literal = escape_template(f"var({token})")
                    edits.append((interp.start, interp.end, literal.encode()))
                    module.mapping[token] = interp.source
                    tokens.append(token)
                    pieces.append(literal)
                elif interp.wrapped:
                    pieces.append(f"${{{interp.source}}}")
                else:
                    source = interp.source
                    if interp.node is not None and interp.node.type == "sequence_expression":
                        source = f"({source})"  # `a, b` would become two arguments
                    wrapped = f"{marker}({source})"
                    edits.append((interp.expr_start, interp.expr_end, wrapped.encode()))
                    pieces.append(f"${{{wrapped}}}")
                pieces.append(chunk)
            skeleton[block.name] = "".join(pieces)

        module.hooks.append(
            (
                HookDefinition(
                    name=call.hook_name,
                    exported=call.exported,
                    call_site_index=call.call_site_index,
                    blocks=[b.name for b in call.blocks],
                ),
                ExtractionMetadata(tokens=tokens, skeleton=skeleton),
            )
        )
        return edits

    # ------------------------------------------------------------------
    # shim placement
    # ------------------------------------------------------------------
    @staticmethod
    def _top_level_names(root: Node) -> set:
        names = set()
        for stmt in named(root):
            if stmt.type == "import_statement":
                names.update(_imported_names(stmt))
                continue
            decl = stmt
            if stmt.type == "export_statement":
                decl = stmt.child_by_field_name("declaration") or stmt
            if decl.type in DECLARATION_NODES or decl.type.endswith("_declaration"):
                names.update(declared_names(decl))
        return names

    @staticmethod
    def _injection(root: Node, shim: str, limit: int) -> Edit:
        """
        After the last top-level import, else after leading directives, else
        at the top; never after *limit* (the first call must see the shim).
        """
        anchor = None
        leading = True
        for stmt in named(root):
            if stmt.end_byte > limit:
                break
            if stmt.type == "import_statement":
                anchor, leading = stmt, False
            elif leading and (
                stmt.type == "hash_bang_line"
                or (stmt.type == "expression_statement" and _is_directive(stmt))
            ):
                anchor = stmt
            else:
                leading = False
        if anchor is None:
            return (0, 0, f"{shim}\n\n".encode())
        return (anchor.end_byte, anchor.end_byte, f"\n\n{shim}".encode())

    @staticmethod
    def _apply(source: bytes, edits: List[Edit]) -> bytes:
        out = source
        last_start = len(source) + 1
        for start, end, replacement in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
            if end > last_start:
                raise AssertionError(f"overlapping edits at byte {start}")
            out = out[:start] + replacement + out[end:]
            last_start = start
        return out


def _imported_names(stmt: Node) -> List[str]:
    names: List[str] = []
    for clause in named(stmt):
        if clause.type != "import_clause":
            continue
        for part in named(clause):
            if part.type == "identifier":
                names.append(text(part))
            elif part.type == "namespace_import":
                names.extend(text(ident) for ident in named(part))
            elif part.type == "named_imports":
                for spec in named(part):
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None:
                        names.append(text(local))
    return names


def _is_directive(stmt: Node) -> bool:
    """`"use strict";` and friends."""
    exprs = named(stmt)
    return len(exprs) == 1 and exprs[0].type == "string" and text(exprs[0]).strip("'\"").startswith("use ")
