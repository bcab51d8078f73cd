"""
flairc.syntax
─────────────
LRU-cached factory for Tree-sitter Language objects plus the handful of node
helpers every pass shares.

• One Language per file suffix, built lazily from the grammar wheel.
• Parsers are cheap and not thread-safe, so every parse gets its own.
• Helpers work on UTF-8 byte offsets, which is what Tree-sitter reports.
"""

from __future__ import annotations

from functools import cache
from importlib import import_module
from typing import Iterator, Optional

from tree_sitter import Language, Node, Parser, Tree

from flairc.logger import get_logger
from flairc.syntax.grammars import GRAMMARS
from flairc.errors import ConfigurationError

logger = get_logger(__name__)


# ── public API ──────────────────────────────────────────────────────────
@cache
def get_language(ext: str) -> Language:
    """
    Return the grammar for *ext* (e.g. '.js').  Result cached per extension.

    An unknown suffix or a missing grammar wheel is a configuration problem:
    no file of that kind can be compiled, so ConfigurationError is raised.
    """
    entry = GRAMMARS.get(ext.lower())
    if not entry:
        raise ConfigurationError(f"No grammar registered for {ext!r} files")

    pkg, factory = entry
    try:
        mod = import_module(pkg)
    except ModuleNotFoundError as e:
        raise ConfigurationError(
            f"Grammar wheel {pkg!r} is not installed (needed for {ext} files)"
        ) from e

    lang = Language(getattr(mod, factory)())
    logger.debug(f"syntax: loaded grammar for {ext} ({pkg}.{factory})")
    return lang


def parse(source: bytes, ext: str) -> Tree:
    return Parser(get_language(ext)).parse(source)


# ── node helpers ────────────────────────────────────────────────────────
def text(node: Node) -> str:
    return node.text.decode("utf-8")


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def named(node: Node) -> list[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip redundant parentheses: `(({...}))` → `{...}`."""
    while node is not None and node.type == "parenthesized_expression":
        inner = named(node)
        if len(inner) != 1:
            return node
        node = inner[0]
    return node


def string_value(node: Node) -> str:
    """Value of a `string` literal node (quotes stripped, escapes left as-is)."""
    raw = text(node)
    return raw[1:-1] if len(raw) >= 2 and raw[0] in "'\"" else raw


def has_token(node: Node, token: str) -> bool:
    """True if an anonymous child token (e.g. `default`, `const`) is present."""
    return any(not c.is_named and c.type == token for c in node.children)
