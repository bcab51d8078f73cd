# flairc/theme/__init__.py
"""
flairc.theme
============

Theme Loader: resolves the configured theme source once per distinct path
per batch and exposes it as a `ThemeEnvironment`.

Supported sources
-----------------
• ``.yml`` / ``.yaml`` / ``.json`` – plain data, read with PyYAML.
• ``.js`` / ``.ts`` (and friends) – read *structurally*: the default export
  must resolve to an object literal.  Nothing is ever executed.

Every failure is a ConfigurationError: no style definition can be compiled
without the environment, so the batch stops.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from tree_sitter import Node

from flairc.errors import ConfigurationError
from flairc.logger import get_logger
from flairc.syntax import has_token, named, parse, string_value, text, unwrap
from flairc.syntax.grammars import is_supported
from flairc.theme.models import ThemeEnvironment

logger = get_logger(__name__)

_DATA_SUFFIXES = {".yml", ".yaml", ".json"}


# ──────────────────────────────────────────────────────────────
# data sources
# ──────────────────────────────────────────────────────────────
def _read_data(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Theme {path} is not valid YAML/JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Theme {path} must contain a mapping at its root")
    return data


# ──────────────────────────────────────────────────────────────
# module sources
# ──────────────────────────────────────────────────────────────
class _ModuleReader:
    """Turns the default-exported object literal of a JS/TS module into data."""

    def __init__(self, path: Path):
        self.path = path
        self.root = parse(path.read_bytes(), path.suffix).root_node
        self.consts: Dict[str, Node] = {}
        for stmt in named(self.root):
            decl = stmt
            if stmt.type == "export_statement":
                decl = stmt.child_by_field_name("declaration") or stmt
            if decl.type in {"lexical_declaration", "variable_declaration"}:
                for d in named(decl):
                    if d.type != "variable_declarator":
                        continue
                    name, value = d.child_by_field_name("name"), d.child_by_field_name("value")
                    if name is not None and name.type == "identifier" and value is not None:
                        self.consts[text(name)] = value

    def default_export(self) -> Optional[Node]:
        for stmt in named(self.root):
            if stmt.type == "export_statement" and has_token(stmt, "default"):
                return stmt.child_by_field_name("value") or stmt.child_by_field_name(
                    "declaration"
                )
            if stmt.type == "expression_statement":
                expr = unwrap(named(stmt)[0]) if named(stmt) else None
                if expr is not None and expr.type == "assignment_expression":
                    left = expr.child_by_field_name("left")
                    if left is not None and text(left) == "module.exports":
                        return expr.child_by_field_name("right")
        return None

    def resolve_object(self, node: Optional[Node], seen: frozenset = frozenset()) -> Optional[Node]:
        node = unwrap(node)
        if node is None:
            return None
        if node.type == "object":
            return node
        if node.type == "identifier":
            name = text(node)
            if name in seen:
                return None
            return self.resolve_object(self.consts.get(name), seen | {name})
        if node.type in {"call_expression", "as_expression", "satisfies_expression"}:
            # createTheme({...}) / {...} as Theme
            if node.type == "call_expression":
                args = node.child_by_field_name("arguments")
                first = named(args)[0] if args is not None and named(args) else None
                return self.resolve_object(first, seen)
            return self.resolve_object(named(node)[0], seen)
        return None

    def to_data(self, obj: Node, seen: frozenset = frozenset()) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for prop in named(obj):
            if prop.type == "pair":
                key = self._key(prop.child_by_field_name("key"))
                if key is not None:
                    data[key] = self._value(prop.child_by_field_name("value"), seen)
            elif prop.type == "shorthand_property_identifier":
                data[text(prop)] = self._value(prop, seen)
            elif prop.type == "method_definition":
                key = self._key(prop.child_by_field_name("name"))
                if key is not None:
                    data[key] = "<method>"
            elif prop.type == "spread_element":
                inner = self.resolve_object(named(prop)[0], seen)
                if inner is not None:
                    data.update(self.to_data(inner, seen))
        return data

    @staticmethod
    def _key(node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type in {"property_identifier", "number"}:
            return text(node)
        if node.type == "string":
            return string_value(node)
        return None  # computed keys are not enumerable

    def _value(self, node: Optional[Node], seen: frozenset) -> Any:
        node = unwrap(node)
        if node is None:
            return None
        if node.type in {"identifier", "shorthand_property_identifier"}:
            name = text(node)
            target = self.consts.get(name)
            obj = self.resolve_object(target, seen | {name}) if name not in seen else None
            if obj is not None:
                return self.to_data(obj, seen | {name})
            return f"<{name}>"
        if node.type == "object":
            return self.to_data(node, seen)
        if node.type == "string":
            return string_value(node)
        if node.type == "number":
            raw = text(node)
            try:
                return int(raw)
            except ValueError:
                return raw
        if node.type in {"true", "false"}:
            return node.type == "true"
        if node.type in {"arrow_function", "function_expression", "function"}:
            return "<function>"
        return text(node)


def _read_module(path: Path) -> Dict[str, Any]:
    reader = _ModuleReader(path)
    obj = reader.resolve_object(reader.default_export())
    if obj is None:
        raise ConfigurationError(
            f"Theme module {path} has no default export resolving to an object literal"
        )
    return reader.to_data(obj)


# ──────────────────────────────────────────────────────────────
# loader
# ──────────────────────────────────────────────────────────────
class ThemeLoader:
    """
    Per-path cache of loaded themes, shared read-only by the concurrent
    passes of one batch.  `clear()` ends the batch.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._cache: Dict[Path, ThemeEnvironment] = {}

    def load(self, theme_path: str | Path) -> ThemeEnvironment:
        path = Path(theme_path).expanduser()
        if not path.is_absolute():
            raise ConfigurationError(f"Theme path must be absolute, got {theme_path!s}")
        path = path.resolve()

        with self._lock:
            if path in self._cache:
                logger.debug(f"theme cache hit: {path}")
                return self._cache[path]

            if not path.is_file():
                logger.error(f"theme source missing: {path}")
                raise ConfigurationError(f"Theme source not found: {path}")

            try:
                if path.suffix.lower() in _DATA_SUFFIXES:
                    data = _read_data(path)
                elif is_supported(path.suffix):
                    data = _read_module(path)
                else:
                    raise ConfigurationError(f"Unsupported theme source type: {path.suffix}")
            except OSError as e:
                raise ConfigurationError(f"Theme source {path} could not be read: {e}") from e

            environment = ThemeEnvironment.from_data(path, data)
            self._cache[path] = environment
            logger.info(f"loaded theme {path} ({len(environment.paths)} accessors)")
            return environment

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


theme_loader = ThemeLoader()
