# flairc/transform/classifier.py
"""
Dependency Classifier.

Builds an identifier-reference graph for one file (plus any relative modules
it imports) and labels every interpolation Static or Dynamic.

    node       a binding: `<file>#name` (module level) or
               `<file>@<call>:name` (style-function local)
    edge       binding → every binding its definition reads
    roots      DYNAMIC (non-theme parameters, unknown globals, package
               imports, reassigned names…) and STATIC (literals, theme
               accessors found in the schema, pure globals)

A binding is dynamic iff DYNAMIC is reachable from it.  Nothing is executed:
the analysis only ever looks at syntax.
"""

from __future__ import annotations

from collections import defaultdict, deque
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from flairc.logger import get_logger
from flairc.syntax import has_token, named, parse, string_value, text, walk
from flairc.syntax.grammars import DECLARATION_NODES, GRAMMARS, RESOLVE_SUFFIXES
from flairc.theme.models import ThemeEnvironment
from flairc.transform.models import Classification, StyleCall, TransformSettings
from flairc.transform.scope import EFFECT, Ref, declared_names, pattern_names, references

logger = get_logger(__name__)

DYNAMIC = "<dynamic>"
STATIC = "<static>"

# globals that may be read or called as-is
PURE_GLOBALS = frozenset(
    {"Number", "String", "parseInt", "parseFloat", "isNaN", "isFinite", "undefined", "NaN", "Infinity"}
)

# namespace → members that are build-time invariant (`Math.random` is not)
PURE_MEMBERS: Dict[str, FrozenSet[str]] = {
    "Math": frozenset(
        {
            "abs", "ceil", "floor", "round", "trunc", "sign", "max", "min", "pow",
            "sqrt", "cbrt", "hypot", "exp", "log", "log2", "log10", "sin", "cos",
            "tan", "atan", "atan2", "PI", "E", "LN2", "LN10", "SQRT2",
        }
    ),
    "JSON": frozenset({"stringify"}),
    "Number": frozenset(
        {"isFinite", "isInteger", "isNaN", "parseFloat", "parseInt", "MAX_SAFE_INTEGER", "MIN_SAFE_INTEGER", "EPSILON"}
    ),
    "String": frozenset({"fromCharCode"}),
}


def is_pure_global(name: str, chain: Tuple[str, ...]) -> bool:
    if not chain:
        return name in PURE_GLOBALS
    return chain[0] in PURE_MEMBERS.get(name, ())


# ──────────────────────────────────────────────────────────────
# graph
# ──────────────────────────────────────────────────────────────
class ReferenceGraph:
    def __init__(self):
        self.deps: Dict[str, Set[str]] = {DYNAMIC: set(), STATIC: set()}

    def __contains__(self, key: str) -> bool:
        return key in self.deps

    def add(self, key: str, deps: Iterable[str]) -> None:
        self.deps[key] = set(deps)

    def solve(self) -> Set[str]:
        """Every node from which DYNAMIC is reachable (reverse BFS)."""
        reverse: Dict[str, Set[str]] = defaultdict(set)
        for key, deps in self.deps.items():
            for dep in deps:
                reverse[dep].add(key)

        dynamic = {DYNAMIC}
        queue = deque([DYNAMIC])
        while queue:
            current = queue.popleft()
            for dependant in reverse[current]:
                if dependant not in dynamic:
                    dynamic.add(dependant)
                    queue.append(dependant)
        return dynamic


def _written_names(target: Optional[Node]) -> List[str]:
    """Names whose value changes when *target* is assigned (`a.b = 1` mutates `a`)."""
    if target is None:
        return []
    while target.type in {"member_expression", "subscript_expression", "parenthesized_expression"}:
        inner = target.child_by_field_name("object")
        if inner is None:
            inner = named(target)[0] if named(target) else None
        if inner is None:
            return []
        target = inner
    return pattern_names(target)


def resolve_module(importer: Path, source: str) -> Optional[Path]:
    """Locate the file behind a relative import specifier, or None."""
    base = importer.parent / source
    candidates: List[Path] = []
    if base.suffix.lower() in GRAMMARS:
        candidates.append(base)
    candidates.extend(base.with_name(base.name + suffix) for suffix in RESOLVE_SUFFIXES)
    candidates.extend(base / f"index{suffix}" for suffix in RESOLVE_SUFFIXES)
    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()
    return None


# ──────────────────────────────────────────────────────────────
# module scope
# ──────────────────────────────────────────────────────────────
class ModuleScope:
    """Top-level bindings and exports of one JS/TS module."""

    def __init__(self, classifier: "Classifier", path: Path, root: Node):
        self.classifier = classifier
        self.path = path
        # name → (kind, node, extra)
        self.bindings: Dict[str, Tuple[str, Optional[Node], Tuple[str, ...]]] = {}
        # exported name → ("local", name) | ("reexport", source, name)
        self.exports: Dict[str, Tuple[str, ...]] = {}
        self.star_sources: List[str] = []
        self.reassigned: Set[str] = set()
        self._index(root)

    # ---------- indexing --------------------------------------------------
    def _index(self, root: Node) -> None:
        for stmt in named(root):
            if stmt.type == "import_statement":
                self._index_import(stmt)
            elif stmt.type == "export_statement":
                self._index_export(stmt)
            else:
                self._index_declaration(stmt)

        for node in walk(root):
            if node.type in {"assignment_expression", "augmented_assignment_expression"}:
                self.reassigned.update(_written_names(node.child_by_field_name("left")))
            elif node.type == "update_expression":
                self.reassigned.update(_written_names(node.child_by_field_name("argument")))
            elif node.type == "for_in_statement" and node.child_by_field_name("kind") is None:
                self.reassigned.update(pattern_names(node.child_by_field_name("left")))

    def _index_import(self, stmt: Node) -> None:
        source_node = stmt.child_by_field_name("source")
        if source_node is None:
            return
        source = string_value(source_node)
        for clause in named(stmt):
            if clause.type != "import_clause":
                continue
            for part in named(clause):
                if part.type == "identifier":
                    self.bindings[text(part)] = ("import", None, (source, "default"))
                elif part.type == "namespace_import":
                    for ident in named(part):
                        self.bindings[text(ident)] = ("namespace", None, (source,))
                elif part.type == "named_imports":
                    for spec in named(part):
                        if spec.type != "import_specifier":
                            continue
                        name = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        imported = string_value(name) if name.type == "string" else text(name)
                        local = text(alias) if alias is not None else imported
                        self.bindings[local] = ("import", None, (source, imported))

    def _index_export(self, stmt: Node) -> None:
        source_node = stmt.child_by_field_name("source")
        declaration = stmt.child_by_field_name("declaration")
        value = stmt.child_by_field_name("value")

        if has_token(stmt, "default"):
            if declaration is not None:
                self._index_declaration(declaration)
                names = declared_names(declaration)
                self.exports["default"] = ("local", names[0]) if names else ("local", "*default*")
                if not names:
                    kind = "class" if "class" in declaration.type else "function"
                    self.bindings["*default*"] = (kind, declaration, ())
            elif value is not None:
                if value.type == "identifier":
                    self.exports["default"] = ("local", text(value))
                else:
                    self.bindings["*default*"] = ("value", value, ())
                    self.exports["default"] = ("local", "*default*")
            return

        if declaration is not None:
            self._index_declaration(declaration)
            for name in declared_names(declaration):
                self.exports[name] = ("local", name)
            return

        clause = next((c for c in named(stmt) if c.type == "export_clause"), None)
        if clause is None:
            if source_node is not None and not any(c.type == "namespace_export" for c in named(stmt)):
                self.star_sources.append(string_value(source_node))
            return
        for spec in named(clause):
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
                continue
            exported = text(alias) if alias is not None else text(name)
            if source_node is not None:
                self.exports[exported] = ("reexport", string_value(source_node), text(name))
            else:
                self.exports[exported] = ("local", text(name))

    def _index_declaration(self, stmt: Node) -> None:
        if stmt.type in DECLARATION_NODES:
            for declarator in named(stmt):
                if declarator.type != "variable_declarator":
                    continue
                value = declarator.child_by_field_name("value")
                for name in pattern_names(declarator.child_by_field_name("name")):
                    self.bindings[name] = ("value", value, ())
        elif stmt.type in {"function_declaration", "generator_function_declaration"}:
            for name in declared_names(stmt):
                self.bindings[name] = ("function", stmt, ())
        elif stmt.type == "class_declaration":
            for name in declared_names(stmt):
                self.bindings[name] = ("class", None, ())

    # ---------- resolution ------------------------------------------------
    def lookup(self, ref: Ref) -> str:
        name = ref.name
        if name == EFFECT:
            return DYNAMIC
        binding = self.bindings.get(name)
        if binding is None:
            if is_pure_global(name, ref.chain) or name == self.classifier.settings.marker:
                return STATIC
            return DYNAMIC
        if binding[0] == "namespace":
            if not ref.chain or name in self.reassigned:
                return DYNAMIC
            return self.classifier.import_key(self.path, binding[2][0], ref.chain[0])
        return self.binding_key(name)

    def binding_key(self, name: str) -> str:
        key = f"{self.path}#{name}"
        graph = self.classifier.graph
        if key not in graph:
            graph.add(key, ())  # registered first so cycles terminate
            graph.add(key, self._deps(name))
        return key

    def export_key(self, name: str, seen: frozenset = frozenset()) -> str:
        if (self.path, name) in seen:
            return DYNAMIC
        seen = seen | {(self.path, name)}
        exported = self.exports.get(name)
        if exported is not None:
            if exported[0] == "local":
                local = exported[1]
                return self.binding_key(local) if local in self.bindings else DYNAMIC
            return self.classifier.import_key(self.path, exported[1], exported[2], seen)
        for source in self.star_sources:
            key = self.classifier.import_key(self.path, source, name, seen)
            if key != DYNAMIC:
                return key
        return DYNAMIC

    def _deps(self, name: str) -> Set[str]:
        kind, node, extra = self.bindings[name]
        if name in self.reassigned or kind == "class":
            return {DYNAMIC}
        if kind == "import":
            return {self.classifier.import_key(self.path, extra[0], extra[1])}
        if node is None:
            return {DYNAMIC}
        return {self.lookup(ref) for ref in references(node)}


# ──────────────────────────────────────────────────────────────
# style-function scope
# ──────────────────────────────────────────────────────────────
class StyleScope:
    """Parameters and top-level declarations of one style function."""

    def __init__(self, module: ModuleScope, call: StyleCall, environment: ThemeEnvironment):
        self.module = module
        self.call = call
        self.environment = environment
        self.locals: Dict[str, Optional[Node]] = {}

        body = call.function.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            return
        for stmt in named(body):
            if stmt.type in DECLARATION_NODES:
                for declarator in named(stmt):
                    if declarator.type == "variable_declarator":
                        value = declarator.child_by_field_name("value")
                        for name in pattern_names(declarator.child_by_field_name("name")):
                            self.locals[name] = value
            elif stmt.type in {"function_declaration", "generator_function_declaration"}:
                for name in declared_names(stmt):
                    self.locals[name] = stmt
            elif stmt.type == "class_declaration":
                for name in declared_names(stmt):
                    self.locals[name] = None
        # `var` inside nested blocks still lands in this scope
        for node in walk(body):
            if node.type == "variable_declaration":
                for name in declared_names(node):
                    self.locals.setdefault(name, None)

    def lookup(self, ref: Ref) -> str:
        name = ref.name
        if name in self.locals:
            return self._local_key(name)
        if name in self.call.theme_bindings:
            if name in self.module.reassigned:
                return DYNAMIC
            chain = self.call.theme_bindings[name] + ref.chain
            return STATIC if self.environment.allows(chain) else DYNAMIC
        if name == self.call.tag_binding:
            return STATIC
        if name in self.call.dynamic_params:
            return DYNAMIC
        return self.module.lookup(ref)

    def _local_key(self, name: str) -> str:
        key = f"{self.module.path}@{self.call.call_site_index}:{name}"
        graph = self.module.classifier.graph
        if key not in graph:
            graph.add(key, ())
            node = self.locals[name]
            if node is None or name in self.module.reassigned:
                graph.add(key, {DYNAMIC})
            else:
                graph.add(key, {self.lookup(ref) for ref in references(node)})
        return key


# ──────────────────────────────────────────────────────────────
# classifier
# ──────────────────────────────────────────────────────────────
class Classifier:
    """One per compiled file; imported modules are analysed at most once."""

    def __init__(self, settings: TransformSettings, environment: ThemeEnvironment):
        self.settings = settings
        self.environment = environment
        self.graph = ReferenceGraph()
        self.modules: Dict[Path, Optional[ModuleScope]] = {}

    def module_for(self, path: Path) -> Optional[ModuleScope]:
        if path not in self.modules:
            try:
                data = path.read_bytes()
                data.decode("utf-8")
                root = parse(data, path.suffix).root_node
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"classifier: cannot read {path}: {e}")
                self.modules[path] = None
            else:
                self.modules[path] = ModuleScope(self, path, root)
        return self.modules[path]

    def import_key(self, importer: Path, source: str, name: str, seen: frozenset = frozenset()) -> str:
        if not source.startswith("."):
            return STATIC if source in self.settings.pure_modules else DYNAMIC
        target = resolve_module(importer, source)
        if target is None:
            logger.debug(f"classifier: unresolved import {source!r} from {importer}")
            return DYNAMIC
        module = self.module_for(target)
        return module.export_key(name, seen) if module is not None else DYNAMIC

    def classify(self, path: Path, root: Node, calls: List[StyleCall]) -> None:
        module = ModuleScope(self, path, root)
        self.modules[path] = module

        pending = []
        for call in calls:
            scope = StyleScope(module, call, self.environment)
            for block in call.blocks:
                for interp in block.interpolations:
                    if interp.wrapped:
                        interp.classification = Classification.STATIC
                    elif interp.placeholder:
                        interp.classification = Classification.DYNAMIC
                    else:
                        keys = {scope.lookup(ref) for ref in references(interp.node)}
                        pending.append((interp, keys))

        dynamic = self.graph.solve()
        for interp, keys in pending:
            interp.classification = (
                Classification.DYNAMIC if keys & dynamic else Classification.STATIC
            )
        logger.debug(
            f"classifier: {path.name}: {len(self.graph.deps)} graph nodes, "
            f"{len(dynamic) - 1} dynamic"
        )
