from typing import Dict, Tuple

# ext → (grammar wheel, language factory)  (add more at will)
GRAMMARS: Dict[str, Tuple[str, str]] = {
    ".js": ("tree_sitter_javascript", "language"),
    ".jsx": ("tree_sitter_javascript", "language"),
    ".mjs": ("tree_sitter_javascript", "language"),
    ".cjs": ("tree_sitter_javascript", "language"),
    ".ts": ("tree_sitter_typescript", "language_typescript"),
    ".mts": ("tree_sitter_typescript", "language_typescript"),
    ".tsx": ("tree_sitter_typescript", "language_tsx"),
}

# Candidate suffixes tried, in order, when resolving `import x from "./y"`
RESOLVE_SUFFIXES: Tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")

# ----------------------------------------------------------------------
#  Node-type families shared by the JavaScript and TypeScript grammars
#  – names taken from the official grammars (0.23 ABI wheels)
# ----------------------------------------------------------------------
FUNCTION_NODES = {
    "arrow_function",
    "function_expression",
    "function",  # pre-0.21 name of function_expression
    "function_declaration",
    "generator_function",
    "generator_function_declaration",
    "method_definition",
}

DECLARATION_NODES = {"lexical_declaration", "variable_declaration"}

# Expressions whose evaluation mutates state or depends on the call context
EFFECT_NODES = {
    "assignment_expression",
    "augmented_assignment_expression",
    "update_expression",
    "new_expression",
    "await_expression",
    "yield_expression",
    "this",
    "super",
    "meta_property",
    "import",
}


def is_supported(ext: str) -> bool:
    return ext.lower() in GRAMMARS
