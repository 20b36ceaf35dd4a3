"""Tree-sitter based parser for JavaScript and TypeScript files."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from code_graph.models import Position
from code_graph.parser.base_parser import BaseParser, Declaration, DeclarationShape, ParseError

logger = logging.getLogger(__name__)

# Node type names in tree-sitter grammars
_DECLARATION_SHAPES = {
    "function_declaration": DeclarationShape.FUNCTION,
    "function_signature": DeclarationShape.FUNCTION,
    "generator_function_declaration": DeclarationShape.FUNCTION,
    "class_declaration": DeclarationShape.CLASS,
    "abstract_class_declaration": DeclarationShape.CLASS,
    "interface_declaration": DeclarationShape.INTERFACE,
    "type_alias_declaration": DeclarationShape.TYPE_ALIAS,
    "enum_declaration": DeclarationShape.ENUM,
}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function", "generator_function"}
_METHOD_TYPES = {"method_definition"}
# Parent node type -> field holding the name of the function value it wraps
_NAMING_PARENTS = {
    "variable_declarator": "name",
    "public_field_definition": "name",
    "field_definition": "property",
    "pair": "key",
}
_NAME_TYPES = {"identifier", "property_identifier", "private_property_identifier"}
_MODULE_TYPES = {"program"}
_EXPORT_TYPES = {"export_statement"}


def _node_text(node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _find_child_by_type(node, *types: str):
    for child in node.children:
        if child.type in types:
            return child
    return None


def _is_exported(node) -> bool:
    return node.parent is not None and node.parent.type in _EXPORT_TYPES


def _is_module_scope(node) -> bool:
    parent = node.parent
    if parent is not None and parent.type in _EXPORT_TYPES:
        parent = parent.parent
    return parent is not None and parent.type in _MODULE_TYPES


def _position(point, lines: list[bytes]) -> Position:
    """Convert a tree-sitter (row, byte column) point to a 1-based line and character column."""
    row, byte_col = point[0], point[1]
    line = lines[row] if row < len(lines) else b""
    column = len(line[:byte_col].decode("utf-8", errors="replace"))
    return Position(line=row + 1, column=column)


def _anonymous(node) -> str:
    return f"<anonymous>@{node.start_point[0] + 1}"


def _scope_segment(node, decl: Declaration | None, source_bytes: bytes) -> str | None:
    """Scope name that ``node`` adds for declarations nested inside it.

    Every function-like boundary opens a scope, so a local function never
    shares an id with a module-level one. A function-valued variable is
    named by its function value rather than by the variable statement.
    """
    if decl is not None:
        return None if decl.shape == DeclarationShape.FUNCTION_VARIABLE else decl.name
    if node.type in _METHOD_TYPES:
        name_node = node.child_by_field_name("name")
        return _node_text(name_node, source_bytes) if name_node is not None else _anonymous(node)
    if node.type in _FUNCTION_VALUE_TYPES:
        parent = node.parent
        if parent is not None and parent.type in _NAMING_PARENTS:
            name_node = parent.child_by_field_name(_NAMING_PARENTS[parent.type])
            if name_node is not None and name_node.type in _NAME_TYPES:
                return _node_text(name_node, source_bytes)
        return _anonymous(node)
    if node.type in _DECLARATION_SHAPES:
        # `export default function () {}`
        return _anonymous(node)
    return None


class JavaScriptParser(BaseParser):
    """Parser for JS/TS files using tree-sitter.

    The whole syntax tree is traversed, so nested declarations are reported
    too, each carrying the names of its enclosing scopes in ``scope``.
    Variable statements are only reported at module scope, and only when the
    first declarator is a plain identifier with an initializer.
    """

    def __init__(self) -> None:
        self._js_parser = None
        self._ts_parser = None
        self._tsx_parser = None

    def _get_parser(self, suffix: str):
        """Lazily initialize tree-sitter parsers."""
        from tree_sitter import Language, Parser

        if suffix == ".tsx":
            if self._tsx_parser is None:
                import tree_sitter_typescript as ts_ts
                self._tsx_parser = Parser(Language(ts_ts.language_tsx()))
            return self._tsx_parser
        if suffix == ".ts":
            if self._ts_parser is None:
                import tree_sitter_typescript as ts_ts
                self._ts_parser = Parser(Language(ts_ts.language_typescript()))
            return self._ts_parser
        if self._js_parser is None:
            import tree_sitter_javascript as ts_js
            self._js_parser = Parser(Language(ts_js.language()))
        return self._js_parser

    def get_supported_extensions(self) -> list[str]:
        return [".js", ".jsx", ".ts", ".tsx"]

    def parse(self, file_path: str, text: str) -> list[Declaration]:
        source_bytes = text.encode("utf-8")
        parser = self._get_parser(PurePosixPath(file_path).suffix)
        try:
            tree = parser.parse(source_bytes)
        except (ValueError, RuntimeError) as e:
            raise ParseError(f"tree-sitter failed on {file_path}: {e}") from e

        if tree.root_node.has_error:
            logger.debug("Syntax errors in %s, extracting what parsed", file_path)

        lines = source_bytes.split(b"\n")
        declarations: list[Declaration] = []

        # Pre-order walk with an explicit stack so deep trees don't hit the recursion limit
        stack: list[tuple[object, tuple[str, ...]]] = [(tree.root_node, ())]
        while stack:
            node, scope = stack.pop()
            decl = self._to_declaration(node, scope, source_bytes, lines)
            if decl is not None:
                declarations.append(decl)
            segment = _scope_segment(node, decl, source_bytes)
            child_scope = scope + (segment,) if segment else scope
            for child in reversed(node.children):
                stack.append((child, child_scope))

        return declarations

    def _to_declaration(
        self,
        node,
        scope: tuple[str, ...],
        source_bytes: bytes,
        lines: list[bytes],
    ) -> Declaration | None:
        if node.type in _DECLARATION_SHAPES:
            shape = _DECLARATION_SHAPES[node.type]
            name_node = node.child_by_field_name("name")
            if name_node is None:
                # `export default function () {}`
                return None
        elif node.type in _VARIABLE_TYPES:
            if not _is_module_scope(node):
                return None
            declarator = _find_child_by_type(node, "variable_declarator")
            if declarator is None:
                return None
            name_node = declarator.child_by_field_name("name")
            value_node = declarator.child_by_field_name("value")
            # Destructuring patterns and bare `let x;` produce no declaration
            if name_node is None or name_node.type != "identifier" or value_node is None:
                return None
            if value_node.type in _FUNCTION_VALUE_TYPES:
                shape = DeclarationShape.FUNCTION_VARIABLE
            else:
                shape = DeclarationShape.VARIABLE
        else:
            return None

        exported = _is_exported(node)
        span = node.parent if exported else node
        return Declaration(
            shape=shape,
            name=_node_text(name_node, source_bytes),
            exported=exported,
            start=_position(span.start_point, lines),
            end=_position(span.end_point, lines),
            scope=scope,
        )
