"""Turns one file's text into File/symbol nodes and DEFINES edges."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from code_graph.graph.store import GraphStore
from code_graph.models import CodeEdge, CodeNode, EdgeKind, NodeKind, Position
from code_graph.parser.base_parser import Declaration, DeclarationShape
from code_graph.parser.javascript_parser import JavaScriptParser
from code_graph.parser.registry import ParserRegistry

logger = logging.getLogger(__name__)

_KIND_BY_SHAPE: dict[DeclarationShape, NodeKind] = {
    DeclarationShape.FUNCTION: NodeKind.FUNCTION,
    DeclarationShape.FUNCTION_VARIABLE: NodeKind.FUNCTION,
    DeclarationShape.CLASS: NodeKind.VARIABLE,
    DeclarationShape.INTERFACE: NodeKind.INTERFACE,
    DeclarationShape.TYPE_ALIAS: NodeKind.TYPE,
    DeclarationShape.ENUM: NodeKind.VARIABLE,
    DeclarationShape.VARIABLE: NodeKind.VARIABLE,
}


def build_default_registry() -> ParserRegistry:
    """Create a registry with all available parsers."""
    registry = ParserRegistry()
    registry.register(JavaScriptParser())
    return registry


def classify(decl: Declaration) -> NodeKind:
    kind = _KIND_BY_SHAPE[decl.shape]
    if kind == NodeKind.FUNCTION and decl.name[:1].isupper():
        return NodeKind.COMPONENT
    return kind


def symbol_id(file_path: str, name: str, scope: tuple[str, ...] = ()) -> str:
    """``path:name`` at module scope, ``path:outer.inner:name`` when nested."""
    if scope:
        return f"{file_path}:{'.'.join(scope)}:{name}"
    return f"{file_path}:{name}"


class GraphIndexer:
    """Parses files and upserts their nodes and edges into a GraphStore."""

    def __init__(self, store: GraphStore, registry: ParserRegistry | None = None) -> None:
        self.store = store
        self.registry = registry or build_default_registry()

    def index_file(self, file_path: str, text: str) -> list[CodeNode]:
        """Index one file's full text. Returns the symbol nodes created for it.

        The File node is written even when parsing fails. Reindexing replaces
        the file's DEFINES edges and drops symbols it no longer declares.
        """
        previous = set(self.store.defined_by(file_path))
        self.store.upsert_node(CodeNode(
            id=file_path,
            kind=NodeKind.FILE,
            name=PurePosixPath(file_path).name,
            file_path=file_path,
            start=Position(line=1, column=0),
            end=Position(line=len(text.split("\n")), column=0),
        ))

        symbols: dict[str, CodeNode] = {}
        for decl in self._parse(file_path, text):
            node = self._to_node(file_path, decl)
            self.store.upsert_node(node)
            symbols[node.id] = node

        self.store.replace_edges_from(file_path, EdgeKind.DEFINES, [
            CodeEdge(source_id=file_path, target_id=node_id, kind=EdgeKind.DEFINES)
            for node_id in symbols
        ])
        stale = previous - symbols.keys()
        if stale:
            self.store.remove_nodes(stale)
            logger.debug("Dropped %d stale symbols from %s", len(stale), file_path)

        logger.debug("Indexed %s: %d symbols", file_path, len(symbols))
        return list(symbols.values())

    def _parse(self, file_path: str, text: str) -> list[Declaration]:
        parser = self.registry.get_parser(file_path)
        if parser is None:
            logger.debug("No parser for %s, keeping file node only", file_path)
            return []
        try:
            return parser.parse(file_path, text)
        except Exception:
            logger.warning("Failed to parse %s", file_path, exc_info=True)
            return []

    @staticmethod
    def _to_node(file_path: str, decl: Declaration) -> CodeNode:
        return CodeNode(
            id=symbol_id(file_path, decl.name, decl.scope),
            kind=classify(decl),
            name=decl.name,
            file_path=file_path,
            start=decl.start,
            end=decl.end,
            exports=[decl.name] if decl.exported else [],
        )
