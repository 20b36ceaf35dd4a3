"""In-memory node/edge store shared by the indexer and the retriever."""

from __future__ import annotations

import logging
import threading

from code_graph.models import CodeEdge, CodeNode, EdgeKind, GraphSnapshot

logger = logging.getLogger(__name__)


class GraphStore:
    """Holds the node map (keyed by id, overwrite semantics) and the edge list.

    Overwriting a node keeps its original insertion position; the ranker's
    tie-break depends on that order.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, CodeNode] = {}
        self._edges: list[CodeEdge] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._nodes)

    def upsert_node(self, node: CodeNode) -> None:
        with self._lock:
            self._nodes[node.id] = node

    def append_edge(self, edge: CodeEdge) -> None:
        with self._lock:
            self._edges.append(edge)

    def get_node(self, node_id: str) -> CodeNode | None:
        return self._nodes.get(node_id)

    def nodes(self) -> list[CodeNode]:
        """Return all nodes in insertion order."""
        with self._lock:
            return list(self._nodes.values())

    def edges(self) -> list[CodeEdge]:
        with self._lock:
            return list(self._edges)

    def defined_by(self, file_id: str) -> list[str]:
        """Return ids of nodes targeted by DEFINES edges from ``file_id``."""
        with self._lock:
            return [
                e.target_id for e in self._edges
                if e.source_id == file_id and e.kind == EdgeKind.DEFINES
            ]

    def replace_edges_from(self, source_id: str, kind: EdgeKind, edges: list[CodeEdge]) -> None:
        """Drop every ``kind`` edge leaving ``source_id`` and append ``edges``."""
        with self._lock:
            self._edges = [
                e for e in self._edges
                if not (e.source_id == source_id and e.kind == kind)
            ]
            self._edges.extend(edges)

    def remove_nodes(self, node_ids: set[str]) -> int:
        """Remove nodes and every edge touching them. Returns number of nodes removed."""
        if not node_ids:
            return 0
        with self._lock:
            removed = 0
            for node_id in node_ids:
                if self._nodes.pop(node_id, None) is not None:
                    removed += 1
            self._edges = [
                e for e in self._edges
                if e.source_id not in node_ids and e.target_id not in node_ids
            ]
            return removed

    def remove_file(self, file_path: str) -> int:
        """Retract a file: its File node plus every symbol it DEFINES."""
        with self._lock:
            ids = set(self.defined_by(file_path))
            ids.add(file_path)
            removed = self.remove_nodes(ids)
        logger.debug("Removed %d nodes for %s", removed, file_path)
        return removed

    def snapshot(self) -> GraphSnapshot:
        with self._lock:
            return GraphSnapshot(
                nodes={k: n.model_copy(deep=True) for k, n in self._nodes.items()},
                edges=[e.model_copy() for e in self._edges],
            )
