"""Code graph: in-memory knowledge graph and prompt context for a TS/JS project."""

from code_graph.graph.indexer import GraphIndexer
from code_graph.graph.store import GraphStore
from code_graph.models import (
    CodeEdge,
    CodeNode,
    EdgeKind,
    GraphSnapshot,
    NodeKind,
    Plan,
    PlanStep,
    Position,
    StepType,
)
from code_graph.retrieval.retriever import ContextRetriever
from code_graph.session import ProjectSession

__all__ = [
    "CodeEdge",
    "CodeNode",
    "ContextRetriever",
    "EdgeKind",
    "GraphIndexer",
    "GraphSnapshot",
    "GraphStore",
    "NodeKind",
    "Plan",
    "PlanStep",
    "Position",
    "ProjectSession",
    "StepType",
]
