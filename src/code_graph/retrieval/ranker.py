"""Lexical ranking of graph nodes against a keyword set."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from code_graph.models import CodeNode

DEFAULT_TOP_K = 5


@dataclass(frozen=True)
class RankedNode:
    node: CodeNode
    score: int


def _matches(node: CodeNode, keyword: str) -> bool:
    return keyword in node.name.lower() or keyword in node.file_path.lower()


def score_node(node: CodeNode, keywords: Iterable[str]) -> int:
    """Number of distinct keywords found in the node's name or file path."""
    return sum(1 for k in dict.fromkeys(keywords) if _matches(node, k))


def find_candidates(nodes: Iterable[CodeNode], keywords: list[str]) -> list[CodeNode]:
    """Nodes matching any keyword, deduplicated by id, in input order."""
    candidates: list[CodeNode] = []
    seen: set[str] = set()
    for node in nodes:
        if node.id in seen:
            continue
        if any(_matches(node, k) for k in keywords):
            candidates.append(node)
            seen.add(node.id)
    return candidates


def rank(nodes: Iterable[CodeNode], keywords: list[str], top_k: int = DEFAULT_TOP_K) -> list[RankedNode]:
    """Score candidates and return the best ``top_k``.

    ``sorted`` is stable, so nodes with equal scores stay in input
    (store insertion) order.
    """
    scored = [RankedNode(node=n, score=score_node(n, keywords)) for n in find_candidates(nodes, keywords)]
    scored = sorted(scored, key=lambda r: r.score, reverse=True)
    return scored[:top_k]
