"""Prompt → keywords → ranked nodes → context document."""

from __future__ import annotations

import logging
from pathlib import Path

from code_graph.config import settings
from code_graph.graph.store import GraphStore
from code_graph.retrieval.analyzer import extract_keywords
from code_graph.retrieval.assembler import ContextAssembler
from code_graph.retrieval.ranker import RankedNode, rank

logger = logging.getLogger(__name__)


class ContextRetriever:
    """Lexical retrieval over a GraphStore."""

    def __init__(
        self,
        store: GraphStore,
        root_path: Path | None = None,
        top_k: int | None = None,
        max_chars: int | None = None,
    ) -> None:
        self.store = store
        self.top_k = top_k if top_k is not None else settings.retrieval_top_k
        self.assembler = ContextAssembler(
            root_path=root_path,
            max_chars=max_chars if max_chars is not None else settings.max_context_chars,
        )

    def find_relevant(self, prompt: str) -> list[RankedNode]:
        keywords = extract_keywords(prompt)
        if not keywords:
            logger.debug("No keywords in prompt %r", prompt)
            return []
        ranked = rank(self.store.nodes(), keywords, top_k=self.top_k)
        logger.info("Keywords %s matched %d nodes", keywords, len(ranked))
        return ranked

    async def get_context_for_prompt(self, prompt: str) -> str:
        """Return the context document, or an empty string when nothing matches."""
        ranked = self.find_relevant(prompt)
        if not ranked:
            return ""
        return await self.assembler.assemble([r.node for r in ranked])
