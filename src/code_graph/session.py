"""ProjectSession: owns the graph for one project and exposes its operations."""

from __future__ import annotations

from pathlib import Path

from code_graph.config import settings
from code_graph.graph.indexer import GraphIndexer
from code_graph.graph.store import GraphStore
from code_graph.indexing.project_indexer import ProjectIndexer
from code_graph.models import GraphSnapshot, Plan
from code_graph.parser.registry import ParserRegistry
from code_graph.planning.pipeline import PlanningPipeline, TextGenerator
from code_graph.retrieval.retriever import ContextRetriever


class ProjectSession:
    """One GraphStore per session, shared by reference with indexer and retriever."""

    def __init__(
        self,
        registry: ParserRegistry | None = None,
        llm_service: TextGenerator | None = None,
        exclude_patterns: list[str] | None = None,
        extensions: list[str] | None = None,
        top_k: int | None = None,
        max_context_chars: int | None = None,
    ) -> None:
        self.store = GraphStore()
        self.indexer = GraphIndexer(self.store, registry)
        self.project_indexer = ProjectIndexer(
            self.indexer,
            exclude_patterns=exclude_patterns if exclude_patterns is not None else settings.indexer_exclude_patterns,
            extensions=extensions if extensions is not None else settings.indexer_extensions,
        )
        self._llm_service = llm_service
        self._top_k = top_k
        self._max_context_chars = max_context_chars

    @property
    def root_path(self) -> Path | None:
        return self.project_indexer.root_path

    @property
    def retriever(self) -> ContextRetriever:
        return ContextRetriever(
            self.store,
            root_path=self.root_path,
            top_k=self._top_k,
            max_chars=self._max_context_chars,
        )

    async def start_indexing(self, root_path: Path | str | None, watch: bool = True) -> None:
        await self.project_indexer.start(root_path, watch=watch)

    def stop_indexing(self) -> None:
        self.project_indexer.stop()

    def get_graph(self) -> GraphSnapshot:
        return self.store.snapshot()

    async def get_context_for_prompt(self, prompt: str) -> str:
        return await self.retriever.get_context_for_prompt(prompt)

    async def create_plan(self, prompt: str) -> Plan:
        return await PlanningPipeline(self.retriever, self._llm_service).create_plan(prompt)
