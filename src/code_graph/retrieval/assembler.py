"""Assemble ranked nodes into a fenced, path-labelled context document."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath

from code_graph.models import CodeNode

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "Relevant code context:\n\n"

_FENCE_LANGUAGES = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "jsx",
}


def _fence_language(file_path: str) -> str:
    return _FENCE_LANGUAGES.get(PurePosixPath(file_path).suffix, "")


def extract_excerpt(text: str, node: CodeNode) -> str:
    """Lines ``start.line`` through ``end.line`` (1-based, inclusive)."""
    lines = text.split("\n")
    return "\n".join(lines[max(node.start.line - 1, 0):node.end.line])


def format_block(node: CodeNode, excerpt: str) -> str:
    return (
        f"--- File: {node.file_path} ---\n"
        f"```{_fence_language(node.file_path)}\n{excerpt}\n```\n\n"
    )


def format_error_block(node: CodeNode) -> str:
    return f"--- File: {node.file_path} (Error reading content) ---\n\n"


class ContextAssembler:
    """Reads source excerpts for ranked nodes.

    A node whose file cannot be read becomes a placeholder block; it never
    aborts assembly. ``max_chars`` (0 = unbounded) stops adding blocks once
    the next one would push the document past the limit.
    """

    def __init__(self, root_path: Path | None = None, max_chars: int = 0) -> None:
        self.root_path = root_path
        self.max_chars = max_chars

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        if self.root_path is not None and not path.is_absolute():
            return self.root_path / path
        return path

    async def assemble(self, nodes: list[CodeNode]) -> str:
        context = CONTEXT_HEADER
        for node in nodes:
            try:
                path = self._resolve(node.file_path)
                text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
                block = format_block(node, extract_excerpt(text, node))
            except OSError:
                logger.warning("Error reading file for context: %s", node.file_path, exc_info=True)
                block = format_error_block(node)

            if self.max_chars and len(context) + len(block) > self.max_chars:
                logger.info("Context limit of %d chars reached, skipping remaining nodes", self.max_chars)
                break
            context += block
        return context
