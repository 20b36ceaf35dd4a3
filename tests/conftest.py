"""Shared fixtures: a grammar-free parser and small project builders."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from code_graph.models import Position
from code_graph.parser.base_parser import BaseParser, Declaration, DeclarationShape
from code_graph.parser.registry import ParserRegistry

_FUNCTION_LINE_RE = re.compile(r"^(export )?function (\w+)")


class LineParser(BaseParser):
    """Reports one FUNCTION declaration per line starting with ``function name``."""

    def parse(self, file_path: str, text: str) -> list[Declaration]:
        decls = []
        for i, line in enumerate(text.split("\n")):
            m = _FUNCTION_LINE_RE.match(line)
            if m:
                decls.append(Declaration(
                    shape=DeclarationShape.FUNCTION,
                    name=m.group(2),
                    exported=bool(m.group(1)),
                    start=Position(line=i + 1, column=0),
                    end=Position(line=i + 1, column=len(line)),
                ))
        return decls

    def get_supported_extensions(self) -> list[str]:
        return [".ts"]


@pytest.fixture
def line_registry() -> ParserRegistry:
    registry = ParserRegistry()
    registry.register(LineParser())
    return registry


@pytest.fixture
def make_project(tmp_path):
    """Write ``{relative_path: content}`` under tmp_path and return the root."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make
