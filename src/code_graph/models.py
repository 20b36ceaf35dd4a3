"""Data models for the project knowledge graph and generated plans."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    FILE = "File"
    FUNCTION = "Function"
    COMPONENT = "Component"
    INTERFACE = "Interface"
    TYPE = "Type"
    VARIABLE = "Variable"
    IMPORT = "Import"


class EdgeKind(str, Enum):
    DEFINES = "DEFINES"  # file -> symbol
    IMPORTS = "IMPORTS"
    USES = "USES"
    EXTENDS = "EXTENDS"


class Position(BaseModel):
    line: int  # 1-based
    column: int  # 0-based, in characters


class CodeNode(BaseModel):
    id: str  # e.g. "src/api/user.ts:getUser"
    kind: NodeKind
    name: str
    file_path: str
    start: Position
    end: Position
    exports: list[str] = Field(default_factory=list)
    summary: str | None = None


class CodeEdge(BaseModel):
    source_id: str
    target_id: str
    kind: EdgeKind


class GraphSnapshot(BaseModel):
    """Point-in-time copy of the graph. Node order is store insertion order."""

    nodes: dict[str, CodeNode] = Field(default_factory=dict)
    edges: list[CodeEdge] = Field(default_factory=list)

    def files(self) -> list[CodeNode]:
        return [n for n in self.nodes.values() if n.kind == NodeKind.FILE]

    def nodes_in_file(self, file_path: str) -> list[CodeNode]:
        """Return the nodes of one file sorted by start line."""
        nodes = [n for n in self.nodes.values() if n.file_path == file_path]
        return sorted(nodes, key=lambda n: (n.start.line, n.start.column))


class StepType(str, Enum):
    READ_FILE = "READ_FILE"
    EDIT_FILE = "EDIT_FILE"
    RUN_COMMAND = "RUN_COMMAND"
    THINK = "THINK"


class PlanStep(BaseModel):
    model_config = {"populate_by_name": True}

    type: StepType
    file_path: str | None = Field(default=None, alias="filePath")
    content: str | None = None
    command: str | None = None
    thought: str | None = None


class Plan(BaseModel):
    steps: list[PlanStep] = Field(default_factory=list)
