"""Abstract base class for language parsers and the declarations they produce."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from code_graph.models import Position


class DeclarationShape(str, Enum):
    FUNCTION = "function"
    FUNCTION_VARIABLE = "function_variable"  # const f = () => {} / function () {}
    CLASS = "class"
    INTERFACE = "interface"
    TYPE_ALIAS = "type_alias"
    ENUM = "enum"
    VARIABLE = "variable"


@dataclass(frozen=True)
class Declaration:
    shape: DeclarationShape
    name: str
    exported: bool
    start: Position
    end: Position
    scope: tuple[str, ...] = ()  # names of enclosing declarations, outermost first


class ParseError(Exception):
    """Raised when a parser cannot produce a syntax tree for a file."""


class BaseParser(ABC):
    """Base class that all language parsers must implement."""

    @abstractmethod
    def parse(self, file_path: str, text: str) -> list[Declaration]:
        """Parse source text and return declarations in document order."""

    @abstractmethod
    def get_supported_extensions(self) -> list[str]:
        """Return list of file extensions this parser supports (e.g. ['.ts'])."""
