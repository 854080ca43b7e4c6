"""
Symbol Models

Plain data shared by every stage of the parse pipeline:

  • Position / Range   — 0-based coordinates, LSP style
  • Symbol             — one extracted declaration, tagged by SymbolKind
  • Diagnostic         — a non-fatal problem noticed while parsing
  • ParseResult        — what the Symbol Store caches per document
  • ParserSettings     — runtime knobs set through the server

Kind-specific behaviour (rendered names, LSP kind numbers) is table-driven
instead of living on per-kind subclasses.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel


class Position(BaseModel):
    line: int
    character: int

    def key(self):
        return (self.line, self.character)


class Range(BaseModel):
    start: Position
    end: Position

    def contains(self, pos: Position) -> bool:
        return self.start.key() <= pos.key() <= self.end.key()

    def contains_range(self, other: "Range") -> bool:
        return self.contains(other.start) and self.contains(other.end)


class SymbolKind(str, Enum):
    CLASS = "Class"
    METHOD = "Method"
    PROPERTY = "Property"
    FIELD = "Field"
    VARIABLE = "Variable"
    CONSTANT = "Constant"


class Symbol(BaseModel):
    kind: SymbolKind
    name: str
    visibility: Optional[str] = None
    declared_type: str = ""
    parameter_text: str = ""
    declared_range: Range
    name_range: Range
    parent_name: Optional[str] = None

    @property
    def rendered_name(self) -> str:
        return _RENDERERS[self.kind](self)


class DiagnosticCategory(str, Enum):
    STRUCTURAL_MISMATCH = "StructuralMismatch"
    DANGLING_OPEN = "DanglingOpen"
    POSITION_MAPPING_FAILURE = "PositionMappingFailure"
    UNSUPPORTED_PARAMETER_LIST = "UnsupportedParameterList"


class Diagnostic(BaseModel):
    category: DiagnosticCategory
    message: str
    line: int


class ParseResult(BaseModel):
    symbols: List[Symbol] = []
    diagnostics: List[Diagnostic] = []


class ParserSettings(BaseModel):
    # maxNumberOfProblems in the VS Code client settings
    max_number_of_problems: int = 100


# ═══════════════════════════════════════════════════════════════════════
#  Kind tables
# ═══════════════════════════════════════════════════════════════════════

def _render_bare(symbol: Symbol) -> str:
    return symbol.name


def _render_call(symbol: Symbol) -> str:
    return f"{symbol.name} ({symbol.parameter_text.strip()})"


_RENDERERS = {
    SymbolKind.CLASS: _render_bare,
    SymbolKind.METHOD: _render_call,
    SymbolKind.PROPERTY: _render_call,
    SymbolKind.FIELD: _render_bare,
    SymbolKind.VARIABLE: _render_bare,
    SymbolKind.CONSTANT: _render_bare,
}

# LSP SymbolKind numbers (outline)
LSP_SYMBOL_KINDS: Dict[SymbolKind, int] = {
    SymbolKind.CLASS: 5,
    SymbolKind.METHOD: 6,
    SymbolKind.PROPERTY: 7,
    SymbolKind.FIELD: 8,
    SymbolKind.VARIABLE: 13,
    SymbolKind.CONSTANT: 14,
}
LSP_SYMBOL_KIND_FUNCTION = 12

# LSP CompletionItemKind numbers
LSP_COMPLETION_KINDS: Dict[SymbolKind, int] = {
    SymbolKind.CLASS: 7,
    SymbolKind.METHOD: 2,
    SymbolKind.PROPERTY: 10,
    SymbolKind.FIELD: 5,
    SymbolKind.VARIABLE: 6,
    SymbolKind.CONSTANT: 21,
}
LSP_COMPLETION_KIND_FUNCTION = 3
