"""
Per-parse state.

A ParseContext is created for every document parse and threaded through
each recognizer call. It owns the open-construct slots (one class, one
method, one property), the symbols emitted so far and the diagnostics,
so concurrent parses of different documents never share anything.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from vbs_symbols.models import (
    Diagnostic, DiagnosticCategory, ParserSettings, Position, Range, Symbol, SymbolKind,
)
from vbs_symbols.position_mapper import resolve, resolve_range
from vbs_symbols.statement_splitter import LogicalStatement

logger = logging.getLogger(__name__)


@dataclass
class OpenConstruct:
    """A class, method or property whose end keyword has not been seen yet."""
    kind: SymbolKind
    keyword: str            # "class", "function", "sub", "get", "let", "set"
    name: str
    start: Position
    name_range: Range
    line: int
    visibility: Optional[str] = None
    parameter_text: str = ""
    declared_type: str = ""
    parameters: List[Symbol] = field(default_factory=list)


@dataclass
class ParseContext:
    settings: ParserSettings = field(default_factory=ParserSettings)
    open_class: Optional[OpenConstruct] = None
    open_method: Optional[OpenConstruct] = None
    open_property: Optional[OpenConstruct] = None
    symbols: List[Symbol] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    dropped_diagnostics: int = 0

    # ────────────────────────────────────────────────────────────────
    #  Scope helpers
    # ────────────────────────────────────────────────────────────────

    @property
    def open_member(self) -> Optional[OpenConstruct]:
        """The open method or property, whichever it is."""
        return self.open_property or self.open_method

    def class_parent(self) -> Optional[str]:
        return self.open_class.name if self.open_class else None

    def nearest_parent(self) -> Optional[str]:
        """Property, then method, then class, else file scope."""
        for construct in (self.open_property, self.open_method, self.open_class):
            if construct is not None:
                return construct.name
        return None

    # ────────────────────────────────────────────────────────────────
    #  Diagnostics
    # ────────────────────────────────────────────────────────────────

    def report(self, category: DiagnosticCategory, message: str, line: int):
        if category is DiagnosticCategory.POSITION_MAPPING_FAILURE:
            logger.warning("line %d: %s", line + 1, message)
        else:
            logger.info("%s at line %d: %s", category.value, line + 1, message)

        if len(self.diagnostics) >= self.settings.max_number_of_problems:
            self.dropped_diagnostics += 1
            return
        self.diagnostics.append(Diagnostic(category=category, message=message, line=line))

    # ────────────────────────────────────────────────────────────────
    #  Coordinates
    # ────────────────────────────────────────────────────────────────

    def position(self, statement: LogicalStatement, offset: int) -> Position:
        pos = resolve(statement, offset)
        if pos is None:
            self.report(
                DiagnosticCategory.POSITION_MAPPING_FAILURE,
                f"offset {offset} cannot be mapped",
                statement.line,
            )
            return self._fallback(statement)
        return pos

    def range(self, statement: LogicalStatement, start: int, end: int) -> Range:
        """Map an offset span; a failed mapping yields a degenerate range."""
        mapped = resolve_range(statement, start, end)
        if mapped is None:
            self.report(
                DiagnosticCategory.POSITION_MAPPING_FAILURE,
                f"span {start}-{end} cannot be mapped",
                statement.line,
            )
            pos = self._fallback(statement)
            return Range(start=pos, end=pos)
        return mapped

    @staticmethod
    def _fallback(statement: LogicalStatement) -> Position:
        return Position(line=statement.line, character=0)

    def emit(self, symbol: Symbol):
        self.symbols.append(symbol)
