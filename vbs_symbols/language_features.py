"""
Language Features — the boundary operations a host editor drives.

  • on_document_changed / on_document_deleted   keep the store current
  • list_symbols                               document outline
  • completions_at                             visible symbols at a cursor
  • workspace_symbols                          substring search, all documents

None of these raise for parse problems; they always return whatever the
current snapshot holds.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from vbs_symbols.models import (
    LSP_COMPLETION_KIND_FUNCTION, LSP_COMPLETION_KINDS, LSP_SYMBOL_KIND_FUNCTION, LSP_SYMBOL_KINDS,
    Position, Range, Symbol, SymbolKind,
)
from vbs_symbols.scope_resolver import resolve_at
from vbs_symbols.symbol_store import SymbolStore

logger = logging.getLogger(__name__)


class OutlineEntry(BaseModel):
    rendered_name: str
    kind: SymbolKind
    declared_range: Range
    name_range: Range
    parent_name: Optional[str] = None
    detail: str = ""
    lsp_kind: int
    document_id: Optional[str] = None


class CompletionCandidate(BaseModel):
    label: str
    kind: SymbolKind
    documentation: Optional[str] = None
    lsp_kind: int


def _is_function(symbol: Symbol) -> bool:
    """A method declared outside any class."""
    return symbol.kind is SymbolKind.METHOD and symbol.parent_name is None


def to_outline_entry(symbol: Symbol, document_id: Optional[str] = None) -> OutlineEntry:
    lsp_kind = LSP_SYMBOL_KIND_FUNCTION if _is_function(symbol) else LSP_SYMBOL_KINDS[symbol.kind]
    return OutlineEntry(
        rendered_name=symbol.rendered_name,
        kind=symbol.kind,
        declared_range=symbol.declared_range,
        name_range=symbol.name_range,
        parent_name=symbol.parent_name,
        detail=symbol.declared_type,
        lsp_kind=lsp_kind,
        document_id=document_id,
    )


def documentation_for(symbol: Symbol) -> Optional[str]:
    """`Public Get Value(index)` style summary for methods and properties."""
    if symbol.kind not in (SymbolKind.METHOD, SymbolKind.PROPERTY):
        return None
    parts = [p.strip() for p in (symbol.visibility, symbol.declared_type) if p and p.strip()]
    parts.append(f"{symbol.name}({symbol.parameter_text.strip()})")
    return " ".join(parts)


def to_completion(symbol: Symbol) -> CompletionCandidate:
    lsp_kind = LSP_COMPLETION_KIND_FUNCTION if _is_function(symbol) else LSP_COMPLETION_KINDS[symbol.kind]
    return CompletionCandidate(
        label=symbol.name,
        kind=symbol.kind,
        documentation=documentation_for(symbol),
        lsp_kind=lsp_kind,
    )


# ═══════════════════════════════════════════════════════════════════════
#  Host events
# ═══════════════════════════════════════════════════════════════════════

def on_document_changed(store: SymbolStore, document_id: str, full_text: str):
    store.refresh(document_id, full_text)


def on_document_deleted(store: SymbolStore, document_id: str):
    store.invalidate(document_id)


# ═══════════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════════

def _snapshot(store: SymbolStore, document_id: str) -> List[Symbol]:
    symbols = store.get(document_id)
    if symbols is None:
        store.refresh(document_id)
        symbols = store.get(document_id)
    return symbols or []


def list_symbols(store: SymbolStore, document_id: str) -> List[OutlineEntry]:
    return [to_outline_entry(s) for s in _snapshot(store, document_id)]


def completions_at(store: SymbolStore, document_id: str, position: Position) -> List[CompletionCandidate]:
    symbols = _snapshot(store, document_id)
    return [to_completion(s) for s in resolve_at(symbols, position)]


def workspace_symbols(store: SymbolStore, query: str) -> List[OutlineEntry]:
    return [to_outline_entry(s, document_id) for document_id, s in store.search(query)]
