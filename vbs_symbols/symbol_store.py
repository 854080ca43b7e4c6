"""
Symbol Store — per-document cache of the latest parse.

Every refresh reparses the whole text and swaps the document's snapshot
in one assignment. Parsing runs outside the lock; two refreshes of the
same document race and the last writer wins.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from vbs_symbols.document_parser import parse_document
from vbs_symbols.models import Diagnostic, ParseResult, ParserSettings, Symbol

logger = logging.getLogger(__name__)


class SymbolStore:
    """Document id → (text, ParseResult)."""

    def __init__(self, settings: Optional[ParserSettings] = None):
        self.settings = settings or ParserSettings()
        self._lock = threading.Lock()
        self._texts: Dict[str, str] = {}
        self._results: Dict[str, ParseResult] = {}

    def refresh(self, document_id: str, text: Optional[str] = None) -> ParseResult:
        """
        Parse `text` (or the last text seen for the document) and replace
        the cached snapshot.
        """
        if text is None:
            with self._lock:
                text = self._texts.get(document_id)
            if text is None:
                logger.debug("No text known for %s, nothing to refresh", document_id)
                return ParseResult()

        result = parse_document(text, self.settings)
        with self._lock:
            self._texts[document_id] = text
            self._results[document_id] = result
        logger.debug("Refreshed %s: %d symbols", document_id, len(result.symbols))
        return result

    def get(self, document_id: str) -> Optional[List[Symbol]]:
        with self._lock:
            result = self._results.get(document_id)
        if result is None:
            return None
        return list(result.symbols)

    def diagnostics(self, document_id: str) -> Optional[List[Diagnostic]]:
        with self._lock:
            result = self._results.get(document_id)
        if result is None:
            return None
        return list(result.diagnostics)

    def text(self, document_id: str) -> Optional[str]:
        with self._lock:
            return self._texts.get(document_id)

    def invalidate(self, document_id: str):
        with self._lock:
            self._texts.pop(document_id, None)
            self._results.pop(document_id, None)
        logger.debug("Invalidated %s", document_id)

    def document_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._results)

    def search(self, query: str) -> List[Tuple[str, Symbol]]:
        """Symbols from every cached document whose rendered name contains `query`."""
        with self._lock:
            snapshot = sorted(self._results.items())
        matches = []
        for document_id, result in snapshot:
            for symbol in result.symbols:
                if query in symbol.rendered_name:
                    matches.append((document_id, symbol))
        return matches

    def reparse_all(self):
        """Re-run every known document, e.g. after the settings changed."""
        with self._lock:
            known = dict(self._texts)
        for document_id, text in known.items():
            self.refresh(document_id, text)

    @property
    def total_symbols(self) -> int:
        with self._lock:
            return sum(len(r.symbols) for r in self._results.values())
