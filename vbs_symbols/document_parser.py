"""
Document Parser — runs the full pipeline over one document's text.

    text → logical lines → statements → recognizer table → ParseResult

The result is a pure function of the text and the settings, so reparsing
unchanged text yields an identical ParseResult.
"""

import logging
from typing import Optional

from vbs_symbols.construct_recognizer import finish, recognize
from vbs_symbols.line_normalizer import iter_logical_lines
from vbs_symbols.models import ParseResult, ParserSettings
from vbs_symbols.parse_context import ParseContext
from vbs_symbols.statement_splitter import split_statements

logger = logging.getLogger(__name__)


def parse_document(text: str, settings: Optional[ParserSettings] = None) -> ParseResult:
    ctx = ParseContext(settings=settings or ParserSettings())

    for logical in iter_logical_lines(text):
        for statement in split_statements(logical):
            if statement.is_blank():
                continue
            recognize(ctx, statement)

    finish(ctx)

    if ctx.dropped_diagnostics:
        logger.debug("%d further problems not kept", ctx.dropped_diagnostics)
    logger.debug(
        "Parsed %d symbols, %d diagnostics", len(ctx.symbols), len(ctx.diagnostics),
    )
    return ParseResult(symbols=ctx.symbols, diagnostics=ctx.diagnostics)
