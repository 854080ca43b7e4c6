"""
Position Mapper

Converts an offset inside a LogicalStatement back to the (line, column)
it came from in the original document.
"""

import logging
from typing import Optional

from vbs_symbols.models import Position, Range
from vbs_symbols.statement_splitter import LogicalStatement

logger = logging.getLogger(__name__)


def resolve(statement: LogicalStatement, offset: int) -> Optional[Position]:
    """
    Map a statement offset to a document position.

    An offset sitting exactly on the boundary of two segments belongs to
    the start of the next segment. An offset equal to the total length is
    the (exclusive) end of the last segment. Anything outside that is an
    internal inconsistency: it is logged and None is returned.
    """
    if offset >= 0:
        remaining = offset
        for seg in statement.segments:
            if remaining < seg.length:
                return Position(line=seg.line, character=seg.column + remaining)
            remaining -= seg.length

        if remaining == 0 and statement.segments:
            last = statement.segments[-1]
            return Position(line=last.line, character=last.column + last.length)

    total = sum(seg.length for seg in statement.segments)
    logger.warning(
        "Offset %d outside statement on line %d (length %d)",
        offset, statement.line, total,
    )
    return None


def resolve_end(statement: LogicalStatement, offset: int) -> Optional[Position]:
    """Map an exclusive end offset, staying on the line of the last character."""
    if offset <= 0:
        return resolve(statement, offset)
    last = resolve(statement, offset - 1)
    if last is None:
        return None
    return Position(line=last.line, character=last.character + 1)


def resolve_range(statement: LogicalStatement, start: int, end: int) -> Optional[Range]:
    """Map a [start, end) offset span, or None if either end fails."""
    begin = resolve(statement, start)
    finish = resolve_end(statement, end) if end > start else begin
    if begin is None or finish is None:
        return None
    return Range(start=begin, end=finish)
