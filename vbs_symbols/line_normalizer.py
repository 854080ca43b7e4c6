"""
Line Normalizer

Turns raw document text into logical lines:

  1. String literal contents are blanked with spaces, the quotes kept,
     so later matching never trips over ':' or keywords inside strings
     while the literal still counts as text for statement ranges.
  2. Everything from the first comment marker to end of line is dropped.
  3. Physical lines ending in the continuation marker ' _' are joined
     with the lines that follow them.

Each LogicalLine keeps one Segment per physical line it was built from,
which is all the Position Mapper needs to map an offset back to the
original (line, column).
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Iterator, List

logger = logging.getLogger(__name__)

# "..." with "" as an escaped quote
_STRING_LITERAL_RE = re.compile(r'"(?:[^"]|"")*"')
# ' comment, or a Rem comment starting the line
_REM_RE = re.compile(r'^\s*rem(?:\s|$)', re.IGNORECASE)
# '_' at end of line, preceded by whitespace or alone on the line
_CONTINUATION_RE = re.compile(r'(?:^|\s)(_)\s*$')

_LINE_SPLIT_RE = re.compile(r'\r?\n')


@dataclass
class Segment:
    """One physical line's share of a logical line."""
    line: int       # 0-indexed physical line number
    offset: int     # start offset inside the logical text
    length: int
    column: int = 0  # column of the segment's first character


@dataclass
class LogicalLine:
    text: str
    segments: List[Segment] = field(default_factory=list)

    @property
    def first_line(self) -> int:
        return self.segments[0].line if self.segments else 0


def split_lines(text: str) -> List[str]:
    return _LINE_SPLIT_RE.split(text)


def mask_strings(line: str) -> str:
    """Blank the inside of every string literal, keeping its quotes and length."""
    return _STRING_LITERAL_RE.sub(lambda m: '"' + " " * (len(m.group(0)) - 2) + '"', line)


def strip_comment(line: str) -> str:
    """Drop the comment part of an already string-masked line."""
    if _REM_RE.match(line):
        return ""
    idx = line.find("'")
    if idx > -1:
        return line[:idx]
    return line


def normalize_line(line: str) -> str:
    return strip_comment(mask_strings(line))


def has_continuation(line: str) -> bool:
    return _CONTINUATION_RE.search(line) is not None


def _blank_continuation(line: str) -> str:
    m = _CONTINUATION_RE.search(line)
    if m is None:
        return line
    pos = m.start(1)
    return line[:pos] + " " + line[pos + 1:]


def iter_logical_lines(text: str) -> Iterator[LogicalLine]:
    """Yield the logical lines of a document, in order."""
    physical = split_lines(text)
    pending: List[Segment] = []
    parts: List[str] = []
    offset = 0

    for number, raw in enumerate(physical):
        line = normalize_line(raw)
        joined = has_continuation(line)
        if joined:
            line = _blank_continuation(line)

        pending.append(Segment(line=number, offset=offset, length=len(line)))
        parts.append(line)
        offset += len(line)

        if joined and number + 1 < len(physical):
            continue
        if joined:
            logger.debug("Continuation marker on last line %d ignored", number)

        yield LogicalLine(text="".join(parts), segments=pending)
        pending, parts, offset = [], [], 0
