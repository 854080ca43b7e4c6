"""
Statement Splitter

Splits a logical line on the ':' statement separator. String contents
are already masked by the Line Normalizer, so every ':' left is a real
separator.

Each statement after the first is left-padded with spaces up to the
offset where it starts, which keeps statement offsets identical to
logical-line offsets and lets all statements share the line's segments.
"""

from dataclasses import dataclass
from typing import List

from vbs_symbols.line_normalizer import LogicalLine, Segment

SEPARATOR = ":"


@dataclass
class LogicalStatement:
    text: str
    segments: List[Segment]
    start: int = 0  # offset of the first real character in the logical line

    @property
    def line(self) -> int:
        """Physical line of the statement's first non-blank character."""
        remaining = len(self.text) - len(self.text.lstrip())
        if remaining >= len(self.text):
            remaining = self.start
        for seg in self.segments:
            if remaining < seg.length:
                return seg.line
            remaining -= seg.length
        return self.segments[-1].line if self.segments else 0

    def is_blank(self) -> bool:
        return not self.text.strip()


def split_statements(logical: LogicalLine) -> List[LogicalStatement]:
    statements = []
    offset = 0
    for piece in logical.text.split(SEPARATOR):
        statements.append(LogicalStatement(
            text=" " * offset + piece,
            segments=logical.segments,
            start=offset,
        ))
        offset += len(piece) + 1
    return statements
