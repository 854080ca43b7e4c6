"""
Symbol Extractor

Builds symbols for the simple (non-block) declarations:

  • Field     — `Private m_x` / `Public Name`
  • Variable  — `Dim a, b(10), c`
  • Constant  — `[Public|Private] Const X = ...`
  • Parameter — one Variable per entry of a method/property parameter list

Each extractor gets the regex match from the Construct Recognizer and
the statement it matched against; offsets are statement offsets.
"""

import re
import logging
from typing import List, Optional

from vbs_symbols.models import DiagnosticCategory, Symbol, SymbolKind
from vbs_symbols.parse_context import ParseContext
from vbs_symbols.statement_splitter import LogicalStatement

logger = logging.getLogger(__name__)

NAME = r"[A-Za-z_][A-Za-z0-9_]*"
# a name with optional array bounds: `a`, `b(10)`, `grid(3, 4)`
DIM_ITEM = rf"{NAME}(?:\s*\([^()]*\))?"

_DIM_ITEM_RE = re.compile(rf"(?P<item_name>{NAME})(?:\s*\([^()]*\))?")
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)")
_WORD_RE = re.compile(r"\S+")


def _first_char(text: str) -> int:
    return len(text) - len(text.lstrip())


# ═══════════════════════════════════════════════════════════════════════
#  Fields and constants
# ═══════════════════════════════════════════════════════════════════════

def extract_field(ctx: ParseContext, stmt: LogicalStatement, m: re.Match) -> Symbol:
    symbol = Symbol(
        kind=SymbolKind.FIELD,
        name=m.group("name"),
        visibility=m.group("visibility"),
        declared_range=ctx.range(stmt, m.start("visibility"), m.end("name")),
        name_range=ctx.range(stmt, m.start("name"), m.end("name")),
        parent_name=ctx.class_parent(),
    )
    ctx.emit(symbol)
    return symbol


def extract_constant(ctx: ParseContext, stmt: LogicalStatement, m: re.Match) -> Optional[Symbol]:
    """Module/class level constants only; the value expression is ignored."""
    if ctx.open_member is not None:
        logger.debug("Const '%s' inside %s ignored", m.group("name"), ctx.open_member.name)
        return None

    text = stmt.text
    symbol = Symbol(
        kind=SymbolKind.CONSTANT,
        name=m.group("name"),
        visibility=m.group("visibility"),
        declared_range=ctx.range(stmt, _first_char(text), len(text.rstrip())),
        name_range=ctx.range(stmt, m.start("name"), m.end("name")),
        parent_name=ctx.nearest_parent(),
    )
    ctx.emit(symbol)
    return symbol


# ═══════════════════════════════════════════════════════════════════════
#  Dim lists
# ═══════════════════════════════════════════════════════════════════════

def extract_variables(ctx: ParseContext, stmt: LogicalStatement, m: re.Match) -> List[Symbol]:
    """
    One Variable per `Dim` entry, in list order.

    The first entry's declared range starts at the `Dim` keyword; later
    entries cover only their own item.
    """
    parent = ctx.nearest_parent()
    names_start = m.start("names")
    names_text = m.group("names")
    keyword_start = m.start("keyword")

    symbols = []
    for item in _DIM_ITEM_RE.finditer(names_text):
        name_start = names_start + item.start("item_name")
        name_end = names_start + item.end("item_name")
        decl_start = keyword_start if not symbols else name_start
        symbol = Symbol(
            kind=SymbolKind.VARIABLE,
            name=item.group("item_name"),
            declared_range=ctx.range(stmt, decl_start, names_start + item.end()),
            name_range=ctx.range(stmt, name_start, name_end),
            parent_name=parent,
        )
        ctx.emit(symbol)
        symbols.append(symbol)
    return symbols


# ═══════════════════════════════════════════════════════════════════════
#  Parameter lists
# ═══════════════════════════════════════════════════════════════════════

def is_supported_parameter_list(text: str) -> bool:
    """Only one level of comma separation; `arr()` suffixes are fine."""
    flat = _EMPTY_PARENS_RE.sub("", text)
    return "(" not in flat and ")" not in flat


def extract_parameters(ctx: ParseContext, stmt: LogicalStatement,
                       text: str, offset: int, parent: str) -> List[Symbol]:
    """
    Decompose raw parameter text into Variable symbols.

    Each comma-separated token is split on whitespace: a single word is
    the name, otherwise the first word is the ByVal/ByRef modifier and the
    rest is the name. Symbols are returned, not emitted; the owning
    construct emits them when it closes.
    """
    if not is_supported_parameter_list(text):
        ctx.report(
            DiagnosticCategory.UNSUPPORTED_PARAMETER_LIST,
            f"nested parentheses in parameter list of '{parent}'",
            stmt.line,
        )
        return []

    params = []
    running = offset
    for token in text.split(","):
        # blank out `()` array suffixes so they never count as words
        cleaned = _EMPTY_PARENS_RE.sub(lambda pm: " " * len(pm.group(0)), token)
        words = list(_WORD_RE.finditer(cleaned))
        if words:
            named = words[1:] if len(words) > 1 else words
            name = " ".join(w.group(0) for w in named)
            params.append(Symbol(
                kind=SymbolKind.VARIABLE,
                name=name,
                declared_range=ctx.range(stmt, running + words[0].start(), running + words[-1].end()),
                name_range=ctx.range(stmt, running + named[0].start(), running + named[-1].end()),
                parent_name=parent,
            ))
        running += len(token) + 1
    return params
