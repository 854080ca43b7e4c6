"""
Construct Recognizer

Classifies each logical statement with an ordered table of pattern
matchers (first match wins) and drives the open-construct state machine:

   1. method-open      Function / Sub
   2. method-close     End Function / End Sub
   3. property-open    Property Get / Let / Set
   4. property-close   End Property
   5. class-open       Class
   6. class-close      End Class
   7. field            Public|Private <name>
   8. variables        Dim a, b, c
   9. constant         [Public|Private] Const X = ...

Structural problems never stop the parse. They are recorded on the
ParseContext and the parse carries on with the original open context:

  • an opener while another method/property is open is rejected and the
    statement falls through to the later matchers
  • End Function closing a Sub (or the reverse) still closes the method
  • End Class with a method/property still open drops that construct
  • anything still open at end of document is dropped
"""

import re
import logging
from typing import Callable, List, Optional, Tuple

from vbs_symbols.models import DiagnosticCategory, Range, Symbol, SymbolKind
from vbs_symbols.parse_context import OpenConstruct, ParseContext
from vbs_symbols.statement_splitter import LogicalStatement
from vbs_symbols.symbol_extractor import (
    DIM_ITEM, NAME, extract_constant, extract_field, extract_parameters, extract_variables,
)

logger = logging.getLogger(__name__)

_VISIBILITY = r"(?:(?P<visibility>public|private)\s+(?:(?P<default>default)\s+)?)?"
_PARAMS = r"(?:\((?P<params>.*)\))?"

METHOD_OPEN_RE = re.compile(
    rf"^\s*{_VISIBILITY}(?P<keyword>function|sub)\s+(?P<name>{NAME})\s*{_PARAMS}\s*$",
    re.IGNORECASE,
)
METHOD_CLOSE_RE = re.compile(r"^\s*end\s+(?P<keyword>function|sub)\s*$", re.IGNORECASE)
PROPERTY_OPEN_RE = re.compile(
    rf"^\s*{_VISIBILITY}property\s+(?P<keyword>let|set|get)\s+(?P<name>{NAME})\s*{_PARAMS}\s*$",
    re.IGNORECASE,
)
PROPERTY_CLOSE_RE = re.compile(r"^\s*end\s+property\s*$", re.IGNORECASE)
CLASS_OPEN_RE = re.compile(rf"^\s*class\s+(?P<name>{NAME})\s*$", re.IGNORECASE)
CLASS_CLOSE_RE = re.compile(r"^\s*end\s+class\s*$", re.IGNORECASE)
FIELD_RE = re.compile(
    rf"^\s*(?P<visibility>public|private)\s+"
    rf"(?!(?:function|sub|property|const|default|dim|class)\b)(?P<name>{NAME})\s*$",
    re.IGNORECASE,
)
DIM_RE = re.compile(
    rf"^\s*(?P<keyword>dim)\s+(?P<names>{DIM_ITEM}(?:\s*,\s*{DIM_ITEM})*)\s*$",
    re.IGNORECASE,
)
CONST_RE = re.compile(
    rf"^\s*(?:(?P<visibility>public|private)\s+)?const\s+(?P<name>{NAME})\s*=.*$",
    re.IGNORECASE,
)


def _statement_start(text: str) -> int:
    return len(text) - len(text.lstrip())


def _statement_end(text: str) -> int:
    return len(text.rstrip())


# ═══════════════════════════════════════════════════════════════════════
#  Openers
# ═══════════════════════════════════════════════════════════════════════

def _open_construct(ctx: ParseContext, stmt: LogicalStatement, m: re.Match,
                    kind: SymbolKind) -> OpenConstruct:
    params = m.group("params") or ""
    construct = OpenConstruct(
        kind=kind,
        keyword=m.group("keyword").lower(),
        name=m.group("name"),
        start=ctx.position(stmt, _statement_start(stmt.text)),
        name_range=ctx.range(stmt, m.start("name"), m.end("name")),
        line=stmt.line,
        visibility=m.group("visibility"),
        parameter_text=params,
        declared_type=m.group("keyword").capitalize(),
    )
    if m.group("params") is not None:
        construct.parameters = extract_parameters(
            ctx, stmt, params, m.start("params"), construct.name,
        )
    return construct


def _member_open(ctx: ParseContext, stmt: LogicalStatement, m: re.Match, kind: SymbolKind) -> bool:
    current = ctx.open_member
    if current is not None:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            f"'{m.group('name')}' opened while '{current.name}' is still open",
            stmt.line,
        )
        return False

    construct = _open_construct(ctx, stmt, m, kind)
    if kind is SymbolKind.METHOD:
        ctx.open_method = construct
    else:
        ctx.open_property = construct
    return True


def method_open(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = METHOD_OPEN_RE.match(stmt.text)
    if m is None:
        return False
    return _member_open(ctx, stmt, m, SymbolKind.METHOD)


def property_open(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = PROPERTY_OPEN_RE.match(stmt.text)
    if m is None:
        return False
    return _member_open(ctx, stmt, m, SymbolKind.PROPERTY)


def class_open(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = CLASS_OPEN_RE.match(stmt.text)
    if m is None:
        return False

    current = ctx.open_class or ctx.open_member
    if current is not None:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            f"class '{m.group('name')}' opened while '{current.name}' is still open",
            stmt.line,
        )
        return False

    ctx.open_class = OpenConstruct(
        kind=SymbolKind.CLASS,
        keyword="class",
        name=m.group("name"),
        start=ctx.position(stmt, _statement_start(stmt.text)),
        name_range=ctx.range(stmt, m.start("name"), m.end("name")),
        line=stmt.line,
    )
    return True


# ═══════════════════════════════════════════════════════════════════════
#  Closers
# ═══════════════════════════════════════════════════════════════════════

def _close_range(ctx: ParseContext, stmt: LogicalStatement, construct: OpenConstruct) -> Range:
    end = ctx.range(stmt, _statement_start(stmt.text), _statement_end(stmt.text)).end
    return Range(start=construct.start, end=end)


def _emit_member(ctx: ParseContext, stmt: LogicalStatement, construct: OpenConstruct):
    ctx.emit(Symbol(
        kind=construct.kind,
        name=construct.name,
        visibility=construct.visibility,
        declared_type=construct.declared_type,
        parameter_text=construct.parameter_text,
        declared_range=_close_range(ctx, stmt, construct),
        name_range=construct.name_range,
        parent_name=ctx.class_parent(),
    ))
    for param in construct.parameters:
        ctx.emit(param)


def method_close(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = METHOD_CLOSE_RE.match(stmt.text)
    if m is None:
        return False

    keyword = m.group("keyword").lower()
    construct = ctx.open_method
    if construct is None:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            f"'end {keyword}' without an open function or sub",
            stmt.line,
        )
        return True

    if keyword != construct.keyword:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            f"'end {keyword}' closes {construct.keyword} '{construct.name}'",
            stmt.line,
        )

    _emit_member(ctx, stmt, construct)
    ctx.open_method = None
    return True


def property_close(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    if PROPERTY_CLOSE_RE.match(stmt.text) is None:
        return False

    construct = ctx.open_property
    if construct is None:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            "'end property' without an open property",
            stmt.line,
        )
        return True

    _emit_member(ctx, stmt, construct)
    ctx.open_property = None
    return True


def class_close(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    if CLASS_CLOSE_RE.match(stmt.text) is None:
        return False

    construct = ctx.open_class
    if construct is None:
        ctx.report(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            "'end class' without an open class",
            stmt.line,
        )
        return True

    for member in (ctx.open_method, ctx.open_property):
        if member is not None:
            ctx.report(
                DiagnosticCategory.DANGLING_OPEN,
                f"{member.keyword} '{member.name}' still open when class '{construct.name}' closes",
                member.line,
            )
    ctx.open_method = None
    ctx.open_property = None

    ctx.emit(Symbol(
        kind=SymbolKind.CLASS,
        name=construct.name,
        declared_range=_close_range(ctx, stmt, construct),
        name_range=construct.name_range,
    ))
    ctx.open_class = None
    return True


# ═══════════════════════════════════════════════════════════════════════
#  Simple declarations
# ═══════════════════════════════════════════════════════════════════════

def field_declaration(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = FIELD_RE.match(stmt.text)
    if m is None:
        return False
    extract_field(ctx, stmt, m)
    return True


def variable_declaration(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = DIM_RE.match(stmt.text)
    if m is None:
        return False
    extract_variables(ctx, stmt, m)
    return True


def constant_declaration(ctx: ParseContext, stmt: LogicalStatement) -> bool:
    m = CONST_RE.match(stmt.text)
    if m is None:
        return False
    return extract_constant(ctx, stmt, m) is not None


Recognizer = Callable[[ParseContext, LogicalStatement], bool]

RECOGNIZERS: List[Tuple[str, Recognizer]] = [
    ("method-open", method_open),
    ("method-close", method_close),
    ("property-open", property_open),
    ("property-close", property_close),
    ("class-open", class_open),
    ("class-close", class_close),
    ("field", field_declaration),
    ("variable", variable_declaration),
    ("constant", constant_declaration),
]


def recognize(ctx: ParseContext, stmt: LogicalStatement) -> Optional[str]:
    """Run the table against one statement; returns the consuming matcher's name."""
    for name, matcher in RECOGNIZERS:
        if matcher(ctx, stmt):
            return name
    return None


def finish(ctx: ParseContext):
    """Drop every construct still open at end of document."""
    for construct in (ctx.open_method, ctx.open_property, ctx.open_class):
        if construct is not None:
            ctx.report(
                DiagnosticCategory.DANGLING_OPEN,
                f"{construct.keyword} '{construct.name}' is never closed",
                construct.line,
            )
    ctx.open_method = None
    ctx.open_property = None
    ctx.open_class = None
