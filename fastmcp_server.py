"""
VBScript Symbol Server — MCP Server

Exposes VBScript outline and completion data via the Model Context Protocol:

  1. document_changed     — push the full text of an open document
  2. document_deleted     — forget a document
  3. load_file            — read a script file from disk and parse it
  4. index_folder         — load every script file below a folder
  5. list_symbols         — document outline (classes, methods, fields, ...)
  6. completions_at       — symbols visible at a line/column
  7. workspace_symbols    — substring search over every loaded document
  8. document_diagnostics — structural problems found while parsing
  9. configure            — change parser settings and reparse everything

Lines and columns are 0-based, as in the Language Server Protocol.
"""

from mcp.server.fastmcp import FastMCP
import os
import sys
import logging

# Ensure the package is importable when run as a script
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from vbs_symbols.language_features import (
    completions_at as _completions_at,
    list_symbols as _list_symbols,
    on_document_changed,
    on_document_deleted,
    workspace_symbols as _workspace_symbols,
)
from vbs_symbols.models import ParserSettings, Position, Range
from vbs_symbols.source_reader import discover_script_files, is_script_file, read_source
from vbs_symbols.symbol_store import SymbolStore

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("VBScript Symbol Server")

store = SymbolStore()


def _doc_id(path: str) -> str:
    """Canonical document id for a file path."""
    return path.replace("\\", "/")


def _fmt_range(rng: Range) -> str:
    return f"{rng.start.line}:{rng.start.character}-{rng.end.line}:{rng.end.character}"


def _unknown(document_id: str) -> str:
    return (
        f"Error: No text known for `{document_id}`. "
        "Call document_changed or load_file first."
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1/2 — Document events
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def document_changed(document_id: str, full_text: str) -> str:
    """
    Replaces the cached symbols of a document with a fresh parse.

    Args:
        document_id: Any stable identifier for the document (URI or path).
        full_text:   The complete current text of the document.
    """
    try:
        on_document_changed(store, document_id, full_text)
    except Exception as e:
        logger.exception("Refresh of %s failed", document_id)
        return f"Error parsing {document_id}: {e}"

    symbols = store.get(document_id) or []
    problems = store.diagnostics(document_id) or []
    return f"Parsed `{document_id}`: {len(symbols)} symbols, {len(problems)} problems."


@mcp.tool()
def document_deleted(document_id: str) -> str:
    """
    Drops a document and its cached symbols.

    Args:
        document_id: Identifier previously passed to document_changed / load_file.
    """
    on_document_deleted(store, document_id)
    return f"Removed `{document_id}`."


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3/4 — Loading from disk
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def load_file(file_path: str) -> str:
    """
    Reads a script file from disk and parses it. The path becomes the
    document id.

    Args:
        file_path: Absolute path of a .vbs / .vba / .bas / .cls / .asp file.
    """
    text = read_source(file_path)
    if text is None:
        return f"Error: Cannot read {file_path}"
    if not is_script_file(file_path):
        logger.info("Loading %s although its extension is not a known script type", file_path)
    return document_changed(_doc_id(file_path), text)


@mcp.tool()
def index_folder(folder: str) -> str:
    """
    Loads every script file below a folder so workspace_symbols can search
    them. Document ids are the files' absolute paths.

    Args:
        folder: Absolute path of the folder to scan.
    """
    if not os.path.isdir(folder):
        return f"Error: Folder not found at {folder}"

    files = discover_script_files(folder)
    loaded = 0
    for rel in files:
        full = os.path.join(folder, rel)
        text = read_source(full)
        if text is None:
            continue
        on_document_changed(store, _doc_id(full), text)
        loaded += 1

    logger.info("Indexed %d of %d script files under %s", loaded, len(files), folder)
    return (
        f"Indexed {loaded} of {len(files)} script files under `{folder}`.\n"
        f"{store.total_symbols} symbols across {len(store.document_ids())} documents."
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tool 5 — Outline
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_symbols(document_id: str) -> str:
    """
    Lists every symbol of a document: classes, methods, properties, fields,
    variables, constants and parameters.

    Args:
        document_id: Identifier passed to document_changed / load_file.
    """
    if store.text(document_id) is None:
        return _unknown(document_id)

    entries = _list_symbols(store, document_id)
    if not entries:
        return f"No symbols found in `{document_id}`"

    result = f"**{len(entries)} symbols in `{document_id}`:**\n\n"
    result += "| Name | Kind | Parent | Range |\n"
    result += "|------|------|--------|-------|\n"
    for e in entries:
        kind = e.kind.value if not e.detail else f"{e.kind.value} ({e.detail})"
        result += f"| {e.rendered_name} | {kind} | {e.parent_name or '-'} | {_fmt_range(e.declared_range)} |\n"
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Tool 6 — Completions
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def completions_at(document_id: str, line: int, character: int) -> str:
    """
    Lists the symbols visible at a position: the enclosing class, method or
    property, their direct members, and file-level symbols.

    Args:
        document_id: Identifier passed to document_changed / load_file.
        line:        0-based line number.
        character:   0-based column.
    """
    if store.text(document_id) is None:
        return _unknown(document_id)

    candidates = _completions_at(store, document_id, Position(line=line, character=character))
    if not candidates:
        return f"No symbols visible at {line}:{character} in `{document_id}`"

    result = f"**{len(candidates)} symbols visible at {line}:{character}:**\n\n"
    for c in candidates:
        result += f"- `{c.label}` ({c.kind.value})"
        if c.documentation:
            result += f" — {c.documentation}"
        result += "\n"
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Tool 7 — Workspace search
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def workspace_symbols(query: str) -> str:
    """
    Finds symbols whose name contains `query` in every loaded document.

    Args:
        query: Case-sensitive substring of the symbol name.
    """
    entries = _workspace_symbols(store, query)
    if not entries:
        return f"No symbols matching `{query}`"

    result = f"**{len(entries)} symbols matching `{query}`:**\n\n"
    for e in entries:
        result += (
            f"- **{e.rendered_name}** ({e.kind.value}) "
            f"in `{e.document_id}` at {_fmt_range(e.name_range)}\n"
        )
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Tool 8 — Diagnostics
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def document_diagnostics(document_id: str) -> str:
    """
    Lists the structural problems found in the last parse of a document,
    e.g. `End Sub` closing a Function or a Function never closed.

    Args:
        document_id: Identifier passed to document_changed / load_file.
    """
    problems = store.diagnostics(document_id)
    if problems is None:
        return _unknown(document_id)
    if not problems:
        return f"No problems found in `{document_id}`"

    result = f"**{len(problems)} problems in `{document_id}`:**\n\n"
    for d in problems:
        result += f"- Line {d.line + 1} **{d.category.value}**: {d.message}\n"
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Tool 9 — Settings
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def configure(max_number_of_problems: int = 100) -> str:
    """
    Changes parser settings and reparses every loaded document.

    Args:
        max_number_of_problems: Upper bound of problems kept per document.
    """
    if max_number_of_problems < 0:
        return "Error: max_number_of_problems must not be negative."

    store.settings = ParserSettings(max_number_of_problems=max_number_of_problems)
    store.reparse_all()
    return (
        f"Settings updated (max_number_of_problems={max_number_of_problems}); "
        f"reparsed {len(store.document_ids())} documents."
    )


def main():
    # stdout carries the MCP stdio transport
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if hasattr(mcp, "_tool_manager") and hasattr(mcp._tool_manager, "_tools"):
            tools = mcp._tool_manager._tools.keys()
            logger.debug("VBScript Symbol Server starting with %d tools: %s", len(tools), list(tools))
    except Exception as e:
        logger.debug("Error inspecting tools: %s", e)

    mcp.run()


if __name__ == "__main__":
    main()
