"""
Source Reader

Loads script files from disk for documents the host has not sent us.
Binary files are refused, and reads stop after MAX_LINES lines. Undecodable
bytes are replaced rather than raising.
"""

import os
import logging
from itertools import islice
from typing import List, Optional

logger = logging.getLogger(__name__)

MAX_LINES = 100_000

SCRIPT_EXTENSIONS = {".vbs", ".vb", ".vba", ".cls", ".bas", ".asp"}

_BINARY_SNIFF_BYTES = 8192


def _is_binary(full_path: str) -> bool:
    with open(full_path, "rb") as fb:
        return b"\x00" in fb.read(_BINARY_SNIFF_BYTES)


def read_source(full_path: str) -> Optional[str]:
    """Text of a script file with its line endings intact, or None."""
    if not os.path.isfile(full_path):
        return None
    try:
        if _is_binary(full_path):
            logger.warning("Skipping binary file: %s", full_path)
            return None
        # newline="" keeps \r\n so positions match what the editor shows
        with open(full_path, "r", encoding="utf-8", errors="replace", newline="") as f:
            lines = list(islice(f, MAX_LINES + 1))
    except OSError as e:
        logger.error("Error reading %s: %s", full_path, e)
        return None

    if len(lines) > MAX_LINES:
        logger.warning("%s has more than %d lines, the rest is ignored", full_path, MAX_LINES)
        del lines[MAX_LINES:]
    return "".join(lines)


def is_script_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SCRIPT_EXTENSIONS


def _norm_path(p: str) -> str:
    return p.replace("\\", "/")


def discover_script_files(root: str) -> List[str]:
    """Find all script files below `root`, as sorted relative paths."""
    files = []
    for dirpath, dirs, filenames in os.walk(root):
        # Skip common non-source directories
        dirs[:] = [d for d in dirs if d not in {
            ".git", "build", "__pycache__", "node_modules", ".vscode", ".idea", "venv",
        }]
        for fname in filenames:
            if is_script_file(fname):
                rel = _norm_path(os.path.relpath(os.path.join(dirpath, fname), root))
                files.append(rel)
    return sorted(files)
