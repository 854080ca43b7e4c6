"""
Scope Resolver

Builds a containment tree over a snapshot's symbols and answers "what is
visible at this position". The tree is rebuilt per query and never
cached.

Visibility at a position is the innermost containing node plus, for it
and every ancestor up to the file root, their direct children. Symbols
nested inside an unrelated sibling are not visible.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from vbs_symbols.models import Position, Symbol

logger = logging.getLogger(__name__)


@dataclass
class ScopeNode:
    symbol: Optional[Symbol]          # None for the file root
    children: List["ScopeNode"] = field(default_factory=list)

    def contains(self, pos: Position) -> bool:
        return self.symbol is None or self.symbol.declared_range.contains(pos)


def _sort_key(symbol: Symbol):
    rng = symbol.declared_range
    # larger ranges first when two symbols start at the same place
    return (rng.start.line, rng.start.character, -rng.end.line, -rng.end.character)


def build_scope_tree(symbols: List[Symbol]) -> ScopeNode:
    """Single pass over the symbols in start order, keeping a stack of open nodes."""
    root = ScopeNode(symbol=None)
    stack = [root]

    for symbol in sorted(symbols, key=_sort_key):
        while len(stack) > 1 and not stack[-1].symbol.declared_range.contains_range(symbol.declared_range):
            stack.pop()
        node = ScopeNode(symbol=symbol)
        stack[-1].children.append(node)
        stack.append(node)

    return root


def find_path(root: ScopeNode, pos: Position) -> List[ScopeNode]:
    """Nodes from the root down to the innermost one containing `pos`."""
    path = [root]
    node = root
    while True:
        inner = next((c for c in node.children if c.contains(pos)), None)
        if inner is None:
            return path
        path.append(inner)
        node = inner


def resolve_at(symbols: List[Symbol], pos: Position) -> List[Symbol]:
    root = build_scope_tree(symbols)
    path = find_path(root, pos)

    visible: List[Symbol] = []
    seen = set()
    for node in path:
        for child in node.children:
            if id(child) not in seen:
                seen.add(id(child))
                visible.append(child.symbol)

    logger.debug(
        "Position %d:%d is %d scopes deep, %d symbols visible",
        pos.line, pos.character, len(path) - 1, len(visible),
    )
    return visible
