"""Shared tree traversal with a per-node error boundary.

Every collection phase is a TreeVisitor: a dispatch table from tree-sitter
node type to handler method. The walk is pre-order (parent before children)
over named nodes, each visited exactly once. A handler that raises is
logged and its subtree skipped; traversal resumes with the next sibling.
"""
from typing import Callable, Dict, Optional

from tree_sitter import Node

from ..utils.logger import get_logger

logger = get_logger(__name__)


def node_text(node: Node) -> str:
    """Decode the source text covered by ``node``."""
    return node.text.decode('utf-8')


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    """True if both handles point at the same syntax node."""
    if a is None or b is None:
        return False
    return a.type == b.type and a.start_byte == b.start_byte and a.end_byte == b.end_byte


def field_is(parent: Node, field_name: str, node: Node) -> bool:
    """True if ``node`` is the child stored under ``field_name`` of ``parent``."""
    return same_node(parent.child_by_field_name(field_name), node)


def decorated_start(declaration: Node) -> Node:
    """Node where a declaration's text begins, counting decorators.

    ``@Dec() export class Foo {}`` keeps its decorators on the export
    statement, so the declaration starts there.
    """
    parent = declaration.parent
    if (parent is not None and parent.type == 'export_statement'
            and parent.child_by_field_name('decorator') is not None):
        return parent
    return declaration


def walk(root: Node, visit: Callable[[Node], Optional[bool]],
         on_error: Callable[[Node, Exception], None]) -> int:
    """Depth-first, pre-order walk with an explicit stack.

    Args:
        root: Node to start from
        visit: Called once per node; returning False prunes the children
        on_error: Called when ``visit`` raises; the subtree is pruned

    Returns:
        Number of nodes whose visit raised
    """
    failures = 0
    stack = [root]

    while stack:
        node = stack.pop()
        try:
            descend = visit(node)
        except Exception as exc:
            failures += 1
            on_error(node, exc)
            continue

        if descend is not False:
            # Reversed so the leftmost child is popped first
            stack.extend(reversed(node.named_children))

    return failures


class TreeVisitor:
    """Base class for the collection phases.

    Subclasses fill ``handlers`` with ``node type -> method name`` and
    implement those methods. A handler returns False to skip the node's
    children; any other return value (including None) descends.
    """

    phase = "visit"
    handlers: Dict[str, str] = {}

    def __init__(self, session):
        self.session = session
        self.current_file = None

    def visit_file(self, source_file) -> int:
        """Run the visitor over one parsed file.

        Returns:
            Number of nodes that failed and were skipped
        """
        self.current_file = source_file
        try:
            return walk(source_file.root, self._dispatch, self._on_error)
        finally:
            self.current_file = None

    def _dispatch(self, node: Node) -> Optional[bool]:
        method_name = self.handlers.get(node.type)
        if method_name is None:
            return True
        return getattr(self, method_name)(node)

    def _on_error(self, node: Node, exc: Exception) -> None:
        path = self.current_file.path if self.current_file is not None else "<unknown>"
        logger.warning(
            "Error processing %s node during %s in %s (line %d): %s",
            node.type, self.phase, path, node.start_point[0] + 1, exc,
        )
