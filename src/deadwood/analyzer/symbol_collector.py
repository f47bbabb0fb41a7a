"""Phase 1: declaration collection.

Walks every node of a file (not only the top level) and records each
variable, function, type alias, interface, class and enum declaration by
name into the session's declaration table.
"""
from typing import Optional

from tree_sitter import Node

from .session import Declaration
from .walker import TreeVisitor, decorated_start, node_text
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Initializers that turn a variable binding into a function declaration
FUNCTION_VALUE_TYPES = {
    'arrow_function',
    'function_expression',
    'function',  # older grammars name function expressions 'function'
    'generator_function',
}

# Loop heads hold declaration lists, not variable statements
LOOP_TYPES = {'for_statement', 'for_in_statement'}


class SymbolCollector(TreeVisitor):
    """Record every declaration of interest into ``session.declarations``."""

    phase = "declaration collection"
    handlers = {
        'lexical_declaration': '_visit_variable_statement',
        'variable_declaration': '_visit_variable_statement',
        'variable_declarator': '_visit_variable_declarator',
        'function_declaration': '_visit_function',
        'generator_function_declaration': '_visit_function',
        'function_signature': '_visit_function',
        'type_alias_declaration': '_visit_type_alias',
        'interface_declaration': '_visit_interface',
        'class_declaration': '_visit_class',
        'abstract_class_declaration': '_visit_class',
        'enum_declaration': '_visit_enum',
    }

    def __init__(self, session):
        super().__init__(session)
        self.declaration_count = 0

    def visit_file(self, source_file) -> int:
        before = self.declaration_count
        failures = super().visit_file(source_file)
        found = self.declaration_count - before
        if found:
            logger.debug("%s: %d declarations", source_file.path.name, found)
        return failures

    def _record(self, name_node: Node, kind: str, node: Node, start: Optional[Node] = None) -> None:
        self.session.add_declaration(Declaration(
            name=node_text(name_node),
            kind=kind,
            defining_file=self.current_file.path,
            line=self.current_file.line_of(node if start is None else start),
            node=node,
        ))
        self.declaration_count += 1

    def _visit_variable_statement(self, node: Node):
        parent = node.parent
        if parent is not None and parent.type in LOOP_TYPES:
            return True

        keyword = node.child_by_field_name('kind')
        if keyword is None:
            keyword = node.child(0)
        kind = 'constant' if keyword is not None and keyword.type == 'const' else 'variable'

        for declarator in node.named_children:
            if declarator.type != 'variable_declarator':
                continue
            name_node = declarator.child_by_field_name('name')
            if name_node is not None and name_node.type == 'identifier':
                self._record(name_node, kind, declarator)
        return True

    def _visit_variable_declarator(self, node: Node):
        name_node = node.child_by_field_name('name')
        value_node = node.child_by_field_name('value')
        if (name_node is not None and name_node.type == 'identifier'
                and value_node is not None and value_node.type in FUNCTION_VALUE_TYPES):
            self._record(name_node, 'function', node)
        return True

    def _visit_function(self, node: Node):
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self._record(name_node, 'function', node)
        return True

    def _visit_type_alias(self, node: Node):
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self._record(name_node, 'type', node)
        return True

    def _visit_interface(self, node: Node):
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self._record(name_node, 'interface', node)
        return True

    def _visit_class(self, node: Node):
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self._record(name_node, 'class', node, decorated_start(node))
        return True

    def _visit_enum(self, node: Node):
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self._record(name_node, 'enum', node)
        return True
