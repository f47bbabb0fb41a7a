"""Phase 3: usage set.

Every identifier-shaped node that is not itself the name being declared
counts as a use of its spelling. No scope resolution is done: a local
shadowing a top-level name keeps the top-level name alive.
"""
from tree_sitter import Node

from .walker import TreeVisitor, field_is, node_text
from ..utils.logger import get_logger

logger = get_logger(__name__)

IDENTIFIER_TYPES = (
    'identifier',
    'type_identifier',
    'property_identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
    'statement_identifier',
)

# parent type -> field holding the declared name
DECLARATION_NAME_FIELDS = {
    'variable_declarator': 'name',
    'function_declaration': 'name',
    'generator_function_declaration': 'name',
    'function_signature': 'name',
    'class_declaration': 'name',
    'abstract_class_declaration': 'name',
    'interface_declaration': 'name',
    'type_alias_declaration': 'name',
    'enum_declaration': 'name',
    'required_parameter': 'pattern',
    'optional_parameter': 'pattern',
    'arrow_function': 'parameter',
    'public_field_definition': 'name',
    'field_definition': 'property',
    'method_definition': 'name',
    'method_signature': 'name',
    'abstract_method_signature': 'name',
    'property_signature': 'name',
    'catch_clause': 'parameter',
}

PARAMETER_CONTAINERS = ('formal_parameters', 'required_parameter', 'optional_parameter')


def is_declaration_name(node: Node) -> bool:
    """True if ``node`` is the name introduced by its parent, not a reference."""
    parent = node.parent
    if parent is None:
        return False

    field_name = DECLARATION_NAME_FIELDS.get(parent.type)
    if field_name is not None:
        return field_is(parent, field_name, node)

    # for (const q of xs) declares q; for (q of xs) assigns to it
    if parent.type == 'for_in_statement':
        return parent.child_by_field_name('kind') is not None and field_is(parent, 'left', node)

    # import { a as b }: only the local name 'b' is a binding
    if parent.type == 'import_specifier':
        if parent.child_by_field_name('alias') is not None:
            return field_is(parent, 'alias', node)
        return field_is(parent, 'name', node)

    # JS parameters: (a, b = 1, ...rest)
    if parent.type == 'formal_parameters':
        return True
    grandparent = parent.parent
    if grandparent is None:
        return False
    if parent.type == 'assignment_pattern' and grandparent.type == 'formal_parameters':
        return field_is(parent, 'left', node)
    if parent.type == 'rest_pattern' and grandparent.type in PARAMETER_CONTAINERS:
        return True

    return False


class UsageRecorder(TreeVisitor):
    """Add every referenced identifier spelling to ``session.usages``."""

    phase = "usage recording"
    handlers = {node_type: '_visit_identifier' for node_type in IDENTIFIER_TYPES}

    def __init__(self, session):
        super().__init__(session)
        self.usage_count = 0

    def visit_file(self, source_file) -> int:
        before = self.usage_count
        failures = super().visit_file(source_file)
        logger.debug("%s: %d identifier references", source_file.path.name,
                     self.usage_count - before)
        return failures

    def _visit_identifier(self, node: Node):
        if not is_declaration_name(node):
            self.session.add_usage(node_text(node))
            self.usage_count += 1
        return True
