"""Phase 4: export table.

Handles the three shapes of ``export_statement``:

    export function f() {} / export class C {} / export const a = 1
    export { a, b as c }  /  export { a } from './mod'
    export default a      /  export = a
"""
from tree_sitter import Node

from .session import ExportRecord
from .walker import TreeVisitor, node_text
from ..utils.logger import get_logger

logger = get_logger(__name__)

DECLARATION_EXPORT_KINDS = {
    'function_declaration': 'function',
    'generator_function_declaration': 'function',
    'function_signature': 'function',
    'class_declaration': 'class',
    'abstract_class_declaration': 'class',
    'interface_declaration': 'interface',
    'type_alias_declaration': 'type',
}

VARIABLE_STATEMENTS = ('lexical_declaration', 'variable_declaration')

# export default function foo() {} may surface as an expression value
NAMED_VALUE_KINDS = {
    'function_expression': 'function',
    'function': 'function',
    'generator_function': 'function',
    'class': 'class',
}


class ExportTracker(TreeVisitor):
    """Record every exported name into ``session.exports``."""

    phase = "export tracking"
    handlers = {
        'export_statement': '_visit_export',
    }

    def _visit_export(self, node: Node):
        declaration = node.child_by_field_name('declaration')
        if declaration is not None:
            self._mark_declaration(declaration)

        for child in node.named_children:
            if child.type == 'export_clause':
                self._mark_export_clause(child)

        value = node.child_by_field_name('value')
        if value is None:
            # export = a
            value = self._export_assignment_value(node)
        if value is not None:
            if value.type == 'identifier':
                self._record(node_text(value), 'default')
            elif value.type in NAMED_VALUE_KINDS:
                name_node = value.child_by_field_name('name')
                if name_node is not None:
                    self._record(node_text(name_node), NAMED_VALUE_KINDS[value.type])

        # Namespaces nest further export statements
        return True

    def _mark_declaration(self, declaration: Node) -> None:
        # export declare function f(): void;
        if declaration.type == 'ambient_declaration':
            for child in declaration.named_children:
                self._mark_declaration(child)
            return

        if declaration.type in VARIABLE_STATEMENTS:
            for declarator in declaration.named_children:
                if declarator.type != 'variable_declarator':
                    continue
                name_node = declarator.child_by_field_name('name')
                if name_node is not None and name_node.type == 'identifier':
                    self._record(node_text(name_node), 'variable')
            return

        kind = DECLARATION_EXPORT_KINDS.get(declaration.type)
        if kind is None:
            # enums and namespaces are not tracked
            return
        name_node = declaration.child_by_field_name('name')
        if name_node is not None:
            self._record(node_text(name_node), kind)

    def _mark_export_clause(self, clause: Node) -> None:
        for specifier in clause.named_children:
            if specifier.type != 'export_specifier':
                continue
            # The exported spelling is the alias when there is one
            name_node = specifier.child_by_field_name('alias')
            if name_node is None:
                name_node = specifier.child_by_field_name('name')
            if name_node is not None:
                self._record(node_text(name_node), 'named')

    @staticmethod
    def _export_assignment_value(node: Node):
        seen_equals = False
        for child in node.children:
            if seen_equals and child.is_named:
                return child
            if child.type == '=':
                seen_equals = True
        return None

    def _record(self, name: str, kind: str) -> None:
        self.session.add_export(ExportRecord(
            exported_name=name,
            exporting_file=self.current_file.path,
            export_kind=kind,
        ))
        logger.debug("Export: %s from %s (%s)", name, self.current_file.path.name, kind)
