"""Phase 2: import table.

Maps each locally bound import name to the module specifier it came from.
Specifiers are stored as written; resolving them is the classifier's job.
"""
from tree_sitter import Node

from .session import ImportRecord
from .walker import TreeVisitor, node_text
from ..utils.logger import get_logger

logger = get_logger(__name__)


def strip_quotes(text: str) -> str:
    return text.strip('"\'`')


class ImportTracker(TreeVisitor):
    """Record named and default ESM imports into ``session.imports``.

    Handled:
        import x from 'mod'              -> x (default)
        import { a, b as c } from 'mod'  -> a, c (named)
        import x, { y } from 'mod'       -> x (default), y (named)

    Namespace imports (``import * as ns``) and ``import x = require()`` are
    not recorded.
    """

    phase = "import tracking"
    handlers = {
        'import_statement': '_visit_import',
    }

    def _visit_import(self, node: Node):
        source_node = node.child_by_field_name('source')
        if source_node is None:
            return False

        module_name = strip_quotes(node_text(source_node))

        for clause in node.named_children:
            if clause.type != 'import_clause':
                continue

            for child in clause.named_children:
                # import x from 'mod'
                if child.type == 'identifier':
                    self._record(node_text(child), module_name, 'default')

                # import { x, y as z } from 'mod'
                elif child.type == 'named_imports':
                    for specifier in child.named_children:
                        if specifier.type != 'import_specifier':
                            continue
                        local_node = specifier.child_by_field_name('alias')
                        if local_node is None:
                            local_node = specifier.child_by_field_name('name')
                        if local_node is not None:
                            self._record(node_text(local_node), module_name, 'named')

        # Import statements never nest
        return False

    def _record(self, local_name: str, module_name: str, binding_kind: str) -> None:
        self.session.add_import(ImportRecord(
            local_name=local_name,
            source_module=module_name,
            importing_file=self.current_file.path,
            binding_kind=binding_kind,
        ))
        logger.debug(
            "Import: %s from %s in %s (%s)",
            local_name, module_name, self.current_file.path.name, binding_kind,
        )
