from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from tree_sitter import Node, Query, QueryCursor

from ..analyzer.parser import LanguageParser
from ..analyzer.walker import decorated_start


# (name, line) pairs; a line of None matches the name anywhere in the file
SymbolTarget = Tuple[str, Optional[int]]


class JSSymbolRemover:
    """
    Removes specified JS/TS declarations (functions, classes, variables, types)
    from source files using Tree-sitter for precise AST-based deletion.

    Only the *declaring* occurrence of a name is matched; references to the
    name elsewhere in the file are left alone.
    """

    # Declaration node -> field holding its name
    DECLARATION_NAME_FIELDS = {
        "function_declaration": "name",
        "generator_function_declaration": "name",
        "function_signature": "name",
        "class_declaration": "name",
        "abstract_class_declaration": "name",
        "interface_declaration": "name",
        "type_alias_declaration": "name",
        "enum_declaration": "name",
        "variable_declarator": "name",
    }

    # Wrappers that belong to the declaration they hold
    WRAPPER_TYPES = {"export_statement", "ambient_declaration"}

    VARIABLE_STATEMENT_TYPES = {"lexical_declaration", "variable_declaration"}

    def __init__(self):
        # Query to find name nodes; each is checked against its parent.
        # The JavaScript grammar has no type_identifier node.
        self.query_strs = {
            "javascript": "(identifier) @id",
            "typescript": "(identifier) @id (type_identifier) @id",
            "tsx": "(identifier) @id (type_identifier) @id",
        }

    def remove_symbols_batch(
        self, file_symbols: Dict[Path, List[SymbolTarget]], file_contents: Dict[Path, str]
    ) -> Dict[Path, Tuple[str, int]]:
        """
        Batch processes files to remove specified declarations.

        Args:
            file_symbols: Mapping of file path to (name, line) targets.
            file_contents: Mapping of file path to raw content string.

        Returns:
            Dict mapping Path to (modified_source_code, number_of_removals).
        """
        results = {}

        for file_path, targets in file_symbols.items():
            if not targets or file_path not in file_contents:
                continue

            content = file_contents[file_path]
            parser = LanguageParser.from_file_extension(file_path)

            if parser is None:
                results[file_path] = (content, 0)
                continue

            results[file_path] = self._process_file(content, targets, parser)

        return results

    def _process_file(
        self, source_code: str, targets: Iterable[SymbolTarget], parser: LanguageParser
    ) -> Tuple[str, int]:
        source_bytes = source_code.encode("utf8")
        tree = parser.parse_source(source_bytes)
        root = tree.root_node

        # tree-sitter v0.25+ API: Use Query constructor and QueryCursor
        query = Query(parser.grammar, self.query_strs[parser.language])
        cursor = QueryCursor(query)
        # captures() returns dict[str, list[Node]] where keys are capture names
        captures = cursor.captures(root)

        wanted: Dict[str, set] = {}
        for name, line in targets:
            wanted.setdefault(name, set()).add(line)

        # 1. Identify declaration nodes to remove, keyed by start byte
        declarations: Dict[int, Node] = {}
        for nodes in captures.values():
            for node in nodes:
                lines = wanted.get(node.text.decode("utf8"))
                if lines is None:
                    continue
                declaration = self._declaration_for_name(node)
                if declaration is None:
                    continue
                if None not in lines and not self._declared_on(declaration, lines):
                    continue
                declarations[declaration.start_byte] = declaration

        ranges_to_remove = self._removal_ranges(declarations.values())

        if not ranges_to_remove:
            return source_code, 0

        # 2. Merge overlapping ranges (Logic: Union of intervals)
        ranges_to_remove.sort(key=lambda x: x[0])

        merged_ranges = []
        current_start, current_end = ranges_to_remove[0]
        for next_start, next_end in ranges_to_remove[1:]:
            if next_start < current_end:
                current_end = max(current_end, next_end)
            else:
                merged_ranges.append((current_start, current_end))
                current_start, current_end = next_start, next_end
        merged_ranges.append((current_start, current_end))

        # 3. Extend ranges to clean up trailing newlines
        final_ranges = [
            self._extend_range_for_newline(source_bytes, start, end)
            for start, end in merged_ranges
        ]

        # 4. Apply deletions in DESCENDING order to preserve offsets
        final_ranges.sort(key=lambda x: x[0], reverse=True)

        modified_bytes = bytearray(source_bytes)
        for start, end in final_ranges:
            del modified_bytes[start:end]

        return modified_bytes.decode("utf8"), len(final_ranges)

    def _declaration_for_name(self, name_node: Node) -> Optional[Node]:
        """Return the declaration whose name is ``name_node``, or None for a reference."""
        parent = name_node.parent
        if parent is None:
            return None

        field_name = self.DECLARATION_NAME_FIELDS.get(parent.type)
        if field_name is None:
            return None

        declared = parent.child_by_field_name(field_name)
        if declared is None or declared.start_byte != name_node.start_byte:
            return None
        return parent

    def _declared_on(self, declaration: Node, lines: set) -> bool:
        """True if the declaration, or its leading decorators, start on one of ``lines``."""
        for node in (declaration, decorated_start(declaration)):
            if node.start_point[0] + 1 in lines:
                return True
        return False

    def _removal_ranges(self, declarations: Iterable[Node]) -> List[Tuple[int, int]]:
        """
        Expands declaration nodes to byte ranges.
        Declarators are grouped by statement: a statement that loses every
        declarator is removed whole, otherwise the declarators go with their commas.
        """
        ranges: List[Tuple[int, int]] = []
        by_statement: Dict[int, Tuple[Node, List[Node]]] = {}

        for declaration in declarations:
            if declaration.type != "variable_declarator":
                ranges.append(self._find_definition_range(declaration))
                continue

            statement = declaration.parent
            if statement is None or statement.type not in self.VARIABLE_STATEMENT_TYPES:
                # for (let i = 0; ...) and friends
                continue
            by_statement.setdefault(statement.start_byte, (statement, []))[1].append(declaration)

        for statement, targeted in by_statement.values():
            declarators = [c for c in statement.named_children if c.type == "variable_declarator"]
            if len(targeted) >= len(declarators):
                ranges.append(self._find_definition_range(statement))
                continue
            ranges.extend(self._declarator_ranges(targeted, declarators))

        return ranges

    def _find_definition_range(self, declaration: Node) -> Tuple[int, int]:
        """
        Expands a declaration or variable statement to the removable statement,
        including any export / declare wrapper.
        """
        target_node = declaration

        # Climb through export / declare wrappers
        while target_node.parent is not None and target_node.parent.type in self.WRAPPER_TYPES:
            target_node = target_node.parent

        return (target_node.start_byte, target_node.end_byte)

    def _declarator_ranges(self, targeted: List[Node], declarators: List[Node]) -> List[Tuple[int, int]]:
        """Ranges covering runs of adjacent declarators, each with one separating comma.

        ``const a = 1, b = 2, c = 3`` minus ``b`` becomes ``const a = 1, c = 3``,
        minus ``b`` and ``c`` it becomes ``const a = 1``.
        """
        starts = {d.start_byte for d in targeted}
        ranges = []
        index = 0
        while index < len(declarators):
            if declarators[index].start_byte not in starts:
                index += 1
                continue
            first = index
            while index + 1 < len(declarators) and declarators[index + 1].start_byte in starts:
                index += 1
            if index + 1 < len(declarators):
                # The run and everything up to the next kept one: "b = 2, "
                ranges.append((declarators[first].start_byte, declarators[index + 1].start_byte))
            else:
                # Trailing run: take the preceding comma instead: ", c = 3"
                ranges.append((declarators[first - 1].end_byte, declarators[index].end_byte))
            index += 1
        return ranges

    def _extend_range_for_newline(self, source_bytes: bytes, start: int, end: int) -> Tuple[int, int]:
        """
        Adjusts the end index to consume a trailing newline if present,
        ensuring we don't leave empty lines behind.
        """
        length = len(source_bytes)
        current = end

        # Consume optional carriage return
        if current < length and source_bytes[current] == 13:  # \r
            current += 1

        # Consume newline
        if current < length and source_bytes[current] == 10:  # \n
            current += 1
            return (start, current)

        return (start, end)
