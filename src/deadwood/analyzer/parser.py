"""Tree-sitter parser for TypeScript and JavaScript sources."""
from pathlib import Path
from typing import Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript


class LanguageParser:
    """TypeScript/JavaScript parser using the tree-sitter v0.23+ API."""

    SUPPORTED_LANGUAGES = {
        '.ts': 'typescript',
        '.tsx': 'tsx',
        '.js': 'javascript',
        '.jsx': 'javascript',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (typescript, tsx, javascript).

        Args:
            language: One of 'typescript', 'tsx', 'javascript'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.grammar = self._load_grammar()
        self.parser = Parser(self.grammar)

    def _load_grammar(self) -> Language:
        """Load the tree-sitter grammar for ``self.language``.

        The grammar packages return PyCapsules that must be wrapped with
        Language() before they can be handed to Parser().
        """
        if self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            # TSX is a separate grammar: plain TypeScript cannot parse JSX
            lang = Language(tstypescript.language_tsx())
        elif self.language == 'javascript':
            lang = Language(tsjavascript.language())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return lang

    def parse_source(self, source_code: bytes | str) -> Tree:
        """Parse in-memory source and return the tree-sitter Tree.

        tree-sitter never raises on bad syntax; broken regions come back as
        ERROR nodes and ``tree.root_node.has_error`` is set.
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    @classmethod
    def from_file_extension(cls, file_path: str | Path) -> Optional['LanguageParser']:
        """Create parser based on file extension.

        Args:
            file_path: Path to determine language from

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        extension = Path(file_path).suffix.lower()

        language = cls.SUPPORTED_LANGUAGES.get(extension)
        if language:
            return cls(language)
        return None
