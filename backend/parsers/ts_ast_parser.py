"""
SpecTrace TypeScript Parser.

Tree-sitter based extraction of class members from wrapper files and of
named test blocks from test files.
Requires Python 3.11+.
"""

import time
from pathlib import Path
from typing import Iterable

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from parsers.errors import ClassNotFoundError
from parsers.models import SymbolLocation, TestCase, TsClassSymbols, TsTestSymbols
from utils.logger import LoggerMixin

CLASS_NODE_TYPES = ("class_declaration", "abstract_class_declaration")
STRING_NODE_TYPES = ("string", "template_string")


def _as_bytes(content: str | bytes) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


class TypeScriptParser(LoggerMixin):
    """
    TypeScript parser using Tree-sitter.

    Wrapper files yield the first class with its constructor, methods,
    accessors and static methods. Test files yield describe/it style blocks.
    """

    def __init__(
        self,
        group_functions: Iterable[str] = ("describe",),
        case_functions: Iterable[str] = ("it",),
    ) -> None:
        """
        Initialize the Tree-sitter parser with the TypeScript language.

        Args:
            group_functions: Callee names that open a named test group
            case_functions: Callee names that declare a single test case
        """
        self._language = Language(tstypescript.language_typescript())
        self._parser = Parser(self._language)
        self._group_functions = frozenset(group_functions)
        self._case_functions = frozenset(case_functions)

    def parse_class_file(self, file_path: Path) -> TsClassSymbols:
        """
        Parse a wrapper file and extract its first class.

        Args:
            file_path: Path to the TypeScript file

        Returns:
            TsClassSymbols for the first class declaration
        """
        start_time = time.perf_counter()
        result = self.parse_class(file_path.read_bytes(), str(file_path))
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.log.debug(
            "parsed_wrapper",
            path=str(file_path),
            elapsed_ms=round(elapsed_ms, 2),
            class_name=result.class_name,
        )
        return result

    def parse_test_file(self, file_path: Path) -> TsTestSymbols:
        """Parse a test file from disk."""
        return self.parse_tests(file_path.read_bytes())

    def parse_class(self, content: str | bytes, source_name: str = "<memory>") -> TsClassSymbols:
        """
        Extract members of the first class declared in TypeScript source.

        Args:
            content: TypeScript source
            source_name: Name used in error messages

        Returns:
            TsClassSymbols with constructor, methods, getters, setters and
            static methods

        Raises:
            ClassNotFoundError: if the source declares no class
        """
        source = _as_bytes(content)
        class_node = self._find_first_class(self._parser.parse(source).root_node)
        if class_node is None:
            raise ClassNotFoundError(source_name)

        name_node = class_node.child_by_field_name("name")
        result = TsClassSymbols(class_name=self._get_text(name_node, source) if name_node else "Unknown")

        body = class_node.child_by_field_name("body")
        if body is None:
            return result

        for child in body.children:
            if child.type == "method_definition":
                self._record_method(child, result, source)

        return result

    def parse_tests(self, content: str | bytes) -> TsTestSymbols:
        """
        Extract named groups and cases from a test file.

        Every call whose callee is exactly a group function records its first
        string argument in `describes`; every case-function call is appended
        to `cases`, keeping duplicates and document order.

        Args:
            content: TypeScript test source

        Returns:
            TsTestSymbols with group table and ordered case list
        """
        source = _as_bytes(content)
        result = TsTestSymbols()

        def walk(node: Node) -> None:
            if node.type == "call_expression":
                self._record_test_call(node, result, source)
            for child in node.children:
                walk(child)

        walk(self._parser.parse(source).root_node)
        return result

    @staticmethod
    def _get_text(node: Node, source: bytes) -> str:
        """Extract text content from a node."""
        return source[node.start_byte : node.end_byte].decode("utf-8")

    def _get_location(self, node: Node) -> SymbolLocation:
        """Extract source location from a node."""
        return SymbolLocation(
            line=node.start_point[0] + 1,  # 1-indexed
            end_line=node.end_point[0] + 1,
        )

    def _find_first_class(self, root: Node) -> Node | None:
        """Depth-first search for the first class declaration in document order."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in CLASS_NODE_TYPES:
                return node
            stack.extend(reversed(node.children))
        return None

    def _record_method(self, node: Node, result: TsClassSymbols, source: bytes) -> None:
        """Classify a method definition and record its location."""
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return

        name = self._get_text(name_node, source)
        location = self._get_location(node)

        # Modifiers are the tokens before the name, e.g. `static`, `get`, `set`
        modifiers: set[str] = set()
        for child in node.children:
            if child.start_byte >= name_node.start_byte:
                break
            modifiers.update(child.type.split())

        if name == "constructor" and not modifiers & {"get", "set", "static"}:
            if result.constructor is None:
                result.constructor = location
        elif "get" in modifiers:
            result.getters.setdefault(name, location)
        elif "set" in modifiers:
            result.setters.setdefault(name, location)
        elif "static" in modifiers:
            result.static_methods.setdefault(name, location)
        else:
            result.methods.setdefault(name, location)

    def _record_test_call(self, node: Node, result: TsTestSymbols, source: bytes) -> None:
        """Record a describe/it style call."""
        function = node.child_by_field_name("function")
        if function is None:
            return

        callee = self._get_text(function, source)
        if callee not in self._group_functions and callee not in self._case_functions:
            return

        arguments = node.child_by_field_name("arguments")
        first = arguments.named_children[0] if arguments and arguments.named_children else None
        if first is None or first.type not in STRING_NODE_TYPES:
            return

        name = self._get_text(first, source)[1:-1]
        location = self._get_location(node)
        if callee in self._group_functions:
            result.describes.setdefault(name, location)
        else:
            result.cases.append(TestCase(name=name, location=location))
