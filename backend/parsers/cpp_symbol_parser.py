"""
SpecTrace C++ Symbol Parser.

Line-oriented discovery of member declarations in a header and member
definitions (with body extents) in the matching implementation file.
Requires Python 3.11+.
"""

import re
from pathlib import Path
from typing import Iterable

from parsers.models import CppHeaderSymbols, CppImplSymbols, SymbolLocation
from utils.logger import LoggerMixin

DEFAULT_RETURN_TYPES = ("Napi::Value", "void", "bool")

CLASS_PATTERN = re.compile(r"class\s+(\w+)\s*:")
STATIC_METHOD_PATTERN = re.compile(r"^\s*static\s+\S+\s+(\w+)\s*\(")


class CppSymbolParser(LoggerMixin):
    """
    Regex-based C++ symbol parser.

    Only line numbers are needed, so declarations are recognized by shape
    rather than by a full C++ grammar. Every symbol keeps its first match.
    """

    def __init__(self, return_types: Iterable[str] = DEFAULT_RETURN_TYPES) -> None:
        """
        Args:
            return_types: Return-type spellings that mark an instance method
                declaration in a header
        """
        alternatives = "|".join(re.escape(t) for t in return_types)
        self._method_pattern = re.compile(rf"^\s*(?:{alternatives})\s+(\w+)\s*\(")

    def parse_header_file(self, file_path: Path) -> CppHeaderSymbols:
        """Parse a header from disk."""
        return self.parse_header(file_path.read_text(encoding="utf-8"))

    def parse_implementation_file(self, file_path: Path, class_name: str) -> CppImplSymbols:
        """Parse an implementation file from disk."""
        return self.parse_implementation(file_path.read_text(encoding="utf-8"), class_name)

    def parse_header(self, content: str) -> CppHeaderSymbols:
        """
        Extract the class name and method declarations from a header.

        Static declarations (`static <Type> <Name>(`) are checked first; any
        other line is an instance declaration only when its return type is
        one of the recognized spellings.

        Args:
            content: Header source text

        Returns:
            CppHeaderSymbols with instance and static method tables
        """
        result = CppHeaderSymbols()

        class_match = CLASS_PATTERN.search(content)
        if class_match:
            result.class_name = class_match.group(1)

        for line_number, line in enumerate(content.splitlines(), start=1):
            static_match = STATIC_METHOD_PATTERN.match(line)
            if static_match:
                result.static_methods.setdefault(static_match.group(1), SymbolLocation(line_number))
                continue

            method_match = self._method_pattern.match(line)
            if method_match:
                result.methods.setdefault(method_match.group(1), SymbolLocation(line_number))

        self.log.debug(
            "parsed_header",
            class_name=result.class_name,
            methods=len(result.methods),
            static_methods=len(result.static_methods),
        )
        return result

    def parse_implementation(self, content: str, class_name: str) -> CppImplSymbols:
        """
        Extract constructor and method definitions with their body extents.

        A qualified definition `<Class>::<Name>(` opens a body; braces are
        counted from that line and the body closes on the first line where
        the running count is back to zero and a `}` is present. Exactly one
        body is open at a time: a new definition seen while a body is still
        open abandons the open one, which keeps `end_line=None`.

        Args:
            content: Implementation source text
            class_name: Class whose members are collected

        Returns:
            CppImplSymbols with the constructor and method table
        """
        result = CppImplSymbols()
        name = re.escape(class_name)
        ctor_pattern = re.compile(rf"\b{name}::{name}\s*\(")
        method_pattern = re.compile(rf"\b{name}::(\w+)\s*\(")

        open_body: SymbolLocation | None = None
        depth = 0

        for line_number, line in enumerate(content.splitlines(), start=1):
            started = self._match_definition(
                line, line_number, class_name, ctor_pattern, method_pattern, result
            )
            if started is not None:
                open_body = started
                depth = 0

            if open_body is None:
                continue

            depth += line.count("{") - line.count("}")
            if depth == 0 and "}" in line:
                open_body.end_line = line_number
                open_body = None

        self.log.debug(
            "parsed_implementation",
            class_name=class_name,
            has_ctor=result.ctor is not None,
            methods=len(result.methods),
        )
        return result

    @staticmethod
    def _match_definition(
        line: str,
        line_number: int,
        class_name: str,
        ctor_pattern: re.Pattern[str],
        method_pattern: re.Pattern[str],
        result: CppImplSymbols,
    ) -> SymbolLocation | None:
        """Record a new definition on this line and return it, if any."""
        if ctor_pattern.search(line):
            if result.ctor is None:
                result.ctor = SymbolLocation(line_number)
                return result.ctor
            return None

        method_match = method_pattern.search(line)
        if method_match is None:
            return None

        method_name = method_match.group(1)
        if method_name == class_name or method_name in result.methods:
            return None

        location = SymbolLocation(line_number)
        result.methods[method_name] = location
        return location
