"""
Tests for the C++ Symbol Parser.

Requires Python 3.11+.
"""

from pathlib import Path
from typing import Callable

import pytest

from parsers.cpp_symbol_parser import CppSymbolParser


class TestHeaderParsing:
    """Test cases for header declarations."""

    @pytest.fixture
    def parser(self) -> CppSymbolParser:
        """Create a parser instance."""
        return CppSymbolParser()

    def test_class_name(self, parser: CppSymbolParser, sample_header: str):
        """Test class name extraction."""
        result = parser.parse_header(sample_header)

        assert result.class_name == "VideoDecoder"

    def test_instance_methods(self, parser: CppSymbolParser, sample_header: str, line_of: Callable):
        """Test instance method declarations with recognized return types."""
        result = parser.parse_header(sample_header)

        assert set(result.methods) == {"GetState", "Configure", "Release"}
        assert result.methods["GetState"].line == line_of(sample_header, "GetState(")
        assert result.methods["GetState"].end_line is None

    def test_static_methods(self, parser: CppSymbolParser, sample_header: str, line_of: Callable):
        """Test static declarations go to the static table only."""
        result = parser.parse_header(sample_header)

        assert set(result.static_methods) == {"Init", "IsConfigSupported"}
        assert "IsConfigSupported" not in result.methods
        assert result.static_methods["IsConfigSupported"].line == line_of(sample_header, "IsConfigSupported(")

    def test_constructor_is_not_a_method(self, parser: CppSymbolParser, sample_header: str):
        """Test the constructor declaration has no recognized return type."""
        result = parser.parse_header(sample_header)

        assert "VideoDecoder" not in result.methods

    def test_unrecognized_return_type(self, parser: CppSymbolParser):
        """Test instance declarations need a recognized return type."""
        result = parser.parse_header("  std::string GetName();\n  bool IsOpen();\n")

        assert list(result.methods) == ["IsOpen"]

    def test_custom_return_types(self):
        """Test return-type spellings come from the constructor."""
        parser = CppSymbolParser(return_types=["std::string"])
        result = parser.parse_header("  std::string GetName();\n  bool IsOpen();\n")

        assert list(result.methods) == ["GetName"]

    def test_first_declaration_wins(self, parser: CppSymbolParser):
        """Test overloads keep the first declaration line."""
        result = parser.parse_header("  void Close();\n  void Close(int code);\n")

        assert result.methods["Close"].line == 1

    def test_parse_header_file(self, parser: CppSymbolParser, tmp_path: Path, sample_header: str):
        """Test reading a header from disk."""
        header = tmp_path / "VideoDecoder.h"
        header.write_text(sample_header)

        assert parser.parse_header_file(header).class_name == "VideoDecoder"


class TestImplementationParsing:
    """Test cases for implementation definitions and body extents."""

    @pytest.fixture
    def parser(self) -> CppSymbolParser:
        """Create a parser instance."""
        return CppSymbolParser()

    def test_constructor_extent(self, parser: CppSymbolParser, sample_implementation: str):
        """Test the constructor body closes on its own brace line."""
        result = parser.parse_implementation(sample_implementation, "VideoDecoder")

        assert result.ctor is not None
        assert (result.ctor.line, result.ctor.end_line) == (3, 6)
        assert "VideoDecoder" not in result.methods

    def test_method_extents(self, parser: CppSymbolParser, sample_implementation: str):
        """Test method bodies including nested braces."""
        result = parser.parse_implementation(sample_implementation, "VideoDecoder")

        assert result.methods["GetState"].as_dict == {"line": 8, "endLine": 10}
        assert result.methods["Configure"].as_dict == {"line": 12, "endLine": 18}
        assert result.methods["IsConfigSupported"].as_dict == {"line": 20, "endLine": 22}

    def test_other_classes_ignored(self, parser: CppSymbolParser):
        """Test only definitions qualified by the requested class are collected."""
        content = "void Helper::Run() {\n}\nvoid Frame::Close() {\n}\n"
        result = parser.parse_implementation(content, "Frame")

        assert list(result.methods) == ["Close"]
        assert result.methods["Close"].as_dict == {"line": 3, "endLine": 4}

    def test_single_line_body(self, parser: CppSymbolParser):
        """Test a body opened and closed on the same line."""
        result = parser.parse_implementation("void Frame::Close() { closed_ = true; }\n", "Frame")

        assert result.methods["Close"].as_dict == {"line": 1, "endLine": 1}

    def test_first_definition_wins(self, parser: CppSymbolParser):
        """Test a repeated definition does not replace the first one."""
        content = (
            "void Frame::Close() {\n"
            "}\n"
            "void Frame::Close(int code) {\n"
            "  code_ = code;\n"
            "}\n"
        )
        result = parser.parse_implementation(content, "Frame")

        assert result.methods["Close"].as_dict == {"line": 1, "endLine": 2}

    def test_nested_definition_abandons_open_body(self, parser: CppSymbolParser):
        """Test one body is open at a time; a new definition inside it takes over."""
        content = (
            "void Frame::Outer() {\n"
            "  auto cb = &Frame::Inner();\n"
            "}\n"
        )
        result = parser.parse_implementation(content, "Frame")

        assert result.methods["Outer"].end_line is None
        assert result.methods["Inner"].line == 2

    def test_missing_symbols_are_not_errors(self, parser: CppSymbolParser):
        """Test unrelated text yields empty tables."""
        result = parser.parse_implementation("int main() { return 0; }\n", "Frame")

        assert result.ctor is None
        assert result.methods == {}
