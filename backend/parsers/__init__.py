"""
SpecTrace Parser Package.

Structural parsers for WebIDL, C++ headers/implementations, TypeScript
wrappers/tests and narrative spec documents.
Requires Python 3.11+.
"""

from parsers.models import (
    SymbolLocation,
    SymbolTable,
    CppHeaderSymbols,
    CppImplSymbols,
    TsClassSymbols,
    TsTestSymbols,
    TestCase,
    AlgorithmEntry,
    SpecAttribute,
    SpecDocument,
    IdlArgument,
    IdlAttribute,
    IdlOperation,
    IdlConstructor,
    IdlInterface,
    IdlDictionary,
    IdlDictionaryMember,
    IdlEnum,
    IdlDocument,
    InterfaceMember,
)
from parsers.errors import (
    StructuralParseError,
    IdlSyntaxError,
    ClassNotFoundError,
    MissingArtifactError,
    ArtifactReadError,
)
from parsers.idl_parser import WebIDLParser
from parsers.cpp_symbol_parser import CppSymbolParser
from parsers.ts_ast_parser import TypeScriptParser
from parsers.spec_markdown_parser import SpecMarkdownParser

__all__ = [
    # Symbol tables
    "SymbolLocation",
    "SymbolTable",
    "CppHeaderSymbols",
    "CppImplSymbols",
    "TsClassSymbols",
    "TsTestSymbols",
    "TestCase",
    # Narrative
    "AlgorithmEntry",
    "SpecAttribute",
    "SpecDocument",
    # IDL
    "IdlArgument",
    "IdlAttribute",
    "IdlOperation",
    "IdlConstructor",
    "IdlInterface",
    "IdlDictionary",
    "IdlDictionaryMember",
    "IdlEnum",
    "IdlDocument",
    "InterfaceMember",
    # Errors
    "StructuralParseError",
    "IdlSyntaxError",
    "ClassNotFoundError",
    "MissingArtifactError",
    "ArtifactReadError",
    # Parser classes
    "WebIDLParser",
    "CppSymbolParser",
    "TypeScriptParser",
    "SpecMarkdownParser",
]
