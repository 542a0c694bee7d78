"""
SpecTrace WebIDL Parser.

PEG grammar for WebIDL fragments plus a visitor that turns the parse tree
into the declaration model in parsers.models.
Requires Python 3.11+.
"""

import re
import time
from pathlib import Path
from typing import Any, NamedTuple

from parsimonious.exceptions import IncompleteParseError, ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from parsers.errors import IdlSyntaxError
from parsers.models import (
    IdlArgument,
    IdlAttribute,
    IdlCallback,
    IdlConst,
    IdlConstructor,
    IdlDictionary,
    IdlDictionaryMember,
    IdlDocument,
    IdlEnum,
    IdlIncludes,
    IdlInterface,
    IdlIterable,
    IdlLocation,
    IdlOperation,
    IdlTypedef,
)
from utils.logger import LoggerMixin


WEBIDL_GRAMMAR = Grammar(r'''
    # ---------------------------------------------------------------
    # Definitions
    # ---------------------------------------------------------------

    definitions         = _ (definition _)*
    definition          = (ext_attrs _)? declaration
    declaration         = callback_interface / callback_function / interface_mixin
                        / interface / partial / namespace / dictionary / enum
                        / typedef / includes

    callback_interface  = CALLBACK _ INTERFACE _ definition_name _ "{" _ (interface_member _)* "}" _ ";"
    callback_function   = CALLBACK _ definition_name _ "=" _ type _ "(" _ argument_list? _ ")" _ ";"
    interface_mixin     = INTERFACE _ MIXIN _ definition_name _ "{" _ (interface_member _)* "}" _ ";"
    interface           = INTERFACE _ definition_name _ inheritance? _ "{" _ (interface_member _)* "}" _ ";"
    partial             = PARTIAL _ (interface_mixin / interface / dictionary / namespace)
    namespace           = NAMESPACE _ definition_name _ "{" _ (interface_member _)* "}" _ ";"
    dictionary          = DICTIONARY _ definition_name _ inheritance? _ "{" _ (dictionary_member _)* "}" _ ";"
    enum                = ENUM _ definition_name _ "{" _ enum_values _ "}" _ ";"
    typedef             = TYPEDEF _ type _ definition_name _ ";"
    includes            = definition_name _ INCLUDES _ mixin_name _ ";"

    inheritance         = ":" _ identifier
    # Not aliases of identifier: an alias rule takes the name of its target
    definition_name     = ~r"[_-]?[A-Za-z][0-9A-Z_a-z-]*"
    mixin_name          = ~r"[_-]?[A-Za-z][0-9A-Z_a-z-]*"
    member_name         = ~r"[_-]?[A-Za-z][0-9A-Z_a-z-]*"

    # ---------------------------------------------------------------
    # Interface members
    # ---------------------------------------------------------------

    interface_member    = (ext_attrs _)? member
    member              = constructor / const / iterable / maplike / setlike
                        / attribute / operation / stringifier
    constructor         = CONSTRUCTOR _ "(" _ argument_list? _ ")" _ ";"
    const               = CONST _ type _ member_name _ "=" _ const_value _ ";"
    iterable            = (ASYNC _)? ITERABLE _ "<" _ type _ ("," _ type _)? ">" _ ("(" _ argument_list? _ ")" _)? ";"
    maplike             = (READONLY _)? MAPLIKE _ "<" _ type _ "," _ type _ ">" _ ";"
    setlike             = (READONLY _)? SETLIKE _ "<" _ type _ ">" _ ";"
    attribute           = qualifier* ATTRIBUTE _ type _ member_name _ ";"
    operation           = qualifier* type _ member_name? _ "(" _ argument_list? _ ")" _ ";"
    stringifier         = STRINGIFIER _ ";"
    qualifier           = (STATIC / STRINGIFIER / READONLY / INHERIT / GETTER / SETTER / DELETER) _

    # ---------------------------------------------------------------
    # Arguments, dictionary members and enum values
    # ---------------------------------------------------------------

    argument_list       = argument (_ "," _ argument)*
    argument            = (ext_attrs _)? (optional_argument / variadic_argument / required_argument)
    optional_argument   = OPTIONAL _ type _ member_name _ default?
    variadic_argument   = type _ "..." _ member_name
    required_argument   = type _ member_name
    default             = "=" _ default_value
    default_value       = const_value / string_literal / empty_sequence / empty_dictionary / NULL
    empty_sequence      = "[" _ "]"
    empty_dictionary    = "{" _ "}"

    dictionary_member   = (ext_attrs _)? (required_field / optional_field)
    required_field      = REQUIRED _ type _ member_name _ ";"
    optional_field      = type _ member_name _ default? _ ";"

    enum_values         = string_literal (_ "," _ string_literal)* (_ ",")?

    # ---------------------------------------------------------------
    # Types
    # ---------------------------------------------------------------

    type                = (ext_attrs _)? type_body nullable?
    type_body           = union_type / generic_type / primitive_type / identifier
    union_type          = "(" _ type _ (OR _ type _)+ ")"
    generic_type        = identifier _ "<" _ type _ ("," _ type _)* ">"
    primitive_type      = ~r"(unsigned\s+)?(long\s+long|long|short)\b"
                        / ~r"(unrestricted\s+)?(float|double)\b"
    nullable            = _ "?"

    # ---------------------------------------------------------------
    # Extended attributes
    # ---------------------------------------------------------------

    ext_attrs           = "[" _ ext_attr (_ "," _ ext_attr)* _ "]"
    ext_attr            = identifier _ ext_attr_rhs?
    ext_attr_rhs        = ext_attr_args / ("=" _ ext_attr_value _ ext_attr_args?)
    ext_attr_value      = ext_attr_list / string_literal / const_value / identifier
    ext_attr_list       = "(" _ ext_attr_item (_ "," _ ext_attr_item)* _ ")"
    ext_attr_item       = string_literal / const_value / identifier
    ext_attr_args       = "(" _ argument_list? _ ")"

    # ---------------------------------------------------------------
    # Tokens
    # ---------------------------------------------------------------

    const_value         = TRUE / FALSE / number
    number              = ~r"-?(Infinity|NaN|0[xX][0-9A-Fa-f]+|(\d+\.\d*|\.\d+)([eE][+-]?\d+)?|\d+[eE][+-]?\d+|\d+)"
    string_literal      = ~r'"[^"]*"'
    identifier          = ~r"[_-]?[A-Za-z][0-9A-Z_a-z-]*"

    ASYNC               = ~r"async\b"
    ATTRIBUTE           = ~r"attribute\b"
    CALLBACK            = ~r"callback\b"
    CONST               = ~r"const\b"
    CONSTRUCTOR         = ~r"constructor\b"
    DELETER             = ~r"deleter\b"
    DICTIONARY          = ~r"dictionary\b"
    ENUM                = ~r"enum\b"
    FALSE               = ~r"false\b"
    GETTER              = ~r"getter\b"
    INCLUDES            = ~r"includes\b"
    INHERIT             = ~r"inherit\b"
    INTERFACE           = ~r"interface\b"
    ITERABLE            = ~r"iterable\b"
    MAPLIKE             = ~r"maplike\b"
    MIXIN               = ~r"mixin\b"
    NAMESPACE           = ~r"namespace\b"
    NULL                = ~r"null\b"
    OPTIONAL            = ~r"optional\b"
    OR                  = ~r"or\b"
    PARTIAL             = ~r"partial\b"
    READONLY            = ~r"readonly\b"
    REQUIRED            = ~r"required\b"
    SETLIKE             = ~r"setlike\b"
    SETTER              = ~r"setter\b"
    STATIC              = ~r"static\b"
    STRINGIFIER         = ~r"stringifier\b"
    TRUE                = ~r"true\b"
    TYPEDEF             = ~r"typedef\b"

    _                   = ~r"(\s+|//[^\n]*|/\*[\s\S]*?\*/)*"
''')


class Tagged(NamedTuple):
    """A labelled value passed up the visitor to the enclosing rule."""

    tag: str
    value: Any


def _flatten(items: Any) -> list[Any]:
    """Flatten nested visitor results into a single list."""
    if not isinstance(items, list):
        return [items]
    flat: list[Any] = []
    for item in items:
        flat.extend(_flatten(item))
    return flat


def _normalize(text: str) -> str:
    """Collapse whitespace in a fragment of IDL source."""
    text = " ".join(text.split())
    text = re.sub(r"\s*([<>()\[\]=])\s*", r"\1", text)
    return re.sub(r"\s*,\s*", ", ", text)


def _location(node: Node) -> IdlLocation:
    """Line span of a node within the complete source text."""
    return IdlLocation(
        line=node.full_text.count("\n", 0, node.start) + 1,
        end_line=node.full_text.count("\n", 0, node.end) + 1,
    )


class IdlVisitor(NodeVisitor):
    """Transforms the Parsimonious parse tree into the IDL declaration model."""

    def generic_visit(self, node: Node, visited_children: list[Any]) -> list[Any]:
        """Default: pass up whatever the children produced."""
        return _flatten(visited_children)

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    @staticmethod
    def _tags(children: list[Any], tag: str) -> list[Any]:
        return [c.value for c in _flatten(children) if isinstance(c, Tagged) and c.tag == tag]

    @classmethod
    def _tag(cls, children: list[Any], tag: str, default: Any = None) -> Any:
        values = cls._tags(children, tag)
        return values[0] if values else default

    @staticmethod
    def _objects(children: list[Any], *types: type) -> list[Any]:
        return [c for c in _flatten(children) if isinstance(c, types)]

    # -----------------------------------------------------------------
    # Leaves
    # -----------------------------------------------------------------

    def visit_definition_name(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("name", node.text)

    def visit_member_name(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("name", node.text)

    def visit_mixin_name(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("mixin", node.text)

    def visit_inheritance(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("inherits", node.children[2].text)

    def visit_qualifier(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("qualifier", node.text.strip())

    def visit_type(self, node: Node, visited_children: list[Any]) -> Tagged:
        _, body, nullable = node.children
        return Tagged("type", _normalize(body.text) + ("?" if nullable.text.strip() else ""))

    def visit_string_literal(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("string", node.text[1:-1])

    def visit_default(self, node: Node, visited_children: list[Any]) -> Tagged:
        value = _normalize(node.children[2].text)
        if value.startswith('"'):
            value = value[1:-1]
        return Tagged("default", value)

    def visit_const_value(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("value", node.text)

    def visit_ext_attr(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("ext_attr", _normalize(node.text))

    def visit_ext_attrs(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("ext_attrs", self._tags(visited_children, "ext_attr"))

    # -----------------------------------------------------------------
    # Arguments
    # -----------------------------------------------------------------

    def visit_optional_argument(self, node: Node, visited_children: list[Any]) -> list[Any]:
        return [*_flatten(visited_children), Tagged("optional", True)]

    def visit_variadic_argument(self, node: Node, visited_children: list[Any]) -> list[Any]:
        return [*_flatten(visited_children), Tagged("variadic", True)]

    def visit_argument(self, node: Node, visited_children: list[Any]) -> IdlArgument:
        return IdlArgument(
            name=self._tag(visited_children, "name", ""),
            type=self._tag(visited_children, "type", ""),
            optional=self._tag(visited_children, "optional", False),
            variadic=self._tag(visited_children, "variadic", False),
            default=self._tag(visited_children, "default"),
            ext_attrs=self._tag(visited_children, "ext_attrs", []),
        )

    # -----------------------------------------------------------------
    # Interface members
    # -----------------------------------------------------------------

    def visit_interface_member(self, node: Node, visited_children: list[Any]) -> Any:
        member = self._objects(
            visited_children, IdlAttribute, IdlOperation, IdlConstructor, IdlConst, IdlIterable
        )
        if not member:
            # Bare `stringifier;` carries nothing to cross-reference
            return []
        member[0].ext_attrs = self._tag(visited_children, "ext_attrs", [])
        return member[0]

    def visit_constructor(self, node: Node, visited_children: list[Any]) -> IdlConstructor:
        return IdlConstructor(parameters=self._objects(visited_children, IdlArgument))

    def visit_const(self, node: Node, visited_children: list[Any]) -> IdlConst:
        return IdlConst(
            name=self._tag(visited_children, "name", ""),
            type=self._tag(visited_children, "type", ""),
            value=self._tag(visited_children, "value", ""),
        )

    def visit_iterable(self, node: Node, visited_children: list[Any]) -> IdlIterable:
        declaration = "async iterable" if node.text.lstrip().startswith("async") else "iterable"
        return IdlIterable(declaration=declaration, types=self._tags(visited_children, "type"))

    def visit_maplike(self, node: Node, visited_children: list[Any]) -> IdlIterable:
        return IdlIterable(
            declaration="maplike",
            types=self._tags(visited_children, "type"),
            readonly=node.text.lstrip().startswith("readonly"),
        )

    def visit_setlike(self, node: Node, visited_children: list[Any]) -> IdlIterable:
        return IdlIterable(
            declaration="setlike",
            types=self._tags(visited_children, "type"),
            readonly=node.text.lstrip().startswith("readonly"),
        )

    def visit_attribute(self, node: Node, visited_children: list[Any]) -> IdlAttribute:
        qualifiers = self._tags(visited_children, "qualifier")
        return IdlAttribute(
            name=self._tag(visited_children, "name", ""),
            type=self._tag(visited_children, "type", ""),
            readonly="readonly" in qualifiers,
            is_static="static" in qualifiers,
            inherit="inherit" in qualifiers,
        )

    def visit_operation(self, node: Node, visited_children: list[Any]) -> IdlOperation:
        qualifiers = self._tags(visited_children, "qualifier")
        special = next((q for q in qualifiers if q != "static"), None)
        return IdlOperation(
            name=self._tag(visited_children, "name", ""),
            return_type=self._tag(visited_children, "type", ""),
            parameters=self._objects(visited_children, IdlArgument),
            is_static="static" in qualifiers,
            special=special,
        )

    # -----------------------------------------------------------------
    # Dictionaries and enums
    # -----------------------------------------------------------------

    def visit_dictionary_member(self, node: Node, visited_children: list[Any]) -> IdlDictionaryMember:
        return IdlDictionaryMember(
            name=self._tag(visited_children, "name", ""),
            type=self._tag(visited_children, "type", ""),
            required=node.children[1].children[0].expr_name == "required_field",
            default=self._tag(visited_children, "default"),
            ext_attrs=self._tag(visited_children, "ext_attrs", []),
        )

    def visit_enum_values(self, node: Node, visited_children: list[Any]) -> Tagged:
        return Tagged("values", self._tags(visited_children, "string"))

    # -----------------------------------------------------------------
    # Declarations
    # -----------------------------------------------------------------

    def _interface(self, node: Node, visited_children: list[Any], **flags: bool) -> IdlInterface:
        return IdlInterface(
            name=self._tag(visited_children, "name", ""),
            inheritance=self._tag(visited_children, "inherits"),
            members=self._objects(
                visited_children, IdlAttribute, IdlOperation, IdlConstructor, IdlConst, IdlIterable
            ),
            location=_location(node),
            **flags,
        )

    def visit_interface(self, node: Node, visited_children: list[Any]) -> IdlInterface:
        return self._interface(node, visited_children)

    def visit_interface_mixin(self, node: Node, visited_children: list[Any]) -> IdlInterface:
        return self._interface(node, visited_children, mixin=True)

    def visit_callback_interface(self, node: Node, visited_children: list[Any]) -> IdlInterface:
        return self._interface(node, visited_children, callback=True)

    def visit_namespace(self, node: Node, visited_children: list[Any]) -> IdlInterface:
        return self._interface(node, visited_children, namespace=True)

    def visit_callback_function(self, node: Node, visited_children: list[Any]) -> IdlCallback:
        return IdlCallback(
            name=self._tag(visited_children, "name", ""),
            return_type=self._tag(visited_children, "type", ""),
            parameters=self._objects(visited_children, IdlArgument),
            location=_location(node),
        )

    def visit_partial(self, node: Node, visited_children: list[Any]) -> IdlInterface | IdlDictionary:
        definition = self._objects(visited_children, IdlInterface, IdlDictionary)[0]
        definition.partial = True
        return definition

    def visit_dictionary(self, node: Node, visited_children: list[Any]) -> IdlDictionary:
        return IdlDictionary(
            name=self._tag(visited_children, "name", ""),
            inheritance=self._tag(visited_children, "inherits"),
            members=self._objects(visited_children, IdlDictionaryMember),
            location=_location(node),
        )

    def visit_enum(self, node: Node, visited_children: list[Any]) -> IdlEnum:
        return IdlEnum(
            name=self._tag(visited_children, "name", ""),
            values=self._tag(visited_children, "values", []),
            location=_location(node),
        )

    def visit_typedef(self, node: Node, visited_children: list[Any]) -> IdlTypedef:
        return IdlTypedef(
            name=self._tag(visited_children, "name", ""),
            type=self._tag(visited_children, "type", ""),
            location=_location(node),
        )

    def visit_includes(self, node: Node, visited_children: list[Any]) -> IdlIncludes:
        return IdlIncludes(
            target=self._tag(visited_children, "name", ""),
            mixin=self._tag(visited_children, "mixin", ""),
            location=_location(node),
        )

    def visit_definition(self, node: Node, visited_children: list[Any]) -> Any:
        definition = self._objects(
            visited_children, IdlInterface, IdlDictionary, IdlEnum, IdlCallback, IdlTypedef, IdlIncludes
        )[0]
        definition.ext_attrs = self._tag(visited_children, "ext_attrs", [])
        return definition

    def visit_definitions(self, node: Node, visited_children: list[Any]) -> IdlDocument:
        return IdlDocument(
            definitions=self._objects(
                visited_children, IdlInterface, IdlDictionary, IdlEnum, IdlCallback, IdlTypedef, IdlIncludes
            )
        )


class WebIDLParser(LoggerMixin):
    """
    WebIDL parser producing an IdlDocument.

    Wraps the PEG grammar and translates grammar failures into
    IdlSyntaxError with a line and column.
    """

    def __init__(self) -> None:
        self._visitor = IdlVisitor()

    def parse_file(self, file_path: Path) -> IdlDocument:
        """
        Parse a WebIDL file.

        Args:
            file_path: Path to the .idl file

        Returns:
            IdlDocument with all top-level declarations
        """
        start_time = time.perf_counter()
        document = self.parse_content(file_path.read_text(encoding="utf-8"))
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.log.debug(
            "parsed_idl",
            path=str(file_path),
            elapsed_ms=round(elapsed_ms, 2),
            definitions=len(document.definitions),
        )
        return document

    def parse_content(self, content: str) -> IdlDocument:
        """
        Parse WebIDL source text.

        Args:
            content: WebIDL source

        Returns:
            IdlDocument with all top-level declarations

        Raises:
            IdlSyntaxError: if the text is not valid WebIDL
        """
        try:
            tree = WEBIDL_GRAMMAR.parse(content)
        except IncompleteParseError as e:
            raise IdlSyntaxError("Unexpected IDL text", e.line(), e.column()) from e
        except ParseError as e:
            raise IdlSyntaxError("Invalid IDL", e.line(), e.column()) from e
        return self._visitor.visit(tree)
