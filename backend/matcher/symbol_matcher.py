"""
SpecTrace Symbol Matcher.

Resolves an IDL interface member to its declaration in the low-level
header, its definition in the low-level implementation and its binding in
the high-level wrapper. Symbol names are derived from the member name by a
fixed transform; nothing is guessed.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from typing import Any

from matcher.models import ArtifactKind, CodeLink, CrossReference
from parsers.models import (
    CppHeaderSymbols,
    CppImplSymbols,
    IdlAttribute,
    IdlConstructor,
    IdlOperation,
    InterfaceMember,
    SymbolTable,
    TsClassSymbols,
)
from utils.logger import LoggerMixin


def capitalize(name: str) -> str:
    """Uppercase the first character, leaving the rest untouched."""
    return name[:1].upper() + name[1:]


@dataclass(slots=True)
class ArtifactFiles:
    """Paths used in code links and failure reports."""

    header: str
    implementation: str
    wrapper: str

    @classmethod
    def default(cls, interface_name: str) -> "ArtifactFiles":
        """Conventional `src/` and `lib/` layout for an interface."""
        return cls(
            header=f"src/{interface_name}.h",
            implementation=f"src/{interface_name}.cpp",
            wrapper=f"lib/{interface_name}.ts",
        )

    def path(self, kind: ArtifactKind) -> str:
        return getattr(self, kind.value)


class MissingSymbolError(Exception):
    """A required symbol for an interface member was not found in an artifact."""

    def __init__(
        self,
        interface_name: str,
        member_name: str,
        member_kind: str,
        expected_artifact: str,
        artifact_kind: ArtifactKind,
        expected_symbol: str,
    ) -> None:
        self.interface_name = interface_name
        self.member_name = member_name
        self.member_kind = member_kind
        self.expected_artifact = expected_artifact
        self.artifact_kind = artifact_kind
        self.expected_symbol = expected_symbol
        super().__init__(
            f"Missing symbol: {interface_name}.{member_name} ({member_kind}) - "
            f"expected {expected_symbol} in {expected_artifact}"
        )

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reports."""
        return {
            "interface": self.interface_name,
            "member": self.member_name,
            "memberKind": self.member_kind,
            "expectedArtifact": self.expected_artifact,
            "artifactKind": self.artifact_kind.value,
            "expectedSymbol": self.expected_symbol,
        }


class SymbolMatcher(LoggerMixin):
    """
    Cross-references IDL members against parsed symbol tables.

    Lookups always run header, then implementation, then wrapper; the first
    missing symbol is the one reported.
    """

    def match(
        self,
        interface_name: str,
        member: InterfaceMember,
        header: CppHeaderSymbols,
        implementation: CppImplSymbols,
        wrapper: TsClassSymbols,
        files: ArtifactFiles | None = None,
    ) -> CrossReference:
        """
        Resolve the code links of one member.

        Args:
            interface_name: Interface owning the member
            member: Attribute, operation or constructor
            header: Parsed header symbols
            implementation: Parsed implementation symbols
            wrapper: Parsed wrapper class symbols
            files: Artifact paths; the default layout is used when omitted

        Returns:
            CrossReference with every applicable link populated

        Raises:
            MissingSymbolError: if an attribute or operation symbol is absent
            TypeError: for members that are not cross-referenced
        """
        files = files or ArtifactFiles.default(interface_name)

        match member:
            case IdlAttribute():
                result = self._match_attribute(interface_name, member, header, implementation, wrapper, files)
            case IdlOperation():
                result = self._match_operation(interface_name, member, header, implementation, wrapper, files)
            case IdlConstructor():
                result = self._match_constructor(interface_name, header, implementation, wrapper, files)
            case _:
                raise TypeError(f"Cannot match member of type {type(member).__name__}")

        self.log.debug("matched_member", interface=interface_name, member=member.name)
        return result

    def _match_attribute(
        self,
        interface_name: str,
        member: IdlAttribute,
        header: CppHeaderSymbols,
        implementation: CppImplSymbols,
        wrapper: TsClassSymbols,
        files: ArtifactFiles,
    ) -> CrossReference:
        getter = f"Get{capitalize(member.name)}"
        lookup = _Lookup(interface_name, member.name, "attribute", files)

        return CrossReference(
            declaration=lookup.find(header.methods, getter, ArtifactKind.HEADER, getter, with_end=False),
            implementation=lookup.find(
                implementation.methods, getter, ArtifactKind.IMPLEMENTATION, f"{interface_name}::{getter}"
            ),
            high_level_binding=lookup.find(
                wrapper.getters, member.name, ArtifactKind.WRAPPER, f"get {member.name}()"
            ),
        )

    def _match_operation(
        self,
        interface_name: str,
        member: IdlOperation,
        header: CppHeaderSymbols,
        implementation: CppImplSymbols,
        wrapper: TsClassSymbols,
        files: ArtifactFiles,
    ) -> CrossReference:
        symbol = capitalize(member.name)
        kind = "static-method" if member.is_static else "method"
        lookup = _Lookup(interface_name, member.name, kind, files)

        header_table = header.static_methods if member.is_static else header.methods
        wrapper_table = wrapper.static_methods if member.is_static else wrapper.methods
        wrapper_symbol = f"static {member.name}()" if member.is_static else f"{member.name}()"

        return CrossReference(
            declaration=lookup.find(header_table, symbol, ArtifactKind.HEADER, symbol, with_end=False),
            # Static definitions are qualified the same way as instance ones
            implementation=lookup.find(
                implementation.methods, symbol, ArtifactKind.IMPLEMENTATION, f"{interface_name}::{symbol}"
            ),
            high_level_binding=lookup.find(wrapper_table, member.name, ArtifactKind.WRAPPER, wrapper_symbol),
        )

    def _match_constructor(
        self,
        interface_name: str,
        header: CppHeaderSymbols,
        implementation: CppImplSymbols,
        wrapper: TsClassSymbols,
        files: ArtifactFiles,
    ) -> CrossReference:
        declared = header.methods.get(interface_name)
        result = CrossReference(
            declaration=CodeLink(file=files.header, line=declared.line if declared else 1),
        )
        if implementation.ctor is not None:
            result.implementation = CodeLink.at(files.implementation, implementation.ctor)
        if wrapper.constructor is not None:
            result.high_level_binding = CodeLink.at(files.wrapper, wrapper.constructor)
        return result


@dataclass(slots=True)
class _Lookup:
    """Table lookups for one member that raise on the first miss."""

    interface_name: str
    member_name: str
    member_kind: str
    files: ArtifactFiles

    def find(
        self,
        table: SymbolTable,
        name: str,
        artifact: ArtifactKind,
        expected_symbol: str,
        with_end: bool = True,
    ) -> CodeLink:
        location = table.get(name)
        if location is None:
            raise MissingSymbolError(
                self.interface_name,
                self.member_name,
                self.member_kind,
                self.files.path(artifact),
                artifact,
                expected_symbol,
            )
        return CodeLink.at(self.files.path(artifact), location, with_end)
