"""
SpecTrace Task Generator.

Builds one audit document per IDL interface by cross-referencing every
member against the interface's header, implementation and wrapper, plus a
shared document of dictionaries and enums.
Requires Python 3.11+.
"""

import asyncio
import json
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from generator.schema import (
    ArtifactPaths,
    DictionaryDef,
    DictionaryField,
    EnumDef,
    Feature,
    FeatureCategory,
    Step,
    TaskFile,
    TypesFile,
)
from matcher.models import CodeLink, CrossReference
from matcher.symbol_matcher import ArtifactFiles, MissingSymbolError, SymbolMatcher
from parsers.cpp_symbol_parser import CppSymbolParser
from parsers.errors import ArtifactReadError, MissingArtifactError, StructuralParseError
from parsers.idl_parser import WebIDLParser
from parsers.models import (
    AlgorithmEntry,
    IdlArgument,
    IdlAttribute,
    IdlConstructor,
    IdlDocument,
    IdlInterface,
    IdlOperation,
    InterfaceMember,
    SpecDocument,
    TsTestSymbols,
)
from parsers.spec_markdown_parser import SpecMarkdownParser
from parsers.ts_ast_parser import TypeScriptParser
from utils.config import Settings, get_settings
from utils.logger import LoggerMixin

TYPES_FILE_NAME = "types.json"


def kebab_case(name: str) -> str:
    """Convert `VideoDecoder` to `video-decoder`, keeping acronyms together."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "-", name).lower()


def matchable_members(document: IdlDocument, interface_name: str) -> list[InterfaceMember]:
    """Members of an interface that become features, in declaration order."""
    members: list[InterfaceMember] = []
    for member in document.interface_members(interface_name):
        if isinstance(member, IdlOperation) and not member.name:
            continue  # anonymous special operations have no symbol to match
        if isinstance(member, (IdlAttribute, IdlOperation, IdlConstructor)):
            members.append(member)
    return members


@dataclass(slots=True)
class InterfaceLayout:
    """Absolute and project-relative artifact paths of one interface."""

    header: Path
    implementation: Path
    wrapper: Path
    narrative: Path
    tests: Path
    relative: ArtifactPaths
    narrative_ref: str

    @property
    def files(self) -> ArtifactFiles:
        return ArtifactFiles(
            header=self.relative.header,
            implementation=self.relative.implementation,
            wrapper=self.relative.wrapper,
        )


@dataclass(slots=True)
class ArtifactTexts:
    """Raw text of an interface's artifacts; optional ones may be absent."""

    header: str
    implementation: str
    wrapper: str
    narrative: str | None = None
    tests: str | None = None


@dataclass(slots=True)
class InterfaceResult:
    """Outcome of generating one interface document."""

    interface: str
    task: TaskFile | None = None
    output_path: Path | None = None
    missing_symbols: list[MissingSymbolError] = field(default_factory=list)
    structural_error: StructuralParseError | None = None

    @property
    def ok(self) -> bool:
        return self.task is not None

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reports."""
        data: dict[str, Any] = {"interface": self.interface, "ok": self.ok}
        if self.task is not None:
            data["features"] = len(self.task.features)
        if self.output_path is not None:
            data["output"] = str(self.output_path)
        if self.missing_symbols:
            data["missingSymbols"] = [e.as_dict for e in self.missing_symbols]
        if self.structural_error is not None:
            data["error"] = str(self.structural_error)
        return data


@dataclass(slots=True)
class GenerationReport:
    """Summary of one generator run."""

    results: list[InterfaceResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    types: TypesFile | None = None
    types_path: Path | None = None
    elapsed_seconds: float = 0.0

    @property
    def written(self) -> list[InterfaceResult]:
        return [r for r in self.results if r.ok]

    @property
    def failures(self) -> list[InterfaceResult]:
        return [r for r in self.results if not r.ok]

    @property
    def feature_count(self) -> int:
        return sum(len(r.task.features) for r in self.written if r.task is not None)


class TaskGenerator(LoggerMixin):
    """
    Generates audit documents for a project tree.

    Artifact reads for all interfaces run concurrently; parsing and matching
    then proceed interface by interface in IDL file order. A failure aborts
    only the interface it belongs to.
    """

    def __init__(self, root: Path, settings: Settings | None = None) -> None:
        """
        Args:
            root: Project root that artifact paths are relative to
            settings: Application settings; the cached settings when omitted
        """
        self.root = root
        self.settings = settings or get_settings()

        parser_settings = self.settings.parser
        self._idl_parser = WebIDLParser()
        self._cpp_parser = CppSymbolParser(parser_settings.header_return_types)
        self._ts_parser = TypeScriptParser(parser_settings.group_functions, parser_settings.case_functions)
        self._spec_parser = SpecMarkdownParser(parser_settings.static_lookahead_chars)
        self._matcher = SymbolMatcher()

    @property
    def idl_path(self) -> Path:
        return self.root / self.settings.paths.idl_file

    @property
    def output_dir(self) -> Path:
        return self.root / self.settings.paths.output_dir

    async def generate(self) -> GenerationReport:
        """
        Run a full generation pass.

        Returns:
            GenerationReport with per-interface results and the types document

        Raises:
            MissingArtifactError: if the IDL file does not exist
            IdlSyntaxError: if the IDL file cannot be parsed
        """
        start_time = time.perf_counter()
        report = GenerationReport()

        if not self.idl_path.is_file():
            raise MissingArtifactError(self.idl_path)
        document = self._idl_parser.parse_file(self.idl_path)

        candidates: list[tuple[IdlInterface, list[InterfaceMember]]] = []
        for interface in document.interfaces:
            members = matchable_members(document, interface.name)
            if not members:
                self.log.info("interface_skipped", interface=interface.name, reason="no_members")
                report.skipped.append(interface.name)
                continue
            candidates.append((interface, members))

        layouts = [self.layout(interface.name) for interface, _ in candidates]
        semaphore = asyncio.Semaphore(self.settings.generator.max_concurrent_reads)
        reads = await asyncio.gather(
            *(self._read_artifacts(layout, semaphore) for layout in layouts),
            return_exceptions=True,
        )

        self.output_dir.mkdir(parents=True, exist_ok=True)

        for (interface, members), layout, texts in zip(candidates, layouts, reads):
            if isinstance(texts, StructuralParseError):
                result = InterfaceResult(interface=interface.name, structural_error=texts)
            elif isinstance(texts, BaseException):
                raise texts
            else:
                result = self._generate_interface(interface, members, layout, texts)

            if result.task is not None:
                result.output_path = self.output_dir / f"{interface.name}.json"
                self._write_json(result.output_path, result.task.as_dict)
                self.log.info(
                    "interface_generated",
                    interface=interface.name,
                    features=len(result.task.features),
                )
            else:
                # A document from an earlier run would carry stale links
                (self.output_dir / f"{interface.name}.json").unlink(missing_ok=True)
                self.log.error("interface_failed", **result.as_dict)
            report.results.append(result)

        report.types = self.build_types(document)
        report.types_path = self.output_dir / TYPES_FILE_NAME
        self._write_json(report.types_path, report.types.as_dict)

        report.elapsed_seconds = round(time.perf_counter() - start_time, 3)
        self.log.info(
            "generation_complete",
            written=len(report.written),
            failed=len(report.failures),
            skipped=len(report.skipped),
            features=report.feature_count,
            dictionaries=len(report.types.dictionaries),
            enums=len(report.types.enums),
            time_seconds=report.elapsed_seconds,
        )
        return report

    def layout(self, interface_name: str) -> InterfaceLayout:
        """Derive every artifact path of an interface from the path settings."""
        paths = self.settings.paths
        header = paths.header_dir / f"{interface_name}{paths.header_suffix}"
        implementation = paths.implementation_dir / f"{interface_name}{paths.implementation_suffix}"
        wrapper = paths.wrapper_dir / f"{interface_name}{paths.wrapper_suffix}"
        narrative = paths.narrative_dir / f"{interface_name}{paths.narrative_suffix}"
        tests = paths.test_dir / f"{kebab_case(interface_name)}{paths.test_suffix}"

        return InterfaceLayout(
            header=self.root / header,
            implementation=self.root / implementation,
            wrapper=self.root / wrapper,
            narrative=self.root / narrative,
            tests=self.root / tests,
            relative=ArtifactPaths(
                header=header.as_posix(),
                implementation=implementation.as_posix(),
                wrapper=wrapper.as_posix(),
                tests=tests.as_posix(),
            ),
            narrative_ref=narrative.as_posix(),
        )

    async def _read_artifacts(self, layout: InterfaceLayout, semaphore: asyncio.Semaphore) -> ArtifactTexts:
        async def read(path: Path, required: bool) -> str | None:
            async with semaphore:
                exists = await asyncio.to_thread(path.is_file)
                if not exists:
                    if required:
                        raise MissingArtifactError(path.relative_to(self.root))
                    return None
                try:
                    return await asyncio.to_thread(path.read_text, encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    raise ArtifactReadError(path.relative_to(self.root), str(e)) from e

        texts = await asyncio.gather(
            read(layout.header, True),
            read(layout.implementation, True),
            read(layout.wrapper, True),
            read(layout.narrative, False),
            read(layout.tests, False),
            return_exceptions=True,
        )
        # Report the first failure in artifact order, not completion order
        for text in texts:
            if isinstance(text, BaseException):
                raise text

        header, implementation, wrapper, narrative, tests = texts
        return ArtifactTexts(
            header=header,
            implementation=implementation,
            wrapper=wrapper,
            narrative=narrative,
            tests=tests,
        )

    def _generate_interface(
        self,
        interface: IdlInterface,
        members: list[InterfaceMember],
        layout: InterfaceLayout,
        texts: ArtifactTexts,
    ) -> InterfaceResult:
        name = interface.name
        result = InterfaceResult(interface=name)

        try:
            header = self._cpp_parser.parse_header(texts.header)
            implementation = self._cpp_parser.parse_implementation(texts.implementation, name)
            wrapper = self._ts_parser.parse_class(texts.wrapper, layout.relative.wrapper)
        except StructuralParseError as e:
            result.structural_error = e
            return result

        narrative = self._spec_parser.parse_content(texts.narrative) if texts.narrative is not None else None
        tests = self._ts_parser.parse_tests(texts.tests) if texts.tests is not None else None
        collect_all = self.settings.generator.missing_symbol_policy == "all"

        features: list[Feature] = []
        for member in members:
            try:
                links = self._matcher.match(name, member, header, implementation, wrapper, layout.files)
            except MissingSymbolError as e:
                result.missing_symbols.append(e)
                if not collect_all:
                    break
                continue

            if tests is not None:
                links.test = self._test_link(member, tests, layout)
            if isinstance(member, IdlAttribute) and narrative is not None:
                self._check_readonly(name, member, narrative)
            features.append(self.build_feature(name, member, links, narrative, layout.narrative_ref))

        if result.missing_symbols:
            return result

        result.task = TaskFile(
            interface=name,
            idl_source=self._idl_source(interface),
            spec_source=layout.narrative_ref if narrative is not None else None,
            inheritance=interface.inheritance,
            extended_attributes=list(interface.ext_attrs),
            files=layout.relative,
            features=features,
        )
        return result

    def build_feature(
        self,
        interface_name: str,
        member: InterfaceMember,
        links: CrossReference,
        narrative: SpecDocument | None,
        narrative_ref: str,
    ) -> Feature:
        """
        Build the feature record of one matched member.

        Args:
            interface_name: Interface owning the member
            member: Attribute, operation or constructor
            links: Resolved code links
            narrative: Parsed narrative document, if one exists
            narrative_ref: Project-relative narrative path used in `algorithmRef`

        Returns:
            Feature with algorithm steps and derived verification steps
        """
        feature_id = f"{interface_name}.{member.name}"
        entry: AlgorithmEntry | None = narrative.methods.get(member.name) if narrative else None
        algorithm_steps = list(entry.steps) if entry else []

        match member:
            case IdlAttribute():
                feature = Feature(
                    id=feature_id,
                    category=FeatureCategory.ATTRIBUTE,
                    name=member.name,
                    description=f"{'Readonly' if member.readonly else 'Read/write'} attribute",
                    code_links=links,
                    return_type=member.type,
                    readonly=member.readonly,
                    algorithm_ref=f"{narrative_ref}#attributes",
                )
            case IdlOperation():
                label = "Static method" if member.is_static else "Method"
                feature = Feature(
                    id=feature_id,
                    category=FeatureCategory.STATIC_METHOD if member.is_static else FeatureCategory.METHOD,
                    name=_display_name(member.name, member.parameters),
                    description=algorithm_steps[0] if algorithm_steps else f"{label} {member.name}",
                    code_links=links,
                    return_type=member.return_type,
                    algorithm_ref=f"{narrative_ref}#{member.name.lower()}",
                )
            case IdlConstructor():
                feature = Feature(
                    id=feature_id,
                    category=FeatureCategory.CONSTRUCTOR,
                    name=_display_name(member.name, member.parameters),
                    description=f"Create {interface_name} instance",
                    code_links=links,
                    algorithm_ref=f"{narrative_ref}#constructor",
                )
            case _:
                raise TypeError(f"Cannot build feature for {type(member).__name__}")

        feature.algorithm_steps = algorithm_steps
        feature.steps = self._build_steps(feature_id, member.name, algorithm_steps, links)
        return feature

    def build_types(self, document: IdlDocument) -> TypesFile:
        """Collect dictionaries and enums in IDL file order."""
        types = TypesFile()
        for dictionary in document.dictionaries:
            types.dictionaries.append(
                DictionaryDef(
                    name=dictionary.name,
                    idl_source=self._idl_source(dictionary),
                    inheritance=dictionary.inheritance,
                    fields=[
                        DictionaryField(
                            name=m.name,
                            type=m.type,
                            required=m.required,
                            default_value=m.default,
                        )
                        for m in document.dictionary_fields(dictionary.name)
                    ],
                )
            )
        for enum in document.enums:
            types.enums.append(
                EnumDef(name=enum.name, idl_source=self._idl_source(enum), values=list(enum.values))
            )
        return types

    @staticmethod
    def _build_steps(
        feature_id: str,
        member_name: str,
        algorithm_steps: list[str],
        links: CrossReference,
    ) -> list[Step]:
        code_ref = links.implementation or links.declaration
        if not algorithm_steps:
            return [
                Step(
                    id=f"{feature_id}.verify",
                    description=f"Verify {member_name} behaves as declared in the IDL",
                    code_ref=code_ref,
                )
            ]
        return [
            Step(id=f"{feature_id}.step-{n}", description=text, code_ref=code_ref)
            for n, text in enumerate(algorithm_steps, start=1)
        ]

    @staticmethod
    def _test_link(member: InterfaceMember, tests: TsTestSymbols, layout: InterfaceLayout) -> CodeLink | None:
        location = tests.describes.get(member.name)
        if location is None:
            return None
        return CodeLink.at(layout.relative.tests, location)

    def _check_readonly(self, interface_name: str, member: IdlAttribute, narrative: SpecDocument) -> None:
        listed = narrative.attribute(member.name)
        if listed is not None and listed.readonly != member.readonly:
            self.log.warning(
                "readonly_mismatch",
                interface=interface_name,
                member=member.name,
                idl_readonly=member.readonly,
                narrative_readonly=listed.readonly,
            )

    def _idl_source(self, definition: Any) -> str:
        idl = self.settings.paths.idl_file.as_posix()
        if definition.location is None:
            return idl
        return f"{idl}{definition.location.fragment}"

    def _write_json(self, path: Path, data: dict[str, Any]) -> None:
        text = json.dumps(data, indent=self.settings.generator.json_indent, ensure_ascii=False)
        path.write_text(text + "\n", encoding="utf-8")


def _display_name(name: str, parameters: list[IdlArgument]) -> str:
    return f"{name}({', '.join(p.signature for p in parameters)})"
