"""
SpecTrace Output Schema.

Records written to the per-interface task documents and to the shared
types document. Every record serializes through `as_dict`, producing the
camelCase keys consumed by reviewers.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from matcher.models import CodeLink, CrossReference


class FeatureCategory(str, Enum):
    """Category of a generated feature."""

    CONSTRUCTOR = "constructor"
    ATTRIBUTE = "attribute"
    METHOD = "method"
    STATIC_METHOD = "static-method"


@dataclass(slots=True)
class Step:
    """A single verification step of a feature."""

    id: str
    description: str
    code_ref: CodeLink | None = None
    passes: bool = False

    @property
    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "description": self.description}
        if self.code_ref is not None:
            data["codeRef"] = self.code_ref.as_dict
        data["passes"] = self.passes
        return data


@dataclass(slots=True)
class Feature:
    """One interface member with its code links and verification steps."""

    id: str
    category: FeatureCategory
    name: str
    description: str
    code_links: CrossReference
    return_type: str | None = None
    readonly: bool | None = None
    algorithm_ref: str | None = None
    algorithm_steps: list[str] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    passes: bool = False

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "category": self.category.value,
            "name": self.name,
            "description": self.description,
        }
        if self.return_type is not None:
            data["returnType"] = self.return_type
        if self.readonly is not None:
            data["readonly"] = self.readonly
        data["codeLinks"] = self.code_links.as_dict
        if self.algorithm_ref is not None:
            data["algorithmRef"] = self.algorithm_ref
        data["algorithmSteps"] = list(self.algorithm_steps)
        data["steps"] = [step.as_dict for step in self.steps]
        data["passes"] = self.passes
        return data


@dataclass(slots=True)
class ArtifactPaths:
    """Project-relative paths of an interface's artifacts."""

    header: str
    implementation: str
    wrapper: str
    tests: str

    @property
    def as_dict(self) -> dict[str, str]:
        return {
            "header": self.header,
            "implementation": self.implementation,
            "wrapper": self.wrapper,
            "tests": self.tests,
        }


@dataclass(slots=True)
class TaskFile:
    """Audit document for one interface."""

    interface: str
    idl_source: str
    files: ArtifactPaths
    spec_source: str | None = None
    inheritance: str | None = None
    extended_attributes: list[str] = field(default_factory=list)
    features: list[Feature] = field(default_factory=list)

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        source = {"idl": self.idl_source}
        if self.spec_source is not None:
            source["spec"] = self.spec_source

        data: dict[str, Any] = {
            "interface": self.interface,
            "type": "interface",
            "source": source,
        }
        if self.inheritance is not None:
            data["inheritance"] = self.inheritance
        data["extendedAttributes"] = list(self.extended_attributes)
        data["files"] = self.files.as_dict
        data["features"] = [feature.as_dict for feature in self.features]
        return data


@dataclass(slots=True)
class DictionaryField:
    name: str
    type: str
    required: bool = False
    default_value: str | None = None

    @property
    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.type, "required": self.required}
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data


@dataclass(slots=True)
class DictionaryDef:
    name: str
    idl_source: str
    inheritance: str | None = None
    fields: list[DictionaryField] = field(default_factory=list)

    @property
    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "source": {"idl": self.idl_source}}
        if self.inheritance is not None:
            data["inheritance"] = self.inheritance
        data["fields"] = [f.as_dict for f in self.fields]
        return data


@dataclass(slots=True)
class EnumDef:
    name: str
    idl_source: str
    values: list[str] = field(default_factory=list)

    @property
    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "source": {"idl": self.idl_source}, "values": list(self.values)}


@dataclass(slots=True)
class TypesFile:
    """Shared document of dictionaries and enums, in IDL file order."""

    dictionaries: list[DictionaryDef] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)

    @property
    def as_dict(self) -> dict[str, Any]:
        return {
            "dictionaries": [d.as_dict for d in self.dictionaries],
            "enums": [e.as_dict for e in self.enums],
        }
