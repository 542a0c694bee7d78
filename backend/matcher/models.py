"""
SpecTrace Matcher Data Models.

Code links resolved for an interface member.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from parsers.models import SymbolLocation


class ArtifactKind(str, Enum):
    """Artifacts consulted while resolving a member, in lookup order."""

    HEADER = "header"
    IMPLEMENTATION = "implementation"
    WRAPPER = "wrapper"


@dataclass(slots=True)
class CodeLink:
    """A file position, optionally spanning several lines."""

    file: str
    line: int
    end_line: int | None = None

    @classmethod
    def at(cls, file: str, location: SymbolLocation, with_end: bool = True) -> "CodeLink":
        """Build a link from a parsed symbol location."""
        return cls(file=file, line=location.line, end_line=location.end_line if with_end else None)

    @property
    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"file": self.file, "line": self.line}
        if self.end_line is not None:
            data["endLine"] = self.end_line
        return data


@dataclass(slots=True)
class CrossReference:
    """Resolved code locations for one interface member."""

    declaration: CodeLink | None = None
    implementation: CodeLink | None = None
    high_level_binding: CodeLink | None = None
    test: CodeLink | None = None

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting unresolved links."""
        links = {
            "declaration": self.declaration,
            "implementation": self.implementation,
            "highLevelBinding": self.high_level_binding,
            "test": self.test,
        }
        return {key: link.as_dict for key, link in links.items() if link is not None}
