"""
SpecTrace Parser Errors.

Structural failures raised when a required element is absent from an input.
Requires Python 3.11+.
"""

from pathlib import Path


class StructuralParseError(Exception):
    """A required structural element is missing from an input."""


class IdlSyntaxError(StructuralParseError):
    """IDL text does not match the WebIDL grammar."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} (line {line}, column {column})")
        self.line = line
        self.column = column


class ClassNotFoundError(StructuralParseError):
    """A wrapper artifact declares no class."""

    def __init__(self, source: str) -> None:
        super().__init__(f"No class found in {source}")
        self.source = source


class MissingArtifactError(StructuralParseError):
    """A required artifact file does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Artifact not found: {path}")
        self.path = str(path)


class ArtifactReadError(StructuralParseError):
    """An artifact file exists but cannot be read as UTF-8 text."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Cannot read artifact {path}: {reason}")
        self.path = str(path)
        self.reason = reason
