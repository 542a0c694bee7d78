"""
SpecTrace Spec Markdown Parser.

Extracts the attribute listing and per-method algorithm steps from the
per-interface narrative documents.
Requires Python 3.11+.
"""

import re
from pathlib import Path

from parsers.models import AlgorithmEntry, SpecAttribute, SpecDocument
from utils.logger import LoggerMixin

ATTRIBUTES_SECTION = re.compile(r"## Attributes\n\n(.*?)(?=\n## |\n---|\Z)", re.DOTALL)
ATTRIBUTE_LINE = re.compile(r"^- \*\*(\w+)\*\* \(`([^`]+)`\)( \[ReadOnly\])?")
METHOD_SECTION = re.compile(
    r"### (\w+)\n\n"
    r"(?:\*\*Static Method\*\*\n\n)?"
    r"\*\*Signature:\*\* `([^`]+)`\n\n"
    r"\*\*Algorithm:\*\*\n\n"
    r"(.*?)(?=\n### |\n## |\Z)",
    re.DOTALL,
)
STEP_LINE = re.compile(r"^\d+\. (.+)$", re.MULTILINE)
STATIC_MARKER = "**Static Method**"


class SpecMarkdownParser(LoggerMixin):
    """
    Parser for narrative spec documents.

    Missing sections are not errors: a document without an attribute
    listing or without algorithms simply yields empty collections.
    """

    def __init__(self, static_lookahead: int = 200) -> None:
        """
        Args:
            static_lookahead: Characters after a method heading searched for
                the static marker
        """
        self._static_lookahead = static_lookahead

    def parse_file(self, file_path: Path) -> SpecDocument:
        """Parse a narrative document from disk."""
        return self.parse_content(file_path.read_text(encoding="utf-8"))

    def parse_content(self, content: str) -> SpecDocument:
        """
        Parse a narrative document.

        Args:
            content: Markdown text

        Returns:
            SpecDocument with algorithms keyed by method name and the
            attribute listing in document order
        """
        content = content.replace("\r\n", "\n")
        document = SpecDocument(attributes=self._parse_attributes(content))

        for match in METHOD_SECTION.finditer(content):
            name, signature, algorithm = match.groups()
            window = content[match.start() : match.start() + self._static_lookahead]
            document.methods[name] = AlgorithmEntry(
                signature=signature,
                is_static=STATIC_MARKER in window,
                steps=STEP_LINE.findall(algorithm),
            )

        self.log.debug(
            "parsed_narrative",
            methods=len(document.methods),
            attributes=len(document.attributes),
        )
        return document

    def _parse_attributes(self, content: str) -> list[SpecAttribute]:
        """Read bullets of the single `## Attributes` section."""
        section = ATTRIBUTES_SECTION.search(content)
        if section is None:
            return []

        attributes: list[SpecAttribute] = []
        for line in section.group(1).split("\n"):
            match = ATTRIBUTE_LINE.match(line)
            if match:
                attributes.append(
                    SpecAttribute(name=match.group(1), type=match.group(2), readonly=bool(match.group(3)))
                )
        return attributes
