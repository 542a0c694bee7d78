"""
SpecTrace Symbol Matcher Package.

Cross-references IDL members against low-level and high-level symbol tables.
"""

from matcher.models import ArtifactKind, CodeLink, CrossReference
from matcher.symbol_matcher import (
    ArtifactFiles,
    MissingSymbolError,
    SymbolMatcher,
    capitalize,
)

__all__ = [
    "ArtifactKind",
    "CodeLink",
    "CrossReference",
    "ArtifactFiles",
    "MissingSymbolError",
    "SymbolMatcher",
    "capitalize",
]
