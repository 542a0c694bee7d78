"""
SpecTrace Generator Package.

Output schema and the task/audit document generator.
"""

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
from generator.task_generator import (
    GenerationReport,
    InterfaceResult,
    TaskGenerator,
    kebab_case,
)

__all__ = [
    "ArtifactPaths",
    "DictionaryDef",
    "DictionaryField",
    "EnumDef",
    "Feature",
    "FeatureCategory",
    "Step",
    "TaskFile",
    "TypesFile",
    "GenerationReport",
    "InterfaceResult",
    "TaskGenerator",
    "kebab_case",
]
