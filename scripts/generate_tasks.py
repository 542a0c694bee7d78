#!/usr/bin/env python3
"""
SpecTrace Task Generation Script.

Parses the WebIDL file of a project and writes one audit document per
interface plus a shared types document.
Requires Python 3.11+.

Usage:
    python scripts/generate_tasks.py --root /path/to/project
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from generator.task_generator import GenerationReport, TaskGenerator
from parsers.errors import StructuralParseError
from utils.config import Settings, get_settings
from utils.logger import configure_logging, get_logger


configure_logging()
logger = get_logger("generate_tasks")


def build_settings(args: argparse.Namespace) -> Settings:
    """Apply command line overrides on top of the environment settings."""
    base = get_settings()

    path_overrides = {}
    if args.idl is not None:
        path_overrides["idl_file"] = args.idl
    if args.output is not None:
        path_overrides["output_dir"] = args.output

    generator_overrides = {}
    if args.policy is not None:
        generator_overrides["missing_symbol_policy"] = args.policy

    return base.model_copy(
        update={
            "paths": base.paths.model_copy(update=path_overrides),
            "generator": base.generator.model_copy(update=generator_overrides),
        }
    )


def print_report(report: GenerationReport) -> None:
    """Print written documents, failures and totals."""
    for result in report.written:
        print(f"Generated: {result.output_path} ({len(result.task.features)} features)")

    if report.types is not None:
        print(
            f"Generated: {report.types_path} "
            f"({len(report.types.dictionaries)} dictionaries, {len(report.types.enums)} enums)"
        )

    if report.skipped:
        print(f"\nSkipped (no members): {', '.join(report.skipped)}")

    if report.failures:
        print(f"\nFailed interfaces: {len(report.failures)}")
        for result in report.failures:
            print(f"  {result.interface}:")
            if result.structural_error is not None:
                print(f"    - {result.structural_error}")
            for error in result.missing_symbols:
                print(
                    f"    - {error.member_name} ({error.member_kind}): "
                    f"expected {error.expected_symbol} in {error.expected_artifact}"
                )

    print(
        f"\nDone! Generated {len(report.written)} interface files "
        f"with {report.feature_count} total features in {report.elapsed_seconds}s."
    )


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate spec-compliance task documents from WebIDL"
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Project root containing the IDL, sources and wrappers (default: cwd)",
    )
    parser.add_argument(
        "--idl",
        type=Path,
        default=None,
        help="IDL file relative to the root",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output directory relative to the root",
    )
    parser.add_argument(
        "--policy",
        choices=["first", "all"],
        default=None,
        help="Stop an interface at its first missing symbol, or report all of them",
    )

    args = parser.parse_args()

    if not args.root.is_dir():
        print(f"Error: Path is not a directory: {args.root}")
        sys.exit(1)

    generator = TaskGenerator(args.root.resolve(), build_settings(args))

    try:
        report = asyncio.run(generator.generate())
    except StructuralParseError as e:
        logger.error("generation_aborted", error=str(e))
        print(f"Error: {e}")
        sys.exit(1)

    print_report(report)

    if report.failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
