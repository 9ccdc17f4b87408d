#!/usr/bin/env python3
"""
Example script showing how to use the dependency-age tool as a library.
"""

import asyncio
from pathlib import Path

from dependency_age.analyzer import DependencyAgeAnalyzer
from dependency_age.config import AnalyzerConfig
from dependency_age.reporting import print_summary


def example_basic_report():
    """Example: Summary with the five oldest versions."""
    print("="*60)
    print("Example 1: Basic Report")
    print("="*60)

    analyzer = DependencyAgeAnalyzer(AnalyzerConfig(lockfile=Path("yarn.lock")))
    result = asyncio.run(analyzer.analyze())

    print_summary(result.report)


def example_per_package_listing():
    """Example: Version table for every package, fetched one at a time."""
    print("\n" + "="*60)
    print("Example 2: Per-package Listing")
    print("="*60)

    analyzer = DependencyAgeAnalyzer(AnalyzerConfig(
        lockfile=Path("yarn.lock"),
        verbose=True,
        max_old_versions=0,
    ))
    result = asyncio.run(analyzer.analyze())

    for dependency in result.dependencies:
        if len(dependency.versions) > 1:
            print(f"{dependency.name}: {len(dependency.versions)} versions installed")


def example_fresh_metadata_with_exports():
    """Example: Ignore the cache, cap concurrency and export the results."""
    print("\n" + "="*60)
    print("Example 3: Fresh Metadata With Exports")
    print("="*60)

    analyzer = DependencyAgeAnalyzer(AnalyzerConfig(
        lockfile=Path("yarn.lock"),
        use_cache=False,
        max_concurrency=16,
        max_old_versions=10,
        output_dir=Path("./output/example3"),
        get_worksheets=True,
    ))
    result = asyncio.run(analyzer.analyze())

    print_summary(result.report)
    for name, path in result.exports.items():
        print(f"{name}: {path}")


if __name__ == "__main__":
    example_basic_report()
    example_per_package_listing()
    example_fresh_metadata_with_exports()
