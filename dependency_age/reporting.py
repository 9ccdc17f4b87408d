"""
Aggregation, reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .models import AgeReport, Dependency, OldVersion


logger = logging.getLogger(__name__)

VERSION_COLUMNS = [
    "name",
    "version",
    "resolution",
    "protocol",
    "released_at",
    "relative_age",
]


def versions_frame(dependencies: Iterable[Dependency]) -> pd.DataFrame:
    """Flatten every dependency's versions into one frame, in lockfile order."""
    rows = [
        {
            "name": version.name,
            "version": version.version,
            "resolution": version.resolution,
            "protocol": version.protocol,
            "released_at": version.released_at,
            "relative_age": version.relative_age,
        }
        for dependency in dependencies
        for version in dependency.versions
    ]
    df = pd.DataFrame(rows, columns=VERSION_COLUMNS)
    df["released_at"] = pd.to_datetime(df["released_at"], utc=True)
    return df


def select_oldest(df: pd.DataFrame, limit: int) -> List[OldVersion]:
    """Return the ``limit`` earliest-released versions.

    Undated versions are ignored; equal dates keep their lockfile order.
    """
    if limit <= 0 or df.empty:
        return []

    dated = df[df["released_at"].notna()]
    oldest = dated.sort_values("released_at", kind="stable").head(limit)
    return [
        OldVersion(
            name=row.name,
            version=row.version,
            relative_age=row.relative_age,
            released_at=row.released_at.to_pydatetime(),
        )
        for row in oldest.itertuples(index=False)
    ]


def build_report(dependencies: List[Dependency], max_old_versions: int = 5) -> AgeReport:
    df = versions_frame(dependencies)
    return AgeReport(
        total_versions=len(df),
        total_dependencies=len(dependencies),
        oldest=select_oldest(df, max_old_versions),
    )


def dependency_title(dependency: Dependency) -> str:
    title = dependency.name
    if len(dependency.versions) > 1:
        title += f" ({len(dependency.versions)} versions)"
    return title


def dependency_table(dependency: Dependency) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Version": version.version,
                "Age": version.relative_age or "",
                "Resolution": version.resolution_spec,
            }
            for version in dependency.versions
        ],
        columns=["Version", "Age", "Resolution"],
    )


def format_dependency(dependency: Dependency) -> str:
    table = dependency_table(dependency).to_string(index=False)
    return f"{dependency_title(dependency)}\n{table}"


def format_summary(report: AgeReport) -> str:
    lines = [
        "=" * 60,
        f"Number of dependencies: {report.total_dependencies}",
        f"Number of versions: {report.total_versions}",
    ]
    if report.oldest:
        oldest_df = pd.DataFrame(
            [
                {"Name": item.name, "Version": item.version, "Age": item.relative_age}
                for item in report.oldest
            ],
            columns=["Name", "Version", "Age"],
        )
        lines.append("-" * 60)
        lines.append(f"Oldest {len(report.oldest)} dependency versions:")
        lines.append(oldest_df.to_string(index=False))
    lines.append("=" * 60)
    return "\n".join(lines)


def print_dependency(dependency: Dependency) -> None:
    print(format_dependency(dependency))
    print()


def print_summary(report: AgeReport) -> None:
    print(format_summary(report))


def save_results_json(
    report: AgeReport,
    dependencies: List[Dependency],
    output_dir: Path,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / "dependency_age_results.json"
    results = report.to_dict()
    results["dependencies"] = [
        {
            "name": dependency.name,
            "versions": [
                {
                    "version": version.version,
                    "resolution": version.resolution,
                    "protocol": version.protocol,
                    "released_at": version.released_at,
                    "relative_age": version.relative_age,
                }
                for version in dependency.versions
            ],
        }
        for dependency in dependencies
    ]
    with open(results_file, 'w') as f:
        json.dump(results, f, indent=2, default=str)
    return results_file


def export_versions_csv(dependencies: List[Dependency], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    versions_file = output_dir / "dependency_age_versions.csv"
    df = versions_frame(dependencies)
    df["released_at"] = df["released_at"].dt.tz_localize(None)
    df.to_csv(versions_file, index=False)
    return versions_file


def export_worksheets(dependencies: List[Dependency], output_dir: Path) -> Optional[Path]:
    if not dependencies:
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    excel_file = output_dir / "dependency_age_worksheets.xlsx"
    used: Dict[str, int] = {}
    with pd.ExcelWriter(excel_file, engine='openpyxl') as writer:
        for dependency in dependencies:
            # Excel sheet names have a 31 character limit and forbid "/"
            sheet_name = dependency.name.replace("/", "_")[:31]
            if sheet_name in used:
                used[sheet_name] += 1
                suffix = f"~{used[sheet_name]}"
                sheet_name = sheet_name[:31 - len(suffix)] + suffix
            else:
                used[sheet_name] = 0
            dependency_table(dependency).to_excel(writer, sheet_name=sheet_name, index=False)
    logger.debug("Wrote %d worksheets to %s", len(dependencies), excel_file)
    return excel_file
