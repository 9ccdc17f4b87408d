"""Tests for aggregation, summary formatting and exports."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd

from dependency_age.models import Dependency, DependencyVersion, ReleaseInfo
from dependency_age.reporting import (
    build_report,
    export_versions_csv,
    export_worksheets,
    format_dependency,
    format_summary,
    save_results_json,
    select_oldest,
    versions_frame,
)


EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _version(name, version, day=None):
    release = None
    if day is not None:
        release = ReleaseInfo(
            released_at=EPOCH + timedelta(days=day),
            relative_age=f"{day} days after epoch",
        )
    return DependencyVersion(
        name=name,
        version=version,
        resolution=f"{name}@npm:{version}",
        protocol="npm",
        release=release,
    )


def _dependencies():
    return [
        Dependency("a", [_version("a", "5.0.0", 5), _version("a", "1.0.0", 1)]),
        Dependency("b", [_version("b", "3.0.0", 3), _version("b", "0.0.1")]),
        Dependency("c", [_version("c", "2.0.0", 2), _version("c", "4.0.0", 4)]),
    ]


def test_oldest_versions_are_sorted_ascending():
    oldest = select_oldest(versions_frame(_dependencies()), 3)

    assert [item.version for item in oldest] == ["1.0.0", "2.0.0", "3.0.0"]
    assert oldest[0].released_at == EPOCH + timedelta(days=1)


def test_equal_dates_keep_lockfile_order():
    dependencies = [
        Dependency("x", [_version("x", "1.0.0", 7)]),
        Dependency("y", [_version("y", "1.0.0", 3), _version("y", "2.0.0", 7)]),
        Dependency("z", [_version("z", "1.0.0", 7)]),
    ]

    oldest = select_oldest(versions_frame(dependencies), 4)

    assert [(item.name, item.version) for item in oldest] == [
        ("y", "1.0.0"), ("x", "1.0.0"), ("y", "2.0.0"), ("z", "1.0.0"),
    ]


def test_undated_versions_are_not_reported():
    oldest = select_oldest(versions_frame(_dependencies()), 10)

    assert len(oldest) == 5
    assert "0.0.1" not in [item.version for item in oldest]


def test_zero_limit_disables_the_report():
    report = build_report(_dependencies(), max_old_versions=0)

    assert report.oldest == []
    assert "Oldest" not in format_summary(report)


def test_report_totals():
    report = build_report(_dependencies(), max_old_versions=5)

    assert report.total_versions == 6
    assert report.total_dependencies == 3
    assert [item.version for item in report.oldest] == ["1.0.0", "2.0.0", "3.0.0", "4.0.0", "5.0.0"]


def test_report_without_any_dates():
    dependencies = [Dependency("a", [_version("a", "1.0.0")])]

    report = build_report(dependencies)

    assert report.total_versions == 1
    assert report.oldest == []


def test_report_for_empty_lockfile():
    report = build_report([])

    assert report.total_versions == 0
    assert report.total_dependencies == 0
    assert report.oldest == []


def test_summary_lists_oldest_versions():
    summary = format_summary(build_report(_dependencies(), max_old_versions=2))

    assert "Number of dependencies: 3" in summary
    assert "Number of versions: 6" in summary
    assert "Oldest 2 dependency versions:" in summary
    assert "1 days after epoch" in summary


def test_format_dependency_strips_name_from_resolution():
    text = format_dependency(_dependencies()[1])

    assert text.splitlines()[0] == "b (2 versions)"
    assert "npm:3.0.0" in text
    assert "b@npm:3.0.0" not in text


def test_reporting_exports(tmp_path: Path):
    output_dir = tmp_path / "out"
    dependencies = _dependencies()
    report = build_report(dependencies)

    results_file = save_results_json(report, dependencies, output_dir)
    versions_file = export_versions_csv(dependencies, output_dir)
    excel_file = export_worksheets(dependencies, output_dir)

    assert results_file.exists()
    assert versions_file.exists()
    assert excel_file is not None and excel_file.exists()

    results = json.loads(results_file.read_text())
    assert results["total_versions"] == 6
    assert [dep["name"] for dep in results["dependencies"]] == ["a", "b", "c"]

    versions = pd.read_csv(versions_file)
    assert list(versions["version"]) == ["5.0.0", "1.0.0", "3.0.0", "0.0.1", "2.0.0", "4.0.0"]

    sheets = pd.read_excel(excel_file, sheet_name=None)
    assert list(sheets) == ["a", "b", "c"]


def test_worksheet_names_are_unique_and_short(tmp_path: Path):
    long_name = "@scope/" + "x" * 40
    dependencies = [
        Dependency(long_name, [_version(long_name, "1.0.0", 1)]),
        Dependency(long_name + "-y", [_version(long_name + "-y", "1.0.0", 2)]),
    ]

    excel_file = export_worksheets(dependencies, tmp_path)

    sheets = pd.read_excel(excel_file, sheet_name=None)
    assert len(sheets) == 2
    assert all(len(name) <= 31 for name in sheets)


def test_no_worksheets_without_dependencies(tmp_path: Path):
    assert export_worksheets([], tmp_path) is None
