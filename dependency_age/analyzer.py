"""
Run orchestration: lockfile -> index -> enrichment -> report.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from .cache import MetadataCache
from .config import AnalyzerConfig
from .enrichment import Enricher
from .interfaces import MetadataSource
from .lockfile import get_dependencies
from .models import AgeReport, Dependency
from .registry import NpmRegistryClient
from .reporting import (
    build_report,
    export_versions_csv,
    export_worksheets,
    print_dependency,
    save_results_json,
)


logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything the presentation layer needs from one run."""

    dependencies: List[Dependency]
    report: AgeReport
    enriched: int
    cache_write_failures: int
    exports: Dict[str, Path]


class DependencyAgeAnalyzer:
    """Report version spread and publish age of a project's dependencies."""

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        registry: Optional[MetadataSource] = None,
        cache: Optional[MetadataCache] = None,
    ):
        """Initialize the analyzer.

        Args:
            config: Run options. Default: AnalyzerConfig()
            registry: Metadata source. Default: an NpmRegistryClient built
                from the config and closed at the end of the run
            cache: Metadata cache. Default: a MetadataCache in config.cache_dir
        """
        self.config = config or AnalyzerConfig()
        self.registry = registry
        self.cache = cache or MetadataCache(
            self.config.cache_dir,
            ttl=self.config.cache_ttl,
            read_enabled=self.config.use_cache,
        )

    async def analyze(self) -> AnalysisResult:
        """Run a complete analysis.

        Raises:
            LockfileReadError: The lockfile is missing or cannot be decoded.
            MalformedResolutionError: A lock entry has an unusable resolution.
        """
        dependencies = get_dependencies(self.config.lockfile)
        logger.info(
            "Found %d dependencies in %s", len(dependencies), self.config.lockfile
        )

        if self.registry is not None:
            enriched, write_failures = await self._enrich(dependencies, self.registry)
        else:
            async with self._build_registry() as registry:
                enriched, write_failures = await self._enrich(dependencies, registry)

        report = build_report(dependencies, self.config.max_old_versions)
        return AnalysisResult(
            dependencies=dependencies,
            report=report,
            enriched=enriched,
            cache_write_failures=write_failures,
            exports=self._export(report, dependencies),
        )

    async def _enrich(self, dependencies: List[Dependency], registry: MetadataSource):
        enricher = Enricher(
            registry,
            self.cache,
            max_concurrency=self.config.max_concurrency,
            verbose=self.config.verbose,
        )
        try:
            if self.config.verbose:
                enriched = await enricher.enrich_all(
                    dependencies, concurrent=False, on_done=print_dependency
                )
            else:
                with tqdm(
                    total=len(dependencies),
                    desc="Fetching package metadata",
                    unit="pkg",
                    file=sys.stderr,
                    leave=False,
                    disable=not sys.stderr.isatty(),
                ) as progress:
                    enriched = await enricher.enrich_all(
                        dependencies,
                        concurrent=True,
                        on_done=lambda _: progress.update(1),
                    )
        finally:
            write_failures = await enricher.wait_for_pending_writes()
        return enriched, write_failures

    def _build_registry(self) -> NpmRegistryClient:
        return NpmRegistryClient(
            registry_url=self.config.registry_url,
            timeout=self.config.timeout,
            max_connections=self.config.max_concurrency,
        )

    def _export(self, report: AgeReport, dependencies: List[Dependency]) -> Dict[str, Path]:
        output_dir = self.config.output_dir
        if output_dir is None:
            return {}

        exports = {
            "results": save_results_json(report, dependencies, output_dir),
            "versions": export_versions_csv(dependencies, output_dir),
        }
        if self.config.get_worksheets:
            excel_file = export_worksheets(dependencies, output_dir)
            if excel_file is not None:
                exports["worksheets"] = excel_file
        return exports
