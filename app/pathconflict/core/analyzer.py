"""Conflict detection pipeline.

``analyze()`` runs the whole engine: parse PATH, scan directories, enrich
executables (symlinks, managers, versions, hashes), classify and score
conflicts, then filter and aggregate everything into an AnalysisResult.
Every recoverable problem ends up as data in the result; only invalid
inputs raise, and they do so before any directory is touched.
"""

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from pathconflict.analyzers.classifier import ConflictClassifier
from pathconflict.analyzers.hashing import compute_hash
from pathconflict.analyzers.managers import ManagerDetector
from pathconflict.analyzers.recommendations import RecommendationEngine
from pathconflict.analyzers.severity import SeverityScorer
from pathconflict.analyzers.symlinks import SymlinkResolver
from pathconflict.analyzers.versions import VersionExtractor
from pathconflict.core.config import EngineConfigError, load_engine_config
from pathconflict.core.context import AnalysisContext, build_context
from pathconflict.core.workers import run_indexed
from pathconflict.models.conflict import Conflict
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance, ProbeStatus
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.models.result import AnalysisResult, Summary
from pathconflict.platform.detect import platform_info
from pathconflict.scanners.executables import ExecutableScanner
from pathconflict.scanners.path_parser import ParsedPath, PathParser

logger = logging.getLogger(__name__)


def _load_context(config_path: Path | None) -> AnalysisContext:
    try:
        config = load_engine_config(config_path)
    except EngineConfigError as e:
        msg = f"Cannot use configuration: {e}"
        raise FatalConfigError(msg) from e
    try:
        return build_context(config)
    except ValueError as e:
        msg = f"Invalid manager signature in configuration: {e}"
        raise FatalConfigError(msg) from e


def _system_path(env: Mapping[str, str]) -> str:
    value = env.get("PATH")
    if value is None:
        # Windows environments spell it "Path"
        value = next((v for k, v in env.items() if k.upper() == "PATH"), "")
    return value


def describe(group: ExecutableGroup) -> str:
    """Summarize a conflicting group in one sentence."""
    active = group.active
    count = len(group.shadowed)
    version = f" ({active.version})" if active.version else ""
    noun = "instance" if count == 1 else "instances"
    return f"{group.binary_name} has {count} shadowed {noun}. Active: {active.raw_path}{version}"


class _Enricher:
    """Per-group enrichment with the components of one run."""

    def __init__(
        self,
        options: AnalysisOptions,
        context: AnalysisContext,
        directories: dict[int, str],
        cancel: threading.Event | None,
    ) -> None:
        self._options = options
        self._context = context
        self._directories = directories
        self._cancel = cancel
        self._resolver = SymlinkResolver(
            context.max_symlink_depth, enabled=options.resolve_symlinks
        )
        self._detector = ManagerDetector(
            context.signatures, ignore_case=context.profile.case_insensitive
        )
        self._extractor = VersionExtractor(
            enabled=options.extract_versions,
            timeout=context.version_timeout,
            flags=context.version_flags,
            max_bytes=context.max_output_bytes,
            max_lines=context.max_output_lines,
        )

    def _cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def _wants_probe(self, group: ExecutableGroup) -> bool:
        return (
            group.has_conflict
            or self._options.binary_filter is not None
            or self._context.probe_single_instances
        )

    def _enrich_instance(self, instance: ExecutableInstance, probe: bool) -> ExecutableInstance:
        blacklisted = self._context.is_blacklisted(self._directories[instance.entry_index])
        instance = self._resolver.resolve_instance(instance)
        instance = self._detector.detect_instance(instance)
        instance = self._extractor.extract(
            instance, self._cancel, execute=probe and not blacklisted
        )
        if self._options.include_hashes and not blacklisted and instance.resolved_path:
            instance = replace(instance, hash=compute_hash(instance.resolved_path))
        return instance

    def __call__(self, group: ExecutableGroup) -> ExecutableGroup:
        probe = self._wants_probe(group)
        incomplete = group.incomplete
        instances: list[ExecutableInstance] = []
        for instance in group.instances:
            if self._cancelled():
                incomplete = True
                instances.append(instance)
                continue
            enriched = self._enrich_instance(instance, probe)
            if enriched.probe is not None and enriched.probe.status == ProbeStatus.CANCELLED:
                incomplete = True
            instances.append(enriched)
        return ExecutableGroup(
            binary_name=group.binary_name,
            instances=tuple(instances),
            incomplete=incomplete,
        )


def analyze(
    options: AnalysisOptions | None = None,
    *,
    context: AnalysisContext | None = None,
    env: Mapping[str, str] | None = None,
    cancel: threading.Event | None = None,
    config_path: Path | None = None,
) -> AnalysisResult:
    """Analyze the executable search path for conflicts.

    Args:
        options: Analysis options. Defaults to AnalysisOptions().
        context: Prebuilt analysis context. When None, the user
            configuration is loaded and the platform detected.
        env: Environment providing PATH. Defaults to os.environ.
        cancel: Event that, once set, stops in-flight probes, abandons
            pending work and yields a partial result.
        config_path: Configuration file used when building the context.

    Returns:
        AnalysisResult with entries, groups, conflicts and summary.

    Raises:
        FatalConfigError: If the options or the configuration are invalid,
            or a custom PATH has no usable entries.
    """
    options = options or AnalysisOptions()
    options.validate()
    context = context or _load_context(config_path)
    env = os.environ if env is None else env
    profile = context.profile

    parser = PathParser(profile, env)
    if options.custom_path is not None:
        parsed = parser.parse(options.custom_path)
        if not parsed.entries:
            msg = f"Custom PATH has no usable entries: {options.custom_path!r}"
            raise FatalConfigError(msg)
    else:
        raw = _system_path(env)
        parsed = parser.parse(raw) if raw else ParsedPath(entries=(), skipped=(), notes=())
        if not raw:
            logger.warning("PATH is empty, nothing to analyze")

    scan = ExecutableScanner(profile, max_workers=context.max_workers).scan(parsed.entries, cancel)

    groups = scan.groups
    if options.binary_filter is not None:
        name = options.binary_filter.strip()
        keys = {profile.group_key(name), profile.group_key(profile.lookup_name(name))}
        groups = tuple(g for g in groups if profile.group_key(g.binary_name) in keys)

    directories = {e.index: e.directory for e in scan.entries}
    enricher = _Enricher(options, context, directories, cancel)
    enriched = run_indexed(enricher, groups, max_workers=context.max_workers, cancel=cancel)
    groups = tuple(
        result if result is not None else replace(group, incomplete=True)
        for group, result in zip(groups, enriched, strict=True)
    )

    classifier = ConflictClassifier()
    scorer = SeverityScorer(context.thresholds)
    recommender = RecommendationEngine()
    conflicts: list[Conflict] = []
    for group in groups:
        if not group.has_conflict:
            continue
        category = classifier.classify(group)
        conflicts.append(
            Conflict(
                binary_name=group.binary_name,
                category=category,
                severity=scorer.score(category, group),
                active=group.active,
                shadowed=group.shadowed,
                recommendation=(
                    recommender.recommend(category, group) if options.recommendations else None
                ),
                description=describe(group),
                incomplete=group.incomplete,
            )
        )

    conflicts.sort(key=lambda c: (-c.severity.rank, c.binary_name))
    if options.category is not None:
        conflicts = [c for c in conflicts if c.category == options.category]
    if options.min_severity is not None:
        min_severity = options.min_severity
        conflicts = [c for c in conflicts if c.severity.at_least(min_severity)]
    if options.conflicts_only:
        names = {c.binary_name for c in conflicts}
        groups = tuple(g for g in groups if g.binary_name in names)

    skipped = tuple(sorted((*parsed.skipped, *scan.skipped), key=lambda s: s.index))
    cancelled = scan.cancelled or (cancel is not None and cancel.is_set())
    result = AnalysisResult(
        entries=scan.entries,
        groups=groups,
        conflicts=tuple(conflicts),
        skipped_entries=skipped,
        summary=Summary.build(scan.entries, groups, tuple(conflicts), skipped),
        notes=parsed.notes,
        platform=platform_info(profile),
        cancelled=cancelled,
    )
    logger.debug(
        "Analysis finished: %d entries, %d groups, %d conflicts",
        len(result.entries),
        len(result.groups),
        len(result.conflicts),
    )
    return result


def check_binary(
    name: str,
    options: AnalysisOptions | None = None,
    **kwargs: object,
) -> ExecutableGroup | None:
    """Look up every instance of one binary on the search path.

    Unlike ``analyze()``, the group is returned even when it has no
    conflict.

    Args:
        name: Binary name to look up.
        options: Base options; filters other than the binary are ignored.
        **kwargs: Passed through to analyze() (context, env, cancel, config_path).

    Returns:
        The binary's group, or None if it is not on the search path.

    Raises:
        FatalConfigError: If the name or the options are invalid.
    """
    options = replace(
        options or AnalysisOptions(),
        binary_filter=name,
        category_filter=None,
        severity_filter=None,
        conflicts_only=False,
    )
    result = analyze(options, **kwargs)  # type: ignore[arg-type]
    return result.groups[0] if result.groups else None
