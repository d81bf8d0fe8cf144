"""Pipeline orchestration: scan, clean, refactor, rebuild and package."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, Dict, List, Mapping, Optional

from .cleaner import Cleaner, CleaningOptions, CleaningReport
from .logging import get_logger
from .models import FileSet, Issue, ScanReport, Severity
from .rebuilder import ProjectConfig, ProjectRebuilder, RebuiltProject
from .refactorer import Refactorer, RefactorResult
from .scanner import Scanner
from .validators import PackValidationResult, validate_pack

PHASES = ("scan", "clean", "refactor", "rebuild", "package", "complete")

_VITE_ENV = re.compile(r"\bimport\.meta\.env\.(VITE_[A-Z0-9_]+)")
_PROCESS_ENV = re.compile(r"\bprocess\.env\.([A-Z_][A-Z0-9_]*)")
_PROPRIETARY_ENV = re.compile(r"LOVABLE|GPT_?ENGINEER|GPTENG|BOLT_|^VITE_GPT_")
_BUILTIN_ENV = frozenset({"NODE_ENV", "PORT"})


@dataclass
class LiberationOptions:
    """Knobs for one liberation run."""

    project_name: str = "liberated-app"
    version: str = "1.0.0"
    description: str = ""
    remove_proprietary_imports: bool = True
    remove_proprietary_files: bool = True
    remove_telemetry: bool = True
    clean_comments: bool = True
    include_backend: bool = True
    include_database: bool = True
    include_auth: bool = True
    include_storage: bool = False
    ai_provider: str = "ollama"
    ai_model: str = ""
    ai_base_url: str = ""
    auth_provider: str = "jwt-standalone"
    domain: str = ""
    ssl_email: str = ""
    deployment_target: str = "vps"

    def cleaning_options(self) -> CleaningOptions:
        return CleaningOptions(
            remove_proprietary_imports=self.remove_proprietary_imports,
            remove_proprietary_files=self.remove_proprietary_files,
            remove_telemetry=self.remove_telemetry,
            preserve_comments=not self.clean_comments,
        )

    def project_config(self, source_files: Mapping[str, str], env_vars: List[str]) -> ProjectConfig:
        return ProjectConfig(
            name=self.project_name,
            version=self.version,
            description=self.description or f"Self-hosted edition of {self.project_name}",
            has_backend=self.include_backend,
            has_database=self.include_database,
            has_auth=self.include_auth,
            has_storage=self.include_storage,
            ai_provider=self.ai_provider,
            ai_model=self.ai_model,
            ai_base_url=self.ai_base_url,
            auth_provider=self.auth_provider,
            domain=self.domain,
            ssl_email=self.ssl_email,
            deployment_target=self.deployment_target,
            env_vars=env_vars,
            source_files=dict(source_files),
        )


@dataclass(frozen=True)
class LiberationProgress:
    """Progress event emitted at phase boundaries."""

    phase: str
    progress: int
    message: str


ProgressCallback = Callable[[LiberationProgress], None]


@dataclass
class LiberationStats:
    total_files_processed: int = 0
    files_removed: int = 0
    files_cleaned: int = 0
    files_refactored: int = 0
    files_generated: int = 0
    patterns_detected: int = 0
    patterns_fixed: int = 0
    score_before: int = 0
    score_after: int = 0
    processing_time_ms: int = 0
    timestamp: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_files_processed": self.total_files_processed,
            "files_removed": self.files_removed,
            "files_cleaned": self.files_cleaned,
            "files_refactored": self.files_refactored,
            "files_generated": self.files_generated,
            "patterns_detected": self.patterns_detected,
            "patterns_fixed": self.patterns_fixed,
            "score_before": self.score_before,
            "score_after": self.score_after,
            "processing_time_ms": self.processing_time_ms,
            "timestamp": self.timestamp,
        }


@dataclass
class LiberationResult:
    """Everything a liberation run produced; on failure every field is empty."""

    success: bool
    scan_report: ScanReport
    cleaning_report: CleaningReport
    cleaned_files: FileSet
    refactor_results: Dict[str, RefactorResult]
    rebuilt_project: RebuiltProject
    validation: PackValidationResult
    stats: LiberationStats
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def failure(cls, errors: List[str], stats: Optional[LiberationStats] = None) -> "LiberationResult":
        return cls(
            success=False,
            scan_report=ScanReport.empty(),
            cleaning_report=CleaningReport(),
            cleaned_files={},
            refactor_results={},
            rebuilt_project=RebuiltProject.empty(),
            validation=PackValidationResult.empty(),
            stats=stats or LiberationStats(),
            errors=list(errors),
        )


def extract_env_vars(files: Mapping[str, str]) -> List[str]:
    """Environment variable names referenced by ``files``, first-seen order."""
    names: Dict[str, None] = {}
    for content in files.values():
        for pattern in (_VITE_ENV, _PROCESS_ENV):
            for match in pattern.finditer(content):
                name = match.group(1)
                if name in _BUILTIN_ENV or _PROPRIETARY_ENV.search(name):
                    continue
                names.setdefault(name, None)
    return list(names)


class Orchestrator:
    """Runs the liberation pipeline over an in-memory file set."""

    def __init__(
        self,
        scanner: Scanner | None = None,
        cleaner: Cleaner | None = None,
        refactorer: Refactorer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.scanner = scanner or Scanner()
        self.cleaner = cleaner
        self.refactorer = refactorer or Refactorer()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("orchestrator")

    def liberate(
        self,
        files: Mapping[str, str],
        options: LiberationOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> LiberationResult:
        """Run every phase in order; any exception yields :meth:`LiberationResult.failure`."""
        options = options or LiberationOptions()
        started = time.perf_counter()
        self.logger.info("Liberating %d files as %s", len(files), options.project_name)
        try:
            return self._liberate(files, options, on_progress, started)
        except Exception as exc:
            self.logger.error("Liberation failed: %s", exc)
            self.logger.debug("Liberation failure details", exc_info=True)
            stats = LiberationStats(
                processing_time_ms=int((time.perf_counter() - started) * 1000),
                timestamp=self.clock().isoformat(),
            )
            return LiberationResult.failure([str(exc) or exc.__class__.__name__], stats)

    def _liberate(
        self,
        files: Mapping[str, str],
        options: LiberationOptions,
        on_progress: ProgressCallback | None,
        started: float,
    ) -> LiberationResult:
        warnings: List[str] = []

        self._report(on_progress, "scan", 0, "Scanning project")
        scan_report = self.scanner.scan(files)
        self._report(on_progress, "scan", 100, f"Scan complete: {len(scan_report.issues)} pattern(s) detected")

        self._report(on_progress, "clean", 0, "Cleaning files")
        cleaner = self.cleaner or Cleaner(options.cleaning_options())
        cleaning_report = cleaner.clean(files)
        cleaned_files = cleaning_report.cleaned_files()
        self._report(on_progress, "clean", 100, f"Cleaning complete: {cleaning_report.files_modified} file(s) modified")

        self._report(on_progress, "refactor", 0, "Refactoring sources")
        refactor_results = self.refactorer.refactor_batch(cleaned_files)
        for path, result in refactor_results.items():
            if result.has_changes:
                cleaned_files[path] = result.refactored_code
        self._report(on_progress, "refactor", 100, f"Refactoring complete: {len(refactor_results)} file(s) processed")

        self._report(on_progress, "rebuild", 0, "Rebuilding self-hosted architecture")
        config = options.project_config(cleaned_files, extract_env_vars(cleaned_files))
        rebuilt = ProjectRebuilder(config, clock=self.clock).rebuild()
        self._report(on_progress, "rebuild", 100, f"Rebuild complete: {rebuilt.stats.total_files} file(s) generated")

        self._report(on_progress, "package", 0, "Packaging liberation pack")
        final_scan = self.scanner.scan(rebuilt.files)
        validation = validate_pack(rebuilt.files, root="frontend")
        if final_scan.issues:
            warnings.append(f"{len(final_scan.issues)} pattern(s) remain in the rebuilt project")
        warnings.extend(validation.suggestions)
        self._report(on_progress, "package", 100, "Liberation pack ready")

        self._report(on_progress, "complete", 100, "Liberation complete")

        stats = LiberationStats(
            total_files_processed=len(files),
            files_removed=cleaning_report.files_removed,
            files_cleaned=cleaning_report.files_modified,
            files_refactored=sum(1 for result in refactor_results.values() if result.has_changes),
            files_generated=rebuilt.stats.total_files,
            patterns_detected=len(scan_report.issues),
            patterns_fixed=cleaning_report.total_changes
            + sum(len(result.changes) for result in refactor_results.values()),
            score_before=scan_report.score,
            score_after=final_scan.score,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
            timestamp=self.clock().isoformat(),
        )
        self.logger.info(
            "Liberation complete: score %d -> %d, %d file(s) generated",
            stats.score_before,
            stats.score_after,
            stats.files_generated,
        )
        return LiberationResult(
            success=True,
            scan_report=scan_report,
            cleaning_report=cleaning_report,
            cleaned_files=cleaned_files,
            refactor_results=refactor_results,
            rebuilt_project=rebuilt,
            validation=validation,
            stats=stats,
            warnings=warnings,
        )

    def _report(self, callback: ProgressCallback | None, phase: str, progress: int, message: str) -> None:
        self.logger.debug("[%s %d%%] %s", phase, progress, message)
        if callback is None:
            return
        try:
            callback(LiberationProgress(phase=phase, progress=progress, message=message))
        except Exception as exc:
            self.logger.warning("Progress callback failed during %s: %s", phase, exc)


def liberate_project(
    files: Mapping[str, str],
    project_name: str,
    on_progress: ProgressCallback | None = None,
    **options: object,
) -> LiberationResult:
    """Convenience wrapper building :class:`LiberationOptions` from keywords."""
    settings = LiberationOptions(project_name=project_name, **options)  # type: ignore[arg-type]
    return Orchestrator().liberate(files, settings, on_progress)


def scan_project(files: Mapping[str, str]) -> ScanReport:
    return Scanner().scan(files)


def audit_project(files: Mapping[str, str]) -> Dict[str, object]:
    """Quick audit: score, grade, issues and a one-line summary."""
    report = scan_project(files)
    issues: List[Issue] = report.issues
    critical = report.severity_counts.get(Severity.CRITICAL, 0)
    return {
        "score": report.score,
        "grade": report.grade,
        "issues": [issue.to_dict() for issue in issues],
        "summary": (
            f"{report.files_scanned} file(s) scanned, {len(issues)} pattern(s) detected "
            f"({critical} critical), score: {report.score}/100 ({report.grade})"
        ),
    }


__all__ = [
    "LiberationOptions",
    "LiberationProgress",
    "LiberationResult",
    "LiberationStats",
    "Orchestrator",
    "PHASES",
    "audit_project",
    "extract_env_vars",
    "liberate_project",
    "scan_project",
]
