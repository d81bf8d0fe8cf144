"""CLI entrypoints for liberator commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .cleaner import Cleaner
from .config import ConfigError, LiberatorConfig, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .rebuilder import slugify
from .refactorer import Refactorer
from .repo_loader import RepoLoader, write_file_set
from .reporting import (
    format_rebuild_stats,
    format_refactor_diff,
    format_scan_report,
    format_validation_summary,
    liberation_report_json,
    scan_report_json,
)
from .scanner import Scanner
from .validators import EXTERNAL_PACKAGES, validate_pack


def _add_verbose_option(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liberator",
        description="Detect and remove low-code platform lock-in, then rebuild a self-hostable project.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Report platform patterns and the sovereignty score.")
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_path_argument(scan_parser)
    scan_parser.add_argument("--json", action="store_true", help="Print the report as JSON.")

    clean_parser = subparsers.add_parser("clean", help="Remove platform files, imports, telemetry and secrets.")
    _add_verbose_option(clean_parser, suppress_default=True)
    _add_path_argument(clean_parser)
    clean_parser.add_argument("--output", "-o", help="Directory to write the cleaned files to.")
    clean_parser.add_argument("--dry-run", action="store_true", help="Report changes without writing files.")

    refactor_parser = subparsers.add_parser("refactor", help="Rewrite platform idioms into portable code.")
    _add_verbose_option(refactor_parser, suppress_default=True)
    _add_path_argument(refactor_parser)
    refactor_parser.add_argument("--output", "-o", help="Directory to write the refactored files to.")
    refactor_parser.add_argument("--diff", action="store_true", help="Print a per-file change report.")

    validate_parser = subparsers.add_parser("validate", help="Check a frontend tree for broken artifacts.")
    _add_verbose_option(validate_parser, suppress_default=True)
    _add_path_argument(validate_parser)
    validate_parser.add_argument("--root", help="Sub-directory holding the frontend (e.g. 'frontend').")
    validate_parser.add_argument("--json", action="store_true", help="Print the result as JSON.")

    liberate_parser = subparsers.add_parser("liberate", help="Run the full pipeline and write the rebuilt project.")
    _add_verbose_option(liberate_parser, suppress_default=True)
    _add_path_argument(liberate_parser)
    liberate_parser.add_argument("--output", "-o", required=True, help="Directory to write the project to.")
    liberate_parser.add_argument("--name", help="Project name (defaults to the directory name).")
    liberate_parser.add_argument("--domain", help="Public domain for the reverse proxy.")
    liberate_parser.add_argument("--ai-provider", help="Self-hosted AI provider to wire in.")
    liberate_parser.add_argument("--no-backend", action="store_true", help="Skip the generated API server.")
    liberate_parser.add_argument("--no-database", action="store_true", help="Skip PostgreSQL and migrations.")
    liberate_parser.add_argument("--no-auth", action="store_true", help="Skip the authentication service.")
    liberate_parser.add_argument("--report", help="Also write the liberation report JSON to this path.")

    return parser


def _load(path: str) -> tuple[LiberatorConfig, dict[str, str]]:
    config = load_config(Path(path))
    files = RepoLoader().load(path, exclude_paths=config.scan.exclude_paths)
    return config, files


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for liberator commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config, files = _load(args.path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "scan":
        return _run_scan(args, config, files)
    if args.command == "clean":
        return _run_clean(args, config, files)
    if args.command == "refactor":
        return _run_refactor(args, files)
    if args.command == "validate":
        return _run_validate(args, config, files)
    if args.command == "liberate":
        return _run_liberate(args, config, files)
    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 1  # pragma: no cover


def _run_scan(args: argparse.Namespace, config: LiberatorConfig, files: dict[str, str]) -> int:
    report = Scanner(exclude_paths=config.scan.exclude_paths).scan(files)
    print(scan_report_json(report) if args.json else format_scan_report(report))
    return 0


def _run_clean(args: argparse.Namespace, config: LiberatorConfig, files: dict[str, str]) -> int:
    report = Cleaner(config.cleaning_options(dry_run=bool(args.dry_run))).clean(files)
    print(
        f"{report.files_modified} file(s) modified, {report.files_removed} removed, "
        f"{report.secrets_redacted} secret(s) redacted, {report.total_changes} change(s)"
    )
    for path in report.removed_paths():
        print(f"  removed {path}")
    if args.output and not args.dry_run:
        written = write_file_set(report.cleaned_files(), args.output)
        print(f"Wrote {len(written)} file(s) to {args.output}")
    return 0


def _run_refactor(args: argparse.Namespace, files: dict[str, str]) -> int:
    refactorer = Refactorer()
    results = refactorer.refactor_batch(files)
    changed = {path: result for path, result in results.items() if result.has_changes}
    print(f"{len(changed)} of {len(results)} source file(s) need refactoring")
    if args.diff:
        for path, result in changed.items():
            print(f"\n{path}")
            print(format_refactor_diff(result))
    if args.output:
        written = write_file_set(refactorer.apply_batch(files), args.output)
        print(f"Wrote {len(written)} file(s) to {args.output}")
    return 0


def _run_validate(args: argparse.Namespace, config: LiberatorConfig, files: dict[str, str]) -> int:
    root = args.root if args.root is not None else config.validation.root
    externals = tuple(EXTERNAL_PACKAGES) + tuple(config.validation.extra_external_packages)
    result = validate_pack(files, root=root, external_packages=externals)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_validation_summary(result), end="")
    if config.validation.fail_on_error and not result.is_valid:
        return 1
    return 0


def _run_liberate(args: argparse.Namespace, config: LiberatorConfig, files: dict[str, str]) -> int:
    name = slugify(args.name or config.project.name or Path(args.path).resolve().name)
    options = config.liberation_options(name)
    if args.domain:
        options.domain = args.domain
    if args.ai_provider:
        options.ai_provider = args.ai_provider
    if args.no_backend:
        options.include_backend = False
    if args.no_database:
        options.include_database = False
    if args.no_auth:
        options.include_auth = False

    result = Orchestrator().liberate(files, options)
    if args.report:
        Path(args.report).write_text(liberation_report_json(result) + "\n", encoding="utf-8")
    if not result.success:
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)
        return 1

    written = write_file_set(result.rebuilt_project.files, args.output)
    stats = result.stats
    print(f"Score {stats.score_before} -> {stats.score_after}; {stats.patterns_fixed} pattern(s) fixed")
    print(format_rebuild_stats(result.rebuilt_project.stats))
    for warning in result.warnings:
        print(f"warning: {warning}")
    print(f"Wrote {len(written)} file(s) to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
