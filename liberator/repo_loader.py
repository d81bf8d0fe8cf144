"""Loads a project directory into an in-memory file set and writes results back."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Mapping, Sequence

from .config import CONFIG_FILENAME, ConfigError, load_config
from .logging import get_logger
from .models import FileSet

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    ".cache",
    ".turbo",
    ".vercel",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_BINARY_SNIFF_BYTES = 8192
DEFAULT_MAX_FILE_BYTES = 2 * 1024 * 1024


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .liberator.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _parse_config_excludes(root: Path) -> List[IgnoreRule]:
    try:
        config = load_config(root / CONFIG_FILENAME)
    except ConfigError:
        return []
    rules: List[IgnoreRule] = []
    for pattern in config.scan.exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def _read_text(path: Path) -> str | None:
    data = path.read_bytes()
    if b"\x00" in data[:_BINARY_SNIFF_BYTES]:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class RepoLoader:
    """Walks a project directory and returns its text files as a :data:`FileSet`."""

    def __init__(self, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self.max_file_bytes = max_file_bytes
        self.logger = get_logger("repo_loader")

    def load(self, root: str | Path, exclude_paths: Sequence[str] = ()) -> FileSet:
        """Return ``{relative posix path: text}`` for every readable text file under ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        rules = _parse_gitignore(root_path / ".gitignore")
        rules.extend(_parse_config_excludes(root_path))
        rules.extend(rule for rule in map(_build_ignore_rule, exclude_paths) if rule is not None)

        files: FileSet = {}
        skipped = 0
        for path in _iter_files(root_path, rules):
            rel_path = path.relative_to(root_path).as_posix()
            if path.stat().st_size > self.max_file_bytes:
                self.logger.debug("Skipping oversized %s", rel_path)
                skipped += 1
                continue
            content = _read_text(path)
            if content is None:
                self.logger.debug("Skipping binary %s", rel_path)
                skipped += 1
                continue
            files[rel_path] = content

        self.logger.info("Loaded %d files from %s (%d skipped)", len(files), root_path, skipped)
        return files


def write_file_set(files: Mapping[str, str], output_dir: str | Path) -> List[Path]:
    """Write ``files`` under ``output_dir``; shell scripts are made executable."""
    root = Path(output_dir).expanduser().resolve()
    written: List[Path] = []
    for rel_path, content in files.items():
        target = (root / rel_path).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Refusing to write outside the output directory: {rel_path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        if target.suffix == ".sh":
            target.chmod(0o755)
        written.append(target)
    return written


__all__ = ["DEFAULT_MAX_FILE_BYTES", "IgnoreRule", "RepoLoader", "write_file_set"]
