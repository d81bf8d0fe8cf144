"""Configuration loading for liberator (.liberator.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .cleaner import CleaningOptions
from .orchestrator import LiberationOptions
from .patterns.cleaning import PROPRIETARY_FILES, SUSPICIOUS_PACKAGES, TELEMETRY_DOMAINS

CONFIG_FILENAME = ".liberator.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CleaningConfig:
    """Cleaning toggles plus extra platform names to treat as proprietary."""

    remove_proprietary_imports: bool = True
    remove_proprietary_files: bool = True
    remove_telemetry: bool = True
    clean_comments: bool = True
    extra_proprietary_files: List[str] = field(default_factory=list)
    extra_suspicious_packages: List[str] = field(default_factory=list)
    extra_telemetry_domains: List[str] = field(default_factory=list)


@dataclass
class ProjectSettings:
    """Rebuild settings for the generated project."""

    name: Optional[str] = None
    version: str = "1.0.0"
    description: str = ""
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


@dataclass
class ScanConfig:
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class ValidationConfig:
    root: str = ""
    extra_external_packages: List[str] = field(default_factory=list)
    fail_on_error: bool = False


@dataclass
class LiberatorConfig:
    """Represents the high-level settings defined in .liberator.yml."""

    root: Path
    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    project: ProjectSettings = field(default_factory=ProjectSettings)
    scan: ScanConfig = field(default_factory=ScanConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    def cleaning_options(self, *, dry_run: bool = False) -> CleaningOptions:
        cleaning = self.cleaning
        return CleaningOptions(
            remove_proprietary_imports=cleaning.remove_proprietary_imports,
            remove_proprietary_files=cleaning.remove_proprietary_files,
            remove_telemetry=cleaning.remove_telemetry,
            preserve_comments=not cleaning.clean_comments,
            dry_run=dry_run,
            proprietary_files=tuple(PROPRIETARY_FILES) + tuple(cleaning.extra_proprietary_files),
            suspicious_packages=tuple(SUSPICIOUS_PACKAGES) + tuple(cleaning.extra_suspicious_packages),
            telemetry_domains=tuple(TELEMETRY_DOMAINS) + tuple(cleaning.extra_telemetry_domains),
        )

    def liberation_options(self, name: Optional[str] = None) -> LiberationOptions:
        project = self.project
        return LiberationOptions(
            project_name=name or project.name or "liberated-app",
            version=project.version,
            description=project.description,
            remove_proprietary_imports=self.cleaning.remove_proprietary_imports,
            remove_proprietary_files=self.cleaning.remove_proprietary_files,
            remove_telemetry=self.cleaning.remove_telemetry,
            clean_comments=self.cleaning.clean_comments,
            include_backend=project.include_backend,
            include_database=project.include_database,
            include_auth=project.include_auth,
            include_storage=project.include_storage,
            ai_provider=project.ai_provider,
            ai_model=project.ai_model,
            ai_base_url=project.ai_base_url,
            auth_provider=project.auth_provider,
            domain=project.domain,
            ssl_email=project.ssl_email,
            deployment_target=project.deployment_target,
        )


def load_config(config_path: Path) -> LiberatorConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return LiberatorConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    cleaning = CleaningConfig()
    cleaning_data = _as_dict(data.get("cleaning"))
    if cleaning_data:
        cleaning.remove_proprietary_imports = _bool_or(
            cleaning_data.get("remove_proprietary_imports"), cleaning.remove_proprietary_imports
        )
        cleaning.remove_proprietary_files = _bool_or(
            cleaning_data.get("remove_proprietary_files"), cleaning.remove_proprietary_files
        )
        cleaning.remove_telemetry = _bool_or(cleaning_data.get("remove_telemetry"), cleaning.remove_telemetry)
        cleaning.clean_comments = _bool_or(cleaning_data.get("clean_comments"), cleaning.clean_comments)
        cleaning.extra_proprietary_files = _as_str_list(cleaning_data.get("proprietary_files"))
        cleaning.extra_suspicious_packages = _as_str_list(cleaning_data.get("suspicious_packages"))
        cleaning.extra_telemetry_domains = _as_str_list(cleaning_data.get("telemetry_domains"))

    project = ProjectSettings()
    project_data = _as_dict(data.get("project"))
    if project_data:
        project.name = _as_str(project_data.get("name"))
        for key in (
            "version",
            "description",
            "ai_provider",
            "ai_model",
            "ai_base_url",
            "auth_provider",
            "domain",
            "ssl_email",
            "deployment_target",
        ):
            value = _as_str(project_data.get(key))
            if value is not None:
                setattr(project, key, value)
        for key in ("include_backend", "include_database", "include_auth", "include_storage"):
            setattr(project, key, _bool_or(project_data.get(key), getattr(project, key)))

    scan = ScanConfig(exclude_paths=_as_str_list(_as_dict(data.get("scan")).get("exclude_paths")))

    validation = ValidationConfig()
    validation_data = _as_dict(data.get("validation"))
    if validation_data:
        validation.root = _as_str(validation_data.get("root")) or ""
        validation.extra_external_packages = _as_str_list(validation_data.get("external_packages"))
        validation.fail_on_error = _bool_or(validation_data.get("fail_on_error"), False)

    return LiberatorConfig(root=root, cleaning=cleaning, project=project, scan=scan, validation=validation)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _bool_or(value: Any, default: bool) -> bool:
    parsed = _as_bool(value)
    return default if parsed is None else parsed


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CleaningConfig",
    "ConfigError",
    "LiberatorConfig",
    "ProjectSettings",
    "ScanConfig",
    "ValidationConfig",
    "load_config",
]
