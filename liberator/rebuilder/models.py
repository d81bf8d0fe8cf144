"""Declarative project configuration and rebuild output records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

AI_PROVIDERS = ("ollama", "lmstudio", "openwebui", "openai-compatible", "none")
AUTH_PROVIDERS = ("jwt-standalone", "supabase-selfhosted", "keycloak")
DATABASE_TYPES = ("postgres",)
DEPLOYMENT_TARGETS = ("vps", "coolify", "docker-swarm", "kubernetes")

_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]{0,213}$")
_ENV_VAR_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$")


class RebuildError(ValueError):
    """Raised for an invalid project configuration or a conflicting rebuild step."""


def slugify(name: str) -> str:
    """Lower-case ``name`` into a package/compose-safe project name."""
    slug = re.sub(r"[^a-z0-9._-]+", "-", name.strip().lower()).strip("-._")
    return slug or "liberated-app"


@dataclass
class ProjectConfig:
    """Which optional subsystems to materialize and how to deploy them."""

    name: str
    version: str = "1.0.0"
    description: str = ""
    author: str = ""
    license: str = "MIT"
    has_backend: bool = True
    has_database: bool = True
    has_auth: bool = True
    has_storage: bool = False
    has_realtime: bool = False
    ai_provider: str = "none"
    ai_model: str = ""
    ai_base_url: str = ""
    auth_provider: str = "jwt-standalone"
    database_type: str = "postgres"
    domain: str = ""
    ssl_email: str = ""
    deployment_target: str = "vps"
    env_vars: List[str] = field(default_factory=list)
    source_files: Dict[str, str] = field(default_factory=dict)

    @property
    def has_ai(self) -> bool:
        return self.ai_provider != "none"

    def validate(self) -> None:
        if not _NAME_PATTERN.match(self.name):
            raise RebuildError(f"Invalid project name '{self.name}': use lower-case letters, digits, '.', '_' or '-'")
        _check_choice("ai_provider", self.ai_provider, AI_PROVIDERS)
        _check_choice("auth_provider", self.auth_provider, AUTH_PROVIDERS)
        _check_choice("database_type", self.database_type, DATABASE_TYPES)
        _check_choice("deployment_target", self.deployment_target, DEPLOYMENT_TARGETS)
        for name in self.env_vars:
            if not _ENV_VAR_PATTERN.match(name):
                raise RebuildError(f"Invalid environment variable name '{name}'")


def _check_choice(field_name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise RebuildError(f"Unsupported {field_name} '{value}'; expected one of: {', '.join(choices)}")


@dataclass
class ServiceConfig:
    name: str
    type: str
    port: int
    image: Optional[str] = None
    dockerfile: Optional[str] = None
    health_check: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"name": self.name, "type": self.type, "port": self.port}
        if self.image:
            payload["image"] = self.image
        if self.dockerfile:
            payload["dockerfile"] = self.dockerfile
        if self.health_check:
            payload["health_check"] = self.health_check
        return payload


@dataclass
class DeploymentConfig:
    target: str
    domain: str
    ssl: bool
    auto_restart: bool = True
    monitoring: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "target": self.target,
            "domain": self.domain,
            "ssl": self.ssl,
            "auto_restart": self.auto_restart,
            "monitoring": self.monitoring,
        }


@dataclass
class EnvironmentConfig:
    required: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)
    generated: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"required": list(self.required), "optional": list(self.optional), "generated": list(self.generated)}


@dataclass
class PackManifest:
    """Contents of ``liberator.config.json``: what was generated and how it runs."""

    version: str
    name: str
    created: str
    liberated_from: str
    architecture: Dict[str, bool]
    services: List[ServiceConfig]
    deployment: DeploymentConfig
    environment: EnvironmentConfig

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": self.version,
            "name": self.name,
            "created": self.created,
            "liberated_from": self.liberated_from,
            "architecture": dict(self.architecture),
            "services": [service.to_dict() for service in self.services],
            "deployment": self.deployment.to_dict(),
            "environment": self.environment.to_dict(),
        }


@dataclass
class ProjectStructure:
    """Paths registered by each rebuild bucket, in registration order."""

    frontend: List[str] = field(default_factory=list)
    backend: List[str] = field(default_factory=list)
    docker: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    database: List[str] = field(default_factory=list)
    auth: List[str] = field(default_factory=list)
    config: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "frontend": list(self.frontend),
            "backend": list(self.backend),
            "docker": list(self.docker),
            "scripts": list(self.scripts),
            "database": list(self.database),
            "auth": list(self.auth),
            "config": list(self.config),
        }


@dataclass
class RebuildStats:
    total_files: int = 0
    frontend_files: int = 0
    backend_files: int = 0
    docker_files: int = 0
    script_files: int = 0
    database_files: int = 0
    auth_files: int = 0
    generated_bytes: int = 0
    timestamp: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_files": self.total_files,
            "frontend_files": self.frontend_files,
            "backend_files": self.backend_files,
            "docker_files": self.docker_files,
            "script_files": self.script_files,
            "database_files": self.database_files,
            "auth_files": self.auth_files,
            "generated_bytes": self.generated_bytes,
            "timestamp": self.timestamp,
        }


@dataclass
class RebuiltProject:
    """The synthesized, self-hostable file tree plus its manifest."""

    files: Dict[str, str]
    structure: ProjectStructure
    manifest: PackManifest
    readme: str
    stats: RebuildStats
    steps: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "RebuiltProject":
        manifest = PackManifest(
            version="",
            name="",
            created="",
            liberated_from="",
            architecture={},
            services=[],
            deployment=DeploymentConfig(target="", domain="", ssl=False),
            environment=EnvironmentConfig(),
        )
        return cls(files={}, structure=ProjectStructure(), manifest=manifest, readme="", stats=RebuildStats())


__all__ = [
    "AI_PROVIDERS",
    "AUTH_PROVIDERS",
    "DATABASE_TYPES",
    "DEPLOYMENT_TARGETS",
    "DeploymentConfig",
    "EnvironmentConfig",
    "PackManifest",
    "ProjectConfig",
    "ProjectStructure",
    "RebuildError",
    "RebuildStats",
    "RebuiltProject",
    "ServiceConfig",
    "slugify",
]
