"""Project rebuilder: turns cleaned frontend sources into a self-hostable stack."""

from .builder import MANIFEST_PATH, STEP_ORDER, ProjectRebuilder, is_frontend_file, rebuild_project
from .models import (
    AI_PROVIDERS,
    AUTH_PROVIDERS,
    DEPLOYMENT_TARGETS,
    DeploymentConfig,
    EnvironmentConfig,
    PackManifest,
    ProjectConfig,
    ProjectStructure,
    RebuildError,
    RebuildStats,
    RebuiltProject,
    ServiceConfig,
    slugify,
)

__all__ = [
    "AI_PROVIDERS",
    "AUTH_PROVIDERS",
    "DEPLOYMENT_TARGETS",
    "DeploymentConfig",
    "EnvironmentConfig",
    "MANIFEST_PATH",
    "PackManifest",
    "ProjectConfig",
    "ProjectRebuilder",
    "ProjectStructure",
    "RebuildError",
    "RebuildStats",
    "RebuiltProject",
    "STEP_ORDER",
    "ServiceConfig",
    "is_frontend_file",
    "rebuild_project",
    "slugify",
]
