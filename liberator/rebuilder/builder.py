"""Synthesizes a self-hostable project tree from cleaned frontend sources."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..logging import get_logger
from ..polyfills import missing_polyfills
from .models import (
    DeploymentConfig,
    EnvironmentConfig,
    PackManifest,
    ProjectConfig,
    ProjectStructure,
    RebuildError,
    RebuildStats,
    RebuiltProject,
    ServiceConfig,
)

Clock = Callable[[], datetime]

MANIFEST_PATH = "liberator.config.json"
LIBERATED_FROM = "hosted-app-builder"

FRONTEND_ROOT_FILES: Tuple[str, ...] = (
    "index.html",
    "package.json",
    "vite.config.*",
    "tsconfig*.json",
    "tailwind.config.*",
    "postcss.config.*",
    "components.json",
)
FRONTEND_DIRS: Tuple[str, ...] = ("src/", "public/")

AI_DEFAULTS: Dict[str, Tuple[str, str]] = {
    "ollama": ("http://localhost:11434", "llama3.1"),
    "lmstudio": ("http://localhost:1234", "local-model"),
    "openwebui": ("http://localhost:8080", "local-model"),
    "openai-compatible": ("http://localhost:8000", "local-model"),
    "none": ("", ""),
}

AUTH_SERVICES: Dict[str, Tuple[int, Optional[str]]] = {
    "jwt-standalone": (3001, None),
    "keycloak": (8080, "quay.io/keycloak/keycloak:25.0"),
    "supabase-selfhosted": (9999, "supabase/gotrue:v2.151.0"),
}

STEP_ORDER: Tuple[str, ...] = (
    "frontend-copy",
    "backend-generate",
    "docker-assets",
    "deployment-scripts",
    "database-migrations",
    "auth-service",
    "manifest",
    "readme",
    "env-example",
    "gitignore",
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _to_json(payload: object) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def is_frontend_file(path: str) -> bool:
    """True for source paths that belong in the ``frontend/`` tree."""
    if path.startswith(FRONTEND_DIRS):
        return True
    if "/" in path:
        return False
    return any(fnmatchcase(path, pattern) for pattern in FRONTEND_ROOT_FILES)


class ProjectRebuilder:
    """Renders the frontend, backend, infrastructure and docs of a liberated project."""

    def __init__(
        self,
        config: ProjectConfig,
        clock: Optional[Clock] = None,
        templates_dir: Path | None = None,
    ) -> None:
        config.validate()
        self.config = config
        self.clock = clock or _utc_now
        self.logger = get_logger("rebuilder")
        self.env = self._create_env(templates_dir)
        self.database_name = config.name.replace("-", "_").replace(".", "_")
        default_url, default_model = AI_DEFAULTS[config.ai_provider]
        self.ai_base_url = config.ai_base_url or default_url
        self.ai_model = config.ai_model or default_model
        self.environment = self._environment()
        self.services = self._services()

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def rebuild(self) -> RebuiltProject:
        """Run every enabled step in order and return the generated tree."""
        timestamp = self.clock().isoformat()
        self._files: Dict[str, str] = {}
        self._structure = ProjectStructure()
        self._steps: List[str] = []
        self._readme = ""

        handlers = {
            "frontend-copy": self._frontend_copy,
            "backend-generate": self._backend_generate,
            "docker-assets": self._docker_assets,
            "deployment-scripts": self._deployment_scripts,
            "database-migrations": self._database_migrations,
            "auth-service": self._auth_service,
            "manifest": lambda: self._write_manifest(timestamp),
            "readme": self._write_readme,
            "env-example": self._write_env_example,
            "gitignore": self._write_gitignore,
        }
        for step in STEP_ORDER:
            if not self._enabled(step):
                self.logger.debug("Skipping step %s", step)
                continue
            before = len(self._files)
            handlers[step]()
            self._steps.append(step)
            self.logger.debug("Step %s wrote %d file(s)", step, len(self._files) - before)

        stats = self._stats(timestamp)
        self.logger.info("Rebuilt %s: %d files, %d bytes", self.config.name, stats.total_files, stats.generated_bytes)
        return RebuiltProject(
            files=self._files,
            structure=self._structure,
            manifest=self._manifest,
            readme=self._readme,
            stats=stats,
            steps=list(self._steps),
        )

    def _enabled(self, step: str) -> bool:
        if step == "backend-generate":
            return self.config.has_backend
        if step == "database-migrations":
            return self.config.has_database
        if step == "auth-service":
            return self.config.has_auth
        return True

    def _context(self, **extra: object) -> Dict[str, object]:
        context: Dict[str, object] = {
            "project": self.config,
            "database_name": self.database_name,
            "ai_base_url": self.ai_base_url,
            "ai_model": self.ai_model,
            "env_vars": self.environment.optional,
            "generated_secrets": self.environment.generated,
            "environment": self.environment,
            "services": self.services,
            "site_url": f"https://{self.config.domain}" if self.config.domain else "http://localhost",
        }
        context.update(extra)
        return context

    def _render(self, template: str, **extra: object) -> str:
        return self.env.get_template(template).render(**self._context(**extra))

    def _emit(self, bucket: str, path: str, content: str) -> None:
        if path in self._files:
            raise RebuildError(f"Rebuild step wrote '{path}' twice")
        self._files[path] = content
        getattr(self._structure, bucket).append(path)

    def _frontend_copy(self) -> None:
        frontend: Dict[str, str] = {
            path: content for path, content in self.config.source_files.items() if is_frontend_file(path)
        }
        for path, content in frontend.items():
            self._emit("frontend", f"frontend/{path}", content)

        self._emit("frontend", "frontend/Dockerfile", self._render("frontend/Dockerfile.j2"))
        self._emit("frontend", "frontend/nginx.conf", self._render("frontend/nginx.conf.j2"))
        if "package.json" not in frontend:
            self._emit("frontend", "frontend/package.json", _to_json(self._frontend_package()))
        if not any(path.startswith("vite.config.") for path in frontend):
            self._emit("frontend", "frontend/vite.config.ts", self._render("frontend/vite.config.ts.j2"))
        for polyfill in missing_polyfills(frontend):
            self.logger.debug("Generating polyfill %s", polyfill.alias)
            self._emit("frontend", f"frontend/{polyfill.path}", self._render(polyfill.template))

    def _frontend_package(self) -> Dict[str, object]:
        return {
            "name": self.config.name,
            "private": True,
            "version": self.config.version,
            "type": "module",
            "scripts": {"dev": "vite", "build": "vite build", "preview": "vite preview"},
            "dependencies": {"react": "^18.3.1", "react-dom": "^18.3.1"},
            "devDependencies": {
                "@vitejs/plugin-react-swc": "^3.7.0",
                "typescript": "^5.5.3",
                "vite": "^5.4.1",
            },
        }

    def _backend_generate(self) -> None:
        sources = [
            ("backend/src/index.ts", "backend/index.ts.j2"),
            ("backend/src/routes/index.ts", "backend/routes.ts.j2"),
            ("backend/src/routes/health.ts", "backend/health.ts.j2"),
            ("backend/src/middleware/auth.ts", "backend/auth.ts.j2"),
            ("backend/src/middleware/errorHandler.ts", "backend/errorHandler.ts.j2"),
            ("backend/src/middleware/rateLimiter.ts", "backend/rateLimiter.ts.j2"),
            ("backend/src/utils/logger.ts", "backend/logger.ts.j2"),
        ]
        if self.config.has_ai:
            sources.append(("backend/src/services/ai.ts", "backend/ai.ts.j2"))
        if self.config.has_database:
            sources.append(("backend/src/services/database.ts", "backend/database.ts.j2"))
        for path, template in sources:
            self._emit("backend", path, self._render(template))

        self._emit("backend", "backend/package.json", _to_json(self._backend_package()))
        self._emit("backend", "backend/tsconfig.json", _to_json(_node_tsconfig()))
        self._emit("backend", "backend/Dockerfile", self._render("backend/Dockerfile.j2"))

    def _backend_package(self) -> Dict[str, object]:
        dependencies = {
            "cors": "^2.8.5",
            "express": "^4.19.2",
            "express-rate-limit": "^7.4.0",
            "helmet": "^7.1.0",
            "jsonwebtoken": "^9.0.2",
        }
        dev_dependencies = {
            "@types/cors": "^2.8.17",
            "@types/express": "^4.17.21",
            "@types/jsonwebtoken": "^9.0.6",
            "@types/node": "^20.14.0",
            "tsx": "^4.16.0",
            "typescript": "^5.5.3",
        }
        if self.config.has_database:
            dependencies["pg"] = "^8.12.0"
            dev_dependencies["@types/pg"] = "^8.11.6"
        return {
            "name": f"{self.config.name}-backend",
            "private": True,
            "version": self.config.version,
            "scripts": {"dev": "tsx watch src/index.ts", "build": "tsc", "start": "node dist/index.js"},
            "dependencies": dict(sorted(dependencies.items())),
            "devDependencies": dict(sorted(dev_dependencies.items())),
        }

    def _docker_assets(self) -> None:
        self._emit("docker", "docker/docker-compose.yml", self._render("docker/docker-compose.yml.j2"))
        self._emit("docker", "docker/docker-compose.dev.yml", self._render("docker/docker-compose.dev.yml.j2"))
        self._emit("docker", "docker/caddy/Caddyfile", self._render("docker/Caddyfile.j2"))
        ignore = self._render("docker/dockerignore.j2")
        self._emit("docker", "frontend/.dockerignore", ignore)
        if self.config.has_backend:
            self._emit("docker", "backend/.dockerignore", ignore)

    def _deployment_scripts(self) -> None:
        names = ["quick-deploy.sh", "update.sh", "status.sh"]
        if self.config.has_database:
            names.append("backup.sh")
        if self.config.domain:
            names.append("setup-ssl.sh")
        for name in names:
            self._emit("scripts", f"scripts/{name}", self._render(f"scripts/{name}.j2"))

    def _database_migrations(self) -> None:
        self._emit("database", "database/migrations/001_init.sql", self._render("database/001_init.sql.j2"))
        self._emit("database", "database/migrate.sh", self._render("database/migrate.sh.j2"))

    def _auth_service(self) -> None:
        self._emit("auth", "docker/docker-compose.auth.yml", self._render("docker/docker-compose.auth.yml.j2"))
        if self.config.auth_provider != "jwt-standalone":
            return
        self._emit("auth", "auth/src/index.ts", self._render("auth/index.ts.j2"))
        self._emit("auth", "auth/package.json", _to_json(self._auth_package()))
        self._emit("auth", "auth/tsconfig.json", _to_json(_node_tsconfig()))
        self._emit("auth", "auth/Dockerfile", self._render("auth/Dockerfile.j2"))
        client_path = "frontend/src/lib/auth-client.ts"
        if client_path not in self._files:
            auth_url = f"https://{self.config.domain}/auth" if self.config.domain else "http://localhost:3001"
            self._emit("auth", client_path, self._render("auth/auth-client.ts.j2", auth_url=auth_url))

    def _auth_package(self) -> Dict[str, object]:
        dependencies = {"bcryptjs": "^2.4.3", "cors": "^2.8.5", "express": "^4.19.2", "jsonwebtoken": "^9.0.2"}
        if self.config.has_database:
            dependencies["pg"] = "^8.12.0"
        return {
            "name": f"{self.config.name}-auth",
            "private": True,
            "version": self.config.version,
            "scripts": {"dev": "tsx watch src/index.ts", "build": "tsc", "start": "node dist/index.js"},
            "dependencies": dict(sorted(dependencies.items())),
            "devDependencies": {
                "@types/bcryptjs": "^2.4.6",
                "@types/cors": "^2.8.17",
                "@types/express": "^4.17.21",
                "@types/jsonwebtoken": "^9.0.6",
                "@types/node": "^20.14.0",
                "tsx": "^4.16.0",
                "typescript": "^5.5.3",
            },
        }

    def _environment(self) -> EnvironmentConfig:
        required: List[str] = []
        if self.config.has_backend or self.config.has_auth:
            required.append("JWT_SECRET")
        if self.config.has_database:
            required.append("POSTGRES_PASSWORD")
        if self.config.has_auth and self.config.auth_provider == "keycloak":
            required.append("KEYCLOAK_ADMIN_PASSWORD")
        optional: List[str] = []
        for name in self.config.env_vars:
            if name not in required and name not in optional:
                optional.append(name)
        return EnvironmentConfig(required=required, optional=optional, generated=list(required))

    def _services(self) -> List[ServiceConfig]:
        services = [ServiceConfig("frontend", "frontend", 80, dockerfile="frontend/Dockerfile", health_check="/health")]
        if self.config.has_backend:
            services.append(
                ServiceConfig("backend", "api", 3000, dockerfile="backend/Dockerfile", health_check="/health")
            )
        if self.config.has_database:
            services.append(
                ServiceConfig("postgres", "database", 5432, image="postgres:16-alpine", health_check="pg_isready")
            )
        if self.config.has_auth:
            port, image = AUTH_SERVICES[self.config.auth_provider]
            if image:
                services.append(ServiceConfig("auth", "auth", port, image=image))
            else:
                services.append(
                    ServiceConfig("auth", "auth", port, dockerfile="auth/Dockerfile", health_check="/health")
                )
        if self.config.ai_provider == "ollama":
            services.append(ServiceConfig("ollama", "ai", 11434, image="ollama/ollama:latest"))
        services.append(ServiceConfig("caddy", "proxy", 443, image="caddy:2-alpine"))
        return services

    def _write_manifest(self, timestamp: str) -> None:
        config = self.config
        self._manifest = PackManifest(
            version=config.version,
            name=config.name,
            created=timestamp,
            liberated_from=LIBERATED_FROM,
            architecture={
                "frontend": True,
                "backend": config.has_backend,
                "database": config.has_database,
                "auth": config.has_auth,
                "storage": config.has_storage,
                "realtime": config.has_realtime,
                "ai": config.has_ai,
            },
            services=list(self.services),
            deployment=DeploymentConfig(
                target=config.deployment_target,
                domain=config.domain or "localhost",
                ssl=bool(config.domain),
            ),
            environment=self.environment,
        )
        self._emit("config", MANIFEST_PATH, _to_json(self._manifest.to_dict()))

    def _write_readme(self) -> None:
        self._readme = self._render("project/README.md.j2")
        self._emit("config", "README.md", self._readme)

    def _write_env_example(self) -> None:
        self._emit("config", ".env.example", self._render("project/env.example.j2"))

    def _write_gitignore(self) -> None:
        self._emit("config", ".gitignore", self._render("project/gitignore.j2"))

    def _stats(self, timestamp: str) -> RebuildStats:
        structure = self._structure
        return RebuildStats(
            total_files=len(self._files),
            frontend_files=len(structure.frontend),
            backend_files=len(structure.backend),
            docker_files=len(structure.docker),
            script_files=len(structure.scripts),
            database_files=len(structure.database),
            auth_files=len(structure.auth),
            generated_bytes=sum(len(content.encode("utf-8")) for content in self._files.values()),
            timestamp=timestamp,
        )


def _node_tsconfig() -> Dict[str, object]:
    return {
        "compilerOptions": {
            "target": "ES2022",
            "module": "commonjs",
            "outDir": "dist",
            "rootDir": "src",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
        },
        "include": ["src"],
    }


def rebuild_project(
    source_files: Mapping[str, str],
    *,
    clock: Optional[Clock] = None,
    templates_dir: Path | None = None,
    **options: object,
) -> RebuiltProject:
    """Build a :class:`ProjectConfig` from keyword options and rebuild ``source_files``."""
    options.setdefault("name", "liberated-app")
    config = ProjectConfig(source_files=dict(source_files), **options)  # type: ignore[arg-type]
    return ProjectRebuilder(config, clock=clock, templates_dir=templates_dir).rebuild()


__all__ = [
    "FRONTEND_ROOT_FILES",
    "LIBERATED_FROM",
    "MANIFEST_PATH",
    "ProjectRebuilder",
    "STEP_ORDER",
    "is_frontend_file",
    "rebuild_project",
]
