"""Detect, clean and rebuild projects scaffolded on hosted low-code platforms."""

from .orchestrator import LiberationOptions, LiberationResult, Orchestrator, audit_project, scan_project

__version__ = "0.1.0"

__all__ = [
    "LiberationOptions",
    "LiberationResult",
    "Orchestrator",
    "__version__",
    "audit_project",
    "scan_project",
]
