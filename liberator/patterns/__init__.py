"""Pattern catalogs used by the scanning, cleaning and refactoring passes."""

from .base import PatternCatalog, locate, redact, rule
from .cleaning import (
    CLEANING_RULES,
    PROPRIETARY_FILES,
    SECRET_RULES,
    SECRET_TYPES,
    SUSPICIOUS_PACKAGES,
    TELEMETRY_DOMAINS,
    default_cleaning_catalog,
    is_proprietary_file,
    is_suspicious_package,
)
from .refactor import REFACTOR_RULES, default_refactor_catalog

__all__ = [
    "CLEANING_RULES",
    "PROPRIETARY_FILES",
    "PatternCatalog",
    "REFACTOR_RULES",
    "SECRET_RULES",
    "SECRET_TYPES",
    "SUSPICIOUS_PACKAGES",
    "TELEMETRY_DOMAINS",
    "default_cleaning_catalog",
    "default_refactor_catalog",
    "is_proprietary_file",
    "is_suspicious_package",
    "locate",
    "redact",
    "rule",
]
