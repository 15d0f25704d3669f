from __future__ import annotations

from .json_extractor import JsonExtractor
from .rate_limits import RateLimitTracker
from .presence_checker import FilePresenceChecker
from .license_analyzer import LicenseAnalyzer
from .sbom_analyzer import SbomAnalyzer, ManifestAnalyzer
from .rating import DescriptionRater, InternalReferenceScanner
from .probes import RepositoryProbes
from .summary_store import SummaryStore
from .validation_orchestrator import ValidationOrchestrator, RunContext

__all__ = [
    "JsonExtractor",
    "RateLimitTracker",
    "FilePresenceChecker",
    "LicenseAnalyzer",
    "SbomAnalyzer",
    "ManifestAnalyzer",
    "DescriptionRater",
    "InternalReferenceScanner",
    "RepositoryProbes",
    "SummaryStore",
    "ValidationOrchestrator",
    "RunContext",
]
