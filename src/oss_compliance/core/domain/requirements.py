from __future__ import annotations

from .models import Requirement

DEPENDENCY_ANALYSIS = "dependency-analysis"
SECURITY_FEATURES_CHECK = "security-features-check"
OWNERSHIP_PROPERTY_CHECK = "ownership-property-check"
INTERNAL_REFERENCES_CHECK = "internal-references-check"
TELEMETRY_CHECK = "telemetry-check"

DEFAULT_REQUIREMENTS: tuple[Requirement, ...] = (
    Requirement("README.md", True, "README file"),
    Requirement("LICENSE", True, "License file"),
    Requirement("LICENSE.txt", False, "License text file"),
    Requirement("CONTRIBUTING.md", True, "Contributing guidelines"),
    Requirement("SECURITY.md", True, "Security policy"),
    Requirement("SUPPORT.md", False, "Support documentation"),
    Requirement("CODE_OF_CONDUCT.md", False, "Code of conduct"),
    Requirement(".gitignore", False, "Git ignore file"),
    Requirement("package.json", False, "Node.js package manifest"),
    Requirement("package-lock.json", False, "Node.js dependency lockfile"),
    Requirement(".eslintrc.json", False, "ESLint configuration"),
    Requirement("tsconfig.json", False, "TypeScript configuration"),
    Requirement("requirements.txt", False, "Python requirements"),
    Requirement("setup.py", False, "Python setup script"),
)

# Filled in by the deferred probes.
DEFERRED_CHECKS: tuple[Requirement, ...] = (
    Requirement(SECURITY_FEATURES_CHECK, False, "Security features", kind="check"),
    Requirement(OWNERSHIP_PROPERTY_CHECK, False, "Ownership property", kind="check"),
    Requirement(INTERNAL_REFERENCES_CHECK, False, "Internal references scan", kind="check"),
    Requirement(TELEMETRY_CHECK, False, "Telemetry scan", kind="check"),
)
