from .app.main import validate, export_sbom, rate_limit, clear

__all__ = [
    "validate",
    "export_sbom",
    "rate_limit",
    "clear",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
