"""jakartaready: javax -> jakarta migration analysis, planning and verification."""

from .core.service import MigrationService

__version__ = "0.1.0"

__all__ = ["MigrationService", "__version__"]
