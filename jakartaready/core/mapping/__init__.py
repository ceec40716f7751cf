"""javax -> jakarta mapping table and namespace classification."""

from .classifier import NamespaceClassifier
from .models import CompatibilityLevel, FrameworkRule, JakartaEquivalent, Namespace
from .table import (
    MappingDocument,
    MappingTable,
    load_bundled_mapping_table,
    load_mapping_table,
    major_version,
    version_sort_key,
)

__all__ = [
    "NamespaceClassifier",
    "CompatibilityLevel",
    "FrameworkRule",
    "JakartaEquivalent",
    "Namespace",
    "MappingDocument",
    "MappingTable",
    "load_bundled_mapping_table",
    "load_mapping_table",
    "major_version",
    "version_sort_key",
]
