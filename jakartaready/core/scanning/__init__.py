"""Source and XML descriptor scanning for javax usage."""

from .discovery import collect_files, should_skip_directory
from .java_scanner import SourceScanner, jakarta_namespace_for
from .models import (
    FileUsage,
    ImportStatement,
    SourceScanResult,
    XmlClassReference,
    XmlFileUsage,
    XmlNamespaceUsage,
)

__all__ = [
    "collect_files",
    "should_skip_directory",
    "SourceScanner",
    "jakarta_namespace_for",
    "FileUsage",
    "ImportStatement",
    "SourceScanResult",
    "XmlClassReference",
    "XmlFileUsage",
    "XmlNamespaceUsage",
]
