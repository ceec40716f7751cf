"""Data contracts for source and descriptor scanning."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ImportStatement:
    """A javax import whose package moved to jakarta.*."""
    full_import: str
    javax_package: str
    jakarta_equivalent: str
    line_number: int
    is_static: bool = False

    def __post_init__(self):
        if self.line_number < 1:
            raise ValueError("line_number must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fullImport": self.full_import,
            "javaxPackage": self.javax_package,
            "jakartaEquivalent": self.jakarta_equivalent,
            "lineNumber": self.line_number,
        }


@dataclass(frozen=True)
class FileUsage:
    """javax usage in one Java source file."""
    file_path: Path
    javax_imports: Tuple[ImportStatement, ...] = ()
    jakarta_import_count: int = 0
    line_count: int = 0

    @property
    def has_javax_usage(self) -> bool:
        return bool(self.javax_imports)

    @property
    def javax_import_count(self) -> int:
        return len(self.javax_imports)

    @property
    def is_mixed(self) -> bool:
        """Both migratable javax imports and jakarta imports in the same file."""
        return self.has_javax_usage and self.jakarta_import_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": str(self.file_path),
            "javaxImports": [imp.to_dict() for imp in self.javax_imports],
            "jakartaImportCount": self.jakarta_import_count,
            "lineCount": self.line_count,
        }


@dataclass(frozen=True)
class SourceScanResult:
    """Project-wide javax usage summary."""
    file_usages: Tuple[FileUsage, ...] = ()
    total_files_scanned: int = 0
    files_with_javax_usage: int = 0
    total_javax_imports: int = 0
    mixed_namespace_files: Tuple[Path, ...] = ()

    @property
    def has_javax_usage(self) -> bool:
        return bool(self.file_usages)

    @classmethod
    def empty(cls) -> "SourceScanResult":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filesWithJavaxUsage": [usage.to_dict() for usage in self.file_usages],
            "totalFilesScanned": self.total_files_scanned,
            "totalFilesWithJavaxUsage": self.files_with_javax_usage,
            "totalJavaxImports": self.total_javax_imports,
            "mixedNamespaceFiles": [str(p) for p in self.mixed_namespace_files],
        }


@dataclass(frozen=True)
class XmlNamespaceUsage:
    namespace_uri: str
    jakarta_equivalent: str
    line_number: int


@dataclass(frozen=True)
class XmlClassReference:
    class_name: str
    jakarta_equivalent: str
    element_name: str
    line_number: int


@dataclass(frozen=True)
class XmlFileUsage:
    """Legacy Java EE namespaces and javax class names in one XML descriptor."""
    file_path: Path
    namespace_usages: Tuple[XmlNamespaceUsage, ...] = ()
    class_references: Tuple[XmlClassReference, ...] = ()

    @property
    def has_javax_usage(self) -> bool:
        return bool(self.namespace_usages or self.class_references)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": str(self.file_path),
            "namespaceUsages": [
                {"namespaceUri": u.namespace_uri, "jakartaEquivalent": u.jakarta_equivalent, "lineNumber": u.line_number}
                for u in self.namespace_usages
            ],
            "classReferences": [
                {
                    "className": r.class_name,
                    "jakartaEquivalent": r.jakarta_equivalent,
                    "elementName": r.element_name,
                    "lineNumber": r.line_number,
                }
                for r in self.class_references
            ],
        }
