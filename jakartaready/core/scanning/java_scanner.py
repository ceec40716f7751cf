"""javax usage scanner for Java sources and Java EE XML descriptors.

Java files are parsed with tree-sitter and only their top-level import
declarations are inspected. An import counts as javax usage when its
package is one the mapping table lists as moved to ``jakarta.*``;
``javax.crypto``, ``javax.swing`` and the other JDK packages are ignored.
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple

import tree_sitter
import tree_sitter_java

from ..constants import LEGACY_XML_NAMESPACES
from ..exceptions import InputNotFoundError
from ..mapping.table import MappingTable
from .discovery import collect_files, is_java_file, is_xml_file
from .models import (
    FileUsage,
    ImportStatement,
    SourceScanResult,
    XmlClassReference,
    XmlFileUsage,
    XmlNamespaceUsage,
)

logger = logging.getLogger(__name__)

_JAVA_LANGUAGE = tree_sitter.Language(tree_sitter_java.language())

_LEGACY_URI_PATTERN = re.compile(r"http://(?:java\.sun\.com|xmlns\.jcp\.org)/xml/ns/[^\s\"'<>]*")
_QUALIFIED_NAME = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)+$")

# Longest namespace first so persistence/orm wins over persistence
_LEGACY_NAMESPACE_KEYS = sorted(LEGACY_XML_NAMESPACES, key=len, reverse=True)
_DEFAULT_JAKARTA_NAMESPACE = "https://jakarta.ee/xml/ns/jakartaee"


class SourceScanner:
    """Finds migratable javax imports and legacy descriptor namespaces."""

    def __init__(self, mapping_table: MappingTable):
        self._table = mapping_table
        self._parser = tree_sitter.Parser(_JAVA_LANGUAGE)

    # =========================================================================
    # Java sources
    # =========================================================================

    def scan_project(self, project_root: Path) -> SourceScanResult:
        """Scan every .java file under ``project_root``.

        Unreadable files are logged and skipped.
        """
        project_root = Path(project_root)
        if not project_root.is_dir():
            raise InputNotFoundError(f"Project root does not exist: {project_root}")

        usages: List[FileUsage] = []
        scanned = 0
        for path in collect_files(project_root, is_java_file):
            try:
                usage = self.scan_file(path)
            except OSError as e:
                logger.warning(f"Skipping unreadable source file {path}: {e}")
                continue
            scanned += 1
            if usage.has_javax_usage:
                usages.append(usage)

        result = SourceScanResult(
            file_usages=tuple(usages),
            total_files_scanned=scanned,
            files_with_javax_usage=len(usages),
            total_javax_imports=sum(u.javax_import_count for u in usages),
            mixed_namespace_files=tuple(u.file_path for u in usages if u.is_mixed),
        )
        logger.info(
            f"Scanned {scanned} Java files under {project_root}: "
            f"{result.files_with_javax_usage} with javax usage, {result.total_javax_imports} imports"
        )
        return result

    def scan_file(self, file_path: Path) -> FileUsage:
        file_path = Path(file_path)
        if not file_path.is_file():
            raise InputNotFoundError(f"Source file does not exist: {file_path}")
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            source_text = f.read()
        return self.scan_source(source_text, file_path)

    def scan_source(self, source_text: str, file_path: Path) -> FileUsage:
        source = source_text.encode("utf-8")
        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            logger.debug(f"tree-sitter reported parse errors in {file_path}")

        javax_imports: List[ImportStatement] = []
        jakarta_count = 0
        for child in tree.root_node.children:
            if child.type != "import_declaration":
                continue
            text = source[child.start_byte:child.end_byte].decode("utf-8", errors="replace")
            name, is_static = _import_name(text)
            if name.startswith("jakarta."):
                jakarta_count += 1
                continue

            jakarta_name = self._table.jakarta_name_for(name)
            if jakarta_name is None:
                continue
            javax_imports.append(ImportStatement(
                full_import=name,
                javax_package=_package_of(name, is_static),
                jakarta_equivalent=jakarta_name,
                line_number=child.start_point.row + 1,
                is_static=is_static,
            ))

        line_count = source_text.count("\n") + (1 if source_text and not source_text.endswith("\n") else 0)
        return FileUsage(
            file_path=Path(file_path),
            javax_imports=tuple(javax_imports),
            jakarta_import_count=jakarta_count,
            line_count=line_count,
        )

    # =========================================================================
    # XML descriptors
    # =========================================================================

    def scan_xml_files(self, project_root: Path) -> List[XmlFileUsage]:
        """Descriptors under ``project_root`` that still use javax namespaces or classes."""
        usages = []
        for path in collect_files(Path(project_root), is_xml_file):
            try:
                usage = self.scan_xml_file(path)
            except OSError as e:
                logger.warning(f"Skipping unreadable XML file {path}: {e}")
                continue
            if usage.has_javax_usage:
                usages.append(usage)
        return usages

    def scan_xml_file(self, file_path: Path) -> XmlFileUsage:
        file_path = Path(file_path)
        if not file_path.is_file():
            raise InputNotFoundError(f"XML file does not exist: {file_path}")
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
        lines = content.splitlines()

        return XmlFileUsage(
            file_path=file_path,
            namespace_usages=tuple(self._namespace_usages(lines)),
            class_references=tuple(self._class_references(content, lines, file_path)),
        )

    @staticmethod
    def _namespace_usages(lines: List[str]) -> List[XmlNamespaceUsage]:
        found = []
        seen = set()
        for line_number, line in enumerate(lines, start=1):
            for match in _LEGACY_URI_PATTERN.finditer(line):
                uri = match.group(0)
                if (uri, line_number) in seen:
                    continue
                seen.add((uri, line_number))
                found.append(XmlNamespaceUsage(
                    namespace_uri=uri,
                    jakarta_equivalent=jakarta_namespace_for(uri),
                    line_number=line_number,
                ))
        return found

    def _class_references(self, content: str, lines: List[str], file_path: Path) -> List[XmlClassReference]:
        try:
            root = ET.fromstring(content.encode("utf-8"))
        except ET.ParseError as e:
            logger.warning(f"Could not parse {file_path} for class references: {e}")
            return []

        refs = []
        for elem in root.iter():
            element_name = elem.tag.split("}", 1)[-1] if isinstance(elem.tag, str) else ""
            candidates = [(elem.text or "").strip()]
            candidates.extend(value.strip() for value in elem.attrib.values())
            for value in candidates:
                if not value or not _QUALIFIED_NAME.match(value):
                    continue
                jakarta_name = self._table.jakarta_name_for(value)
                if jakarta_name is None:
                    continue
                refs.append(XmlClassReference(
                    class_name=value,
                    jakarta_equivalent=jakarta_name,
                    element_name=element_name,
                    line_number=_line_of(lines, value),
                ))
        return refs


# =============================================================================
# Helpers
# =============================================================================


def jakarta_namespace_for(uri: str) -> str:
    """Jakarta EE namespace for a legacy ``java.sun.com`` / ``xmlns.jcp.org`` URI."""
    for legacy in _LEGACY_NAMESPACE_KEYS:
        if uri.startswith(legacy):
            return LEGACY_XML_NAMESPACES[legacy]
    return _DEFAULT_JAKARTA_NAMESPACE


def _import_name(declaration: str) -> Tuple[str, bool]:
    """'import static javax.ws.rs.core.MediaType.APPLICATION_JSON;' -> (name, True)."""
    body = declaration.strip()
    if body.startswith("import"):
        body = body[len("import"):]
    body = body.strip().rstrip(";").strip()
    is_static = False
    if body.startswith("static") and not body.startswith("static."):
        is_static = True
        body = body[len("static"):]
    return "".join(body.split()), is_static


def _package_of(name: str, is_static: bool) -> str:
    """'javax.servlet.ServletException' -> 'javax.servlet'."""
    if name.endswith(".*"):
        name = name[:-2]
        # import static javax.foo.Bar.*; names a class, not a package
        return name.rsplit(".", 1)[0] if is_static else name
    parts = name.rsplit(".", 2 if is_static else 1)
    return parts[0]


def _line_of(lines: List[str], needle: str) -> int:
    for line_number, line in enumerate(lines, start=1):
        if needle in line:
            return line_number
    return 1
