"""Static namespace scan of compiled classes in a jar/war.

Class files keep referenced type names as internal-form UTF-8 strings in
the constant pool (``javax/servlet/http/HttpServlet``), so a byte search
over each ``.class`` entry is enough to tell which namespaces it touches.
Nested archives (``BOOT-INF/lib/*.jar``, ``WEB-INF/lib/*.jar``) are not
opened.
"""

import logging
import time
import zipfile
from datetime import timedelta
from pathlib import Path
from typing import List, Tuple

from ..exceptions import InputNotFoundError, ParseFailureError
from ..mapping.table import MappingTable
from .models import BytecodeAnalysisResult

logger = logging.getLogger(__name__)

_JAKARTA_MARKER = b"jakarta/"


def _class_name(entry_name: str) -> str:
    name = entry_name[:-len(".class")]
    for prefix in ("BOOT-INF/classes/", "WEB-INF/classes/"):
        if name.startswith(prefix):
            name = name[len(prefix):]
            break
    return name.replace("/", ".")


class BytecodeScanner:
    """Finds classes referencing migrated javax packages and/or jakarta packages."""

    def __init__(self, mapping_table: MappingTable):
        self._javax_markers: Tuple[bytes, ...] = tuple(
            package.replace(".", "/").encode("ascii") for package in mapping_table.packages
        )

    def analyze_jar(self, jar_path: Path) -> BytecodeAnalysisResult:
        """Scan every top-level .class entry of ``jar_path``.

        Raises:
            InputNotFoundError: ``jar_path`` does not exist
            ParseFailureError: ``jar_path`` is not a readable zip archive
        """
        jar_path = Path(jar_path)
        if not jar_path.is_file():
            raise InputNotFoundError(f"Archive does not exist: {jar_path}")

        start = time.monotonic()
        javax_classes: List[str] = []
        jakarta_classes: List[str] = []
        mixed: List[str] = []
        analyzed = 0
        try:
            with zipfile.ZipFile(jar_path) as archive:
                for info in archive.infolist():
                    if info.is_dir() or not info.filename.endswith(".class"):
                        continue
                    if info.filename.endswith("module-info.class"):
                        continue
                    data = archive.read(info)
                    analyzed += 1
                    name = _class_name(info.filename)
                    uses_javax = any(marker in data for marker in self._javax_markers)
                    uses_jakarta = _JAKARTA_MARKER in data
                    if uses_javax:
                        javax_classes.append(name)
                    if uses_jakarta:
                        jakarta_classes.append(name)
                    if uses_javax and uses_jakarta:
                        mixed.append(name)
        except (zipfile.BadZipFile, OSError) as e:
            raise ParseFailureError(f"Failed to read archive {jar_path}: {e}") from e

        result = BytecodeAnalysisResult(
            javax_classes=tuple(sorted(javax_classes)),
            jakarta_classes=tuple(sorted(jakarta_classes)),
            mixed_namespace_classes=tuple(sorted(mixed)),
            classes_analyzed=analyzed,
            duration=timedelta(seconds=time.monotonic() - start),
        )
        logger.info(
            f"Bytecode scan of {jar_path.name}: {analyzed} classes, {len(javax_classes)} javax, "
            f"{len(jakarta_classes)} jakarta, {len(mixed)} mixed"
        )
        return result
