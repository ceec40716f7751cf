"""Project file discovery shared by the scanner and the planner."""

import os
from pathlib import Path
from typing import Callable, List

from ..constants import SKIP_DIRECTORIES


def should_skip_directory(name: str) -> bool:
    """Build output, VCS and IDE directories are never walked."""
    return name in SKIP_DIRECTORIES or name.startswith(".")


def collect_files(root: Path, predicate: Callable[[str], bool]) -> List[Path]:
    """Walk ``root`` and return files whose name satisfies ``predicate``, sorted."""
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not should_skip_directory(d)]
        for fname in filenames:
            if predicate(fname):
                files.append(Path(dirpath) / fname)
    return sorted(files)


def is_java_file(name: str) -> bool:
    return name.endswith(".java")


def is_xml_file(name: str) -> bool:
    return name.endswith(".xml") and name != "pom.xml"
