"""Migration planner.

Orders the files of a project into refactoring phases:

    1. build files        -> dependency coordinates move to jakarta artifacts
    2. XML descriptors    -> deployment descriptor namespaces
    3..N Java sources     -> javax imports, grouped by module and batched

Phase indices are contiguous from 1 and each phase depends on the one
before it.
"""

import logging
from collections import OrderedDict
from datetime import timedelta
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple

from ..analysis.models import DependencyAnalysisReport
from ..constants import (
    BUILD_FILE_CANDIDATES,
    DEFAULT_BATCH_SIZE,
    DEFAULT_MINUTES_PER_FILE,
    LEGACY_XML_NAMESPACES,
    MINUTES_PER_RECIPE,
    XML_DESCRIPTOR_NAMES,
)
from ..exceptions import InputNotFoundError
from ..scanning.discovery import collect_files
from ..scanning.java_scanner import SourceScanner
from .models import ActionType, MigrationPlan, PhaseAction, RefactoringPhase
from .recipes import (
    ADD_JAKARTA_NAMESPACE,
    UPDATE_GRADLE_DEPENDENCIES,
    UPDATE_MAVEN_COORDINATES,
    UPDATE_PERSISTENCE_XML,
    UPDATE_WEB_XML,
    UPDATE_XML_NAMESPACES,
    RecipeLibrary,
)

logger = logging.getLogger(__name__)

_PERSISTENCE_DESCRIPTORS = frozenset({"persistence.xml", "orm.xml"})
_WEB_DESCRIPTORS = frozenset({"web.xml", "web-fragment.xml"})

_GENERIC_IMPORT_CHANGE = "Replace all javax.* imports with jakarta.* equivalents"


def _is_relevant(name: str) -> bool:
    return name in BUILD_FILE_CANDIDATES or name in XML_DESCRIPTOR_NAMES or name.endswith(".java")


class MigrationPlanner:
    """Builds a phased MigrationPlan from a project tree and its analysis report."""

    def __init__(
        self,
        recipe_library: RecipeLibrary,
        scanner: Optional[SourceScanner] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        minutes_per_file: int = DEFAULT_MINUTES_PER_FILE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if minutes_per_file < 0:
            raise ValueError(f"minutes_per_file cannot be negative, got {minutes_per_file}")
        self._recipes = recipe_library
        self._scanner = scanner
        self._batch_size = batch_size
        self._minutes_per_file = minutes_per_file

    def create_plan(self, project_path: Path, report: DependencyAnalysisReport) -> MigrationPlan:
        """Plan the migration of the project at ``project_path``.

        Raises:
            InputNotFoundError: ``project_path`` is not a directory
            ValueError: a phase names a recipe missing from the library, or a
                recipe that needs jakarta coordinates precedes the coordinate update
        """
        root = Path(project_path)
        if not root.is_dir():
            raise InputNotFoundError(f"Project root does not exist: {root}")

        build_files, xml_files, java_files = self.discover_files(root)
        xml_files = self._xml_targets(root, xml_files)

        phases: List[RefactoringPhase] = []
        if build_files:
            phases.append(self._build_phase(len(phases) + 1, build_files, report))
        if xml_files:
            phases.append(self._xml_phase(len(phases) + 1, xml_files))

        java_actions = self._java_actions(root, java_files)
        for module, batch_number, batch in self._java_batches(java_actions, build_files):
            label = f"module '{module}'" if module else "root module"
            phases.append(self._phase(
                index=len(phases) + 1,
                description=f"Refactor Java files in {label} (batch {batch_number})",
                actions=batch,
                recipe_names=(ADD_JAKARTA_NAMESPACE.name,),
            ))

        self._validate_order(phases)

        all_files = tuple(build_files + xml_files + [a.file_path for a in java_actions])
        recipes_applied = tuple(OrderedDict.fromkeys(name for p in phases for name in p.recipe_names))
        total = sum((p.duration for p in phases), timedelta())

        plan = MigrationPlan(
            phases=tuple(phases),
            all_files=all_files,
            total_duration=total,
            risk=report.risk,
            recipes_applied=recipes_applied,
            prerequisites=tuple(self.prerequisites(report)),
        )
        logger.info(
            f"Created migration plan for {root}: {plan.phase_count} phases, "
            f"{len(all_files)} files, estimated {total}"
        )
        return plan

    # ── Discovery ───────────────────────────────────────────────────────

    def discover_files(self, root: Path) -> Tuple[List[str], List[str], List[str]]:
        """Relative POSIX paths of build files, XML descriptors and Java sources."""
        build_files: List[str] = []
        xml_files: List[str] = []
        java_files: List[str] = []
        for path in collect_files(root, _is_relevant):
            relative = path.relative_to(root).as_posix()
            if path.name in BUILD_FILE_CANDIDATES:
                build_files.append(relative)
            elif path.name in XML_DESCRIPTOR_NAMES:
                xml_files.append(relative)
            else:
                java_files.append(relative)
        return sorted(build_files), sorted(xml_files), sorted(java_files)

    # ── Phases ──────────────────────────────────────────────────────────

    def _phase(
        self,
        index: int,
        description: str,
        actions: Sequence[PhaseAction],
        recipe_names: Tuple[str, ...],
    ) -> RefactoringPhase:
        for name in recipe_names:
            if not self._recipes.has(name):
                raise ValueError(f"Recipe not registered: {name}")
        files = tuple(a.file_path for a in actions)
        minutes = len(files) * self._minutes_per_file + len(recipe_names) * MINUTES_PER_RECIPE
        return RefactoringPhase(
            index=index,
            description=description,
            target_files=files,
            recipe_names=recipe_names,
            duration=timedelta(minutes=minutes),
            actions=tuple(actions),
            depends_on=(index - 1,) if index > 1 else (),
        )

    def _build_phase(self, index: int, build_files: List[str], report: DependencyAnalysisReport) -> RefactoringPhase:
        swaps = tuple(
            f"Replace {r.current.coordinate} with {r.recommended.coordinate}"
            for r in report.recommendations
        )
        actions = []
        for file_path in build_files:
            if "/" not in file_path:
                changes = swaps or ("No javax dependency coordinates to update",)
            else:
                changes = ("Update javax.* dependency coordinates to jakarta.*",)
            actions.append(PhaseAction(file_path, ActionType.UPDATE_DEPENDENCY, changes))

        recipes = []
        if any(PurePosixPath(f).name == "pom.xml" for f in build_files):
            recipes.append(UPDATE_MAVEN_COORDINATES.name)
        if any(PurePosixPath(f).name.startswith("build.gradle") for f in build_files):
            recipes.append(UPDATE_GRADLE_DEPENDENCIES.name)

        return self._phase(index, "Update build files and dependencies", actions, tuple(recipes))

    def _xml_phase(self, index: int, xml_files: List[str]) -> RefactoringPhase:
        actions = []
        recipes = []
        for file_path in xml_files:
            name = PurePosixPath(file_path).name
            if name in _PERSISTENCE_DESCRIPTORS:
                recipe = UPDATE_PERSISTENCE_XML.name
                change = (
                    "Update namespace from http://java.sun.com/xml/ns/persistence "
                    f"to {LEGACY_XML_NAMESPACES['http://java.sun.com/xml/ns/persistence']}"
                )
            elif name in _WEB_DESCRIPTORS:
                recipe = UPDATE_WEB_XML.name
                change = (
                    "Update namespace from http://java.sun.com/xml/ns/javaee "
                    f"to {LEGACY_XML_NAMESPACES['http://java.sun.com/xml/ns/javaee']}"
                )
            else:
                recipe = UPDATE_XML_NAMESPACES.name
                change = "Update Java EE namespaces to Jakarta EE namespaces"
            if recipe not in recipes:
                recipes.append(recipe)
            actions.append(PhaseAction(file_path, ActionType.UPDATE_XML_NAMESPACE, (change,)))

        return self._phase(index, "Update XML configuration files", actions, tuple(recipes))

    def _xml_targets(self, root: Path, xml_files: List[str]) -> List[str]:
        """Descriptors that still reference javax; all of them when no scanner is set."""
        if self._scanner is None:
            return xml_files

        targets = []
        for file_path in xml_files:
            try:
                usage = self._scanner.scan_xml_file(root / file_path)
            except OSError as e:
                logger.warning(f"Could not scan {file_path}, keeping it in the XML phase: {e}")
                targets.append(file_path)
                continue
            if usage.has_javax_usage:
                targets.append(file_path)
        return targets

    def _java_actions(self, root: Path, java_files: List[str]) -> List[PhaseAction]:
        """One UPDATE_IMPORTS action per Java file that needs rewriting."""
        if self._scanner is None:
            return [PhaseAction(f, ActionType.UPDATE_IMPORTS, (_GENERIC_IMPORT_CHANGE,)) for f in java_files]

        actions = []
        for file_path in java_files:
            try:
                usage = self._scanner.scan_file(root / file_path)
            except OSError as e:
                logger.warning(f"Could not scan {file_path}, planning a generic rewrite: {e}")
                actions.append(PhaseAction(file_path, ActionType.UPDATE_IMPORTS, (_GENERIC_IMPORT_CHANGE,)))
                continue
            if not usage.has_javax_usage:
                continue
            changes = tuple(
                f"Line {imp.line_number}: Replace '{imp.full_import}' with '{imp.jakarta_equivalent}'"
                for imp in usage.javax_imports
            )
            actions.append(PhaseAction(file_path, ActionType.UPDATE_IMPORTS, changes))
        return actions

    def _java_batches(self, actions: List[PhaseAction], build_files: List[str]) -> List[Tuple[str, int, List[PhaseAction]]]:
        """Group actions by module, then split each module into batches."""
        module_dirs = sorted(
            {str(PurePosixPath(f).parent) for f in build_files} - {"."},
            key=len,
            reverse=True,
        )

        modules: Dict[str, List[PhaseAction]] = OrderedDict()
        for action in actions:
            modules.setdefault(_module_of(action.file_path, module_dirs), []).append(action)

        batches = []
        for module in sorted(modules):
            members = modules[module]
            for number, start in enumerate(range(0, len(members), self._batch_size), start=1):
                batches.append((module, number, members[start:start + self._batch_size]))
        return batches

    def _validate_order(self, phases: Sequence[RefactoringPhase]) -> None:
        coordinate_phase = None
        for phase in phases:
            if any(self._recipes.get(n).updates_coordinates for n in phase.recipe_names):
                coordinate_phase = phase.index
                break

        for phase in phases:
            needs_coordinates = [n for n in phase.recipe_names if self._recipes.get(n).requires_coordinate_update]
            if not needs_coordinates:
                continue
            if coordinate_phase is None:
                logger.warning(
                    f"Phase {phase.index} applies {', '.join(needs_coordinates)} "
                    "but no build file was found to update coordinates"
                )
            elif phase.index < coordinate_phase:
                raise ValueError(
                    f"Phase {phase.index} applies {', '.join(needs_coordinates)} "
                    f"before the coordinate update in phase {coordinate_phase}"
                )

    # ── Prerequisites ───────────────────────────────────────────────────

    @staticmethod
    def prerequisites(report: DependencyAnalysisReport) -> List[str]:
        prerequisites = []
        if report.blockers:
            prerequisites.append(f"Resolve {len(report.blockers)} dependency blockers")
        if report.readiness.score < 0.5:
            prerequisites.append("Improve migration readiness score")
        return prerequisites


def _module_of(file_path: str, module_dirs: Sequence[str]) -> str:
    """Nearest enclosing directory with its own build file; '' for the root module."""
    for module in module_dirs:
        if file_path.startswith(module + "/"):
            return module
    return ""
