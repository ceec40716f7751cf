"""Data contracts for migration planning.

Durations are ``datetime.timedelta``; ``to_dict`` renders them as
seconds.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Tuple

from ..analysis.models import RiskAssessment


class ActionType(str, Enum):
    """Kind of edit a phase performs on one file."""
    UPDATE_DEPENDENCY = "UPDATE_DEPENDENCY"
    UPDATE_XML_NAMESPACE = "UPDATE_XML_NAMESPACE"
    UPDATE_IMPORTS = "UPDATE_IMPORTS"


class RecipeCategory(str, Enum):
    BUILD = "build"
    XML = "xml"
    JAVA = "java"


class MigrationComplexity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class Recipe:
    """A named, deterministic rewrite applied by an external refactoring tool."""

    name: str
    """Recipe identifier, e.g. ``"AddJakartaNamespace"``."""

    description: str
    category: RecipeCategory

    updates_coordinates: bool = False
    """Rewrites build-file dependency coordinates."""

    requires_coordinate_update: bool = False
    """Only safe once dependency coordinates point at jakarta artifacts."""


@dataclass(frozen=True)
class PhaseAction:
    """Concrete edits planned for one file."""
    file_path: str
    action_type: ActionType
    changes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "actionType": self.action_type.value,
            "changes": list(self.changes),
        }


@dataclass(frozen=True)
class RefactoringPhase:
    """One ordered step of a migration plan."""
    index: int
    description: str
    target_files: Tuple[str, ...]
    recipe_names: Tuple[str, ...]
    duration: timedelta
    actions: Tuple[PhaseAction, ...] = ()
    depends_on: Tuple[int, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phaseNumber": self.index,
            "description": self.description,
            "files": list(self.target_files),
            "actions": [a.to_dict() for a in self.actions],
            "recipes": list(self.recipe_names),
            "dependencies": [f"Phase {i}" for i in self.depends_on],
            "estimatedDurationSeconds": int(self.duration.total_seconds()),
        }


@dataclass(frozen=True)
class MigrationPlan:
    phases: Tuple[RefactoringPhase, ...]
    all_files: Tuple[str, ...]
    total_duration: timedelta
    risk: RiskAssessment
    recipes_applied: Tuple[str, ...] = ()
    prerequisites: Tuple[str, ...] = ()

    @property
    def phase_count(self) -> int:
        return len(self.phases)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phases": [p.to_dict() for p in self.phases],
            "filesToProcess": list(self.all_files),
            "estimatedDurationSeconds": int(self.total_duration.total_seconds()),
            "riskAssessment": self.risk.to_dict(),
            "recipes": list(self.recipes_applied),
            "prerequisites": list(self.prerequisites),
        }


@dataclass(frozen=True)
class MigrationImpactSummary:
    """Dependency analysis and source scan rolled into one effort estimate."""
    total_files_to_migrate: int
    total_javax_imports: int
    total_blockers: int
    total_recommendations: int
    estimated_effort: timedelta
    risk: RiskAssessment
    complexity: MigrationComplexity

    def __post_init__(self):
        for name in ("total_files_to_migrate", "total_javax_imports", "total_blockers", "total_recommendations"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.estimated_effort < timedelta(0):
            raise ValueError("estimated_effort cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFilesToMigrate": self.total_files_to_migrate,
            "totalJavaxImports": self.total_javax_imports,
            "totalBlockers": self.total_blockers,
            "totalRecommendations": self.total_recommendations,
            "estimatedEffortSeconds": int(self.estimated_effort.total_seconds()),
            "riskAssessment": self.risk.to_dict(),
            "complexity": self.complexity.value,
        }
