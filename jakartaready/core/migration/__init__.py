"""Migration planning: recipes, phased plans and impact summaries."""

from .impact import determine_complexity, summarize_impact
from .models import (
    ActionType,
    MigrationComplexity,
    MigrationImpactSummary,
    MigrationPlan,
    PhaseAction,
    Recipe,
    RecipeCategory,
    RefactoringPhase,
)
from .planner import MigrationPlanner
from .recipes import DEFAULT_RECIPES, RecipeLibrary

__all__ = [
    "determine_complexity",
    "summarize_impact",
    "ActionType",
    "MigrationComplexity",
    "MigrationImpactSummary",
    "MigrationPlan",
    "PhaseAction",
    "Recipe",
    "RecipeCategory",
    "RefactoringPhase",
    "MigrationPlanner",
    "DEFAULT_RECIPES",
    "RecipeLibrary",
]
