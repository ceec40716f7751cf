"""Recipe library.

Recipes are named metadata only; applying them is the job of an external
refactoring tool. The library is an instance (not a class-level store) so
tests and callers can hold differently populated libraries side by side.
"""

import logging
import threading
from typing import Dict, List, Optional

from .models import Recipe, RecipeCategory

logger = logging.getLogger(__name__)


# ── Default recipes ──────────────────────────────────────────────────

UPDATE_MAVEN_COORDINATES = Recipe(
    name="UpdateMavenCoordinates",
    description="Rewrite javax dependency coordinates in pom.xml to their Jakarta equivalents",
    category=RecipeCategory.BUILD,
    updates_coordinates=True,
)

UPDATE_GRADLE_DEPENDENCIES = Recipe(
    name="UpdateGradleDependencies",
    description="Rewrite javax dependency coordinates in Gradle build scripts",
    category=RecipeCategory.BUILD,
    updates_coordinates=True,
)

UPDATE_PERSISTENCE_XML = Recipe(
    name="UpdatePersistenceXml",
    description="Move persistence.xml and orm.xml to the Jakarta Persistence namespace",
    category=RecipeCategory.XML,
    requires_coordinate_update=True,
)

UPDATE_WEB_XML = Recipe(
    name="UpdateWebXml",
    description="Move web.xml and web-fragment.xml to the Jakarta EE namespace",
    category=RecipeCategory.XML,
    requires_coordinate_update=True,
)

UPDATE_XML_NAMESPACES = Recipe(
    name="UpdateXmlNamespaces",
    description="Move remaining Java EE deployment descriptors to Jakarta EE namespaces",
    category=RecipeCategory.XML,
    requires_coordinate_update=True,
)

ADD_JAKARTA_NAMESPACE = Recipe(
    name="AddJakartaNamespace",
    description="Replace javax.* imports and references with jakarta.*",
    category=RecipeCategory.JAVA,
    requires_coordinate_update=True,
)

DEFAULT_RECIPES = (
    UPDATE_MAVEN_COORDINATES,
    UPDATE_GRADLE_DEPENDENCIES,
    UPDATE_PERSISTENCE_XML,
    UPDATE_WEB_XML,
    UPDATE_XML_NAMESPACES,
    ADD_JAKARTA_NAMESPACE,
)


class RecipeLibrary:
    """Thread-safe registry of recipes keyed by name.

    Registering a name twice replaces the earlier recipe.
    """

    def __init__(self, preload_defaults: bool = True):
        self._recipes: Dict[str, Recipe] = {}
        self._lock = threading.Lock()
        if preload_defaults:
            for recipe in DEFAULT_RECIPES:
                self.register(recipe)

    def register(self, recipe: Recipe) -> None:
        if recipe is None:
            raise ValueError("Recipe cannot be None")
        with self._lock:
            replaced = recipe.name in self._recipes
            self._recipes[recipe.name] = recipe
        if replaced:
            logger.debug(f"Replaced recipe: {recipe.name}")
        else:
            logger.debug(f"Registered recipe: {recipe.name}")

    def get(self, name: str) -> Optional[Recipe]:
        with self._lock:
            return self._recipes.get(name)

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._recipes

    def all(self) -> List[Recipe]:
        with self._lock:
            return list(self._recipes.values())

    def jakarta_recipes(self) -> List[Recipe]:
        """Recipes that move code or descriptors onto the Jakarta namespace."""
        return [r for r in self.all() if r.category != RecipeCategory.BUILD]

    def __len__(self) -> int:
        with self._lock:
            return len(self._recipes)
