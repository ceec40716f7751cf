"""Namespace classification of artifacts."""

import logging

from ..dependency.models import Artifact
from .models import Namespace
from .table import MappingTable

logger = logging.getLogger(__name__)


class NamespaceClassifier:
    """Classifies artifacts by groupId into JAVAX, JAKARTA or UNKNOWN.

    Classification is pure: same artifact, same answer. Framework
    compatibility (Spring Boot 3, Quarkus, ...) is a separate question
    answered by the mapping table.
    """

    def __init__(self, mapping_table: MappingTable):
        self._table = mapping_table

    @property
    def mapping_table(self) -> MappingTable:
        return self._table

    def classify(self, artifact: Artifact) -> Namespace:
        group_id = artifact.group_id
        if group_id == "javax" or group_id.startswith("javax."):
            return Namespace.JAVAX
        if group_id.startswith("jakarta."):
            return Namespace.JAKARTA
        return Namespace.UNKNOWN

    def is_jakarta_compatible(self, artifact: Artifact) -> bool:
        return self._table.is_jakarta_compatible(
            artifact.group_id, artifact.artifact_id, artifact.version
        )

    def is_jakarta_ready(self, artifact: Artifact) -> bool:
        """JAKARTA artifacts, plus UNKNOWN ones a framework rule marks compatible."""
        namespace = self.classify(artifact)
        if namespace == Namespace.JAKARTA:
            return True
        if namespace == Namespace.UNKNOWN:
            return self.is_jakarta_compatible(artifact)
        return False
