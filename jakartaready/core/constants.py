"""Shared constants for jakartaready.

This module contains thresholds, sentinels and fixed messages that are used
across multiple modules to avoid duplication and ensure consistency.
"""

# =============================================================================
# Dependency Graph
# =============================================================================

# Sentinel for versions that cannot be resolved from the build file
UNKNOWN_VERSION = "unknown"

# Sentinel for project coordinates missing from the build file
UNKNOWN_COORDINATE = "unknown"

DEFAULT_SCOPE = "compile"

# Build files probed by build_from_project, in order
BUILD_FILE_CANDIDATES = ("pom.xml", "build.gradle", "build.gradle.kts")

# Gradle configuration keyword -> Maven-style scope
GRADLE_SCOPE_MAP = {
    "implementation": "compile",
    "api": "compile",
    "compile": "compile",
    "runtime": "runtime",
    "runtimeOnly": "runtime",
    "testImplementation": "test",
    "testRuntime": "test",
    "compileOnly": "provided",
}

# =============================================================================
# Mapping Table
# =============================================================================

BUNDLED_MAPPING_RESOURCE = "jakarta-mappings.yaml"

# Jakarta version used when a mapping row carries no usable version table
DEFAULT_JAKARTA_VERSION = "6.0.0"

# =============================================================================
# Analysis
# =============================================================================

BLOCKER_CONFIDENCE = 0.9
RECOMMENDATION_CONFIDENCE = 0.95

RECOMMENDATION_ACTIONS = (
    "Update imports from javax.* to jakarta.*",
    "Update dependency coordinates",
)

BLOCKER_ACTIONS = (
    "Consider finding alternative library",
    "Check if library has Jakarta version",
)

RISK_BLOCKER_WEIGHT = 0.3
RISK_CONFLICT_WEIGHT = 0.2
RISK_LARGE_GRAPH_WEIGHT = 0.1
LARGE_GRAPH_NODE_THRESHOLD = 100

BLOCKER_READINESS_PENALTY = 0.5

# (lower bound, message), checked top-down
READINESS_BANDS = (
    (0.8, "Ready for migration"),
    (0.5, "Mostly ready, some issues to resolve"),
    (0.3, "Significant work required"),
)
READINESS_NOT_READY = "Not ready for migration"
READINESS_EMPTY_GRAPH = "No dependencies found"

CONFLICT_KIND_MIXED = "MIXED_NAMESPACES"

# =============================================================================
# Migration Planning
# =============================================================================

DEFAULT_BATCH_SIZE = 10
DEFAULT_MINUTES_PER_FILE = 2
MINUTES_PER_RECIPE = 1

# Impact summary effort weights (minutes)
IMPACT_MINUTES_PER_FILE = 2
IMPACT_MINUTES_PER_IMPORT = 1
IMPACT_MINUTES_PER_BLOCKER = 30

# Java EE deployment descriptors whose XML namespaces change with Jakarta EE 9+
XML_DESCRIPTOR_NAMES = frozenset({
    "persistence.xml",
    "orm.xml",
    "web.xml",
    "web-fragment.xml",
    "beans.xml",
    "faces-config.xml",
    "ejb-jar.xml",
    "application.xml",
    "validation.xml",
})

# Directories never walked when discovering project files
SKIP_DIRECTORIES = frozenset({
    ".git",
    ".gradle",
    ".mvn",
    ".idea",
    ".vscode",
    "target",
    "build",
    "out",
    "bin",
    "node_modules",
})

# =============================================================================
# Runtime Verification
# =============================================================================

DEFAULT_VERIFY_TIMEOUT = 60.0

# Upper bound on the wait for drain threads after the child exits or is killed
DEFAULT_DRAIN_TIMEOUT = 5.0

DEFAULT_MAX_OUTPUT_LINES = 10_000

DEFAULT_JAVA_EXECUTABLE = "java"

DEFAULT_HEALTH_ENDPOINT = "/actuator/health"
DEFAULT_HEALTH_TIMEOUT = 10.0

# =============================================================================
# Source Scanning
# =============================================================================

# Legacy Java EE XML namespace URI -> Jakarta EE 9+ namespace URI
LEGACY_XML_NAMESPACES = {
    "http://java.sun.com/xml/ns/persistence/orm": "https://jakarta.ee/xml/ns/persistence/orm",
    "http://xmlns.jcp.org/xml/ns/persistence/orm": "https://jakarta.ee/xml/ns/persistence/orm",
    "http://java.sun.com/xml/ns/persistence": "https://jakarta.ee/xml/ns/persistence",
    "http://xmlns.jcp.org/xml/ns/persistence": "https://jakarta.ee/xml/ns/persistence",
    "http://java.sun.com/xml/ns/validation/configuration": "https://jakarta.ee/xml/ns/validation/configuration",
    "http://xmlns.jcp.org/xml/ns/validation/configuration": "https://jakarta.ee/xml/ns/validation/configuration",
    "http://java.sun.com/xml/ns/javaee": "https://jakarta.ee/xml/ns/jakartaee",
    "http://xmlns.jcp.org/xml/ns/javaee": "https://jakarta.ee/xml/ns/jakartaee",
}
