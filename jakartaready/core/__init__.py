"""Core components of jakartaready.

Subpackages:
    dependency    — build file parsing into a DependencyGraph
    mapping       — javax -> jakarta mapping table and namespace classifier
    analysis      — blockers, recommendations, conflicts, risk and readiness
    scanning      — Java import and XML descriptor scanning
    migration     — recipe library, phased planner, impact summary
    verification  — runtime execution, bytecode scan, health check
"""
