"""Tests for build file parsing and the dependency graph model.

Tests cover:
- Artifact identity and graph invariants
- Maven: project coordinates, parent fallback, scopes, dependencyManagement,
  property substitution, unresolved versions, malformed XML
- Gradle: configuration -> scope mapping, Kotlin DSL, project naming
- Builder: build file detection order and missing build files
"""

import pytest

from jakartaready.core.dependency import (
    Artifact,
    Dependency,
    DependencyGraph,
    DependencyGraphBuilder,
    GradleBuildParser,
    MavenPomParser,
    graph_from,
)
from jakartaready.core.exceptions import InputNotFoundError, ParseFailureError


# =========================================================================
# Sample build files
# =========================================================================

SIMPLE_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
    <modelVersion>4.0.0</modelVersion>
    <groupId>com.example</groupId>
    <artifactId>shop</artifactId>
    <version>1.0.0</version>
    <dependencies>
        <dependency>
            <groupId>javax.servlet</groupId>
            <artifactId>javax.servlet-api</artifactId>
            <version>4.0.1</version>
            <scope>provided</scope>
        </dependency>
        <dependency>
            <groupId>org.example</groupId>
            <artifactId>util</artifactId>
            <version>2.0</version>
            <optional>true</optional>
        </dependency>
    </dependencies>
</project>
"""

PARENT_POM = """<project>
    <parent>
        <groupId>org.springframework.boot</groupId>
        <artifactId>spring-boot-starter-parent</artifactId>
        <version>3.1.0</version>
    </parent>
    <artifactId>web-app</artifactId>
    <properties>
        <jaxb.version>2.3.1</jaxb.version>
    </properties>
    <dependencyManagement>
        <dependencies>
            <dependency>
                <groupId>javax.validation</groupId>
                <artifactId>validation-api</artifactId>
                <version>2.0.1.Final</version>
            </dependency>
        </dependencies>
    </dependencyManagement>
    <dependencies>
        <dependency>
            <groupId>javax.validation</groupId>
            <artifactId>validation-api</artifactId>
        </dependency>
        <dependency>
            <groupId>javax.xml.bind</groupId>
            <artifactId>jaxb-api</artifactId>
            <version>${jaxb.version}</version>
        </dependency>
        <dependency>
            <groupId>com.example</groupId>
            <artifactId>sibling</artifactId>
            <version>${project.version}</version>
        </dependency>
        <dependency>
            <groupId>com.example</groupId>
            <artifactId>mystery</artifactId>
            <version>${not.defined}</version>
        </dependency>
        <dependency>
            <groupId>com.example</groupId>
            <artifactId>unversioned</artifactId>
        </dependency>
    </dependencies>
</project>
"""

GRADLE_BUILD = """
plugins {
    id 'java'
}

group = 'com.example'
version = '0.3.0'
rootProject.name = 'inventory'

dependencies {
    implementation "org.example:foo:1.2.3"
    testImplementation 'org.example:bar:4.5.6'
    compileOnly 'javax.servlet:javax.servlet-api:4.0.1'
    runtimeOnly 'com.h2database:h2:2.1.214'
    api 'org.example:shared:1.0'
    // implementation project(':core') is not a coordinate
    implementation project(':core')
}
"""

KOTLIN_BUILD = """
application {
    mainClass.set("com.example.app.ServerMain")
}

dependencies {
    implementation("jakarta.servlet:jakarta.servlet-api:6.0.0")
    testRuntime("org.junit.jupiter:junit-jupiter-engine:5.9.2")
}
"""


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# ── Tests: Model ──────────────────────────────────────────────────────────


class TestArtifactIdentity:
    """Artifact equality ignores version and scope."""

    def test_same_coordinates_different_version_are_equal(self):
        a = Artifact("javax.servlet", "javax.servlet-api", "3.1.0")
        b = Artifact("javax.servlet", "javax.servlet-api", "4.0.1", scope="test")
        assert a == b
        assert hash(a) == hash(b)

    def test_coordinate_and_key(self):
        a = Artifact("org.example", "foo", "1.2.3")
        assert a.key == "org.example:foo"
        assert a.coordinate == "org.example:foo:1.2.3"
        assert a.scope == "compile"

    def test_to_dict(self):
        data = Artifact("org.example", "foo", "1.2.3", scope="test").to_dict()
        assert data["groupId"] == "org.example"
        assert data["scope"] == "test"


class TestDependencyGraph:
    """Construction invariants and lookups."""

    def test_duplicate_node_rejected(self):
        a = Artifact("g", "a", "1")
        with pytest.raises(ValueError, match="Duplicate node"):
            DependencyGraph(nodes=(a, Artifact("g", "a", "2")))

    def test_edge_outside_graph_rejected(self):
        a = Artifact("g", "a", "1")
        b = Artifact("g", "b", "1")
        with pytest.raises(ValueError, match="outside the graph"):
            DependencyGraph(nodes=(a,), edges=(Dependency(source=a, target=b),))

    def test_graph_from_with_root(self):
        root = Artifact("com.example", "app", "1.0")
        deps = [Artifact("g", "x", "1"), Artifact("g", "y", "1")]
        graph = graph_from(deps, root=root)
        assert graph.node_count == 3
        assert graph.dependencies_of(root) == deps
        assert graph.find("g", "y") == deps[1]
        assert graph.find("g", "z") is None

    def test_graph_from_keeps_first_duplicate(self):
        graph = graph_from([Artifact("g", "x", "1"), Artifact("g", "x", "2")])
        assert graph.node_count == 1
        assert graph.nodes[0].version == "1"

    def test_empty_graph(self):
        graph = DependencyGraph()
        assert graph.is_empty()
        assert graph.to_dict() == {"nodes": [], "edges": []}


# ── Tests: Maven ──────────────────────────────────────────────────────────


class TestMavenParser:
    """pom.xml parsing through MavenPomParser."""

    def test_project_and_dependencies(self):
        graph = MavenPomParser().parse_source(SIMPLE_POM)
        project = graph.nodes[0]
        assert project.coordinate == "com.example:shop:1.0.0"
        assert project.is_transitive is False

        servlet = graph.find("javax.servlet", "javax.servlet-api")
        assert servlet.version == "4.0.1"
        assert servlet.scope == "provided"
        assert servlet.is_transitive is True

        util = graph.find("org.example", "util")
        assert util.scope == "compile"
        edge = [e for e in graph.edges if e.target == util][0]
        assert edge.optional is True

    def test_parent_fallback_for_coordinates(self):
        graph = MavenPomParser().parse_source(PARENT_POM)
        project = graph.nodes[0]
        assert project.group_id == "org.springframework.boot"
        assert project.artifact_id == "web-app"
        assert project.version == "3.1.0"

    def test_version_from_dependency_management(self):
        graph = MavenPomParser().parse_source(PARENT_POM)
        assert graph.find("javax.validation", "validation-api").version == "2.0.1.Final"

    def test_managed_version_with_property_coordinates(self):
        pom = """<project>
            <groupId>com.acme</groupId>
            <artifactId>app</artifactId>
            <version>2.3.4</version>
            <dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>${project.groupId}</groupId>
                        <artifactId>core</artifactId>
                        <version>2.3.4</version>
                    </dependency>
                </dependencies>
            </dependencyManagement>
            <dependencies>
                <dependency>
                    <groupId>${project.groupId}</groupId>
                    <artifactId>core</artifactId>
                </dependency>
            </dependencies>
        </project>"""
        graph = MavenPomParser().parse_source(pom)
        assert graph.find("com.acme", "core").version == "2.3.4"

    def test_version_from_properties(self):
        graph = MavenPomParser().parse_source(PARENT_POM)
        assert graph.find("javax.xml.bind", "jaxb-api").version == "2.3.1"
        assert graph.find("com.example", "sibling").version == "3.1.0"

    def test_unresolved_versions_use_sentinel(self):
        graph = MavenPomParser().parse_source(PARENT_POM)
        assert graph.find("com.example", "mystery").version == "unknown"
        assert graph.find("com.example", "unversioned").version == "unknown"

    def test_duplicate_dependency_keeps_first(self):
        pom = """<project><groupId>g</groupId><artifactId>a</artifactId><version>1</version>
        <dependencies>
          <dependency><groupId>x</groupId><artifactId>y</artifactId><version>1.0</version></dependency>
          <dependency><groupId>x</groupId><artifactId>y</artifactId><version>2.0</version></dependency>
        </dependencies></project>"""
        graph = MavenPomParser().parse_source(pom)
        assert graph.node_count == 2
        assert graph.find("x", "y").version == "1.0"
        assert len(graph.edges) == 1

    def test_malformed_xml_raises_parse_failure(self):
        with pytest.raises(ParseFailureError) as exc_info:
            MavenPomParser().parse_source("<project><dependencies></project>")
        assert exc_info.value.__cause__ is not None

    def test_wrong_root_element(self):
        with pytest.raises(ParseFailureError, match="not <project>"):
            MavenPomParser().parse_source("<settings/>")

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            MavenPomParser().parse_file(tmp_path / "pom.xml")

    def test_parse_file(self, tmp_path):
        pom = _write(tmp_path, "pom.xml", SIMPLE_POM)
        graph = MavenPomParser().parse_file(pom)
        assert graph.node_count == 3


# ── Tests: Gradle ─────────────────────────────────────────────────────────


class TestGradleParser:
    """build.gradle parsing through GradleBuildParser."""

    def test_configuration_scopes(self):
        graph = GradleBuildParser().parse_source(GRADLE_BUILD)
        assert graph.find("org.example", "foo").scope == "compile"
        assert graph.find("org.example", "bar").scope == "test"
        assert graph.find("javax.servlet", "javax.servlet-api").scope == "provided"
        assert graph.find("com.h2database", "h2").scope == "runtime"
        assert graph.find("org.example", "shared").scope == "compile"

    def test_versions_parsed(self):
        graph = GradleBuildParser().parse_source(GRADLE_BUILD)
        assert graph.find("org.example", "foo").version == "1.2.3"
        assert graph.find("org.example", "bar").version == "4.5.6"

    def test_classifier_is_not_part_of_version(self):
        content = "dependencies {\n    implementation 'org.example:natives:1.2.3:sources'\n}\n"
        graph = GradleBuildParser().parse_source(content)
        assert graph.find("org.example", "natives").version == "1.2.3"

    @pytest.mark.parametrize("declaration", [
        'implementation "org.example:lib:$libVersion"',
        'implementation("org.example:lib:${libVersion}")',
    ])
    def test_interpolated_version_is_unknown(self, declaration):
        graph = GradleBuildParser().parse_source(f"dependencies {{\n    {declaration}\n}}\n")
        assert graph.find("org.example", "lib").version == "unknown"

    def test_project_references_are_ignored(self):
        graph = GradleBuildParser().parse_source(GRADLE_BUILD)
        # project + five coordinates
        assert graph.node_count == 6

    def test_project_coordinate(self):
        project = GradleBuildParser().parse_source(GRADLE_BUILD).nodes[0]
        assert project.coordinate == "com.example:inventory:0.3.0"

    def test_kotlin_dsl(self):
        graph = GradleBuildParser().parse_source(KOTLIN_BUILD, "build.gradle.kts")
        servlet = graph.find("jakarta.servlet", "jakarta.servlet-api")
        assert servlet.version == "6.0.0"
        assert graph.find("org.junit.jupiter", "junit-jupiter-engine").scope == "test"

    def test_main_class_names_project(self):
        project = GradleBuildParser().parse_source(KOTLIN_BUILD).nodes[0]
        assert project.artifact_id == "ServerMain"
        assert project.version == "unknown"

    def test_no_dependencies(self):
        graph = GradleBuildParser().parse_source("plugins { id 'java' }")
        assert graph.node_count == 1
        assert graph.edges == ()

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            GradleBuildParser().parse_file(tmp_path / "build.gradle")


# ── Tests: Builder ────────────────────────────────────────────────────────


class TestBuilder:
    """DependencyGraphBuilder.build_from_project detection."""

    def test_prefers_pom_over_gradle(self, tmp_path):
        _write(tmp_path, "pom.xml", SIMPLE_POM)
        _write(tmp_path, "build.gradle", GRADLE_BUILD)
        graph = DependencyGraphBuilder().build_from_project(tmp_path)
        assert graph.nodes[0].artifact_id == "shop"

    def test_gradle_kts(self, tmp_path):
        _write(tmp_path, "build.gradle.kts", KOTLIN_BUILD)
        graph = DependencyGraphBuilder().build_from_project(tmp_path)
        assert graph.find("jakarta.servlet", "jakarta.servlet-api") is not None

    def test_no_build_file(self, tmp_path):
        with pytest.raises(InputNotFoundError, match="No build file"):
            DependencyGraphBuilder().build_from_project(tmp_path)

    def test_input_not_found_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DependencyGraphBuilder().build_from_project(tmp_path)
