"""Tests for settings loading and the MigrationService composition root."""

import logging
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from jakartaready import MigrationService
from jakartaready.core.exceptions import InputNotFoundError
from jakartaready.core.verification import VerificationOptions, VerificationStatus
from jakartaready.setting import Settings, load_settings


SPRING_BOOT_3_POM = """<project>
    <parent>
        <groupId>org.springframework.boot</groupId>
        <artifactId>spring-boot-starter-parent</artifactId>
        <version>3.1.0</version>
    </parent>
    <artifactId>legacy-servlets</artifactId>
    <dependencies>
        <dependency>
            <groupId>javax.servlet</groupId>
            <artifactId>javax.servlet-api</artifactId>
            <version>4.0.1</version>
        </dependency>
    </dependencies>
</project>
"""

SERVLET_SOURCE = """package com.example;

import javax.servlet.http.HttpServlet;

public class Hello extends HttpServlet {}
"""

CUSTOM_TABLE = """
mappings:
  - javax: {groupId: javax.foo, artifactId: foo-api}
    jakarta: {groupId: jakarta.foo, artifactId: jakarta.foo-api}
packages:
  - javax.foo
"""


# ── Tests: Settings ───────────────────────────────────────────────────────


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("JAKARTAREADY_BATCH_SIZE", "JAKARTAREADY_MAPPING_TABLE", "JAKARTAREADY_VERIFY_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.batch_size == 10
        assert settings.minutes_per_file == 2
        assert settings.mapping_table_path is None
        assert settings.verify_timeout == 60.0

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("JAKARTAREADY_BATCH_SIZE", "25")
        monkeypatch.setenv("JAKARTAREADY_VERIFY_TIMEOUT", "12.5")
        monkeypatch.setenv("JAKARTAREADY_MAPPING_TABLE", str(tmp_path / "table.yaml"))
        monkeypatch.setenv("JAKARTAREADY_JAVA", "/opt/jdk-17/bin/java")
        settings = load_settings()
        assert settings.batch_size == 25
        assert settings.verify_timeout == 12.5
        assert settings.mapping_table_path == tmp_path / "table.yaml"
        assert settings.java_executable == "/opt/jdk-17/bin/java"

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            Settings(batch_size=0)
        with pytest.raises(ValidationError):
            Settings(verify_timeout=-1)
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("JAKARTAREADY_LOG_LEVEL", "debug")
        assert load_settings().log_level == "DEBUG"


# ── Tests: Service ────────────────────────────────────────────────────────


class TestMigrationService:

    @pytest.fixture
    def project(self, tmp_path):
        (tmp_path / "pom.xml").write_text(SPRING_BOOT_3_POM, encoding="utf-8")
        source = tmp_path / "src/main/java/com/example/Hello.java"
        source.parent.mkdir(parents=True)
        source.write_text(SERVLET_SOURCE, encoding="utf-8")
        return tmp_path

    @pytest.fixture
    def service(self):
        return MigrationService(settings=Settings())

    def test_analyze_plan_and_impact(self, service, project):
        report = service.analyze_project(project)
        assert report.blockers == ()
        assert len(report.recommendations) == 1

        plan = service.create_plan(project, report)
        assert [p.index for p in plan.phases] == [1, 2]
        assert plan.phases[1].target_files == ("src/main/java/com/example/Hello.java",)

        summary = service.summarize_impact(project, report)
        assert summary.total_files_to_migrate == 1
        assert summary.total_javax_imports == 1
        assert summary.total_recommendations == 1

    def test_graph_operations(self, service, project):
        graph = service.analyze_project(project).graph
        assert service.detect_blockers(graph) == []
        assert service.analyze_transitive_conflicts(graph) == []
        assert len(service.recommend_versions(graph.nodes)) == 1

    def test_scan_sources(self, service, project):
        assert service.scan_sources(project).total_javax_imports == 1

    def test_verify_runtime(self, service, tmp_path):
        app = tmp_path / "app.py"
        app.write_text("print('ok')\n", encoding="utf-8")
        result = service.verify_runtime(app, VerificationOptions(launcher=(sys.executable,), timeout=15.0))
        assert result.status == VerificationStatus.SUCCESS

    def test_verify_runtime_missing_artifact(self, service, tmp_path):
        assert service.verify_runtime(tmp_path / "missing.jar").status == VerificationStatus.ERROR

    def test_custom_mapping_table(self, tmp_path):
        path = tmp_path / "table.yaml"
        path.write_text(CUSTOM_TABLE, encoding="utf-8")
        service = MigrationService(settings=Settings(mapping_table_path=path))
        assert len(service.mapping_table) == 1
        assert service.mapping_table.is_migrated_package("javax.foo.Bar")
        assert not service.mapping_table.is_migrated_package("javax.servlet.Servlet")

    def test_missing_mapping_table(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            MigrationService(settings=Settings(mapping_table_path=Path(tmp_path / "missing.yaml")))

    def test_configure_logging_applies_log_level(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            MigrationService(settings=Settings(log_level="warning"), configure_logging=True)
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            handler = root.handlers[0]
            assert isinstance(handler, logging.StreamHandler)
            assert handler.stream is sys.stdout
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_logging_left_alone_by_default(self):
        root = logging.getLogger()
        before = root.handlers[:]
        MigrationService(settings=Settings(log_level="DEBUG"))
        assert root.handlers == before

    def test_recipe_library_has_defaults(self, service):
        assert service.recipe_library.has("AddJakartaNamespace")
