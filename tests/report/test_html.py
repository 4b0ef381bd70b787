"""Tests for the HTML report renderer."""

import pytest

from repo_analyzer.exceptions import ReportError
from repo_analyzer.models import (
    AnalysisResult,
    ArchitecturePattern,
    ArchitectureResult,
    ArchitectureSuggestion,
    Change,
    ChangeType,
    CodeDifference,
    DependencyInfo,
    FileOptimizationResult,
    FileSecurityResult,
    Impact,
    OptimizationSuggestion,
    RepositoryInfo,
    SecurityIssue,
    Severity,
)
from repo_analyzer.report import render_report, write_report


def _result(**kwargs) -> AnalysisResult:
    info = RepositoryInfo(
        current_branch="main",
        last_commit="abc123",
        modified_files=["a.js"],
        branches=["main", "dev"],
        remote_url="https://github.com/octo/demo",
    )
    return AnalysisResult(repo_info=info, **kwargs)


class TestSections:
    def test_all_sections_present(self):
        html = render_report(_result())
        for section_id, title in [
            ("repository", "Repository Info"),
            ("security", "Security Analysis"),
            ("optimization", "Code Optimization"),
            ("architecture", "Architecture Analysis"),
            ("changes", "Recent Changes"),
        ]:
            assert f'<section id="{section_id}"><h2>{title}</h2>' in html

    def test_empty_states(self):
        html = render_report(_result())
        assert "No security issues found." in html
        assert "No optimization suggestions." in html
        assert "No architecture findings." in html
        assert "No recent changes." in html

    def test_repository_info(self):
        html = render_report(_result(mode="incremental"))
        assert "https://github.com/octo/demo" in html
        assert "main, dev" in html
        assert "incremental" in html

    def test_page_has_no_script(self):
        assert "<script" not in render_report(_result())


class TestFindings:
    def test_security_issue_rendered(self):
        issue = SecurityIssue(
            type="hardcoded-secret",
            severity=Severity.CRITICAL,
            message="Potential hardcoded secret detected",
            suggestion="Use environment variables",
            line=3,
        )
        html = render_report(_result(security=[FileSecurityResult("src/config.js", [issue])]))
        assert "src/config.js" in html
        assert "hardcoded-secret" in html
        assert "line 3" in html
        assert 'class="badge critical"' in html

    def test_optimizations_sorted_by_impact(self):
        low = OptimizationSuggestion("best-practice", "low one", "fix", Impact.LOW, line=1)
        high = OptimizationSuggestion("complexity", "high one", "fix", Impact.HIGH, line=9)
        html = render_report(_result(optimization=[FileOptimizationResult("a.js", [low, high])]))
        assert html.index("high one") < html.index("low one")

    def test_text_is_escaped(self):
        issue = SecurityIssue(
            type="unsafe-input",
            severity=Severity.HIGH,
            message="<script>alert(1)</script>",
            suggestion="a & b",
        )
        html = render_report(_result(security=[FileSecurityResult("<b>.js", [issue])]))
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "a &amp; b" in html
        assert "&lt;b&gt;.js" in html


class TestArchitecture:
    def test_pattern_confidence_as_percentage(self):
        architecture = ArchitectureResult(
            patterns=[ArchitecturePattern("MVC", "Model-View-Controller", ["models"], 0.8)]
        )
        html = render_report(_result(architecture=architecture))
        assert "80% confidence" in html
        assert "<code>models</code>" in html

    def test_circular_dependency_badge(self):
        architecture = ArchitectureResult(
            dependencies=[
                DependencyInfo("src/a.js", used_by=["src/b.js"], dependencies=["src/b.js"],
                               circular=True),
                DependencyInfo("src/c.js"),
            ]
        )
        html = render_report(_result(architecture=architecture))
        assert html.count("circular dependency") == 1
        assert '<tr class="circular">' in html

    def test_suggestions(self):
        architecture = ArchitectureResult(
            suggestions=[
                ArchitectureSuggestion(
                    "structure", "Missing common directories: tests", Impact.MEDIUM, "Add them"
                )
            ]
        )
        html = render_report(_result(architecture=architecture))
        assert "Missing common directories: tests" in html
        assert "No architecture findings." not in html


class TestChanges:
    def test_changes_listed_per_file(self):
        diff = CodeDifference(
            "src/app.js",
            [
                Change(ChangeType.REMOVE, 4, "var a = 1;"),
                Change(ChangeType.ADD, 4, "let a = 1;", suggestion="Prefer const"),
            ],
        )
        html = render_report(_result(differences=[diff]))
        changes = html[html.index('<section id="changes">'):]
        assert "src/app.js" in changes
        assert "-var a = 1;" in changes
        assert "+let a = 1;" in changes
        assert '<div class="diff-hint">Prefer const</div>' in changes


class TestWriteReport:
    def test_writes_file(self, tmp_path):
        out = write_report(_result(), tmp_path / "nested" / "report.html")
        assert out == (tmp_path / "nested" / "report.html").resolve()
        assert out.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_unwritable_destination(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ReportError) as exc_info:
            write_report(_result(), blocker / "report.html")
        assert exc_info.value.message.startswith("Cannot write report:")
