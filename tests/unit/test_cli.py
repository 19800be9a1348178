"""Tests for CLI module."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from surfacecheck import __version__
from surfacecheck.cli import app

runner = CliRunner()


@pytest.fixture
def sources(temp_dir: Path, old_source: str, new_source: str) -> tuple[Path, Path]:
    """Write both versions of the module to disk."""
    old = temp_dir / "old.ts"
    new = temp_dir / "new.ts"
    old.write_text(old_source, encoding="utf-8")
    new.write_text(new_source, encoding="utf-8")
    return old, new


@pytest.fixture
def workdir(temp_dir: Path, clean_env: None, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from an empty directory with a clean environment."""
    monkeypatch.chdir(temp_dir)
    return temp_dir


class TestCLI:
    """Tests for top-level CLI behavior."""

    def test_version_flag(self) -> None:
        """Test --version flag."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help_flag(self) -> None:
        """Test --help flag."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.stdout
        assert "surface" in result.stdout


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_json_report_to_file(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """JSON output uses camelCase keys."""
        old, new = sources
        out = workdir / "report.json"
        result = runner.invoke(
            app,
            ["analyze", str(old), str(new), "--path", "src/users.ts", "-f", "json", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output

        data = json.loads(out.read_text())
        assert data["hasBreakingChanges"] is True
        assert data["suggestedVersionBump"] == "major"
        assert len(data["breakingChanges"]) == 5
        assert len(data["nonBreakingChanges"]) == 3
        assert data["breakingChanges"][0]["filePath"] == "src/users.ts"

    def test_text_output(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Text output lists the changes and the suggested bump."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new)])
        assert result.exit_code == 0, result.output
        assert "Breaking Changes" in result.stdout
        assert "Suggested version bump: MAJOR" in result.stdout
        assert "syntactic" in result.stdout

    def test_markdown_output(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Markdown output is printed to stdout."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new), "--format", "markdown"])
        assert result.exit_code == 0, result.output
        assert "<!-- surfacecheck-report -->" in result.stdout
        assert "BREAKING - Major Release Required" in result.stdout

    def test_docs_option(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Documentation passed with --docs is cross-referenced."""
        old, new = sources
        docs_dir = workdir / "docs"
        docs_dir.mkdir()
        (docs_dir / "users.md").write_text("Use deleteUser(id).", encoding="utf-8")
        (docs_dir / "intro.md").write_text("Welcome.", encoding="utf-8")
        out = workdir / "report.json"

        result = runner.invoke(
            app,
            ["analyze", str(old), str(new), "--docs", str(docs_dir), "-f", "json", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        affected = json.loads(out.read_text())["affectedDocumentation"]
        assert [Path(p).name for p in affected] == ["users.md"]

    def test_fail_on_breaking(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """--fail-on-breaking exits 1 when something breaks."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new), "--fail-on-breaking"])
        assert result.exit_code == 1

    def test_fail_on_breaking_without_changes(
        self, workdir: Path, sources: tuple[Path, Path]
    ) -> None:
        """--fail-on-breaking exits 0 for compatible changes."""
        old, _ = sources
        result = runner.invoke(app, ["analyze", str(old), str(old), "--fail-on-breaking"])
        assert result.exit_code == 0, result.output
        assert "No breaking changes detected." in result.stdout

    def test_unknown_format(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Unknown formats are rejected."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new), "--format", "xml"])
        assert result.exit_code == 1
        assert "Unknown format" in result.stdout

    def test_missing_file(self, workdir: Path) -> None:
        """Missing input files are a usage error."""
        result = runner.invoke(app, ["analyze", "missing-old.ts", "missing-new.ts"])
        assert result.exit_code != 0

    def test_binary_file(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Undecodable input is reported with a hint."""
        old, _ = sources
        binary = workdir / "image.ts"
        binary.write_bytes(b"\xff\xfe\x00\x81")
        result = runner.invoke(app, ["analyze", str(old), str(binary)])
        assert result.exit_code == 1
        assert "Cannot decode" in result.stdout
        assert "Only text source files can be analyzed." in result.stdout

    def test_anthropic_without_key(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """The anthropic provider requires an API key."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new), "--ai", "anthropic"])
        assert result.exit_code == 1
        assert "ANTHROPIC_API_KEY" in result.stdout

    def test_unknown_provider_falls_back(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """Unknown AI providers fall back to static analysis."""
        old, new = sources
        result = runner.invoke(app, ["analyze", str(old), str(new), "--ai", "magic"])
        assert result.exit_code == 0, result.output
        assert "Unknown AI provider" in result.stdout


class TestSurfaceCommand:
    """Tests for the surface command."""

    def test_json(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """--json prints the surface with wire names."""
        old, _ = sources
        result = runner.invoke(app, ["surface", str(old), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [f["name"] for f in data["functions"]] == ["getUser", "deleteUser", "formatName"]
        assert data["exports"] == ["db"]
        assert "async" in data["functions"][0]

    def test_table(self, workdir: Path, sources: tuple[Path, Path]) -> None:
        """The default output is a summary table."""
        old, _ = sources
        result = runner.invoke(app, ["surface", str(old)])
        assert result.exit_code == 0, result.output
        assert "3 functions, 1 interfaces, 2 types, 1 re-exports" in result.stdout


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_init(self, workdir: Path) -> None:
        """config init writes an example file."""
        result = runner.invoke(app, ["config", "init", str(workdir)])
        assert result.exit_code == 0
        assert (workdir / ".surfacecheck.yml").exists()

    def test_init_refuses_overwrite(self, workdir: Path) -> None:
        """config init keeps an existing file unless forced."""
        (workdir / ".surfacecheck.yml").write_text("version: 1\n")
        result = runner.invoke(app, ["config", "init", str(workdir)])
        assert result.exit_code == 1
        assert "already exists" in result.stdout

        result = runner.invoke(app, ["config", "init", str(workdir), "--force"])
        assert result.exit_code == 0
        assert "analysis:" in (workdir / ".surfacecheck.yml").read_text()

    def test_validate_example(self, workdir: Path) -> None:
        """The generated example validates cleanly."""
        runner.invoke(app, ["config", "init", str(workdir)])
        result = runner.invoke(app, ["config", "validate", str(workdir / ".surfacecheck.yml")])
        assert result.exit_code == 0
        assert "Configuration is valid." in result.stdout

    def test_validate_warnings(self, workdir: Path) -> None:
        """Unknown sections and missing versions are warnings."""
        config = workdir / "c.yml"
        config.write_text("waf:\n  provider: aws\n")
        result = runner.invoke(app, ["config", "validate", str(config)])
        assert result.exit_code == 0
        assert "Missing 'version' field" in result.stdout
        assert "Unknown section: waf" in result.stdout

    def test_validate_invalid(self, workdir: Path) -> None:
        """Invalid values fail validation."""
        config = workdir / "c.yml"
        config.write_text("version: 1\nanalysis:\n  ai_provider: magic\n")
        result = runner.invoke(app, ["config", "validate", str(config)])
        assert result.exit_code == 1
        assert "Validation failed" in result.stdout

    def test_show_masks_api_key(self, workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """config show never prints the API key."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-secret-value")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert "sk-secret-value" not in result.stdout
        assert "********" in result.stdout
