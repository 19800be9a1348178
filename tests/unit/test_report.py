"""Tests for report assembly and the analysis entry points."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from surfacecheck.analysis.ai_reviewer import CompletionClient
from surfacecheck.analysis.report import (
    analyze_breaking_changes,
    analyze_breaking_changes_with_ai,
    build_report,
)
from surfacecheck.core.models import (
    AnalysisContext,
    BreakingChangeType,
    DocumentRef,
    NonBreakingChangeType,
    VersionBump,
)
from surfacecheck.errors import NetworkError

OLD = "export function foo(a: string): void {}\n"
NEW_BREAKING = "export function foo(a: string, b: number): void {}\n"
NEW_ADDITIVE = "export function foo(a: string): void {}\nexport function bar(): void {}\n"

ENHANCER_RESPONSE = json.dumps(
    {
        "additionalBreaking": [
            {
                "type": "error_changed",
                "name": "foo",
                "description": "foo now throws on empty input",
                "severity": "major",
            }
        ],
        "nonBreaking": [],
        "migrationGuide": "Handle the new error.",
    }
)


def _client(response: str = ENHANCER_RESPONSE, available: bool = True) -> MagicMock:
    client = MagicMock(spec=CompletionClient)
    client.name = "mock"
    client.is_available.return_value = available
    client.complete = AsyncMock(return_value=response)
    return client


class TestBuildReport:
    """Tests for build_report."""

    def test_empty_report(self) -> None:
        """No changes yields a patch report."""
        report = build_report([], [])
        assert report.has_breaking_changes is False
        assert report.suggested_version_bump == VersionBump.PATCH
        assert report.affected_documentation == []

    def test_docs_ignored_without_breaking_changes(self, docs: list[DocumentRef]) -> None:
        """Documentation is only searched when something breaks."""
        report = analyze_breaking_changes(NEW_ADDITIVE, NEW_ADDITIVE, "a.ts", docs=docs)
        assert report.affected_documentation == []


class TestAnalyzeBreakingChanges:
    """Tests for analyze_breaking_changes."""

    def test_breaking(self) -> None:
        """A new required parameter is a major change."""
        report = analyze_breaking_changes(OLD, NEW_BREAKING, "src/a.ts")
        assert report.has_breaking_changes is True
        assert [c.type for c in report.breaking_changes] == [
            BreakingChangeType.PARAMETER_ADDED_REQUIRED
        ]
        assert report.suggested_version_bump == VersionBump.MAJOR

    def test_additive(self) -> None:
        """Additions alone are a minor change."""
        report = analyze_breaking_changes(OLD, NEW_ADDITIVE, "src/a.ts")
        assert report.has_breaking_changes is False
        assert [c.type for c in report.non_breaking_changes] == [
            NonBreakingChangeType.FUNCTION_ADDED
        ]
        assert report.suggested_version_bump == VersionBump.MINOR

    def test_unchanged(self) -> None:
        """Identical sources are a patch."""
        report = analyze_breaking_changes(OLD, OLD, "src/a.ts")
        assert report.breaking_changes == []
        assert report.suggested_version_bump == VersionBump.PATCH

    def test_docs_annotated(self) -> None:
        """Affected documents are attached to the report and the change."""
        docs = [DocumentRef(path="docs/foo.md", content="Call foo(a) to start.")]
        report = analyze_breaking_changes(OLD, NEW_BREAKING, "src/a.ts", docs=docs)
        assert report.affected_documentation == ["docs/foo.md"]
        assert report.breaking_changes[0].affected_documentation == ["docs/foo.md"]


class TestAnalyzeBreakingChangesWithAI:
    """Tests for analyze_breaking_changes_with_ai."""

    @pytest.mark.asyncio
    async def test_enhancer_findings_appended(self) -> None:
        """Enhancer findings follow the static ones."""
        client = _client()
        report = await analyze_breaking_changes_with_ai(
            OLD,
            NEW_BREAKING,
            "src/a.ts",
            context=AnalysisContext(pr_title="Require b"),
            client=client,
        )
        assert [c.type for c in report.breaking_changes] == [
            BreakingChangeType.PARAMETER_ADDED_REQUIRED,
            BreakingChangeType.ERROR_CHANGED,
        ]
        assert report.migration_guide == "Handle the new error."
        prompt = client.complete.await_args.args[0]
        assert "PR Title: Require b" in prompt

    @pytest.mark.asyncio
    async def test_nothing_found_after_enhancement_is_none(self) -> None:
        """An enhanced run with no findings suggests no release."""
        client = _client('{"additionalBreaking": [], "nonBreaking": []}')
        report = await analyze_breaking_changes_with_ai(OLD, OLD, "a.ts", client=client)
        assert report.suggested_version_bump == VersionBump.NONE

    @pytest.mark.asyncio
    async def test_unavailable_client_falls_back(self) -> None:
        """An unavailable client yields the static report."""
        client = _client(available=False)
        report = await analyze_breaking_changes_with_ai(OLD, NEW_BREAKING, "a.ts", client=client)
        assert len(report.breaking_changes) == 1
        assert report.migration_guide is None
        client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_response_falls_back(self) -> None:
        """Unparseable answers are ignored."""
        report = await analyze_breaking_changes_with_ai(
            OLD, NEW_BREAKING, "a.ts", client=_client("not json")
        )
        static = analyze_breaking_changes(OLD, NEW_BREAKING, "a.ts")
        assert report == static

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self) -> None:
        """Provider failures are ignored."""
        client = _client()
        client.complete = AsyncMock(side_effect=NetworkError("Anthropic API"))
        report = await analyze_breaking_changes_with_ai(OLD, NEW_BREAKING, "a.ts", client=client)
        assert len(report.breaking_changes) == 1
        assert report.suggested_version_bump == VersionBump.MAJOR

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self) -> None:
        """A slow provider is abandoned after the timeout."""

        async def slow(prompt: str) -> str:
            await asyncio.sleep(5)
            return ENHANCER_RESPONSE

        client = _client()
        client.complete = slow
        report = await analyze_breaking_changes_with_ai(
            OLD, NEW_BREAKING, "a.ts", client=client, timeout=0.01
        )
        assert [c.type for c in report.breaking_changes] == [
            BreakingChangeType.PARAMETER_ADDED_REQUIRED
        ]

    @pytest.mark.asyncio
    async def test_default_client_without_key(self, clean_env: None) -> None:
        """Without ANTHROPIC_API_KEY the static report is returned."""
        report = await analyze_breaking_changes_with_ai(OLD, NEW_BREAKING, "a.ts")
        assert len(report.breaking_changes) == 1
        assert report.migration_guide is None
