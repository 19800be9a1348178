"""Markdown rendering of breaking change reports."""

from dataclasses import dataclass

from surfacecheck.core.models import (
    BreakingChange,
    BreakingChangeReport,
    ChangeSeverity,
    NonBreakingChange,
    VersionBump,
)


@dataclass
class FormatterConfig:
    """Configuration for report rendering."""

    # Marker to identify generated comments
    marker: str = "<!-- surfacecheck-report -->"

    # Maximum number of changes listed per section
    max_changes: int = 25

    # Whether to wrap long sections in <details>
    use_collapsible: bool = True


SEVERITY_ICONS = {
    ChangeSeverity.CRITICAL: "!!",
    ChangeSeverity.MAJOR: "!",
    ChangeSeverity.MINOR: "~",
}

SEVERITY_ORDER = [ChangeSeverity.CRITICAL, ChangeSeverity.MAJOR, ChangeSeverity.MINOR]

ANALYSIS_NOTE = (
    "Type comparison is syntactic: reordered or equivalent type expressions may be "
    "reported as changes, and a rename shows up as a removal plus an addition."
)


class ReportFormatter:
    """Renders a BreakingChangeReport as a Markdown document."""

    def __init__(self, config: FormatterConfig | None = None):
        """Initialize the formatter.

        Args:
            config: Optional formatter configuration.
        """
        self._config = config or FormatterConfig()

    def format_report(self, report: BreakingChangeReport, title: str = "API Surface Report") -> str:
        """Render a complete report.

        Args:
            report: Report to render.
            title: Heading of the document.

        Returns:
            Markdown text.
        """
        sections: list[str] = [self._config.marker, "", f"## {title}", ""]

        sections.append(self._generate_summary(report))
        sections.append("")

        if report.breaking_changes:
            sections.append(self._generate_breaking_section(report.breaking_changes))
            sections.append("")

        if report.non_breaking_changes:
            sections.append(self._generate_non_breaking_section(report.non_breaking_changes))
            sections.append("")

        if report.affected_documentation:
            sections.append("### Affected Documentation")
            sections.append("")
            sections.extend(f"- `{path}`" for path in report.affected_documentation)
            sections.append("")

        if report.migration_guide:
            sections.append(self._generate_migration_section(report.migration_guide))
            sections.append("")

        sections.append("---")
        sections.append(f"*Note: {ANALYSIS_NOTE}*")
        sections.append("")
        sections.append("*Generated by surfacecheck*")

        return "\n".join(sections)

    def _generate_summary(self, report: BreakingChangeReport) -> str:
        """Generate summary table."""
        critical = sum(
            1 for c in report.breaking_changes if c.severity == ChangeSeverity.CRITICAL
        )

        lines = [
            f"### Status: {self._get_status_text(report)}",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Suggested Version Bump | **{report.suggested_version_bump.value.upper()}** |",
            f"| Breaking Changes | {len(report.breaking_changes)} |",
            f"| Critical | {critical} |",
            f"| Non-Breaking Changes | {len(report.non_breaking_changes)} |",
            f"| Affected Documents | {len(report.affected_documentation)} |",
        ]
        return "\n".join(lines)

    def _generate_breaking_section(self, changes: list[BreakingChange]) -> str:
        """Generate breaking changes grouped by severity."""
        lines = ["### Breaking Changes", ""]

        ordered = sorted(changes, key=lambda c: SEVERITY_ORDER.index(c.severity))
        displayed = ordered[: self._config.max_changes]

        for change in displayed:
            icon = SEVERITY_ICONS.get(change.severity, "?")
            location = f"{change.file_path}:{change.line_number}" if change.line_number else change.file_path
            lines.append(
                f"- {icon} **{change.type.value}** `{change.name}` ({location}): {change.description}"
            )

            if change.previous_value and change.current_value:
                lines.append(f"  - `{change.previous_value}` -> `{change.current_value}`")
            elif change.previous_value:
                lines.append(f"  - Removed: `{change.previous_value}`")
            elif change.current_value:
                lines.append(f"  - Added: `{change.current_value}`")

            if change.migration_hint:
                lines.append(f"  - Migration: {change.migration_hint}")

        if len(changes) > self._config.max_changes:
            lines.append(f"- ... and {len(changes) - self._config.max_changes} more")

        return "\n".join(lines)

    def _generate_non_breaking_section(self, changes: list[NonBreakingChange]) -> str:
        """Generate non-breaking changes list."""
        lines = ["### Non-Breaking Changes", ""]

        if self._config.use_collapsible:
            lines.extend(["<details>", "<summary>Show non-breaking changes</summary>", ""])

        for change in changes[: self._config.max_changes]:
            lines.append(f"- **{change.type.value}** `{change.name}`: {change.description}")

        if len(changes) > self._config.max_changes:
            lines.append(f"- ... and {len(changes) - self._config.max_changes} more")

        if self._config.use_collapsible:
            lines.extend(["", "</details>"])

        return "\n".join(lines)

    def _generate_migration_section(self, guide: str) -> str:
        """Generate migration guide section."""
        lines = ["### Migration Guide", ""]

        if self._config.use_collapsible:
            lines.extend(["<details>", "<summary>Show migration guide</summary>", ""])

        lines.append(guide)

        if self._config.use_collapsible:
            lines.extend(["", "</details>"])

        return "\n".join(lines)

    def _get_status_text(self, report: BreakingChangeReport) -> str:
        """Get status text for a report."""
        bump = report.suggested_version_bump
        if bump == VersionBump.MAJOR:
            return "BREAKING - Major Release Required"
        elif bump == VersionBump.MINOR:
            return "ADDITIVE - Minor Release"
        elif bump == VersionBump.PATCH:
            return "COMPATIBLE - Patch Release"
        else:
            return "NO API CHANGES"


def format_report_markdown(
    report: BreakingChangeReport,
    title: str = "API Surface Report",
    config: FormatterConfig | None = None,
) -> str:
    """Convenience function to render a report as Markdown.

    Args:
        report: Report to render.
        title: Heading of the document.
        config: Optional formatter configuration.

    Returns:
        Markdown text.
    """
    return ReportFormatter(config).format_report(report, title)
