"""Entry points that turn two versions of a file into a change report."""

import asyncio
import os
from collections.abc import Iterable, Mapping

from surfacecheck.analysis.ai_reviewer import (
    DEFAULT_MAX_CODE_CHARS,
    AnthropicClient,
    BehavioralChangeEnhancer,
    CompletionClient,
)
from surfacecheck.analysis.differ import detect_additive_changes, detect_breaking_changes
from surfacecheck.analysis.doc_impact import annotate_documentation_impact
from surfacecheck.analysis.extractor import parse_api_surface
from surfacecheck.analysis.severity import suggest_version_bump
from surfacecheck.core.models import (
    AnalysisContext,
    BreakingChange,
    BreakingChangeReport,
    DocumentRef,
    NonBreakingChange,
)
from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)


def build_report(
    breaking_changes: list[BreakingChange],
    non_breaking_changes: list[NonBreakingChange],
    docs: Iterable[DocumentRef | Mapping] | None = None,
    migration_guide: str | None = None,
    enhanced: bool = False,
) -> BreakingChangeReport:
    """Assemble a report and apply the version-bump policy.

    Documentation is only searched when there are breaking changes.

    Args:
        breaking_changes: All breaking changes, static first.
        non_breaking_changes: All additive or compatible changes.
        docs: Optional documentation corpus.
        migration_guide: Optional Markdown migration guide.
        enhanced: Whether the behavioral-change enhancer ran successfully.

    Returns:
        The complete report.
    """
    affected: list[str] = []
    if docs is not None and breaking_changes:
        affected = annotate_documentation_impact(breaking_changes, docs)

    return BreakingChangeReport(
        has_breaking_changes=bool(breaking_changes),
        breaking_changes=breaking_changes,
        non_breaking_changes=non_breaking_changes,
        suggested_version_bump=suggest_version_bump(
            breaking_changes, non_breaking_changes, enhanced=enhanced
        ),
        affected_documentation=affected,
        migration_guide=migration_guide,
    )


def _static_changes(
    old_code: str, new_code: str, file_path: str
) -> tuple[list[BreakingChange], list[NonBreakingChange]]:
    old_surface = parse_api_surface(old_code, file_path)
    new_surface = parse_api_surface(new_code, file_path)
    return (
        detect_breaking_changes(old_surface, new_surface),
        detect_additive_changes(old_surface, new_surface),
    )


def analyze_breaking_changes(
    old_code: str,
    new_code: str,
    file_path: str,
    docs: Iterable[DocumentRef | Mapping] | None = None,
) -> BreakingChangeReport:
    """Compare two versions of a file using static analysis only.

    Args:
        old_code: Previous source text.
        new_code: Current source text.
        file_path: Path recorded on every change.
        docs: Optional documentation corpus.

    Returns:
        Breaking change report.
    """
    breaking, non_breaking = _static_changes(old_code, new_code, file_path)
    return build_report(breaking, non_breaking, docs)


async def analyze_breaking_changes_with_ai(
    old_code: str,
    new_code: str,
    file_path: str,
    context: AnalysisContext | None = None,
    client: CompletionClient | None = None,
    docs: Iterable[DocumentRef | Mapping] | None = None,
    timeout: float | None = None,
    max_code_chars: int = DEFAULT_MAX_CODE_CHARS,
) -> BreakingChangeReport:
    """Compare two versions of a file, then ask an LLM for behavioral changes.

    Static findings always come first. Any enhancer failure (unavailable
    client, network error, timeout, malformed answer) is logged and the
    static report is returned instead.

    Args:
        old_code: Previous source text.
        new_code: Current source text.
        file_path: Path recorded on every change.
        context: Optional pull request title and body.
        client: Completion client. Defaults to the Anthropic API with
            ``ANTHROPIC_API_KEY``.
        docs: Optional documentation corpus.
        timeout: Optional limit in seconds for the enhancer call.
        max_code_chars: Characters of each version included in the prompt.

    Returns:
        Breaking change report.
    """
    breaking, non_breaking = _static_changes(old_code, new_code, file_path)
    docs = list(docs) if docs is not None else None

    if client is None:
        client = AnthropicClient(api_key=os.environ.get("ANTHROPIC_API_KEY"))

    if not client.is_available():
        logger.warning(
            f"AI provider '{client.name}' is not available, using static analysis only"
        )
        return build_report(breaking, non_breaking, docs)

    enhancer = BehavioralChangeEnhancer(client, max_code_chars=max_code_chars)
    try:
        result = await asyncio.wait_for(
            enhancer.enhance(old_code, new_code, file_path, breaking, context),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"AI breaking change analysis timed out after {timeout}s, using static analysis only"
        )
        return build_report(breaking, non_breaking, docs)
    except Exception as e:
        logger.warning(f"AI breaking change analysis failed, using static analysis only: {e}")
        return build_report(breaking, non_breaking, docs)

    return build_report(
        breaking + result.breaking_changes,
        non_breaking + result.non_breaking_changes,
        docs,
        migration_guide=result.migration_guide,
        enhanced=True,
    )
