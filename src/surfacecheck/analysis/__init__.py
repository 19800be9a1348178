"""API surface extraction and breaking change analysis engine.

Components:
- scanner: Delimiter-aware, string-aware text scanning primitives
- extractor: Reconstruct the exported API surface of a TypeScript-style file
- normalizer: Canonicalize type expressions for comparison
- differ: Compare two surfaces and classify breaking and additive changes
- severity: Severity, migration hints and version-bump policy
- doc_impact: Find documentation that mentions changed symbols
- ai_reviewer: Optional LLM pass for behavioral changes
- report: Static and AI-enhanced analysis entry points
- report_formatter: Markdown rendering of reports
"""

from surfacecheck.analysis.ai_reviewer import (
    AIProvider,
    AnthropicClient,
    BehavioralChangeEnhancer,
    ClaudeCliClient,
    CompletionClient,
    EnhancementResult,
    NoOpClient,
    extract_json_object,
    get_completion_client,
)
from surfacecheck.analysis.differ import (
    SurfaceDiffer,
    detect_additive_changes,
    detect_breaking_changes,
    format_function_signature,
)
from surfacecheck.analysis.doc_impact import (
    analyze_documentation_impact,
    annotate_documentation_impact,
    load_documents,
)
from surfacecheck.analysis.extractor import (
    SurfaceExtractor,
    parse_api_surface,
    parse_interface_body,
    parse_parameters,
)
from surfacecheck.analysis.normalizer import normalize_type, types_equal
from surfacecheck.analysis.report import (
    analyze_breaking_changes,
    analyze_breaking_changes_with_ai,
    build_report,
)
from surfacecheck.analysis.report_formatter import (
    FormatterConfig,
    ReportFormatter,
    format_report_markdown,
)
from surfacecheck.analysis.scanner import (
    find_matching,
    line_number_at,
    split_top_level,
    strip_comments,
)
from surfacecheck.analysis.severity import (
    SEVERITY_BY_TYPE,
    classify_severity,
    migration_hint,
    suggest_version_bump,
)

__all__ = [
    # AI reviewer
    "AIProvider",
    "AnthropicClient",
    "BehavioralChangeEnhancer",
    "ClaudeCliClient",
    "CompletionClient",
    "EnhancementResult",
    "NoOpClient",
    "extract_json_object",
    "get_completion_client",
    # Differ
    "SurfaceDiffer",
    "detect_additive_changes",
    "detect_breaking_changes",
    "format_function_signature",
    # Documentation impact
    "analyze_documentation_impact",
    "annotate_documentation_impact",
    "load_documents",
    # Extractor
    "SurfaceExtractor",
    "parse_api_surface",
    "parse_interface_body",
    "parse_parameters",
    # Normalizer
    "normalize_type",
    "types_equal",
    # Report
    "analyze_breaking_changes",
    "analyze_breaking_changes_with_ai",
    "build_report",
    "FormatterConfig",
    "ReportFormatter",
    "format_report_markdown",
    # Scanner
    "find_matching",
    "line_number_at",
    "split_top_level",
    "strip_comments",
    # Severity
    "SEVERITY_BY_TYPE",
    "classify_severity",
    "migration_hint",
    "suggest_version_bump",
]
