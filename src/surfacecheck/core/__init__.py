"""Core models for surfacecheck."""

from surfacecheck.core.models import (
    AnalysisContext,
    ApiSurface,
    BreakingChange,
    BreakingChangeReport,
    BreakingChangeType,
    ChangeSeverity,
    DocumentRef,
    FunctionSignature,
    InterfaceDefinition,
    NonBreakingChange,
    NonBreakingChangeType,
    Parameter,
    Property,
    TypeDefinition,
    VersionBump,
)

__all__ = [
    "AnalysisContext",
    "ApiSurface",
    "BreakingChange",
    "BreakingChangeReport",
    "BreakingChangeType",
    "ChangeSeverity",
    "DocumentRef",
    "FunctionSignature",
    "InterfaceDefinition",
    "NonBreakingChange",
    "NonBreakingChangeType",
    "Parameter",
    "Property",
    "TypeDefinition",
    "VersionBump",
]
