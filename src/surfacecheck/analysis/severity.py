"""Severity classification, migration hints and version-bump policy."""

from collections.abc import Iterable

from surfacecheck.core.models import (
    BreakingChange,
    BreakingChangeType,
    ChangeSeverity,
    NonBreakingChange,
    VersionBump,
)

SEVERITY_BY_TYPE: dict[BreakingChangeType, ChangeSeverity] = {
    BreakingChangeType.FUNCTION_REMOVED: ChangeSeverity.CRITICAL,
    BreakingChangeType.INTERFACE_REMOVED: ChangeSeverity.CRITICAL,
    BreakingChangeType.TYPE_REMOVED: ChangeSeverity.CRITICAL,
    BreakingChangeType.EXPORT_REMOVED: ChangeSeverity.CRITICAL,
    BreakingChangeType.FUNCTION_SIGNATURE_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.PARAMETER_ADDED_REQUIRED: ChangeSeverity.MAJOR,
    BreakingChangeType.PARAMETER_REMOVED: ChangeSeverity.MAJOR,
    BreakingChangeType.PARAMETER_TYPE_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.RETURN_TYPE_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.INTERFACE_PROPERTY_REMOVED: ChangeSeverity.MAJOR,
    BreakingChangeType.INTERFACE_PROPERTY_TYPE_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.INTERFACE_PROPERTY_REQUIRED: ChangeSeverity.MAJOR,
    BreakingChangeType.TYPE_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.BEHAVIOR_CHANGE: ChangeSeverity.MAJOR,
    BreakingChangeType.DEFAULT_CHANGED: ChangeSeverity.MAJOR,
    BreakingChangeType.ERROR_CHANGED: ChangeSeverity.MAJOR,
}

# Format fields: {symbol} is the declaration, {member} the parameter or property
MIGRATION_HINTS: dict[BreakingChangeType, str] = {
    BreakingChangeType.FUNCTION_REMOVED: "Remove usage of '{symbol}' or find a replacement",
    BreakingChangeType.FUNCTION_SIGNATURE_CHANGED: "Update calls to '{symbol}' to match its new signature",
    BreakingChangeType.PARAMETER_ADDED_REQUIRED: "Add '{member}' argument when calling '{symbol}'",
    BreakingChangeType.PARAMETER_REMOVED: "Remove '{member}' argument when calling '{symbol}'",
    BreakingChangeType.PARAMETER_TYPE_CHANGED: "Update '{member}' argument type when calling '{symbol}'",
    BreakingChangeType.RETURN_TYPE_CHANGED: "Update code that depends on '{symbol}' return value",
    BreakingChangeType.INTERFACE_REMOVED: "Remove usage of '{symbol}' interface or find a replacement",
    BreakingChangeType.INTERFACE_PROPERTY_REMOVED: "Remove '{member}' from objects implementing '{symbol}'",
    BreakingChangeType.INTERFACE_PROPERTY_TYPE_CHANGED: (
        "Update type of '{member}' in objects implementing '{symbol}'"
    ),
    BreakingChangeType.INTERFACE_PROPERTY_REQUIRED: (
        "Ensure '{member}' is provided in all objects implementing '{symbol}'"
    ),
    BreakingChangeType.TYPE_REMOVED: "Remove usage of '{symbol}' type or find a replacement",
    BreakingChangeType.TYPE_CHANGED: "Review usage of '{symbol}' for compatibility",
    BreakingChangeType.EXPORT_REMOVED: "Stop importing '{symbol}' from this module or find a replacement",
    BreakingChangeType.BEHAVIOR_CHANGE: "Review callers of '{symbol}' for changed behavior",
    BreakingChangeType.DEFAULT_CHANGED: "Pass the previous default to '{symbol}' explicitly if you relied on it",
    BreakingChangeType.ERROR_CHANGED: "Review error handling around calls to '{symbol}'",
}


def classify_severity(change_type: BreakingChangeType) -> ChangeSeverity:
    """Return the severity of a change type.

    Removals are critical; every other breaking change is major.
    """
    return SEVERITY_BY_TYPE.get(change_type, ChangeSeverity.MAJOR)


def migration_hint(change_type: BreakingChangeType, symbol: str, member: str = "") -> str:
    """Render the migration hint for a change type.

    Args:
        change_type: Type of breaking change.
        symbol: Name of the affected declaration.
        member: Name of the affected parameter or property, if any.

    Returns:
        Actionable hint sentence.
    """
    template = MIGRATION_HINTS.get(change_type, "Review usage of '{symbol}'")
    return template.format(symbol=symbol, member=member)


def suggest_version_bump(
    breaking_changes: Iterable[BreakingChange],
    non_breaking_changes: Iterable[NonBreakingChange] = (),
    enhanced: bool = False,
) -> VersionBump:
    """Map a set of changes to a semantic version bump.

    1. Any critical change: major.
    2. Any breaking change: major.
    3. No breaking change but at least one non-breaking change: minor.
    4. Otherwise patch, or none when the enhancer ran and found nothing.

    Args:
        breaking_changes: Breaking changes in the report.
        non_breaking_changes: Additive or compatible changes in the report.
        enhanced: Whether the behavioral-change enhancer ran successfully.

    Returns:
        Suggested version bump.
    """
    breaking = list(breaking_changes)

    if any(change.severity == ChangeSeverity.CRITICAL for change in breaking):
        return VersionBump.MAJOR
    if breaking:
        return VersionBump.MAJOR
    if any(True for _ in non_breaking_changes):
        return VersionBump.MINOR
    return VersionBump.NONE if enhanced else VersionBump.PATCH
