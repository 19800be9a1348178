"""Core data models for surfacecheck.

Attributes are snake_case in Python. Every model serializes to the camelCase
names consumed by downstream tooling (``model_dump(by_alias=True)``) and
accepts either spelling on input.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChangeSeverity(str, Enum):
    """Severity of a detected change."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class VersionBump(str, Enum):
    """Semantic version bump suggested by a report."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


class BreakingChangeType(str, Enum):
    """Types of breaking changes between two API surfaces."""

    FUNCTION_REMOVED = "function_removed"
    FUNCTION_SIGNATURE_CHANGED = "function_signature_changed"
    PARAMETER_ADDED_REQUIRED = "parameter_added_required"
    PARAMETER_REMOVED = "parameter_removed"
    PARAMETER_TYPE_CHANGED = "parameter_type_changed"
    RETURN_TYPE_CHANGED = "return_type_changed"
    INTERFACE_REMOVED = "interface_removed"
    INTERFACE_PROPERTY_REMOVED = "interface_property_removed"
    INTERFACE_PROPERTY_TYPE_CHANGED = "interface_property_type_changed"
    INTERFACE_PROPERTY_REQUIRED = "interface_property_required"
    TYPE_REMOVED = "type_removed"
    TYPE_CHANGED = "type_changed"
    EXPORT_REMOVED = "export_removed"
    # Reported only by the behavioral-change enhancer
    BEHAVIOR_CHANGE = "behavior_change"
    DEFAULT_CHANGED = "default_changed"
    ERROR_CHANGED = "error_changed"


class NonBreakingChangeType(str, Enum):
    """Types of additive or otherwise compatible changes."""

    FUNCTION_ADDED = "function_added"
    INTERFACE_ADDED = "interface_added"
    TYPE_ADDED = "type_added"
    PARAMETER_ADDED_OPTIONAL = "parameter_added_optional"
    PROPERTY_ADDED = "property_added"
    PROPERTY_MADE_OPTIONAL = "property_made_optional"
    # Reported only by the behavioral-change enhancer
    NEW_FEATURE = "new_feature"
    IMPROVEMENT = "improvement"
    REFACTOR = "refactor"


class _WireModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _SurfaceModel(_WireModel):
    """Immutable part of an extracted API surface."""

    model_config = ConfigDict(frozen=True)


class Parameter(_SurfaceModel):
    """A single function parameter."""

    name: str
    type: str = "unknown"
    optional: bool = False


class Property(_SurfaceModel):
    """A single interface property."""

    name: str
    type: str = "unknown"
    optional: bool = False


class FunctionSignature(_SurfaceModel):
    """An exported function declaration or arrow function binding."""

    name: str
    params: list[Parameter] = Field(default_factory=list)
    return_type: str = "void"
    exported: bool = True
    is_async: bool = Field(default=False, alias="async")
    line_number: int = Field(default=1, ge=0)


class InterfaceDefinition(_SurfaceModel):
    """An exported interface declaration."""

    name: str
    properties: list[Property] = Field(default_factory=list)
    methods: list[FunctionSignature] = Field(default_factory=list)
    extends: list[str] = Field(default_factory=list)
    exported: bool = True
    line_number: int = Field(default=1, ge=0)


class TypeDefinition(_SurfaceModel):
    """An exported type alias with its raw right-hand side."""

    name: str
    definition: str
    exported: bool = True
    line_number: int = Field(default=1, ge=0)


class ApiSurface(_SurfaceModel):
    """Structural model of a source file's exported API."""

    functions: list[FunctionSignature] = Field(default_factory=list)
    interfaces: list[InterfaceDefinition] = Field(default_factory=list)
    types: list[TypeDefinition] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    file_path: str

    def find_function(self, name: str) -> FunctionSignature | None:
        """Return the first function declared with ``name``."""
        return next((f for f in self.functions if f.name == name), None)

    def find_interface(self, name: str) -> InterfaceDefinition | None:
        """Return the first interface declared with ``name``."""
        return next((i for i in self.interfaces if i.name == name), None)

    def find_type(self, name: str) -> TypeDefinition | None:
        """Return the first type alias declared with ``name``."""
        return next((t for t in self.types if t.name == name), None)


class BreakingChange(_WireModel):
    """A change that is incompatible with existing callers."""

    type: BreakingChangeType
    name: str
    description: str
    file_path: str
    line_number: int = Field(default=0, ge=0)
    severity: ChangeSeverity
    previous_value: str | None = None
    current_value: str | None = None
    migration_hint: str | None = None
    affected_documentation: list[str] | None = None


class NonBreakingChange(_WireModel):
    """An additive or otherwise compatible change."""

    type: NonBreakingChangeType
    name: str
    description: str
    file_path: str
    line_number: int = Field(default=0, ge=0)


class BreakingChangeReport(_WireModel):
    """Complete result of comparing two versions of a file."""

    has_breaking_changes: bool = False
    breaking_changes: list[BreakingChange] = Field(default_factory=list)
    non_breaking_changes: list[NonBreakingChange] = Field(default_factory=list)
    suggested_version_bump: VersionBump = VersionBump.PATCH
    affected_documentation: list[str] = Field(default_factory=list)
    migration_guide: str | None = None


class DocumentRef(_WireModel):
    """A read-only documentation corpus entry."""

    path: str
    content: str
    type: str = "unknown"


class AnalysisContext(_WireModel):
    """Optional pull request context passed to the enhancer."""

    pr_title: str | None = None
    pr_body: str | None = None
