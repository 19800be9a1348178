"""Structural diff between two API surfaces.

Declarations are matched by name only, so a rename shows up as a removal
plus an addition. Type comparison is syntactic after normalization.
"""

from surfacecheck.analysis.normalizer import types_equal
from surfacecheck.analysis.severity import classify_severity, migration_hint
from surfacecheck.core.models import (
    ApiSurface,
    BreakingChange,
    BreakingChangeType,
    FunctionSignature,
    InterfaceDefinition,
    NonBreakingChange,
    NonBreakingChangeType,
    TypeDefinition,
)
from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)


def format_function_signature(func: FunctionSignature) -> str:
    """Render a function as a one-line declaration."""
    params = ", ".join(
        f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in func.params
    )
    prefix = "async " if func.is_async else ""
    return f"{prefix}function {func.name}({params}): {func.return_type}"


class SurfaceDiffer:
    """Compares an old and a new API surface of the same file."""

    def __init__(self, old_surface: ApiSurface, new_surface: ApiSurface):
        """Initialize the differ.

        Args:
            old_surface: Surface of the previous version.
            new_surface: Surface of the current version.
        """
        self.old = old_surface
        self.new = new_surface
        self.file_path = old_surface.file_path

    def breaking_changes(self) -> list[BreakingChange]:
        """Detect breaking changes.

        Order is functions, interfaces, types, then removed re-exports, each
        in old-surface declaration order.
        """
        changes: list[BreakingChange] = []

        for old_func in self.old.functions:
            changes.extend(self._diff_function(old_func))
        for old_iface in self.old.interfaces:
            changes.extend(self._diff_interface(old_iface))
        for old_type in self.old.types:
            changes.extend(self._diff_type(old_type))
        changes.extend(self._removed_exports())

        logger.debug(f"Found {len(changes)} breaking changes in {self.file_path}")
        return changes

    def additive_changes(self) -> list[NonBreakingChange]:
        """Detect additions and relaxations that keep existing callers working."""
        changes: list[NonBreakingChange] = []

        for new_func in self.new.functions:
            old_func = self.old.find_function(new_func.name)
            if old_func is None:
                changes.append(
                    self._addition(
                        NonBreakingChangeType.FUNCTION_ADDED,
                        new_func.name,
                        f"Exported function '{new_func.name}' was added",
                        new_func.line_number,
                    )
                )
                continue
            old_params = {p.name for p in old_func.params}
            for param in new_func.params:
                if param.name not in old_params and param.optional:
                    changes.append(
                        self._addition(
                            NonBreakingChangeType.PARAMETER_ADDED_OPTIONAL,
                            f"{new_func.name}.{param.name}",
                            f"New optional parameter '{param.name}' added to '{new_func.name}'",
                            new_func.line_number,
                        )
                    )

        for new_iface in self.new.interfaces:
            old_iface = self.old.find_interface(new_iface.name)
            if old_iface is None:
                changes.append(
                    self._addition(
                        NonBreakingChangeType.INTERFACE_ADDED,
                        new_iface.name,
                        f"Exported interface '{new_iface.name}' was added",
                        new_iface.line_number,
                    )
                )
                continue
            old_props = {p.name: p for p in old_iface.properties}
            for prop in new_iface.properties:
                old_prop = old_props.get(prop.name)
                if old_prop is None:
                    changes.append(
                        self._addition(
                            NonBreakingChangeType.PROPERTY_ADDED,
                            f"{new_iface.name}.{prop.name}",
                            f"Property '{prop.name}' added to interface '{new_iface.name}'",
                            new_iface.line_number,
                        )
                    )
                elif prop.optional and not old_prop.optional:
                    changes.append(
                        self._addition(
                            NonBreakingChangeType.PROPERTY_MADE_OPTIONAL,
                            f"{new_iface.name}.{prop.name}",
                            f"Property '{prop.name}' in '{new_iface.name}' changed from required to optional",
                            new_iface.line_number,
                        )
                    )

        for new_type in self.new.types:
            if self.old.find_type(new_type.name) is None:
                changes.append(
                    self._addition(
                        NonBreakingChangeType.TYPE_ADDED,
                        new_type.name,
                        f"Exported type '{new_type.name}' was added",
                        new_type.line_number,
                    )
                )

        return changes

    def _diff_function(self, old_func: FunctionSignature) -> list[BreakingChange]:
        new_func = self.new.find_function(old_func.name)
        name = old_func.name

        if new_func is None:
            return [
                self._change(
                    BreakingChangeType.FUNCTION_REMOVED,
                    name,
                    f"Exported function '{name}' was removed",
                    old_func.line_number,
                    previous_value=format_function_signature(old_func),
                )
            ]

        changes: list[BreakingChange] = []
        line = new_func.line_number
        new_params = {p.name: p for p in new_func.params}
        old_names = {p.name for p in old_func.params}

        for old_param in old_func.params:
            new_param = new_params.get(old_param.name)
            if new_param is None:
                changes.append(
                    self._change(
                        BreakingChangeType.PARAMETER_REMOVED,
                        f"{name}.{old_param.name}",
                        f"Parameter '{old_param.name}' was removed from '{name}'",
                        line,
                        previous_value=f"{old_param.name}: {old_param.type}",
                        symbol=name,
                        member=old_param.name,
                    )
                )
            elif not types_equal(old_param.type, new_param.type):
                changes.append(
                    self._change(
                        BreakingChangeType.PARAMETER_TYPE_CHANGED,
                        f"{name}.{old_param.name}",
                        f"Type of parameter '{old_param.name}' in '{name}' changed "
                        f"from '{old_param.type}' to '{new_param.type}'",
                        line,
                        previous_value=old_param.type,
                        current_value=new_param.type,
                        symbol=name,
                        member=old_param.name,
                    )
                )

        for new_param in new_func.params:
            if new_param.name in old_names or new_param.optional:
                continue
            changes.append(
                self._change(
                    BreakingChangeType.PARAMETER_ADDED_REQUIRED,
                    f"{name}.{new_param.name}",
                    f"New required parameter '{new_param.name}' added to '{name}'",
                    line,
                    current_value=f"{new_param.name}: {new_param.type}",
                    symbol=name,
                    member=new_param.name,
                )
            )

        if not types_equal(old_func.return_type, new_func.return_type):
            changes.append(
                self._change(
                    BreakingChangeType.RETURN_TYPE_CHANGED,
                    name,
                    f"Return type of '{name}' changed from "
                    f"'{old_func.return_type}' to '{new_func.return_type}'",
                    line,
                    previous_value=old_func.return_type,
                    current_value=new_func.return_type,
                )
            )

        return changes

    def _diff_interface(self, old_iface: InterfaceDefinition) -> list[BreakingChange]:
        new_iface = self.new.find_interface(old_iface.name)
        name = old_iface.name

        if new_iface is None:
            return [
                self._change(
                    BreakingChangeType.INTERFACE_REMOVED,
                    name,
                    f"Exported interface '{name}' was removed",
                    old_iface.line_number,
                )
            ]

        changes: list[BreakingChange] = []
        line = new_iface.line_number
        new_props = {p.name: p for p in new_iface.properties}

        for old_prop in old_iface.properties:
            new_prop = new_props.get(old_prop.name)
            member = old_prop.name
            if new_prop is None:
                changes.append(
                    self._change(
                        BreakingChangeType.INTERFACE_PROPERTY_REMOVED,
                        f"{name}.{member}",
                        f"Property '{member}' was removed from interface '{name}'",
                        line,
                        previous_value=f"{member}: {old_prop.type}",
                        symbol=name,
                        member=member,
                    )
                )
                continue
            if not types_equal(old_prop.type, new_prop.type):
                changes.append(
                    self._change(
                        BreakingChangeType.INTERFACE_PROPERTY_TYPE_CHANGED,
                        f"{name}.{member}",
                        f"Type of property '{member}' in '{name}' changed "
                        f"from '{old_prop.type}' to '{new_prop.type}'",
                        line,
                        previous_value=old_prop.type,
                        current_value=new_prop.type,
                        symbol=name,
                        member=member,
                    )
                )
            elif old_prop.optional and not new_prop.optional:
                changes.append(
                    self._change(
                        BreakingChangeType.INTERFACE_PROPERTY_REQUIRED,
                        f"{name}.{member}",
                        f"Property '{member}' in '{name}' changed from optional to required",
                        line,
                        previous_value=f"{member}?: {old_prop.type}",
                        current_value=f"{member}: {new_prop.type}",
                        symbol=name,
                        member=member,
                    )
                )

        return changes

    def _diff_type(self, old_type: TypeDefinition) -> list[BreakingChange]:
        new_type = self.new.find_type(old_type.name)
        name = old_type.name

        if new_type is None:
            return [
                self._change(
                    BreakingChangeType.TYPE_REMOVED,
                    name,
                    f"Exported type '{name}' was removed",
                    old_type.line_number,
                    previous_value=old_type.definition,
                )
            ]

        if types_equal(old_type.definition, new_type.definition):
            return []

        return [
            self._change(
                BreakingChangeType.TYPE_CHANGED,
                name,
                f"Definition of type '{name}' changed",
                new_type.line_number,
                previous_value=old_type.definition,
                current_value=new_type.definition,
            )
        ]

    def _removed_exports(self) -> list[BreakingChange]:
        changes: list[BreakingChange] = []
        still_exported = set(self.new.exports)
        seen: set[str] = set()

        for name in self.old.exports:
            if name in seen or name in still_exported or self._declared_in_new(name):
                continue
            seen.add(name)
            changes.append(
                self._change(
                    BreakingChangeType.EXPORT_REMOVED,
                    name,
                    f"Re-export of '{name}' was removed",
                    0,
                    previous_value=name,
                )
            )

        return changes

    def _declared_in_new(self, name: str) -> bool:
        return (
            self.new.find_function(name) is not None
            or self.new.find_interface(name) is not None
            or self.new.find_type(name) is not None
        )

    def _change(
        self,
        change_type: BreakingChangeType,
        name: str,
        description: str,
        line_number: int,
        previous_value: str | None = None,
        current_value: str | None = None,
        symbol: str | None = None,
        member: str = "",
    ) -> BreakingChange:
        return BreakingChange(
            type=change_type,
            name=name,
            description=description,
            file_path=self.file_path,
            line_number=line_number,
            severity=classify_severity(change_type),
            previous_value=previous_value,
            current_value=current_value,
            migration_hint=migration_hint(change_type, symbol or name, member),
        )

    def _addition(
        self,
        change_type: NonBreakingChangeType,
        name: str,
        description: str,
        line_number: int,
    ) -> NonBreakingChange:
        return NonBreakingChange(
            type=change_type,
            name=name,
            description=description,
            file_path=self.file_path,
            line_number=line_number,
        )


def detect_breaking_changes(
    old_surface: ApiSurface, new_surface: ApiSurface
) -> list[BreakingChange]:
    """Detect breaking changes between two surfaces of the same file.

    Args:
        old_surface: Surface of the previous version.
        new_surface: Surface of the current version.

    Returns:
        Breaking changes with severity and migration hints attached.
    """
    return SurfaceDiffer(old_surface, new_surface).breaking_changes()


def detect_additive_changes(
    old_surface: ApiSurface, new_surface: ApiSurface
) -> list[NonBreakingChange]:
    """Detect additive changes between two surfaces of the same file."""
    return SurfaceDiffer(old_surface, new_surface).additive_changes()
