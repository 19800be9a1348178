"""Exported API surface extraction from TypeScript-style source text.

Recognized declarations:
1. ``export [async] function NAME[<T>](PARAMS)[: RETURN] {``
2. ``export const NAME = [async] [<T>](PARAMS)[: RETURN] =>``
3. ``export interface NAME[<T>] [extends A, B] { BODY }``
4. ``export type NAME[<T>] = DEFINITION;``
5. ``export [type] { a, b as c } [from '...']``

Anything else is skipped. Extraction is best effort and never raises for
unrecognized or malformed source.
"""

import re

from surfacecheck.analysis.scanner import (
    CLOSERS,
    OPENERS,
    QUOTES,
    find_matching,
    find_top_level,
    is_arrow_head,
    line_number_at,
    mask_strings,
    skip_string,
    skip_whitespace,
    split_top_level,
    strip_comments,
)
from surfacecheck.core.models import (
    ApiSurface,
    FunctionSignature,
    InterfaceDefinition,
    Parameter,
    Property,
    TypeDefinition,
)
from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)

_IDENT = r"[A-Za-z_$][\w$]*"

_FUNCTION_RE = re.compile(rf"\bexport\s+(async\s+)?function\s*\*?\s*({_IDENT})\s*")
_ARROW_RE = re.compile(rf"\bexport\s+const\s+({_IDENT})\s*=\s*(async\b\s*)?")
_INTERFACE_RE = re.compile(rf"\bexport\s+interface\s+({_IDENT})\s*")
_TYPE_RE = re.compile(rf"\bexport\s+type\s+({_IDENT})\s*")
_REEXPORT_RE = re.compile(r"\bexport\s+(?:type\s+)?\{([^}]*)\}")
_EXTENDS_RE = re.compile(r"extends\s")
_AS_RE = re.compile(r"\s+as\s+")
_STATEMENT_START_RE = re.compile(
    r"\n\s*(?:export|import|const|let|var|function|class|interface|type|declare|enum)\s+[\w${*]"
)

_MEMBER_NAME_RE = re.compile(rf"^({_IDENT}|'[^']*'|\"[^\"]*\")\s*(\?)?$")
_METHOD_RE = re.compile(rf"^({_IDENT}|'[^']*'|\"[^\"]*\")\s*(\?)?\s*(?=[<(])")

DEFAULT_RETURN_TYPE = "void"
UNKNOWN_TYPE = "unknown"

# A "{" after one of these still belongs to the return type annotation
_TYPE_CONTINUATIONS = ("|", "&", ",", ":", "(", "<", "=>")


class SurfaceExtractor:
    """Extracts the exported API surface of a single source file."""

    def extract(self, source_code: str, file_path: str) -> ApiSurface:
        """Build the API surface of ``source_code``.

        Args:
            source_code: Raw file contents.
            file_path: Path recorded on the surface.

        Returns:
            Extracted API surface.

        Raises:
            TypeError: If either argument is not a string.
        """
        if not isinstance(source_code, str):
            raise TypeError("source_code must be a string")
        if not isinstance(file_path, str):
            raise TypeError("file_path must be a string")

        code = strip_comments(source_code)
        masked = mask_strings(code)

        surface = ApiSurface(
            functions=self._extract_functions(code, masked),
            interfaces=self._extract_interfaces(code, masked),
            types=self._extract_types(code, masked),
            exports=self._extract_exports(code, masked),
            file_path=file_path,
        )
        logger.debug(
            "Extracted %d functions, %d interfaces, %d types, %d re-exports from %s",
            len(surface.functions),
            len(surface.interfaces),
            len(surface.types),
            len(surface.exports),
            file_path,
        )
        return surface

    def _extract_functions(self, code: str, masked: str) -> list[FunctionSignature]:
        """Extract function declarations and exported arrow functions in source order."""
        found: list[tuple[int, FunctionSignature]] = []

        for match in _FUNCTION_RE.finditer(masked):
            signature = self._parse_function_declaration(
                code,
                match.end(),
                name=match.group(2),
                is_async=bool(match.group(1)),
                line_number=line_number_at(code, match.start()),
            )
            if signature:
                found.append((match.start(), signature))

        for match in _ARROW_RE.finditer(masked):
            signature = self._parse_arrow_function(
                code,
                match.end(),
                name=match.group(1),
                is_async=bool(match.group(2)),
                line_number=line_number_at(code, match.start()),
            )
            if signature:
                found.append((match.start(), signature))

        found.sort(key=lambda item: item[0])
        return [signature for _, signature in found]

    def _parse_function_declaration(
        self,
        code: str,
        pos: int,
        name: str,
        is_async: bool,
        line_number: int,
    ) -> FunctionSignature | None:
        """Parse ``[<T>](PARAMS)[: RETURN] {`` following a function name."""
        pos = self._skip_generics(code, pos)
        params = self._read_parameter_list(code, pos)
        if params is None:
            return None
        raw_params, pos = params

        pos = skip_whitespace(code, pos)
        return_type = DEFAULT_RETURN_TYPE
        if code.startswith(":", pos):
            scanned = _scan_return_type(code, pos + 1, arrow=False)
            if scanned is None:
                return None
            return_type, pos = scanned

        if not code.startswith("{", pos):
            return None

        return FunctionSignature(
            name=name,
            params=parse_parameters(raw_params),
            return_type=return_type,
            is_async=is_async,
            line_number=line_number,
        )

    def _parse_arrow_function(
        self,
        code: str,
        pos: int,
        name: str,
        is_async: bool,
        line_number: int,
    ) -> FunctionSignature | None:
        """Parse ``[<T>](PARAMS)[: RETURN] =>`` following ``export const NAME =``."""
        pos = self._skip_generics(code, pos)
        params = self._read_parameter_list(code, pos)
        if params is None:
            return None
        raw_params, pos = params

        pos = skip_whitespace(code, pos)
        return_type = DEFAULT_RETURN_TYPE
        if code.startswith(":", pos):
            scanned = _scan_return_type(code, pos + 1, arrow=True)
            if scanned is None:
                return None
            return_type, pos = scanned

        if not code.startswith("=>", pos):
            return None

        return FunctionSignature(
            name=name,
            params=parse_parameters(raw_params),
            return_type=return_type,
            is_async=is_async,
            line_number=line_number,
        )

    def _skip_generics(self, code: str, pos: int) -> int:
        """Skip a ``<...>`` type parameter list if one starts at ``pos``."""
        pos = skip_whitespace(code, pos)
        if code.startswith("<", pos):
            close = find_matching(code, pos)
            if close is not None:
                return skip_whitespace(code, close + 1)
        return pos

    def _read_parameter_list(self, code: str, pos: int) -> tuple[str, int] | None:
        """Return the raw text inside ``(...)`` at ``pos`` and the index after it."""
        if not code.startswith("(", pos):
            return None
        close = find_matching(code, pos)
        if close is None:
            return None
        return code[pos + 1 : close], close + 1

    def _extract_interfaces(self, code: str, masked: str) -> list[InterfaceDefinition]:
        """Extract exported interface declarations."""
        interfaces: list[InterfaceDefinition] = []

        for match in _INTERFACE_RE.finditer(masked):
            pos = self._skip_generics(code, match.end())

            extends: list[str] = []
            extends_match = _EXTENDS_RE.match(code, pos)
            if extends_match:
                brace = find_top_level(code, "{", extends_match.end())
                if brace == -1:
                    continue
                extends_str = code[extends_match.end() : brace]
                extends = [e.strip() for e in extends_str.split(",") if e.strip()]
                pos = brace

            if not code.startswith("{", pos):
                continue

            close = find_matching(code, pos)
            if close is None:
                logger.debug("Unbalanced body for interface %s", match.group(1))
                body = code[pos + 1 :]
            else:
                body = code[pos + 1 : close]

            line_number = line_number_at(code, match.start())
            properties, methods = parse_interface_body(body, line_number)
            interfaces.append(
                InterfaceDefinition(
                    name=match.group(1),
                    properties=properties,
                    methods=methods,
                    extends=extends,
                    line_number=line_number,
                )
            )

        return interfaces

    def _extract_types(self, code: str, masked: str) -> list[TypeDefinition]:
        """Extract exported type aliases terminated by ``;``."""
        types: list[TypeDefinition] = []

        for match in _TYPE_RE.finditer(masked):
            pos = self._skip_generics(code, match.end())
            if not code.startswith("=", pos) or code.startswith("=>", pos):
                continue

            terminator = find_top_level(code, ";", pos + 1)
            if terminator == -1:
                continue

            definition = code[pos + 1 : terminator].strip()
            if not definition or _STATEMENT_START_RE.search(masked[pos + 1 : terminator]):
                # Unterminated alias ran into the next statement
                continue

            types.append(
                TypeDefinition(
                    name=match.group(1),
                    definition=definition,
                    line_number=line_number_at(code, match.start()),
                )
            )

        return types

    def _extract_exports(self, code: str, masked: str) -> list[str]:
        """Extract local names listed in ``export { ... }`` clauses."""
        exports: list[str] = []

        for match in _REEXPORT_RE.finditer(masked):
            for entry in match.group(1).split(","):
                local = _AS_RE.split(entry.strip())[0].strip()
                if local.startswith("type "):
                    local = local[len("type ") :].strip()
                if local:
                    exports.append(local)

        return exports


def _scan_return_type(code: str, start: int, arrow: bool) -> tuple[str, int] | None:
    """Read a return type annotation starting at ``start``.

    For declarations the annotation ends at the body ``{``; for arrow
    functions it ends at ``=>``. An object-literal type such as
    ``{ a: string }`` is consumed whole.

    Returns:
        The stripped annotation and the index of its terminator, or None.
    """
    type_start = skip_whitespace(code, start)
    depth = 0
    i = type_start
    while i < len(code):
        ch = code[i]
        if ch in QUOTES:
            i = skip_string(code, i)
            continue
        if depth == 0:
            if arrow and code.startswith("=>", i):
                annotation = code[type_start:i].strip()
                return (annotation, i) if annotation else None
            if not arrow and ch == "{":
                annotation = code[type_start:i].strip()
                if annotation and not annotation.endswith(_TYPE_CONTINUATIONS):
                    return annotation, i
            if ch == ";":
                return None
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS and not is_arrow_head(code, i):
            depth -= 1
        i += 1
    return None


def parse_parameters(raw_params: str) -> list[Parameter]:
    """Parse a raw parameter list into structured parameters.

    Args:
        raw_params: Text between the parentheses of a signature.

    Returns:
        Parameters in declaration order; empty for an empty list.
    """
    if not raw_params or not raw_params.strip():
        return []
    parameters = [_parse_parameter(segment) for segment in split_top_level(raw_params)]
    # `this: T` only types the receiver
    return [p for p in parameters if p.name != "this"]


def _parse_parameter(segment: str) -> Parameter:
    is_rest = segment.startswith("...")
    if is_rest:
        segment = segment[3:]

    has_default = False
    equals = find_top_level(segment, "=")
    if equals != -1:
        segment = segment[:equals].strip()
        has_default = True

    colon = find_top_level(segment, ":")
    if colon == -1:
        name_part, type_part = segment, UNKNOWN_TYPE
    else:
        name_part, type_part = segment[:colon], segment[colon + 1 :].strip()

    optional = "?" in name_part or has_default or is_rest
    name = name_part.replace("?", "").strip() or "param"

    return Parameter(name=name, type=type_part or UNKNOWN_TYPE, optional=optional)


def parse_interface_body(
    body: str,
    line_number: int = 1,
) -> tuple[list[Property], list[FunctionSignature]]:
    """Parse an interface body into properties and method-shaped members.

    Members are separated by ``;``, ``,`` or newlines at depth zero. A member
    whose type contains ``=>`` anywhere is method-shaped and never a property.

    Args:
        body: Text between the interface braces.
        line_number: Line recorded on extracted methods.

    Returns:
        Tuple of (properties, methods).
    """
    properties: list[Property] = []
    methods: list[FunctionSignature] = []

    for member in _split_members(body):
        if member.startswith("readonly "):
            member = member[len("readonly ") :].strip()
        if member.startswith(("[", "(", "<", "new ", "new(")):
            # Index, call and construct signatures
            continue

        method_match = _METHOD_RE.match(member)
        if method_match:
            method = _parse_method_member(
                _unquote(method_match.group(1)),
                member[method_match.end() :],
                line_number,
            )
            if method:
                methods.append(method)
            continue

        colon = find_top_level(member, ":")
        if colon == -1:
            continue

        name_match = _MEMBER_NAME_RE.match(member[:colon].strip())
        if not name_match:
            continue

        name = _unquote(name_match.group(1))
        type_value = member[colon + 1 :].strip()
        if "=>" in type_value:
            method = _parse_method_member(name, type_value, line_number)
            if method:
                methods.append(method)
            continue

        if type_value.startswith("|"):
            # Leading pipe of a multi-line union
            type_value = type_value[1:].strip()

        properties.append(
            Property(
                name=name,
                type=type_value or UNKNOWN_TYPE,
                optional=bool(name_match.group(2)),
            )
        )

    return properties, methods


def _split_members(body: str) -> list[str]:
    """Split an interface body into member declarations."""
    members: list[str] = []
    for segment in split_top_level(body, ";,\n"):
        # Leading operators continue multi-line unions and conditional types
        if members and (
            segment.startswith(("|", "&", "?", ":"))
            or members[-1].endswith(("|", "&", ":", "=>"))
        ):
            members[-1] = f"{members[-1]} {segment}"
        else:
            members.append(segment)
    return members


def _parse_method_member(
    name: str,
    signature: str,
    line_number: int,
) -> FunctionSignature | None:
    """Parse ``[<T>](PARAMS): RET`` or ``[<T>](PARAMS) => RET`` for a member."""
    pos = skip_whitespace(signature, 0)
    if signature.startswith("<", pos):
        close = find_matching(signature, pos)
        if close is None:
            return None
        pos = skip_whitespace(signature, close + 1)

    if not signature.startswith("(", pos):
        return None
    close = find_matching(signature, pos)
    if close is None:
        return None

    rest = signature[close + 1 :].strip()
    if rest.startswith("=>"):
        return_type = rest[2:].strip()
    elif rest.startswith(":"):
        return_type = rest[1:].strip()
    else:
        return_type = ""

    return FunctionSignature(
        name=name,
        params=parse_parameters(signature[pos + 1 : close]),
        return_type=return_type or DEFAULT_RETURN_TYPE,
        line_number=line_number,
    )


def _unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "'\"":
        return name[1:-1]
    return name


def parse_api_surface(source_code: str, file_path: str) -> ApiSurface:
    """Convenience function to extract an API surface.

    Args:
        source_code: Raw file contents.
        file_path: Path recorded on the surface.

    Returns:
        Extracted API surface.
    """
    return SurfaceExtractor().extract(source_code, file_path)
