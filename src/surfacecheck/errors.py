"""Exceptions raised by surfacecheck.

Every error carries a short ``message`` and a ``hint`` telling the user what
to try next. The CLI prints both and exits with status 1.
"""


def _with_detail(text: str, detail: object) -> str:
    return f"{text}: {detail}" if detail else text


class SurfacecheckError(Exception):
    """Base exception with a user-facing message and hint.

    Attributes:
        message: What went wrong.
        hint: How to fix it. Falls back to the class's ``default_hint``.
    """

    default_hint = ""

    def __init__(self, message: str, hint: str = "") -> None:
        self.message = message
        self.hint = hint or self.default_hint
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message}\nHint: {self.hint}" if self.hint else self.message


class ConfigurationError(SurfacecheckError):
    """Invalid or unreadable configuration."""


class MissingTokenError(ConfigurationError):
    """An environment variable the selected provider needs is unset."""

    def __init__(self, token_name: str, hint: str = "") -> None:
        self.token_name = token_name
        super().__init__(
            f"Required environment variable {token_name} is not set",
            hint or f"Export {token_name} or pick a different --ai provider.",
        )


class NetworkError(SurfacecheckError):
    """A remote service could not be reached."""

    default_hint = "Check your network connection, proxy settings and API status."

    def __init__(self, service: str, original_error: Exception | None = None) -> None:
        self.service = service
        super().__init__(_with_detail(f"Failed to reach {service}", original_error))


class ResponseParseError(SurfacecheckError):
    """A completion did not contain a usable JSON object."""

    default_hint = "The model must answer with a single JSON object."

    def __init__(self, reason: str = "") -> None:
        super().__init__(_with_detail("Failed to parse completion response", reason))


class EnhancerError(SurfacecheckError):
    """The behavioral-change review could not produce a result."""

    def __init__(self, provider: str, reason: str = "") -> None:
        self.provider = provider
        super().__init__(_with_detail(f"{provider} completion failed", reason))


class AnalysisError(SurfacecheckError):
    """Input that the analyzer cannot process."""
