"""LLM-assisted detection of behavioral changes that static diffing misses."""

import asyncio
import json
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from surfacecheck.analysis.scanner import find_matching
from surfacecheck.analysis.severity import migration_hint
from surfacecheck.core.models import (
    AnalysisContext,
    BreakingChange,
    BreakingChangeType,
    ChangeSeverity,
    NonBreakingChange,
    NonBreakingChangeType,
)
from surfacecheck.errors import EnhancerError, NetworkError, ResponseParseError
from surfacecheck.utils.http import AsyncHttpClient
from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_MAX_CODE_CHARS = 3000
ANTHROPIC_API_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


class AIProvider(str, Enum):
    """Supported completion providers."""

    CLAUDE = "claude"
    ANTHROPIC = "anthropic"
    NONE = "none"


class CompletionClient(ABC):
    """A text completion collaborator."""

    name: str = "completion"

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this client can be used.

        Returns:
            True if available.
        """
        pass

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the raw text answer.

        Raises:
            EnhancerError: If the provider fails.
        """
        pass


class ClaudeCliClient(CompletionClient):
    """Completion client using the Claude CLI."""

    name = "claude"

    def __init__(self, model: str = DEFAULT_MODEL):
        """Initialize the client.

        Args:
            model: Claude model to use.
        """
        self._model = model
        self._cli_path: str | None = None

    def is_available(self) -> bool:
        """Check if the Claude CLI is on PATH."""
        self._cli_path = shutil.which("claude")
        return self._cli_path is not None

    async def complete(self, prompt: str) -> str:
        """Call the Claude CLI with the prompt on stdin."""
        process = await asyncio.create_subprocess_exec(
            self._cli_path or "claude",
            "--print",
            "--model", self._model,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            stdout, stderr = await process.communicate(prompt.encode())
        except asyncio.CancelledError:
            # Timeouts cancel us; the child must not outlive the request
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if process.returncode != 0:
            raise EnhancerError(self.name, stderr.decode().strip())

        return stdout.decode()


class AnthropicClient(CompletionClient):
    """Completion client using the Anthropic Messages API."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        base_url: str = ANTHROPIC_API_URL,
        timeout: float = AsyncHttpClient.DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Anthropic API key.
            model: Model to use.
            max_tokens: Maximum tokens in the answer.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport for testing.
        """
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def is_available(self) -> bool:
        """Available when an API key is configured."""
        return bool(self._api_key)

    async def complete(self, prompt: str) -> str:
        """Send the prompt as a single user message."""
        headers = {
            "x-api-key": self._api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            async with AsyncHttpClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            ) as http:
                data = await http.post_json("/v1/messages", json=payload)
        except httpx.HTTPError as e:
            raise NetworkError("Anthropic API", e) from e

        blocks = data.get("content") if isinstance(data, dict) else None
        text = "".join(
            block.get("text", "")
            for block in blocks or []
            if isinstance(block, dict) and block.get("type") == "text"
        )
        if not text:
            raise EnhancerError(self.name, "response contained no text content")
        return text


class NoOpClient(CompletionClient):
    """Client used when AI analysis is disabled."""

    name = "none"

    def is_available(self) -> bool:
        """Never available."""
        return False

    async def complete(self, prompt: str) -> str:
        """Always fails."""
        raise EnhancerError(self.name, "AI analysis is disabled")


def get_completion_client(
    provider: AIProvider,
    model: str | None = None,
    api_key: str | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> CompletionClient:
    """Get a completion client for the specified provider.

    Args:
        provider: Provider to use.
        model: Optional model override.
        api_key: API key for the Anthropic provider.
        max_tokens: Maximum answer tokens for the Anthropic provider.

    Returns:
        Completion client instance.
    """
    if provider == AIProvider.CLAUDE:
        return ClaudeCliClient(model=model or DEFAULT_MODEL)
    elif provider == AIProvider.ANTHROPIC:
        return AnthropicClient(
            api_key=api_key, model=model or DEFAULT_MODEL, max_tokens=max_tokens
        )
    else:
        return NoOpClient()


def extract_json_object(text: str) -> dict:
    """Parse the first balanced ``{...}`` block in ``text``.

    Raises:
        ResponseParseError: If there is no balanced object or it is not valid JSON.
    """
    start = text.find("{")
    if start == -1:
        raise ResponseParseError("no JSON object found")

    end = find_matching(text, start)
    if end is None:
        raise ResponseParseError("unbalanced braces")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ResponseParseError(str(e)) from e

    if not isinstance(data, dict):
        raise ResponseParseError("top-level value is not an object")
    return data


class _PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AIBreakingFinding(_PayloadModel):
    """A breaking change reported by the model."""

    type: str = BreakingChangeType.BEHAVIOR_CHANGE.value
    name: str
    description: str = ""
    severity: str = ChangeSeverity.MAJOR.value
    migration_hint: str | None = None


class AINonBreakingFinding(_PayloadModel):
    """A non-breaking change reported by the model."""

    type: str = NonBreakingChangeType.IMPROVEMENT.value
    name: str
    description: str = ""


class EnhancerPayload(_PayloadModel):
    """The JSON object the model is asked to answer with."""

    additional_breaking: list[AIBreakingFinding] = []
    non_breaking: list[AINonBreakingFinding] = []
    migration_guide: str | None = None

    @field_validator("additional_breaking", "non_breaking", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        """Treat null lists as empty."""
        return [] if v is None else v


@dataclass
class EnhancementResult:
    """Findings added by the enhancer."""

    breaking_changes: list[BreakingChange] = field(default_factory=list)
    non_breaking_changes: list[NonBreakingChange] = field(default_factory=list)
    migration_guide: str | None = None
    raw_response: str | None = None


class BehavioralChangeEnhancer:
    """Asks a completion client for changes that static analysis cannot see.

    Behavioral changes (same signature, different behavior), error handling,
    default values and side effects are reported as additional breaking
    changes; new features and improvements as non-breaking ones.
    """

    def __init__(
        self,
        client: CompletionClient,
        max_code_chars: int = DEFAULT_MAX_CODE_CHARS,
    ):
        """Initialize the enhancer.

        Args:
            client: Completion client to query.
            max_code_chars: Characters of each code version included in the prompt.
        """
        self.client = client
        self.max_code_chars = max_code_chars

    def build_prompt(
        self,
        old_code: str,
        new_code: str,
        file_path: str,
        static_changes: list[BreakingChange],
        context: AnalysisContext | None = None,
    ) -> str:
        """Format the analysis prompt."""
        context_lines = []
        if context and context.pr_title:
            context_lines.append(f"PR Title: {context.pr_title}")
        if context and context.pr_body:
            context_lines.append(f"PR Description: {context.pr_body}")

        if static_changes:
            static_summary = "\n".join(
                f"- {c.type.value}: {c.description}" for c in static_changes
            )
        else:
            static_summary = "No breaking changes detected by static analysis"

        limit = self.max_code_chars
        header = "\n".join([f"File: {file_path}", *context_lines])

        return f"""Analyze these code changes for breaking API changes and behavioral changes that static analysis might miss.

{header}

OLD CODE:
```
{old_code[:limit]}
```

NEW CODE:
```
{new_code[:limit]}
```

STATIC ANALYSIS FOUND:
{static_summary}

Identify any additional breaking changes the static analysis missed, especially:
1. Behavioral changes (same signature, different behavior)
2. Error handling changes
3. Default value changes
4. Side effect changes

Also identify non-breaking changes (new features, improvements).

Return JSON:
{{
  "additionalBreaking": [{{ "type": "behavior_change|default_changed|error_changed", "name": "...", "description": "...", "severity": "critical|major|minor", "migrationHint": "..." }}],
  "nonBreaking": [{{ "type": "new_feature|improvement|refactor", "name": "...", "description": "..." }}],
  "migrationGuide": "Markdown migration guide if there are breaking changes"
}}
"""

    async def enhance(
        self,
        old_code: str,
        new_code: str,
        file_path: str,
        static_changes: list[BreakingChange],
        context: AnalysisContext | None = None,
    ) -> EnhancementResult:
        """Query the client and convert its answer into changes.

        Raises:
            EnhancerError: If the client is unavailable or fails.
            NetworkError: If the API cannot be reached.
            ResponseParseError: If the answer holds no valid JSON object.
        """
        if not self.client.is_available():
            raise EnhancerError(self.client.name, "client is not available")

        prompt = self.build_prompt(old_code, new_code, file_path, static_changes, context)
        logger.debug(f"Sending {len(prompt)} character prompt to {self.client.name}")
        response = await self.client.complete(prompt)
        return self.parse_response(response, file_path)

    def parse_response(self, response: str, file_path: str) -> EnhancementResult:
        """Convert a raw model answer into an enhancement result.

        Unknown change types become ``behavior_change`` / ``improvement`` and
        unknown severities become ``major``. Findings carry line number 0.

        Raises:
            ResponseParseError: If the answer holds no valid JSON object.
        """
        data = extract_json_object(response)
        try:
            payload = EnhancerPayload.model_validate(data)
        except ValidationError as e:
            raise ResponseParseError(f"unexpected payload shape: {e.error_count()} errors") from e

        breaking = [
            self._to_breaking_change(finding, file_path)
            for finding in payload.additional_breaking
        ]
        non_breaking = [
            NonBreakingChange(
                type=_coerce(NonBreakingChangeType, finding.type, NonBreakingChangeType.IMPROVEMENT),
                name=finding.name,
                description=finding.description,
                file_path=file_path,
                line_number=0,
            )
            for finding in payload.non_breaking
        ]

        return EnhancementResult(
            breaking_changes=breaking,
            non_breaking_changes=non_breaking,
            migration_guide=payload.migration_guide or None,
            raw_response=response,
        )

    @staticmethod
    def _to_breaking_change(finding: AIBreakingFinding, file_path: str) -> BreakingChange:
        change_type = _coerce(
            BreakingChangeType, finding.type, BreakingChangeType.BEHAVIOR_CHANGE
        )
        return BreakingChange(
            type=change_type,
            name=finding.name,
            description=finding.description,
            file_path=file_path,
            line_number=0,
            severity=_coerce(ChangeSeverity, finding.severity, ChangeSeverity.MAJOR),
            migration_hint=finding.migration_hint or migration_hint(change_type, finding.name),
        )


def _coerce(enum_cls, value: str, default):
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} '{value}', using {default.value}")
        return default
