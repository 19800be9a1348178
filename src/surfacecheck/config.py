"""Configuration management for surfacecheck."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from surfacecheck.errors import ConfigurationError

CONFIG_FILE_NAMES = (".surfacecheck.yml", ".surfacecheck.yaml")


class AnalysisConfig(BaseModel):
    """Configuration for breaking change analysis."""

    ai_provider: str = Field(
        default="none",
        description="AI provider for behavioral change analysis (claude, anthropic, none)",
    )
    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used by the AI provider",
    )
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Time limit for the AI call before falling back to static analysis",
    )
    max_code_chars: int = Field(
        default=3000,
        ge=1,
        description="Characters of each code version sent to the AI provider",
    )
    max_tokens: int = Field(
        default=2000,
        ge=1,
        description="Maximum tokens in the AI answer",
    )
    api_key: str | None = Field(
        default=None,
        description="Anthropic API key (prefer ANTHROPIC_API_KEY env var)",
    )

    @field_validator("ai_provider")
    @classmethod
    def validate_ai_provider(cls, v: str) -> str:
        """Validate AI provider value."""
        allowed = {"claude", "anthropic", "none"}
        if v.lower() not in allowed:
            raise ValueError(f"ai_provider must be one of: {sorted(allowed)}")
        return v.lower()


class DocsConfig(BaseModel):
    """Configuration for the documentation corpus."""

    paths: list[str] = Field(
        default_factory=list,
        description="Files or directories searched for affected documentation",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".md", ".mdx", ".rst", ".txt"],
        description="File extensions included when walking directories",
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["*/node_modules/*", "*/.git/*"],
        description="Glob patterns excluded from the corpus",
    )


class SurfacecheckConfig(BaseModel):
    """Complete surfacecheck configuration."""

    version: int = Field(default=1, description="Configuration file version")
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest .surfacecheck.yml configuration file.

    Searches from start_path up to the root directory.

    Args:
        start_path: Starting directory for search (defaults to cwd).

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return config_path
        if current == current.parent:
            return None
        current = current.parent


def read_config_data(config_path: Path) -> dict[str, Any]:
    """Read raw configuration data from a YAML file.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"YAML parse error in {config_path}: {e}",
            hint="Check the indentation and quoting of the configuration file.",
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {config_path} must contain a mapping",
            hint="Run 'surfacecheck config init' to create a valid file.",
        )
    return data


def load_config(config_path: Path | None = None) -> SurfacecheckConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Defaults

    Args:
        config_path: Path to config file (searches if not provided).

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: If the file or the resulting values are invalid.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path and config_path.exists():
        config_data = read_config_data(config_path)

    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if api_key:
        config_data.setdefault("analysis", {})["api_key"] = api_key

    provider = os.environ.get("SURFACECHECK_AI_PROVIDER")
    if provider:
        config_data.setdefault("analysis", {})["ai_provider"] = provider

    try:
        return SurfacecheckConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)\n{e}",
            hint="Run 'surfacecheck config validate' for details.",
        ) from e


def generate_example_config() -> str:
    """Generate an example configuration file.

    Returns:
        YAML string of example configuration.
    """
    example = """# surfacecheck configuration

version: 1

# Breaking change analysis settings
analysis:
  # AI provider for behavioral change analysis: claude, anthropic, or none
  ai_provider: none
  # Model used by the AI provider
  model: claude-sonnet-4-20250514
  # Seconds before the AI call is abandoned in favor of static results
  timeout_seconds: 120
  # Characters of each code version included in the prompt
  max_code_chars: 3000
  # Maximum tokens in the AI answer
  max_tokens: 2000
  # The Anthropic API key is read from ANTHROPIC_API_KEY

# Documentation corpus searched for affected pages
docs:
  paths:
    - docs
  extensions:
    - .md
    - .mdx
    - .rst
    - .txt
  exclude_patterns:
    - "*/node_modules/*"
    - "*/.git/*"
"""
    return example
