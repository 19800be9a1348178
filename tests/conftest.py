"""Pytest configuration and fixtures for surfacecheck tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from surfacecheck.core.models import DocumentRef


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that change configuration."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("SURFACECHECK_AI_PROVIDER", raising=False)


@pytest.fixture
def old_source() -> str:
    """Return version 1 of a small TypeScript module."""
    return """import { db } from './db';

export interface User {
  id: string;
  name: string;
  email?: string;
}

export type UserId = string;
export type Status = 'pending' | 'active';

export function getUser(id: string): Promise<User> {
  return db.find(id);
}

export function deleteUser(id: string): void {
  db.remove(id);
}

export const formatName = (user: User): string => user.name;

export { db as database };
"""


@pytest.fixture
def new_source() -> str:
    """Return version 2 of the module with breaking and additive changes."""
    return """import { db } from './db';

export interface User {
  id: string;
  name: string;
  email: string;
  avatarUrl?: string;
}

export type UserId = string;
export type Status = 'pending' | 'active' | 'archived';

export function getUser(id: string, tenant: string): Promise<User> {
  return db.find(tenant, id);
}

export const formatName = (user: User, short?: boolean): string => user.name;

export function listUsers(): Promise<User[]> {
  return db.all();
}
"""


@pytest.fixture
def docs() -> list[DocumentRef]:
    """Return a small documentation corpus."""
    return [
        DocumentRef(
            path="docs/users.md",
            content="Call `deleteUser(id)` to remove an account.",
            type="markdown",
        ),
        DocumentRef(
            path="docs/intro.md",
            content="Welcome to the project.",
            type="markdown",
        ),
        DocumentRef(
            path="docs/api.md",
            content="getUser returns a User. See also database helpers.",
            type="markdown",
        ),
    ]
