"""
Shared fixtures for unit tests.

RecordingHost is an in-memory RepositoryHost that records every call,
so tests can assert exactly which GitHub operations an upload issued.
"""

from typing import Optional
from unittest.mock import MagicMock

import pytest

from gitcloud.core.storage.models import StorageUnit, StoredFile


def make_response(status_code: int = 200, payload=None) -> MagicMock:
    """Stand-in for a requests.Response; no payload means an empty body."""
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    return response


class RecordingHost:
    """
    Repository host double.

    `repos` is the newest-first listing GitHub would return.
    `failures` maps an operation name ("list", "create", "get",
    "create_file") to the exception that call should raise.
    """

    def __init__(
        self,
        repos: Optional[list[StorageUnit]] = None,
        default_branch: Optional[str] = "main",
        commit_sha: Optional[str] = "c0ffee",
        failures: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.repos = list(repos or [])
        self.default_branch = default_branch
        self.commit_sha = commit_sha
        self.failures = failures or {}
        self.calls: list[tuple] = []
        self.files: dict[tuple[str, str], str] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def calls_named(self, operation: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == operation]

    async def list_recent_repositories(self, limit: int) -> list[StorageUnit]:
        self.calls.append(("list", limit))
        self._maybe_fail("list")
        return self.repos[:limit]

    async def create_repository(self, name: str, private: bool = True) -> StorageUnit:
        self.calls.append(("create", name, private))
        self._maybe_fail("create")
        unit = StorageUnit(name=name)
        self.repos.insert(0, unit)
        return unit

    async def get_repository(self, owner: str, name: str) -> StorageUnit:
        self.calls.append(("get", owner, name))
        self._maybe_fail("get")
        return StorageUnit(name=name, default_branch=self.default_branch)

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
    ) -> StoredFile:
        self.calls.append(("create_file", owner, repo, path, message))
        self._maybe_fail("create_file")
        self.files[(repo, path)] = content_base64
        return StoredFile(repo=repo, path=path, commit_sha=self.commit_sha)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()
