"""
GitHub REST API client for repository-backed photo storage.

This module provides a thin wrapper around the GitHub REST v3 API that:
1. Implements our RepositoryHost protocol
2. Translates GitHub JSON into our domain models
3. Turns every failure (HTTP or transport) into one error type
4. Enables easy mocking for tests

Only the four calls the uploader needs are covered: list recent
repositories, create a repository, get a repository, create a file.

Mock mode keeps repositories in memory, enabling the full upload flow
without a GitHub account.
"""

import asyncio
import base64
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from ...core.storage.errors import ExternalServiceError
from ...core.storage.models import FALLBACK_BRANCH, StorageUnit, StoredFile

logger = logging.getLogger(__name__)


DEFAULT_API_URL = "https://api.github.com"


class GitHubClientError(ExternalServiceError):
    """Raised when a GitHub API call fails."""
    pass


@dataclass
class GitHubConfig:
    """
    Configuration for the GitHub client.

    The token needs permission to create private repositories and
    write contents for the authenticated account.
    """
    token: str
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 20.0

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("GitHub token is required")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """GitHub timestamps look like 2024-05-01T12:00:00Z."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_storage_unit(data: Any) -> StorageUnit:
    """Translate a repository payload, rejecting anything without a name."""
    try:
        return StorageUnit(
            name=data["name"],
            size_kb=int(data.get("size") or 0),
            default_branch=data.get("default_branch"),
            created_at=_parse_timestamp(data.get("created_at")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise GitHubClientError(
            f"Unexpected repository payload from GitHub: {e!r}",
            data=data,
        ) from e


class GitHubRepositoryClient:
    """
    RepositoryHost implementation backed by GitHub.

    Uses requests because we only make a handful of simple calls.
    Each call runs in a worker thread so the event loop isn't blocked
    while GitHub responds. No retries: a failed call fails the upload.
    """

    def __init__(self, config: GitHubConfig) -> None:
        self._config = config
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

        logger.info(
            "Initialized GitHub client",
            extra={"api_url": config.api_url}
        )

    async def list_recent_repositories(self, limit: int = 10) -> list[StorageUnit]:
        """
        List the authenticated account's newest repositories.

        Only the first page is read. That's enough to find the repository
        we created most recently.
        """
        data = await self._call(
            "GET",
            "/user/repos",
            params={
                "sort": "created",
                "direction": "desc",
                "per_page": limit,
            },
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise GitHubClientError("Expected a repository list from GitHub", data=data)
        return [_to_storage_unit(item) for item in data]

    async def create_repository(self, name: str, private: bool = True) -> StorageUnit:
        data = await self._call(
            "POST",
            "/user/repos",
            json={"name": name, "private": private},
        )
        return _to_storage_unit(data)

    async def get_repository(self, owner: str, name: str) -> StorageUnit:
        data = await self._call("GET", f"/repos/{owner}/{name}")
        return _to_storage_unit(data)

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
    ) -> StoredFile:
        """
        Create a file through the contents API.

        No `sha` is sent, so GitHub rejects the call if the path already
        exists instead of silently overwriting.
        """
        data = await self._call(
            "PUT",
            f"/repos/{owner}/{repo}/contents/{path}",
            json={"message": message, "content": content_base64},
        )
        commit = data.get("commit") if isinstance(data, dict) else None
        sha = commit.get("sha") if isinstance(commit, dict) else None
        return StoredFile(repo=repo, path=path, commit_sha=sha)

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and decode the JSON body."""
        url = f"{self._config.api_url.rstrip('/')}{path}"

        try:
            response = self._session.request(
                method,
                url,
                timeout=self._config.timeout_seconds,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(
                "GitHub request failed",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise GitHubClientError(f"GitHub request failed: {e}") from e

        if response.status_code >= 400:
            data = self._safe_json(response)
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(
                "GitHub API error",
                extra={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "data": data,
                }
            )
            raise GitHubClientError(
                message or f"GitHub API returned {response.status_code}",
                status_code=response.status_code,
                data=data,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise GitHubClientError(
                f"GitHub returned a non-JSON body: {e}",
                status_code=response.status_code,
                data=response.text or None,
            ) from e

    def _safe_json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    def close(self) -> None:
        self._session.close()


# ---------------------------------------------------------------------------
# Mock GitHub for Local Development
# ---------------------------------------------------------------------------

@dataclass
class _MockRepository:
    name: str
    created_at: datetime
    default_branch: str = FALLBACK_BRANCH
    size_bytes: int = 0
    files: dict[str, bytes] = field(default_factory=dict)

    def to_unit(self) -> StorageUnit:
        return StorageUnit(
            name=self.name,
            size_kb=self.size_bytes // 1024,
            default_branch=self.default_branch,
            created_at=self.created_at,
        )


class MockGitHubClient:
    """
    In-memory repository host.

    Repositories are kept in creation order and report their size in KB
    from the bytes committed to them, so rotation behaves like it does
    against GitHub. Not suitable for production.
    """

    def __init__(self, owner: str = "mock-user") -> None:
        self.owner = owner
        self._repos: dict[str, _MockRepository] = {}
        logger.info("Initialized mock GitHub client (in-memory)")

    async def list_recent_repositories(self, limit: int = 10) -> list[StorageUnit]:
        newest_first = list(reversed(list(self._repos.values())))
        return [repo.to_unit() for repo in newest_first[:limit]]

    async def create_repository(self, name: str, private: bool = True) -> StorageUnit:
        if name in self._repos:
            raise GitHubClientError(
                "Repository creation failed.",
                status_code=422,
                data={"errors": [{"message": "name already exists on this account"}]},
            )
        repo = _MockRepository(
            name=name,
            created_at=datetime.now(timezone.utc),
        )
        self._repos[name] = repo
        return repo.to_unit()

    async def get_repository(self, owner: str, name: str) -> StorageUnit:
        return self._get(owner, name).to_unit()

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
    ) -> StoredFile:
        target = self._get(owner, repo)
        if path in target.files:
            raise GitHubClientError(
                "Invalid request.\n\n\"sha\" wasn't supplied.",
                status_code=422,
            )

        content = base64.b64decode(content_base64)
        target.files[path] = content
        target.size_bytes += len(content)

        logger.debug(
            "Stored file in mock GitHub",
            extra={"repo": repo, "path": path, "size_bytes": len(content)}
        )

        return StoredFile(repo=repo, path=path, commit_sha=secrets.token_hex(20))

    def read_file(self, repo: str, path: str) -> bytes:
        """Return committed bytes. Used by tests and local debugging."""
        return self._get(self.owner, repo).files[path]

    def _get(self, owner: str, name: str) -> _MockRepository:
        if owner != self.owner or name not in self._repos:
            raise GitHubClientError("Not Found", status_code=404)
        return self._repos[name]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_github_client(
    config: Optional[GitHubConfig] = None,
    mock_mode: bool = False,
    owner: str = "mock-user",
) -> GitHubRepositoryClient | MockGitHubClient:
    """
    Create a repository host based on configuration.

    Args:
        config: GitHub configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client
        owner: Account name the mock client answers for

    Returns:
        RepositoryHost implementation (GitHub or Mock)
    """
    if mock_mode:
        return MockGitHubClient(owner=owner)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return GitHubRepositoryClient(config)
