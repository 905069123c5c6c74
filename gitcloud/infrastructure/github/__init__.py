"""
GitHub REST API client.

Implements the RepositoryHost protocol from core.storage.uploader.
"""

from .client import (
    GitHubClientError,
    GitHubConfig,
    GitHubRepositoryClient,
    MockGitHubClient,
    create_github_client,
)

__all__ = [
    "GitHubClientError",
    "GitHubConfig",
    "GitHubRepositoryClient",
    "MockGitHubClient",
    "create_github_client",
]
