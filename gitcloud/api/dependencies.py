"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be mocked for testing
- Configuration is centralized
- Resource lifecycle (HTTP sessions) is managed properly

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.storage.uploader import RepositoryHost
from ..infrastructure.github.client import MockGitHubClient, create_github_client

logger = logging.getLogger(__name__)

# Global mock instance (shared across requests so uploads persist)
_mock_github_client: Optional[MockGitHubClient] = None


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_repository_host(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[Optional[RepositoryHost], None, None]:
    """
    Provide the repository host for the upload route.

    Yields None when credentials are missing. The route turns that into
    its own configuration error response, so nothing here touches GitHub
    before credentials are validated.

    In mock mode, we reuse the same client across requests so that
    repositories and files persist during the session.
    """
    global _mock_github_client

    if settings.github_mock_mode:
        if _mock_github_client is None or _mock_github_client.owner != settings.github_user:
            _mock_github_client = create_github_client(
                mock_mode=True,
                owner=settings.github_user,
            )
            logger.info("Created shared mock GitHub client for session")
        yield _mock_github_client
        return

    if not settings.has_github_credentials:
        yield None
        return

    client = create_github_client(config=settings.github_config())
    logger.debug("Created GitHub client")
    try:
        yield client
    finally:
        client.close()


def reset_mock_github_client() -> None:
    """Drop the shared mock so the next request starts empty."""
    global _mock_github_client
    _mock_github_client = None


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
RepositoryHostDep = Annotated[Optional[RepositoryHost], Depends(get_repository_host)]
