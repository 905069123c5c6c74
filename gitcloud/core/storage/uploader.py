"""
Photo upload logic: repository selection, commit, and URL resolution.

This module decides *where* an image goes and *what* URL the caller gets
back. It is framework-agnostic: it doesn't know about HTTP requests or
environment variables, only about a repository host that can list,
create and write to repositories.

Rotation is a read-decide-write sequence against the host and is not
atomic. Two concurrent uploads can both create a new repository, or both
write into a nearly full one. There is no local cache or lock; the
current repository is derived fresh from the host on every upload.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from .errors import ClientInputError, ConfigurationError
from .models import (
    FALLBACK_BRANCH,
    BranchLookup,
    StorageUnit,
    StoredFile,
    UploadResult,
    build_raw_url,
    generate_file_name,
    generate_repo_name,
)

logger = logging.getLogger(__name__)


DEFAULT_REPO_PREFIX = "photo-store"
DEFAULT_RAW_CONTENT_BASE_URL = "https://raw.githubusercontent.com"
DEFAULT_COMMIT_MESSAGE = "Uploaded image"
RECENT_REPO_LIMIT = 10


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class RepositoryHost(Protocol):
    """
    Interface for the service that holds our repositories.

    The uploader doesn't care whether this is GitHub's REST API or an
    in-memory dictionary. All failures must surface as
    ExternalServiceError so the caller sees one error type.
    """

    async def list_recent_repositories(self, limit: int) -> list[StorageUnit]:
        """Repositories of the authenticated account, newest first."""
        ...

    async def create_repository(self, name: str, private: bool = True) -> StorageUnit:
        """Create a repository for the authenticated account."""
        ...

    async def get_repository(self, owner: str, name: str) -> StorageUnit:
        """Fetch repository metadata (size, default branch)."""
        ...

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_base64: str,
        message: str,
    ) -> StoredFile:
        """Create a new file. The path must not exist yet."""
        ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadConfig:
    """
    Everything the uploader needs to know about its environment.

    Built once per request from application settings and passed in
    explicitly, so the uploader never reads ambient global state.
    """
    owner: str
    max_repo_size_bytes: int = 0  # 0 means unlimited
    repo_prefix: str = DEFAULT_REPO_PREFIX
    raw_content_base_url: str = DEFAULT_RAW_CONTENT_BASE_URL
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    recent_repo_limit: int = RECENT_REPO_LIMIT

    def __post_init__(self) -> None:
        if not self.owner:
            raise ConfigurationError("Repository owner is required")
        if self.max_repo_size_bytes < 0:
            raise ValueError("max_repo_size_bytes cannot be negative")
        if not self.repo_prefix:
            raise ValueError("repo_prefix cannot be empty")

    @property
    def rotation_enabled(self) -> bool:
        return self.max_repo_size_bytes > 0


# ---------------------------------------------------------------------------
# Uploader
# ---------------------------------------------------------------------------

class PhotoUploader:
    """
    Stores images in size-capped repositories and returns public URLs.

    Usage:
        uploader = PhotoUploader(host=github_client, config=config)
        result = await uploader.upload(image_bytes)
    """

    def __init__(self, host: RepositoryHost, config: UploadConfig) -> None:
        self._host = host
        self._config = config

    @property
    def config(self) -> UploadConfig:
        return self._config

    async def upload(self, data: bytes) -> UploadResult:
        """
        Run the whole upload: pick a repository, commit, build the URL.

        Raises ClientInputError for an empty payload and
        ExternalServiceError when any required host call fails. A failed
        branch lookup is not an error; it falls back to "main".
        """
        if not data:
            raise ClientInputError("Uploaded file is empty")

        repo_name = await self.resolve_repository()
        stored = await self.commit_photo(repo_name, data)
        lookup = await self.resolve_default_branch(repo_name)

        url = build_raw_url(
            self._config.raw_content_base_url,
            self._config.owner,
            repo_name,
            lookup.branch,
            stored.path,
        )

        logger.info(
            "Photo uploaded",
            extra={
                "repo": repo_name,
                "file": stored.path,
                "size_bytes": len(data),
                "branch": lookup.branch,
                "branch_fallback": lookup.fell_back,
            }
        )

        return UploadResult(
            repo=repo_name,
            file=stored.path,
            url=url,
            commit=stored.commit_sha,
        )

    async def resolve_repository(self) -> str:
        """
        Pick the repository the next image goes into.

        Only the newest repository carrying our prefix is a candidate.
        Older ones are never reconsidered, even if they have room left.
        A repository exactly at the threshold counts as full.
        """
        current = await self.find_latest_repository()

        if current is None:
            logger.info(
                "No storage repository found, creating one",
                extra={"prefix": self._config.repo_prefix}
            )
            return await self.create_repository()

        if self.is_full(current):
            logger.info(
                "Storage repository is full, rotating",
                extra={
                    "repo": current.name,
                    "size_bytes": current.size_bytes,
                    "max_repo_size_bytes": self._config.max_repo_size_bytes,
                }
            )
            return await self.create_repository()

        logger.debug(
            "Reusing storage repository",
            extra={"repo": current.name, "size_bytes": current.size_bytes}
        )
        return current.name

    async def find_latest_repository(self) -> StorageUnit | None:
        """Newest repository whose name starts with the reserved prefix."""
        repos = await self._host.list_recent_repositories(
            limit=self._config.recent_repo_limit,
        )
        for repo in repos:
            if repo.has_prefix(self._config.repo_prefix):
                return repo
        return None

    def is_full(self, unit: StorageUnit) -> bool:
        if not self._config.rotation_enabled:
            return False
        return unit.size_bytes >= self._config.max_repo_size_bytes

    async def create_repository(self) -> str:
        name = generate_repo_name(self._config.repo_prefix)
        await self._host.create_repository(name, private=True)

        logger.info("Created storage repository", extra={"repo": name})

        return name

    async def commit_photo(self, repo_name: str, data: bytes) -> StoredFile:
        """
        Write the image as a brand-new file.

        The file name is always fresh, so no previous blob sha is sent
        and the host never treats this as an update.
        """
        path = generate_file_name()
        content = base64.b64encode(data).decode("ascii")

        stored = await self._host.create_file(
            owner=self._config.owner,
            repo=repo_name,
            path=path,
            content_base64=content,
            message=self._config.commit_message,
        )

        logger.debug(
            "Committed photo",
            extra={"repo": repo_name, "file": path, "commit": stored.commit_sha}
        )

        return stored

    async def resolve_default_branch(self, repo_name: str) -> BranchLookup:
        """
        Best-effort lookup of the repository's default branch.

        Never raises: the image is already committed and the URL is still
        usable with the fallback branch, so any failure is logged and
        downgraded to "main".
        """
        try:
            unit = await self._host.get_repository(self._config.owner, repo_name)
        except Exception as e:
            logger.warning(
                "Could not determine default branch, using fallback",
                extra={
                    "repo": repo_name,
                    "fallback": FALLBACK_BRANCH,
                    "error": str(e),
                }
            )
            return BranchLookup(branch=FALLBACK_BRANCH, error=str(e))

        return BranchLookup(branch=unit.default_branch or FALLBACK_BRANCH)
