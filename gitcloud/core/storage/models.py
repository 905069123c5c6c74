"""
Domain models for photo storage.

None of these are persisted by us. Repositories, files and commits live
on the hosting provider; these types only describe what one request sees
of them while it runs.
"""

import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


FALLBACK_BRANCH = "main"


@dataclass(frozen=True)
class StorageUnit:
    """
    A repository used as a blob container.

    GitHub reports repository size in kilobytes, so we keep the native
    value and convert on demand.
    """
    name: str
    size_kb: int = 0
    default_branch: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def size_bytes(self) -> int:
        return self.size_kb * 1024

    def has_prefix(self, prefix: str) -> bool:
        return self.name.startswith(prefix)


@dataclass(frozen=True)
class StoredFile:
    """A single committed image. Never updated after creation."""
    repo: str
    path: str
    commit_sha: Optional[str] = None


@dataclass(frozen=True)
class BranchLookup:
    """
    Outcome of the best-effort default branch lookup.

    `error` holds the failure message when we had to fall back.
    """
    branch: str
    error: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class UploadResult:
    """What a successful upload reports back to the caller."""
    repo: str
    file: str
    url: str
    commit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "repo": self.repo,
            "file": self.file,
            "url": self.url,
            "commit": self.commit,
        }


# ---------------------------------------------------------------------------
# Name generation
# ---------------------------------------------------------------------------

def _unique_suffix() -> tuple[str, str]:
    """Millisecond timestamp and a short random token."""
    return f"{int(time.time() * 1000)}", secrets.token_hex(3)


def generate_repo_name(prefix: str) -> str:
    """Build a fresh repository name, e.g. photo-store-1718000000000-a1b2c3."""
    millis, token = _unique_suffix()
    return f"{prefix}-{millis}-{token}"


def generate_file_name(extension: str = "jpg") -> str:
    """Build a fresh image file name, e.g. img_1718000000000_a1b2c3.jpg."""
    millis, token = _unique_suffix()
    return f"img_{millis}_{token}.{extension}"


def build_raw_url(
    base_url: str,
    owner: str,
    repo: str,
    branch: str,
    path: str,
) -> str:
    """Public raw-content URL for a committed file."""
    return f"{base_url.rstrip('/')}/{owner}/{repo}/{branch}/{path}"
