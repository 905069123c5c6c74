"""
Photo storage logic.

Contains the uploader service, its domain models, and the error taxonomy.
"""

from .errors import (
    ClientInputError,
    ConfigurationError,
    ExternalServiceError,
    UploadError,
)
from .models import BranchLookup, StorageUnit, StoredFile, UploadResult
from .uploader import PhotoUploader, RepositoryHost, UploadConfig

__all__ = [
    "ClientInputError",
    "ConfigurationError",
    "ExternalServiceError",
    "UploadError",
    "BranchLookup",
    "StorageUnit",
    "StoredFile",
    "UploadResult",
    "PhotoUploader",
    "RepositoryHost",
    "UploadConfig",
]
