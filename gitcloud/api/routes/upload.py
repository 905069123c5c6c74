"""
Photo upload endpoint.

One POST endpoint that takes a multipart image, stores it in the current
storage repository and answers with a public raw-content URL.

The multipart body is parsed inside the handler (not through a File()
parameter) so credentials are validated before the body is touched.
Error bodies use a flat {"error": ...} shape rather than FastAPI's
{"detail": ...}, which is why this route returns JSONResponse directly.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from ...core.storage.errors import ClientInputError, ExternalServiceError
from ...core.storage.uploader import PhotoUploader
from ..dependencies import RepositoryHostDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


MISSING_CREDENTIALS_MESSAGE = "Missing GitHub credentials on server."
UPLOAD_FAILED_MESSAGE = "Upload failed"


def missing_file_message(field_name: str) -> str:
    return f"No file uploaded. Form field must be '{field_name}'."


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    """Response after a successful upload."""
    success: bool = Field(default=True, description="Always true on success")
    repo: str = Field(description="Repository the image was stored in")
    file: str = Field(description="Generated file name")
    url: str = Field(description="Public raw-content URL of the image")
    commit: str | None = Field(default=None, description="Commit sha, if GitHub returned one")


class ErrorResponse(BaseModel):
    """Error body for failed uploads."""
    error: str
    details: str | None = None


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def _read_photo(request: Request, field_name: str) -> bytes:
    """
    Parse the multipart body and return the bytes of the photo field.

    Raises ClientInputError when the field is missing, is a plain text
    value, or holds an empty file.
    """
    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException) as e:
        raise ClientInputError(f"Could not parse multipart body: {e}") from e

    try:
        photo = form.get(field_name)
        if not isinstance(photo, UploadFile):
            raise ClientInputError(f"Missing file field '{field_name}'")

        data = await photo.read()
    finally:
        await form.close()

    if not data:
        raise ClientInputError("Uploaded file is empty")

    return data


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a photo",
    description="Store an image in a GitHub repository and return its raw URL. "
                "Send multipart/form-data with the image in the 'photo' field.",
    responses={
        400: {"description": "No file uploaded", "model": ErrorResponse},
        500: {"description": "Missing credentials or upload failure", "model": ErrorResponse},
    },
)
async def upload_photo(
    request: Request,
    settings: SettingsDep,
    host: RepositoryHostDep,
) -> JSONResponse:
    """
    Upload a photo.

    1. Check that GitHub credentials are configured
    2. Read the image from the multipart body
    3. Pick (or rotate to) a storage repository
    4. Commit the image and build its public URL
    """
    missing_fields = settings.validate_required_fields()
    if missing_fields or host is None:
        logger.error(
            "Upload rejected: missing configuration",
            extra={"missing_fields": missing_fields}
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, MISSING_CREDENTIALS_MESSAGE)

    field_name = settings.upload_field_name

    try:
        data = await _read_photo(request, field_name)
    except ClientInputError as e:
        logger.info("Upload rejected: no file", extra={"reason": str(e)})
        return _error(status.HTTP_400_BAD_REQUEST, missing_file_message(field_name))

    logger.info(
        "Photo upload started",
        extra={"size_bytes": len(data)}
    )

    try:
        uploader = PhotoUploader(host=host, config=settings.upload_config())
        result = await uploader.upload(data)
    except ExternalServiceError as e:
        logger.error(
            "Upload error",
            extra={
                "error": e.message,
                "status": e.status_code,
                "data": e.data,
            },
            exc_info=e,
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, UPLOAD_FAILED_MESSAGE, str(e))
    except Exception as e:
        logger.error(
            "Upload error",
            extra={"error": str(e)},
            exc_info=e,
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, UPLOAD_FAILED_MESSAGE, str(e))

    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_dict())
