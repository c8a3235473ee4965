"""
Blob API endpoints.

Each endpoint is a thin translation between HTTP and one gateway call:
read the name and body off the request, call the gateway, and turn the
StorageResult into a response. Success bodies are the short plain-text
confirmations clients already parse; failures map by error kind:

- NOT_FOUND         -> 404
- PERMISSION_DENIED -> 403
- TRANSIENT_IO      -> 503
- FAILURE           -> 500
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ...core.blobs.models import ErrorKind, StorageResult
from ..dependencies import BlobGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.TRANSIENT_IO: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_NOT_FOUND_RESPONSE = {404: {"description": "Blob does not exist"}}


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def failure_response(result: StorageResult, blob_name: Optional[str] = None) -> PlainTextResponse:
    """Plain-text error response for a failed gateway call."""
    error = result.error
    if error.kind is ErrorKind.NOT_FOUND and blob_name:
        content = f"Blob {blob_name} not found."
    else:
        content = error.message

    return PlainTextResponse(content, status_code=STATUS_BY_KIND[error.kind])


def request_content_type(request: Request) -> Optional[str]:
    return request.headers.get("content-type") or None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[str],
    summary="List blobs",
    description="Names of all blobs in the container.",
)
async def list_blobs(gateway: BlobGatewayDep) -> Response:
    result = await gateway.list_blobs()
    if not result.ok:
        return failure_response(result)
    return JSONResponse(result.value)


@router.get(
    "/{blob_name}/exists",
    response_class=PlainTextResponse,
    summary="Check whether a blob exists",
    responses=_NOT_FOUND_RESPONSE,
)
async def check_blob_exists(blob_name: str, gateway: BlobGatewayDep) -> Response:
    result = await gateway.exists(blob_name)
    if not result.ok:
        return failure_response(result, blob_name)

    if result.value:
        return PlainTextResponse(f"Blob {blob_name} exists.")
    return PlainTextResponse(
        f"Blob {blob_name} does not exist.",
        status_code=status.HTTP_404_NOT_FOUND,
    )


@router.post(
    "/{blob_name}",
    response_class=PlainTextResponse,
    summary="Upload a blob",
    description="Store the raw request body under the name, overwriting any existing blob.",
)
async def upload_blob(blob_name: str, request: Request, gateway: BlobGatewayDep) -> Response:
    data = await request.body()
    result = await gateway.upload(blob_name, data, request_content_type(request))
    if not result.ok:
        return failure_response(result, blob_name)
    return PlainTextResponse(f"Blob {blob_name} uploaded successfully.")


@router.get(
    "/{blob_name}",
    summary="Download a blob",
    description="Raw blob bytes with the content type they were uploaded with.",
    responses=_NOT_FOUND_RESPONSE,
)
async def download_blob(blob_name: str, gateway: BlobGatewayDep) -> Response:
    result = await gateway.download(blob_name)
    if not result.ok:
        return failure_response(result, blob_name)

    blob = result.value
    # set the header directly so Starlette doesn't append a charset to text/* types
    return Response(content=blob.data, headers={"Content-Type": blob.content_type})


@router.put(
    "/{blob_name}",
    response_class=PlainTextResponse,
    summary="Update a blob",
    description="Replace the contents of an existing blob with the raw request body.",
    responses=_NOT_FOUND_RESPONSE,
)
async def update_blob(blob_name: str, request: Request, gateway: BlobGatewayDep) -> Response:
    data = await request.body()
    result = await gateway.update(blob_name, data, request_content_type(request))
    if not result.ok:
        return failure_response(result, blob_name)
    return PlainTextResponse(f"Blob {blob_name} updated successfully.")


@router.delete(
    "/{blob_name}",
    response_class=PlainTextResponse,
    summary="Delete a blob",
    responses=_NOT_FOUND_RESPONSE,
)
async def delete_blob(blob_name: str, gateway: BlobGatewayDep) -> Response:
    result = await gateway.delete(blob_name)
    if not result.ok:
        return failure_response(result, blob_name)
    return PlainTextResponse(f"Blob {blob_name} deleted successfully.")


@router.get(
    "/{blob_name}/sas",
    response_class=PlainTextResponse,
    summary="Generate a signed URL",
    description="Read-only URL for the blob, valid for one hour.",
    responses=_NOT_FOUND_RESPONSE,
)
async def generate_sas_url(blob_name: str, gateway: BlobGatewayDep) -> Response:
    result = await gateway.generate_signed_url(blob_name)
    if not result.ok:
        return failure_response(result, blob_name)

    logger.debug("Generated signed URL", extra={"blob_name": blob_name})
    return PlainTextResponse(result.value)
