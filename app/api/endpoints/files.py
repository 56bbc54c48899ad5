"""Public download routes: ``/{id}`` and the image-only ``/t/{id}``."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_download_use_case
from app.application.dtos.files import DownloadResult
from app.application.use_cases.files import DownloadFileUseCase
from app.core.constants import DOWNLOAD_CACHE_CONTROL, PASSWORD_HEADER
from app.shared.utils.sanitization import content_disposition

router = APIRouter()

Password = Annotated[str | None, Query(alias="pw")]
PasswordHeader = Annotated[str | None, Header(alias=PASSWORD_HEADER)]


def _stream_response(result: DownloadResult, disposition: bool) -> StreamingResponse:
    headers = {"cache-control": DOWNLOAD_CACHE_CONTROL}
    if disposition:
        headers["content-disposition"] = content_disposition(result.filename)
    return StreamingResponse(result.stream, media_type=result.content_type, headers=headers)


@router.get("/t/{file_id}")
async def get_thumbnail(
    file_id: str,
    pw: Password = None,
    x_file_password: PasswordHeader = None,
    use_case: DownloadFileUseCase = Depends(get_download_use_case),
) -> StreamingResponse:
    """Serve an image object inline; non-images are not found."""
    result = await use_case.thumbnail(file_id, pw or x_file_password)
    return _stream_response(result, disposition=False)


@router.get("/{file_id}")
async def get_file(
    file_id: str,
    pw: Password = None,
    x_file_password: PasswordHeader = None,
    skip_cd: Annotated[str | None, Query(alias="skip-cd")] = None,
    use_case: DownloadFileUseCase = Depends(get_download_use_case),
) -> StreamingResponse:
    """Stream the authoritative copy. Private objects need ``pw`` or the password header."""
    result = await use_case.execute(file_id, pw or x_file_password)
    return _stream_response(result, disposition=skip_cd != "true")
