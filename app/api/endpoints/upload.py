"""Upload API: multipart file in, stored object summary out."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from app.api.dependencies import get_upload_use_case, require_api_token
from app.application.dtos.files import UploadCommand
from app.application.use_cases.files import UploadFileUseCase
from app.core.limiter import limit_upload
from app.domain.enums import Visibility
from app.domain.exceptions import ValidationException
from app.schemas.files import UploadResponse

router = APIRouter()


@router.post("", response_model=UploadResponse)
@limit_upload
async def upload_file(
    request: Request,
    _: Annotated[None, Depends(require_api_token)],
    file: UploadFile | None = File(None),
    visibility: str | None = Form(None),
    private: str | None = Form(None),
    password: str | None = Form(None),
    storage: str | None = Form(None),
    checksum: str | None = Form(None),
    storage_query: str | None = Query(None, alias="storage"),
    use_case: UploadFileUseCase = Depends(get_upload_use_case),
):
    """Store the ``file`` field and return its id, extension and deletion key.

    ``visibility=private`` or ``private=true`` needs a password. ``storage``
    (form field, else query) forces a backend.
    """
    if file is None:
        raise ValidationException('Missing multipart form field "file"', field="file")
    is_private = visibility == Visibility.PRIVATE.value or private == "true"
    result = await use_case.execute(
        UploadCommand(
            file_data=file.file,
            filename=file.filename,
            content_type=file.content_type,
            declared_size=file.size,
            private=is_private,
            password=password,
            storage=storage or storage_query,
            checksum=checksum,
        )
    )
    return UploadResponse(
        id=result.id,
        ext=result.ext,
        type=result.content_type,
        checksum=result.checksum,
        key=result.key,
        origin=str(request.base_url).rstrip("/"),
        private=result.private,
        storage=result.storage.value,
    )
