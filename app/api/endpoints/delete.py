"""Delete API: remove a stored object by its deletion key."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.dependencies import get_delete_use_case, require_api_token
from app.application.use_cases.files import DeleteFileUseCase
from app.core.limiter import limit_delete
from app.schemas.files import DeleteResponse

router = APIRouter()


@router.post("", response_model=DeleteResponse)
@limit_delete
async def delete_file(
    request: Request,
    _: Annotated[None, Depends(require_api_token)],
    key: str | None = Query(None),
    use_case: DeleteFileUseCase = Depends(get_delete_use_case),
):
    """Release every copy of the object, then drop its record."""
    await use_case.execute(key)
    return DeleteResponse()
