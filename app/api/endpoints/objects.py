"""Object API: metadata lookup by public id or deletion key."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.dependencies import get_lookup_use_case, require_api_token
from app.application.use_cases.files import LookupFileUseCase
from app.core.limiter import limit_object
from app.schemas.files import ObjectChecksums, ObjectInfoResponse
from app.shared.utils.datetime import to_timestamp_ms

router = APIRouter()


@router.get("", response_model=ObjectInfoResponse)
@limit_object
async def get_object(
    request: Request,
    _: Annotated[None, Depends(require_api_token)],
    id: str | None = Query(None),
    key: str | None = Query(None),
    use_case: LookupFileUseCase = Depends(get_lookup_use_case),
):
    """Return the stored record; ``id`` wins when both are given."""
    obj = await use_case.execute(object_id=id, key=key)
    return ObjectInfoResponse(
        id=obj.id,
        type=obj.content_type,
        date=to_timestamp_ms(obj.created_at),
        size=obj.size,
        checksums=ObjectChecksums(md5=obj.checksum),
        name=obj.name,
    )
