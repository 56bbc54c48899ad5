"""ShareX custom uploader config (``/config.sxcu``)."""

import json
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response

router = APIRouter()

SHAREX_VERSION = "13.7.0"


def build_sharex_config(origin: str, use_ext: bool, skip_cd: bool, token: str | None) -> dict[str, str]:
    """Uploader config pointing ShareX at this deployment's upload and delete routes."""
    query = f"?token={quote(token, safe='')}" if token else ""
    delete_query = f"&token={quote(token, safe='')}" if token else ""
    download_query = "?skip-cd=true" if skip_cd else ""
    return {
        "Version": SHAREX_VERSION,
        "Name": "Uploader",
        "DestinationType": "ImageUploader",
        "RequestType": "POST",
        "RequestURL": f"{origin}/api/upload{query}",
        "FileFormName": "file",
        "Body": "MultipartFormData",
        "URL": f"{origin}/{{json:id}}{'{json:ext}' if use_ext else ''}{download_query}",
        "DeletionURL": f"{origin}/api/delete?key={{json:key}}{delete_query}",
        "DeletionMethod": "POST",
    }


@router.get("/config.sxcu")
async def get_sharex_config(
    request: Request,
    ext: Annotated[str | None, Query()] = None,
    skip_cd: Annotated[str | None, Query(alias="skip-cd")] = None,
    token: Annotated[str | None, Query()] = None,
) -> Response:
    """Download the .sxcu file. ``ext``, ``skip-cd`` and ``token`` shape the urls."""
    config = build_sharex_config(
        origin=str(request.base_url).rstrip("/"),
        use_ext=ext == "true",
        skip_cd=skip_cd == "true",
        token=token,
    )
    return Response(
        content=json.dumps(config, indent=4),
        media_type="application/json; charset=utf-8",
        headers={"content-disposition": 'attachment; filename="uploader.sxcu"'},
    )
