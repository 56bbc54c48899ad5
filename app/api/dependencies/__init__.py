"""API dependencies: API token check and the composition root for file use cases."""

from app.api.dependencies.auth import require_api_token
from app.api.dependencies.composition import (
    get_backends,
    get_delete_use_case,
    get_download_use_case,
    get_lookup_use_case,
    get_storage_router,
    get_stored_object_repo,
    get_upload_use_case,
)

__all__ = [
    "get_backends",
    "get_delete_use_case",
    "get_download_use_case",
    "get_lookup_use_case",
    "get_storage_router",
    "get_stored_object_repo",
    "get_upload_use_case",
    "require_api_token",
]
