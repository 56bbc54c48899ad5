"""Mapping between StoredObject and the ``files`` collection document.

The document layout is flat: the authoritative location is spread over
``storage``, ``filePath`` and the per-backend fields (``gridfsId``,
``blobPathname``, ``r2Bucket``, ``r2Key``). Replicas use the same fields
inside ``replicas`` entries.
"""

from __future__ import annotations

import logging
from typing import Any

from app.core.constants import DEFAULT_CONTENT_TYPE
from app.domain.entities.stored_object import StoredObject
from app.domain.enums import StorageBackend
from app.domain.value_objects.core import (
    BlobLocation,
    BucketLocation,
    ChunkedStoreLocation,
    LocalLocation,
    Location,
    PasswordLock,
)
from app.shared.utils.datetime import from_timestamp_ms_utc, to_timestamp_ms

logger = logging.getLogger(__name__)


def location_to_fields(location: Location) -> dict[str, Any]:
    """Flatten a location into document fields (``storage`` + ``filePath`` + extras)."""
    if isinstance(location, LocalLocation):
        return {"storage": location.backend.value, "filePath": location.path}
    if isinstance(location, ChunkedStoreLocation):
        return {
            "storage": location.backend.value,
            "filePath": location.uri,
            "gridfsId": location.file_id,
        }
    if isinstance(location, BlobLocation):
        return {
            "storage": location.backend.value,
            "filePath": location.url,
            "blobPathname": location.pathname,
        }
    if isinstance(location, BucketLocation):
        return {
            "storage": location.backend.value,
            "filePath": location.uri,
            "r2Bucket": location.bucket,
            "r2Key": location.key,
        }
    raise TypeError(f"Unknown location type: {type(location).__name__}")


def _split_gridfs_uri(file_path: str) -> tuple[str | None, str | None]:
    prefix = "gridfs://"
    if not file_path.startswith(prefix):
        return None, None
    bucket_name, _, filename = file_path[len(prefix) :].partition("/")
    return bucket_name or None, filename or None


def location_from_fields(
    data: dict[str, Any],
    default_bucket: str,
    default_filename: str,
) -> Location:
    """Rebuild a location. Records without ``storage`` predate the field and are local."""
    storage = StorageBackend.parse(data.get("storage") or "fs") or StorageBackend.LOCAL
    file_path = data.get("filePath") or ""
    if storage is StorageBackend.CHUNKED_STORE:
        bucket_name, filename = _split_gridfs_uri(file_path)
        return ChunkedStoreLocation(
            file_id=data.get("gridfsId") or "",
            bucket_name=bucket_name or default_bucket,
            filename=filename or default_filename,
        )
    if storage is StorageBackend.BLOB_CDN:
        return BlobLocation(
            url=file_path,
            pathname=data.get("blobPathname") or default_filename,
        )
    if storage is StorageBackend.BUCKET:
        return BucketLocation(bucket=data.get("r2Bucket") or "", key=data.get("r2Key") or "")
    return LocalLocation(path=file_path)


def to_document(obj: StoredObject) -> dict[str, Any]:
    """Serialize for insert. Public records omit the password fields."""
    doc: dict[str, Any] = {
        "id": obj.id,
        "name": obj.name,
        "type": obj.content_type,
        "ext": obj.ext,
        "key": obj.key,
        "checksum": obj.checksum,
        "size": obj.size,
        "createdAt": to_timestamp_ms(obj.created_at),
        "private": obj.is_private,
        **location_to_fields(obj.location),
        "replicas": [location_to_fields(r) for r in obj.replicas],
    }
    if obj.password is not None:
        doc["passwordSalt"] = obj.password.salt
        doc["passwordHash"] = obj.password.hash
    return doc


def from_document(doc: dict[str, Any], default_bucket: str = "uploads") -> StoredObject:
    """Deserialize a record, including ones written before replicas existed."""
    object_id = doc["id"]
    ext = doc.get("ext") or ""
    default_filename = f"{object_id}{ext}"
    password: PasswordLock | None = None
    if doc.get("private"):
        salt, pw_hash = doc.get("passwordSalt"), doc.get("passwordHash")
        if salt and pw_hash:
            password = PasswordLock(salt=salt, hash=pw_hash)
        else:
            logger.warning("Private record %s has no password hash; serving as public", object_id)
    return StoredObject(
        id=object_id,
        key=doc["key"],
        name=doc.get("name") or object_id,
        ext=ext,
        content_type=doc.get("type") or DEFAULT_CONTENT_TYPE,
        size=int(doc.get("size") or 0),
        checksum=doc.get("checksum") or "",
        created_at=from_timestamp_ms_utc(int(doc.get("createdAt") or 0)),
        location=location_from_fields(doc, default_bucket, default_filename),
        replicas=tuple(
            location_from_fields(r, default_bucket, default_filename)
            for r in doc.get("replicas") or []
        ),
        password=password,
    )
