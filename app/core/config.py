"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend credentials are optional: a backend without
credentials is reported as unconfigured by its adapter instead of failing
at load time.
"""

import os
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_STORAGE_TAGS = {
    "fs",
    "local",
    "mongodb",
    "gridfs",
    "chunked-store",
    "blob",
    "blob-cdn",
    "r2",
    "s3",
    "bucket",
}


def _default_data_dir() -> str:
    """Writable data directory; serverless hosts only allow /tmp."""
    if os.environ.get("VERCEL") or os.environ.get("VERCEL_ENV"):
        return "/tmp/uploader"
    return ".data/uploader"


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Field names map to upper-case environment variables (case-insensitive),
    e.g. uploader_max_bytes <- UPLOADER_MAX_BYTES.
    """

    # App
    app_name: str = "uploader"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    # CORS
    allowed_origins: str = "*"

    # Metadata store: "mongodb" (files collection) or "memory" (single process, dev/tests)
    metadata_backend: str = "mongodb"
    mongodb_uri: str = ""
    mongodb_db: str = "uploader"
    mongodb_bucket: str = "uploads"
    mongodb_collection: str = "files"

    # Uploads
    uploader_data_dir: str = _default_data_dir()
    uploader_max_bytes: int = 104_857_600  # 100MB
    uploader_dual_threshold_bytes: int = 7 * 1024 * 1024
    # Backend used for small uploads when the client does not ask for one ("fs" = local + blob).
    uploader_storage_default: str | None = None
    uploader_api_token: SecretStr | None = None
    retain_fallback_copies: bool = True
    stream_chunk_size: int = 64 * 1024
    tee_buffer_chunks: int = 4

    # Blob CDN (Vercel Blob REST API)
    blob_read_write_token: SecretStr | None = None
    blob_api_url: str = "https://blob.vercel-storage.com"
    blob_timeout_seconds: float = 60.0

    # S3-compatible bucket (Cloudflare R2)
    r2_endpoint: str | None = None
    r2_bucket: str | None = None
    r2_access_key_id: str | None = None
    r2_secret_access_key: SecretStr | None = None

    # Image optimization
    optimize_images: bool = True
    optimization_threshold_bytes: int = 10 * 1024 * 1024
    webp_quality: int = 80

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    # Multipart framing on top of the file itself.
    request_body_overhead_bytes: int = 1024 * 1024
    rate_limit_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_metadata_and_storage(self) -> "Settings":
        """Validate metadata backend and default storage tag.

        - mongodb: MONGODB_URI required.
        - memory: nothing required (records are lost on restart).
        """
        if self.metadata_backend == "mongodb":
            if not self.mongodb_uri:
                raise ValueError(
                    "MONGODB_URI is required when metadata_backend is 'mongodb'. "
                    "Set in environment or .env file, or use METADATA_BACKEND=memory."
                )
        elif self.metadata_backend != "memory":
            raise ValueError(
                f"metadata_backend must be 'mongodb' or 'memory', got: {self.metadata_backend!r}"
            )
        if self.uploader_storage_default is not None:
            tag = self.uploader_storage_default.strip().lower()
            if tag and tag not in _STORAGE_TAGS:
                raise ValueError(
                    f"Invalid uploader_storage_default '{self.uploader_storage_default}'. "
                    "Must be one of: 'fs', 'mongodb', 'blob', 'r2'"
                )
            self.uploader_storage_default = tag or None
        if self.uploader_max_bytes <= 0:
            raise ValueError("UPLOADER_MAX_BYTES must be positive")
        if self.stream_chunk_size <= 0 or self.tee_buffer_chunks <= 0:
            raise ValueError("STREAM_CHUNK_SIZE and TEE_BUFFER_CHUNKS must be positive")
        return self

    @property
    def files_dir(self) -> str:
        """Directory holding objects written by the local filesystem backend."""
        return os.path.join(os.path.abspath(self.uploader_data_dir), "files")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
