"""Tests for Settings validation, filename helpers and the storage factory."""

import httpx
import pytest
from pydantic import ValidationError

from app import main as main_module
from app.core.config import Settings, get_settings
from app.domain.enums import StorageBackend
from app.infrastructure.external.storage import StorageFactory
from app.shared.utils.sanitization import (
    content_disposition,
    replace_extension,
    safe_extension,
    strip_extension,
)


class TestSettings:
    """Metadata backend and default storage tag are validated at load."""

    def test_mongodb_requires_uri(self) -> None:
        with pytest.raises(ValidationError, match="MONGODB_URI"):
            Settings(metadata_backend="mongodb", mongodb_uri="")

    def test_unknown_metadata_backend(self) -> None:
        with pytest.raises(ValidationError, match="metadata_backend"):
            Settings(metadata_backend="sqlite")

    def test_storage_default_is_normalized(self) -> None:
        settings = Settings(metadata_backend="memory", uploader_storage_default=" R2 ")
        assert settings.uploader_storage_default == "r2"

    def test_unknown_storage_default(self) -> None:
        with pytest.raises(ValidationError, match="uploader_storage_default"):
            Settings(metadata_backend="memory", uploader_storage_default="ftp")

    def test_files_dir_under_data_dir(self, tmp_path) -> None:
        settings = Settings(metadata_backend="memory", uploader_data_dir=str(tmp_path))
        assert settings.files_dir == str(tmp_path / "files")


class TestServeEntryPoint:
    """The console script hands the app to uvicorn on HOST:PORT."""

    def test_run_uses_settings(self, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(main_module.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
        monkeypatch.setenv("HOST", "0.0.0.0")
        monkeypatch.setenv("PORT", "9123")
        monkeypatch.delenv("DEBUG", raising=False)
        get_settings.cache_clear()
        try:
            main_module.run()
        finally:
            get_settings.cache_clear()
        assert calls == [(("app.main:app",), {"host": "0.0.0.0", "port": 9123, "reload": False})]


class TestStorageFactory:
    """Every tag is registered; missing settings show up as unconfigured."""

    async def test_registry_without_credentials(self, tmp_path) -> None:
        settings = Settings(metadata_backend="memory", uploader_data_dir=str(tmp_path))
        async with httpx.AsyncClient() as http_client:
            backends = StorageFactory.create_backends(settings, http_client, database=None)
        assert set(backends) == set(StorageBackend)
        assert backends[StorageBackend.LOCAL].is_configured is True
        assert backends[StorageBackend.CHUNKED_STORE].is_configured is False
        assert backends[StorageBackend.BLOB_CDN].is_configured is False
        assert backends[StorageBackend.BUCKET].is_configured is False

    async def test_blob_token_enables_blob(self, tmp_path) -> None:
        settings = Settings(
            metadata_backend="memory",
            uploader_data_dir=str(tmp_path),
            blob_read_write_token="tok",
        )
        async with httpx.AsyncClient() as http_client:
            backends = StorageFactory.create_backends(settings, http_client)
        assert backends[StorageBackend.BLOB_CDN].is_configured is True


class TestStorageBackendParse:
    """Tags and aliases are case-insensitive."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("fs", StorageBackend.LOCAL),
            ("LOCAL", StorageBackend.LOCAL),
            ("gridfs", StorageBackend.CHUNKED_STORE),
            (" mongodb ", StorageBackend.CHUNKED_STORE),
            ("blob", StorageBackend.BLOB_CDN),
            ("s3", StorageBackend.BUCKET),
            ("ftp", None),
        ],
    )
    def test_parse(self, raw: str, expected: StorageBackend | None) -> None:
        assert StorageBackend.parse(raw) is expected


class TestSanitization:
    """Extensions are plain alphanumeric; header names are latin-1 safe."""

    @pytest.mark.parametrize(
        ("filename", "ext"),
        [
            ("photo.PNG", ".png"),
            ("archive.tar.gz", ".gz"),
            ("noext", ""),
            ("trailing.", ""),
            ("weird.p$p", ""),
            ("", ""),
            (None, ""),
            ("long." + "a" * 40, ".aaaaaaaaaaaaaaa"),
        ],
    )
    def test_safe_extension(self, filename: str | None, ext: str) -> None:
        assert safe_extension(filename) == ext

    def test_replace_extension(self) -> None:
        assert replace_extension("photo.png", ".webp") == "photo.webp"
        assert replace_extension("photo", ".webp") == "photo.webp"

    def test_strip_extension(self) -> None:
        assert strip_extension("abc123.png") == "abc123"
        assert strip_extension("abc123") == "abc123"

    def test_content_disposition_ascii_fallback(self) -> None:
        value = content_disposition('résumé "final".pdf')
        assert value.startswith('inline; filename="r_sum_ _final_.pdf"')
        assert "filename*=UTF-8''r%C3%A9sum%C3%A9%20_final_.pdf" in value
        value.encode("latin-1")
