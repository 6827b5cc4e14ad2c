from pathlib import Path

import httpx
import pytest

from comicshelf.config import MediaConfig
from comicshelf.errors import InvalidArgument, UploadFailed
from comicshelf.media import COVER_PLACEHOLDER, CloudinaryMedia

CONFIG = MediaConfig(cloud_name="demo", upload_preset="covers")


def media_with(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudinaryMedia(http, CONFIG), http


@pytest.fixture
def cover_file(tmp_path):
    path = tmp_path / "cover.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return path


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_returns_public_id(self, cover_file):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={"public_id": "comics/cover_abc", "secure_url": "https://res.cloudinary.com/demo/x.png"},
            )

        media, http = media_with(handler)
        async with http:
            reference = await media.upload(cover_file)

        assert reference == "comics/cover_abc"
        assert str(seen[0].url) == "https://api.cloudinary.com/v1_1/demo/image/upload"
        body = seen[0].content
        assert b'name="upload_preset"' in body and b"covers" in body
        assert b'filename="cover.png"' in body

    @pytest.mark.asyncio
    async def test_rejection_is_upload_failed(self, cover_file):
        media, http = media_with(
            lambda request: httpx.Response(400, json={"error": {"message": "Upload preset not found"}})
        )
        async with http:
            with pytest.raises(UploadFailed, match="Upload preset not found"):
                await media.upload(cover_file)

    @pytest.mark.asyncio
    async def test_missing_public_id_is_upload_failed(self, cover_file):
        media, http = media_with(lambda request: httpx.Response(200, json={}))
        async with http:
            with pytest.raises(UploadFailed):
                await media.upload(cover_file)

    @pytest.mark.asyncio
    async def test_transport_failure_is_upload_failed(self, cover_file):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        media, http = media_with(handler)
        async with http:
            with pytest.raises(UploadFailed) as info:
                await media.upload(cover_file)
        assert isinstance(info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_unreadable_file_is_upload_failed(self, cover_file, monkeypatch):
        def deny(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "read_bytes", deny)
        calls = []
        media, http = media_with(lambda request: calls.append(request) or httpx.Response(200))
        async with http:
            with pytest.raises(UploadFailed, match="Could not read cover.png") as info:
                await media.upload(cover_file)
        assert isinstance(info.value.cause, PermissionError)
        assert calls == []

    @pytest.mark.asyncio
    async def test_missing_file_fails_before_network(self, tmp_path):
        calls = []
        media, http = media_with(lambda request: calls.append(request) or httpx.Response(200))
        async with http:
            with pytest.raises(InvalidArgument):
                await media.upload(tmp_path / "absent.jpg")
            with pytest.raises(InvalidArgument):
                await media.upload("")
        assert calls == []


class TestDeriveUrl:
    def setup_method(self):
        self.media = CloudinaryMedia(httpx.AsyncClient(), CONFIG)

    def test_reference_gets_resize_transformation(self):
        url = self.media.derive_url("comics/cover_abc", 300, 450)
        assert url == "https://res.cloudinary.com/demo/image/upload/c_fill,w_300,h_450,q_auto,f_auto/comics/cover_abc"

    def test_is_pure(self):
        first = self.media.derive_url("comics/cover_abc", 120, 180)
        assert all(self.media.derive_url("comics/cover_abc", 120, 180) == first for _ in range(3))

    def test_absent_reference_is_placeholder(self):
        assert self.media.derive_url(None, 100, 100) == COVER_PLACEHOLDER
        assert self.media.derive_url("", 100, 100) == COVER_PLACEHOLDER

    def test_delivery_url_gets_transformation_inserted(self):
        url = self.media.derive_url("https://res.cloudinary.com/demo/image/upload/v123/comics/a.jpg", 80, 120)
        assert url == "https://res.cloudinary.com/demo/image/upload/c_fill,w_80,h_120,q_auto,f_auto/v123/comics/a.jpg"

    def test_foreign_url_is_left_alone(self):
        assert self.media.derive_url("https://example.com/a.jpg", 80, 120) == "https://example.com/a.jpg"

    def test_missing_or_bad_dimensions_are_omitted(self):
        assert self.media.derive_url("a", None, 0).endswith("/c_fill,q_auto,f_auto/a")
        assert self.media.derive_url("a", "wide", -5).endswith("/c_fill,q_auto,f_auto/a")
