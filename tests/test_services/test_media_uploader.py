"""
本地媒体上传测试
"""

import io

import pytest

from coursegraph.core.exceptions import UploadError
from coursegraph.services.media_uploader import LocalMediaUploader


class FakeUpload:
    """模拟FastAPI UploadFile，read() 为异步"""

    def __init__(self, filename, content: bytes, size=None):
        self.filename = filename
        self.size = size
        self._content = content
        self.read_sizes = []

    async def read(self, size: int = -1) -> bytes:
        self.read_sizes.append(size)
        if size < 0:
            return self._content
        return self._content[:size]


@pytest.mark.asyncio
class TestLocalMediaUploader:
    """本地上传器测试类"""

    @pytest.fixture
    def uploader(self, tmp_path):
        return LocalMediaUploader(upload_dir=str(tmp_path), base_url="https://cdn.test/media/", max_bytes=1024)

    async def test_upload_async_file(self, uploader, tmp_path):
        result = await uploader.upload(FakeUpload("Cover.PNG", b"\x89PNG data"), "thumbnails")

        assert result.secure_url.startswith("https://cdn.test/media/thumbnails/")
        assert result.secure_url.endswith(".png")
        stored = list((tmp_path / "thumbnails").iterdir())
        assert len(stored) == 1
        assert stored[0].read_bytes() == b"\x89PNG data"

    async def test_upload_sync_file(self, uploader, tmp_path):
        handle = io.BytesIO(b"jpeg bytes")
        handle.filename = "photo.jpg"

        result = await uploader.upload(handle, "thumbnails")

        assert result.secure_url.endswith(".jpg")

    async def test_each_upload_gets_unique_name(self, uploader):
        first = await uploader.upload(FakeUpload("a.png", b"1"), "thumbnails")
        second = await uploader.upload(FakeUpload("a.png", b"2"), "thumbnails")

        assert first.secure_url != second.secure_url

    @pytest.mark.parametrize("filename", ["notes.pdf", "script", None])
    async def test_rejects_non_image(self, uploader, filename):
        with pytest.raises(UploadError):
            await uploader.upload(FakeUpload(filename, b"data"), "thumbnails")

    async def test_rejects_empty_file(self, uploader):
        with pytest.raises(UploadError):
            await uploader.upload(FakeUpload("empty.png", b""), "thumbnails")

    async def test_rejects_oversized_file(self, uploader, tmp_path):
        handle = FakeUpload("big.png", b"x" * 2048)

        with pytest.raises(UploadError) as exc_info:
            await uploader.upload(handle, "thumbnails")

        assert exc_info.value.details["max_bytes"] == 1024
        assert exc_info.value.status_code == 502
        # 只读取上限加一个字节
        assert handle.read_sizes == [1025]
        assert not (tmp_path / "thumbnails").exists()

    async def test_declared_size_rejected_before_read(self, uploader):
        handle = FakeUpload("big.png", b"x" * 4096, size=4096)

        with pytest.raises(UploadError) as exc_info:
            await uploader.upload(handle, "thumbnails")

        assert exc_info.value.details["size"] == 4096
        assert handle.read_sizes == []

    async def test_file_at_limit_accepted(self, uploader, tmp_path):
        handle = FakeUpload("edge.png", b"x" * 1024, size=1024)

        await uploader.upload(handle, "thumbnails")

        stored = list((tmp_path / "thumbnails").iterdir())
        assert stored[0].read_bytes() == b"x" * 1024
