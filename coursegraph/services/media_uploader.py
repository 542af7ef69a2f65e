"""
媒体上传
把原始上传文件转存为可长期访问的URL
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

from coursegraph.core.config import settings
from coursegraph.core.exceptions import UploadError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


@dataclass
class UploadResult:
    secure_url: str


class MediaUploader(Protocol):
    """上传协作方接口"""

    async def upload(self, file_handle: Any, destination: str) -> UploadResult:
        ...


class LocalMediaUploader:
    """保存到本地上传目录，并按 media_base_url 生成访问地址

    file_handle 需要提供 filename 属性和 read(size)（同步或异步均可），
    有 size 属性时先按声明大小拒绝超限文件。
    FastAPI 的 UploadFile 可以直接传入。
    """

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        base_url: Optional[str] = None,
        max_bytes: Optional[int] = None
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.base_url = (base_url or settings.media_base_url).rstrip("/")
        self.max_bytes = max_bytes or settings.max_upload_bytes

    async def upload(self, file_handle: Any, destination: str) -> UploadResult:
        filename = getattr(file_handle, "filename", None) or ""
        suffix = Path(filename).suffix.lower()
        if suffix not in ALLOWED_IMAGE_SUFFIXES:
            raise UploadError(f"不支持的图片格式: {filename or '未命名文件'}", details={"filename": filename})

        declared_size = getattr(file_handle, "size", None)
        if isinstance(declared_size, int) and declared_size > self.max_bytes:
            raise UploadError(
                "上传文件过大",
                details={"filename": filename, "size": declared_size, "max_bytes": self.max_bytes}
            )

        # 最多多读一个字节，足以判断是否超限
        content = file_handle.read(self.max_bytes + 1)
        if asyncio.iscoroutine(content):
            content = await content
        if not content:
            raise UploadError("上传文件为空", details={"filename": filename})
        if len(content) > self.max_bytes:
            raise UploadError("上传文件过大", details={"filename": filename, "max_bytes": self.max_bytes})

        stored_name = f"{uuid.uuid4().hex}{suffix}"
        target_dir = self.upload_dir / destination
        target = target_dir / stored_name

        try:
            await asyncio.to_thread(self._write, target, content)
        except OSError as e:
            logger.error(f"保存上传文件失败 {target}: {e}")
            raise UploadError("保存上传文件失败", details={"filename": filename}) from e

        secure_url = f"{self.base_url}/{destination}/{stored_name}"
        logger.info(f"文件上传成功: {filename} -> {secure_url}")
        return UploadResult(secure_url=secure_url)

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
