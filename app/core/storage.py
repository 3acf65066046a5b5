from __future__ import annotations

import uuid
from pathlib import Path

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile


class FileStorage:
    """Stores uploaded assets on local disk and hands back a public URI."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def save(self, upload: UploadFile, folder: str) -> str:
        suffix = Path(upload.filename or "").suffix.lower()
        name = f"{uuid.uuid4().hex}{suffix}"
        target = self.root / folder / name

        content = await upload.read()
        await run_in_threadpool(self._write, target, content)
        return f"{self.base_url}/uploads/{folder}/{name}"

    async def delete(self, uri: str) -> None:
        """Remove a file previously returned by ``save``; URIs from elsewhere are ignored."""
        prefix = f"{self.base_url}/uploads/"
        if not uri.startswith(prefix):
            return
        target = (self.root / uri[len(prefix):]).resolve()
        if self.root.resolve() not in target.parents:
            return
        await run_in_threadpool(target.unlink, missing_ok=True)

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
