import asyncio
import os
import uuid
from typing import Optional, Sequence
from domain.errors import UploadFailure
from domain.ports import StoredFile, UploadedDocument


def _write_blob(root: str, path: str, content: bytes) -> None:
    os.makedirs(root, exist_ok=True)
    with open(os.path.join(root, path), "wb") as out:
        out.write(content)


def _read_blob(full: str) -> Optional[bytes]:
    if not os.path.isfile(full):
        return None
    with open(full, "rb") as fh:
        return fh.read()


class LocalBlobStorage:
    """Blob storage capability writing under a local directory.

    Disk I/O runs in a worker thread so a slow write never stalls the loop
    (and the upload timeout can fire while it is in progress).
    """

    def __init__(self, root: str):
        self.root = root

    def _resolve(self, path: str) -> Optional[str]:
        root = os.path.abspath(self.root)
        full = os.path.abspath(os.path.join(root, path))
        if os.path.commonpath([root, full]) != root:
            return None
        return full

    async def upload(self, files: Sequence[UploadedDocument]) -> StoredFile:
        if not files:
            raise UploadFailure("Nothing to upload")
        f = files[0]
        name = (f.name or "uploaded.pdf").replace(" ", "_")
        path = f"{uuid.uuid4().hex}_{os.path.basename(name)}"
        try:
            await asyncio.to_thread(_write_blob, self.root, path, f.content)
        except OSError as exc:
            raise UploadFailure(f"Failed to store {f.name}: {exc}") from exc
        return StoredFile(path=path, name=f.name, size=len(f.content))

    async def read(self, path: str) -> Optional[bytes]:
        full = self._resolve(path)
        if full is None:
            return None
        return await asyncio.to_thread(_read_blob, full)
