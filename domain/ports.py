"""Contracts of the collaborators the review core depends on."""
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from domain.schemas import AIRequest, AIResponse


@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool


@dataclass(frozen=True)
class UploadedDocument:
    name: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class StoredFile:
    path: str
    name: str
    size: int


@dataclass(frozen=True)
class ConversionResult:
    image: Optional[UploadedDocument] = None
    error: Optional[str] = None


class BlobStorage(Protocol):
    async def upload(self, files: Sequence[UploadedDocument]) -> StoredFile: ...

    async def read(self, path: str) -> Optional[bytes]: ...


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class AICapability(Protocol):
    async def invoke(self, request: AIRequest, model: Optional[str] = None) -> AIResponse: ...


class Rasterizer(Protocol):
    async def convert(self, document: UploadedDocument) -> ConversionResult: ...
