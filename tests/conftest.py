import asyncio
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from domain.ports import ConversionResult, StoredFile, UploadedDocument
from domain.schemas import AIRequest, SuccessResponse


def feedback_payload(overall: int = 64) -> dict:
    def category(score: int) -> dict:
        return {
            "score": score,
            "tips": [
                {"type": "good", "tip": "Clear headings", "explanation": "Sections are easy to scan."},
                {"type": "improve", "tip": "Add metrics"},
            ],
        }

    return {
        "overallScore": overall,
        "ATS": category(70),
        "toneAndStyle": category(61),
        "content": category(58),
        "structure": category(66),
        "skills": category(52),
    }


def feedback_text(overall: int = 64, fenced: bool = True) -> str:
    body = json.dumps(feedback_payload(overall), indent=2)
    return f"```json\n{body}\n```" if fenced else body


@dataclass
class FakeStorage:
    delays: Dict[str, float] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)
    blobs: Dict[str, bytes] = field(default_factory=dict)
    uploads: List[str] = field(default_factory=list)

    async def upload(self, files: Sequence[UploadedDocument]) -> StoredFile:
        f = files[0]
        if f.name in self.delays:
            await asyncio.sleep(self.delays[f.name])
        if f.name in self.errors:
            raise self.errors[f.name]
        path = f"uploads/{len(self.blobs)}_{f.name}"
        self.blobs[path] = f.content
        self.uploads.append(f.name)
        return StoredFile(path=path, name=f.name, size=len(f.content))

    async def read(self, path: str) -> Optional[bytes]:
        return self.blobs.get(path)


@dataclass
class FakeKeyValueStore:
    data: Dict[str, str] = field(default_factory=dict)
    writes: List[Tuple[str, str]] = field(default_factory=list)
    fail_on_write: Optional[int] = None

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_on_write is not None and len(self.writes) + 1 == self.fail_on_write:
            self.writes.append((key, "<failed>"))
            raise RuntimeError("kv unavailable")
        self.writes.append((key, value))
        self.data[key] = value


@dataclass
class FakeRasterizer:
    error: Optional[str] = None

    async def convert(self, document: UploadedDocument) -> ConversionResult:
        if self.error:
            return ConversionResult(error=self.error)
        stem = document.name.rsplit(".", 1)[0]
        return ConversionResult(image=UploadedDocument(
            name=f"{stem}.png", content=b"\x89PNG\r\n\x1a\n", content_type="image/png"))


@dataclass
class FakeAI:
    """Scripted AI capability keyed by the model parameter (None = default tier)."""

    outcomes: Dict[Optional[str], object] = field(default_factory=dict)
    calls: List[Tuple[AIRequest, Optional[str]]] = field(default_factory=list)

    async def invoke(self, request: AIRequest, model: Optional[str] = None):
        self.calls.append((request, model))
        outcome = self.outcomes.get(model, SuccessResponse(content=feedback_text()))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def models(self) -> List[Optional[str]]:
        return [model for _, model in self.calls]


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def kv() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture
def resume_pdf() -> UploadedDocument:
    return UploadedDocument(name="resume.pdf", content=b"%PDF-1.4 fake resume")
