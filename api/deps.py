import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Optional, TypeVar

from fastapi import Header

from app.settings import settings
from domain.ports import AICapability, AuthState, BlobStorage, KeyValueStore, Rasterizer
from domain.services.analysis_pipeline import AnalysisPipeline, AnalysisRun
from domain.services.chat import ChatSession
from domain.services.provider_resolver import ProviderResolver
from domain.services.records import RecordsRepository
from infra.llm.client import OpenRouterAI
from infra.pdf.rasterizer import PdfRasterizer
from infra.repositories.files_repository import LocalBlobStorage
from infra.repositories.kv_repository import SqlKeyValueStore

T = TypeVar("T")


def _evict(registry: "OrderedDict[str, T]", limit: int,
           removable: Callable[[T], bool], keep: str) -> None:
    """Drop the least recently used removable entries until ``limit`` holds.

    ``keep`` and entries that are still working stay, so the registry may sit
    above the limit until they settle.
    """
    excess = len(registry) - limit
    if excess <= 0:
        return
    for key in [k for k, v in registry.items() if k != keep and removable(v)][:excess]:
        del registry[key]


@dataclass
class Services:
    """Process-wide collaborators plus the per-session pipelines and chats."""

    storage: BlobStorage
    kv: KeyValueStore
    records: RecordsRepository
    resolver: ProviderResolver
    rasterizer: Rasterizer
    runs: "OrderedDict[str, AnalysisRun]" = field(default_factory=OrderedDict)
    pipelines: "OrderedDict[str, AnalysisPipeline]" = field(default_factory=OrderedDict)
    chats: "OrderedDict[str, ChatSession]" = field(default_factory=OrderedDict)
    max_runs: int = field(default_factory=lambda: settings.MAX_TRACKED_RUNS)
    max_sessions: int = field(default_factory=lambda: settings.MAX_SESSIONS)

    def pipeline_for(self, session_id: str) -> AnalysisPipeline:
        pipeline = self.pipelines.get(session_id)
        if pipeline is not None:
            self.pipelines.move_to_end(session_id)
            return pipeline
        pipeline = AnalysisPipeline(
            self.storage,
            self.rasterizer,
            self.records,
            self.resolver,
            settings.ANALYSIS_PROVIDERS,
            upload_timeout=settings.UPLOAD_TIMEOUT_SECONDS,
            fallback_notice_seconds=settings.FALLBACK_NOTICE_SECONDS,
        )
        self.pipelines[session_id] = pipeline
        _evict(self.pipelines, self.max_sessions, lambda p: not p.busy, session_id)
        return pipeline

    def track_run(self, run: AnalysisRun) -> None:
        self.runs[run.record_id] = run
        _evict(self.runs, self.max_runs, lambda r: r.finished, run.record_id)

    def new_chat(self) -> ChatSession:
        return ChatSession(self.resolver, settings.CHAT_PROVIDERS)

    def open_chat(self) -> str:
        session_id = f"chat_{uuid.uuid4().hex}"
        self.chats[session_id] = self.new_chat()
        _evict(self.chats, self.max_sessions, lambda c: not c.pending, session_id)
        return session_id

    def chat(self, session_id: str) -> Optional[ChatSession]:
        session = self.chats.get(session_id)
        if session is not None:
            self.chats.move_to_end(session_id)
        return session


def build_services(storage: BlobStorage, kv: KeyValueStore, ai: AICapability,
                   rasterizer: Optional[Rasterizer] = None) -> Services:
    return Services(
        storage=storage,
        kv=kv,
        records=RecordsRepository(kv),
        resolver=ProviderResolver(ai),
        rasterizer=rasterizer or PdfRasterizer(),
    )


@lru_cache
def get_services() -> Services:
    storage = LocalBlobStorage(settings.STORAGE_DIR)
    return build_services(storage, SqlKeyValueStore(), OpenRouterAI(storage))


def get_auth(x_api_key: Optional[str] = Header(default=None)) -> AuthState:
    if settings.API_KEY is None:
        return AuthState(is_authenticated=True)
    return AuthState(is_authenticated=x_api_key == settings.API_KEY)


def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> str:
    return x_session_id or "default"
