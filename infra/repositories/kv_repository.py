import asyncio
from typing import Optional
from sqlalchemy.orm import sessionmaker
from infra.db.session import SessionLocal
from infra.db.models import KeyValueEntry


class SqlKeyValueStore:
    """Key-value capability backed by the SQLite ``kv_entries`` table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def _get(self, key: str) -> Optional[str]:
        with self._session_factory() as s:
            entry = s.get(KeyValueEntry, key)
            return entry.value if entry else None

    def _set(self, key: str, value: str) -> None:
        with self._session_factory() as s:
            entry = s.get(KeyValueEntry, key)
            if entry is None:
                s.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            s.commit()

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)
