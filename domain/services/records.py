import logging
from typing import Optional
from pydantic import ValidationError
from domain.errors import PersistenceFailure
from domain.ports import KeyValueStore
from domain.schemas import EvaluationRecord

logger = logging.getLogger(__name__)

KEY_PREFIX = "resume:"


def record_key(record_id: str) -> str:
    return f"{KEY_PREFIX}{record_id}"


class RecordsRepository:
    """Checkpoint store for evaluation records.

    Writes go straight through to the key-value capability in call order, so
    the last ``save`` for a key is what ``load`` returns.

    The stored format is shared with records written by earlier releases of
    the resume reviewer: keys are ``resume:<id>`` and tips serialize as
    ``type/tip/explanation`` with ``good``/``improve`` kinds. Changing either
    makes existing records unreachable or unreadable.
    """

    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    async def save(self, key: str, record: EvaluationRecord) -> None:
        try:
            await self._kv.set(key, record.to_json())
        except Exception as exc:
            raise PersistenceFailure(f"Failed to save {key}: {exc}") from exc
        logger.info("Saved %s", key)

    async def load(self, key: str) -> Optional[EvaluationRecord]:
        try:
            raw = await self._kv.get(key)
        except Exception as exc:
            raise PersistenceFailure(f"Failed to load {key}: {exc}") from exc
        if raw is None:
            return None
        try:
            return EvaluationRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceFailure(f"Stored record {key} is unreadable: {exc}") from exc
