"""Session-wide immutable snapshot of ledger records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from ..domain.repositories.ledger import LedgerRepository
from ..logging_config import get_logger
from ..models.record import LedgerRecord

logger = get_logger(__name__)


class LoadStatus(str, Enum):
    """Lifecycle of the session snapshot as seen by the surrounding UI."""

    NOT_LOADED = "not_loaded"
    READY = "ready"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LedgerStore:
    """Read-only record sequence owned for the whole session."""

    records: tuple[LedgerRecord, ...] = ()
    status: LoadStatus = LoadStatus.NOT_LOADED
    error: Optional[str] = None

    @classmethod
    def from_records(cls, records: Iterable[LedgerRecord]) -> "LedgerStore":
        snapshot = tuple(records)
        return cls(snapshot, LoadStatus.READY if snapshot else LoadStatus.EMPTY)

    @property
    def is_loaded(self) -> bool:
        return self.status in (LoadStatus.READY, LoadStatus.EMPTY)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[LedgerRecord]:
        return iter(self.records)


def load_store(repository: LedgerRepository) -> LedgerStore:
    """Fetch the full snapshot once.

    A failing data source yields an empty store flagged ``UNAVAILABLE`` so the
    engine keeps working on an empty set.
    """

    try:
        records = repository.load_records()
    except Exception as exc:
        logger.error("Ledger data source unavailable", exc_info=True)
        return LedgerStore((), LoadStatus.UNAVAILABLE, error=str(exc))

    store = LedgerStore.from_records(records)
    logger.info(
        "Ledger snapshot loaded",
        extra={"records": len(store), "status": store.status.value},
    )
    return store
