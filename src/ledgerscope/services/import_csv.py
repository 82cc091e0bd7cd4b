"""CSV ingestion of ledger table dumps."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

from ..domain.repositories.ledger import LedgerRepository
from ..logging_config import get_logger
from ..models.record import LedgerRecord, record_from_mapping

logger = get_logger(__name__)


def normalize_frame(*, file_path: Path, encoding: str = "utf-8", sep: str = ",") -> pd.DataFrame:
    """Load a CSV file into a DataFrame with consistent column casing.

    Every column is read as text so codes such as ``element`` keep their
    original spelling until record parsing.
    """

    frame = pd.read_csv(file_path, encoding=encoding, sep=sep, dtype=str, keep_default_na=False)
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    return frame


def records_from_rows(rows: Iterable[Mapping]) -> list[LedgerRecord]:
    """Convert dict-like rows into records, skipping rows that are entirely blank."""

    records: list[LedgerRecord] = []
    for row in rows:
        if not any(str(value).strip() for value in row.values() if value is not None):
            continue
        records.append(record_from_mapping(row))
    return records


def read_ledger_csv(csv_path: Path, *, encoding: str = "utf-8") -> list[LedgerRecord]:
    frame = normalize_frame(file_path=csv_path, encoding=encoding)
    return records_from_rows(frame.to_dict(orient="records"))


def import_csv_file(
    *, csv_path: Path, repository: LedgerRepository, encoding: str = "utf-8"
) -> int:
    """Parse the file, persist the records and return how many were stored."""

    records = read_ledger_csv(csv_path, encoding=encoding)
    stored = repository.add_records(records)
    logger.info("Ledger CSV imported", extra={"path": str(csv_path), "records": stored})
    return stored
