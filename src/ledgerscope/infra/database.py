"""Engine and session wiring for the ``ledger_entry`` data source.

The engine is only ever read in bulk (one snapshot per session) and written by
CSV imports, so a single short-lived session per repository call is enough.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger
from ..models.ledger_entry import LedgerEntry

logger = get_logger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def create_ledger_engine(config: BaseConfig) -> Engine:
    return create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())


def create_ledger_schema(engine: Engine) -> None:
    """Create the ledger table if it does not exist yet."""

    SQLModel.metadata.create_all(engine, tables=[LedgerEntry.__table__])


def ledger_session_factory(engine: Engine) -> SessionFactory:
    """Sessions commit on success and roll back when the block raises."""

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def bootstrap_database(config: BaseConfig) -> tuple[Engine, SessionFactory]:
    engine = create_ledger_engine(config)
    create_ledger_schema(engine)
    logger.debug("Ledger database ready", extra={"url": engine.url.render_as_string(hide_password=True)})
    return engine, ledger_session_factory(engine)
