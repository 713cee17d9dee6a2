"""Database infrastructure: engines, schema and session factories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterable, Iterator, Tuple

from sqlalchemy import Table
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig, url: str | None = None) -> Engine:
    """Create a SQLModel engine for ``url`` (the record store by default)."""

    target = url or config.DATABASE_URL
    return create_engine(target, **config.sqlalchemy_engine_options(target))


def init_database(engine: Engine, tables: Iterable[Table] | None = None) -> None:
    """Create the given tables (all registered models when omitted)."""

    from .. import models  # noqa: F401  # ensure models registered with SQLModel metadata

    SQLModel.metadata.create_all(engine, tables=list(tables) if tables is not None else None)


def create_session_factory(engine: Engine) -> SessionFactory:
    """Create a session factory whose sessions commit on success and roll back on error."""

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


def bootstrap_database(
    config: BaseConfig, *, url: str | None = None, tables: Iterable[Table] | None = None
) -> Tuple[Engine, SessionFactory]:
    """Engine + session factory with schema init, shared by the app factory and the CLI."""

    engine = create_db_engine(config, url)
    init_database(engine, tables)
    return engine, create_session_factory(engine)
