import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import String, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.sql.expression import FunctionElement

from autokatalog.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class casefold(FunctionElement):
    """Case folding for case-insensitive comparisons.

    Renders as ``lower()`` in general. SQLite's ``lower()`` folds ASCII only,
    so SQLite connections get a ``casefold()`` backed by ``str.casefold``.
    """

    type = String()
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element, compiler, **kw):
    return "lower(%s)" % compiler.process(element.clauses, **kw)


@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element, compiler, **kw):
    return "casefold(%s)" % compiler.process(element.clauses, **kw)


def _casefold(value):
    return value.casefold() if value is not None else None


def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    new_engine = create_engine(url, echo=echo, future=True, **kwargs)

    if new_engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys (and ON DELETE CASCADE) off per connection
        @event.listens_for(new_engine, "connect")
        def _configure_sqlite(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)

    return new_engine


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, future=True)


settings = get_settings()
engine = make_engine(settings.database_url, echo=settings.echo_sql)
SessionLocal = make_session_factory(engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit the session's work on success, roll it back on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        logger.debug("transaction: rollback")
        db.rollback()
        raise
