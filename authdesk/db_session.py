from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from authdesk.config import DATABASE_URL, DB_SCHEMA, FALLBACK_DATABASE_URL
from authdesk.logger import log


def make_engine(url, echo=False):
    """
    Creates an engine for the given URL.
    SQLite has no schemas, so the auth schema is translated away there.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every checkout sees an empty db
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        return engine.execution_options(schema_translate_map={DB_SCHEMA: None})

    # pool_pre_ping keeps idle connections from going stale
    return create_engine(url, echo=echo, pool_pre_ping=True)


if DATABASE_URL == FALLBACK_DATABASE_URL:
    log.warning(f"DATABASE_URL / DB_PASSWORD not set, using {FALLBACK_DATABASE_URL}")

engine = make_engine(DATABASE_URL)

# scoped_session hands every thread its own session
SessionLocal = scoped_session(sessionmaker(autocommit=False, autoflush=False, bind=engine))


def get_db():
    """
    Yields a session and closes it afterwards.
        db = next(get_db())
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
