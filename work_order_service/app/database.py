from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings


def _get_engine_kwargs(database_url: str) -> dict:
    """Return engine configuration based on database type."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    elif database_url.startswith("mssql"):
        return {
            "pool_pre_ping": True,  # Verify connections before using
            "pool_recycle": 3600,  # Recycle connections after 1 hour
        }
    return {}


# Xpand is only read from; the engine is created on first use so the app
# can start (and be tested) without the ODBC driver present.
@lru_cache(maxsize=1)
def get_engine() -> Engine:
    url = settings.XPAND_DATABASE_URL
    return create_engine(url, **_get_engine_kwargs(url))


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def SessionLocal() -> Session:
    return get_session_factory()()


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
