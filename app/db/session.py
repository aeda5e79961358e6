"""Database engine and session factory."""
from typing import Any, Dict, Iterator

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings for ``database_url``. SQLite takes none of the server pool knobs."""

    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
    }


engine = create_engine(str(settings.DATABASE_URL), **engine_options(str(settings.DATABASE_URL)))

# Objects stay readable after commit; sync runs are returned to callers after the final commit.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    """Yield a request-scoped session, rolling back if the request fails."""

    db = SessionLocal()
    try:
        yield db
    except Exception as exc:
        logger.warning("Rolling back request session", error=str(exc))
        db.rollback()
        raise
    finally:
        db.close()
