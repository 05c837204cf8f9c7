from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from .config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {"echo": settings.DB_SYNC_ECHO, "pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update({"pool_size": settings.DB_POOL_SIZE, "max_overflow": settings.DB_MAX_OVERFLOW})
    return kwargs


engine = create_engine(settings.sync_database_url, **_engine_kwargs(settings.sync_database_url))

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
