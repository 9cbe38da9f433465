# app/db.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app.config import settings


def make_engine(url: str) -> Engine:
    """
    Engine for the record store.
    SQLite connections are shared across FastAPI's threadpool; an in-memory
    database additionally needs one pinned connection or every checkout sees
    an empty schema.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, future=True)
    options = {"connect_args": {"check_same_thread": False}, "future": True}
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


def make_session_factory(bind: Engine) -> sessionmaker:
    # Metrics only read; no autoflush, and rows stay usable after commit
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(settings.sqlalchemy_url)
SessionLocal = make_session_factory(engine)

# Base for models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
