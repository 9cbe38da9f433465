from sqlalchemy.pool import StaticPool

from app.db import make_engine, make_session_factory


def test_in_memory_sqlite_engine_pins_one_connection():
    engine = make_engine("sqlite://")
    try:
        assert isinstance(engine.pool, StaticPool)
    finally:
        engine.dispose()


def test_file_sqlite_engine_uses_default_pool(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'rides.db'}")
    try:
        assert not isinstance(engine.pool, StaticPool)
    finally:
        engine.dispose()


def test_session_factory_keeps_rows_after_commit():
    engine = make_engine("sqlite://")
    try:
        factory = make_session_factory(engine)
        assert factory.kw["expire_on_commit"] is False
        assert factory.kw["autoflush"] is False
    finally:
        engine.dispose()
