"""
Tests for session plumbing and database URL handling
"""
from sqlalchemy.orm import sessionmaker

from treasury.config import Settings
from treasury.infrastructure.db import session as db_session_module


def test_get_db_yields_and_closes(monkeypatch, db_engine):
    factory = sessionmaker(bind=db_engine, autoflush=False)
    monkeypatch.setattr(db_session_module, "_SessionLocal", factory)

    gen = db_session_module.get_db()
    db = next(gen)
    db.execute(db_session_module.Base.metadata.tables["users"].select())
    assert db.in_transaction()

    gen.close()
    assert not db.in_transaction()


def test_session_factory_is_cached(monkeypatch, db_engine):
    factory = sessionmaker(bind=db_engine)
    monkeypatch.setattr(db_session_module, "_SessionLocal", factory)
    assert db_session_module.get_session_factory() is factory


def test_sqlalchemy_url_uses_psycopg_driver():
    settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/treasury")
    assert settings.get_sqlalchemy_url() == "postgresql+psycopg://u:p@db:5432/treasury"


def test_sqlalchemy_url_left_alone_for_other_drivers():
    assert Settings(DATABASE_URL="sqlite:///x.db").get_sqlalchemy_url() == "sqlite:///x.db"
