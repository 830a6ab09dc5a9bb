"""
Database access for the voting service

One engine per process, built lazily from Settings.DATABASE_URL. Use cases
receive a Session and own their transaction (commit or rollback); get_db
only opens and closes it around a request.
"""
import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from treasury.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for users, budget tables, statistics and the event log"""
    pass


_engine = None
_SessionLocal = None


def get_engine():
    """Engine for the configured PostgreSQL database (created on first use)"""
    global _engine
    if _engine is None:
        _engine = create_engine(get_settings().get_sqlalchemy_url(), pool_pre_ping=True)
    return _engine


def get_session_factory():
    """
    Session factory with autoflush off: vote validation reads the store
    before anything is written, and writes are flushed explicitly.
    """
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Session:
    """
    FastAPI dependency: one session per request, always closed

    Usage:
        @router.post("/submit")
        def submit_vote(req: SubmitVoteRequest, db: Session = Depends(get_db)):
            CastVoteUseCase(db).execute(user.id, req.budget_item_id, req.amount)
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness probe behind GET /ready: a raw psycopg round trip, bypassing the pool

    Raises:
        psycopg.OperationalError: if the database is unreachable
    """
    with psycopg.connect(get_settings().DATABASE_URL, connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
