import atams.db.session as atams_session
from sqlalchemy.orm import sessionmaker

from app.db.session import get_db


def test_get_db_uses_session_factory_from_init_database(engine, monkeypatch):
    monkeypatch.setattr(atams_session, "SessionLocal", sessionmaker(bind=engine))

    sessions = get_db()
    db = next(sessions)
    try:
        assert db.get_bind() is engine
    finally:
        sessions.close()
