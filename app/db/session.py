"""
Database Session Management

Requests use the engine and session factory that atams.db.init_database sets up
in app.main, so the DB_POOL_* settings and the /health pool checks apply to the
same connection pool.
"""
from atams.db import get_db

__all__ = ["get_db"]
