from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
import os


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Configure SQLite for better concurrent read/write behavior."""
    cursor = dbapi_connection.cursor()
    try:
        # Wait for locks instead of failing immediately.
        cursor.execute("PRAGMA busy_timeout=5000")
        # Readers are not blocked by writers.
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


DB_PATH = os.path.join(os.path.dirname(__file__), "data", "foodprint.db")
DEFAULT_DATABASE_URL = f"sqlite:///{DB_PATH}"


def make_engine(database_url: str | None = None) -> Engine:
    """Create an engine for `database_url` (defaults to the local SQLite file).

    SQLite engines get the pragmas above and allow cross-thread use, since the
    Flask dev server handles requests on worker threads.
    """

    url = database_url or DEFAULT_DATABASE_URL

    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    if url == DEFAULT_DATABASE_URL:
        os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 30},
        pool_pre_ping=True,
    )
    if ":memory:" not in url:
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


Base = declarative_base()
