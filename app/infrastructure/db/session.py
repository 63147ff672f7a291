from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from app.config import DATABASE_URL, SQL_ECHO, DB_CONNECT_TIMEOUT
from .base import Base

if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False, "timeout": DB_CONNECT_TIMEOUT}
else:
    connect_args = {"connect_timeout": DB_CONNECT_TIMEOUT}

engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
)

if engine.dialect.name == "sqlite":
    # SQLite leaves foreign keys (and ON DELETE CASCADE) off unless asked per connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

__all__ = ["Base", "engine", "SessionLocal"]
