from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from config import settings
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("database")

if settings.is_sqlite:
    # File-based database shared by the request threads
    engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 30})
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=3600,
    )


@event.listens_for(engine, "connect")
def set_sqlite_pragmas(dbapi_connection, connection_record):
    """Configure connection-level settings"""
    if not settings.is_sqlite:
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create all tables that do not exist yet"""
    from models import Base  # Local import keeps models free of engine state

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready", category=LogCategory.DATABASE, extra={"url": engine.url.render_as_string()})


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
