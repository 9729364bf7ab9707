from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from skillsync.core.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db(bind=None) -> None:
    # Importing the models registers their tables on Base.metadata.
    from skillsync.models import entities  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
