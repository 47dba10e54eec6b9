from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from app.settings import settings


def make_engine(sqlite_path: str):
    # sessions are opened from worker threads
    return create_engine(
        f"sqlite:///{sqlite_path}", echo=False, future=True,
        connect_args={"check_same_thread": False})


engine = make_engine(settings.SQLITE_PATH)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


def init_db(bind=None):
    from infra.db.models import KeyValueEntry
    Base.metadata.create_all(bind=bind or engine)
