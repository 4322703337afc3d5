from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config import STORAGE_DSN
from models import Base


def make_engine(dsn: str = STORAGE_DSN):
    engine = create_engine(dsn, pool_pre_ping=True)
    init_db(engine)
    return engine


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine):
    """
    Create the local tables if they do not exist.
    Safe to call multiple times.
    """
    Base.metadata.create_all(bind=engine)
