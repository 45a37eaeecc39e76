from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DEFAULT_SETTINGS

SQLALCHEMY_DATABASE_URL = DEFAULT_SETTINGS.database_url

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # SQLite objects are created per thread; FastAPI serves from a pool
    connect_args = {"check_same_thread": False}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db():
    # import models so they are registered on Base.metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
