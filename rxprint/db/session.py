# rxprint/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from rxprint.core.config import settings


def make_engine(db_uri: str) -> Engine:
    connect_args = {}
    if db_uri.startswith("sqlite"):
        # request handlers run in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(db_uri,
                         pool_pre_ping=True,
                         connect_args=connect_args,
                         future=True)


engine: Engine = make_engine(settings.STORE_DATABASE_URI)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)
