# rxprint/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Tables backing the durable client storage."""
    pass


# register models so metadata is complete for create_all()
from rxprint.models import client_storage  # noqa: F401,E402
