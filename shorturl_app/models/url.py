import uuid

from sqlalchemy import Column, String
from shorturl_app.database.connection import Base
from shorturl_app.services.validator import MAX_PATH_LENGTH


def _new_id() -> str:
    return str(uuid.uuid4())


class ShortUrlRecord(Base):
    """
    Relational row for one short URL.

    The id is a surrogate key only; lookups always go through the unique
    index on path.
    """
    __tablename__ = "short_urls"

    id = Column(String(36), primary_key=True, default=_new_id)
    # unique=True makes concurrent inserts of the same path fail atomically
    path = Column(String(MAX_PATH_LENGTH), unique=True, nullable=False, index=True)
    destination = Column(String, nullable=False)
