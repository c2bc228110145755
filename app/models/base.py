from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from app.extensions import db
from sqlalchemy import BigInteger, Integer


# Use BIGINT in PostgreSQL, but INTEGER in SQLite so autoincrement works.
PKType = BigInteger().with_variant(Integer, "sqlite")


def new_uuid():
    return str(uuid4())


def serialize_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class SerializerMixin:
    def to_dict(self):
        return {column.name: serialize_value(getattr(self, column.key)) for column in self.__table__.columns}
