"""
Base model with common fields for the SQL document tables.
"""
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

from utils.helpers import generate_id

db = SQLAlchemy()


def _now():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """
    Abstract base model that the document tables inherit from.
    Contains common fields like id, created_at, updated_at.
    """
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=generate_id)

    # Row timestamps; document timestamps live inside the body
    created_at = db.Column(db.DateTime, default=_now)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now)

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.id}>'
