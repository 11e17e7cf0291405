"""Column helpers shared by every owned table."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String


def new_id() -> str:
    return str(uuid.uuid4())


def id_column():
    return Column(String(36), primary_key=True, default=new_id)


def owner_column():
    return Column(String(36), nullable=False, index=True)


def created_at_column():
    return Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


def updated_at_column():
    return Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
