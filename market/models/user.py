"""User model. Rows are written by the account service; chat only reads them."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, String, Uuid

from market.db import Base
from market.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(320), unique=True, nullable=False, index=True)
    verified = Column(Boolean, nullable=False, default=False)
    avatar_url = Column(String(1024), nullable=True)
    avatar_public_id = Column(String(255), nullable=True)  # cloud image host id
