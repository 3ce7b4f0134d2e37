"""Venue ORM Model"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, Integer, String, Uuid
from sqlalchemy.sql import func

from ...db.models import Base


class VenueModel(Base):
    __tablename__ = 'venues'

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False)
    address = Column(String(300), nullable=False)
    city = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
