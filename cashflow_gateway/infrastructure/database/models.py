"""SQLAlchemy ORM models for the projection plan store"""

from sqlalchemy import Column, DateTime, JSON, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ProjectionPlanRecord(Base):
    """Latest projection plan per country; saving a new plan replaces the old one"""

    __tablename__ = "projection_plan"

    country = Column(Text, primary_key=True)
    plan_id = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
