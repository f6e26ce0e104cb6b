# (c) Copyright Datacraft, 2026
"""SQLAlchemy declarative base shared by all feature models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
	pass
