# (c) Copyright Datacraft, 2026
"""Organization and membership ORM models."""
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7str

from orghub.core.db.base import Base
from orghub.core.utils.tz import utc_now


class OrganizationStatus(str, Enum):
	ACTIVE = "active"
	SUSPENDED = "suspended"


class MembershipStatus(str, Enum):
	ACTIVE = "ACTIVE"
	INVITED = "INVITED"
	SUSPENDED = "SUSPENDED"
	DEACTIVATED = "DEACTIVATED"


class DataClassification(str, Enum):
	OFFICIAL = "OFFICIAL"
	OFFICIAL_SENSITIVE = "OFFICIAL_SENSITIVE"
	SECRET = "SECRET"
	TOP_SECRET = "TOP_SECRET"
	RESTRICTED = "RESTRICTED"


class Organization(Base):
	"""Tenant organization."""
	__tablename__ = "organizations"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
	name: Mapped[str] = mapped_column(String(255), nullable=False)
	status: Mapped[str] = mapped_column(String(20), default=OrganizationStatus.ACTIVE.value)

	# Data governance
	data_residency: Mapped[str] = mapped_column(String(50), default="UK_ONLY")
	data_classification: Mapped[str] = mapped_column(
		String(50), default=DataClassification.OFFICIAL.value
	)

	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=func.now(), nullable=False
	)

	memberships: Mapped[list["Membership"]] = relationship(
		"Membership", back_populates="organization", cascade="all, delete-orphan"
	)

	def __repr__(self):
		return f"Organization(id={self.id}, slug={self.slug})"


class Membership(Base):
	"""A user's role within one organization."""
	__tablename__ = "memberships"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	org_id: Mapped[str] = mapped_column(
		String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
	)
	user_id: Mapped[str] = mapped_column(String(255), nullable=False)
	role_key: Mapped[str | None] = mapped_column(String(50))
	role_name: Mapped[str | None] = mapped_column(String(255))
	department_id: Mapped[str | None] = mapped_column(String(100))
	status: Mapped[str] = mapped_column(String(20), default=MembershipStatus.ACTIVE.value)
	metadata_json: Mapped[dict | None] = mapped_column("metadata", JSON, default=dict)
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)

	organization: Mapped[Organization] = relationship("Organization", back_populates="memberships")

	__table_args__ = (
		UniqueConstraint("org_id", "user_id", name="uq_memberships_org_user"),
		Index("ix_memberships_user", "user_id"),
	)

	def __repr__(self):
		return f"Membership(org_id={self.org_id}, user_id={self.user_id}, role={self.role_key})"
