# (c) Copyright Datacraft, 2026
"""SQLAlchemy ORM models for ABAC policies and decision logs."""
from sqlalchemy import (
	Column, String, Integer, Boolean, DateTime, Text, ForeignKey, Enum, JSON, Index, UniqueConstraint
)
from uuid_extensions import uuid7str

from orghub.core.db.base import Base
from orghub.core.utils.tz import utc_now
from ..models import PolicyEffect


class AbacPolicyModel(Base):
	"""Persisted ABAC policy, one row per policy in an organization's set."""
	__tablename__ = "abac_policies"

	id = Column(String(36), primary_key=True, default=uuid7str)
	org_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
	policy_id = Column(String(255), nullable=False)
	effect = Column(Enum(PolicyEffect), nullable=False)
	priority = Column(Integer, nullable=False, default=0)
	actions = Column(JSON, default=list)  # List of action patterns
	resources = Column(JSON, default=list)  # List of resource type patterns
	description = Column(Text, nullable=True)
	condition = Column(JSON, nullable=True)
	position = Column(Integer, nullable=False, default=0)  # Declaration order within the saved set
	created_at = Column(DateTime(timezone=True), default=utc_now)
	updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

	__table_args__ = (
		UniqueConstraint("org_id", "policy_id", name="uq_abac_policies_org_policy"),
		Index("ix_abac_policies_org_priority", "org_id", "priority"),
	)


class AbacDecisionLogModel(Base):
	"""Audit log of ABAC authorization decisions."""
	__tablename__ = "abac_decision_logs"

	id = Column(String(36), primary_key=True, default=uuid7str)
	org_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
	user_id = Column(String(255), nullable=False)
	timestamp = Column(DateTime(timezone=True), default=utc_now, index=True)

	# Request
	action = Column(String(255), nullable=False)
	resource_type = Column(String(255), nullable=False)

	# Decision
	decision = Column(Enum(PolicyEffect), nullable=False)
	matched_policy_id = Column(String(255), nullable=True)
	reason = Column(Text, nullable=True)
	bypassed = Column(Boolean, nullable=False, default=False)
	correlation_id = Column(String(64), nullable=True)

	__table_args__ = (
		Index("ix_abac_decision_logs_org_time", "org_id", "timestamp"),
		Index("ix_abac_decision_logs_user_action", "user_id", "action"),
	)
