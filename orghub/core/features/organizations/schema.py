# (c) Copyright Datacraft, 2026
"""Organization Pydantic schemas."""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from .db.orm import DataClassification, MembershipStatus


class OrganizationCreate(BaseModel):
	"""Schema for creating an organization."""
	model_config = ConfigDict(extra="forbid")

	name: str = Field(..., min_length=1, max_length=255)
	slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
	data_residency: str | None = None
	data_classification: DataClassification | None = None


class OrganizationInfo(BaseModel):
	"""Basic organization information."""
	id: str
	name: str
	slug: str
	status: str
	data_residency: str
	data_classification: str
	created_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class OrganizationCreated(BaseModel):
	organization: OrganizationInfo
	seeded_default_policies: bool


class AuthorizationContextInfo(BaseModel):
	"""The caller's resolved authorization context."""
	org_id: str
	user_id: str
	role_key: str
	role_name: str | None = None
	department_id: str | None = None
	data_residency: str | None = None
	data_classification: str | None = None
	correlation_id: str

	model_config = ConfigDict(from_attributes=True)


class MembershipCreate(BaseModel):
	"""Schema for adding a member."""
	model_config = ConfigDict(extra="forbid")

	user_id: str = Field(..., min_length=1, max_length=255)
	role_name: str = Field(..., min_length=1, max_length=255)
	department_id: str | None = None
	status: MembershipStatus = MembershipStatus.ACTIVE


class MembershipInfo(BaseModel):
	id: str
	user_id: str
	role_key: str | None = None
	role_name: str | None = None
	department_id: str | None = None
	status: str
	created_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)
