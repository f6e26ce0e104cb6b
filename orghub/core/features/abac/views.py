# (c) Copyright Datacraft, 2026
"""Pydantic schemas for the ABAC API."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .models import AbacDecision, AbacPolicy, PolicyEffect


class PolicySchema(BaseModel):
	"""Serialized ABAC policy as stored and exported."""
	id: str
	effect: PolicyEffect
	actions: list[str]
	resources: list[str]
	priority: int = 0
	description: str | None = None
	condition: dict[str, Any] | None = None

	@classmethod
	def from_policy(cls, policy: AbacPolicy) -> "PolicySchema":
		return cls.model_validate(policy.to_dict())


class PolicyListResponse(BaseModel):
	"""Effective policies for an organization."""
	items: list[PolicySchema]
	total: int
	using_fallback_policies: bool


class PolicySetReplace(BaseModel):
	"""Body for replacing the whole policy set.

	Items are validated by the policy validator rather than by pydantic so
	every problem is reported with its path in one response.
	"""
	model_config = ConfigDict(extra="forbid")

	policies: list[Any]


class TemplateImport(BaseModel):
	model_config = ConfigDict(extra="forbid")

	template: str = Field(..., min_length=1)


class TemplateExport(BaseModel):
	template: str
	using_fallback_policies: bool


class EvaluateRequest(BaseModel):
	"""Dry-run evaluation of one request."""
	model_config = ConfigDict(extra="forbid")

	action: str = Field(..., min_length=1)
	resource_type: str = Field(..., min_length=1)
	subject_attributes: dict[str, Any] | None = None
	resource_attributes: dict[str, Any] = Field(default_factory=dict)
	policies: list[Any] | None = None


class EvaluateResponse(BaseModel):
	allowed: bool
	effect: PolicyEffect
	matched_policy_id: str | None = None
	active_policy_ids: list[str] = Field(default_factory=list)
	reason: str
	bypassed: bool = False

	@classmethod
	def from_decision(cls, decision: AbacDecision) -> "EvaluateResponse":
		return cls(
			allowed=decision.allowed,
			effect=decision.effect,
			matched_policy_id=decision.policy_id,
			active_policy_ids=list(decision.active_policy_ids),
			reason=decision.reason,
			bypassed=decision.bypassed,
		)


class AbacSummary(BaseModel):
	"""Security debug view of an organization's ABAC state."""
	org_id: str
	policy_count: int
	allow_count: int
	deny_count: int
	using_fallback_policies: bool
	role_key: str
	bypassed: bool
	permissions: dict[str, bool]


class DecisionLogResponse(BaseModel):
	"""Schema for decision log response."""
	model_config = ConfigDict(from_attributes=True)

	id: str
	org_id: str
	user_id: str
	timestamp: datetime
	action: str
	resource_type: str
	decision: PolicyEffect
	matched_policy_id: str | None
	reason: str | None
	bypassed: bool
	correlation_id: str | None
