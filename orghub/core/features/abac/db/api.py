# (c) Copyright Datacraft, 2026
"""Database operations for ABAC policy sets."""
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7str

from orghub.core.utils.tz import utc_now
from .orm import AbacDecisionLogModel, AbacPolicyModel
from ..models import AbacPolicy, PolicyCondition, PolicyEffect


class AbacPolicyDB:
	"""Per-organization policy store and decision log."""

	def __init__(self, session: AsyncSession):
		self.session = session

	# --- Policy set ---

	async def get_policies_for_org(self, org_id: str) -> list[AbacPolicy]:
		"""Stored policies, highest priority first, ties by policy id."""
		query = (
			select(AbacPolicyModel)
			.where(AbacPolicyModel.org_id == org_id)
			.order_by(
				AbacPolicyModel.priority.desc(),
				AbacPolicyModel.policy_id,
				AbacPolicyModel.position,
			)
		)
		result = await self.session.execute(query)
		return [self.model_to_policy(m) for m in result.scalars().all()]

	async def count_policies_for_org(self, org_id: str) -> int:
		query = select(func.count()).select_from(AbacPolicyModel).where(AbacPolicyModel.org_id == org_id)
		return await self.session.scalar(query) or 0

	async def set_policies_for_org(self, org_id: str, policies: Iterable[AbacPolicy]) -> None:
		"""Replace the organization's whole policy set."""
		await self.session.execute(delete(AbacPolicyModel).where(AbacPolicyModel.org_id == org_id))
		for position, policy in enumerate(policies):
			self.session.add(self._policy_to_model(org_id, policy, position))
		await self.session.flush()

	# --- Single policies ---

	async def _get_model(self, org_id: str, policy_id: str) -> AbacPolicyModel | None:
		query = select(AbacPolicyModel).where(
			and_(AbacPolicyModel.org_id == org_id, AbacPolicyModel.policy_id == policy_id)
		)
		return await self.session.scalar(query)

	async def get_policy(self, org_id: str, policy_id: str) -> AbacPolicy | None:
		model = await self._get_model(org_id, policy_id)
		return self.model_to_policy(model) if model else None

	async def add_policy(self, org_id: str, policy: AbacPolicy) -> AbacPolicy:
		"""Append a policy to the end of the organization's set."""
		query = select(func.max(AbacPolicyModel.position)).where(AbacPolicyModel.org_id == org_id)
		last = await self.session.scalar(query)
		model = self._policy_to_model(org_id, policy, 0 if last is None else last + 1)
		self.session.add(model)
		await self.session.flush()
		return self.model_to_policy(model)

	async def update_policy(self, org_id: str, policy: AbacPolicy) -> AbacPolicy | None:
		"""Replace a stored policy's content, keeping its position."""
		model = await self._get_model(org_id, policy.id)
		if not model:
			return None

		model.effect = policy.effect
		model.priority = policy.priority
		model.actions = list(policy.actions)
		model.resources = list(policy.resources)
		model.description = policy.description
		model.condition = policy.condition.to_dict() if policy.condition else None
		model.updated_at = utc_now()
		await self.session.flush()
		return self.model_to_policy(model)

	async def delete_policy(self, org_id: str, policy_id: str) -> bool:
		model = await self._get_model(org_id, policy_id)
		if not model:
			return False
		await self.session.delete(model)
		await self.session.flush()
		return True

	# --- Decision logging ---

	async def log_decision(
		self,
		org_id: str,
		user_id: str,
		action: str,
		resource_type: str,
		decision: PolicyEffect,
		matched_policy_id: str | None = None,
		reason: str | None = None,
		bypassed: bool = False,
		correlation_id: str | None = None,
	) -> AbacDecisionLogModel:
		"""Log an authorization decision."""
		log = AbacDecisionLogModel(
			id=uuid7str(),
			org_id=org_id,
			user_id=user_id,
			action=action,
			resource_type=resource_type,
			decision=decision,
			matched_policy_id=matched_policy_id,
			reason=reason,
			bypassed=bypassed,
			correlation_id=correlation_id,
		)
		self.session.add(log)
		await self.session.flush()
		return log

	async def get_decision_logs(
		self,
		org_id: str,
		user_id: str | None = None,
		action: str | None = None,
		decision: PolicyEffect | None = None,
		since: datetime | None = None,
		limit: int = 100,
	) -> Sequence[AbacDecisionLogModel]:
		"""Query decision logs, newest first."""
		conditions = [AbacDecisionLogModel.org_id == org_id]
		if user_id:
			conditions.append(AbacDecisionLogModel.user_id == user_id)
		if action:
			conditions.append(AbacDecisionLogModel.action == action)
		if decision:
			conditions.append(AbacDecisionLogModel.decision == decision)
		if since:
			conditions.append(AbacDecisionLogModel.timestamp >= since)

		query = (
			select(AbacDecisionLogModel)
			.where(and_(*conditions))
			.order_by(AbacDecisionLogModel.timestamp.desc())
			.limit(limit)
		)
		result = await self.session.execute(query)
		return result.scalars().all()

	# --- Helpers ---

	def _policy_to_model(self, org_id: str, policy: AbacPolicy, position: int) -> AbacPolicyModel:
		return AbacPolicyModel(
			id=uuid7str(),
			org_id=org_id,
			policy_id=policy.id,
			effect=policy.effect,
			priority=policy.priority,
			actions=list(policy.actions),
			resources=list(policy.resources),
			description=policy.description,
			condition=policy.condition.to_dict() if policy.condition else None,
			position=position,
		)

	def model_to_policy(self, model: AbacPolicyModel) -> AbacPolicy:
		"""Convert AbacPolicyModel to the domain AbacPolicy."""
		return AbacPolicy(
			id=model.policy_id,
			effect=model.effect,
			actions=tuple(model.actions or ()),
			resources=tuple(model.resources or ()),
			priority=model.priority if model.priority is not None else 0,
			description=model.description,
			condition=PolicyCondition.from_dict(model.condition) if model.condition else None,
		)
