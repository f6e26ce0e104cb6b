# (c) Copyright Datacraft, 2026
"""
Policy Evaluation Engine for ABAC.

Combines the policies that are active for a request using
deny-overrides within the highest priority tier and default deny.
"""
import logging
from typing import Any, Iterable

from .matcher import is_active
from .models import DEFAULT_PRIORITY, AbacDecision, AbacPolicy, AbacRequest, PolicyEffect
from .resolver import AttributeResolver, AttributeSet

logger = logging.getLogger(__name__)


def _priority_of(policy: AbacPolicy) -> int:
	priority = policy.priority
	if isinstance(priority, int) and not isinstance(priority, bool):
		return priority
	return DEFAULT_PRIORITY


def order_policies(policies: Iterable[AbacPolicy]) -> list[AbacPolicy]:
	"""Priority descending, then id ascending, then input position."""
	indexed = list(enumerate(policies))
	indexed.sort(key=lambda item: (-_priority_of(item[1]), str(item[1].id), item[0]))
	return [policy for _, policy in indexed]


class PolicyEngine:
	"""
	Decision combinator over an immutable snapshot of policies.

	Evaluation strategy:
	1. Keep the policies whose actions/resources match and whose
	   conditions all hold (the active policies)
	2. No active policy means DENY
	3. Order active policies by priority (higher first, ties by id)
	4. Any DENY in the highest priority tier wins
	5. Otherwise any ALLOW allows, else DENY
	"""

	def __init__(
		self,
		policies: Iterable[AbacPolicy] = (),
		resolver: AttributeResolver | None = None,
	):
		self._policies: tuple[AbacPolicy, ...] = tuple(policies)
		self._resolver = resolver or AttributeResolver()

	@property
	def policies(self) -> tuple[AbacPolicy, ...]:
		return self._policies

	def decide(
		self,
		request: AbacRequest,
		subject_attributes: Any = None,
		resource_attributes: Any = None,
	) -> AbacDecision:
		"""Evaluate the snapshot and explain the outcome."""
		attributes = self._resolver.resolve(subject_attributes, resource_attributes)
		active = order_policies(self._active_policies(request, attributes))
		active_ids = tuple(p.id for p in active)

		if not active:
			logger.debug(f"No active policy for {request.action} on {request.resource_type}")
			return AbacDecision(
				effect=PolicyEffect.DENY,
				reason="No applicable policy (default deny)",
			)

		top_priority = _priority_of(active[0])
		top_tier = [p for p in active if _priority_of(p) == top_priority]
		for policy in top_tier:
			if policy.effect == PolicyEffect.DENY:
				return AbacDecision(
					effect=PolicyEffect.DENY,
					reason=f"Denied by policy: {policy.id}",
					policy_id=policy.id,
					active_policy_ids=active_ids,
				)

		for policy in active:
			if policy.effect == PolicyEffect.ALLOW:
				return AbacDecision(
					effect=PolicyEffect.ALLOW,
					reason=f"Allowed by policy: {policy.id}",
					policy_id=policy.id,
					active_policy_ids=active_ids,
				)

		return AbacDecision(
			effect=PolicyEffect.DENY,
			reason="No matching ALLOW policy",
			active_policy_ids=active_ids,
		)

	def evaluate(
		self,
		request: AbacRequest,
		subject_attributes: Any = None,
		resource_attributes: Any = None,
	) -> PolicyEffect:
		return self.decide(request, subject_attributes, resource_attributes).effect

	def _active_policies(self, request: AbacRequest, attributes: AttributeSet) -> list[AbacPolicy]:
		active = []
		for policy in self._policies:
			try:
				if is_active(policy, request, attributes):
					active.append(policy)
			except Exception as e:
				# A malformed policy never matches; the decision still fails closed
				logger.warning(f"Skipping policy {getattr(policy, 'id', '?')}: {e}")
		return active


def evaluate(
	policies: Iterable[AbacPolicy],
	request: AbacRequest,
	subject_attributes: Any = None,
	resource_attributes: Any = None,
) -> PolicyEffect:
	"""Return ``allow`` or ``deny`` for a request against a policy set."""
	return PolicyEngine(policies).evaluate(request, subject_attributes, resource_attributes)


def decide(
	policies: Iterable[AbacPolicy],
	request: AbacRequest,
	subject_attributes: Any = None,
	resource_attributes: Any = None,
) -> AbacDecision:
	return PolicyEngine(policies).decide(request, subject_attributes, resource_attributes)
