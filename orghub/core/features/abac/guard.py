# (c) Copyright Datacraft, 2026
"""
Authorization-layer stages around the policy engine.

Builds subject and resource attribute maps from an ``AuthorizationContext``
and short-circuits configured roles (organization owners by default)
before any policy is evaluated.
"""
import logging
from typing import Any, Iterable, Mapping

from orghub.core.features.organizations.access import AuthorizationContext

from .engine import PolicyEngine
from .models import AbacDecision, AbacPolicy, AbacRequest, PolicyEffect

logger = logging.getLogger(__name__)


def build_subject_attributes(context: AuthorizationContext) -> dict[str, Any]:
	roles = [context.role_key]
	if context.role_name and context.role_name != context.role_key:
		roles.append(context.role_name)
	return {
		"orgId": context.org_id,
		"userId": context.user_id,
		"roles": roles,
		"roleKey": context.role_key,
		"departmentId": context.department_id,
	}


def build_resource_attributes(
	context: AuthorizationContext,
	attributes: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
	"""Caller-supplied resource attributes plus the organization's data governance."""
	resource = dict(attributes or {})
	resource.setdefault("orgId", context.org_id)
	resource["residency"] = context.data_residency
	resource["classification"] = context.data_classification
	return resource


class AbacGuard:
	"""Owner bypass followed by policy evaluation."""

	def __init__(self, bypass_roles: Iterable[str] = ("owner",), engine_factory=PolicyEngine):
		self.bypass_roles = frozenset(bypass_roles)
		self._engine_factory = engine_factory

	def is_bypassed(self, context: AuthorizationContext) -> bool:
		return context.role_key in self.bypass_roles

	def authorize(
		self,
		context: AuthorizationContext,
		policies: Iterable[AbacPolicy],
		request: AbacRequest,
		resource_attributes: Mapping[str, Any] | None = None,
	) -> AbacDecision:
		if self.is_bypassed(context):
			logger.info(
				f"ABAC bypass for {context.role_key} {context.user_id} "
				f"on {request.action}/{request.resource_type} in org {context.org_id}"
			)
			return AbacDecision(
				effect=PolicyEffect.ALLOW,
				reason=f"Role '{context.role_key}' bypasses ABAC",
				bypassed=True,
			)

		engine = self._engine_factory(policies)
		return engine.decide(
			request,
			build_subject_attributes(context),
			build_resource_attributes(context, resource_attributes),
		)
