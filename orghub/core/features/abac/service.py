# (c) Copyright Datacraft, 2026
"""ABAC policy service for organization access control decisions."""
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.config import Settings, get_settings
from orghub.core.exceptions import AuthorizationError, DuplicatePolicyError, PolicyNotFoundError
from orghub.core.features.monitoring.metrics import record_decision
from orghub.core.features.organizations.access import AuthorizationContext

from .db import AbacPolicyDB
from .defaults import DEFAULT_BOOTSTRAP_POLICIES
from .engine import PolicyEngine
from .guard import AbacGuard, build_resource_attributes, build_subject_attributes
from .models import AbacDecision, AbacPolicy, AbacRequest, PolicyEffect
from .templates import export_policy_template, parse_policy_template
from .validation import PolicyValidationError, ValidationIssue, validate_policies, validate_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EffectivePolicies:
	policies: tuple[AbacPolicy, ...]
	using_fallback: bool


class AbacPolicyService:
	"""
	High-level service for ABAC policy management and access checks.

	Usage:
		service = AbacPolicyService(session)
		await service.require_allowance(context, "org.abac.update", "org.abac")
		await service.set_policies(context.org_id, payload)
		await session.commit()

	Mutations only flush; the caller owns the transaction. The one
	exception is a denied ``require_allowance``, which commits its
	decision log before raising so denials are never lost.
	"""

	def __init__(self, session: AsyncSession, settings: Settings | None = None):
		self.session = session
		self.settings = settings or get_settings()
		self.db = AbacPolicyDB(session)
		self.guard = AbacGuard(self.settings.abac_bypass_roles)

	# --- Policy sets ---

	async def get_effective_policies(self, org_id: str) -> EffectivePolicies:
		"""Stored policies, or the bootstrap defaults when none are stored."""
		stored = await self.db.get_policies_for_org(org_id)
		if stored:
			return EffectivePolicies(policies=tuple(stored), using_fallback=False)
		return EffectivePolicies(policies=DEFAULT_BOOTSTRAP_POLICIES, using_fallback=True)

	async def set_policies(self, org_id: str, raw_items: Any) -> list[AbacPolicy]:
		"""Validate and replace the organization's policy set."""
		policies = validate_policies(raw_items)
		await self.db.set_policies_for_org(org_id, policies)
		logger.info(f"Replaced ABAC policies for org {org_id} ({len(policies)} policies)")
		return policies

	async def restore_defaults(self, org_id: str) -> list[AbacPolicy]:
		await self.db.set_policies_for_org(org_id, DEFAULT_BOOTSTRAP_POLICIES)
		logger.info(f"Restored default ABAC policies for org {org_id}")
		return list(DEFAULT_BOOTSTRAP_POLICIES)

	async def ensure_default_policies(self, org_id: str) -> bool:
		"""Seed the bootstrap policies when the organization has none stored."""
		if await self.db.count_policies_for_org(org_id) > 0:
			return False
		await self.db.set_policies_for_org(org_id, DEFAULT_BOOTSTRAP_POLICIES)
		logger.info(f"Seeded default ABAC policies for org {org_id}")
		return True

	# --- Single policies ---

	async def add_policy(self, org_id: str, raw: Any) -> AbacPolicy:
		policy = validate_policy(raw)
		# The effective fallback set becomes the stored set before it is edited
		await self.ensure_default_policies(org_id)
		if await self.db.get_policy(org_id, policy.id) is not None:
			raise DuplicatePolicyError(policy.id)
		return await self.db.add_policy(org_id, policy)

	async def update_policy(self, org_id: str, policy_id: str, raw: Any) -> AbacPolicy:
		if isinstance(raw, Mapping):
			raw = {"id": policy_id, **raw}
			if raw["id"] != policy_id:
				raise PolicyValidationError([ValidationIssue("policy.id", "id cannot be changed")])
		policy = validate_policy(raw)
		await self.ensure_default_policies(org_id)
		updated = await self.db.update_policy(org_id, policy)
		if updated is None:
			raise PolicyNotFoundError(policy_id)
		return updated

	async def delete_policy(self, org_id: str, policy_id: str) -> None:
		await self.ensure_default_policies(org_id)
		if not await self.db.delete_policy(org_id, policy_id):
			raise PolicyNotFoundError(policy_id)

	# --- Templates ---

	async def export_template(self, org_id: str) -> str:
		effective = await self.get_effective_policies(org_id)
		return export_policy_template(effective.policies)

	async def import_template(self, org_id: str, text: str) -> list[AbacPolicy]:
		"""Parse a template and replace the policy set with it."""
		result = parse_policy_template(text)
		if not result.ok:
			issues = list(result.issues) or [ValidationIssue("template", result.message or "Invalid template")]
			raise PolicyValidationError(issues)
		await self.db.set_policies_for_org(org_id, result.policies)
		logger.info(f"Imported ABAC template for org {org_id} ({len(result.policies)} policies)")
		return list(result.policies)

	# --- Access checks ---

	async def check_access(
		self,
		context: AuthorizationContext,
		action: str,
		resource_type: str,
		resource_attributes: Mapping[str, Any] | None = None,
		log_decision: bool = True,
	) -> AbacDecision:
		"""
		Check if the acting user can perform an action on a resource type.

		This is the main entry point for authorization. Owners (or the
		configured bypass roles) are allowed before policies are loaded.
		With ``log_decision=False`` the check is a preview: it is neither
		persisted nor counted in the decision metrics.
		"""
		request = AbacRequest(action=action, resource_type=resource_type)
		started = time.perf_counter()
		if self.guard.is_bypassed(context):
			decision = self.guard.authorize(context, (), request, resource_attributes)
		else:
			effective = await self.get_effective_policies(context.org_id)
			decision = self.guard.authorize(context, effective.policies, request, resource_attributes)
		elapsed = time.perf_counter() - started

		logger.debug(
			f"ABAC {decision.effect.value} for {context.user_id} on {action}/{resource_type}: {decision.reason}"
		)

		if not log_decision:
			return decision

		record_decision(decision.effect.value, decision.bypassed, elapsed)
		if self.settings.abac_decision_log_enabled:
			await self.db.log_decision(
				org_id=context.org_id,
				user_id=context.user_id,
				action=action,
				resource_type=resource_type,
				decision=decision.effect,
				matched_policy_id=decision.policy_id,
				reason=decision.reason,
				bypassed=decision.bypassed,
				correlation_id=context.correlation_id,
			)
		return decision

	async def require_allowance(
		self,
		context: AuthorizationContext,
		action: str,
		resource_type: str,
		resource_attributes: Mapping[str, Any] | None = None,
	) -> AbacDecision:
		"""Raise AuthorizationError unless the decision is allow."""
		decision = await self.check_access(context, action, resource_type, resource_attributes)
		if not decision.allowed:
			logger.info(f"ABAC denied {context.user_id} on {action}/{resource_type} in org {context.org_id}")
			await self.session.commit()
			raise AuthorizationError(
				f"ABAC policy denied {action} on {resource_type}",
				reason=decision.reason,
			)
		return decision

	async def dry_run(
		self,
		context: AuthorizationContext,
		action: str,
		resource_type: str,
		subject_attributes: Mapping[str, Any] | None = None,
		resource_attributes: Mapping[str, Any] | None = None,
		raw_policies: Any = None,
	) -> AbacDecision:
		"""
		Evaluate a request without logging it.

		Uses the caller's context unless explicit subject attributes are
		given, and the effective policy set unless draft policies are
		given. No bypass is applied so drafts can be tested by owners.
		"""
		if raw_policies is not None:
			policies = tuple(validate_policies(raw_policies))
		else:
			policies = (await self.get_effective_policies(context.org_id)).policies

		subject = dict(subject_attributes) if subject_attributes is not None else build_subject_attributes(context)
		resource = build_resource_attributes(context, resource_attributes)
		request = AbacRequest(action=action, resource_type=resource_type)
		return PolicyEngine(policies).decide(request, subject, resource)

	async def get_effective_permissions(
		self,
		context: AuthorizationContext,
		resource_type: str,
		actions: list[str],
	) -> dict[str, bool]:
		"""Map each action to whether it is allowed, without logging."""
		permissions = {}
		for action in actions:
			decision = await self.check_access(context, action, resource_type, log_decision=False)
			permissions[action] = decision.allowed
		return permissions

	async def summary(self, context: AuthorizationContext) -> dict:
		"""Policy counts, fallback flag and the caller's view of the ABAC surface."""
		effective = await self.get_effective_policies(context.org_id)
		allow_count = sum(1 for p in effective.policies if p.effect == PolicyEffect.ALLOW)
		return {
			"org_id": context.org_id,
			"policy_count": len(effective.policies),
			"allow_count": allow_count,
			"deny_count": len(effective.policies) - allow_count,
			"using_fallback_policies": effective.using_fallback,
			"role_key": context.role_key,
			"bypassed": self.guard.is_bypassed(context),
			"permissions": await self.get_effective_permissions(
				context, "org.abac", ["org.abac.read", "org.abac.update"]
			),
		}
