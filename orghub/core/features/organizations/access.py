# (c) Copyright Datacraft, 2026
"""
Organization access guard.

Resolves the acting user's membership into an immutable
``AuthorizationContext`` that the ABAC guard reads subject and resource
attributes from.
"""
import logging
import re
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7str

from orghub.core.exceptions import AuthorizationError

from .db import api as org_api
from .db.orm import MembershipStatus

logger = logging.getLogger(__name__)

BUILTIN_ROLE_KEYS = ("globalAdmin", "owner", "orgAdmin", "hrAdmin", "manager", "compliance", "member")
CUSTOM_ROLE_KEY = "custom"

_ROLE_KEY_LOOKUP = {re.sub(r"[^a-z0-9]", "", key.lower()): key for key in BUILTIN_ROLE_KEYS}


@dataclass(frozen=True, slots=True)
class AuthorizationContext:
	"""Who is acting, in which organization, with which role."""
	org_id: str
	user_id: str
	role_key: str
	role_name: str | None = None
	department_id: str | None = None
	data_residency: str | None = None
	data_classification: str | None = None
	correlation_id: str = field(default_factory=uuid7str)
	audit_source: str = "org-guard"


def _normalize(value: str) -> str:
	return re.sub(r"[^a-z0-9]", "", value.lower())


def _infer_role_key(normalized: str) -> str | None:
	if not normalized:
		return None
	if "globaladmin" in normalized:
		return "globalAdmin"
	if "orgadmin" in normalized or "organizationadmin" in normalized:
		return "orgAdmin"
	if "hr" in normalized and "admin" in normalized:
		return "hrAdmin"
	if "owner" in normalized:
		return "owner"
	if "manager" in normalized:
		return "manager"
	if "compliance" in normalized:
		return "compliance"
	if any(word in normalized for word in ("member", "employee", "staff")):
		return "member"
	return None


def resolve_role_key(role_name: str | None) -> str:
	"""Map a free-text role name to a built-in role key, or ``custom``."""
	if not role_name:
		return CUSTOM_ROLE_KEY
	if role_name in BUILTIN_ROLE_KEYS:
		return role_name
	normalized = _normalize(role_name)
	return _ROLE_KEY_LOOKUP.get(normalized) or _infer_role_key(normalized) or CUSTOM_ROLE_KEY


async def assert_org_access(
	session: AsyncSession,
	org_id: str,
	user_id: str,
	*,
	correlation_id: str | None = None,
	audit_source: str | None = None,
) -> AuthorizationContext:
	"""
	Build the authorization context for a user in an organization.

	Raises AuthorizationError when the user has no membership or the
	membership is not active.
	"""
	if not org_id or not user_id:
		raise AuthorizationError("Organization and user are required", reason="missing_identity")

	membership = await org_api.get_membership(session, org_id, user_id)
	if membership is None:
		logger.info(f"No membership for user {user_id} in org {org_id}")
		raise AuthorizationError(
			"Membership not found for the requested organization", reason="membership_missing"
		)
	if membership.status != MembershipStatus.ACTIVE.value:
		logger.info(f"Inactive membership ({membership.status}) for user {user_id} in org {org_id}")
		raise AuthorizationError(
			"Membership is not active for the requested organization", reason="membership_inactive"
		)

	org = membership.organization
	return AuthorizationContext(
		org_id=org_id,
		user_id=user_id,
		role_key=resolve_role_key(membership.role_key or membership.role_name),
		role_name=membership.role_name,
		department_id=membership.department_id,
		data_residency=org.data_residency if org else None,
		data_classification=org.data_classification if org else None,
		correlation_id=correlation_id or uuid7str(),
		audit_source=audit_source or "org-guard",
	)
