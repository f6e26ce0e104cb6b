# (c) Copyright Datacraft, 2026
"""Organization management API endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.auth import get_authorization, get_current_user
from orghub.core.config import get_settings
from orghub.core.db.engine import get_db
from orghub.core.features.abac.router import require_abac
from orghub.core.features.abac.service import AbacPolicyService
from orghub.core.features.auth.dependencies import CurrentUser
from . import schema
from .access import AuthorizationContext, resolve_role_key
from .db import api as org_api

router = APIRouter(
	prefix="/organizations",
	tags=["organizations"],
)

logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_organization(
	data: schema.OrganizationCreate,
	user: Annotated[CurrentUser, Depends(get_current_user)],
	db_session: AsyncSession = Depends(get_db),
) -> schema.OrganizationCreated:
	"""Create an organization owned by the caller and seed its ABAC policies."""
	if await org_api.get_organization_by_slug(db_session, data.slug):
		raise HTTPException(status_code=409, detail="Organization slug already taken")

	org = await org_api.create_organization(
		db_session,
		name=data.name,
		slug=data.slug,
		owner_id=user.id,
		data_residency=data.data_residency,
		data_classification=data.data_classification.value if data.data_classification else None,
	)

	seeded = False
	if get_settings().abac_seed_defaults_on_create:
		seeded = await AbacPolicyService(db_session).ensure_default_policies(org.id)

	await db_session.commit()
	await db_session.refresh(org)
	logger.info(f"Created organization {org.slug} ({org.id}) for {user.id}")
	return schema.OrganizationCreated(
		organization=schema.OrganizationInfo.model_validate(org),
		seeded_default_policies=seeded,
	)


@router.get("/current")
async def get_current_organization(
	context: Annotated[AuthorizationContext, Depends(get_authorization)],
	db_session: AsyncSession = Depends(get_db),
) -> schema.OrganizationInfo:
	org = await org_api.get_organization(db_session, context.org_id)
	if not org:
		raise HTTPException(status_code=404, detail="Organization not found")
	return schema.OrganizationInfo.model_validate(org)


@router.get("/current/context")
async def get_authorization_context(
	context: Annotated[AuthorizationContext, Depends(get_authorization)],
) -> schema.AuthorizationContextInfo:
	"""The caller's membership as the authorization layer sees it."""
	return schema.AuthorizationContextInfo.model_validate(context)


@router.get("/current/members")
async def list_members(
	context: Annotated[AuthorizationContext, Depends(require_abac("org.members.read", "org.members"))],
	db_session: AsyncSession = Depends(get_db),
) -> list[schema.MembershipInfo]:
	members = await org_api.get_memberships(db_session, context.org_id)
	return [schema.MembershipInfo.model_validate(m) for m in members]


@router.post("/current/members", status_code=status.HTTP_201_CREATED)
async def add_member(
	data: schema.MembershipCreate,
	context: Annotated[AuthorizationContext, Depends(require_abac("org.members.invite", "org.members"))],
	db_session: AsyncSession = Depends(get_db),
) -> schema.MembershipInfo:
	"""Add a user to the caller's organization."""
	if await org_api.get_membership(db_session, context.org_id, data.user_id):
		raise HTTPException(status_code=409, detail="User is already a member")

	role_key = resolve_role_key(data.role_name)
	bypass_roles = get_settings().abac_bypass_roles
	# Only a bypass-role member can hand out a role that skips ABAC
	if role_key in bypass_roles and context.role_key not in bypass_roles:
		raise HTTPException(
			status_code=status.HTTP_403_FORBIDDEN,
			detail=f"Role '{role_key}' can only be granted by {', '.join(bypass_roles)}",
		)

	try:
		membership = await org_api.add_membership(
			db_session,
			org_id=context.org_id,
			user_id=data.user_id,
			role_key=role_key,
			role_name=data.role_name,
			department_id=data.department_id,
			status=data.status,
		)
		await db_session.commit()
	except IntegrityError:
		await db_session.rollback()
		raise HTTPException(status_code=409, detail="User is already a member")

	logger.info(f"Added {data.user_id} to org {context.org_id} as {membership.role_key}")
	return schema.MembershipInfo.model_validate(membership)
