# (c) Copyright Datacraft, 2026
"""
Request identity dependencies.

The acting user comes from the remote-user headers set by the
authenticating proxy; the organization comes from the org header.
"""
import logging
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.config import get_settings
from orghub.core.db.engine import get_session
from orghub.core.exceptions import AuthorizationError
from orghub.core.features.organizations.access import AuthorizationContext, assert_org_access

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Request-ID"


@dataclass(frozen=True, slots=True)
class CurrentUser:
	id: str
	email: str | None = None
	roles: tuple[str, ...] = field(default_factory=tuple)


def get_current_user(request: Request) -> CurrentUser:
	settings = get_settings()
	user_id = request.headers.get(settings.remote_user_header)
	if not user_id:
		raise HTTPException(
			status_code=status.HTTP_401_UNAUTHORIZED,
			detail="Not authenticated",
		)
	roles = request.headers.get(settings.remote_roles_header, "")
	return CurrentUser(
		id=user_id,
		email=request.headers.get(settings.remote_email_header),
		roles=tuple(r.strip() for r in roles.split(",") if r.strip()),
	)


def get_org_id(request: Request) -> str:
	org_id = request.headers.get(get_settings().org_header)
	if not org_id:
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail="Organization header is required",
		)
	return org_id


async def get_authorization(
	request: Request,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: Annotated[CurrentUser, Depends(get_current_user)],
	org_id: Annotated[str, Depends(get_org_id)],
) -> AuthorizationContext:
	"""Resolve the caller's membership into an authorization context."""
	try:
		return await assert_org_access(
			session,
			org_id,
			user.id,
			correlation_id=request.headers.get(CORRELATION_HEADER),
			audit_source=f"api:{request.url.path}",
		)
	except AuthorizationError as e:
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
