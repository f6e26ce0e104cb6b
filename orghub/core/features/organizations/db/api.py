# (c) Copyright Datacraft, 2026
"""Organization database API."""
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .orm import Membership, MembershipStatus, Organization


async def get_organization(db: AsyncSession, org_id: str) -> Organization | None:
	"""Get organization by ID."""
	return await db.get(Organization, org_id)


async def get_organization_by_slug(db: AsyncSession, slug: str) -> Organization | None:
	stmt = select(Organization).where(Organization.slug == slug)
	return await db.scalar(stmt)


async def create_organization(
	db: AsyncSession,
	name: str,
	slug: str,
	owner_id: str,
	data_residency: str | None = None,
	data_classification: str | None = None,
) -> Organization:
	"""Create an organization with its owner membership."""
	org = Organization(name=name, slug=slug)
	if data_residency:
		org.data_residency = data_residency
	if data_classification:
		org.data_classification = data_classification
	db.add(org)
	await db.flush()

	owner = Membership(
		org_id=org.id,
		user_id=owner_id,
		role_key="owner",
		role_name="Owner",
		status=MembershipStatus.ACTIVE.value,
	)
	db.add(owner)
	await db.flush()
	return org


async def get_membership(db: AsyncSession, org_id: str, user_id: str) -> Membership | None:
	"""Get a membership with its organization loaded."""
	stmt = (
		select(Membership)
		.options(selectinload(Membership.organization))
		.where(Membership.org_id == org_id, Membership.user_id == user_id)
	)
	return await db.scalar(stmt)


async def get_memberships(db: AsyncSession, org_id: str) -> Sequence[Membership]:
	stmt = select(Membership).where(Membership.org_id == org_id).order_by(Membership.created_at)
	result = await db.execute(stmt)
	return result.scalars().all()


async def add_membership(
	db: AsyncSession,
	org_id: str,
	user_id: str,
	role_key: str | None = None,
	role_name: str | None = None,
	department_id: str | None = None,
	status: MembershipStatus = MembershipStatus.ACTIVE,
	metadata: dict | None = None,
) -> Membership:
	"""Add a user to an organization."""
	membership = Membership(
		org_id=org_id,
		user_id=user_id,
		role_key=role_key,
		role_name=role_name,
		department_id=department_id,
		status=status.value,
		metadata_json=metadata or {},
	)
	db.add(membership)
	await db.flush()
	return membership
