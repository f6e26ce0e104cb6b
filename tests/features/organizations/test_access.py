# (c) Copyright Datacraft, 2026
"""Tests for membership resolution into an authorization context."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.exceptions import AuthorizationError
from orghub.core.features.organizations.access import assert_org_access, resolve_role_key
from orghub.core.features.organizations.db.orm import MembershipStatus


@pytest.mark.parametrize("role_name,expected", [
	(None, "custom"),
	("", "custom"),
	("owner", "owner"),
	("Owner", "owner"),
	("HR Admin", "hrAdmin"),
	("hr-admin", "hrAdmin"),
	("Organization Admin", "orgAdmin"),
	("Global Admin", "globalAdmin"),
	("Team Manager", "manager"),
	("Compliance Officer", "compliance"),
	("Staff", "member"),
	("Employee", "member"),
	("Payroll Clerk", "custom"),
])
def test_resolve_role_key(role_name, expected):
	assert resolve_role_key(role_name) == expected


async def test_owner_context(db_session: AsyncSession, make_organization):
	org = await make_organization(owner_id="alice", data_classification="SECRET")

	context = await assert_org_access(db_session, org.id, "alice", correlation_id="req-1")

	assert context.org_id == org.id
	assert context.role_key == "owner"
	assert context.role_name == "Owner"
	assert context.data_classification == "SECRET"
	assert context.data_residency == "UK_ONLY"
	assert context.correlation_id == "req-1"


async def test_member_context_resolves_role_from_name(db_session: AsyncSession, make_organization, make_membership):
	org = await make_organization()
	await make_membership(org, "bob", role_name="Line Manager", department_id="eng")

	context = await assert_org_access(db_session, org.id, "bob")

	assert context.role_key == "manager"
	assert context.department_id == "eng"
	assert context.correlation_id


async def test_missing_membership_is_rejected(db_session: AsyncSession, make_organization):
	org = await make_organization()

	with pytest.raises(AuthorizationError) as excinfo:
		await assert_org_access(db_session, org.id, "mallory")

	assert excinfo.value.reason == "membership_missing"


async def test_inactive_membership_is_rejected(db_session: AsyncSession, make_organization, make_membership):
	org = await make_organization()
	await make_membership(org, "carol", status=MembershipStatus.SUSPENDED)

	with pytest.raises(AuthorizationError) as excinfo:
		await assert_org_access(db_session, org.id, "carol")

	assert excinfo.value.reason == "membership_inactive"
