# (c) Copyright Datacraft, 2026
"""
Shared test fixtures: in-memory database, factories and API clients.
"""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orghub.app import app
from orghub.core.config import get_settings
from orghub.core.db.engine import get_db, init_db
from orghub.core.features.organizations.db import api as org_api
from orghub.core.features.organizations.db.orm import Membership, MembershipStatus, Organization


@pytest.fixture
async def db_engine():
	engine = create_async_engine(
		"sqlite+aiosqlite:///:memory:",
		poolclass=StaticPool,
		connect_args={"check_same_thread": False},
	)
	await init_db(bind=engine)
	yield engine
	await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
	session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
	async with session_factory() as session:
		yield session


@pytest.fixture
async def make_organization(db_session: AsyncSession):
	"""Factory fixture for creating organizations with an owner membership."""
	async def _make_organization(
		name: str = "Acme Ltd",
		slug: str | None = None,
		owner_id: str = "owner-1",
		**kwargs,
	) -> Organization:
		org = await org_api.create_organization(
			db_session,
			name=name,
			slug=slug or name.lower().replace(" ", "-"),
			owner_id=owner_id,
			data_residency=kwargs.get("data_residency"),
			data_classification=kwargs.get("data_classification"),
		)
		await db_session.commit()
		await db_session.refresh(org)
		return org

	return _make_organization


@pytest.fixture
async def make_membership(db_session: AsyncSession):
	"""Factory fixture for adding members to an organization."""
	async def _make_membership(
		org: Organization,
		user_id: str,
		role_name: str | None = "Member",
		**kwargs,
	) -> Membership:
		membership = await org_api.add_membership(
			db_session,
			org_id=org.id,
			user_id=user_id,
			role_key=kwargs.get("role_key"),
			role_name=role_name,
			department_id=kwargs.get("department_id"),
			status=kwargs.get("status", MembershipStatus.ACTIVE),
		)
		await db_session.commit()
		return membership

	return _make_membership


@pytest.fixture
async def make_client(db_session: AsyncSession):
	"""Factory fixture for API clients acting as a given user in a given org."""
	settings = get_settings()
	clients = []

	async def override_get_db():
		yield db_session

	app.dependency_overrides[get_db] = override_get_db

	def _make_client(user_id: str | None = None, org_id: str | None = None) -> AsyncClient:
		headers = {}
		if user_id:
			headers[settings.remote_user_header] = user_id
		if org_id:
			headers[settings.org_header] = org_id
		client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)
		clients.append(client)
		return client

	yield _make_client

	for client in clients:
		await client.aclose()
	app.dependency_overrides.clear()
