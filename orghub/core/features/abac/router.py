# (c) Copyright Datacraft, 2026
"""FastAPI router for ABAC policy management."""
import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.auth import get_authorization
from orghub.core.db.engine import get_session
from orghub.core.exceptions import AuthorizationError, DuplicatePolicyError, PolicyNotFoundError
from orghub.core.features.organizations.access import AuthorizationContext

from .models import PolicyEffect
from .service import AbacPolicyService
from .validation import PolicyValidationError
from .views import (
	AbacSummary, DecisionLogResponse, EvaluateRequest, EvaluateResponse,
	PolicyListResponse, PolicySchema, PolicySetReplace, TemplateExport, TemplateImport,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/abac", tags=["abac"])

ABAC_RESOURCE = "org.abac"
AUDIT_RESOURCE = "org.audit"


def require_abac(action: str, resource_type: str = ABAC_RESOURCE):
	"""
	FastAPI dependency that gates a route on an ABAC decision.

	Returns the caller's authorization context when allowed, 403 otherwise.
	"""
	async def abac_dependency(
		session: Annotated[AsyncSession, Depends(get_session)],
		context: Annotated[AuthorizationContext, Depends(get_authorization)],
	) -> AuthorizationContext:
		service = AbacPolicyService(session)
		try:
			await service.require_allowance(context, action, resource_type)
		except AuthorizationError as e:
			raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
		# Persist the allow decision log independently of the route's own changes
		await session.commit()
		return context

	return abac_dependency


def _validation_error(e: PolicyValidationError) -> HTTPException:
	return HTTPException(
		status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
		detail={"message": "Invalid policy", "issues": [i.to_dict() for i in e.issues]},
	)


async def _policy_list(service: AbacPolicyService, org_id: str) -> PolicyListResponse:
	effective = await service.get_effective_policies(org_id)
	return PolicyListResponse(
		items=[PolicySchema.from_policy(p) for p in effective.policies],
		total=len(effective.policies),
		using_fallback_policies=effective.using_fallback,
	)


ReadContext = Annotated[AuthorizationContext, Depends(require_abac("org.abac.read"))]
UpdateContext = Annotated[AuthorizationContext, Depends(require_abac("org.abac.update"))]
DbSession = Annotated[AsyncSession, Depends(get_session)]


# --- Policy sets ---

@router.get("/policies", response_model=PolicyListResponse)
async def list_policies(session: DbSession, context: ReadContext):
	"""Effective policies, falling back to the defaults when none are stored."""
	return await _policy_list(AbacPolicyService(session), context.org_id)


@router.put("/policies", response_model=PolicyListResponse)
async def replace_policies(data: PolicySetReplace, session: DbSession, context: UpdateContext):
	"""Validate and replace the whole policy set."""
	service = AbacPolicyService(session)
	try:
		await service.set_policies(context.org_id, data.policies)
	except PolicyValidationError as e:
		raise _validation_error(e)
	await session.commit()
	return await _policy_list(service, context.org_id)


@router.post("/policies", response_model=PolicySchema, status_code=status.HTTP_201_CREATED)
async def add_policy(data: dict, session: DbSession, context: UpdateContext):
	service = AbacPolicyService(session)
	try:
		policy = await service.add_policy(context.org_id, data)
	except PolicyValidationError as e:
		raise _validation_error(e)
	except DuplicatePolicyError as e:
		raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
	await session.commit()
	return PolicySchema.from_policy(policy)


@router.post("/policies/restore-defaults", response_model=PolicyListResponse)
async def restore_default_policies(session: DbSession, context: UpdateContext):
	service = AbacPolicyService(session)
	await service.restore_defaults(context.org_id)
	await session.commit()
	return await _policy_list(service, context.org_id)


@router.get("/policies/export", response_model=TemplateExport)
async def export_policies(session: DbSession, context: ReadContext):
	"""Export the effective policy set as a JSON template."""
	service = AbacPolicyService(session)
	effective = await service.get_effective_policies(context.org_id)
	return TemplateExport(
		template=await service.export_template(context.org_id),
		using_fallback_policies=effective.using_fallback,
	)


@router.post("/policies/import", response_model=PolicyListResponse)
async def import_policies(data: TemplateImport, session: DbSession, context: UpdateContext):
	service = AbacPolicyService(session)
	try:
		await service.import_template(context.org_id, data.template)
	except PolicyValidationError as e:
		raise _validation_error(e)
	await session.commit()
	return await _policy_list(service, context.org_id)


@router.patch("/policies/{policy_id}", response_model=PolicySchema)
async def update_policy(policy_id: str, data: dict, session: DbSession, context: UpdateContext):
	"""Replace one stored policy."""
	service = AbacPolicyService(session)
	try:
		policy = await service.update_policy(context.org_id, policy_id, data)
	except PolicyValidationError as e:
		raise _validation_error(e)
	except PolicyNotFoundError:
		raise HTTPException(status_code=404, detail="Policy not found")
	await session.commit()
	return PolicySchema.from_policy(policy)


@router.delete("/policies/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_policy(policy_id: str, session: DbSession, context: UpdateContext):
	service = AbacPolicyService(session)
	try:
		await service.delete_policy(context.org_id, policy_id)
	except PolicyNotFoundError:
		raise HTTPException(status_code=404, detail="Policy not found")
	await session.commit()


# --- Evaluation ---

@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(data: EvaluateRequest, session: DbSession, context: ReadContext):
	"""Dry-run a request against the effective or a draft policy set."""
	service = AbacPolicyService(session)
	try:
		decision = await service.dry_run(
			context,
			data.action,
			data.resource_type,
			subject_attributes=data.subject_attributes,
			resource_attributes=data.resource_attributes,
			raw_policies=data.policies,
		)
	except PolicyValidationError as e:
		raise _validation_error(e)
	return EvaluateResponse.from_decision(decision)


@router.get("/summary", response_model=AbacSummary)
async def summary(session: DbSession, context: ReadContext):
	service = AbacPolicyService(session)
	data = await service.summary(context)
	return AbacSummary(**data)


@router.get("/logs", response_model=list[DecisionLogResponse])
async def list_decision_logs(
	session: DbSession,
	context: Annotated[AuthorizationContext, Depends(require_abac("org.audit.read", AUDIT_RESOURCE))],
	user_id: str | None = Query(None),
	action: str | None = Query(None),
	decision: PolicyEffect | None = Query(None),
	since: datetime | None = Query(None),
	limit: int = Query(100, ge=1, le=500),
):
	"""Recent authorization decisions in the organization."""
	service = AbacPolicyService(session)
	logs = await service.db.get_decision_logs(
		context.org_id,
		user_id=user_id,
		action=action,
		decision=decision,
		since=since,
		limit=limit,
	)
	return [DecisionLogResponse.model_validate(log) for log in logs]
