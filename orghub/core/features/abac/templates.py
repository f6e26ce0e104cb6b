# (c) Copyright Datacraft, 2026
"""JSON import/export of policy sets."""
import json
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .models import AbacPolicy
from .validation import PolicyValidationError, ValidationIssue, validate_policies

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TemplateParseResult:
	ok: bool
	policies: tuple[AbacPolicy, ...] = ()
	message: str | None = None
	issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)


def export_policy_template(policies: Iterable[AbacPolicy]) -> str:
	"""Serialize policies as an indented JSON array."""
	return json.dumps([p.to_dict() for p in policies], indent=2)


def parse_policy_template(text: str) -> TemplateParseResult:
	"""
	Parse an exported template back into validated policies.

	Accepts a bare JSON array or an object with a ``policies`` array.
	Never raises; failures come back with ``ok=False`` and a message.
	"""
	try:
		payload = json.loads(text)
	except (TypeError, ValueError) as e:
		return TemplateParseResult(ok=False, message=f"Invalid JSON: {e}")

	if isinstance(payload, dict) and "policies" in payload:
		payload = payload["policies"]
	if not isinstance(payload, list):
		return TemplateParseResult(
			ok=False,
			message="Template must be a list of policies or an object with a 'policies' list",
		)

	try:
		policies = validate_policies(payload)
	except PolicyValidationError as e:
		logger.info(f"Rejected policy template with {len(e.issues)} issue(s)")
		return TemplateParseResult(ok=False, message=str(e), issues=tuple(e.issues))

	return TemplateParseResult(ok=True, policies=tuple(policies))
