# (c) Copyright Datacraft, 2026
"""
Write-time validation for ABAC policies.

Raw policy payloads (API bodies, imported templates) are normalized and
checked here before they are stored. The evaluator assumes everything it
receives has passed through ``validate_policies``.
"""
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .models import AbacPolicy, AttributeSide, ConditionOperator, PolicyEffect

REFERENCE_PATTERN = re.compile(r"^\$(\w+)\.(.*)$")

POLICY_KEYS = frozenset({"id", "effect", "actions", "resources", "priority", "description", "condition"})
PREDICATE_KEYS = frozenset({"op", "value"})
CONDITION_SIDES = frozenset(side.value for side in AttributeSide)
OPERATORS = frozenset(op.value for op in ConditionOperator)

_PRIMITIVES = (str, int, float, bool, type(None))


@dataclass(frozen=True, slots=True)
class ValidationIssue:
	path: str
	message: str

	def to_dict(self) -> dict:
		return {"path": self.path, "message": self.message}


class PolicyValidationError(ValueError):
	"""Raised with every problem found in a policy payload."""

	def __init__(self, issues: Iterable[ValidationIssue]):
		self.issues = list(issues)
		super().__init__("; ".join(f"{i.path}: {i.message}" for i in self.issues))


def normalize_list(values: Iterable[Any]) -> list[str]:
	"""Trim entries, drop blanks and duplicates, keep first occurrence order."""
	seen: set[str] = set()
	result = []
	for value in values:
		if not isinstance(value, str):
			continue
		item = value.strip()
		if item and item not in seen:
			seen.add(item)
			result.append(item)
	return result


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_attribute_value(value: Any, path: str, issues: list[ValidationIssue]) -> None:
	if isinstance(value, list):
		for index, item in enumerate(value):
			if not isinstance(item, _PRIMITIVES):
				issues.append(ValidationIssue(f"{path}[{index}]", "list items must be primitive values"))
			elif isinstance(item, str):
				_check_reference(item, f"{path}[{index}]", issues)
		return
	if not isinstance(value, _PRIMITIVES):
		issues.append(ValidationIssue(path, "value must be a primitive or a list of primitives"))
		return
	if isinstance(value, str):
		_check_reference(value, path, issues)


def _check_reference(value: str, path: str, issues: list[ValidationIssue]) -> None:
	if not value.startswith("$"):
		return
	match = REFERENCE_PATTERN.match(value)
	if match is None:
		return
	side, ref_path = match.groups()
	if side not in CONDITION_SIDES:
		issues.append(ValidationIssue(path, f"unknown reference side '${side}'"))
	elif not ref_path.strip() or any(not part for part in ref_path.split(".")):
		issues.append(ValidationIssue(path, f"reference '{value}' has an empty path"))


def _check_predicate(raw: Any, path: str, issues: list[ValidationIssue]) -> None:
	if not isinstance(raw, Mapping):
		_check_attribute_value(raw, path, issues)
		return

	unknown = set(raw) - PREDICATE_KEYS
	if unknown:
		issues.append(ValidationIssue(path, f"unknown keys: {', '.join(sorted(map(str, unknown)))}"))
	op = raw.get("op")
	if not isinstance(op, str) or op not in OPERATORS:
		issues.append(ValidationIssue(f"{path}.op", f"unknown operator '{op}'"))
		return
	if "value" not in raw:
		issues.append(ValidationIssue(f"{path}.value", "value is required"))
		return

	value = raw["value"]
	value_path = f"{path}.value"
	match ConditionOperator(op):
		case ConditionOperator.IN:
			if not isinstance(value, list):
				issues.append(ValidationIssue(value_path, "'in' requires a list value"))
				return
		case ConditionOperator.GREATER_THAN | ConditionOperator.LESS_THAN:
			is_reference = isinstance(value, str) and REFERENCE_PATTERN.match(value) is not None
			if not _is_number(value) and not is_reference:
				issues.append(ValidationIssue(value_path, f"'{op}' requires a numeric value"))
				return
	_check_attribute_value(value, value_path, issues)


def _check_condition(condition: Any, path: str, issues: list[ValidationIssue]) -> None:
	if not isinstance(condition, Mapping):
		issues.append(ValidationIssue(path, "condition must be an object"))
		return
	for side, block in condition.items():
		side_path = f"{path}.{side}"
		if side not in CONDITION_SIDES:
			issues.append(ValidationIssue(side_path, "unknown condition side"))
			continue
		if block is None:
			continue
		if not isinstance(block, Mapping):
			issues.append(ValidationIssue(side_path, "condition block must be an object"))
			continue
		for key, raw in block.items():
			if not isinstance(key, str) or not key.strip():
				issues.append(ValidationIssue(side_path, "attribute keys must be non-empty strings"))
				continue
			_check_predicate(raw, f"{side_path}.{key}", issues)


def _normalize(raw: Any, path: str, issues: list[ValidationIssue]) -> dict | None:
	if not isinstance(raw, Mapping):
		issues.append(ValidationIssue(path, "policy must be an object"))
		return None

	start = len(issues)
	unknown = set(raw) - POLICY_KEYS
	if unknown:
		issues.append(ValidationIssue(path, f"unknown keys: {', '.join(sorted(map(str, unknown)))}"))

	policy_id = raw.get("id")
	if not isinstance(policy_id, str) or not policy_id.strip():
		issues.append(ValidationIssue(f"{path}.id", "id is required"))
	else:
		policy_id = policy_id.strip()

	effect = raw.get("effect")
	if effect not in (PolicyEffect.ALLOW.value, PolicyEffect.DENY.value):
		issues.append(ValidationIssue(f"{path}.effect", "effect must be 'allow' or 'deny'"))

	lists = {}
	for name in ("actions", "resources"):
		values = raw.get(name)
		if not isinstance(values, list):
			issues.append(ValidationIssue(f"{path}.{name}", f"{name} must be a list"))
			continue
		if any(not isinstance(v, str) for v in values):
			issues.append(ValidationIssue(f"{path}.{name}", f"{name} must contain only strings"))
			continue
		lists[name] = normalize_list(values)
		if not lists[name]:
			issues.append(ValidationIssue(f"{path}.{name}", f"{name} must not be empty"))

	priority = raw.get("priority")
	if priority is not None and (not isinstance(priority, int) or isinstance(priority, bool)):
		issues.append(ValidationIssue(f"{path}.priority", "priority must be an integer"))

	description = raw.get("description")
	if description is not None and not isinstance(description, str):
		issues.append(ValidationIssue(f"{path}.description", "description must be a string"))

	condition = raw.get("condition")
	if condition is not None:
		_check_condition(condition, f"{path}.condition", issues)

	if len(issues) > start:
		return None

	data = {
		"id": policy_id,
		"effect": effect,
		"actions": lists["actions"],
		"resources": lists["resources"],
		"priority": priority,
	}
	if description is not None and description.strip():
		data["description"] = description.strip()
	if condition:
		data["condition"] = {side: block for side, block in condition.items() if block is not None}
	return data


def validate_policies(raw_items: Any) -> list[AbacPolicy]:
	"""Validate and normalize a whole policy set.

	Raises PolicyValidationError listing every issue found, including
	duplicate ids across the set.
	"""
	if not isinstance(raw_items, list):
		raise PolicyValidationError([ValidationIssue("policies", "policies must be a list")])

	issues: list[ValidationIssue] = []
	normalized = []
	seen: dict[str, int] = {}
	for index, raw in enumerate(raw_items):
		path = f"policies[{index}]"
		data = _normalize(raw, path, issues)
		if data is None:
			continue
		if data["id"] in seen:
			issues.append(ValidationIssue(
				f"{path}.id", f"duplicate id '{data['id']}' (first at policies[{seen[data['id']]}])"
			))
			continue
		seen[data["id"]] = index
		normalized.append(data)

	if issues:
		raise PolicyValidationError(issues)
	return [AbacPolicy.from_dict(data) for data in normalized]


def validate_policy(raw: Any) -> AbacPolicy:
	issues: list[ValidationIssue] = []
	data = _normalize(raw, "policy", issues)
	if data is None:
		raise PolicyValidationError(issues)
	return AbacPolicy.from_dict(data)
