# (c) Copyright Datacraft, 2026
"""ABAC policy domain models.

Policies are immutable once built. Condition values are parsed into a
tagged operand (``Literal`` or ``Reference``) when the policy is loaded so
the evaluator never inspects raw strings for ``$subject.`` / ``$resource.``
prefixes.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

DEFAULT_PRIORITY = 0


class PolicyEffect(str, Enum):
	"""Policy decision effect."""
	ALLOW = "allow"
	DENY = "deny"


class ConditionOperator(str, Enum):
	"""Operators for policy conditions."""
	EQUALS = "eq"
	NOT_EQUALS = "ne"
	IN = "in"
	GREATER_THAN = "gt"
	LESS_THAN = "lt"


class AttributeSide(str, Enum):
	"""Which attribute set a condition or reference reads from."""
	SUBJECT = "subject"
	RESOURCE = "resource"

	@property
	def reference_prefix(self) -> str:
		return f"${self.value}."


@dataclass(frozen=True, slots=True)
class Literal:
	"""A constant condition value."""
	value: Any

	def to_value(self) -> Any:
		return self.value


@dataclass(frozen=True, slots=True)
class Reference:
	"""A value looked up on one side's attributes at evaluation time."""
	side: AttributeSide
	path: str

	def to_value(self) -> str:
		return f"{self.side.reference_prefix}{self.path}"


@dataclass(frozen=True, slots=True)
class OperandList:
	"""A list value whose items may be literals or references."""
	items: tuple["Literal | Reference", ...]

	def to_value(self) -> list:
		return [item.to_value() for item in self.items]


Operand = Literal | Reference | OperandList


def parse_operand(value: Any) -> Operand:
	"""Turn a raw condition value into a tagged operand."""
	if isinstance(value, str):
		for side in AttributeSide:
			if value.startswith(side.reference_prefix):
				return Reference(side=side, path=value[len(side.reference_prefix):])
	if isinstance(value, list):
		return OperandList(tuple(parse_operand(item) for item in value))
	return Literal(value)


@dataclass(frozen=True, slots=True)
class AttributeCondition:
	"""Single predicate over one attribute of the subject or resource."""
	side: AttributeSide
	key: str
	operator: ConditionOperator
	operand: Operand

	def to_dict(self) -> dict:
		return {"op": self.operator.value, "value": self.operand.to_value()}

	@classmethod
	def from_raw(cls, side: AttributeSide, key: str, raw: Any) -> "AttributeCondition":
		# A bare literal is shorthand for {"op": "eq", "value": literal}
		if isinstance(raw, Mapping):
			return cls(
				side=side,
				key=key,
				operator=ConditionOperator(raw["op"]),
				operand=parse_operand(raw.get("value")),
			)
		return cls(side=side, key=key, operator=ConditionOperator.EQUALS, operand=parse_operand(raw))


@dataclass(frozen=True, slots=True)
class PolicyCondition:
	"""Subject and resource condition blocks; both must pass when present."""
	subject: tuple[AttributeCondition, ...] | None = None
	resource: tuple[AttributeCondition, ...] | None = None

	def blocks(self) -> tuple[tuple[AttributeCondition, ...], ...]:
		return tuple(b for b in (self.subject, self.resource) if b is not None)

	def to_dict(self) -> dict:
		data = {}
		if self.subject is not None:
			data["subject"] = {c.key: c.to_dict() for c in self.subject}
		if self.resource is not None:
			data["resource"] = {c.key: c.to_dict() for c in self.resource}
		return data

	@classmethod
	def from_dict(cls, data: Mapping) -> "PolicyCondition":
		blocks: dict[str, tuple[AttributeCondition, ...] | None] = {}
		for side in AttributeSide:
			block = data.get(side.value)
			if block is None:
				blocks[side.value] = None
				continue
			blocks[side.value] = tuple(
				AttributeCondition.from_raw(side, key, raw) for key, raw in block.items()
			)
		return cls(subject=blocks["subject"], resource=blocks["resource"])


@dataclass(frozen=True, slots=True)
class AbacPolicy:
	"""A named allow/deny rule over action and resource-type patterns."""
	id: str
	effect: PolicyEffect
	actions: tuple[str, ...]
	resources: tuple[str, ...]
	priority: int = DEFAULT_PRIORITY
	description: str | None = None
	condition: PolicyCondition | None = None

	def to_dict(self) -> dict:
		data: dict[str, Any] = {
			"id": self.id,
			"effect": self.effect.value,
			"actions": list(self.actions),
			"resources": list(self.resources),
			"priority": self.priority,
		}
		if self.description is not None:
			data["description"] = self.description
		if self.condition is not None:
			data["condition"] = self.condition.to_dict()
		return data

	@classmethod
	def from_dict(cls, data: Mapping) -> "AbacPolicy":
		condition = data.get("condition")
		priority = data.get("priority")
		return cls(
			id=data["id"],
			effect=PolicyEffect(data["effect"]),
			actions=tuple(data["actions"]),
			resources=tuple(data["resources"]),
			priority=DEFAULT_PRIORITY if priority is None else priority,
			description=data.get("description"),
			condition=PolicyCondition.from_dict(condition) if condition is not None else None,
		)


@dataclass(frozen=True, slots=True)
class AbacRequest:
	"""The action and resource type an authorization check is about."""
	action: str
	resource_type: str


@dataclass(frozen=True, slots=True)
class AbacDecision:
	"""Outcome of combining the active policies for one request."""
	effect: PolicyEffect
	reason: str
	policy_id: str | None = None
	active_policy_ids: tuple[str, ...] = field(default_factory=tuple)
	bypassed: bool = False

	@property
	def allowed(self) -> bool:
		return self.effect == PolicyEffect.ALLOW

	def to_dict(self) -> dict:
		return {
			"effect": self.effect.value,
			"allowed": self.allowed,
			"reason": self.reason,
			"policy_id": self.policy_id,
			"active_policy_ids": list(self.active_policy_ids),
			"bypassed": self.bypassed,
		}
