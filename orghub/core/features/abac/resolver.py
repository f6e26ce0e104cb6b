# (c) Copyright Datacraft, 2026
"""Attribute resolution for ABAC evaluation."""
import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .models import AttributeSide, Literal, Operand, OperandList, Reference


class _Missing:
	"""Marker for an attribute that is not present."""
	_instance = None

	def __new__(cls):
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __bool__(self) -> bool:
		return False

	def __repr__(self) -> str:
		return "<missing>"


MISSING: Any = _Missing()

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class AttributeSet:
	"""Read-only subject and resource attribute maps for one decision."""
	subject: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
	resource: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

	def for_side(self, side: AttributeSide) -> Mapping[str, Any]:
		if side == AttributeSide.SUBJECT:
			return self.subject
		return self.resource


def _as_mapping(ref: Any) -> Mapping[str, Any]:
	if ref is None:
		return _EMPTY
	if isinstance(ref, Mapping):
		return MappingProxyType(dict(ref))
	if dataclasses.is_dataclass(ref) and not isinstance(ref, type):
		return MappingProxyType({f.name: getattr(ref, f.name) for f in dataclasses.fields(ref)})
	if hasattr(ref, "__dict__"):
		return MappingProxyType(dict(vars(ref)))
	return _EMPTY


def _step(source: Any, segment: str) -> Any:
	if isinstance(source, Mapping):
		return source.get(segment, MISSING)
	if isinstance(source, (str, bytes, int, float, bool, list, tuple)) or source is None:
		return MISSING
	return getattr(source, segment, MISSING)


def lookup(attributes: Mapping[str, Any], path: str) -> Any:
	"""Resolve a key or dotted path; returns MISSING instead of raising."""
	if not isinstance(path, str) or not path:
		return MISSING
	if path in attributes:
		return attributes[path]
	value: Any = attributes
	for segment in path.split("."):
		value = _step(value, segment)
		if value is MISSING:
			return MISSING
	return value


def resolve_operand(operand: Operand, attributes: AttributeSet) -> Any:
	"""Produce the comparison value for a literal or a reference."""
	if isinstance(operand, Reference):
		return lookup(attributes.for_side(operand.side), operand.path)
	if isinstance(operand, Literal):
		return operand.value
	if isinstance(operand, OperandList):
		# Unresolved items stay MISSING and never compare equal
		return tuple(resolve_operand(item, attributes) for item in operand.items)
	return MISSING


class AttributeResolver:
	"""
	Reads attributes off the subject and resource.

	Either reference may be a mapping, a dataclass instance or a plain
	object; anything else resolves to an empty attribute set.
	"""

	def resolve(self, subject_ref: Any, resource_ref: Any) -> AttributeSet:
		return AttributeSet(subject=_as_mapping(subject_ref), resource=_as_mapping(resource_ref))
