# (c) Copyright Datacraft, 2026
"""Predicate evaluation for ABAC conditions.

Every comparison fails closed: missing attributes, type mismatches and
unknown operators evaluate to ``False`` and never raise.
"""
import logging
from typing import Any

from .models import AttributeCondition, ConditionOperator
from .resolver import MISSING, AttributeSet, lookup, resolve_operand

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool, type(None))


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
	"""Equality without cross-type coercion (``1 != "1"``, ``True != 1``)."""
	if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
		return len(left) == len(right) and all(strict_equals(a, b) for a, b in zip(left, right))
	if isinstance(left, bool) or isinstance(right, bool):
		return isinstance(left, bool) and isinstance(right, bool) and left is right
	if _is_number(left) and _is_number(right):
		return left == right
	if isinstance(left, _SCALARS) and isinstance(right, _SCALARS):
		return type(left) is type(right) and left == right
	return False


def compare(actual: Any, operator: ConditionOperator, expected: Any) -> bool:
	"""Compare a resolved attribute with a resolved condition value."""
	if actual is MISSING or expected is MISSING:
		return False

	match operator:
		case ConditionOperator.EQUALS:
			return strict_equals(actual, expected)
		case ConditionOperator.NOT_EQUALS:
			return not strict_equals(actual, expected)
		case ConditionOperator.IN:
			if not isinstance(expected, (list, tuple)):
				return False
			return any(strict_equals(actual, item) for item in expected)
		case ConditionOperator.GREATER_THAN:
			return _is_number(actual) and _is_number(expected) and actual > expected
		case ConditionOperator.LESS_THAN:
			return _is_number(actual) and _is_number(expected) and actual < expected
		case _:
			logger.warning(f"Unknown operator: {operator}")
			return False


def evaluate_condition(condition: AttributeCondition, attributes: AttributeSet) -> bool:
	"""Evaluate one predicate against the resolved attribute maps."""
	actual = lookup(attributes.for_side(condition.side), condition.key)
	expected = resolve_operand(condition.operand, attributes)
	return compare(actual, condition.operator, expected)
