# (c) Copyright Datacraft, 2026
"""Action/resource pattern matching and condition gating."""
from typing import Iterable

from .evaluator import evaluate_condition
from .models import AbacPolicy, AbacRequest
from .resolver import AttributeSet

WILDCARD = "*"
NAMESPACE_WILDCARD = ".*"


def matches_pattern(pattern: str, value: str) -> bool:
	"""
	Check a single action/resource entry against a requested value.

	``*`` matches anything, ``hr.*`` matches any value with at least one
	more dot-delimited segment after ``hr``. Matching is by segment, so
	``hr.*`` does not match ``hrx.leave`` or ``hr`` itself.
	"""
	if not isinstance(pattern, str) or not isinstance(value, str):
		return False
	if pattern == WILDCARD or pattern == value:
		return True
	if pattern.endswith(NAMESPACE_WILDCARD):
		prefix = pattern[:-len(NAMESPACE_WILDCARD)].split(".")
		segments = value.split(".")
		return len(segments) > len(prefix) and segments[:len(prefix)] == prefix
	return False


def matches_any(patterns: Iterable[str], value: str) -> bool:
	return any(matches_pattern(p, value) for p in patterns)


def policy_matches(policy: AbacPolicy, request: AbacRequest) -> bool:
	"""Both the actions and the resources of the policy must match."""
	return (
		matches_any(policy.actions, request.action)
		and matches_any(policy.resources, request.resource_type)
	)


def conditions_satisfied(policy: AbacPolicy, attributes: AttributeSet) -> bool:
	"""All predicates in every present condition block must hold."""
	if policy.condition is None:
		return True
	return all(
		evaluate_condition(condition, attributes)
		for block in policy.condition.blocks()
		for condition in block
	)


def is_active(policy: AbacPolicy, request: AbacRequest, attributes: AttributeSet) -> bool:
	return policy_matches(policy, request) and conditions_satisfied(policy, attributes)
