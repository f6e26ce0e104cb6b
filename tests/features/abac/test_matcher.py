# (c) Copyright Datacraft, 2026
"""Tests for action/resource pattern matching."""
import pytest

from orghub.core.features.abac.matcher import matches_pattern, policy_matches
from orghub.core.features.abac.models import AbacPolicy, AbacRequest, PolicyEffect


@pytest.mark.parametrize("pattern,value,expected", [
	("*", "org.billing", True),
	("org.billing", "org.billing", True),
	("org.billing", "org.billing.read", False),
	("hr.*", "hr.leave.request", True),
	("hr.*", "hr.leave", True),
	("hr.*", "hr", False),
	("hr.*", "hrx.leave", False),
	("hr.leave.*", "hr.leave.request", True),
	("hr.leave.*", "hr.leaveX.request", False),
	("hr.leave", "hr.leaveX", False),
	("hr.*", "org.settings", False),
])
def test_matches_pattern(pattern, value, expected):
	assert matches_pattern(pattern, value) is expected


def test_matches_pattern_rejects_non_strings():
	assert matches_pattern(None, "hr.leave") is False
	assert matches_pattern("*", 42) is False


def test_policy_requires_both_action_and_resource():
	policy = AbacPolicy(
		id="p",
		effect=PolicyEffect.ALLOW,
		actions=("hr.leave.read",),
		resources=("hr.*",),
	)

	assert policy_matches(policy, AbacRequest("hr.leave.read", "hr.leave.request"))
	assert not policy_matches(policy, AbacRequest("hr.leave.approve", "hr.leave.request"))
	assert not policy_matches(policy, AbacRequest("hr.leave.read", "org.settings"))
