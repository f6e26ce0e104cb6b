# (c) Copyright Datacraft, 2026
"""Tests for the deny-overrides, default-deny decision combinator."""
import logging

from orghub.core.features.abac.engine import PolicyEngine, evaluate, order_policies
from orghub.core.features.abac.models import AbacPolicy, AbacRequest, PolicyEffect
from orghub.core.features.abac.validation import validate_policies

ALLOW = PolicyEffect.ALLOW
DENY = PolicyEffect.DENY


def make_policy(id, effect, actions=("*",), resources=("*",), priority=0, condition=None):
	data = {
		"id": id,
		"effect": effect.value,
		"actions": list(actions),
		"resources": list(resources),
		"priority": priority,
	}
	if condition is not None:
		data["condition"] = condition
	return AbacPolicy.from_dict(data)


REQUEST = AbacRequest(action="hr.leave.read", resource_type="hr.leave.request")


def test_empty_policy_set_denies():
	assert evaluate([], REQUEST, {}, {}) == DENY


def test_non_matching_policies_deny():
	policies = [make_policy("p", ALLOW, actions=["org.billing.read"], resources=["org.billing"])]

	decision = PolicyEngine(policies).decide(REQUEST, {}, {})

	assert decision.effect == DENY
	assert decision.active_policy_ids == ()
	assert "default deny" in decision.reason


def test_deny_overrides_allow_at_equal_top_priority():
	policies = [
		make_policy("allow-all", ALLOW, priority=10),
		make_policy("deny-all", DENY, priority=10),
	]

	decision = PolicyEngine(policies).decide(REQUEST, {}, {})

	assert decision.effect == DENY
	assert decision.policy_id == "deny-all"


def test_lower_priority_deny_does_not_suppress_higher_allow():
	policies = [
		make_policy("deny-low", DENY, priority=10),
		make_policy("allow-high", ALLOW, priority=20),
	]

	decision = PolicyEngine(policies).decide(REQUEST, {}, {})

	assert decision.effect == ALLOW
	assert decision.policy_id == "allow-high"
	assert decision.active_policy_ids == ("allow-high", "deny-low")


def test_allow_when_only_a_lower_priority_policy_matches():
	policies = [
		make_policy("allow-low", ALLOW, priority=1),
		make_policy("allow-high", ALLOW, priority=50, actions=["org.billing.read"]),
	]

	assert evaluate(policies, REQUEST, {}, {}) == ALLOW


def test_wildcard_namespace_resource():
	policies = [make_policy("hr", ALLOW, resources=["hr.*"])]

	assert evaluate(policies, REQUEST, {}, {}) == ALLOW
	assert evaluate(policies, AbacRequest("hr.leave.read", "org.settings"), {}, {}) == DENY


def test_condition_gating_by_department():
	policies = [make_policy(
		"dept",
		ALLOW,
		condition={"subject": {"departmentId": {"op": "eq", "value": "$resource.departmentId"}}},
	)]

	assert evaluate(policies, REQUEST, {"departmentId": "eng"}, {"departmentId": "eng"}) == ALLOW
	assert evaluate(policies, REQUEST, {"departmentId": "eng"}, {"departmentId": "sales"}) == DENY


def test_inactive_deny_does_not_count():
	policies = [
		make_policy("allow", ALLOW, priority=10),
		make_policy(
			"deny-restricted",
			DENY,
			priority=90,
			condition={"resource": {"classification": "RESTRICTED"}},
		),
	]

	assert evaluate(policies, REQUEST, {}, {"classification": "OFFICIAL"}) == ALLOW
	assert evaluate(policies, REQUEST, {}, {"classification": "RESTRICTED"}) == DENY


def test_evaluation_is_idempotent():
	policies = [
		make_policy("a", ALLOW, priority=5),
		make_policy("d", DENY, priority=5, condition={"subject": {"roleKey": "member"}}),
	]
	subject = {"roleKey": "member"}
	engine = PolicyEngine(policies)

	first = engine.decide(REQUEST, subject, {})
	second = engine.decide(REQUEST, subject, {})

	assert first == second
	assert evaluate(policies, REQUEST, subject, {}) == evaluate(policies, REQUEST, subject, {})


def test_type_mismatch_does_not_crash_the_decision():
	policies = [
		make_policy("gt", DENY, priority=50, condition={"subject": {"level": {"op": "gt", "value": 5}}}),
		make_policy("allow", ALLOW, priority=10),
	]

	assert evaluate(policies, REQUEST, {"level": "abc"}, {}) == ALLOW


def test_validated_policy_with_reference_in_list_allows():
	policies = validate_policies([{
		"id": "dept-or-hq",
		"effect": "allow",
		"actions": ["*"],
		"resources": ["*"],
		"condition": {"subject": {"dept": {"op": "in", "value": ["$resource.dept", "x"]}}},
	}])

	assert evaluate(policies, REQUEST, {"dept": "eng"}, {"dept": "eng"}) == ALLOW
	assert evaluate(policies, REQUEST, {"dept": "eng"}, {"dept": "ops"}) == DENY


def test_billing_scenario_higher_deny_wins():
	policies = [
		make_policy("p1", DENY, actions=["*"], resources=["org.billing"], priority=100),
		make_policy("p2", ALLOW, actions=["org.billing.read"], resources=["org.billing"], priority=50),
	]

	assert evaluate(policies, AbacRequest("org.billing.read", "org.billing"), {}, {}) == DENY


def test_ties_are_ordered_by_id_then_position():
	policies = [
		make_policy("b", ALLOW, priority=5),
		make_policy("a", ALLOW, priority=5),
		make_policy("c", ALLOW, priority=9),
	]

	assert [p.id for p in order_policies(policies)] == ["c", "a", "b"]
	assert PolicyEngine(policies).decide(REQUEST, {}, {}).active_policy_ids == ("c", "a", "b")


def test_allow_decision_names_first_allow_in_order():
	policies = [make_policy("zeta", ALLOW, priority=1), make_policy("alpha", ALLOW, priority=1)]

	assert PolicyEngine(policies).decide(REQUEST, {}, {}).policy_id == "alpha"


def test_broken_policy_is_skipped_with_warning(caplog):
	class Broken:
		id = "broken"
		priority = 100
		effect = DENY
		condition = None

		@property
		def actions(self):
			raise RuntimeError("corrupt")

	policies = [Broken(), make_policy("allow", ALLOW)]

	with caplog.at_level(logging.WARNING):
		assert evaluate(policies, REQUEST, {}, {}) == ALLOW
	assert "broken" in caplog.text
