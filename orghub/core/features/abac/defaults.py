# (c) Copyright Datacraft, 2026
"""Bootstrap policies seeded for new organizations and used as a fallback."""
from .models import AbacPolicy
from .validation import validate_policies

FALLBACK_POLICY_PREFIX = "default:abac:"

ADMIN_ROLE_KEYS = ["orgAdmin", "hrAdmin", "globalAdmin"]

_BOOTSTRAP_POLICY_DATA = [
	{
		"id": f"{FALLBACK_POLICY_PREFIX}admin-full-access",
		"description": "Administrators can perform every action in the organization",
		"effect": "allow",
		"actions": ["*"],
		"resources": ["*"],
		"priority": 100,
		"condition": {
			"subject": {"roleKey": {"op": "in", "value": ADMIN_ROLE_KEYS}},
		},
	},
	{
		"id": f"{FALLBACK_POLICY_PREFIX}restricted-data-deny",
		"description": "Restricted data is only visible to compliance officers and administrators",
		"effect": "deny",
		"actions": ["*"],
		"resources": ["*"],
		"priority": 90,
		"condition": {
			"subject": {"roleKey": {"op": "ne", "value": "compliance"}},
			"resource": {"classification": {"op": "eq", "value": "RESTRICTED"}},
		},
	},
	{
		"id": f"{FALLBACK_POLICY_PREFIX}compliance-read",
		"description": "Compliance officers can read HR records and audit logs",
		"effect": "allow",
		"actions": ["org.audit.read", "org.abac.read", "hr.records.read", "hr.leave.read", "hr.profile.read"],
		"resources": ["*"],
		"priority": 20,
		"condition": {
			"subject": {"roleKey": "compliance"},
		},
	},
	{
		"id": f"{FALLBACK_POLICY_PREFIX}manager-team-read",
		"description": "Managers can read records of their own department",
		"effect": "allow",
		"actions": ["hr.leave.read", "hr.profile.read", "hr.records.read"],
		"resources": ["hr.*"],
		"priority": 20,
		"condition": {
			"subject": {
				"roleKey": {"op": "in", "value": ["manager"]},
				"departmentId": {"op": "eq", "value": "$resource.departmentId"},
			},
		},
	},
	{
		"id": f"{FALLBACK_POLICY_PREFIX}member-self-service",
		"description": "Members can read and request changes to their own records",
		"effect": "allow",
		"actions": ["hr.leave.request", "hr.leave.read", "hr.profile.read", "hr.profile.update"],
		"resources": ["hr.*"],
		"priority": 10,
		"condition": {
			"resource": {"ownerId": {"op": "eq", "value": "$subject.userId"}},
		},
	},
]

DEFAULT_BOOTSTRAP_POLICIES: tuple[AbacPolicy, ...] = tuple(validate_policies(_BOOTSTRAP_POLICY_DATA))


def is_default_policy(policy_id: str) -> bool:
	return policy_id.startswith(FALLBACK_POLICY_PREFIX)
