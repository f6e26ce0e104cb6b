# (c) Copyright Datacraft, 2026
"""
ABAC router tests.
"""
import json

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orghub.core.features.abac.db.orm import AbacDecisionLogModel, AbacPolicyModel
from orghub.core.features.abac.defaults import DEFAULT_BOOTSTRAP_POLICIES


def policy_json(id, effect="allow", **kwargs):
	data = {"id": id, "effect": effect, "actions": ["*"], "resources": ["*"]}
	data.update(kwargs)
	return data


async def test_list_policies_falls_back_to_defaults(make_client, make_organization):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)

	response = await client.get("/abac/policies")

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["using_fallback_policies"] is True
	assert data["total"] == len(DEFAULT_BOOTSTRAP_POLICIES)
	assert data["items"][0]["id"] == "default:abac:admin-full-access"


async def test_missing_identity_headers(make_client, make_organization):
	org = await make_organization()

	assert (await make_client(None, org.id).get("/abac/policies")).status_code == 401
	assert (await make_client("alice", None).get("/abac/policies")).status_code == 400


async def test_non_member_is_forbidden(make_client, make_organization):
	org = await make_organization(owner_id="alice")

	response = await make_client("mallory", org.id).get("/abac/policies")

	assert response.status_code == 403
	assert "Membership not found" in response.json()["detail"]


async def test_member_cannot_update_policies(make_client, make_organization, make_membership, db_session: AsyncSession):
	org = await make_organization(owner_id="alice")
	await make_membership(org, "bob", role_name="Employee")

	response = await make_client("bob", org.id).put("/abac/policies", json={"policies": []})

	assert response.status_code == 403
	denied = await db_session.scalar(
		select(func.count(AbacDecisionLogModel.id)).where(AbacDecisionLogModel.user_id == "bob")
	)
	assert denied == 1


async def test_replace_policies(make_client, make_organization, db_session: AsyncSession):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)

	response = await client.put("/abac/policies", json={"policies": [
		policy_json("low", priority=1),
		policy_json("high", "deny", priority=50, resources=["org.billing"]),
	]})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["using_fallback_policies"] is False
	assert [p["id"] for p in data["items"]] == ["high", "low"]
	count = await db_session.scalar(select(func.count(AbacPolicyModel.id)).where(AbacPolicyModel.org_id == org.id))
	assert count == 2


async def test_replace_policies_reports_every_issue(make_client, make_organization):
	org = await make_organization(owner_id="alice")

	response = await make_client("alice", org.id).put("/abac/policies", json={"policies": [
		policy_json("a", actions=[]),
		policy_json("b", condition={"subject": {"roleKey": {"op": "in", "value": "x"}}}),
	]})

	assert response.status_code == 422
	paths = [i["path"] for i in response.json()["detail"]["issues"]]
	assert paths == ["policies[0].actions", "policies[1].condition.subject.roleKey.value"]


async def test_malformed_operator_is_rejected_on_every_write_route(make_client, make_organization):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)
	bad = policy_json("bad", condition={"subject": {"k": {"op": ["eq"], "value": 1}}})

	responses = [
		await client.put("/abac/policies", json={"policies": [bad]}),
		await client.post("/abac/policies", json=bad),
		await client.post("/abac/policies/import", json={"template": json.dumps([bad])}),
		await client.post("/abac/evaluate", json={"action": "x", "resource_type": "y", "policies": [bad]}),
	]

	for response in responses:
		assert response.status_code == 422, response.json()
		assert response.json()["detail"]["issues"][0]["path"].endswith("condition.subject.k.op")


async def test_add_update_delete_single_policy(make_client, make_organization):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)
	await client.put("/abac/policies", json={"policies": [policy_json("base")]})

	response = await client.post("/abac/policies", json=policy_json("extra", priority=7))
	assert response.status_code == 201, response.json()
	assert response.json()["priority"] == 7

	response = await client.post("/abac/policies", json=policy_json("extra"))
	assert response.status_code == 409

	response = await client.patch("/abac/policies/extra", json={"effect": "deny", "actions": ["hr.*"], "resources": ["hr.*"]})
	assert response.status_code == 200, response.json()
	assert response.json()["effect"] == "deny"

	response = await client.patch("/abac/policies/nope", json={"effect": "deny", "actions": ["*"], "resources": ["*"]})
	assert response.status_code == 404

	response = await client.delete("/abac/policies/extra")
	assert response.status_code == 204
	response = await client.delete("/abac/policies/extra")
	assert response.status_code == 404


async def test_restore_defaults(make_client, make_organization):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)
	await client.put("/abac/policies", json={"policies": [policy_json("custom")]})

	response = await client.post("/abac/policies/restore-defaults")

	assert response.status_code == 200
	data = response.json()
	assert data["using_fallback_policies"] is False
	assert {p["id"] for p in data["items"]} == {p.id for p in DEFAULT_BOOTSTRAP_POLICIES}


async def test_export_then_import(make_client, make_organization):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)

	exported = await client.get("/abac/policies/export")
	assert exported.status_code == 200
	policies = json.loads(exported.json()["template"])
	assert exported.json()["using_fallback_policies"] is True

	response = await client.post("/abac/policies/import", json={"template": json.dumps(policies[:2])})
	assert response.status_code == 200, response.json()
	assert response.json()["total"] == 2

	response = await client.post("/abac/policies/import", json={"template": "[{]"})
	assert response.status_code == 422


async def test_evaluate_is_a_dry_run(make_client, make_organization, db_session: AsyncSession):
	org = await make_organization(owner_id="alice")
	client = make_client("alice", org.id)

	response = await client.post("/abac/evaluate", json={
		"action": "org.billing.read",
		"resource_type": "org.billing",
		"subject_attributes": {"roleKey": "member"},
		"policies": [
			policy_json("p1", "deny", resources=["org.billing"], priority=100),
			policy_json("p2", actions=["org.billing.read"], resources=["org.billing"], priority=50),
		],
	})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["allowed"] is False
	assert data["matched_policy_id"] == "p1"
	assert data["active_policy_ids"] == ["p1", "p2"]
	logged = await db_session.scalar(
		select(func.count(AbacDecisionLogModel.id)).where(AbacDecisionLogModel.action == "org.billing.read")
	)
	assert logged == 0


async def test_summary(make_client, make_organization, make_membership):
	org = await make_organization(owner_id="alice")
	await make_membership(org, "erin", role_name="Org Admin")

	response = await make_client("erin", org.id).get("/abac/summary")

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["policy_count"] == len(DEFAULT_BOOTSTRAP_POLICIES)
	assert data["using_fallback_policies"] is True
	assert data["role_key"] == "orgAdmin"
	assert data["bypassed"] is False
	assert data["permissions"] == {"org.abac.read": True, "org.abac.update": True}


async def test_decision_logs(make_client, make_organization, make_membership):
	org = await make_organization(owner_id="alice")
	await make_membership(org, "bob", role_name="Employee")
	await make_client("bob", org.id).get("/abac/policies")

	response = await make_client("alice", org.id).get("/abac/logs", params={"decision": "deny"})

	assert response.status_code == 200, response.json()
	logs = response.json()
	assert len(logs) == 1
	assert logs[0]["user_id"] == "bob"
	assert logs[0]["action"] == "org.abac.read"
	assert logs[0]["bypassed"] is False


async def test_compliance_can_read_logs_but_members_cannot(make_client, make_organization, make_membership):
	org = await make_organization(owner_id="alice")
	await make_membership(org, "cora", role_name="Compliance Officer")
	await make_membership(org, "bob", role_name="Employee")

	assert (await make_client("cora", org.id).get("/abac/logs")).status_code == 200
	assert (await make_client("bob", org.id).get("/abac/logs")).status_code == 403
