# (c) Copyright Datacraft, 2026
"""Domain exceptions raised by services and translated by routers."""


class OrgHubError(Exception):
	"""Base class for orghub domain errors."""


class AuthorizationError(OrgHubError):
	"""The acting user may not perform the requested operation."""

	def __init__(self, message: str, *, reason: str | None = None):
		super().__init__(message)
		self.reason = reason


class PolicyNotFoundError(OrgHubError):
	def __init__(self, policy_id: str):
		super().__init__(f"Policy not found: {policy_id}")
		self.policy_id = policy_id


class DuplicatePolicyError(OrgHubError):
	def __init__(self, policy_id: str):
		super().__init__(f"Policy already exists: {policy_id}")
		self.policy_id = policy_id

