# (c) Copyright Datacraft, 2026
"""Database models and operations for ABAC."""
from .orm import AbacPolicyModel, AbacDecisionLogModel
from .api import AbacPolicyDB

__all__ = [
	"AbacPolicyModel",
	"AbacDecisionLogModel",
	"AbacPolicyDB",
]
