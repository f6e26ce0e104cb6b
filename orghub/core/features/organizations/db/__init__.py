# (c) Copyright Datacraft, 2026
"""Database models and operations for organizations."""
from .orm import DataClassification, Membership, MembershipStatus, Organization, OrganizationStatus
from . import api

__all__ = [
	"Organization",
	"OrganizationStatus",
	"Membership",
	"MembershipStatus",
	"DataClassification",
	"api",
]
