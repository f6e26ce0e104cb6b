# (c) Copyright Datacraft, 2026
"""
Attribute-Based Access Control for organization administration.

This module provides:
- A pure policy evaluation core (deny-overrides, default deny)
- Write-time policy validation and JSON template import/export
- Default bootstrap policies and fallback for organizations without any
- An authorization guard with owner bypass and a decision log
"""
from .engine import PolicyEngine, decide, evaluate, order_policies
from .models import (
	AbacDecision, AbacPolicy, AbacRequest, AttributeCondition, AttributeSide,
	ConditionOperator, Literal, OperandList, PolicyCondition, PolicyEffect, Reference,
)
from .resolver import MISSING, AttributeResolver, AttributeSet
from .validation import PolicyValidationError, ValidationIssue, validate_policies, validate_policy
from .defaults import DEFAULT_BOOTSTRAP_POLICIES, FALLBACK_POLICY_PREFIX
from .templates import TemplateParseResult, export_policy_template, parse_policy_template

__all__ = [
	# Engine
	"PolicyEngine",
	"evaluate",
	"decide",
	"order_policies",
	# Models
	"AbacPolicy",
	"AbacRequest",
	"AbacDecision",
	"AttributeCondition",
	"AttributeSide",
	"ConditionOperator",
	"Literal",
	"OperandList",
	"PolicyCondition",
	"PolicyEffect",
	"Reference",
	# Attributes
	"AttributeResolver",
	"AttributeSet",
	"MISSING",
	# Validation
	"PolicyValidationError",
	"ValidationIssue",
	"validate_policies",
	"validate_policy",
	# Defaults and templates
	"DEFAULT_BOOTSTRAP_POLICIES",
	"FALLBACK_POLICY_PREFIX",
	"TemplateParseResult",
	"export_policy_template",
	"parse_policy_template",
]
