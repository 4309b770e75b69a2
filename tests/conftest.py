"""Pytest fixtures for rotalabs-matrix tests.

This module provides reusable contexts and condition configurations.
"""

import pytest
from typing import Any, Dict

from rotalabs_matrix.core.config import ConditionConfig
from rotalabs_matrix.evaluation.evaluator import ConditionEvaluator


@pytest.fixture
def github_context() -> Dict[str, Any]:
    """Create a context shaped like the one built inside a workflow run."""
    return {
        "github": {
            "ref": "refs/heads/release/v1.2",
            "ref_name": "Release/v1.2",
            "event_name": "pull_request",
            "repository": "rotalabs/matrix",
            "run_number": "42",
        },
        "event": {
            "action": "opened",
            "pull_request": {
                "number": 17,
                "draft": False,
                "labels": ["bug", "p1"],
                "base": {"ref": "main"},
            },
        },
        "env": {"DEPLOY_ENV": "staging", "REPLICAS": "3"},
    }


@pytest.fixture
def evaluator(github_context) -> ConditionEvaluator:
    """Create an evaluator over the workflow-shaped context."""
    return ConditionEvaluator(github_context)


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    """Create a raw configuration with a nested or-of-and rule.

    Rules:
        - deploy-main: pull request into main with the bug label
        - deploy-release: release branch push or staging environment
        - never: compares against a value no context carries
    """
    return {
        "deploy-main": {
            "operator": "and",
            "conditions": [
                {"field": "event.pull_request.base.ref", "op": "=", "value": "main"},
                {"field": "event.pull_request.labels", "op": "contains", "value": "bug"},
            ],
            "outputs": {"environment": "production", "region": "us-east-1"},
        },
        "deploy-release": {
            "operator": "or",
            "conditions": [
                {
                    "operator": "and",
                    "conditions": [
                        {"field": "github.ref_name", "op": "starts_with", "value": "release/"},
                        {"field": "github.event_name", "op": "=", "value": "push"},
                    ],
                },
                {
                    "operator": "and",
                    "conditions": [
                        {"field": "env.DEPLOY_ENV", "op": "=", "value": "staging"},
                        {"field": "env.REPLICAS", "op": ">=", "value": 2},
                    ],
                },
            ],
            "outputs": {"environment": "staging"},
        },
        "never": {
            "conditions": [{"field": "github.actor", "op": "=", "value": "nobody"}],
            "outputs": {"unused": True},
        },
    }


@pytest.fixture
def condition_config(raw_config) -> ConditionConfig:
    """Create a parsed configuration from the raw fixture."""
    return ConditionConfig.from_dict(raw_config)
