"""Core module for rotalabs-matrix.

This module provides the rule schema, the evaluation context and the error
hierarchy shared by the evaluator and the command-line entry point.
"""

from rotalabs_matrix.core.config import (
    ComparisonOperator,
    Condition,
    ConditionConfig,
    ConditionDefinition,
    ConditionGroup,
    LogicalOperator,
)
from rotalabs_matrix.core.context import MISSING, EvaluationContext, build_context
from rotalabs_matrix.core.errors import (
    ConditionError,
    ConfigLoadError,
    ConfigTooDeepError,
    MalformedConfigError,
    UnknownOperatorError,
)

__all__ = [
    "ComparisonOperator",
    "LogicalOperator",
    "Condition",
    "ConditionGroup",
    "ConditionDefinition",
    "ConditionConfig",
    "MISSING",
    "EvaluationContext",
    "build_context",
    "ConditionError",
    "MalformedConfigError",
    "ConfigTooDeepError",
    "UnknownOperatorError",
    "ConfigLoadError",
]
