"""
rotalabs-matrix - Condition-driven matrix generation.

Evaluates declarative and/or rule trees against a runtime context and turns
the outputs of matching rules into a deduplicated job matrix.

https://rotalabs.ai
"""

__version__ = "0.1.0"

from rotalabs_matrix.core.config import (
    DEFAULT_MAX_DEPTH,
    ComparisonOperator,
    Condition,
    ConditionConfig,
    ConditionDefinition,
    ConditionGroup,
    LogicalOperator,
    load_conditions,
)
from rotalabs_matrix.core.context import MISSING, EvaluationContext, build_context
from rotalabs_matrix.core.errors import (
    ConditionError,
    ConfigLoadError,
    ConfigTooDeepError,
    MalformedConfigError,
    UnknownOperatorError,
)
from rotalabs_matrix.evaluation.evaluator import ConditionEvaluator, EvaluationResult, compare_values
from rotalabs_matrix.matrix import format_output, generate_matrix, merge_outputs

__all__ = [
    # Version
    "__version__",
    # Configuration
    "DEFAULT_MAX_DEPTH",
    "ComparisonOperator",
    "LogicalOperator",
    "Condition",
    "ConditionGroup",
    "ConditionDefinition",
    "ConditionConfig",
    "load_conditions",
    # Context
    "MISSING",
    "EvaluationContext",
    "build_context",
    # Errors
    "ConditionError",
    "MalformedConfigError",
    "ConfigTooDeepError",
    "UnknownOperatorError",
    "ConfigLoadError",
    # Evaluation
    "ConditionEvaluator",
    "EvaluationResult",
    "compare_values",
    # Matrix
    "generate_matrix",
    "merge_outputs",
    "format_output",
]
