"""
Condition evaluator for matrix generation rules.

This module evaluates a condition configuration against a fixed context:
- Equality (=, !=) with explicit loose coercion
- Ordering (>, >=, <, <=) over numerically coerced operands
- Membership (contains, not_contains) over lists and strings
- Affixes (starts_with, ends_with), case-insensitive
- Nested and/or groups of any depth

Evaluation is a pure function of the context and configuration; the only
failures are configuration errors, which abort the whole call.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from rotalabs_matrix.core.config import (
    DEFAULT_MAX_DEPTH,
    ComparisonOperator,
    Condition,
    ConditionConfig,
    ConditionDefinition,
    ConditionGroup,
    ConditionNode,
    LogicalOperator,
)
from rotalabs_matrix.core.context import EvaluationContext
from rotalabs_matrix.evaluation.coercion import json_equal, loose_equals, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating a configuration.

    Attributes:
        matched: Whether at least one rule matched.
        matched_conditions: Names of matched rules, in configuration order.
        outputs: Shallow merge of matched rules' outputs; later rules win.
    """

    matched: bool
    matched_conditions: List[str] = field(default_factory=list)
    outputs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert evaluation result to dictionary."""
        return {
            "matched": self.matched,
            "matched_conditions": list(self.matched_conditions),
            "outputs": dict(self.outputs),
        }


def _contains(field_value: Any, compare_value: Any) -> bool:
    if isinstance(field_value, (list, tuple)):
        return any(json_equal(item, compare_value) for item in field_value)
    return compare_value.lower() in field_value.lower()


def _both_strings(field_value: Any, compare_value: Any) -> bool:
    return isinstance(field_value, str) and isinstance(compare_value, str)


def _order(field_value: Any, compare_value: Any, op: ComparisonOperator) -> bool:
    left = to_number(field_value)
    right = to_number(compare_value)
    if left is None or right is None:
        return False

    if op is ComparisonOperator.GT:
        return left > right
    if op is ComparisonOperator.GE:
        return left >= right
    if op is ComparisonOperator.LT:
        return left < right
    return left <= right


def compare_values(
    field_value: Any, op: Union[str, ComparisonOperator], compare_value: Any
) -> bool:
    """
    Compare a resolved field value against a rule literal.

    Args:
        field_value: Value resolved from the context (may be MISSING)
        op: Comparison operator or its string form
        compare_value: Literal from the condition

    Returns:
        True if the comparison holds, False otherwise

    Raises:
        UnknownOperatorError: If op is not a recognized comparison operator

    Examples:
        >>> compare_values("Release/v1", "starts_with", "release")
        True
        >>> compare_values(["bug", "p1"], "contains", "bug")
        True
    """
    op = ComparisonOperator.parse(op)

    if op is ComparisonOperator.EQ:
        return loose_equals(field_value, compare_value)

    if op is ComparisonOperator.NE:
        return not loose_equals(field_value, compare_value)

    if op in (ComparisonOperator.GT, ComparisonOperator.GE, ComparisonOperator.LT, ComparisonOperator.LE):
        return _order(field_value, compare_value, op)

    if op is ComparisonOperator.CONTAINS:
        if isinstance(field_value, (list, tuple)) or _both_strings(field_value, compare_value):
            return _contains(field_value, compare_value)
        return False

    if op is ComparisonOperator.NOT_CONTAINS:
        # Anything that is neither a list nor a string pair counts as "not contained"
        if isinstance(field_value, (list, tuple)) or _both_strings(field_value, compare_value):
            return not _contains(field_value, compare_value)
        return True

    if not _both_strings(field_value, compare_value):
        return False

    if op is ComparisonOperator.STARTS_WITH:
        return field_value.lower().startswith(compare_value.lower())
    return field_value.lower().endswith(compare_value.lower())


class ConditionEvaluator:
    """
    Evaluates condition configurations against a fixed context.

    The evaluator keeps no state besides the context, so one instance can be
    reused for any number of configurations, including from several threads.

    Examples:
        >>> evaluator = ConditionEvaluator({"env": "dev"})
        >>> result = evaluator.evaluate({
        ...     "dev-config": {
        ...         "conditions": [{"field": "env", "op": "=", "value": "dev"}],
        ...         "outputs": {"account": "123456"},
        ...     }
        ... })
        >>> result.matched, result.matched_conditions
        (True, ['dev-config'])
    """

    def __init__(self, context: Any, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the evaluator.

        Args:
            context: Data to evaluate against, or an EvaluationContext
            max_depth: Nesting limit used when parsing raw configurations
        """
        if not isinstance(context, EvaluationContext):
            context = EvaluationContext(context)
        self.context = context
        self.max_depth = max_depth

        logger.debug("ConditionEvaluator initialized")

    def evaluate(self, config: Union[ConditionConfig, Mapping[str, Any]]) -> EvaluationResult:
        """
        Evaluate every rule in the configuration.

        Args:
            config: Parsed ConditionConfig or raw {rule name: definition} mapping

        Returns:
            EvaluationResult; matched is True if any rule matched

        Raises:
            MalformedConfigError: If a rule definition is malformed
            UnknownOperatorError: If a condition uses an unknown operator
            ConfigTooDeepError: If groups nest deeper than max_depth
        """
        if not isinstance(config, ConditionConfig):
            config = ConditionConfig.from_dict(config, max_depth=self.max_depth)

        matched_conditions: List[str] = []
        outputs: Dict[str, Any] = {}

        for definition in config:
            if self.evaluate_definition(definition):
                matched_conditions.append(definition.name)
                outputs.update(definition.outputs)

        result = EvaluationResult(
            matched=bool(matched_conditions),
            matched_conditions=matched_conditions,
            outputs=outputs,
        )

        logger.debug(
            "Evaluated condition configuration",
            extra={"rules": len(config), "matched_conditions": matched_conditions},
        )
        return result

    def evaluate_definition(self, definition: ConditionDefinition) -> bool:
        """
        Evaluate a single named rule.

        A rule without conditions matches unconditionally. This includes rules
        that only reference a conditions file, which is never resolved here.
        """
        if not definition.conditions:
            if definition.conditions_file:
                logger.warning(
                    "Rule only references a conditions file and matches unconditionally",
                    extra={"rule": definition.name, "conditions_file": definition.conditions_file},
                )
            return True

        matched = self.evaluate_group(definition.group)
        logger.debug("Evaluated rule", extra={"rule": definition.name, "result": matched})
        return matched

    def evaluate_group(self, group: ConditionGroup) -> bool:
        """
        Evaluate a group with short-circuit logic.

        - and: stops at first False
        - or: stops at first True
        - empty group: True
        """
        if not group.conditions:
            return True

        if group.operator is LogicalOperator.AND:
            return all(self.evaluate_node(node) for node in group.conditions)
        return any(self.evaluate_node(node) for node in group.conditions)

    def evaluate_node(self, node: ConditionNode) -> bool:
        if isinstance(node, ConditionGroup):
            return self.evaluate_group(node)
        return self.evaluate_condition(node)

    def evaluate_condition(self, condition: Condition) -> bool:
        """Resolve the condition's field and compare it against its value."""
        field_value = self.context.resolve(condition.field_parts)
        return compare_values(field_value, condition.op, condition.value)

    def get_field_value(self, path: str) -> Any:
        """Resolve a dotted path against the evaluator's context."""
        return self.context.get_field_value(path)
