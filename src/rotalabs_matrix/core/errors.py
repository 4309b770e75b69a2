"""Exceptions raised while loading and evaluating condition configurations."""


class ConditionError(ValueError):
    """Base class for all rotalabs-matrix errors."""


class MalformedConfigError(ConditionError):
    """Raised when a rule definition or condition node has an invalid shape."""


class ConfigTooDeepError(MalformedConfigError):
    """Raised when condition groups nest deeper than the configured limit."""

    def __init__(self, rule_name: str, max_depth: int):
        self.rule_name = rule_name
        self.max_depth = max_depth
        super().__init__(f'Condition "{rule_name}" exceeds maximum nesting depth of {max_depth}')


class UnknownOperatorError(ConditionError):
    """Raised for a comparison or logical operator that is not recognized.

    Operators match exactly: group operators must be the lowercase ``and`` or
    ``or``, so ``AND`` or an empty string on a nested group is rejected.
    """

    def __init__(self, operator):
        self.operator = operator
        super().__init__(f"Unknown operator: {operator}")


class ConfigLoadError(ConditionError):
    """Raised when a condition configuration cannot be read or parsed."""
