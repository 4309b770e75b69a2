"""Configuration classes for condition-driven matrix generation.

This module defines the rule schema: comparison and logical operators, the
condition tree (leaf conditions and nested groups), named rule definitions and
the ordered configuration that holds them. Raw mappings are parsed once into
this tree so evaluation never has to inspect dictionary shapes.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from rotalabs_matrix.core.errors import (
    ConfigLoadError,
    ConfigTooDeepError,
    MalformedConfigError,
    UnknownOperatorError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

CONDITIONS_KEY = "conditions"
CONDITIONS_FILE_KEY = "conditions-file"


class ComparisonOperator(str, Enum):
    """Operators for leaf condition comparisons."""

    # Equality
    EQ = "="
    NE = "!="

    # Ordering
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="

    # Membership
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"

    # Affixes
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"

    @classmethod
    def parse(cls, value: Any) -> "ComparisonOperator":
        """Resolve a raw operator, raising UnknownOperatorError if unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise UnknownOperatorError(value) from None


class LogicalOperator(str, Enum):
    """Operators combining the children of a condition group."""

    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, value: Any) -> "LogicalOperator":
        """Resolve a raw group operator, raising UnknownOperatorError if unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise UnknownOperatorError(value) from None


@dataclass(frozen=True)
class Condition:
    """A single field comparison.

    Attributes:
        field: Dotted path into the context (e.g. "github.event.action").
        op: Comparison operator.
        value: Literal to compare the resolved field against.
    """

    field: str
    op: ComparisonOperator
    value: Any = None

    @property
    def field_parts(self) -> List[str]:
        return self.field.split(".")

    def to_dict(self) -> Dict[str, Any]:
        """Convert condition to dictionary."""
        return {"field": self.field, "op": self.op.value, "value": self.value}


@dataclass(frozen=True)
class ConditionGroup:
    """An ``and``/``or`` combination of conditions and nested groups.

    Attributes:
        operator: How child results are combined.
        conditions: Child nodes in declared order.
    """

    operator: LogicalOperator
    conditions: Tuple["ConditionNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert group to dictionary."""
        return {
            "operator": self.operator.value,
            "conditions": [c.to_dict() for c in self.conditions],
        }


ConditionNode = Union[Condition, ConditionGroup]


def _is_group(raw: Mapping[str, Any]) -> bool:
    return "operator" in raw and CONDITIONS_KEY in raw


def _parse_nodes(items: Any, rule_name: str, depth: int, max_depth: int) -> Tuple[ConditionNode, ...]:
    """Parse a list of raw condition nodes belonging to a group at ``depth``."""
    if depth > max_depth:
        raise ConfigTooDeepError(rule_name, max_depth)
    if not isinstance(items, list):
        raise MalformedConfigError(f'Condition "{rule_name}" has a \'conditions\' entry that is not a list')
    return tuple(_parse_node(item, rule_name, depth, max_depth) for item in items)


def _parse_node(raw: Any, rule_name: str, depth: int, max_depth: int) -> ConditionNode:
    if not isinstance(raw, Mapping):
        raise MalformedConfigError(
            f'Condition "{rule_name}" contains an entry that is neither a condition nor a group: {raw!r}'
        )

    if _is_group(raw):
        return ConditionGroup(
            operator=LogicalOperator.parse(raw["operator"]),
            conditions=_parse_nodes(raw[CONDITIONS_KEY], rule_name, depth + 1, max_depth),
        )

    field_path = raw.get("field")
    if not isinstance(field_path, str):
        raise MalformedConfigError(f'Condition "{rule_name}" has a condition without a string \'field\'')

    return Condition(
        field=field_path,
        op=ComparisonOperator.parse(raw.get("op")),
        value=raw.get("value"),
    )


@dataclass(frozen=True)
class ConditionDefinition:
    """One named top-level rule.

    Attributes:
        name: Rule name, unique within a configuration.
        operator: Operator applied to the top-level conditions.
        conditions: Top-level condition nodes. Empty means "always matches".
        conditions_file: External reference, recorded but never resolved here.
        outputs: Payload contributed when the rule matches.
    """

    name: str
    operator: LogicalOperator = LogicalOperator.AND
    conditions: Tuple[ConditionNode, ...] = ()
    conditions_file: Optional[str] = None
    outputs: Dict[str, Any] = field(default_factory=dict)

    @property
    def group(self) -> ConditionGroup:
        """Top-level conditions viewed as a single group."""
        return ConditionGroup(operator=self.operator, conditions=self.conditions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule definition to dictionary."""
        result: Dict[str, Any] = {"operator": self.operator.value}
        if self.conditions or self.conditions_file is None:
            result[CONDITIONS_KEY] = [c.to_dict() for c in self.conditions]
        if self.conditions_file is not None:
            result[CONDITIONS_FILE_KEY] = self.conditions_file
        if self.outputs:
            result["outputs"] = dict(self.outputs)
        return result

    @classmethod
    def from_dict(
        cls, name: str, data: Any, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> "ConditionDefinition":
        """Create a rule definition from its raw mapping.

        Raises:
            MalformedConfigError: If the definition lacks both 'conditions' and
                'conditions-file', or any part of it has the wrong shape.
            UnknownOperatorError: If any operator is not recognized.
            ConfigTooDeepError: If groups nest deeper than ``max_depth``.
        """
        if not isinstance(data, Mapping):
            raise MalformedConfigError(f'Condition "{name}" must be a mapping')

        raw_conditions = data.get(CONDITIONS_KEY)
        conditions_file = data.get(CONDITIONS_FILE_KEY)
        if raw_conditions is None and not conditions_file:
            raise MalformedConfigError(
                f"Condition \"{name}\" must have either 'conditions' or 'conditions-file'"
            )

        outputs = data.get("outputs")
        if outputs is None:
            outputs = {}
        elif not isinstance(outputs, Mapping):
            raise MalformedConfigError(f'Condition "{name}" has \'outputs\' that is not a mapping')

        conditions: Tuple[ConditionNode, ...] = ()
        if raw_conditions is not None:
            conditions = _parse_nodes(raw_conditions, name, 1, max_depth)

        return cls(
            name=name,
            operator=LogicalOperator.parse(data.get("operator") or LogicalOperator.AND),
            conditions=conditions,
            conditions_file=conditions_file or None,
            outputs=dict(outputs),
        )


@dataclass(frozen=True)
class ConditionConfig:
    """Ordered collection of named rule definitions.

    Iteration follows declaration order, which is also the order in which
    matched rule names and merged outputs are reported.
    """

    rules: Dict[str, ConditionDefinition] = field(default_factory=dict)

    def __iter__(self) -> Iterator[ConditionDefinition]:
        return iter(self.rules.values())

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, name: str) -> ConditionDefinition:
        return self.rules[name]

    @property
    def names(self) -> List[str]:
        return list(self.rules)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {name: rule.to_dict() for name, rule in self.rules.items()}

    @classmethod
    def from_dict(cls, data: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> "ConditionConfig":
        """Parse a raw ``{rule name: definition}`` mapping.

        Args:
            data: Raw configuration, typically decoded JSON or YAML.
            max_depth: Maximum group nesting per rule; the rule's own
                condition list counts as depth 1.

        Returns:
            Parsed configuration.
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        if not isinstance(data, Mapping):
            raise MalformedConfigError("Condition configuration must be a mapping of rule names to definitions")

        rules = {
            str(name): ConditionDefinition.from_dict(str(name), definition, max_depth)
            for name, definition in data.items()
        }
        logger.debug("Parsed condition configuration", extra={"rules": list(rules)})
        return cls(rules=rules)

    @classmethod
    def from_file(cls, path: Union[str, Path], max_depth: int = DEFAULT_MAX_DEPTH) -> "ConditionConfig":
        """Load a configuration from a JSON or YAML file.

        Files ending in ``.yaml`` or ``.yml`` are read as YAML, anything else
        as JSON.

        Raises:
            ConfigLoadError: If the file is missing or cannot be decoded.
        """
        path = Path(path).resolve()
        if not path.is_file():
            raise ConfigLoadError(f"Conditions file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigLoadError(f"Failed to load conditions from file: {e}") from e

        return cls.from_dict(data, max_depth=max_depth)

    @classmethod
    def from_json(
        cls,
        text: str,
        field_name: str = "conditions-json",
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> "ConditionConfig":
        """Parse a configuration from an inline JSON string.

        Args:
            text: JSON document holding the rule mapping.
            field_name: Name used for the input in error messages.
            max_depth: Maximum group nesting per rule.
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ConfigLoadError(f"Failed to parse {field_name}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigLoadError(f"{field_name} must be a valid JSON object")

        return cls.from_dict(data, max_depth=max_depth)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)


def load_conditions(
    conditions_file: Optional[str] = None,
    conditions_json: Optional[str] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ConditionConfig:
    """Load conditions from exactly one of a file path or an inline JSON string.

    Raises:
        ConfigLoadError: If neither or both sources are given, or loading fails.
    """
    if not conditions_file and not conditions_json:
        raise ConfigLoadError("Either conditions-file or conditions-json must be provided")
    if conditions_file and conditions_json:
        raise ConfigLoadError("Only one of conditions-file or conditions-json should be provided, not both")

    if conditions_file:
        logger.info(f"Loading conditions from file: {conditions_file}")
        return ConditionConfig.from_file(conditions_file, max_depth=max_depth)

    logger.info("Loading conditions from JSON input")
    return ConditionConfig.from_json(conditions_json, max_depth=max_depth)
