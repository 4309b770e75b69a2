"""Evaluation context for condition rules.

This module wraps the data rules are evaluated against and resolves dotted
field paths into it. It also assembles the default context from the process
environment, including GitHub Actions metadata when running inside a workflow.
"""

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

GITHUB_CONTEXT_VARIABLES = {
    "ref": "GITHUB_REF",
    "ref_name": "GITHUB_REF_NAME",
    "event_name": "GITHUB_EVENT_NAME",
    "repository": "GITHUB_REPOSITORY",
    "actor": "GITHUB_ACTOR",
    "sha": "GITHUB_SHA",
    "run_number": "GITHUB_RUN_NUMBER",
    "run_id": "GITHUB_RUN_ID",
    "workflow": "GITHUB_WORKFLOW",
    "job": "GITHUB_JOB",
}


class _Missing:
    """Marker for a field path that does not resolve to a value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class EvaluationContext:
    """Read-only view over the data rules are evaluated against.

    Holds a reference to the input data (no copy) and never mutates it, so a
    single context can back any number of evaluations.

    Examples:
        >>> ctx = EvaluationContext({"github": {"ref_name": "main"}})
        >>> ctx.get_field_value("github.ref_name")
        'main'
        >>> ctx.get_field_value("github.ref_name.length")
        MISSING
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any):
        self._data = data

    @property
    def data(self) -> Any:
        """Get reference to input data."""
        return self._data

    def get_field_value(self, path: str) -> Any:
        """Resolve a dotted path, returning ``MISSING`` if it does not resolve."""
        return self.resolve(path.split("."))

    def resolve(self, parts: List[str]) -> Any:
        """Walk pre-split path segments through nested mappings.

        Only mappings are traversed: ``None``, lists and scalars stop the walk,
        as does a missing key.

        Args:
            parts: Path segments (e.g. ["github", "event", "action"]).

        Returns:
            Value at the path, or ``MISSING``.
        """
        value = self._data

        for part in parts:
            if not isinstance(value, Mapping):
                return MISSING
            if part not in value:
                return MISSING
            value = value[part]

        return value

    def __repr__(self) -> str:
        return f"EvaluationContext({self._data!r})"


def _read_event_file(path: str) -> Optional[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.debug(f"Failed to parse GitHub event data: {e}")
        return None


def build_context(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Assemble the default evaluation context from environment variables.

    The result always has an ``env`` mapping with every variable. Inside
    GitHub Actions (``GITHUB_ACTIONS`` set) it also carries ``github`` with
    the common workflow fields and, when ``GITHUB_EVENT_PATH`` points at a
    readable JSON file, ``event`` with the decoded webhook payload.

    Args:
        environ: Variables to read; defaults to ``os.environ``.

    Returns:
        Context dictionary.
    """
    if environ is None:
        environ = os.environ

    context: Dict[str, Any] = {}

    if environ.get("GITHUB_ACTIONS"):
        context["github"] = {
            key: environ.get(variable, "") for key, variable in GITHUB_CONTEXT_VARIABLES.items()
        }

        event_path = environ.get("GITHUB_EVENT_PATH")
        if event_path:
            event = _read_event_file(event_path)
            if event is not None:
                context["event"] = event

    context["env"] = dict(environ)

    logger.debug(
        "Built evaluation context",
        extra={"sections": list(context), "env_count": len(context["env"])},
    )
    return context
