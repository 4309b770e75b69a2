"""Matrix construction from matched rule outputs.

A matrix is a ``{"include": [...]}`` document listing one record per
distinct output payload, suitable for a CI job matrix.
"""

import json
import logging
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)


def _record_key(record: Dict[str, Any]) -> str:
    return json.dumps(record, sort_keys=True, separators=(",", ":"), default=str)


def generate_matrix(outputs: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Build a matrix from output records, dropping structural duplicates.

    Records are compared by their canonical JSON form, so key order does not
    matter. The first occurrence of each record keeps its position.

    Args:
        outputs: Output records, usually ``[result.outputs]`` or ``[]``.

    Returns:
        Matrix dictionary with an ``include`` list.
    """
    seen = set()
    include: List[Dict[str, Any]] = []

    for record in outputs:
        key = _record_key(record)
        if key in seen:
            continue
        seen.add(key)
        include.append(record)

    logger.debug("Generated matrix", extra={"records": len(include)})
    return {"include": include}


def merge_outputs(outputs: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Shallow left-to-right merge; later records overwrite earlier keys."""
    merged: Dict[str, Any] = {}
    for record in outputs:
        merged.update(record)
    return merged


def format_output(value: Any) -> str:
    """Render a value for an output file: strings as-is, everything else as JSON.

    Values JSON cannot encode natively (dates from YAML files, for instance)
    are written as their string form, matching the deduplication key.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
