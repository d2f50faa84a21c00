"""Equality selectors over the stored rule schema."""
from typing import Any, Mapping, Sequence
from .models import FIELD_NAMES, MAX_FIELDS, SCHEMA_KEYS, PolicyFilter
from ..errors import InvalidFilterError


def build_selector(ptype: str, constraints: Mapping[int, str]) -> dict[str, str]:
    """
    Build a selector for one rule type from a sparse field constraint map.

    Args:
        ptype: Rule type tag to match
        constraints: Field index -> required value. Indexes outside the
            schema and empty values add no constraint.

    Returns:
        Selector dict such as {"ptype": "p", "v1": "data1"}
    """
    selector = {"ptype": ptype}
    for index in sorted(constraints):
        value = constraints[index]
        if 0 <= index < MAX_FIELDS and value != "":
            selector[FIELD_NAMES[index]] = value
    return selector


def field_range_constraints(field_index: int, field_values: Sequence[str]) -> dict[int, str]:
    """Map the values of a sub-sequence starting at field_index to their positions."""
    return {
        position: field_values[position - field_index]
        for position in range(MAX_FIELDS)
        if field_index <= position < field_index + len(field_values)
    }


def filter_selector(criteria: PolicyFilter | Mapping[str, Any] | None) -> dict[str, str]:
    """
    Normalize a load filter into a storage selector.

    Raises:
        InvalidFilterError: If a key is outside the rule schema or a value
            is not a plain string
    """
    if criteria is None:
        return {}
    if isinstance(criteria, PolicyFilter):
        return criteria.to_selector()

    selector = {}
    for key, value in criteria.items():
        if key not in SCHEMA_KEYS:
            raise InvalidFilterError(f"cannot filter on {key!r}, expected one of {', '.join(SCHEMA_KEYS)}")
        if not isinstance(value, str):
            raise InvalidFilterError(f"filter value for {key!r} must be a string, got {type(value).__name__}")
        selector[key] = value
    return selector
