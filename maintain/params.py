"""Scenario parameter declarations and validation.

Each scenario declares an ordered set of ParameterSpec objects. Before a scenario
composes its steps, the values supplied by the caller are checked against those
declarations and turned into a Context.
"""

from dataclasses import dataclass
import logging

import jsonschema

from maintain import exceptions
from maintain.context import Context
from maintain.helpers import FALSY, TRUTHY, clean_dict

logger = logging.getLogger(__name__)

_SCALAR_TYPES = ["string", "boolean", "integer", "number"]


@dataclass(frozen=True)
class ParameterSpec:
    """Declaration of a single named scenario input."""

    name: str
    description: str = ""
    required: bool = False
    is_array: bool = False

    def to_dict(self):
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
            "array": self.is_array,
        }


def param(name, description="", required=False, array=False):
    """Shorthand used in scenario declarations."""
    return ParameterSpec(name, description, required=required, is_array=array)


def parse_bool(value):
    """Turn boolean-looking strings into bools, leaving anything else untouched."""
    if not isinstance(value, str):
        return value
    lowered = value.strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    return value


def build_schema(specs):
    """Build a JSON schema describing the values a set of ParameterSpecs accepts."""
    properties = {}
    for spec in specs:
        if spec.is_array:
            properties[spec.name] = {"type": "array", "items": {"type": "string"}}
        else:
            properties[spec.name] = {"type": _SCALAR_TYPES}
    return {
        "type": "object",
        "properties": properties,
        "required": [spec.name for spec in specs if spec.required],
    }


def _normalize(spec, value):
    if isinstance(value, tuple):
        return list(value)
    if spec is None or not spec.is_array:
        return parse_bool(value)
    return value


def _raise_for(error, declared, instance, scenario):
    if error.validator == "required":
        missing = next(name for name in error.validator_value if name not in instance)
        raise exceptions.MissingParameterError(missing, scenario=scenario) from error
    name = error.path[0] if error.path else None
    if name in declared:
        spec = declared[name]
        expected = "a sequence of strings" if spec.is_array else "a single value"
        raise exceptions.TypeMismatchError(name, expected, instance[name]) from error
    raise exceptions.ParameterError(f"Invalid parameters: {error.message}") from error


def validate(specs, supplied, scenario=None):
    """Check supplied values against parameter specs and build a Context.

    Boolean-looking strings ("yes", "no", "1", "0", ...) in scalar values are turned
    into bools first, so args files and command-line values behave the same.

    Args:
        specs: ordered sequence of ParameterSpec
        supplied: mapping of parameter name to value
        scenario: optional scenario label, used in error messages

    Returns:
        A Context holding the normalized values

    Raises:
        MissingParameterError: a required parameter is absent or None
        TypeMismatchError: a value has the wrong shape for its spec
    """
    declared = {spec.name: spec for spec in specs}
    instance = {
        name: _normalize(declared.get(name), value)
        for name, value in clean_dict(dict(supplied or {})).items()
    }
    try:
        jsonschema.validate(instance=instance, schema=build_schema(specs))
    except jsonschema.ValidationError as err:
        _raise_for(err, declared, instance, scenario)
    values = {}
    for name, value in instance.items():
        if name not in declared:
            logger.debug(f"Keeping undeclared parameter {name}={value!r}")
        values[name] = tuple(value) if isinstance(value, list) else value
    return Context(values)


def coerce_cli_value(spec, raw):
    """Convert a raw command-line string into the shape a ParameterSpec expects.

    Array parameters accept a comma-separated string. Scalars that look like
    booleans are turned into bools; everything else is kept as a string.
    """
    if not isinstance(raw, str):
        return raw
    if spec is not None and spec.is_array:
        return tuple(item.strip() for item in raw.split(",") if item.strip())
    return parse_bool(raw)
