"""Validate payloads against the JSON Schemas bundled as package data."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from typing import Any

from jsonschema.validators import Draft202012Validator

SCHEMA_PACKAGE = "srcverify.schemas"
SCHEMA_SUFFIX = ".schema.json"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict[str, Any]:
    """Load a bundled schema by canonical name (without suffix)."""
    resource = files(SCHEMA_PACKAGE) / f"{schema_name}{SCHEMA_SUFFIX}"
    if not resource.is_file():
        raise KeyError(f"Schema '{schema_name}' not found in srcverify package data")
    return json.loads(resource.read_text(encoding="utf-8"))


def validate_data(
    data: dict[str, Any],
    schema_name: str,
    strict: bool = True,
) -> tuple[bool, list[str]]:
    """Validate data against a bundled schema.

    Args:
        data: Payload to validate
        schema_name: Name of schema to validate against
        strict: If True, raise on validation errors; if False, return error list

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        KeyError: If schema not found in package data
        ValueError: If validation fails and strict=True
    """
    validator = Draft202012Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

    if errors:
        error_messages = [
            f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
            for e in errors
        ]
        if strict:
            raise ValueError(
                f"Schema validation failed for '{schema_name}':\n"
                + "\n".join(f"  - {msg}" for msg in error_messages)
            )
        return False, error_messages

    return True, []
