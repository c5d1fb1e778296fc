from __future__ import annotations

import jsonschema

_Validator = jsonschema.Draft202012Validator


def check_schema(schema: dict) -> None:
    """Raise jsonschema.SchemaError if schema is not valid Draft 2020-12."""
    _Validator.check_schema(schema)


def check_catalog(schemas: dict[str, dict]) -> list[str]:
    invalid: list[str] = []
    for name, schema in schemas.items():
        try:
            check_schema(schema)
        except jsonschema.SchemaError as exc:
            invalid.append(f"'{name}': {exc.message}")
    return invalid


def required_fields(schema: dict) -> list[str]:
    return list(schema.get("required", []))


def first_violation(instance: object, schema: dict) -> str | None:
    """Return the message of the shallowest validation error, or None."""
    errors = sorted(_Validator(schema).iter_errors(instance), key=lambda e: len(e.path))
    if not errors:
        return None
    error = errors[0]
    if error.path:
        return f"{'.'.join(str(p) for p in error.path)}: {error.message}"
    return error.message
