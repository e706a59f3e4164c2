"""
Validation entry point.

    match validate(Product, payload):
        case Ok(product):
            ...
        case Error(err):
            for issue in err.issues:
                print(issue.field, issue.message)

Pure and synchronous; never touches the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import cache
from typing import Annotated, Any

from kungfu import Error, Ok, Result
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from artiflare.errors import FieldIssue, ValidationError


def _field_path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def issues_from(
    exc: PydanticValidationError,
    prefix: tuple[int | str, ...] = (),
) -> tuple[FieldIssue, ...]:
    """Flatten pydantic errors into dotted-path issues."""
    return tuple(
        FieldIssue(field=_field_path(prefix + tuple(err["loc"])), message=err["msg"])
        for err in exc.errors(include_url=False)
    )


def validate[M: BaseModel](
    schema: type[M],
    candidate: Mapping[str, Any] | M,
) -> Result[M, ValidationError]:
    """Check ``candidate`` against ``schema``; return the model or every violation."""
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True)
    try:
        return Ok(schema.model_validate(candidate))
    except PydanticValidationError as exc:
        return Error(ValidationError(issues_from(exc)))


# ═══════════════════════════════════════════════════════════════════════════════
# Partial validation (updates)
# ═══════════════════════════════════════════════════════════════════════════════


@cache
def _field_adapters(schema: type[BaseModel]) -> dict[str, tuple[str, TypeAdapter[Any]]]:
    """Map alias and attribute name → (alias, adapter carrying the field's constraints)."""
    adapters: dict[str, tuple[str, TypeAdapter[Any]]] = {}
    for name, info in schema.model_fields.items():
        tp: Any = info.annotation
        if info.metadata:
            tp = Annotated[(tp, *info.metadata)]
        alias = info.alias or name
        entry = (alias, TypeAdapter(tp))
        adapters[name] = entry
        adapters[alias] = entry
    return adapters


def validate_partial[M: BaseModel](
    schema: type[M],
    patch: Mapping[str, Any],
) -> Result[dict[str, Any], ValidationError]:
    """
    Check only the keys present in ``patch``.

    Used by updates, where the stored document already satisfies the schema and
    the caller sends a subset of fields. Keys may be given by alias or attribute
    name; the result is keyed by alias. Unknown keys pass through untouched.
    """
    adapters = _field_adapters(schema)
    issues: list[FieldIssue] = []
    clean: dict[str, Any] = {}

    for key, value in patch.items():
        entry = adapters.get(key)
        if entry is None:
            clean[key] = value
            continue
        alias, adapter = entry
        try:
            checked = adapter.validate_python(value)
        except PydanticValidationError as exc:
            issues.extend(issues_from(exc, prefix=(alias,)))
            continue
        clean[alias] = adapter.dump_python(
            checked, mode="json", by_alias=True, exclude_none=True
        )

    if issues:
        return Error(ValidationError(tuple(issues)))
    return Ok(clean)


__all__ = ("validate", "validate_partial", "issues_from")
