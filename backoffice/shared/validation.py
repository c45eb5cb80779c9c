"""Boundary validation helpers for models built outside request bodies."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from backoffice.shared.exceptions import InvalidInputException

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_error(exc: ValidationError) -> str:
    """First error of a pydantic validation failure as a readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "Invalid value"))
    return f"{location}: {message}" if location else message


def validate_model(model: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` into ``model`` or raise ``InvalidInputException``."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputException(format_validation_error(exc)) from exc
