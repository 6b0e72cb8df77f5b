"""
Query Parameter Parsing
=======================

Turns flat query strings into the typed option bundles the renderer
consumes. Dotted keys are expanded into nested objects, so
``clip.x=0&clip.width=100`` becomes ``{"clip": {"x": "0", "width": "100"}}``.
"""

from typing import Any, Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError
from starlette.datastructures import QueryParams

from page_renderer.core.rendering.errors import ValidationFailed

M = TypeVar("M", bound=BaseModel)


def expand_query(params: QueryParams) -> Dict[str, Any]:
    """Expand dotted query keys into a nested dictionary; last value wins."""
    result: Dict[str, Any] = {}
    for key, value in params.multi_items():
        parts = [part for part in key.split(".") if part]
        if not parts:
            continue
        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return result


def format_validation_error(error: ValidationError) -> str:
    """One-line summary of a pydantic validation error."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return "; ".join(messages)


def parse_options(model: Type[M], data: Mapping[str, Any]) -> M:
    """
    Validate request data against an option model.

    Raises:
        ValidationFailed: If the data does not satisfy the model
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise ValidationFailed(format_validation_error(e)) from e
