"""Tool handlers. Each takes raw call arguments plus AppState and returns text."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from context7_relay.errors import Context7RelayError, ErrorCode

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(model: type[ModelT], arguments: dict[str, Any]) -> ModelT:
    """Validate tool arguments, mapping pydantic errors to INVALID_INPUT."""
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        message = "; ".join(_format_error(err) for err in exc.errors())
        raise Context7RelayError(ErrorCode.INVALID_INPUT, message, recoverable=False) from exc


def _format_error(err: Any) -> str:
    location = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "invalid value")
    return f"{location}: {msg}" if location else msg
