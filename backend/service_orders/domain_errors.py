"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


def not_found(entity: str, entity_id: Any) -> DomainError:
    """404 for a missing row; code is derived from the entity label."""
    return DomainError(
        code=f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
        http_status=404,
        message=f"{entity.capitalize()} {entity_id} not found",
    )


def validation_error(message: str, *, code: str = "VALIDATION_ERROR", details: dict[str, Any] | None = None) -> DomainError:
    return DomainError(code=code, http_status=400, message=message, details=details)


def store_error_message(exc: Exception) -> str:
    """Underlying driver message of a store failure, without SQLAlchemy's wrapping."""
    return str(getattr(exc, "orig", None) or exc)


def format_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Readable one-line summary of pydantic errors, e.g. ``service.start_date: Input should be a valid date``."""
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(loc)
        message = error.get("msg", "Invalid value")
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages) or "Invalid request"
