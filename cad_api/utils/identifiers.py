"""Identifier parsing helpers."""

from __future__ import annotations

import uuid

from cad_api.utils.errors import InvalidInputError


def parse_id(value: str | None, label: str = "id") -> str:
    """Validate a uuid path/body value and return its canonical string form."""
    if not value or not str(value).strip():
        raise InvalidInputError(f"{label} is required")
    try:
        return str(uuid.UUID(str(value).strip()))
    except ValueError as exc:
        raise InvalidInputError(f"{label} is not a valid id: {value}") from exc


def new_id() -> str:
    """Return a fresh record identifier."""
    return str(uuid.uuid4())
