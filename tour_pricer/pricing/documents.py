from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from tour_pricer.pricing.storage import KeyValueStore

logger = logging.getLogger(__name__)


def load_validator(path: Path) -> Draft202012Validator:
    """Build a validator from a JSON Schema file."""
    schema = json.loads(path.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_document(
    validator: Draft202012Validator,
    payload: Any,
    key: str,
) -> None:
    """Raise ValueError describing the first schema violation, if any."""
    errors = sorted(
        validator.iter_errors(payload),
        key=lambda err: list(err.path),
    )
    if not errors:
        return

    first_error = errors[0]
    path = ".".join(str(part) for part in first_error.path)
    path_suffix = f" at '{path}'" if path else ""
    raise ValueError(
        (
            "Schema validation failed for "
            f"{key}{path_suffix}: {first_error.message}"
        )
    )


def read_document(
    storage: KeyValueStore,
    key: str,
    validator: Draft202012Validator,
) -> Any | None:
    """Read and validate a stored document.

    Returns None when nothing is stored under ``key`` or when the stored
    text is not valid JSON or does not match its schema. The latter is
    logged so a corrupted document never blocks startup.
    """
    try:
        payload = _parse_document(storage, key)
        if payload is None:
            return None
        validate_document(validator, payload, key)
    except ValueError as exc:
        _log_invalid(key, exc)
        return None

    return payload


def read_collection(
    storage: KeyValueStore,
    key: str,
    validator: Draft202012Validator,
) -> list[dict[str, Any]] | None:
    """Read a stored array, validating each item on its own.

    Items that do not match the ``items`` schema are logged and skipped,
    so one bad entry never takes the rest of the collection with it.
    Returns None when nothing usable is stored under ``key``.
    """
    try:
        payload = _parse_document(storage, key)
        if payload is None:
            return None
        if not isinstance(payload, list):
            raise ValueError(f"Expected a JSON array for {key}")
    except ValueError as exc:
        _log_invalid(key, exc)
        return None

    item_validator = Draft202012Validator(validator.schema["items"])
    items: list[dict[str, Any]] = []
    for index, item in enumerate(payload):
        try:
            validate_document(item_validator, item, f"{key}[{index}]")
        except ValueError as exc:
            _log_invalid(key, exc)
            continue
        items.append(item)
    return items


def _parse_document(storage: KeyValueStore, key: str) -> Any | None:
    # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
    text = storage.get(key)
    if text is None:
        return None
    return json.loads(text)


def _log_invalid(key: str, exc: Exception) -> None:
    logger.warning(
        "stored_document_invalid",
        extra={
            "event": "stored_document_invalid",
            "storage_key": key,
            "reason": str(exc),
        },
    )


def write_document(storage: KeyValueStore, key: str, payload: Any) -> None:
    """Serialize ``payload`` as JSON and store it under ``key``."""
    storage.set(key, json.dumps(payload, ensure_ascii=False))
    logger.debug(
        "document_written",
        extra={"event": "document_written", "storage_key": key},
    )
