"""Validation of inbound payloads before any handler acts on them."""

from .payloads import (
    VALIDATORS,
    ValidationResult,
    create_validator,
    validate_boolean,
    validate_directory,
    validate_document,
    validate_export_options,
    validate_import_options,
    validate_locale_code,
    validate_non_negative_integer,
    validate_object,
    validate_payload,
    validate_safe_url,
    validate_string,
)

__all__ = [
    "VALIDATORS",
    "ValidationResult",
    "create_validator",
    "validate_boolean",
    "validate_directory",
    "validate_document",
    "validate_export_options",
    "validate_import_options",
    "validate_locale_code",
    "validate_non_negative_integer",
    "validate_object",
    "validate_payload",
    "validate_safe_url",
    "validate_string",
]
