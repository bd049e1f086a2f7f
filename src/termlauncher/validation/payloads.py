"""Validation of payloads arriving from outside the process.

Every validator takes an arbitrary value and returns a ValidationResult; none
of them raise. They hold no state and may be called concurrently.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

ALLOWED_URL_SCHEMES = ("http", "https")

EXPORT_OPTION_FLAGS = (
    "includeTerminals",
    "includeGroups",
    "includeDirectories",
    "includeFavorites",
    "includeSettings",
)

IMPORT_OPTION_FLAGS = (
    "mergeTerminals",
    "mergeGroups",
    "mergeDirectories",
    "mergeFavorites",
    "mergeSettings",
)

LOCALE_CODE_PATTERN = re.compile(r"[a-z]{2}(-[A-Z]{2})?")


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of a validator."""

    valid: bool
    error: str | None = None
    handler_name: str | None = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationResult(valid=True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(valid=False, error=error)


def validate_string(value: Any, field_name: str = "value") -> ValidationResult:
    """Accept a string that is not blank."""
    if not isinstance(value, str):
        return _invalid(f"{field_name} must be a string")
    if not value.strip():
        return _invalid(f"{field_name} cannot be empty")
    return VALID


def validate_boolean(value: Any, field_name: str = "value") -> ValidationResult:
    """Accept exactly True or False."""
    if not isinstance(value, bool):
        return _invalid(f"{field_name} must be a boolean")
    return VALID


def validate_object(value: Any, field_name: str = "value") -> ValidationResult:
    """Accept a mapping."""
    if not isinstance(value, Mapping):
        return _invalid(f"{field_name} must be an object")
    return VALID


def validate_non_negative_integer(value: Any, field_name: str = "value") -> ValidationResult:
    """Accept an integer greater than or equal to zero.

    Booleans and floats are rejected even when they hold an integral value.
    """
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        return _invalid(f"{field_name} must be a non-negative integer")
    return VALID


def validate_safe_url(value: Any, field_name: str = "url") -> ValidationResult:
    """Accept an absolute http or https URL."""
    result = validate_string(value, field_name)
    if not result:
        return result

    url = value.strip()
    if any(char.isspace() for char in url):
        return _invalid(f"Invalid URL format: {field_name} contains whitespace")

    try:
        parsed = urlsplit(url)
        host = parsed.hostname
    except ValueError as e:
        return _invalid(f"Invalid URL format: {e}")

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return _invalid(f"URL protocol not allowed, got: {parsed.scheme or 'none'}")
    if not host:
        return _invalid(f"Invalid URL format: {field_name} has no host")
    return VALID


def validate_directory(value: Any, field_name: str = "directory") -> ValidationResult:
    """Accept a directory record with an id and a non-blank path."""
    result = validate_object(value, field_name)
    if not result:
        return result

    if value.get("id") is None:
        return _invalid(f"{field_name}.id is required")
    return validate_string(value.get("path"), f"{field_name}.path")


def validate_document(value: Any, field_name: str = "config") -> ValidationResult:
    """Accept a configuration document with its list sections in place.

    ``settings`` may be missing, None or a mapping.
    """
    result = validate_object(value, field_name)
    if not result:
        return result

    for section in ("directories", "groups", "terminals"):
        if not isinstance(value.get(section), list):
            return _invalid(f"{field_name}.{section} must be an array")

    settings = value.get("settings")
    if settings is not None and not isinstance(settings, Mapping):
        return _invalid(f"{field_name}.settings must be an object")
    return VALID


def _validate_flags(value: Any, field_name: str, flags: tuple[str, ...]) -> ValidationResult:
    result = validate_object(value, field_name)
    if not result:
        return result

    for flag in flags:
        if flag in value and not isinstance(value[flag], bool):
            return _invalid(f"{flag} must be a boolean")
    return VALID


def validate_export_options(value: Any, field_name: str = "export options") -> ValidationResult:
    """Accept export options whose recognised flags are booleans."""
    return _validate_flags(value, field_name, EXPORT_OPTION_FLAGS)


def validate_import_options(value: Any, field_name: str = "import options") -> ValidationResult:
    """Accept import options whose recognised flags are booleans."""
    return _validate_flags(value, field_name, IMPORT_OPTION_FLAGS)


def validate_locale_code(value: Any, field_name: str = "localeCode") -> ValidationResult:
    """Accept ``xx`` or ``xx-XX`` locale codes such as ``en`` or ``zh-TW``."""
    result = validate_string(value, field_name)
    if not result:
        return result

    if not LOCALE_CODE_PATTERN.fullmatch(value):
        return _invalid("Invalid locale code format (expected: xx or xx-XX)")
    return VALID


Validator = Callable[..., ValidationResult]

VALIDATORS: dict[str, Validator] = {
    "string": validate_string,
    "boolean": validate_boolean,
    "plainObject": validate_object,
    "nonNegativeInteger": validate_non_negative_integer,
    "safeUrl": validate_safe_url,
    "directory": validate_directory,
    "document": validate_document,
    "exportOptions": validate_export_options,
    "importOptions": validate_import_options,
    "localeCode": validate_locale_code,
}


def create_validator(validator: Validator, handler_name: str) -> Callable[[Any], ValidationResult]:
    """Bind a validator to the handler it guards.

    Failing results carry ``handler_name`` so the caller can report which
    request was rejected.
    """

    def validate(value: Any) -> ValidationResult:
        result = validator(value)
        if not result:
            return ValidationResult(valid=False, error=result.error, handler_name=handler_name)
        return result

    return validate


def validate_payload(kind: str, value: Any, field_name: str | None = None) -> ValidationResult:
    """Validate ``value`` with the validator registered for ``kind``."""
    validator = VALIDATORS.get(kind)
    if validator is None:
        return _invalid(f"Unknown payload kind: {kind}")
    if field_name is None:
        return validator(value)
    return validator(value, field_name)
