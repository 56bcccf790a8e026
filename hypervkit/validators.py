"""Validators for resource attributes and shared resource errors."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

_ISO9660_VOLUME_NAME = re.compile(r"[A-Z0-9_]*")
_MAX_VOLUME_NAME_LENGTH = 15

Validator = Callable[[Any], Any]


class ValidationError(ValueError):
    """An attribute value that is not allowed."""


class ResourceExistsError(Exception):
    """A resource that should be created already exists on the host."""

    def __init__(self, resource_id: str, resource_type: str) -> None:
        self.resource_id = resource_id
        self.resource_type = resource_type
        super().__init__(
            f'a resource with the ID "{resource_id}" already exists - to be managed '
            "via Terraform this resource needs to be imported into the State. "
            f'Please see the resource documentation for "{resource_type}" for more '
            f"information.\n terraform import {resource_type}.<resource name> "
            f"{resource_id}"
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_int(value: Any) -> int:
    if not _is_int(value):
        raise ValidationError(f"expected type of {value} to be int")
    return value


def allowed_iso_volume_name() -> Validator:
    """Volume names of at most 15 characters from ``A``-``Z``, ``0``-``9`` and ``_``."""

    def check(value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"expected type of {value} to be string")
        if len(value.encode("utf-8")) > _MAX_VOLUME_NAME_LENGTH:
            raise ValidationError(
                f"expected length of {value} to be 15 characters or less"
            )
        if not _ISO9660_VOLUME_NAME.fullmatch(value):
            raise ValidationError(
                f'"{value}" must only use characters `A`-`Z`, `0`-`9` or `_`'
            )
        return value

    return check


def string_key_in_map(valid: Mapping[str, Any], ignore_case: bool) -> Validator:
    """Strings that are keys of ``valid``, lower-cased first when ``ignore_case``."""

    def check(value: Any) -> str:
        if not isinstance(valid, Mapping):
            raise ValidationError("not a map!")
        if not isinstance(value, str):
            raise ValidationError(f"expected type of {value} to be string")
        key = value.lower() if ignore_case else value
        if key not in valid:
            raise ValidationError(
                f"expected {value} to be one of {dict(valid)} mapKeyString, got {key}"
            )
        return value

    return check


def int_in_slice(valid: Sequence[int]) -> Validator:
    """Integers that appear in ``valid``."""
    allowed = list(valid)

    def check(value: Any) -> int:
        number = _require_int(value)
        if number not in allowed:
            listed = " ".join(str(item) for item in allowed)
            raise ValidationError(
                f"expected {value} to be one of [{listed}], got {number}"
            )
        return number

    return check


def int_between(minimum: int, maximum: int) -> Validator:
    """Integers in the closed range ``minimum`` to ``maximum``."""

    def check(value: Any) -> int:
        number = _require_int(value)
        if not minimum <= number <= maximum:
            raise ValidationError(
                f"expected {value} to be in the range ({minimum} - {maximum}), got {number}"
            )
        return number

    return check


def value_or_int_between(value: int, minimum: int, maximum: int) -> Validator:
    """Integers equal to ``value`` or in the closed range ``minimum`` to ``maximum``."""

    def check(candidate: Any) -> int:
        number = _require_int(candidate)
        if number == value:
            return number
        if not minimum <= number <= maximum:
            raise ValidationError(
                f"expected {candidate} to be in the range ({minimum} - {maximum}), got {number}"
            )
        return number

    return check


def is_divisible_by(logical_size: int) -> Validator:
    """Integers that are an exact multiple of ``logical_size``."""

    def check(value: Any) -> int:
        number = _require_int(value)
        if number % logical_size != 0:
            suggestion = -(-number // logical_size) * logical_size
            raise ValidationError(
                f"expected {number} to be perfectly divisible by {logical_size}, "
                f"maybe use {suggestion} instead"
            )
        return number

    return check