"""Lifecycle of virtual hard disk resources on a Hyper-V host."""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from hypervkit.validators import (
    ResourceExistsError,
    ValidationError,
    int_in_slice,
    is_divisible_by,
)

log = logging.getLogger(__name__)

RESOURCE_TYPE = "hyperv_vhd"

_check_size = is_divisible_by(4096)
_check_sector_size = int_in_slice([0, 512, 4096])


class VhdType(enum.Enum):
    """Kind of virtual hard disk."""

    UNKNOWN = "Unknown"
    FIXED = "Fixed"
    DYNAMIC = "Dynamic"
    DIFFERENCING = "Differencing"

    @classmethod
    def parse(cls, text: str) -> VhdType:
        """Look up a disk type by name, ignoring case."""
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        names = ", ".join(member.value for member in cls)
        raise ValidationError(f"expected {text} to be one of {names}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VhdSettings:
    """Desired configuration of a virtual hard disk."""

    path: str
    source: str = ""
    source_vm: str = ""
    source_disk: int = 0
    vhd_type: VhdType = VhdType.DYNAMIC
    parent_path: str = ""
    size: int = 0
    block_size: int = 0
    logical_sector_size: int = 0
    physical_sector_size: int = 0

    def has_change(self, other: VhdSettings, field: str) -> bool:
        """Whether ``field`` differs between this and ``other``."""
        return getattr(self, field) != getattr(other, field)


@dataclass(frozen=True)
class Vhd:
    """A virtual hard disk as reported by the host; an empty path means absent."""

    path: str = ""
    vhd_type: VhdType = VhdType.UNKNOWN
    parent_path: str = ""
    size: int = 0
    block_size: int = 0
    logical_sector_size: int = 0
    physical_sector_size: int = 0

    @property
    def exists(self) -> bool:
        return self.path != ""


class VhdClient(Protocol):
    """Operations on virtual hard disks that a host connection provides."""

    def vhd_exists(self, path: str) -> bool: ...

    def create_or_update_vhd(self, settings: VhdSettings) -> None: ...

    def resize_vhd(self, path: str, size: int) -> None: ...

    def get_vhd(self, path: str) -> Vhd: ...

    def delete_vhd(self, path: str) -> None: ...


def _path_extension(path: str) -> str:
    last_dot = path.rfind(".")
    if last_dot < 0 or "/" in path[last_dot:]:
        return ""
    return path[last_dot:]


def suppress_path_diff(old_value: str, new_value: str) -> bool:
    """True when ``old_value`` is ``new_value`` or a differencing variant of it."""
    extension = _path_extension(new_value)
    stem = new_value[: len(new_value) - len(extension)] if extension else new_value
    old_lower = old_value.lower()
    if old_lower.startswith(stem.lower()) and old_lower.endswith(extension.lower()):
        return True
    return old_lower == new_value.lower()


def suppress_parent_path_diff(old_value: str, new_value: str) -> bool:
    """True when the parent paths match, ignoring case."""
    return old_value.lower() == new_value.lower()


def suppress_sized_diff(old_value: Any, new_value: Any) -> bool:
    """True when the new size is unset or zero, or equals the old size."""
    new_text = "" if new_value is None else str(new_value)
    old_text = "" if old_value is None else str(old_value)
    return new_text in ("0", "") or old_text == new_text


_CONFLICTS: dict[str, tuple[str, ...]] = {
    "source": ("source_vm", "parent_path", "source_disk"),
    "source_vm": ("source", "parent_path", "source_disk"),
    "source_disk": ("source", "source_vm", "parent_path"),
    "parent_path": ("source", "source_vm", "source_disk", "size"),
    "size": ("parent_path",),
    "block_size": ("source", "source_vm", "parent_path"),
    "logical_sector_size": ("source", "source_vm", "parent_path"),
    "physical_sector_size": ("source", "source_vm", "parent_path"),
}


def _is_set(settings: VhdSettings, field: str) -> bool:
    value = getattr(settings, field)
    return value not in ("", 0, None)


def validate_vhd_settings(settings: VhdSettings) -> VhdSettings:
    """Check the settings against the attribute rules and return them unchanged."""
    if not settings.path:
        raise ValidationError("path argument is required")
    for field, others in _CONFLICTS.items():
        if not _is_set(settings, field):
            continue
        for other in others:
            if _is_set(settings, other):
                raise ValidationError(f'"{field}": conflicts with {other}')
    _check_size(settings.size)
    _check_sector_size(settings.logical_sector_size)
    _check_sector_size(settings.physical_sector_size)
    return settings


def read_vhd(client: VhdClient, path: str) -> dict[str, Any]:
    """Read a disk and return the resource attributes it determines."""
    vhd = client.get_vhd(path)
    log.info("retrieved vhd: %r", vhd)
    state: dict[str, Any] = {
        "path": vhd.path,
        "exists": vhd.exists,
        "vhd_type": vhd.vhd_type.value,
    }
    if vhd.vhd_type is VhdType.DIFFERENCING:
        state["parent_path"] = vhd.parent_path
    else:
        state.update(
            size=vhd.size,
            block_size=vhd.block_size,
            logical_sector_size=vhd.logical_sector_size,
            physical_sector_size=vhd.physical_sector_size,
        )
    return state


def create_vhd(client: VhdClient, settings: VhdSettings, is_new: bool) -> dict[str, Any]:
    """Create a disk, resize it when a size is given, and read it back."""
    validate_vhd_settings(settings)
    if is_new and client.vhd_exists(settings.path):
        raise ResourceExistsError(settings.path, RESOURCE_TYPE)
    client.create_or_update_vhd(settings)
    if settings.size > 0 and settings.parent_path == "":
        client.resize_vhd(settings.path, settings.size)
    log.info("created hyperv vhd: %s", settings.path)
    return read_vhd(client, settings.path)


def update_vhd(
    client: VhdClient,
    path: str,
    old: VhdSettings,
    new: VhdSettings,
    exists: bool,
) -> dict[str, Any]:
    """Bring the disk at ``path`` from ``old`` to ``new`` settings and read it back."""
    settings = dataclasses.replace(new, path=path)
    recreate = not exists or any(
        old.has_change(new, field)
        for field in ("path", "source", "source_vm", "source_disk", "parent_path")
    )
    if recreate:
        client.create_or_update_vhd(settings)
    if settings.size > 0 and settings.parent_path == "":
        if not exists or old.has_change(new, "size"):
            client.resize_vhd(path, settings.size)
    log.info("updated hyperv vhd: %s", path)
    return read_vhd(client, path)


def delete_vhd(client: VhdClient, path: str) -> None:
    """Remove the disk at ``path``."""
    client.delete_vhd(path)
    log.info("deleted hyperv vhd: %s", path)