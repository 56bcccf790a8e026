"""Lifecycle of ISO image resources built or uploaded on a Hyper-V host."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from hypervkit.isofiles import (
    FileFields,
    RemoteFileClient,
    ensure_file_state_create,
    ensure_file_state_update,
)
from hypervkit.validators import ValidationError, allowed_iso_volume_name

log = logging.getLogger(__name__)

_check_volume_name = allowed_iso_volume_name()

_FILE_KINDS = ("iso", "zip", "boot")

_ISO_SOURCE_FIELDS = ("source_iso_file_path", "source_iso_file_path_hash")
_ARCHIVE_SOURCE_FIELDS = (
    "source_zip_file_path",
    "source_zip_file_path_hash",
    "source_boot_file_path",
    "source_boot_file_path_hash",
)

_REBUILD_TRIGGER_FIELDS = (
    "source_iso_file_path",
    "source_iso_file_path_hash",
    "source_zip_file_path",
    "source_zip_file_path_hash",
    "source_boot_file_path",
    "source_boot_file_path_hash",
    "destination_zip_file_path",
    "destination_boot_file_path",
)


class _NamedEnum(enum.Enum):
    @classmethod
    def parse(cls, text: str):
        """Look up a member by its exact name."""
        try:
            return cls(text)
        except ValueError:
            names = ", ".join(member.value for member in cls)
            raise ValidationError(
                f"expected {text} to be one of {names}"
            ) from None

    def __str__(self) -> str:
        return self.value


class IsoMediaType(_NamedEnum):
    """Physical media an ISO image is laid out for."""

    UNKNOWN = "unknown"
    CDROM = "cdrom"
    CDR = "cdr"
    CDRW = "cdrw"
    DVDROM = "dvdrom"
    DVDRAM = "dvdram"
    DVDPLUSR = "dvdplusr"
    DVDPLUSRW = "dvdplusrw"
    DVDPLUSR_DUALLAYER = "dvdplusr_duallayer"
    DVDDASHR = "dvddashr"
    DVDDASHRW = "dvddashrw"
    DVDDASHR_DUALLAYER = "dvddashr_duallayer"
    DISK = "disk"
    DVDPLUSRW_DUALLAYER = "dvdplusrw_duallayer"
    HDDVDROM = "hddvdrom"
    HDDVDR = "hddvdr"
    HDDVDRAM = "hddvdram"
    BDROM = "bdrom"
    BDR = "bdr"
    BDRE = "bdre"


class IsoFileSystemType(_NamedEnum):
    """File systems written into an ISO image."""

    NONE = "none"
    ISO9660 = "iso9660"
    JOLIET = "joliet"
    ISO9660_JOLIET = "iso9660|joliet"
    UDF = "udf"
    JOLIET_UDF = "joliet|udf"
    ISO9660_JOLIET_UDF = "iso9660|joliet|udf"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IsoImageSettings:
    """Desired configuration of an ISO image resource."""

    destination_iso_file_path: str
    source_iso_file_path: str = ""
    source_iso_file_path_hash: str = ""
    source_zip_file_path: str = ""
    source_zip_file_path_hash: str = ""
    source_boot_file_path: str = ""
    source_boot_file_path_hash: str = ""
    destination_zip_file_path: str = ""
    destination_boot_file_path: str = ""
    iso_media_type: IsoMediaType = IsoMediaType.DVDPLUSRW_DUALLAYER
    iso_file_system_type: IsoFileSystemType = IsoFileSystemType.UNKNOWN
    volume_name: str = "UNTITLED"

    def file_fields(self, kind: str) -> FileFields:
        """Source, hash and destination of the ``iso``, ``zip`` or ``boot`` file."""
        if kind not in _FILE_KINDS:
            raise ValueError(f"unknown file kind {kind!r}")
        return FileFields(
            source_file_path=getattr(self, f"source_{kind}_file_path"),
            source_file_path_hash=getattr(self, f"source_{kind}_file_path_hash"),
            destination_file_path=getattr(self, f"destination_{kind}_file_path"),
        )


@dataclass(frozen=True)
class IsoImage:
    """An ISO image as recorded on the host."""

    source_iso_file_path: str = ""
    source_iso_file_path_hash: str = ""
    source_zip_file_path: str = ""
    source_zip_file_path_hash: str = ""
    source_boot_file_path: str = ""
    source_boot_file_path_hash: str = ""
    destination_zip_file_path: str = ""
    destination_boot_file_path: str = ""
    media: IsoMediaType = IsoMediaType.DVDPLUSRW_DUALLAYER
    file_system: IsoFileSystemType = IsoFileSystemType.UNKNOWN
    volume_name: str = "UNTITLED"
    resolve_destination_iso_file_path: str = ""
    resolve_destination_zip_file_path: str = ""
    resolve_destination_boot_file_path: str = ""


class IsoImageClient(RemoteFileClient, Protocol):
    """Operations on ISO images that a host connection provides."""

    def create_or_update_iso_image(
        self,
        settings: IsoImageSettings,
        resolve_destination_iso_file_path: str,
        resolve_destination_zip_file_path: str,
        resolve_destination_boot_file_path: str,
    ) -> None: ...

    def get_iso_image(self, destination_iso_file_path: str) -> IsoImage: ...


def validate_iso_image_settings(settings: IsoImageSettings) -> IsoImageSettings:
    """Check the settings against the attribute rules and return them unchanged."""
    if not settings.destination_iso_file_path:
        raise ValidationError("path argument is required")
    for field in _ISO_SOURCE_FIELDS:
        if not getattr(settings, field):
            continue
        for other in _ARCHIVE_SOURCE_FIELDS:
            if getattr(settings, other):
                raise ValidationError(f'"{field}": conflicts with {other}')
    if not isinstance(settings.iso_media_type, IsoMediaType):
        IsoMediaType.parse(str(settings.iso_media_type))
    if not isinstance(settings.iso_file_system_type, IsoFileSystemType):
        IsoFileSystemType.parse(str(settings.iso_file_system_type))
    _check_volume_name(settings.volume_name)
    return settings


def read_iso_image(
    client: IsoImageClient, destination_iso_file_path: str
) -> dict[str, Any]:
    """Read an image and return the resource attributes it determines."""
    image = client.get_iso_image(destination_iso_file_path)
    log.info("retrieved isoImage: %r", image)
    return {
        "source_iso_file_path": image.source_iso_file_path,
        "source_iso_file_path_hash": image.source_iso_file_path_hash,
        "source_zip_file_path": image.source_zip_file_path,
        "source_zip_file_path_hash": image.source_zip_file_path_hash,
        "source_boot_file_path": image.source_boot_file_path,
        "source_boot_file_path_hash": image.source_boot_file_path_hash,
        "destination_iso_file_path": destination_iso_file_path,
        "destination_zip_file_path": image.destination_zip_file_path,
        "destination_boot_file_path": image.destination_boot_file_path,
        "iso_media_type": image.media.value,
        "iso_file_system_type": image.file_system.value,
        "volume_name": image.volume_name,
        "resolve_destination_iso_file_path": image.resolve_destination_iso_file_path,
        "resolve_destination_zip_file_path": image.resolve_destination_zip_file_path,
        "resolve_destination_boot_file_path": image.resolve_destination_boot_file_path,
    }


def create_iso_image(
    client: IsoImageClient, settings: IsoImageSettings
) -> dict[str, Any]:
    """Upload the source files, build the image and read it back."""
    validate_iso_image_settings(settings)
    resolved = {
        kind: ensure_file_state_create(client, settings.file_fields(kind))
        for kind in _FILE_KINDS
    }
    client.create_or_update_iso_image(
        settings, resolved["iso"], resolved["zip"], resolved["boot"]
    )
    log.info("created remote iso: %s", settings.destination_iso_file_path)
    return read_iso_image(client, settings.destination_iso_file_path)


def _changed(old: IsoImageSettings, new: IsoImageSettings, *fields: str) -> bool:
    return any(getattr(old, field) != getattr(new, field) for field in fields)


def update_iso_image(
    client: IsoImageClient,
    resource_id: str,
    old: IsoImageSettings,
    new: IsoImageSettings,
) -> dict[str, Any]:
    """Bring the image ``resource_id`` from ``old`` to ``new`` settings and read it back."""
    if resource_id != new.destination_iso_file_path:
        raise ValidationError(
            f"cannot update destination_iso_file_path from {resource_id} "
            f"to {new.destination_iso_file_path}"
        )
    validate_iso_image_settings(new)

    resolved: dict[str, str] = {}
    changed: dict[str, bool] = {}
    for kind in _FILE_KINDS:
        resolved[kind], changed[kind] = ensure_file_state_update(
            client, old.file_fields(kind), new.file_fields(kind)
        )

    layout_changed = _changed(
        old, new, "iso_media_type", "iso_file_system_type", "volume_name"
    )
    builds_from_files = bool(new.source_zip_file_path or new.source_boot_file_path)

    recreate = False
    if (not changed["iso"] and (changed["zip"] or changed["boot"])) or (
        builds_from_files and layout_changed
    ):
        client.remote_file_delete(resolved["iso"])
        recreate = True

    if (
        any(changed.values())
        or recreate
        or _changed(old, new, *_REBUILD_TRIGGER_FIELDS)
    ):
        client.create_or_update_iso_image(
            new, resolved["iso"], resolved["zip"], resolved["boot"]
        )

    log.info("updated remote iso: %s", resource_id)
    return read_iso_image(client, resource_id)


def delete_iso_image(client: IsoImageClient, image: IsoImage) -> None:
    """Remove the image, its metadata file and any uploaded zip and boot files."""
    iso_path = image.resolve_destination_iso_file_path
    if iso_path:
        client.remote_file_delete(iso_path)
        client.remote_file_delete(f"{iso_path}.json")
        log.info("deleted remote iso file: %s", iso_path)

    for path in (
        image.resolve_destination_zip_file_path,
        image.resolve_destination_boot_file_path,
    ):
        if path:
            client.remote_file_delete(path)
            log.info("deleted remote file: %s", path)