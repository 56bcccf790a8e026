"""Placement of local files on the remote host for ISO image resources."""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Protocol

from hypervkit.validators import ResourceExistsError

log = logging.getLogger(__name__)

RESOURCE_TYPE = "remote_iso"

_REMOTE_TEMP = "$env:TEMP"
_SEPARATORS = re.compile(r"[/\\]")


class RemoteFileClient(Protocol):
    """File operations that a host connection provides."""

    def remote_file_exists(self, path: str) -> bool: ...

    def remote_file_upload(self, source_path: str, destination_path: str) -> None: ...

    def remote_file_delete(self, path: str) -> None: ...


@dataclass(frozen=True)
class FileFields:
    """The source, its hash and the remote destination of one uploaded file."""

    source_file_path: str = ""
    source_file_path_hash: str = ""
    destination_file_path: str = ""


def win_path(path: str) -> str:
    """Quote a path that holds spaces and turn forward slashes into backslashes."""
    if not path:
        return path
    if " " in path:
        path = "'" + path.strip("'\"") + "'"
    return path.replace("/", "\\")


def _base_name(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/\\")
    if not stripped:
        return "/"
    return _SEPARATORS.split(stripped)[-1]


def default_destination(source_file_path: str) -> str:
    """Remote path in the host's temp folder named after the source file."""
    joined = posixpath.normpath(f"{_REMOTE_TEMP}/{_base_name(source_file_path)}")
    return win_path(joined)


def _resolve(destination: str, source: str) -> str:
    return destination if destination else default_destination(source)


def _remote_exists(client: RemoteFileClient, path: str) -> bool:
    try:
        return client.remote_file_exists(path)
    except Exception as err:
        raise RuntimeError(f"checking for existing {path}: {err}") from err


def ensure_file_state_create(client: RemoteFileClient, fields: FileFields) -> str:
    """Upload the source file for a new resource and return the remote path used.

    Returns an empty string when neither a source nor a destination is given.
    Raises ResourceExistsError when the remote path is already taken.
    """
    source = fields.source_file_path
    resolved = fields.destination_file_path
    if source and not resolved:
        resolved = default_destination(source)

    if resolved:
        log.info("check if file exists: %r", resolved)
        if _remote_exists(client, resolved):
            raise ResourceExistsError(resolved, RESOURCE_TYPE)
        if source:
            client.remote_file_upload(source, resolved)

    return resolved


def ensure_file_state_update(
    client: RemoteFileClient, old: FileFields, new: FileFields
) -> tuple[str, bool]:
    """Bring the remote file from ``old`` to ``new`` fields.

    Returns the remote path now in use and whether the remote file changed.
    """
    source = new.source_file_path
    destination = new.destination_file_path
    source_changed = old.source_file_path != new.source_file_path
    hash_changed = old.source_file_path_hash != new.source_file_path_hash
    destination_changed = old.destination_file_path != new.destination_file_path

    if source_changed:
        old_source = old.source_file_path
        resolved_old = _resolve(old.destination_file_path, old_source)
        resolved_new = _resolve(destination, source)

        if source == "":
            client.remote_file_delete(resolved_old)
            return resolved_new, True
        if old_source == "" or hash_changed:
            client.remote_file_upload(source, resolved_new)
            return resolved_new, True
    elif source and destination_changed:
        resolved_old = _resolve(old.destination_file_path, source)
        resolved_new = _resolve(destination, source)
        if resolved_old != resolved_new:
            client.remote_file_delete(resolved_old)
            client.remote_file_upload(source, resolved_new)
            return resolved_new, True
    elif source and hash_changed:
        resolved = _resolve(destination, source)
        client.remote_file_upload(source, resolved)
        return resolved, True
    elif source:
        resolved = _resolve(destination, source)
        log.info("check if file exists: %r", resolved)
        if not _remote_exists(client, resolved):
            client.remote_file_upload(source, resolved)
            return resolved, True

    return _resolve(destination, source), False